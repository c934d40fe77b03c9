"""
    Authentication Endpoints

    - /register: Creates a user and returns an access token.
    - /login: Authenticates with a JSON body and returns an access token.
    - /token: OAuth2 password flow, used by the interactive docs.
    - /me: Returns the current user.
    - /logout: Revokes the current token until it would have expired.

    Tokens are HS256 JWTs; revocation is tracked in Redis by token id (jti).
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from taskboard.api.dependencies import get_current_user, get_db, get_redis, get_token_claims
from taskboard.core.exceptions import ConflictError, UnauthorizedError
from taskboard.core.logging import get_logger
from taskboard.core.security import (
    create_access_token,
    get_password_hash,
    revocation_key,
    verify_password,
)
from taskboard.models.user import User
from taskboard.schemas.user import Login, OAuth2Token, Token, UserCreate, UserOut
from taskboard.services.common import commit_or_conflict

router = APIRouter()
logger = get_logger(__name__)


async def _authenticate(db: AsyncSession, email: str, password: str) -> User:
    result = await db.execute(select(User).filter(User.email == email.strip().lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.password):
        raise UnauthorizedError("Invalid email or password")
    return user


@router.post("/register", response_model=Token)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user. The email must not be in use."""
    email = user.email.strip().lower()
    result = await db.execute(select(User).filter(User.email == email))
    if result.scalar_one_or_none():
        raise ConflictError("Email already registered")

    new_user = User(name=user.name.strip(), email=email, password=get_password_hash(user.password))
    db.add(new_user)
    await commit_or_conflict(db, "Email already registered")

    logger.info(f"User {new_user.id} registered")
    return {"token": create_access_token(data={"sub": str(new_user.id)}), "token_type": "bearer"}


@router.post("/login", response_model=Token)
async def login(login_data: Login, db: AsyncSession = Depends(get_db)):
    """Authenticate with a JSON body."""
    user = await _authenticate(db, login_data.email, login_data.password)
    return {"token": create_access_token(data={"sub": str(user.id)}), "token_type": "bearer"}


@router.post("/token", response_model=OAuth2Token)
async def oauth2_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
):
    """
    Standard OAuth2 endpoint used by the docs "Authorize" button.

    The OAuth2 `username` field carries the user's email.
    """
    user = await _authenticate(db, form_data.username, form_data.password)
    return {"access_token": create_access_token(data={"sub": str(user.id)}), "token_type": "bearer"}


@router.get("/me", response_model=UserOut)
async def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/logout")
async def logout(
    claims: dict = Depends(get_token_claims),
    redis: Redis = Depends(get_redis),
):
    """Revoke the presented token for the rest of its lifetime."""
    ttl = int(claims["exp"]) - int(datetime.now(timezone.utc).timestamp())
    if ttl > 0:
        await redis.setex(revocation_key(claims["jti"]), ttl, "revoked")
    return {"message": "Logout successful"}
