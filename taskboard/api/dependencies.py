from typing import Dict

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from taskboard.db.session import SessionAsync
from taskboard.models.user import User
from taskboard.core.config import settings
from taskboard.core.exceptions import UnauthorizedError
from taskboard.core.security import decode_access_token, revocation_key

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/token",
    description="Authentication by email and password"
)


async def get_db():
    async with SessionAsync() as session:
        yield session


async def get_redis():
    redis = aioredis.from_url(settings.REDIS_URL)
    try:
        yield redis
    finally:
        await redis.aclose()


async def get_token_claims(
        token: str = Depends(oauth2_scheme),
        redis: aioredis.Redis = Depends(get_redis),
) -> Dict:
    """
    Decode the bearer token and reject revoked ones.

    Raises:
        UnauthorizedError: token invalid, expired, malformed or revoked
    """
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise UnauthorizedError("Invalid credentials")

    if payload.get("sub") is None or payload.get("jti") is None:
        raise UnauthorizedError("Invalid credentials")

    if await redis.exists(revocation_key(payload["jti"])):
        raise UnauthorizedError("Invalid credentials")

    return payload


async def get_current_user(
        claims: Dict = Depends(get_token_claims),
        db: AsyncSession = Depends(get_db),
) -> User:
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid credentials")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise UnauthorizedError("Invalid credentials")
    return user
