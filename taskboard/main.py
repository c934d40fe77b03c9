from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from taskboard.api.endpoints import auth, teams, projects, tasks, comments
from taskboard.core.config import settings
from taskboard.core.exceptions import TaskBoardError, InternalError, UnavailableError
from taskboard.core.logging import capture_error, get_logger, init_sentry, setup_logging
from taskboard.db.session import init_db
from taskboard.helpers.getters import isDebugMode, isTestMode
from taskboard.middleware.logging import RequestLoggingMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not isTestMode():
        await init_db()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started (mode={settings.MODE})")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="""
## Authentication

Register with `POST /api/auth/register` or log in with `POST /api/auth/login`,
then send the returned token as `Authorization: Bearer <token>`.
The **Authorize** button uses `POST /api/auth/token` (email in the `username` field).

## Teams

- Creating a team makes you its **owner** and issues a 6-character invite code.
- Anyone can join with the code (`POST /api/teams/join-by-code`) as a **member**.
- Owners and admins can add users by email or id.

## Board

Projects belong to a team; tasks belong to a project and move between the
status columns listed by `GET /api/tasks/statuses`.
    """,
    version=settings.APP_VERSION,
    debug=isDebugMode(),
    lifespan=lifespan,
)

# Initialize logging and error tracking
setup_logging()
init_sentry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    RequestLoggingMiddleware,
    enabled=settings.REQUEST_LOGGING_ENABLED,
    slow_request_ms=settings.SLOW_REQUEST_MS,
)


# ==================== Error handlers ====================

@app.exception_handler(TaskBoardError)
async def taskboard_error_handler(request: Request, exc: TaskBoardError):
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Missing or malformed fields are reported as 400 across the API
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": errors},
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    capture_error(exc, tags={"path": request.url.path})
    error = UnavailableError() if isinstance(exc, OperationalError) else InternalError()
    return JSONResponse(status_code=error.status_code, content={"detail": error.message})


prefix = settings.API_PREFIX
app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["auth"])
app.include_router(teams.router, prefix=f"{prefix}/teams", tags=["teams"])
app.include_router(projects.router, prefix=f"{prefix}/projects", tags=["projects"])
app.include_router(tasks.router, prefix=f"{prefix}/tasks", tags=["tasks"])
app.include_router(comments.router, prefix=f"{prefix}/comments", tags=["comments"])


@app.get("/")
def root():
    return {"message": f"{settings.APP_NAME}. See /docs for the OpenAPI documentation."}


@app.get("/health")
def health():
    return {"status": "ok"}
