from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from taskboard.core.config import settings
from taskboard.core.logging import get_logger

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """
    Create the async engine for `url`.

    SQLite connections get a bounded busy timeout and enforced foreign keys.
    """
    connect_args = kwargs.pop("connect_args", {})
    is_sqlite = make_url(url).get_backend_name() == "sqlite"
    if is_sqlite:
        connect_args.setdefault("timeout", settings.DB_TIMEOUT_SECONDS)
    else:
        kwargs.setdefault("pool_pre_ping", True)

    engine = create_async_engine(url, future=True, echo=False, connect_args=connect_args, **kwargs)

    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


logger.info(f"Using database backend: {make_url(settings.DATABASE_URL).get_backend_name()}")
engine_internal = build_engine(settings.DATABASE_URL)
SessionAsync = build_session_factory(engine_internal)


async def init_db(engine: AsyncEngine = None):
    """Create all tables that do not exist yet."""
    from taskboard.db.base import Base

    async with (engine or engine_internal).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
