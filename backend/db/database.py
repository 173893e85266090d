from collections.abc import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from core.config import settings


class Base(DeclarativeBase):
    pass


def normalize_database_url(url: str) -> str:
    """Point plain postgres URLs at the asyncpg driver."""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite only enforces FOREIGN KEY clauses when asked to, per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str) -> AsyncEngine:
    url = normalize_database_url(url)
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        engine = create_async_engine(url, echo=settings.database_echo)
        enable_sqlite_foreign_keys(engine)
        return engine

    connect_args = {}
    if make_url(url).get_driver_name() == "asyncpg":
        connect_args["command_timeout"] = settings.db_statement_timeout

    return create_async_engine(
        url,
        echo=settings.database_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = build_engine(settings.database_url)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


# Models register themselves on Base.metadata when imported.
from .branch import Branch, BranchCylinderType  # noqa: E402
from .cylinder import CylinderGroup, CylinderType  # noqa: E402
from .access_code import AccessCode  # noqa: E402
from .inventory_record import InventoryRecord  # noqa: E402
from .users import User  # noqa: E402
