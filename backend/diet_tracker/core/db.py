import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator

from fastapi import Depends, Request
from sqlalchemy import DateTime, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql.expression import FunctionElement

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class utcnow(FunctionElement):
    """Current time as naive UTC, for ``TIMESTAMP WITHOUT TIME ZONE`` defaults.

    Postgres ``now()`` lands in the session's local zone; SQLite's
    ``CURRENT_TIMESTAMP`` is already UTC.
    """

    type = DateTime()
    inherit_cache = True


@compiles(utcnow)
def _utcnow_default(element, compiler, **kw):
    return "CURRENT_TIMESTAMP"


@compiles(utcnow, "postgresql")
def _utcnow_postgresql(element, compiler, **kw):
    return "TIMEZONE('utc', CURRENT_TIMESTAMP)"


def safe_url(url: str | URL) -> str:
    """Host/database part of a connection URL, without credentials."""
    raw = url.render_as_string(hide_password=True) if isinstance(url, URL) else str(url)
    return raw.split("@")[-1] if "@" in raw else raw.split("://")[-1]


def normalize_database_url(url: str) -> tuple[URL, dict[str, Any]]:
    """Pick the asyncpg driver for Postgres URLs and move libpq-only query args out.

    Neon hands out ``postgresql://...?sslmode=require&channel_binding=require``;
    asyncpg accepts neither keyword, so ``sslmode`` becomes ``connect_args["ssl"]``
    and ``channel_binding`` is dropped.
    """
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    u = make_url(url)
    connect_args: dict[str, Any] = {}
    if u.drivername != "postgresql+asyncpg":
        return u, connect_args

    q = dict(u.query)
    if "sslmode" in q:
        mode = q.pop("sslmode")
        if mode in ("require", "verify-full"):
            connect_args["ssl"] = "require"
        elif mode == "disable":
            connect_args["ssl"] = False
    q.pop("channel_binding", None)

    return u.set(query=q), connect_args


class Database:
    """Process-wide database handle: one engine, one session factory.

    Built once (see ``create_app``) and handed to request handlers through
    ``get_db_session``. The engine connects lazily, so constructing it never
    touches the network.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        u, connect_args = normalize_database_url(url)
        logger.info("Database configured: %s", safe_url(u))
        self.url = u
        self.engine: AsyncEngine = create_async_engine(
            u, connect_args=connect_args, echo=echo, pool_pre_ping=True
        )
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    async def table_exists(self, table_name: str) -> bool:
        # Raises if the table (or the database) is unreachable.
        async with self.engine.connect() as conn:
            await conn.execute(text(f"SELECT 1 FROM {table_name} LIMIT 1"))
        return True

    async def probe(self, table_name: str) -> bool:
        try:
            await self.table_exists(table_name)
        except Exception as exc:
            logger.warning("Database connection failed: %s", exc)
            return False
        logger.info("Database connection successful")
        return True

    async def check_health(self) -> dict[str, Any]:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT CURRENT_TIMESTAMP"))
                row = result.fetchone()
        except Exception as exc:
            logger.error("DB Health Check Failed: %s", exc)
            return {"ok": False, "error": str(exc)}
        return {
            "ok": True,
            "dbTime": str(row[0]) if row else None,
            "driver": self.engine.driver,
        }

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db_session(database: Database = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session
