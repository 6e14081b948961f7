# inventory_api/core/db.py

import ssl
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from fastapi import Depends, Request
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import AsyncAdaptedQueuePool

from inventory_api.core.config import (
    DATABASE_URL,
    DB_POOL_SIZE,
    DB_MAX_OVERFLOW,
    DB_POOL_TIMEOUT,
    DB_SSL_VERIFY,
    DB_ECHO_POOL,
    APP_ENV,
)
from inventory_api.utils.logger import get_logger

logger = get_logger(__name__)

# =====================================================
# BASE
# =====================================================
Base = declarative_base()

# Execution option read by the SQLite "begin" hook
SQLITE_BEGIN_MODE = "sqlite_begin_mode"


def _connection_args(
    backend: str, pool_size: int, max_overflow: int, pool_timeout: int
) -> tuple[dict, dict]:
    connect_args: dict = {}
    pool_args: dict = {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": pool_timeout,
    }

    if backend == "postgresql":
        ssl_ctx = ssl.create_default_context()

        if not DB_SSL_VERIFY:
            ssl_ctx.check_hostname = False
            ssl_ctx.verify_mode = ssl.CERT_NONE

        connect_args = {
            "ssl": ssl_ctx,
            # Disable prepared statements (asyncpg + pgbouncer stability)
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
        }
        pool_args["pool_pre_ping"] = True

    elif backend == "sqlite":
        connect_args = {
            "check_same_thread": False,
            # busy timeout: writers wait on the database lock this long
            "timeout": pool_timeout,
        }
        pool_args["poolclass"] = AsyncAdaptedQueuePool

    return connect_args, pool_args


def _install_sqlite_hooks(engine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def configure_sqlite_connection(dbapi_connection, _):
        # Take BEGIN away from the driver so the "begin" hook decides the mode
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def begin_sqlite_transaction(conn):
        mode = conn.get_execution_options().get(SQLITE_BEGIN_MODE)
        conn.exec_driver_sql(f"BEGIN {mode}" if mode else "BEGIN")


# =====================================================
# DATABASE HANDLE
# =====================================================
class Database:
    """Owns the async engine (connection pool) and the session factory.

    Built once by the process entry point (or a test fixture), stored on
    ``app.state.database`` and injected wherever a session is needed.
    """

    def __init__(
        self,
        url: str = DATABASE_URL,
        *,
        pool_size: int = DB_POOL_SIZE,
        max_overflow: int = DB_MAX_OVERFLOW,
        pool_timeout: int = DB_POOL_TIMEOUT,
    ):
        self.url = make_url(url)
        self.backend = self.url.get_backend_name()

        connect_args, pool_args = _connection_args(
            self.backend, pool_size, max_overflow, pool_timeout
        )

        self.engine = create_async_engine(
            url,
            echo=False,                # NEVER enable in prod
            echo_pool=DB_ECHO_POOL,    # debugging only
            connect_args=connect_args,
            **pool_args,
        )

        if self.is_sqlite:
            _install_sqlite_hooks(self.engine)

        self.session_factory = sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"

    def session(self) -> AsyncSession:
        return self.session_factory()

    @asynccontextmanager
    async def write_transaction(self) -> AsyncIterator[AsyncSession]:
        """Session bound to a single transaction, committed on clean exit.

        On SQLite the transaction opens with BEGIN IMMEDIATE so concurrent
        writers queue on the database lock instead of failing on upgrade.
        """
        async with self.session_factory() as session:
            async with session.begin():
                if self.is_sqlite:
                    await session.connection(
                        execution_options={SQLITE_BEGIN_MODE: "IMMEDIATE"}
                    )
                yield session

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database pool disposed", extra={"backend": self.backend})


# =====================================================
# DEPENDENCIES
# =====================================================
def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(
    database: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


# =====================================================
# MODEL IMPORT
# =====================================================
import inventory_api.models  # noqa


# =====================================================
# DEV ONLY: AUTO CREATE TABLES
# =====================================================
async def init_models(database: Database):
    if APP_ENV != "development":
        raise RuntimeError("init_models() is forbidden outside development")

    await database.create_all()
