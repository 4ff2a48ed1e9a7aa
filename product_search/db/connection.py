"""
Database Connection Pool
========================

One process-wide SQLAlchemy async engine (asyncpg driver) shared by all
searches. A search borrows exactly one pooled connection for its whole
lifetime through ``DatabaseManager.connection()``.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from product_search.config.settings import Settings, get_settings
from product_search.utils.errors import DatabaseError
from product_search.utils.logger import get_logger

logger = get_logger(__name__)

PGVECTOR_VERSION_SQL = text("select extversion from pg_extension where extname = 'vector'")


def engine_options(settings: Settings) -> dict[str, Any]:
    """
    Pool and per-connection options for the search engine.

    Every new asyncpg connection starts with JIT disabled and the
    configured statement timeout.
    """
    server_settings = {"jit": "off"}
    if settings.db_statement_timeout_ms:
        server_settings["statement_timeout"] = str(settings.db_statement_timeout_ms)

    return {
        "echo": False,
        "poolclass": AsyncAdaptedQueuePool,
        "pool_size": settings.db_pool_min,
        "max_overflow": max(settings.db_pool_max - settings.db_pool_min, 0),
        "pool_recycle": 3600,
        "pool_pre_ping": True,
        "connect_args": {"server_settings": server_settings},
    }


class DatabaseManager:
    """
    Owner of the shared async engine.

    Usage:
        await DatabaseManager.initialize(settings)
        async with DatabaseManager.connection() as conn:
            await conn.execute(text("select 1"))
        await DatabaseManager.close()
    """

    _instance: "DatabaseManager | None" = None
    _engine: AsyncEngine | None = None

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    async def initialize(cls, settings: Settings | None = None) -> "DatabaseManager":
        """
        Create the engine if it does not exist yet.

        Raises:
            DatabaseError: If the engine cannot be created (bad DSN, driver)
        """
        instance = cls()
        if instance._engine is not None:
            return instance

        settings = settings or get_settings()

        try:
            instance._engine = create_async_engine(
                settings.database_url, **engine_options(settings)
            )
        except Exception as e:
            logger.error("Failed to create database engine", error=str(e))
            raise DatabaseError(
                message="Database initialization failed",
                details={"error": str(e)},
            ) from e

        logger.info(
            "Database engine created",
            pool_min=settings.db_pool_min,
            pool_max=settings.db_pool_max,
            statement_timeout_ms=settings.db_statement_timeout_ms,
        )
        return instance

    @classmethod
    async def close(cls) -> None:
        """Dispose of the engine and every pooled connection."""
        instance = cls._instance
        if instance is None or instance._engine is None:
            return

        try:
            await instance._engine.dispose()
        except Exception as e:
            logger.error("Error disposing database engine", error=str(e))
            raise DatabaseError(
                message="Failed to close database connection",
                details={"error": str(e)},
            ) from e
        finally:
            instance._engine = None
            cls._instance = None

        logger.info("Database engine disposed")

    @classmethod
    def get_engine(cls) -> AsyncEngine:
        """
        Raises:
            DatabaseError: If ``initialize`` has not been called
        """
        instance = cls._instance
        if instance is None or instance._engine is None:
            raise DatabaseError(
                message="Database not initialized",
                details={"hint": "Call DatabaseManager.initialize() first"},
            )
        return instance._engine

    @classmethod
    @asynccontextmanager
    async def connection(cls) -> AsyncGenerator[AsyncConnection, None]:
        """
        Borrow one pooled connection inside a transaction.

        Statements on the yielded connection share the physical connection
        and the transaction, so ``set_config(..., true)`` reaches the
        statements that follow and is gone once the connection returns to
        the pool.
        """
        async with cls.get_engine().begin() as conn:
            yield conn

    @classmethod
    async def health_check(cls) -> dict[str, Any]:
        """
        Round-trip latency and pgvector availability.

        Returns:
            ``{"status": "healthy", "latency_ms": 1.8, "pgvector": "0.7.0"}``
            or a status of ``not_initialized`` / ``unhealthy`` with an error
        """
        instance = cls._instance
        if instance is None or instance._engine is None:
            return {"status": "not_initialized", "error": "Database not initialized"}

        start = time.perf_counter()
        try:
            async with instance._engine.connect() as conn:
                version = (await conn.execute(PGVECTOR_VERSION_SQL)).scalar()
        except Exception as e:
            return {"status": "unhealthy", "error": str(e)}

        status: dict[str, Any] = {
            "status": "healthy",
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            "pgvector": version,
        }
        if version is None:
            status["status"] = "unhealthy"
            status["error"] = "pgvector extension is not installed"
        return status


async def init_database(settings: Settings | None = None) -> DatabaseManager:
    return await DatabaseManager.initialize(settings)


async def close_database() -> None:
    await DatabaseManager.close()


async def health_check() -> dict[str, Any]:
    return await DatabaseManager.health_check()
