# app/core/db.py
"""
Database configuration and connection handle.
Handles Tortoise ORM setup, migration configuration, and the bounded
connection handle that routes borrow for the duration of one request.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from tortoise import Tortoise, connections
from tortoise.backends.base.client import BaseDBAsyncClient

from app.config import settings
from app.core.errors import ServiceUnavailable

logger = logging.getLogger("uvicorn.error")


def _pool_bounded_url(url: str, maxsize: int) -> str:
    """Pass the pool ceiling to asyncpg unless the URL already sets one."""
    if url.startswith(("postgres", "asyncpg", "psycopg")) and "maxsize=" not in url:
        sep = "&" if "?" in url else "?"
        return f"{url}{sep}maxsize={maxsize}"
    return url

# Database connection URL (PostgreSQL)
DB_URL = _pool_bounded_url(settings.database_url, settings.db_pool_max)

# Tortoise ORM configuration dictionary
# This configuration is also used by Aerich for database migrations
TORTOISE_ORM = {
    "connections": {"default": DB_URL},
    "apps": {
        "models": {
            "models": [
                "app.models.user",   # User model
                "app.models.todo",   # Todo model
                "aerich.models",     # Required: Let Aerich manage migration tables
            ],
            "default_connection": "default",
        },
    },
    "use_tz": True,
    "timezone": "UTC",
}

async def init_db(generate_schemas: bool = False):
    """
    Initialize Tortoise ORM database connection.

    Args:
        generate_schemas: Create missing tables (CREATE TABLE IF NOT EXISTS).
            Leave off when Aerich migrations manage the schema.
    """
    await Tortoise.init(config=TORTOISE_ORM)
    if generate_schemas:
        await Tortoise.generate_schemas(safe=True)
    logger.info("[db] connected (%s)", connections.get("default").capabilities.dialect)

async def close_db():
    """
    Close all database connections.
    Called during application shutdown after in-flight requests have drained.
    """
    await Tortoise.close_connections()
    logger.info("[db] connections closed")


class Database:
    """
    Process-wide storage handle, created at startup and injected into routes.

    At most ``max_size`` requests hold a connection at once. A request that
    cannot get a slot within ``acquire_timeout`` seconds fails fast with
    ``ServiceUnavailable`` (503, retryable) instead of queueing forever.
    """

    def __init__(self, connection_name: str = "default", max_size: int = 20, acquire_timeout: float = 2.0):
        self.connection_name = connection_name
        self.max_size = max_size
        self.acquire_timeout = acquire_timeout
        self._slots = asyncio.Semaphore(max_size)

    @classmethod
    def from_settings(cls) -> "Database":
        return cls(max_size=settings.db_pool_max, acquire_timeout=settings.db_acquire_timeout)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[BaseDBAsyncClient]:
        """Borrow a slot and yield the Tortoise client, to be passed as ``using_db=``."""
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self.acquire_timeout)
        except asyncio.TimeoutError:
            logger.warning("[db] no connection slot free after %.1fs (max=%d)", self.acquire_timeout, self.max_size)
            raise ServiceUnavailable(
                message="No database connection available, please retry",
                headers={"Retry-After": "1"},
            )
        try:
            yield connections.get(self.connection_name)
        finally:
            self._slots.release()
