from __future__ import annotations

from pydantic import Field

from core.settings.base import StorefrontBaseSettings


class DatabaseSettings(StorefrontBaseSettings):
    """
    Database connection settings.
    SQLite (aiosqlite) for development, PostgreSQL (asyncpg) in production.
    """

    url: str = Field(default="sqlite+aiosqlite:///./storefront.db", alias="DB_URL")
    echo: bool = Field(default=False, alias="DB_ECHO")
    pool_size: int = Field(default=10, alias="DB_POOL_SIZE")
    max_overflow: int = Field(default=20, alias="DB_MAX_OVERFLOW")
    pool_recycle: int = Field(default=3600, alias="DB_POOL_RECYCLE")
    create_tables: bool = Field(default=True, alias="DB_CREATE_TABLES")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")
