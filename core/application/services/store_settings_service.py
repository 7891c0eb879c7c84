"""
Store settings service.

Admin-editable key/value settings (email toggles, thresholds) read through
an in-process TTL cache.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.data.uow import create_uow
from core.infrastructure.cache import TTLCache


logger = logging.getLogger(__name__)

_CACHE_KEY = "store_settings"
_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class StoreSettingsService:
    """Cached view of the store_settings table."""

    def __init__(self, session_factory: async_sessionmaker, cache: Optional[TTLCache] = None):
        self._session_factory = session_factory
        self.cache = cache or TTLCache(ttl_seconds=300)

    async def get_all(self) -> Dict[str, str]:
        """
        All settings, from the cache when fresh.

        A failed read serves the last values that were loaded (empty if none).
        """
        cached = self.cache.get(_CACHE_KEY)
        if cached is not None:
            return cached

        try:
            async with create_uow(self._session_factory) as uow:
                values = await uow.store_settings.load_all()
        except SQLAlchemyError as e:
            logger.warning(f"⚠️ Could not load store settings, using cached values: {e}")
            return self.cache.get_stale(_CACHE_KEY, {})

        self.cache.set(_CACHE_KEY, values)
        return values

    async def get_setting(self, key: str) -> Optional[str]:
        return (await self.get_all()).get(key)

    async def get_number_setting(self, key: str, default: Decimal) -> Decimal:
        raw = await self.get_setting(key)
        if raw is None:
            return default
        try:
            return Decimal(str(raw).strip())
        except InvalidOperation:
            logger.warning(f"Store setting {key}={raw!r} is not a number; using {default}")
            return default

    async def is_enabled(self, key: str, default: bool = True) -> bool:
        raw = await self.get_setting(key)
        if raw is None:
            return default
        value = str(raw).strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        return default

    def invalidate(self) -> None:
        self.cache.invalidate(_CACHE_KEY)
