"""Config store — key/value settings with a per-instance read cache."""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy import delete, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from printshop.models.setting import Setting
from printshop.pricing.cache import SettingsCache

logger = structlog.get_logger()


class ConfigStore:
    """Reads and writes rows of the ``settings`` table.

    Reads are memoized for the lifetime of the store (one request). Writes
    commit immediately and drop the written key from the memo; a failed
    write is rolled back, logged and reported as ``False``.
    """

    def __init__(self, db: AsyncSession, cache: Optional[SettingsCache] = None):
        self.db = db
        self.cache = cache if cache is not None else SettingsCache()

    async def get(self, key: str) -> Optional[str]:
        """Raw stored value, or None when the key is absent."""
        if key in self.cache:
            return self.cache.get(key)
        result = await self.db.execute(
            select(Setting.setting_value).where(Setting.setting_key == key)
        )
        value = result.scalar_one_or_none()
        self.cache.put(key, value)
        return value

    async def get_json(self, key: str, default: Any = None) -> Any:
        raw = await self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("setting_json_invalid", key=key)
            return default

    async def get_by_prefix(self, prefix: str) -> dict[str, str]:
        """All rows whose key starts with ``prefix``, in one query."""
        result = await self.db.execute(
            select(Setting.setting_key, Setting.setting_value)
            .where(Setting.setting_key.startswith(prefix, autoescape=True))
            .order_by(Setting.setting_key)
        )
        return {key: value for key, value in result.all()}

    async def set(self, key: str, value: str, setting_type: str = "string") -> bool:
        try:
            result = await self.db.execute(select(Setting).where(Setting.setting_key == key))
            row = result.scalar_one_or_none()
            if row is None:
                self.db.add(
                    Setting(setting_key=key, setting_value=value, setting_type=setting_type)
                )
            else:
                row.setting_value = value
                row.setting_type = setting_type
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("setting_write_failed", key=key, error=str(e))
            return False

        self.cache.clear(key)
        logger.debug("setting_saved", key=key, type=setting_type)
        return True

    async def set_json(self, key: str, value: Any) -> bool:
        return await self.set(key, json.dumps(value, ensure_ascii=False), setting_type="json")

    async def delete(self, keys: Iterable[str]) -> int:
        """Delete rows by key. Returns the number removed (0 on failure)."""
        keys = list(keys)
        if not keys:
            return 0
        try:
            result = await self.db.execute(delete(Setting).where(Setting.setting_key.in_(keys)))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("setting_delete_failed", keys=keys, error=str(e))
            return 0

        for key in keys:
            self.cache.clear(key)
        return result.rowcount or 0

    async def table_exists(self) -> bool:
        return await self.db.run_sync(
            lambda session: inspect(session.connection()).has_table(Setting.__tablename__)
        )
