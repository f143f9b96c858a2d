"""
Settings Provider - read access to the site_settings key/value store.

Gateways never read site_settings directly; they receive a provider so the
same code runs against the database or against fixed credentials.
"""

import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.site_setting import SiteSetting

logger = logging.getLogger(__name__)


def normalize_setting_value(value: Any) -> Any:
    """
    Decode values the admin panel stored as JSON strings.

    '"abc"' -> 'abc', '{"a": 1}' -> {'a': 1}, 'true' -> True.
    Anything that fails to parse is returned unchanged.
    """
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lower() in ("true", "false"):
            return stripped.lower() == "true"
        if stripped.startswith('"') or stripped.startswith("{"):
            try:
                return json.loads(stripped)
            except ValueError:
                return value
    return value


@runtime_checkable
class SettingsProvider(Protocol):
    """Read-only view of the configuration store."""

    async def get_prefixed(self, prefix: str, keys: Iterable[str]) -> Dict[str, Any]:
        """
        Return {key: value} for `prefix + key` rows that exist.
        Keys are returned without the prefix.
        """
        ...


class SiteSettingsProvider:
    """Provider backed by the site_settings table. Reads fresh on every call."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_prefixed(self, prefix: str, keys: Iterable[str]) -> Dict[str, Any]:
        full_keys = [f"{prefix}{key}" for key in keys]

        result = await self.db.execute(
            select(SiteSetting).where(SiteSetting.key.in_(full_keys))
        )

        config: Dict[str, Any] = {}
        for setting in result.scalars().all():
            config[setting.key[len(prefix):]] = normalize_setting_value(setting.value)

        logger.debug(f"Loaded {len(config)} settings with prefix {prefix}")
        return config


class StaticSettingsProvider:
    """Provider over a fixed mapping of full keys, e.g. {'bkash_app_key': '...'}."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self.values = dict(values or {})

    async def get_prefixed(self, prefix: str, keys: Iterable[str]) -> Dict[str, Any]:
        return {
            key: normalize_setting_value(self.values[f"{prefix}{key}"])
            for key in keys
            if f"{prefix}{key}" in self.values
        }
