"""
Store connectors for the catalog pipeline.

Usage:
    from catalog.connectors import create_store

    async with create_store() as store:
        page = await store.list_specimens(SpecimenKind.ROCK)
"""

from pathlib import Path

from loguru import logger

from catalog.config import Settings, get_settings
from catalog.connectors.base import BaseStore
from catalog.connectors.cache import MemoryCache
from catalog.connectors.memory import InMemoryStore
from catalog.connectors.supabase import SupabaseStore


def create_store(settings: Settings | None = None) -> BaseStore:
    """
    Build the store the settings point at.

    The hosted Supabase store when SUPABASE_URL and SUPABASE_ANON_KEY are set,
    otherwise the static snapshot at API_STATIC_CATALOG_PATH, otherwise an
    empty in-memory store.
    """
    settings = settings or get_settings()

    if settings.store.configured:
        return SupabaseStore(settings.store)

    snapshot: Path | None = settings.api.static_catalog_path
    if snapshot and Path(snapshot).exists():
        return InMemoryStore.from_json(snapshot)

    logger.warning("No catalog store configured; serving an empty catalog")
    return InMemoryStore()


__all__ = [
    "BaseStore",
    "InMemoryStore",
    "MemoryCache",
    "SupabaseStore",
    "create_store",
]
