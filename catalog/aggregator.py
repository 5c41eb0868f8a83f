"""
Aggregator.

Runs Fetcher -> Deduplicator -> Filter -> Transformer for each requested
kind and concatenates the results, rocks first. The per-kind pipelines are
independent; a rock and a mineral are never duplicates of each other.
"""

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from catalog.connectors.base import BaseStore
from catalog.connectors.cache import MemoryCache
from catalog.deduplication import deduplicate
from catalog.fetcher import fetch_specimens
from catalog.filters import apply_filters
from catalog.transform import transform_specimens
from catalog.types import CatalogQuery, DisplayItem, SpecimenKind

if TYPE_CHECKING:
    from catalog.session import GenerationToken


async def run_kind_pipeline(
    store: BaseStore,
    kind: SpecimenKind,
    query: CatalogQuery,
    token: "GenerationToken | None" = None,
    cache: MemoryCache | None = None,
) -> list[DisplayItem]:
    """
    Run the full pipeline for one kind.

    Raises:
        FetchError: When the store fails
        QuerySuperseded: When ``token`` went stale between stages
    """
    page = await fetch_specimens(store, kind, category=query.category)
    if token is not None:
        token.check()

    unique = deduplicate(page.records)
    matched = apply_filters(unique, search=query.search, filters=query.filters)

    items = await transform_specimens(matched, lookup=store.list_images_for, cache=cache)
    if token is not None:
        token.check()

    logger.debug(
        f"pipeline[{kind.value}]: fetched={len(page.records)} unique={len(unique)} "
        f"matched={len(matched)}"
    )
    return items


async def search_catalog(
    store: BaseStore,
    query: CatalogQuery,
    token: "GenerationToken | None" = None,
    cache: MemoryCache | None = None,
) -> list[DisplayItem]:
    """
    Run every kind the query asks for and concatenate rocks then minerals.

    The kinds run concurrently; if either fails the whole search fails.
    """
    kinds = query.kind.specimen_kinds
    results = await asyncio.gather(
        *(run_kind_pipeline(store, kind, query, token=token, cache=cache) for kind in kinds)
    )

    items: list[DisplayItem] = []
    for kind_items in results:
        items.extend(kind_items)
    return items
