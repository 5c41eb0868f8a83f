"""
Catalog API Routes.

Combined rock and mineral search with facets, and duplicate reports.
Pipeline failures come back as an empty item list plus an error message.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from catalog.aggregator import search_catalog
from catalog.connectors import BaseStore, MemoryCache
from catalog.deduplication import find_duplicate_groups
from catalog.errors import CatalogError
from catalog.fetcher import fetch_specimens
from catalog.types import (
    ALL_CATEGORIES,
    CatalogKind,
    CatalogQuery,
    CatalogResult,
    FilterState,
    SpecimenKind,
    paginate,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def get_store(request: Request) -> BaseStore:
    """The store created at startup."""
    return request.app.state.store


def get_image_cache(request: Request) -> Optional[MemoryCache]:
    return getattr(request.app.state, "image_cache", None)


@router.get("/items")
async def list_items(
    kind: CatalogKind = Query(CatalogKind.ALL, description="rocks, minerals or all"),
    q: str = Query("", max_length=200, description="Free-text search"),
    category: str = Query(ALL_CATEGORIES, description="Limit the fetch to one category"),
    rock_type: list[str] = Query(default=[]),
    mineral_category: list[str] = Query(default=[]),
    color: list[str] = Query(default=[]),
    associated_mineral: list[str] = Query(default=[]),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=1000, description="Omit to return every item"),
    store: BaseStore = Depends(get_store),
    cache: Optional[MemoryCache] = Depends(get_image_cache),
):
    """
    Search the catalog.

    Facet parameters are repeatable; values within one facet are OR-ed and
    facets are AND-ed together.
    """
    query = CatalogQuery(
        kind=kind,
        search=q,
        category=category,
        filters=FilterState(
            rock_type=rock_type,
            mineral_category=mineral_category,
            colors=color,
            associated_minerals=associated_mineral,
        ),
        page=page,
        page_size=page_size,
    )

    try:
        items = await search_catalog(store, query, cache=cache)
    except CatalogError as e:
        logger.error(f"Catalog search failed: {e}")
        return CatalogResult(items=[], error=e.user_message).to_dict()

    pagination = None
    if query.page_size:
        items, pagination = paginate(items, query.page, query.page_size)

    return CatalogResult(items=items, pagination=pagination).to_dict()


@router.get("/duplicates")
async def list_duplicates(
    kind: Literal["rocks", "minerals"] = Query("rocks"),
    store: BaseStore = Depends(get_store),
):
    """Duplicate groups for one kind, with the record each group would keep."""
    specimen_kind = SpecimenKind.ROCK if kind == "rocks" else SpecimenKind.MINERAL

    try:
        page = await fetch_specimens(store, specimen_kind)
    except CatalogError as e:
        logger.error(f"Duplicate report failed: {e}")
        raise HTTPException(status_code=502, detail=e.user_message)

    report = find_duplicate_groups(page.records)
    return {"kind": kind, **report.to_dict()}
