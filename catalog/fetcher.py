"""
Fetcher stage.

Retrieves every specimen of a kind in one large page. Deduplication and
filtering need the full set, so this intentionally does not stream.
"""

from loguru import logger

from catalog.config import get_settings
from catalog.connectors.base import BaseStore
from catalog.errors import FetchError, StoreError
from catalog.types import ALL_CATEGORIES, SpecimenKind, SpecimenPage


async def fetch_specimens(
    store: BaseStore,
    kind: SpecimenKind,
    category: str = ALL_CATEGORIES,
    page_size: int | None = None,
) -> SpecimenPage:
    """
    Fetch all specimens of ``kind`` (optionally limited to one category).

    Args:
        store: Backing store
        kind: Rock or mineral
        category: Category name or ``"ALL"``
        page_size: Page size requested from the store (default from settings)

    Returns:
        SpecimenPage with the raw records and the store's pagination

    Raises:
        FetchError: When the store fails; the store error is chained
    """
    kind = SpecimenKind(kind)
    page_size = page_size or get_settings().pipeline.fetch_page_size

    try:
        page = await store.list_specimens(kind, category=category, page=1, page_size=page_size)
    except StoreError as e:
        logger.error(f"Error fetching {kind.plural} (category={category}): {e}")
        raise FetchError(f"Could not fetch {kind.plural}: {e}", kind=kind.value) from e

    if page.pagination.total > len(page.records):
        logger.warning(
            f"Store holds {page.pagination.total} {kind.plural} but only "
            f"{len(page.records)} fit in one page of {page_size}"
        )

    logger.info(f"Fetched {len(page.records)} {kind.plural} from {store.store_id or 'store'}")
    return page
