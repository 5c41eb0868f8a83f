"""
Search sessions.

A SearchSession stands in for one catalog view: every new search bumps a
generation counter, and a GenerationToken carried through the pipeline lets
a superseded search stop early. Results that finish after a newer search
started are discarded instead of returned.
"""

import asyncio
from dataclasses import dataclass

from loguru import logger

from catalog.aggregator import search_catalog
from catalog.config import get_settings
from catalog.connectors.base import BaseStore
from catalog.connectors.cache import MemoryCache
from catalog.errors import CatalogError, QuerySuperseded
from catalog.types import CatalogQuery, CatalogResult, paginate


@dataclass(frozen=True)
class GenerationToken:
    """Snapshot of the session generation at the time a search started."""

    session: "SearchSession"
    generation: int

    @property
    def is_current(self) -> bool:
        return self.session.generation == self.generation

    def check(self) -> None:
        """Raise QuerySuperseded if a newer search has started."""
        if not self.is_current:
            raise QuerySuperseded(self.generation, self.session.generation)


class SearchSession:
    """Issues searches against one store and drops stale results."""

    def __init__(
        self,
        store: BaseStore,
        cache: MemoryCache | None = None,
        debounce_seconds: float | None = None,
    ):
        pipeline = get_settings().pipeline
        self.store = store
        self.cache = cache
        self.debounce_seconds = (
            pipeline.search_debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def begin(self) -> GenerationToken:
        """Start a new search, superseding any in flight."""
        self._generation += 1
        return GenerationToken(self, self._generation)

    async def search(self, query: CatalogQuery) -> CatalogResult | None:
        """
        Run a search.

        Returns:
            The result, or None if a newer search started before this one
            finished. Pipeline failures come back as an empty result with
            ``error`` set.
        """
        return await self._run(query, self.begin())

    async def search_debounced(self, query: CatalogQuery) -> CatalogResult | None:
        """Wait for the quiet period, then search unless superseded meanwhile."""
        token = self.begin()
        await asyncio.sleep(self.debounce_seconds)
        if not token.is_current:
            logger.debug(f"search generation {token.generation} dropped during debounce")
            return None
        return await self._run(query, token)

    async def _run(self, query: CatalogQuery, token: GenerationToken) -> CatalogResult | None:
        try:
            items = await search_catalog(self.store, query, token=token, cache=self.cache)
        except QuerySuperseded as e:
            logger.debug(str(e))
            return None
        except CatalogError as e:
            if not token.is_current:
                return None
            logger.error(f"Catalog search failed: {e}")
            return CatalogResult(items=[], error=e.user_message, generation=token.generation)

        if not token.is_current:
            logger.debug(f"search generation {token.generation} finished stale, discarding")
            return None

        pagination = None
        if query.page_size:
            items, pagination = paginate(items, query.page, query.page_size)

        return CatalogResult(items=items, pagination=pagination, generation=token.generation)
