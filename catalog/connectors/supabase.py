"""
Supabase (PostgREST) store.

Reads the ``rocks`` and ``minerals`` tables and the ``rock_images`` gallery
table through the project's REST endpoint.

API: https://postgrest.org/en/stable/references/api/tables_views.html
"""

import re
from typing import Any

import httpx
from loguru import logger

from catalog.config import StoreSettings, get_settings
from catalog.connectors.base import BaseStore
from catalog.connectors.rest import RestProtocol
from catalog.errors import ShapeMismatchError
from catalog.types import ALL_CATEGORIES, Pagination, Specimen, SpecimenKind, SpecimenPage

# "0-9/123", "*/0" or "0-9/*"
_CONTENT_RANGE = re.compile(r"^\s*(?:\d+-\d+|\*)/(\d+|\*)\s*$")


def parse_content_range(header: str | None) -> int | None:
    """Extract the total row count from a PostgREST Content-Range header."""
    if not header:
        return None
    match = _CONTENT_RANGE.match(header)
    if not match or match.group(1) == "*":
        return None
    return int(match.group(1))


class SupabaseStore(BaseStore):
    """Specimen store backed by a Supabase project."""

    store_id = "supabase"

    def __init__(
        self,
        store_settings: StoreSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        image_limit: int | None = None,
    ):
        pipeline = get_settings().pipeline
        self.settings = store_settings or get_settings().store
        self.image_limit = image_limit if image_limit is not None else pipeline.image_lookup_limit

        if not self.settings.url:
            raise ValueError("SUPABASE_URL must be set to use the hosted store")

        self.rest = RestProtocol(
            base_url=self.settings.rest_url,
            headers=self._auth_headers(),
            timeout=timeout if timeout is not None else pipeline.http_timeout,
            max_retries=max_retries if max_retries is not None else pipeline.http_max_retries,
            retry_delay=retry_delay if retry_delay is not None else pipeline.http_retry_delay,
            http_client=http_client,
        )

        logger.info(f"Initialized Supabase store for {self.settings.url}")

    def _auth_headers(self) -> dict[str, str]:
        key = self.settings.anon_key
        if not key:
            return {}
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    async def aclose(self) -> None:
        await self.rest.aclose()

    def _table_for(self, kind: SpecimenKind) -> str:
        if kind is SpecimenKind.ROCK:
            return self.settings.rocks_table
        return self.settings.minerals_table

    def _gallery_for(self, kind: SpecimenKind) -> tuple[str, str] | None:
        if kind is SpecimenKind.ROCK:
            return self.settings.rock_images_table, self.settings.rock_images_fk
        if self.settings.mineral_images_table:
            return self.settings.mineral_images_table, self.settings.mineral_images_fk
        return None

    async def list_specimens(
        self,
        kind: SpecimenKind,
        category: str = ALL_CATEGORIES,
        page: int = 1,
        page_size: int = 1000,
    ) -> SpecimenPage:
        kind = SpecimenKind(kind)
        page = max(1, int(page))
        page_size = max(1, int(page_size))

        params: dict[str, Any] = {
            "select": "*",
            "order": f"{kind.name_field}.asc",
            "offset": (page - 1) * page_size,
            "limit": page_size,
        }
        if category and category.strip() and category != ALL_CATEGORIES:
            params["category"] = f"eq.{category.strip()}"

        response = await self.rest.get_raw(
            self._table_for(kind),
            params=params,
            headers={"Prefer": "count=exact"},
        )
        rows = self._json_list(response)

        total = parse_content_range(response.headers.get("Content-Range"))
        if total is None:
            total = (page - 1) * page_size + len(rows)

        records = [Specimen.from_record(kind, row) for row in rows]
        logger.debug(f"Supabase returned {len(records)} {kind.plural} (total {total})")
        return SpecimenPage(
            records=records,
            pagination=Pagination.from_total(total, page, page_size),
        )

    async def list_images_for(
        self,
        specimen_id: str,
        kind: SpecimenKind = SpecimenKind.ROCK,
    ) -> list[dict[str, Any]]:
        if not specimen_id or not str(specimen_id).strip():
            return []

        gallery = self._gallery_for(SpecimenKind(kind))
        if gallery is None:
            return []
        table, fk = gallery

        response = await self.rest.get_raw(
            table,
            params={
                "select": "*",
                fk: f"eq.{specimen_id}",
                "order": "display_order.asc",
                "limit": self.image_limit,
            },
        )
        rows = self._json_list(response)
        return [row for row in rows if row.get("image_url")]

    @staticmethod
    def _json_list(response: httpx.Response) -> list[dict[str, Any]]:
        """Parse a response body that must be a JSON array of objects."""
        try:
            payload = response.json()
        except ValueError as e:
            raise ShapeMismatchError(f"Non-JSON response from {response.request.url}") from e

        if not isinstance(payload, list):
            raise ShapeMismatchError(
                f"Expected a list from {response.request.url}, got {type(payload).__name__}"
            )
        if not all(isinstance(row, dict) for row in payload):
            raise ShapeMismatchError(f"Expected objects in list from {response.request.url}")
        return payload
