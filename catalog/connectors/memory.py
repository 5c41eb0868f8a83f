"""
In-memory store.

Serves a snapshot of the catalog from process memory. Used by the tests and
by the API when no hosted store is configured (a JSON export of the tables).

Snapshot format:
    {
        "rocks": [{...row...}, ...],
        "minerals": [{...row...}, ...],
        "images": {"<specimen id>": [{"image_url": "...", "display_order": 0}, ...]}
    }
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from catalog.connectors.base import BaseStore
from catalog.errors import ShapeMismatchError
from catalog.types import ALL_CATEGORIES, Pagination, Specimen, SpecimenKind, SpecimenPage


class InMemoryStore(BaseStore):
    """Specimen store over plain row dictionaries."""

    store_id = "memory"

    def __init__(
        self,
        rocks: list[dict[str, Any]] | None = None,
        minerals: list[dict[str, Any]] | None = None,
        images: dict[str, list[dict[str, Any]]] | None = None,
    ):
        self._rows = {
            SpecimenKind.ROCK: list(rocks or []),
            SpecimenKind.MINERAL: list(minerals or []),
        }
        self._images = {str(k): list(v) for k, v in (images or {}).items()}

    @classmethod
    def from_json(cls, path: Path) -> "InMemoryStore":
        """Load a snapshot written as JSON."""
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ShapeMismatchError(f"Catalog snapshot {path} must be a JSON object")

        store = cls(
            rocks=data.get("rocks") or [],
            minerals=data.get("minerals") or [],
            images=data.get("images") or {},
        )
        logger.info(
            f"Loaded catalog snapshot from {path}: "
            f"{len(store._rows[SpecimenKind.ROCK])} rocks, "
            f"{len(store._rows[SpecimenKind.MINERAL])} minerals"
        )
        return store

    async def list_specimens(
        self,
        kind: SpecimenKind,
        category: str = ALL_CATEGORIES,
        page: int = 1,
        page_size: int = 1000,
    ) -> SpecimenPage:
        kind = SpecimenKind(kind)
        rows = self._rows[kind]

        if category and category.strip() and category != ALL_CATEGORIES:
            wanted = category.strip()
            rows = [r for r in rows if (r.get("category") or "") == wanted]

        rows = sorted(rows, key=lambda r: str(r.get(kind.name_field) or ""))

        pagination = Pagination.from_total(len(rows), page, page_size)
        start = (pagination.page - 1) * pagination.page_size
        page_rows = rows[start:start + pagination.page_size]

        return SpecimenPage(
            records=[Specimen.from_record(kind, row) for row in page_rows],
            pagination=pagination,
        )

    async def list_images_for(
        self,
        specimen_id: str,
        kind: SpecimenKind = SpecimenKind.ROCK,
    ) -> list[dict[str, Any]]:
        images = self._images.get(str(specimen_id), [])
        return sorted(images, key=lambda img: img.get("display_order") or 0)
