"""
Data models for the catalog pipeline.

Defines the Specimen record the store adapters produce, the DisplayItem
projection the catalog views consume, and the query-parameter objects
(FilterState, CatalogQuery) that are passed explicitly into the pipeline.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from catalog.utils.text import is_blank


class SpecimenKind(str, Enum):
    """Kinds of catalog records."""

    ROCK = "rock"
    MINERAL = "mineral"

    @property
    def plural(self) -> str:
        return f"{self.value}s"

    @property
    def code_field(self) -> str:
        """Column holding the human specimen code."""
        return "rock_code" if self is SpecimenKind.ROCK else "mineral_code"

    @property
    def name_field(self) -> str:
        """Column holding the display name."""
        return "name" if self is SpecimenKind.ROCK else "mineral_name"


class CatalogKind(str, Enum):
    """What the caller wants listed."""

    ROCKS = "rocks"
    MINERALS = "minerals"
    ALL = "all"

    @property
    def specimen_kinds(self) -> list[SpecimenKind]:
        """Specimen kinds to run, rocks always first."""
        if self is CatalogKind.ROCKS:
            return [SpecimenKind.ROCK]
        if self is CatalogKind.MINERALS:
            return [SpecimenKind.MINERAL]
        return [SpecimenKind.ROCK, SpecimenKind.MINERAL]


ALL_CATEGORIES = "ALL"

# Metadata columns that never count towards record completeness
_METADATA_FIELDS = frozenset({"id", "created_at", "updated_at", "user_id"})


@dataclass
class Specimen:
    """
    A rock or mineral record as returned by the store.

    The well-known columns are lifted into attributes; the full record is kept
    in ``fields`` so search and display code can read category-specific
    columns (``metamorphic_grade``, ``streak``, ...) by name.
    """

    kind: SpecimenKind
    id: str | None
    name: str
    category: str = ""
    type: str = ""
    code: str | None = None
    image_url: str | None = None
    updated_at: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, kind: SpecimenKind, record: dict[str, Any]) -> "Specimen":
        """Build a Specimen from a raw store row."""
        kind = SpecimenKind(kind)
        raw_id = record.get("id")
        code = record.get(kind.code_field)
        return cls(
            kind=kind,
            id=str(raw_id) if raw_id not in (None, "") else None,
            name=str(record.get(kind.name_field) or ""),
            category=str(record.get("category") or ""),
            type=str(record.get("type") or ""),
            code=str(code) if not is_blank(code) else None,
            image_url=record.get("image_url") or None,
            updated_at=record.get("updated_at") or None,
            fields=dict(record),
        )

    def get(self, name: str, default: Any = None) -> Any:
        """Read a raw column by name."""
        value = self.fields.get(name, default)
        return default if value is None else value

    def completeness(self) -> int:
        """Number of non-empty data columns."""
        return sum(
            1 for key, value in self.fields.items()
            if key not in _METADATA_FIELDS and not is_blank(value)
        )

    def to_record(self) -> dict[str, Any]:
        """Return a copy of the raw row."""
        return dict(self.fields)


@dataclass
class DisplayItem:
    """Normalized projection consumed by the catalog views."""

    id: str | None
    title: str
    description: str
    image_url: str
    category: str
    kind: SpecimenKind
    path: str | None = None
    additional_images: list[str] = field(default_factory=list)

    # Passthrough fields
    color: str | None = None
    associated_minerals: str | None = None
    locality: str | None = None
    coordinates: str | None = None
    latitude: str | None = None
    longitude: str | None = None

    # Rock-only fields
    texture: str | None = None
    foliation: str | None = None
    rock_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "additional_images": list(self.additional_images),
            "category": self.category,
            "kind": self.kind.value,
        }

        optional_fields = [
            "path", "color", "associated_minerals", "locality", "coordinates",
            "latitude", "longitude", "texture", "foliation", "rock_type",
        ]

        for field_name in optional_fields:
            value = getattr(self, field_name, None)
            if value is not None:
                result[field_name] = value

        return result


@dataclass
class FilterState:
    """Selected facet values. Empty groups are inactive."""

    rock_type: list[str] = field(default_factory=list)
    mineral_category: list[str] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)
    associated_minerals: list[str] = field(default_factory=list)

    def active_count(self) -> int:
        return (
            len(self.rock_type)
            + len(self.mineral_category)
            + len(self.colors)
            + len(self.associated_minerals)
        )

    def is_empty(self) -> bool:
        return self.active_count() == 0


@dataclass
class Pagination:
    """Pagination metadata for a page of results."""

    page: int
    page_size: int
    total: int
    total_pages: int

    @classmethod
    def from_total(cls, total: int, page: int = 1, page_size: int = 10) -> "Pagination":
        page_size = max(1, int(page_size))
        return cls(
            page=max(1, int(page)),
            page_size=page_size,
            total=total,
            total_pages=math.ceil(total / page_size) if total else 0,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "total_pages": self.total_pages,
        }


@dataclass
class SpecimenPage:
    """Raw records plus the pagination descriptor the store reported."""

    records: list[Specimen]
    pagination: Pagination


@dataclass
class CatalogQuery:
    """Everything one catalog search needs; the pipeline keeps no other state."""

    kind: CatalogKind = CatalogKind.ALL
    search: str = ""
    category: str = ALL_CATEGORIES
    filters: FilterState = field(default_factory=FilterState)
    page: int = 1
    page_size: int | None = None  # None returns every item


@dataclass
class CatalogResult:
    """Outcome handed to the view: items, or an empty list and an error message."""

    items: list[DisplayItem] = field(default_factory=list)
    pagination: Pagination | None = None
    error: str | None = None
    generation: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "pagination": self.pagination.to_dict() if self.pagination else None,
            "error": self.error,
        }


def paginate(items: list, page: int = 1, page_size: int = 10) -> tuple[list, Pagination]:
    """Slice one page out of ``items``."""
    pagination = Pagination.from_total(len(items), page, page_size)
    start = (pagination.page - 1) * pagination.page_size
    return items[start:start + pagination.page_size], pagination
