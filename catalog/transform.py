"""
Transformer stage.

Maps each raw Specimen onto exactly one DisplayItem. The only I/O is the
optional gallery lookup per record, issued concurrently across a batch; a
failed lookup degrades that record to its fallback image.
"""

import asyncio
from typing import Any, Awaitable, Callable, Iterable, Sequence

from loguru import logger
from pydantic import AnyUrl, TypeAdapter, ValidationError

from catalog.config import TYPE_ALIASES, PipelineSettings, get_settings
from catalog.connectors.cache import MemoryCache, make_cache_key
from catalog.types import DisplayItem, Specimen, SpecimenKind
from catalog.utils.text import is_blank, normalize_text

ImageLookup = Callable[[str, SpecimenKind], Awaitable[list[dict[str, Any]]]]

_URL_ADAPTER = TypeAdapter(AnyUrl)


def is_valid_image_url(url: str | None, storage_markers: Sequence[str] | None = None) -> bool:
    """
    Check whether a stored image reference is usable.

    Valid means: an absolute path (``/petro-static/...``), a URL on the
    hosted storage (matched by marker substring), or any parseable
    absolute URL.
    """
    if not url or not isinstance(url, str) or not url.strip():
        return False

    url = url.strip()
    if url.startswith("/"):
        return True

    markers = storage_markers
    if markers is None:
        markers = get_settings().pipeline.hosted_storage_markers_list
    if any(marker in url for marker in markers):
        return True

    try:
        _URL_ADAPTER.validate_python(url)
        return True
    except ValidationError:
        return False


def default_image_for(kind: SpecimenKind, pipeline: PipelineSettings | None = None) -> str:
    pipeline = pipeline or get_settings().pipeline
    if kind is SpecimenKind.ROCK:
        return pipeline.default_rock_image
    return pipeline.default_mineral_image


def resolve_image(
    specimen: Specimen,
    gallery: Sequence[str] = (),
    pipeline: PipelineSettings | None = None,
) -> str:
    """Gallery image first, then the record's own image, then the placeholder."""
    pipeline = pipeline or get_settings().pipeline
    markers = pipeline.hosted_storage_markers_list

    for url in gallery:
        if is_valid_image_url(url, markers):
            return url
    if is_valid_image_url(specimen.image_url, markers):
        return specimen.image_url
    return default_image_for(specimen.kind, pipeline)


def build_description(specimen: Specimen) -> str:
    """The record's description, or a short template from category and locality."""
    own = specimen.get("description")
    if not is_blank(own):
        return str(own).strip()

    if specimen.kind is SpecimenKind.ROCK:
        where = specimen.get("locality")
    else:
        where = specimen.get("occurrence")
    where = str(where).strip() if not is_blank(where) else "n/a"
    category = specimen.category or "Uncategorized"
    return f"{category} {specimen.kind.value} from {where}"


def build_path(specimen: Specimen, prefix: str | None = None) -> str | None:
    """Detail-page path, e.g. ``/rock-minerals/rock/<id>``; None without an id."""
    if not specimen.id:
        return None
    prefix = get_settings().pipeline.display_path_prefix if prefix is None else prefix
    return f"{prefix.rstrip('/')}/{specimen.kind.value}/{specimen.id}"


def derive_rock_type(specimen: Specimen) -> str:
    """The rock's type, falling back to its category; "Ore" reads as "Ore Samples"."""
    raw = specimen.type.strip() if specimen.type else ""
    if not raw:
        return specimen.category
    return TYPE_ALIASES.get(normalize_text(raw), raw)


def _text_or_none(value: Any) -> str | None:
    if is_blank(value):
        return None
    return str(value)


def to_display_item(
    specimen: Specimen,
    gallery: Sequence[str] = (),
    pipeline: PipelineSettings | None = None,
) -> DisplayItem:
    """Project one specimen into its display shape. Pure and total."""
    pipeline = pipeline or get_settings().pipeline
    is_rock = specimen.kind is SpecimenKind.ROCK

    return DisplayItem(
        id=specimen.id,
        title=specimen.name,
        description=build_description(specimen),
        image_url=resolve_image(specimen, gallery, pipeline),
        additional_images=[
            url for url in gallery
            if is_valid_image_url(url, pipeline.hosted_storage_markers_list)
        ],
        category=specimen.category,
        kind=specimen.kind,
        path=build_path(specimen, pipeline.display_path_prefix),
        color=_text_or_none(specimen.get("color")),
        associated_minerals=_text_or_none(specimen.get("associated_minerals")) if is_rock else None,
        locality=_text_or_none(specimen.get("locality")),
        coordinates=_text_or_none(specimen.get("coordinates")),
        latitude=_text_or_none(specimen.get("latitude")),
        longitude=_text_or_none(specimen.get("longitude")),
        texture=_text_or_none(specimen.get("texture")) if is_rock else None,
        foliation=_text_or_none(specimen.get("foliation")) if is_rock else None,
        rock_type=derive_rock_type(specimen) if is_rock else None,
    )


async def fetch_gallery(
    specimen: Specimen,
    lookup: ImageLookup,
    cache: MemoryCache | None = None,
) -> list[str]:
    """
    Gallery image URLs for one specimen.

    Failures are logged and yield an empty gallery so the caller falls back
    to the record's own image.
    """
    if not specimen.id:
        return []

    key = make_cache_key(specimen.kind.value, specimen.id)
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return cached

    try:
        rows = await lookup(specimen.id, specimen.kind)
    except Exception as e:
        logger.warning(f"Gallery lookup failed for {specimen.kind.value} {specimen.id}: {e}")
        return []

    if not isinstance(rows, list):
        logger.warning(f"Gallery lookup for {specimen.id} returned {type(rows).__name__}, not a list")
        return []

    urls = [
        row["image_url"] for row in rows
        if isinstance(row, dict) and isinstance(row.get("image_url"), str)
    ]
    if cache is not None:
        cache.set(key, urls)
    return urls


async def transform_specimens(
    specimens: Iterable[Specimen],
    lookup: ImageLookup | None = None,
    cache: MemoryCache | None = None,
    concurrency: int | None = None,
) -> list[DisplayItem]:
    """
    Transform a batch of specimens, looking up galleries concurrently.

    Args:
        specimens: Filtered specimens
        lookup: Gallery lookup (``store.list_images_for``); None skips lookups
        cache: Optional gallery cache
        concurrency: Maximum lookups in flight

    Returns:
        One DisplayItem per specimen, in input order
    """
    specimens = list(specimens)
    pipeline = get_settings().pipeline

    if lookup is None:
        return [to_display_item(s, (), pipeline) for s in specimens]

    semaphore = asyncio.Semaphore(max(1, concurrency or pipeline.image_concurrency))

    async def _one(specimen: Specimen) -> DisplayItem:
        async with semaphore:
            gallery = await fetch_gallery(specimen, lookup, cache)
        return to_display_item(specimen, gallery, pipeline)

    return list(await asyncio.gather(*(_one(s) for s in specimens)))
