"""
Filter engine.

Narrows a deduplicated set of specimens to those matching a free-text query
and every active facet group. Within a group any selected value is enough;
across groups all must hold. The result is always a subset of the input:
the same objects, unmodified, in input order.
"""

from typing import Callable, Iterable

from loguru import logger

from catalog.config import TYPE_ALIASES
from catalog.types import FilterState, Specimen, SpecimenKind
from catalog.utils.text import normalize_text

# Columns searched by the free-text query, per kind
ROCK_SEARCH_FIELDS = (
    "rock_code",
    "name",
    "category",
    "type",
    "color",
    "hardness",
    "texture",
    "grain_size",
    "locality",
    "mineral_composition",
    "description",
    "formation",
    "depositional_environment",
    "associated_minerals",
    "coordinates",
    "latitude",
    "longitude",
    "geological_age",
    "chemical_formula",
    # Metamorphic
    "metamorphism_type",
    "metamorphic_grade",
    "parent_rock",
    "foliation",
    # Igneous
    "silica_content",
    "cooling_rate",
    "mineral_content",
    # Sedimentary
    "bedding",
    "sorting",
    "roundness",
    "fossil_content",
    "sediment_source",
    # Ore samples
    "commodity_type",
    "ore_group",
    "mining_company",
)

MINERAL_SEARCH_FIELDS = (
    "mineral_code",
    "mineral_name",
    "category",
    "chemical_formula",
    "mineral_group",
    "color",
    "streak",
    "luster",
    "hardness",
    "cleavage",
    "fracture",
    "crystal_system",
    "habit",
    "specific_gravity",
    "transparency",
    "occurrence",
    "uses",
)

SEARCH_FIELDS = {
    SpecimenKind.ROCK: ROCK_SEARCH_FIELDS,
    SpecimenKind.MINERAL: MINERAL_SEARCH_FIELDS,
}


def normalize_search_term(search: str | None) -> str:
    """Trim and lowercase a search term."""
    return normalize_text(search)


def matches_text(specimen: Specimen, term: str) -> bool:
    """True when any searchable column contains ``term`` (already normalized)."""
    if not term:
        return True
    return any(
        term in normalize_text(specimen.fields.get(name))
        for name in SEARCH_FIELDS[specimen.kind]
    )


def _singular(value: str) -> str:
    # BORATES / BORATE, CARBONATES / CARBONATE, ...
    return value[:-1] if value.endswith("s") else value


def _category_key(value: str | None) -> str:
    return _singular(normalize_text(value))


def _type_value(specimen: Specimen) -> str:
    """The record's raw type, with importer aliases resolved."""
    return TYPE_ALIASES.get(normalize_text(specimen.type), specimen.type)


def matches_type(specimen: Specimen, selected: list[str]) -> bool:
    """Type/category facet: any selected value equals the type or the category."""
    candidates = {_category_key(specimen.category), _category_key(_type_value(specimen))}
    candidates.discard("")
    return any(_category_key(value) in candidates for value in selected)


def matches_color(specimen: Specimen, selected: list[str]) -> bool:
    color = normalize_text(specimen.get("color"))
    return any(normalize_text(value) in color for value in selected)


def matches_associated_minerals(specimen: Specimen, selected: list[str]) -> bool:
    haystacks = (
        normalize_text(specimen.get("associated_minerals")),
        normalize_text(specimen.get("mineral_composition")),
    )
    return any(
        normalize_text(value) in hay
        for value in selected
        for hay in haystacks
        if hay
    )


def facet_groups(
    kind: SpecimenKind,
    filters: FilterState,
) -> list[tuple[list[str], Callable[[Specimen, list[str]], bool]]]:
    """Active facet groups that apply to ``kind``, with their matchers.

    Rock-only groups (rock type, associated minerals) do not constrain
    minerals, and the mineral category group does not constrain rocks.
    """
    if kind is SpecimenKind.ROCK:
        groups = [
            (filters.rock_type, matches_type),
            (filters.colors, matches_color),
            (filters.associated_minerals, matches_associated_minerals),
        ]
    else:
        groups = [
            (filters.mineral_category, matches_type),
            (filters.colors, matches_color),
        ]

    return [(values, matcher) for values, matcher in groups if values]


def matches_facets(specimen: Specimen, filters: FilterState | None) -> bool:
    """True when the specimen satisfies every active facet group."""
    if filters is None:
        return True
    return all(
        matcher(specimen, values)
        for values, matcher in facet_groups(specimen.kind, filters)
    )


def apply_filters(
    specimens: Iterable[Specimen],
    search: str | None = None,
    filters: FilterState | None = None,
) -> list[Specimen]:
    """
    Keep specimens matching the search term and all facets.

    Args:
        specimens: Deduplicated specimens (any mix of kinds)
        search: Free-text query; empty passes everything
        filters: Facet selections; None or empty passes everything

    Returns:
        The matching specimens, same objects, input order
    """
    specimens = list(specimens)
    term = normalize_search_term(search)

    result = [
        s for s in specimens
        if matches_text(s, term) and matches_facets(s, filters)
    ]

    if term or (filters and not filters.is_empty()):
        logger.debug(
            f"filters: kept={len(result)} from={len(specimens)} "
            f"(search={term!r}, facets={filters.active_count() if filters else 0})"
        )
    return result
