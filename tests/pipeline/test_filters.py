# SPDX-License-Identifier: MIT
"""Tests for the filter engine."""

import pytest

from catalog.filters import (
    MINERAL_SEARCH_FIELDS,
    ROCK_SEARCH_FIELDS,
    apply_filters,
    facet_groups,
    matches_text,
)
from catalog.types import FilterState, Specimen, SpecimenKind


@pytest.fixture
def rocks(sample_rocks_list):
    return [Specimen.from_record(SpecimenKind.ROCK, row) for row in sample_rocks_list]


@pytest.fixture
def minerals(sample_minerals_list):
    return [Specimen.from_record(SpecimenKind.MINERAL, row) for row in sample_minerals_list]


class TestSearchFields:
    """Test the per-kind search column lists."""

    def test_rock_fields_include_category_specific_columns(self):
        for name in ("rock_code", "name", "metamorphic_grade", "fossil_content", "commodity_type"):
            assert name in ROCK_SEARCH_FIELDS

    def test_mineral_fields(self):
        for name in ("mineral_code", "mineral_name", "streak", "luster", "chemical_formula"):
            assert name in MINERAL_SEARCH_FIELDS


class TestTextSearch:
    """Test the free-text query."""

    def test_basalt_matches_name(self, make_specimen):
        """Searching "basalt" keeps Basalt and drops Limestone."""
        basalt = make_specimen(id="1", name="Basalt", category="Igneous")
        limestone = make_specimen(id="2", name="Limestone", category="Sedimentary")

        assert apply_filters([basalt, limestone], search="basalt") == [basalt]

    def test_case_insensitive_and_trimmed(self, make_specimen):
        basalt = make_specimen(id="1", name="Basalt")
        assert apply_filters([basalt], search="  BASALT ") == [basalt]

    def test_matches_any_searchable_column(self, rocks):
        result = apply_filters(rocks, search="crinoid")
        assert [s.id for s in result] == ["rock-004"]

    def test_numeric_columns(self, make_specimen):
        specimen = make_specimen(id="1", name="Andesite", latitude=16.41)
        assert matches_text(specimen, "16.4")

    def test_non_search_columns_ignored(self, make_specimen):
        specimen = make_specimen(id="1", name="Andesite", user_id="basalt-user")
        assert not matches_text(specimen, "basalt")

    def test_mineral_columns(self, minerals):
        result = apply_filters(minerals, search="caco3")
        assert [s.id for s in result] == ["mineral-002"]

    def test_empty_search_passes_everything(self, rocks):
        assert apply_filters(rocks, search="") == rocks
        assert apply_filters(rocks) == rocks


class TestFacets:
    """Test facet groups."""

    def test_ore_alias(self, make_specimen):
        """Ore Samples facet matches a record whose raw type is "Ore"."""
        ore = make_specimen(id="1", name="Chalcopyrite", category="", type="Ore")
        granite = make_specimen(id="2", name="Granite", category="Igneous", type="Igneous")

        result = apply_filters([ore, granite], filters=FilterState(rock_type=["Ore Samples"]))

        assert result == [ore]

    def test_type_facet_matches_category(self, rocks):
        result = apply_filters(rocks, filters=FilterState(rock_type=["Igneous"]))
        assert {s.id for s in result} == {"rock-001", "rock-002", "rock-003"}

    def test_or_within_group(self, rocks):
        result = apply_filters(rocks, filters=FilterState(rock_type=["Sedimentary", "Ore Samples"]))
        assert {s.id for s in result} == {"rock-004", "rock-005"}

    def test_and_across_groups(self, rocks):
        result = apply_filters(rocks, filters=FilterState(rock_type=["Igneous"], colors=["black"]))
        assert [s.id for s in result] == ["rock-003"]

    def test_color_substring(self, minerals):
        result = apply_filters(minerals, filters=FilterState(colors=["white"]))
        assert [s.id for s in result] == ["mineral-001", "mineral-002"]

    def test_mineral_category_plural_tolerance(self, make_specimen):
        borax = make_specimen(SpecimenKind.MINERAL, id="1", mineral_name="Borax", category="BORATE")
        result = apply_filters([borax], filters=FilterState(mineral_category=["BORATES"]))
        assert result == [borax]

    def test_associated_minerals_checks_composition(self, rocks):
        result = apply_filters(rocks, filters=FilterState(associated_minerals=["pyrite"]))
        assert [s.id for s in result] == ["rock-005"]

    def test_rock_groups_do_not_constrain_minerals(self, minerals):
        result = apply_filters(minerals, filters=FilterState(rock_type=["Igneous"]))
        assert result == minerals

    def test_mineral_category_does_not_constrain_rocks(self, rocks):
        result = apply_filters(rocks, filters=FilterState(mineral_category=["BORATES"]))
        assert result == rocks

    def test_facet_groups_skip_empty(self):
        assert facet_groups(SpecimenKind.ROCK, FilterState()) == []
        assert len(facet_groups(SpecimenKind.ROCK, FilterState(colors=["red"]))) == 1


class TestFilterProperties:
    """Test structural properties of the filter."""

    def test_subset_same_objects(self, rocks):
        result = apply_filters(rocks, search="i", filters=FilterState(colors=["e"]))
        assert all(any(r is s for s in rocks) for r in result)

    def test_input_order_kept(self, rocks):
        result = apply_filters(rocks, search="e")
        positions = [rocks.index(s) for s in result]
        assert positions == sorted(positions)

    def test_records_not_mutated(self, rocks, sample_rocks_list):
        apply_filters(rocks, search="granite", filters=FilterState(colors=["pink"]))
        assert [s.to_record() for s in rocks] == sample_rocks_list

    @pytest.mark.parametrize(
        "base, extra",
        [
            (FilterState(), FilterState(rock_type=["Igneous"])),
            (FilterState(rock_type=["Igneous"]), FilterState(rock_type=["Igneous"], colors=["pink"])),
            (FilterState(colors=["white"]), FilterState(colors=["white"], associated_minerals=["quartz"])),
        ],
    )
    def test_new_group_never_grows_result(self, rocks, base, extra):
        """Adding a facet group can only shrink the result."""
        assert len(apply_filters(rocks, filters=extra)) <= len(apply_filters(rocks, filters=base))
