# SPDX-License-Identifier: MIT
"""Tests for catalog data models, text helpers and settings."""

import pytest

from catalog.config import PipelineSettings, StoreSettings
from catalog.types import (
    CatalogKind,
    FilterState,
    Pagination,
    Specimen,
    SpecimenKind,
    paginate,
)
from catalog.utils.text import is_blank, normalize_text


class TestSpecimen:
    """Test Specimen construction."""

    def test_rock_columns(self, sample_rock_data):
        specimen = Specimen.from_record(SpecimenKind.ROCK, sample_rock_data)

        assert specimen.id == "rock-001"
        assert specimen.name == "Granite"
        assert specimen.code == "I-0001"
        assert specimen.get("texture") == "Phaneritic"

    def test_mineral_columns(self):
        specimen = Specimen.from_record(
            SpecimenKind.MINERAL,
            {"id": 7, "mineral_code": "M-1", "mineral_name": "Quartz", "category": "SILICATES"},
        )

        assert specimen.id == "7"
        assert specimen.name == "Quartz"
        assert specimen.code == "M-1"

    def test_blank_code_is_none(self):
        specimen = Specimen.from_record(SpecimenKind.ROCK, {"id": "1", "rock_code": "  "})
        assert specimen.code is None

    def test_completeness_ignores_metadata(self):
        specimen = Specimen.from_record(
            SpecimenKind.ROCK,
            {"id": "1", "name": "Granite", "color": "", "user_id": "u", "updated_at": "2024-01-01"},
        )
        assert specimen.completeness() == 1


class TestKinds:
    """Test kind enums."""

    def test_all_runs_rocks_first(self):
        assert CatalogKind.ALL.specimen_kinds == [SpecimenKind.ROCK, SpecimenKind.MINERAL]

    def test_fields(self):
        assert SpecimenKind.MINERAL.code_field == "mineral_code"
        assert SpecimenKind.ROCK.name_field == "name"
        assert SpecimenKind.ROCK.plural == "rocks"


class TestPagination:
    """Test the pagination helper."""

    def test_total_pages(self):
        assert Pagination.from_total(21, 1, 10).total_pages == 3
        assert Pagination.from_total(0, 1, 10).total_pages == 0

    def test_page_clamped(self):
        assert Pagination.from_total(5, 0, 10).page == 1

    def test_paginate_slice(self):
        items, pagination = paginate(list(range(25)), page=3, page_size=10)
        assert items == [20, 21, 22, 23, 24]
        assert pagination.to_dict() == {"page": 3, "page_size": 10, "total": 25, "total_pages": 3}

    def test_page_past_end(self):
        items, pagination = paginate([1, 2], page=5, page_size=10)
        assert items == []
        assert pagination.total == 2


class TestFilterState:
    """Test facet state."""

    def test_empty(self):
        assert FilterState().is_empty()

    def test_active_count(self):
        state = FilterState(rock_type=["Igneous"], colors=["red", "black"])
        assert state.active_count() == 3


class TestTextHelpers:
    """Test text helpers."""

    @pytest.mark.parametrize("value", [None, "", "  ", [], {}])
    def test_blank(self, value):
        assert is_blank(value)

    @pytest.mark.parametrize("value", ["x", 0, 1.5, ["a"]])
    def test_not_blank(self, value):
        assert not is_blank(value)

    def test_normalize_text(self):
        assert normalize_text("  Basalt ") == "basalt"
        assert normalize_text(12.5) == "12.5"
        assert normalize_text(None) == ""


class TestSettings:
    """Test settings parsing."""

    def test_store_url_trailing_slash(self):
        settings = StoreSettings(url="https://demo.supabase.co/", anon_key="k")
        assert settings.rest_url == "https://demo.supabase.co/rest/v1"
        assert settings.configured

    def test_store_not_configured_without_key(self):
        assert not StoreSettings(url="https://demo.supabase.co", anon_key="").configured

    def test_pipeline_defaults(self):
        settings = PipelineSettings()
        assert settings.fetch_page_size == 1000
        assert settings.image_lookup_limit == 5
        assert settings.search_debounce_seconds == 0.5
        assert settings.http_max_retries == 0

    def test_markers_list(self):
        settings = PipelineSettings(hosted_storage_markers=" a/ , ,b ")
        assert settings.hosted_storage_markers_list == ["a/", "b"]


class TestLogging:
    """Test loguru setup."""

    def test_file_sink(self, tmp_path):
        from loguru import logger

        from catalog.utils.logging import setup_logging

        log_file = tmp_path / "logs" / "catalog.log"
        setup_logging(level="INFO", log_file=log_file, json_logs=False)
        try:
            logger.info("catalog ready")
        finally:
            logger.remove()

        assert "catalog ready" in log_file.read_text()
