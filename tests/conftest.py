# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for Petro-Core catalog tests."""

import os
import pytest
from typing import Generator

# Set test environment variables before importing the catalog
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DISABLE_LOGGING", "1")
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_ANON_KEY"] = ""


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio for async tests."""
    return "asyncio"


@pytest.fixture
def sample_rock_data() -> dict:
    """Sample rock row as the store returns it."""
    return {
        "id": "rock-001",
        "rock_code": "I-0001",
        "name": "Granite",
        "category": "Igneous",
        "type": "Igneous",
        "color": "Pink, grey",
        "texture": "Phaneritic",
        "locality": "Baguio City, Benguet",
        "associated_minerals": "Quartz, Feldspar",
        "mineral_composition": "Quartz, Feldspar, Biotite",
        "image_url": "https://demo.supabase.co/storage/v1/object/public/rocks/granite.jpg",
        "updated_at": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def sample_rocks_list(sample_rock_data: dict) -> list:
    """Rock rows including one duplicate pair (same code, different spacing)."""
    return [
        sample_rock_data,
        {
            **sample_rock_data,
            "id": "rock-002",
            "rock_code": "i 0001",
            "updated_at": "2024-06-01T00:00:00Z",
        },
        {
            "id": "rock-003",
            "rock_code": None,
            "name": "Basalt",
            "category": "Igneous",
            "type": "",
            "color": "Black",
            "texture": "Aphanitic",
            "locality": "Taal",
            "image_url": "",
        },
        {
            "id": "rock-004",
            "rock_code": "S-0001",
            "name": "Limestone",
            "category": "Sedimentary",
            "type": "Sedimentary",
            "color": "White",
            "description": "Fossiliferous limestone",
            "fossil_content": "Crinoids",
        },
        {
            "id": "rock-005",
            "rock_code": "O-0001",
            "name": "Chalcopyrite Ore",
            "category": "Ore Samples",
            "type": "Ore",
            "color": "Brassy yellow",
            "mineral_composition": "Chalcopyrite, Pyrite",
            "commodity_type": "Copper",
        },
    ]


@pytest.fixture
def sample_minerals_list() -> list:
    """Mineral rows."""
    return [
        {
            "id": "mineral-001",
            "mineral_code": "M-0001",
            "mineral_name": "Borax",
            "category": "BORATES",
            "chemical_formula": "Na2B4O7·10H2O",
            "color": "White",
            "occurrence": "Evaporite deposits",
        },
        {
            "id": "mineral-002",
            "mineral_code": "M-0002",
            "mineral_name": "Calcite",
            "category": "CARBONATES",
            "chemical_formula": "CaCO3",
            "color": "Colorless, white",
            "image_url": "/petro-static/calcite.jpg",
        },
    ]


@pytest.fixture
def sample_images() -> dict:
    """Gallery rows keyed by specimen id."""
    return {
        "rock-002": [
            {"image_url": "https://demo.supabase.co/storage/v1/object/public/rocks/granite-2.jpg", "display_order": 1},
            {"image_url": "https://demo.supabase.co/storage/v1/object/public/rocks/granite-1.jpg", "display_order": 0},
        ],
    }


@pytest.fixture
def memory_store(sample_rocks_list, sample_minerals_list, sample_images):
    """In-memory store over the sample rows."""
    from catalog.connectors.memory import InMemoryStore

    return InMemoryStore(
        rocks=sample_rocks_list,
        minerals=sample_minerals_list,
        images=sample_images,
    )


@pytest.fixture
def make_specimen():
    """Factory building a Specimen from keyword columns."""
    from catalog.types import Specimen, SpecimenKind

    def _make(kind=SpecimenKind.ROCK, **record):
        return Specimen.from_record(kind, record)

    return _make


@pytest.fixture
def test_client(memory_store) -> Generator:
    """Create a test client for the FastAPI application, backed by the sample store."""
    from fastapi.testclient import TestClient
    from api.main import app
    from api.routes.catalog import get_image_cache, get_store

    app.dependency_overrides[get_store] = lambda: memory_store
    app.dependency_overrides[get_image_cache] = lambda: None
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
