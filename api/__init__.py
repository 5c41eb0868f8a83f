"""
Petro-Core Catalog API.

Read-only FastAPI backend over the rock and mineral catalog pipeline.

Run with:
    uvicorn api.main:app --reload --port 8000
"""

from api.main import app

__version__ = "1.0.0"

__all__ = ["app"]
