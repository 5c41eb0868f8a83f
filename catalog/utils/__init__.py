"""Utility modules for the catalog pipeline."""

from catalog.utils.logging import setup_logging
from catalog.utils.text import is_blank, normalize_code, normalize_text

__all__ = ["is_blank", "normalize_code", "normalize_text", "setup_logging"]
