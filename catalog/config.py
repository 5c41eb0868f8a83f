"""
Configuration management for the Petro-Core catalog pipeline.

Uses pydantic-settings for type-safe configuration with environment variable support.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Hosted store (Supabase / PostgREST) connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = ""  # e.g. https://<project>.supabase.co
    anon_key: str = ""  # Required for the hosted store: set SUPABASE_ANON_KEY in .env

    rocks_table: str = "rocks"
    minerals_table: str = "minerals"

    # Gallery images live in a side table keyed by the specimen id
    rock_images_table: str = "rock_images"
    rock_images_fk: str = "rock_id"
    mineral_images_table: Optional[str] = None
    mineral_images_fk: str = "mineral_id"

    @field_validator("url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalize the project URL so paths can be appended."""
        return (v or "").strip().rstrip("/")

    @property
    def configured(self) -> bool:
        """True when a project URL and key are available."""
        return bool(self.url and self.anon_key)

    @property
    def rest_url(self) -> str:
        """PostgREST base URL for the project."""
        return f"{self.url}/rest/v1"


class PipelineSettings(BaseSettings):
    """Catalog pipeline settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    log_json: bool = False

    # HTTP settings
    http_timeout: float = 30.0  # seconds
    http_max_retries: int = 0  # extra attempts on transport errors; 0 = no retry
    http_retry_delay: float = 1.0  # seconds

    # Fetching
    fetch_page_size: int = 1000

    # Gallery image lookups
    image_lookup_limit: int = 5
    image_concurrency: int = 10
    image_cache_ttl: int = 300  # seconds, 0 disables the cache
    image_cache_size: int = 2000

    # Search input is debounced before a query is issued
    search_debounce_ms: int = 500

    # Display
    default_rock_image: str = "/petro-static/default-rock.jpg"
    default_mineral_image: str = "/petro-static/default-mineral.jpg"
    display_path_prefix: str = "/rock-minerals"
    hosted_storage_markers: str = "storage/v1/object/public/,supabase.co/storage"

    @property
    def hosted_storage_markers_list(self) -> list[str]:
        """Parse hosted storage markers into a list."""
        return [m.strip() for m in self.hosted_storage_markers.split(",") if m.strip()]

    @property
    def search_debounce_seconds(self) -> float:
        return max(0, self.search_debounce_ms) / 1000.0


class APISettings(BaseSettings):
    """API server settings."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    reload: bool = False
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # JSON snapshot served when no hosted store is configured
    static_catalog_path: Optional[Path] = None

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


class Settings(BaseSettings):
    """Main settings class that combines all settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    store: StoreSettings = Field(default_factory=StoreSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    api: APISettings = Field(default_factory=APISettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience function for quick access
settings = get_settings()


# =============================================================================
# Catalog vocabulary
# =============================================================================

ROCK_CATEGORIES = [
    "Igneous",
    "Sedimentary",
    "Metamorphic",
    "Ore Samples",
]

MINERAL_CATEGORIES = [
    "NATIVE ELEMENTS",
    "SULFIDES",
    "SULFOSALTS",
    "OXIDES",
    "HYDROXIDES",
    "HALIDES",
    "CARBONATES",
    "NITRATES",
    "BORATES",
    "SULFATES",
    "CHROMATES",
    "MOLYBDATES",
    "TUNGSTATES",
    "PHOSPHATES",
    "VANADATES",
    "ARSENATES",
    "SILICATES",
    "TELLURIDES",
    "SELENIDES",
    "ANTIMONIDES",
    "ARSENIDES",
    "ORGANICS",
]

# Raw `type` values entered by the bulk importer that stand for a category
TYPE_ALIASES = {
    "ore": "Ore Samples",
}
