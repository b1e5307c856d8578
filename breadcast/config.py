"""
Application configuration using Pydantic settings.

All configurable values are loaded from environment variables with sensible defaults.
This centralizes configuration management and makes the application more flexible
across different deployments (local development, live rendering, prerendered production).
"""
from enum import Enum
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator
from typing import Optional

# Get the directory containing this config file (breadcast/)
_PACKAGE_DIR = Path(__file__).parent.resolve()

RECIPE_SET_FILE_NAME = "recipes.json"
RENDERED_RECIPE_SET_FILE_NAME = "rendered-recipes.json"
PIN_MAP_FILE_NAME = "cid-data.json"


class RenderMode(str, Enum):
    """How frame images are resolved at serve time."""

    # Asset cids come from the rendered recipe set written by the CLI
    PRERENDERED = "prerendered"
    # Images are rendered on demand and embedded as data URIs, re-rendered after a TTL
    LIVE_CACHE = "live_cache"
    # Images are rendered on demand, pinned once and served from the IPFS gateway
    LIVE_PINNED = "live_pinned"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App metadata
    app_name: str = "Breadcast"
    app_version: str = "0.1.0"
    debug: bool = False

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL

    # Environment layout: recipe set files live in {base_dir}/{breadcast_env}/
    breadcast_env: str = ""
    base_dir: Path = Path.cwd()

    # Frame serving
    render_mode: RenderMode = RenderMode.PRERENDERED
    public_host: Optional[str] = None  # Hostname used in button targets; request host when unset

    # IPFS / Pinata
    ipfs_gateway: str = "https://gateway.pinata.cloud"
    pinata_jwt: Optional[str] = None  # Set via PINATA_JWT env var
    pinata_api_url: str = "https://api.pinata.cloud"
    pinata_page_size: int = 1000  # pinList page size
    http_timeout_seconds: float = 30.0

    # Caching
    rerender_ttl_seconds: int = 60  # TTL for live_cache rendered images
    recipe_set_reload_seconds: int = 10  # How stale the recipe set files may get
    pin_map_save_minutes: int = 5  # How often the pin map is flushed to disk
    asset_cleanup_minutes: int = 5  # How often expired live_cache images are purged

    # Background jobs
    enable_background_jobs: bool = True

    # CORS - frames are fetched by arbitrary clients
    cors_origins: list[str] = ["*"]

    @model_validator(mode="after")
    def validate_pinning_credentials(self) -> "Settings":
        """Ensure a Pinata token is configured when images are pinned at serve time."""
        if (
            not self.debug
            and self.render_mode == RenderMode.LIVE_PINNED
            and not self.pinata_jwt
        ):
            raise ValueError(
                "CONFIGURATION ERROR: RENDER_MODE=live_pinned requires the PINATA_JWT "
                "environment variable to be set (when DEBUG=false)."
            )
        return self

    @property
    def env_dir(self) -> Path:
        """Directory holding the recipe set files for the active environment."""
        return Path(self.base_dir) / self.breadcast_env

    @property
    def recipe_set_file(self) -> Path:
        return self.env_dir / RECIPE_SET_FILE_NAME

    @property
    def rendered_recipe_set_file(self) -> Path:
        return self.env_dir / RENDERED_RECIPE_SET_FILE_NAME

    @property
    def pin_map_file(self) -> Path:
        return self.env_dir / PIN_MAP_FILE_NAME

    model_config = SettingsConfigDict(
        env_file=_PACKAGE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


def get_settings(**overrides) -> Settings:
    """
    Factory function to create Settings instance.

    Useful for testing where you need to override specific values
    without modifying environment variables.

    Args:
        **overrides: Key-value pairs to override default settings

    Returns:
        Settings instance with overrides applied

    Example:
        test_settings = get_settings(debug=True, render_mode="live_cache")
    """
    return Settings(**overrides)


# Global settings instance (lazy initialization for testability)
# In tests, you can reload this module or use get_settings() directly
settings = get_settings()
