"""Centralized configuration for corpus-search-server using Pydantic Settings."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every value has a default so the service can start with no environment at
    all; the validator only rejects combinations that cannot work together.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Server settings
    host: str = Field(default="127.0.0.1", description="HTTP bind host")
    port: int = Field(default=13000, ge=1, le=65535, description="HTTP bind port")
    static_dir: str = Field(default="", description="Optional directory of static files served at /")
    cors_allow_origins: str = Field(default="*", description="Comma-separated origins allowed by CORS")

    # Corpus settings
    data_path: str = Field(
        default="data_chunks",
        description="Corpus source: chunk directory with manifest.json, a .json file, or a legacy data.js",
    )
    path_prefix: str = Field(default="topics/", description="Path prefix stripped before deriving categories")
    default_category: str = Field(default="uncategorized", min_length=1, description="Category for unfiled pages")
    untitled_title: str = Field(default="Untitled page", min_length=1, description="Display title fallback")

    # Search settings
    preview_max_length: int = Field(default=600, ge=1, description="Maximum preview length in characters")
    default_page_size: int = Field(default=20, ge=1, description="Page size used when a request gives none")
    max_page_size: int = Field(default=100, ge=1, description="Upper clamp for requested page sizes")
    cache_ttl_seconds: float = Field(default=300.0, gt=0, description="Lifetime of cached result lists")
    cache_max_entries: int = Field(default=120, ge=1, description="Maximum cached result lists")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @model_validator(mode="after")
    def _check_page_sizes(self) -> "Settings":
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"DEFAULT_PAGE_SIZE ({self.default_page_size}) must not exceed MAX_PAGE_SIZE ({self.max_page_size})"
            )
        return self

    def get_cors_allow_origins(self) -> list[str]:
        """Get list of CORS origins (comma-separated)."""
        if not self.cors_allow_origins:
            return []
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]
