"""Application configuration using Pydantic Settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are validated at startup. Invalid values cause the
    application to fail fast with clear error messages.
    """

    # API Settings
    api_title: str = Field(default="Faceted Search Service", description="API title")
    api_version: str = Field(default="1.0.0", description="API version")

    # Content Graph Settings
    optimizely_graph_gateway: str = Field(
        default="https://cg.optimizely.com",
        min_length=1,
        description="Base URL of the Optimizely Graph gateway",
    )
    optimizely_graph_single_key: str | None = Field(
        default=None,
        description="Optimizely Graph single key used for public content queries",
    )
    graph_timeout: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        description="Content graph request timeout in seconds",
    )
    graph_max_retries: int = Field(
        default=1,
        ge=1,
        le=5,
        description="Maximum attempts for a content graph request (1 disables retries)",
    )

    # Search Defaults
    default_locale: str = Field(default="en", min_length=1, description="Default locale")
    default_limit: int = Field(default=20, ge=1, description="Default page size")
    max_limit: int = Field(default=100, ge=1, le=1000, description="Maximum page size")
    default_sort: str = Field(default="relevance", description="Default sort order key")
    default_semantic_weight: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Default blend weight of semantic similarity vs text relevance",
    )

    # Over-fetch
    fetch_multiplier: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Multiplier applied to the page size when fetching from each source",
    )
    min_fetch_limit: int = Field(
        default=60,
        ge=1,
        description="Minimum number of items fetched from each source",
    )

    # Caching
    cache_max_age: int = Field(
        default=60,
        ge=0,
        description="max-age / s-maxage for the public Cache-Control header",
    )
    result_cache_ttl: int = Field(
        default=0,
        ge=0,
        description="In-process merged result cache TTL in seconds (0 disables)",
    )
    result_cache_max_entries: int = Field(
        default=1000,
        ge=1,
        description="Maximum entries held by the in-process result cache",
    )

    # Logging Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("optimizely_graph_gateway")
    @classmethod
    def validate_gateway(cls, v: str) -> str:
        """Ensure the gateway is an http(s) URL without a trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"optimizely_graph_gateway must start with http:// or https://, got '{v}'"
            )
        return v.rstrip("/")

    @field_validator("optimizely_graph_single_key")
    @classmethod
    def validate_single_key(cls, v: str | None) -> str | None:
        """Ensure the single key is not empty or a placeholder if provided."""
        if v is None:
            return v
        if v.strip() == "":
            raise ValueError("optimizely_graph_single_key cannot be empty string")
        if v in {"your-single-key-here", "undefined", "null"}:
            raise ValueError(
                "optimizely_graph_single_key must be set to a valid key, "
                "not a placeholder value"
            )
        return v.strip()

    @field_validator("default_sort")
    @classmethod
    def validate_default_sort(cls, v: str) -> str:
        """Ensure the default sort is one of the supported keys."""
        valid_sorts = {"relevance", "semantic", "date_desc", "date_asc", "title_asc", "title_desc"}
        v_lower = v.lower()
        if v_lower not in valid_sorts:
            raise ValueError(f"default_sort must be one of {valid_sorts}, got '{v}'")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"log_level must be one of {valid_levels}, got '{v}'"
            )
        return v_upper

    def model_post_init(self, __context) -> None:
        """Additional validation after model initialization."""
        if self.default_limit > self.max_limit:
            raise ValueError(
                f"default_limit ({self.default_limit}) must be <= "
                f"max_limit ({self.max_limit})"
            )

    @property
    def cache_control_header(self) -> str:
        """Cache-Control value sent with successful search responses."""
        return f"public, max-age={self.cache_max_age}, s-maxage={self.cache_max_age}"


# Global settings instance, created lazily on first access
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings: The application settings

    Raises:
        ValueError: If settings validation fails
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# Convenience function to reload settings (useful for testing)
def reload_settings() -> Settings:
    """Reload settings from environment.

    Returns:
        Settings: The reloaded application settings
    """
    global _settings
    _settings = Settings()
    return _settings
