from functools import lru_cache
import logging

from croniter import croniter
from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tvloo.utils.logging_helpers import sanitize_url_for_logging
from tvloo.utils.timezone import DateFormatError, get_zone


logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when the service cannot start with the given configuration"""
    pass


class CustomSettings(BaseSettings):
    """Application settings loaded from TVLOO_* environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    m3u_url: str | None = None
    epg_url: str | None = None
    catalog_name: str = "TV Channels"

    host: str = "0.0.0.0"
    port: int = Field(default=7000, validation_alias=AliasChoices("PORT", "TVLOO_PORT"))

    playlist_cache_ttl_sec: float = 30 * 60
    guide_cache_ttl_sec: float = 60 * 60
    playlist_timeout_sec: float = 10.0
    guide_timeout_sec: float = 30.0
    fetch_max_retries: int = 2

    display_timezone: str = "Europe/Paris"
    cache_refresh_cron: str | None = None  # Disabled when unset
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="TVLOO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("m3u_url", "epg_url", "cache_refresh_cron", mode="before")
    @classmethod
    def empty_to_none(cls, value):
        """Treat blank environment values as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("m3u_url", "epg_url")
    @classmethod
    def validate_source_url(cls, value: str | None) -> str | None:
        """Validate source URLs are HTTP/HTTPS."""
        if value is not None and not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"Source URL must be HTTP/HTTPS: {sanitize_url_for_logging(value)}")
        return value

    @field_validator(
        "playlist_cache_ttl_sec",
        "guide_cache_ttl_sec",
        "playlist_timeout_sec",
        "guide_timeout_sec",
    )
    @classmethod
    def validate_positive_durations(cls, value: float, info) -> float:
        """Ensure durations are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("fetch_max_retries")
    @classmethod
    def validate_max_retries(cls, value: int) -> int:
        """At least one download attempt is required."""
        if value < 1:
            raise ValueError("fetch_max_retries must be >= 1")
        return value

    @field_validator("display_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Validate timezone string"""
        try:
            get_zone(value)
            return value
        except DateFormatError as exc:
            raise ValueError(
                f"Invalid timezone: {value}. Must be a valid IANA timezone (e.g., 'Europe/Paris') or 'UTC'"
            ) from exc

    @field_validator("cache_refresh_cron")
    @classmethod
    def validate_cron_expression(cls, value: str | None) -> str | None:
        """Validate cron expression is valid."""
        if value is None:
            return value
        try:
            croniter(value)
            return value
        except (ValueError, KeyError) as exc:
            raise ValueError(f"Invalid cron expression '{value}': {exc}") from exc

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    def log_summary(self) -> None:
        """Log the loaded configuration (credentials stripped from URLs)."""
        logger.info("Configuration loaded:")
        logger.info("  Playlist: %s", sanitize_url_for_logging(self.m3u_url or "not configured"))
        logger.info("  Guide: %s", sanitize_url_for_logging(self.epg_url or "not configured"))
        logger.info("  Catalog Name: %s", self.catalog_name)
        logger.info("  Playlist Cache TTL: %ss", self.playlist_cache_ttl_sec)
        logger.info("  Guide Cache TTL: %ss", self.guide_cache_ttl_sec)
        logger.info(
            "  Timeouts: playlist=%.0fs guide=%.0fs retries=%s",
            self.playlist_timeout_sec,
            self.guide_timeout_sec,
            self.fetch_max_retries,
        )
        logger.info("  Display Timezone: %s", self.display_timezone)
        logger.info("  Cache Refresh Schedule: %s", self.cache_refresh_cron or "disabled")


def load_settings(**overrides) -> CustomSettings:
    """
    Load and validate settings.

    Raises:
        ConfigurationError: If a value is invalid or the playlist URL is missing
    """
    try:
        loaded = CustomSettings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    if not loaded.m3u_url:
        raise ConfigurationError(
            "TVLOO_M3U_URL is not set. Create a .env file with TVLOO_M3U_URL=<your playlist url>"
        )
    if not loaded.epg_url:
        logger.warning("No guide configured (TVLOO_EPG_URL) - descriptions will not show programmes")

    return loaded


@lru_cache
def get_settings() -> CustomSettings:
    """Process-wide settings, loaded on first use."""
    return load_settings()


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
