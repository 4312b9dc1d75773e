# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings. Components never read
the process environment themselves: they receive a Settings instance (or the
explicit values taken from it) at construction time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tabilingo.config.languages import DEEPL_LANGUAGE_MAP, TARGET_LANGUAGES


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Translation provider (DeepL) ===
    deepl_api_key: str = ""
    deepl_server_url: str = ""

    # === CMS (Sanity) ===
    sanity_project_id: str = ""
    sanity_dataset: str = "production"
    sanity_api_token: str = ""
    sanity_api_version: str = "2024-01-01"
    sanity_timeout_s: float = 30.0

    # === Languages ===
    source_language: str = "ja"
    source_language_code: str = "JA"
    target_languages: str = ",".join(TARGET_LANGUAGES)

    # === Client: chunking, rate limit, retry ===
    provider_max_chars_per_request: int = 2000
    min_request_interval_ms: int = 100
    max_retries: int = 3
    initial_backoff_ms: int = 5000
    max_backoff_ms: int = 60000
    backoff_factor: float = 2.0
    rate_limit_backoff_factor: float = 4.0
    backoff_jitter_ratio: float = 0.25

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["json", "sqlite", "redis"] = "json"
    cache_dir: Path = Path(".deepl-cache")
    cache_redis_url: str = ""
    cache_ttl_days: int = 30

    # === Quota and cost ===
    max_characters_per_month: int = 450_000
    quota_max_percent: float = 90.0
    large_content_threshold: int = 10_000
    markdown_max_characters: int = 15_000
    price_per_million_chars: float = 20.0

    # === Document policy ===
    prefecture_policy: Literal["code", "display"] = "code"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("min_request_interval_ms", "max_retries", "cache_ttl_days")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("value must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        unknown = [
            lang for lang in self.target_languages_list if lang not in TARGET_LANGUAGES
        ]
        if unknown:
            errors.append(f"TARGET_LANGUAGES contains unsupported values: {', '.join(unknown)}")

        unmapped = [
            lang for lang in self.target_languages_list if lang not in DEEPL_LANGUAGE_MAP
        ]
        if unmapped and not unknown:
            errors.append(f"No provider code for: {', '.join(unmapped)}")

        if self.provider_max_chars_per_request <= 0:
            errors.append("PROVIDER_MAX_CHARS_PER_REQUEST must be > 0")

        if self.max_backoff_ms < self.initial_backoff_ms:
            errors.append("MAX_BACKOFF_MS must be >= INITIAL_BACKOFF_MS")

        if not 0 < self.quota_max_percent <= 100:
            errors.append("QUOTA_MAX_PERCENT must be in (0, 100]")

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def target_languages_list(self) -> list[str]:
        """Parse comma-separated target languages."""
        return [
            lang.strip().lower()
            for lang in self.target_languages.split(",")
            if lang.strip()
        ]

    @property
    def min_request_interval_s(self) -> float:
        return self.min_request_interval_ms / 1000.0


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
