"""
Runtime configuration.

Values come from the environment (prefix CHINESE_ASTRO_) or a .env file
in the working directory, loaded with Pydantic Settings. Cache policies
are built from the settings and handed to the components that own a cache.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class CachePolicy:
    """Capacity and expiry of a bounded cache. max_age_seconds=None disables expiry."""
    max_entries: int
    max_age_seconds: Optional[float] = None

    def __post_init__(self):
        if self.max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if self.max_age_seconds is not None and self.max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be positive")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHINESE_ASTRO_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    chart_cache_max_entries: int = Field(256, ge=1)
    chart_cache_ttl_seconds: Optional[float] = Field(3600.0, gt=0)
    compatibility_cache_max_entries: int = Field(144, ge=1)
    solar_term_method: Literal["mean", "swisseph"] = "mean"
    log_level: str = "INFO"
    metrics_backend: Literal["none", "memory", "prometheus"] = "none"

    def chart_cache_policy(self) -> CachePolicy:
        return CachePolicy(self.chart_cache_max_entries, self.chart_cache_ttl_seconds)

    def compatibility_cache_policy(self) -> CachePolicy:
        # Results are pure functions of the sign pair, nothing to expire
        return CachePolicy(self.compatibility_cache_max_entries, None)


@lru_cache
def get_settings() -> Settings:
    return Settings()
