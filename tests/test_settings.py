"""Settings loaded from the environment."""

import pytest
from pydantic import ValidationError as SettingsError

from chinese_astro.settings import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("CHINESE_ASTRO_SOLAR_TERM_METHOD", raising=False)
    settings = Settings(_env_file=None)
    assert settings.chart_cache_max_entries == 256
    assert settings.solar_term_method == "mean"
    policy = settings.chart_cache_policy()
    assert (policy.max_entries, policy.max_age_seconds) == (256, 3600.0)
    assert settings.compatibility_cache_policy().max_age_seconds is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CHINESE_ASTRO_CHART_CACHE_MAX_ENTRIES", "10")
    monkeypatch.setenv("CHINESE_ASTRO_SOLAR_TERM_METHOD", "swisseph")
    monkeypatch.setenv("CHINESE_ASTRO_LOG_LEVEL", "DEBUG")
    settings = Settings(_env_file=None)
    assert settings.chart_cache_max_entries == 10
    assert settings.solar_term_method == "swisseph"
    assert settings.log_level == "DEBUG"


def test_invalid_values_are_rejected(monkeypatch):
    monkeypatch.setenv("CHINESE_ASTRO_SOLAR_TERM_METHOD", "exact")
    with pytest.raises(SettingsError):
        Settings(_env_file=None)
    monkeypatch.delenv("CHINESE_ASTRO_SOLAR_TERM_METHOD")
    monkeypatch.setenv("CHINESE_ASTRO_CHART_CACHE_MAX_ENTRIES", "0")
    with pytest.raises(SettingsError):
        Settings(_env_file=None)


def test_metrics_backend(monkeypatch):
    monkeypatch.delenv("CHINESE_ASTRO_METRICS_BACKEND", raising=False)
    assert Settings(_env_file=None).metrics_backend == "none"
    monkeypatch.setenv("CHINESE_ASTRO_METRICS_BACKEND", "prometheus")
    assert Settings(_env_file=None).metrics_backend == "prometheus"
    monkeypatch.setenv("CHINESE_ASTRO_METRICS_BACKEND", "graphite")
    with pytest.raises(SettingsError):
        Settings(_env_file=None)
