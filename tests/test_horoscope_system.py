"""Horoscope system facade."""

from datetime import date

import pytest

from chinese_astro import horoscope_system
from chinese_astro.bazi import BirthMoment
from chinese_astro.errors import ChartNotSetError, ValidationError
from chinese_astro.horoscope_system import ChineseHoroscopeSystem
from chinese_astro.observability import InMemoryMetrics


@pytest.fixture
def system(birth):
    s = ChineseHoroscopeSystem(solar_term_method="mean", metrics=InMemoryMetrics())
    s.generate_chart(birth)
    return s


def test_requires_chart():
    with pytest.raises(ChartNotSetError) as exc:
        ChineseHoroscopeSystem().generate_horoscope("daily", "2024-01-05")
    assert exc.value.code == "CHART_NOT_SET"
    with pytest.raises(ChartNotSetError):
        ChineseHoroscopeSystem().generate_all_horoscopes("2024-01-05")


@pytest.mark.parametrize("period_type", ["hourly", "", None, 7])
def test_rejects_unsupported_type(system, period_type):
    with pytest.raises(ValidationError):
        system.generate_horoscope(period_type, "2024-01-05")


def test_set_chart_rejects_other_objects():
    with pytest.raises(ValidationError):
        ChineseHoroscopeSystem().set_chart({"year": "GengWu"})


def test_generate_chart_from_mapping():
    system = ChineseHoroscopeSystem()
    chart = system.generate_chart({"year": 1984, "month": 6, "day": 1, "hour": 8})
    assert chart.year.animal == "Rat"
    assert system.system_info()["chart_loaded"]


def test_type_is_case_insensitive(system):
    assert system.generate_horoscope("DAILY", "2024-01-05").type == "daily"


def test_weekly_starts_on_sunday(system):
    # 2024-01-03 is a Wednesday
    weekly = system.generate_horoscope("weekly", date(2024, 1, 3))
    assert weekly.details.days[0].date == date(2023, 12, 31)


def test_generate_all(system):
    results = system.generate_all_horoscopes("2024-01-05")
    assert list(results) == ["daily", "weekly", "monthly", "yearly"]
    assert results["monthly"].core.start.month == 1
    assert results["yearly"].details.year_animal == "Dragon"
    assert system.metrics.counters["horoscope_daily_generated"] == 1


def test_generate_all_in_parallel_matches_sequential(system):
    sequential = system.generate_all_horoscopes("2024-01-05")
    parallel = system.generate_all_horoscopes("2024-01-05", parallel=True)
    assert parallel == sequential


def test_validate_horoscope(system):
    horoscope = system.generate_horoscope("daily", "2024-01-05")
    report = system.validate_horoscope(horoscope, {"animal_sign": "Horse"})
    assert report["is_accurate"]
    assert report["score"] == 1.0
    assert system.validate_horoscope(horoscope.to_dict(), {"animal_sign": "Horse"})["is_accurate"]


def test_validate_flags_broken_horoscope(system):
    report = system.validate_horoscope({"type": "invalid"}, {})
    assert not report["is_accurate"]
    assert report["accuracy"] == "Needs Review"
    assert 0 <= report["score"] < 1


def test_system_info_and_health():
    system = ChineseHoroscopeSystem()
    info = system.system_info()
    assert info["supported_types"] == ["daily", "weekly", "monthly", "yearly"]
    assert not info["chart_loaded"]
    health = system.health_check()
    assert health["status"] == "healthy"
    assert "probe_rating" in health


def test_health_check_uses_configured_solar_term_method(monkeypatch):
    methods = []
    real = horoscope_system.calculate_bazi

    def recording(birth, method="mean"):
        methods.append(method)
        return real(birth, "mean")

    monkeypatch.setattr(horoscope_system, "calculate_bazi", recording)
    health = ChineseHoroscopeSystem(solar_term_method="swisseph").health_check()
    assert methods == ["swisseph"]
    assert health["solar_term_method"] == "swisseph"


def test_health_check_reports_failures(monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("ephemeris unavailable")

    monkeypatch.setattr(horoscope_system, "calculate_bazi", broken)
    health = ChineseHoroscopeSystem(solar_term_method="mean").health_check()
    assert health["status"] == "unhealthy"
    assert health["error"] == "ephemeris unavailable"
