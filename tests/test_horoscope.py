"""Horoscope core and the four timeframes."""

import json
from datetime import date, datetime, timedelta

import pytest

from chinese_astro.errors import ValidationError
from chinese_astro.five_elements import analyze
from chinese_astro.horoscope import (
    CATEGORIES, chinese_new_year, daily_horoscope, day_element, horoscope_core,
    lunar_cycles, major_events, monthly_horoscope, overall_score, rating_from_score,
    weekly_horoscope, year_animal, year_element, yearly_horoscope,
)
from chinese_astro.stems_branches import Element


@pytest.mark.parametrize("score, rating", [
    (0.95, "Excellent"),
    (0.8, "Excellent"),
    (0.79, "Very Good"),
    (0.7, "Very Good"),
    (0.6, "Good"),
    (0.5, "Fair"),
    (0.4, "Challenging"),
    (0.39, "Difficult"),
    (0.0, "Difficult"),
])
def test_rating_thresholds(score, rating):
    assert rating_from_score(score) == rating


def test_overall_score_weights(fire_chart):
    balance = analyze(fire_chart)
    assert overall_score("Full Moon", balance) == pytest.approx(0.85)
    assert overall_score("Waning Crescent", balance) == pytest.approx(0.67)
    assert overall_score("Unknown", balance, animal=1.0) == pytest.approx(0.85)


def test_core_rejects_unknown_period(fire_chart):
    with pytest.raises(ValidationError):
        horoscope_core(fire_chart, "2024-01-01", "2024-01-02", "hourly")


def test_core_predictions(fire_chart):
    core = horoscope_core(fire_chart, "2024-01-01", "2024-01-01T23:59:59", "daily")
    assert core.animal_sign == "Horse"
    assert set(core.predictions.categories) == set(CATEGORIES)
    assert 0 <= core.confidence <= 1
    assert core.predictions.challenges[0].severity == "high"
    assert core.predictions.remedies == ["Add green colors", "Wooden furniture", "East-facing rooms"]
    assert [k.type for k in core.predictions.overall.key_influences] == ["lunar", "elemental", "animal"]


def test_daily_horoscope(fire_chart):
    h = daily_horoscope(fire_chart, date(2024, 1, 5))
    assert h.type == "daily"
    assert h.details.day_element == Element.WATER
    assert [w.name for w in h.details.auspicious_hours] == ["Zi Hour"]
    assert h.details.challenging_hours[0].start == 9
    assert h.core.start == datetime(2024, 1, 5)
    assert h.core.end == datetime(2024, 1, 5, 23, 59, 59)


def test_zi_hour_rolls_into_next_day(fire_chart):
    h = daily_horoscope(fire_chart, "2024-01-05")
    period = h.predictions.auspicious_periods[0]
    assert period.start == datetime(2024, 1, 5, 23)
    assert period.end == datetime(2024, 1, 6, 1)


def test_weekly_horoscope(fire_chart):
    h = weekly_horoscope(fire_chart, date(2023, 12, 31))
    days = [s.date for s in h.details.days]
    assert days == [date(2023, 12, 31) + timedelta(days=i) for i in range(7)]
    assert h.core.end == datetime(2024, 1, 6, 23, 59, 59)
    assert all(note.score >= 0.8 for note in h.details.peak_days)
    # Day scores use a neutral animal influence, so they never fall below 0.67
    assert h.details.challenging_days == []


def test_monthly_horoscope(fire_chart):
    h = monthly_horoscope(fire_chart, 2024, 2)
    details = h.details
    assert h.core.end == datetime(2024, 2, 29, 23, 59, 59)
    assert details.new_moon is not None and details.full_moon is not None
    assert 0 <= details.dominant_mansion < 28
    assert [t.name for t in details.solar_terms] == ["Spring Begins", "Rain Water"]
    assert len(details.elemental_shifts) == 28
    assert details.elemental_shifts[0].relationship == "generative"
    assert all(note.score >= 0.7 for note in details.auspicious_dates)
    assert all(e.phase in ("New Moon", "Full Moon") for e in details.lunar_phases)


def test_yearly_horoscope(fire_chart):
    h = yearly_horoscope(fire_chart, 2024)
    details = h.details
    assert details.year_animal == "Dragon"
    assert details.chinese_new_year == date(2024, 1, 22)
    assert len(details.solar_terms) == 24
    assert set(details.life_areas) == set(CATEGORIES)
    assert [r.type for r in details.remedies] == ["Elemental Harmony", "Annual Feng Shui", "Charitable Activities"]
    assert details.remedies[0].priority == "Medium"


def test_year_helpers():
    assert year_animal(1984) == "Rat"
    assert year_element(1984) == Element.WOOD
    assert lunar_cycles(2014) == 13
    assert lunar_cycles(2024) == 12
    assert [e.type for e in major_events(1984)] == ["Growth Period", "Rat Year Influence"]
    assert chinese_new_year(2023) == date(2023, 1, 21)


def test_day_element_cycle():
    assert [day_element(date(2024, 3, d)) for d in range(1, 7)] == [
        Element.WOOD, Element.FIRE, Element.EARTH, Element.METAL, Element.WATER, Element.WOOD,
    ]


@pytest.mark.parametrize("build", [
    lambda c: daily_horoscope(c, "2024-06-01"),
    lambda c: weekly_horoscope(c, "2024-06-02"),
    lambda c: monthly_horoscope(c, 2024, 6),
    lambda c: yearly_horoscope(c, 2024),
])
def test_to_dict_is_json_serializable(fire_chart, build):
    h = build(fire_chart)
    data = json.loads(json.dumps(h.to_dict()))
    assert data["type"] == h.type
    assert data[h.type]
    assert data["date_range"]["start"] <= data["date_range"]["end"]
    assert set(data["predictions"]["categories"]) == set(CATEGORIES)


def test_horoscopes_are_deterministic(fire_chart):
    assert daily_horoscope(fire_chart, "2024-06-01") == daily_horoscope(fire_chart, "2024-06-01")
