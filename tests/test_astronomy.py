"""Lunar model and solar terms."""

from datetime import date, datetime

import pytest

from chinese_astro.astronomy import (
    LUNAR_MANSIONS, REFERENCE_NEW_MOON_JD, SYNODIC_MONTH, current_solar_term,
    lunar_data, lunar_mansion, lunar_phase, moon_illumination, new_moons,
    solar_term_longitudes, solar_terms, solar_terms_between,
)
from chinese_astro.errors import SolarTermNotFoundError, ValidationError
from chinese_astro.stems_branches import ANIMALS


def test_solar_term_longitudes_cover_the_circle():
    longitudes = solar_term_longitudes()
    assert len(longitudes) == 24
    assert longitudes[0] == 270
    assert set(longitudes) == set(range(0, 360, 15))


def test_solar_terms_of_a_year():
    terms = solar_terms(2024)
    assert len(terms) == 24
    assert {t.longitude for t in terms} == set(range(0, 360, 15))
    assert all(t.significance for t in terms)
    assert all(t.date.year == 2024 for t in terms)
    assert [t.julian_day for t in terms] == sorted(t.julian_day for t in terms)
    assert terms[0].name == "Minor Cold"
    assert terms[-1].name == "Winter Solstice"


def test_spring_begins_in_early_february():
    li_chun = next(t for t in solar_terms(2024) if t.longitude == 315)
    assert li_chun.name == "Spring Begins"
    assert date(2024, 2, 3) <= li_chun.date <= date(2024, 2, 6)


def test_swisseph_method_matches_almanac():
    terms = {t.longitude: t for t in solar_terms(2024, method="swisseph")}
    assert terms[315].date == date(2024, 2, 4)
    assert terms[270].date == date(2024, 12, 21)


def test_unknown_method_is_rejected():
    with pytest.raises(ValidationError):
        solar_terms(2024, method="exact")


def test_current_solar_term():
    assert current_solar_term(datetime(2024, 5, 15)).longitude == 45


def test_current_solar_term_wraps_before_first_term():
    term = current_solar_term(datetime(2024, 1, 2))
    assert term.name == "Winter Solstice"
    assert term.date.year == 2024


def test_current_solar_term_without_terms():
    with pytest.raises(SolarTermNotFoundError):
        current_solar_term(datetime(2024, 5, 15), terms=[])


def test_solar_terms_between_spans_years():
    found = solar_terms_between("2023-12-01", "2024-01-31")
    names = [t.name for t in found]
    assert names == ["Major Snow", "Winter Solstice", "Minor Cold", "Major Cold"]


def test_lunar_phase_buckets():
    assert lunar_phase(REFERENCE_NEW_MOON_JD + 0.2) == "New Moon"
    assert lunar_phase(REFERENCE_NEW_MOON_JD + 0.55 * SYNODIC_MONTH) == "Full Moon"
    assert lunar_phase(REFERENCE_NEW_MOON_JD + 0.95 * SYNODIC_MONTH) == "Waning Crescent"
    assert lunar_phase(REFERENCE_NEW_MOON_JD - 0.1 * SYNODIC_MONTH) == "Waning Crescent"


def test_illumination():
    assert moon_illumination(REFERENCE_NEW_MOON_JD) == 0
    assert moon_illumination(REFERENCE_NEW_MOON_JD + SYNODIC_MONTH / 2) == 100


def test_lunar_data_snapshot():
    data = lunar_data("2024-03-10T12:00")
    assert 0 <= data.mansion < 28
    assert data.moon_sign in ANIMALS
    assert data.mansion_name == LUNAR_MANSIONS[data.mansion]
    assert 0 <= data.phase_fraction < 1
    assert data.to_dict()["mansion_name"] == data.mansion_name


def test_lunar_mansion_range():
    assert all(0 <= lunar_mansion(2451545.0 + d * 0.7) < 28 for d in range(200))


def test_new_moons_in_year():
    moons = new_moons(2024)
    assert len(moons) in (12, 13)
    for a, b in zip(moons, moons[1:]):
        assert b - a == pytest.approx(SYNODIC_MONTH)
