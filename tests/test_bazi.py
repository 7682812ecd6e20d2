"""Four Pillars derivation and birth moment validation."""

import pytest

from chinese_astro.bazi import (
    BirthMoment, bazi_summary, calculate_bazi, day_pillar, hour_pillar, lunar_year,
    month_branch_index, month_pillar, validate_bazi, year_pillar,
)
from chinese_astro.astronomy import solar_terms
from chinese_astro.errors import ValidationError


@pytest.mark.parametrize("year, stem, branch, animal", [
    (1984, "Jia", "Zi", "Rat"),
    (1990, "Geng", "Wu", "Horse"),
    (2000, "Geng", "Chen", "Dragon"),
    (2024, "Jia", "Chen", "Dragon"),
    (1983, "Gui", "Hai", "Pig"),
])
def test_year_pillar(year, stem, branch, animal):
    pillar = year_pillar(year)
    assert (pillar.stem.pinyin, pillar.branch.pinyin, pillar.animal) == (stem, branch, animal)


@pytest.mark.parametrize("longitude, index", [(0, 0), (15, 0), (45, 1), (330, 11), (359.9, 11)])
def test_month_branch_index(longitude, index):
    assert month_branch_index(longitude) == index


def test_month_pillar_stem_follows_year_stem():
    pillar = month_pillar(1990, 45.0)
    assert pillar.branch.pinyin == "Chou"
    assert pillar.stem.pinyin == "Ding"  # (6 * 2 + 1) % 10


def test_day_pillar_reference_day():
    pillar = day_pillar(BirthMoment(2000, 1, 1))
    assert (pillar.stem.index, pillar.branch.index) == (6, 2)


def test_timezone_can_change_day_pillar():
    local = day_pillar(BirthMoment(2000, 1, 1, 5, 0))
    shifted = day_pillar(BirthMoment(2000, 1, 1, 5, 0, timezone_offset=8))
    assert local != shifted
    assert (shifted.stem.index, shifted.branch.index) == (5, 1)


@pytest.mark.parametrize("hour, branch, animal", [
    (0, "Zi", "Rat"),
    (12, "Wu", "Horse"),
    (14, "Wei", "Goat"),
    (23, "Hai", "Pig"),
])
def test_hour_pillar_branch(hour, branch, animal):
    pillar = hour_pillar(0, hour)
    assert pillar.branch.pinyin == branch
    assert pillar.animal == animal


def test_hour_stems_differ_across_double_hours():
    assert hour_pillar(0, 2).stem.pinyin == "Yi"
    assert hour_pillar(0, 14).stem.pinyin == "Xin"
    assert hour_pillar(0, 12).stem.pinyin == "Geng"


def test_calculate_bazi(birth):
    chart = calculate_bazi(birth)
    assert bazi_summary(chart) == "GengWu DingChou RenZi DingWei"
    assert chart.day_master.pinyin == "Ren"
    assert chart.lunar.lunar_year == 1990
    assert chart.lunar.solar_term.longitude == 45
    assert validate_bazi(chart)


def test_calculate_bazi_is_deterministic(birth):
    assert calculate_bazi(birth) == calculate_bazi(birth)


def test_lunar_year_before_spring_begins():
    early = BirthMoment(1990, 1, 15, 10)
    assert lunar_year(early, solar_terms(1990)) == 1989


def test_chart_dict_shape(chart):
    data = chart.to_dict()
    assert set(data) == {"year", "month", "day", "hour", "lunar_date"}
    assert data["year"] == {
        "position": "year", "stem": "Geng", "branch": "Wu", "element": "Metal",
        "animal": "Horse", "chinese": "庚午", "polarity": "Yang", "branch_element": "Fire",
    }


def test_calculate_bazi_requires_birth_moment():
    with pytest.raises(ValidationError) as exc:
        calculate_bazi({"year": 1990, "month": 5, "day": 15})
    assert exc.value.kind == "type"


@pytest.mark.parametrize("kwargs, field, kind", [
    (dict(year=1899, month=1, day=1), "year", "range"),
    (dict(year=2101, month=1, day=1), "year", "range"),
    (dict(year=2000, month=13, day=1), "month", "range"),
    (dict(year=2023, month=2, day=29), "day", "date"),
    (dict(year=2023, month=4, day=31), "day", "date"),
    (dict(year=2000, month=1, day=1, hour=24), "hour", "range"),
    (dict(year=2000, month=1, day=1, minute=60), "minute", "range"),
    (dict(year=2000, month=1, day=1, second=-1), "second", "range"),
    (dict(year=2000, month=1, day=1, hour="12"), "hour", "type"),
    (dict(year=2000, month=1, day=1, hour=True), "hour", "type"),
    (dict(year=2000, month=1, day=1, timezone_offset=15), "timezone_offset", "range"),
    (dict(year=2000, month=1, day=1, latitude=91.0), "latitude", "range"),
    (dict(year=2000, month=1, day=1, timezone_offset=float("nan")), "timezone_offset", "range"),
    (dict(year=2000, month=1, day=1, timezone_offset=float("inf")), "timezone_offset", "range"),
    (dict(year=2000, month=1, day=1, latitude=float("nan")), "latitude", "range"),
    (dict(year=2000, month=1, day=1, latitude=float("-inf")), "latitude", "range"),
    (dict(year=2000, month=1, day=1, longitude=float("nan")), "longitude", "range"),
    (dict(year=2000, month=1, day=1, longitude=float("inf")), "longitude", "range"),
])
def test_birth_moment_validation(kwargs, field, kind):
    with pytest.raises(ValidationError) as exc:
        BirthMoment(**kwargs)
    assert exc.value.field == field
    assert exc.value.kind == kind


def test_leap_day_is_valid():
    assert BirthMoment(2024, 2, 29).day == 29


def test_from_dict_reports_missing_fields():
    with pytest.raises(ValidationError) as exc:
        BirthMoment.from_dict({"month": 5, "day": 15})
    assert exc.value.kind == "required"
    assert BirthMoment.from_dict({"year": 1990, "month": 5, "day": 15, "note": "x"}).year == 1990


def test_validate_bazi_rejects_inconsistent_charts(chart):
    data = chart.to_dict()
    assert validate_bazi(data)

    del data["hour"]
    assert not validate_bazi(data)

    data = chart.to_dict()
    data["day"]["element"] = "Wood"
    assert not validate_bazi(data)

    data = chart.to_dict()
    data["month"]["stem"] = "Foo"
    assert not validate_bazi(data)

    data = chart.to_dict()
    data["year"]["stem"] = ["Geng"]
    assert not validate_bazi(data)

    data = chart.to_dict()
    data["hour"]["branch"] = {"pinyin": "Wei"}
    assert not validate_bazi(data)

    assert not validate_bazi(None)
