import pytest

from chinese_astro.bazi import FourPillarsChart, Pillar, BirthMoment, calculate_bazi
from chinese_astro.stems_branches import branch_at, stem_at


def make_chart(*pairs):
    """Chart from (stem index, branch index) pairs in year, month, day, hour order."""
    positions = ("year", "month", "day", "hour")
    pillars = [Pillar(stem_at(s), branch_at(b), pos) for (s, b), pos in zip(pairs, positions)]
    return FourPillarsChart(*pillars)


@pytest.fixture
def birth():
    return BirthMoment(1990, 5, 15, 14, 30)


@pytest.fixture
def chart(birth):
    return calculate_bazi(birth)


@pytest.fixture
def fire_chart():
    # Geng Wu / Ding Chou / Ren Zi / Ding Wei
    return make_chart((6, 6), (3, 1), (8, 0), (3, 7))
