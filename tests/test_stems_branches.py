"""Static stem/branch/element tables and sign relations."""

import pytest

from chinese_astro.errors import CalculationError
from chinese_astro.stems_branches import (
    ANIMALS, EARTHLY_BRANCHES, HEAVENLY_STEMS, POLAR_OPPOSITES, SECRET_FRIENDS,
    TRIANGLE_GROUPS, ZODIAC_SIGNS, Element, Polarity, animal_of, branch_element_of,
    controls, element_of, generates, sign_meta,
)


def test_table_sizes():
    assert len(HEAVENLY_STEMS) == 10
    assert len(EARTHLY_BRANCHES) == 12
    assert ANIMALS[0] == "Rat" and ANIMALS[-1] == "Pig"


def test_stems_alternate_polarity_in_element_pairs():
    for i, stem in enumerate(HEAVENLY_STEMS):
        assert stem.index == i
        assert stem.polarity == (Polarity.YANG if i % 2 == 0 else Polarity.YIN)
        assert stem.element == HEAVENLY_STEMS[i - i % 2].element


def test_lookups():
    assert element_of("Jia") == Element.WOOD
    assert element_of("Gui") == Element.WATER
    assert branch_element_of("Wu") == Element.FIRE
    assert animal_of("Chen") == "Dragon"


@pytest.mark.parametrize("call", [
    lambda: element_of("Foo"),
    lambda: branch_element_of("Bar"),
    lambda: animal_of("Baz"),
    lambda: sign_meta("Cat"),
])
def test_unknown_names_raise(call):
    with pytest.raises(CalculationError):
        call()


def test_cycles_are_closed():
    for e in Element:
        assert sum(generates(e, other) for other in Element) == 1
        assert sum(controls(e, other) for other in Element) == 1
    assert generates(Element.WATER, Element.WOOD)
    assert controls(Element.WATER, Element.FIRE)


def test_relations_are_symmetric():
    for table in (POLAR_OPPOSITES, SECRET_FRIENDS):
        assert set(table) == set(ANIMALS)
        for a, b in table.items():
            assert table[b] == a


def test_triangles_partition_the_signs():
    members = [sign for group in TRIANGLE_GROUPS for sign in group]
    assert sorted(members) == sorted(ANIMALS)


def test_sign_metadata():
    dragon = sign_meta("Dragon")
    assert dragon.direction == 120
    assert dragon.triangle_group == 0
    assert len(ZODIAC_SIGNS) == 12
