"""
Reference tables for Chinese astrology.

Handles:
- The 10 Heavenly Stems and 12 Earthly Branches
- Five Element generation and control cycles
- Zodiac sign metadata (element, polarity, direction, triangle group)
- Triangle groups, polar opposites and secret friends

Everything here is static. Lookups fail loudly on an unknown symbol
instead of falling back to a default.
"""

from dataclasses import dataclass
from enum import Enum

from chinese_astro.errors import CalculationError


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

class Polarity(Enum):
    YANG = "Yang"
    YIN = "Yin"


class Element(Enum):
    # Iteration order is significant: ties are broken by first encountered
    WOOD = "Wood"
    FIRE = "Fire"
    EARTH = "Earth"
    METAL = "Metal"
    WATER = "Water"


@dataclass(frozen=True)
class HeavenlyStem:
    chinese: str
    pinyin: str
    element: Element
    polarity: Polarity
    index: int  # 0-9 in the cycle

    def __str__(self):
        return f"{self.pinyin} ({self.polarity.value} {self.element.value})"


@dataclass(frozen=True)
class EarthlyBranch:
    chinese: str
    pinyin: str
    animal: str
    element: Element  # secondary/associated element
    polarity: Polarity
    index: int  # 0-11 in the cycle

    @property
    def direction(self) -> int:
        return self.index * 30

    def __str__(self):
        return f"{self.pinyin} ({self.animal})"


@dataclass(frozen=True)
class ZodiacSignMeta:
    name: str
    element: Element
    polarity: Polarity
    direction: int  # degrees
    triangle_group: int  # 0-3

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "element": self.element.value,
            "polarity": self.polarity.value,
            "direction": self.direction,
            "triangle_group": self.triangle_group,
        }


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = [
    HeavenlyStem("甲", "Jia", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("乙", "Yi", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("丙", "Bing", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("丁", "Ding", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("戊", "Wu", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("己", "Ji", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("庚", "Geng", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("辛", "Xin", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("壬", "Ren", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("癸", "Gui", Element.WATER, Polarity.YIN, 9),
]

EARTHLY_BRANCHES = [
    EarthlyBranch("子", "Zi", "Rat", Element.WATER, Polarity.YANG, 0),
    EarthlyBranch("丑", "Chou", "Ox", Element.EARTH, Polarity.YIN, 1),
    EarthlyBranch("寅", "Yin", "Tiger", Element.WOOD, Polarity.YANG, 2),
    EarthlyBranch("卯", "Mao", "Rabbit", Element.WOOD, Polarity.YIN, 3),
    EarthlyBranch("辰", "Chen", "Dragon", Element.EARTH, Polarity.YANG, 4),
    EarthlyBranch("巳", "Si", "Snake", Element.FIRE, Polarity.YIN, 5),
    EarthlyBranch("午", "Wu", "Horse", Element.FIRE, Polarity.YANG, 6),
    EarthlyBranch("未", "Wei", "Goat", Element.EARTH, Polarity.YIN, 7),
    EarthlyBranch("申", "Shen", "Monkey", Element.METAL, Polarity.YANG, 8),
    EarthlyBranch("酉", "You", "Rooster", Element.METAL, Polarity.YIN, 9),
    EarthlyBranch("戌", "Xu", "Dog", Element.EARTH, Polarity.YANG, 10),
    EarthlyBranch("亥", "Hai", "Pig", Element.WATER, Polarity.YIN, 11),
]

ANIMALS = [b.animal for b in EARTHLY_BRANCHES]

# Lookup helpers
STEM_BY_PINYIN = {s.pinyin: s for s in HEAVENLY_STEMS}
BRANCH_BY_PINYIN = {b.pinyin: b for b in EARTHLY_BRANCHES}
BRANCH_BY_ANIMAL = {b.animal: b for b in EARTHLY_BRANCHES}


def stem_at(index: int) -> HeavenlyStem:
    return HEAVENLY_STEMS[index % 10]


def branch_at(index: int) -> EarthlyBranch:
    return EARTHLY_BRANCHES[index % 12]


def element_of(stem: str) -> Element:
    """Primary element of a Heavenly Stem (by pinyin)."""
    try:
        return STEM_BY_PINYIN[stem].element
    except KeyError:
        raise CalculationError("element_of", f"unknown heavenly stem {stem!r}") from None


def branch_element_of(branch: str) -> Element:
    """Secondary element associated with an Earthly Branch (by pinyin)."""
    try:
        return BRANCH_BY_PINYIN[branch].element
    except KeyError:
        raise CalculationError("branch_element_of", f"unknown earthly branch {branch!r}") from None


def animal_of(branch: str) -> str:
    try:
        return BRANCH_BY_PINYIN[branch].animal
    except KeyError:
        raise CalculationError("animal_of", f"unknown earthly branch {branch!r}") from None


# ============================================================
# FIVE ELEMENT CYCLES
# ============================================================

# Sheng cycle: each element feeds the next
GENERATION_CYCLE = {
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
}

# Ke cycle: each element restrains the next
CONTROL_CYCLE = {
    Element.WOOD: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
    Element.FIRE: Element.METAL,
    Element.METAL: Element.WOOD,
}

GENERATED_BY = {child: parent for parent, child in GENERATION_CYCLE.items()}
CONTROLLED_BY = {target: source for source, target in CONTROL_CYCLE.items()}


def generates(e1: Element, e2: Element) -> bool:
    return GENERATION_CYCLE[e1] == e2


def controls(e1: Element, e2: Element) -> bool:
    return CONTROL_CYCLE[e1] == e2


def generated_by(element: Element) -> Element:
    return GENERATED_BY[element]


def controlled_by(element: Element) -> Element:
    return CONTROLLED_BY[element]


# ============================================================
# ZODIAC SIGN RELATIONSHIPS
# ============================================================

# Ordered: adjacency inside a group matters for compatibility
TRIANGLE_GROUPS = [
    ["Rat", "Dragon", "Monkey"],
    ["Ox", "Snake", "Rooster"],
    ["Tiger", "Horse", "Dog"],
    ["Rabbit", "Goat", "Pig"],
]

_TRIANGLE_OF = {sign: i for i, group in enumerate(TRIANGLE_GROUPS) for sign in group}


def _symmetric(pairs):
    table = {}
    for a, b in pairs:
        table[a] = b
        table[b] = a
    return table


POLAR_OPPOSITES = _symmetric([
    ("Rat", "Horse"),
    ("Ox", "Goat"),
    ("Tiger", "Monkey"),
    ("Rabbit", "Rooster"),
    ("Dragon", "Dog"),
    ("Snake", "Pig"),
])

SECRET_FRIENDS = _symmetric([
    ("Rat", "Ox"),
    ("Tiger", "Pig"),
    ("Rabbit", "Dog"),
    ("Dragon", "Rooster"),
    ("Snake", "Monkey"),
    ("Horse", "Goat"),
])

ZODIAC_SIGNS = [
    ZodiacSignMeta(b.animal, b.element, b.polarity, b.direction, _TRIANGLE_OF[b.animal])
    for b in EARTHLY_BRANCHES
]

SIGN_BY_NAME = {s.name: s for s in ZODIAC_SIGNS}


def sign_meta(name: str) -> ZodiacSignMeta:
    try:
        return SIGN_BY_NAME[name]
    except KeyError:
        raise CalculationError("sign_meta", f"unknown zodiac sign {name!r}") from None
