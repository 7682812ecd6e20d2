"""
Nine Star Ki (Flying Stars) calculations.

Handles:
- Birth star from the 9-year cycle anchored at 1984
- Current year star relative to the birth year
- Directional star projection over the 8 compass directions + center
- Personality, career, relationship and health traits per star
- Lucky and challenging directions
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from chinese_astro.errors import ValidationError
from chinese_astro.stems_branches import Element

REFERENCE_YEAR = 1984


@dataclass(frozen=True)
class NineStar:
    number: int  # 1-9
    color: str
    element: Element

    @property
    def label(self) -> str:
        return f"{self.number}-{self.color}"

    def __str__(self):
        return self.label


NINE_STARS = [
    NineStar(1, "White", Element.WATER),
    NineStar(2, "Black", Element.EARTH),
    NineStar(3, "Jade", Element.WOOD),
    NineStar(4, "Green", Element.WOOD),
    NineStar(5, "Yellow", Element.EARTH),
    NineStar(6, "White", Element.METAL),
    NineStar(7, "Red", Element.FIRE),
    NineStar(8, "White", Element.EARTH),
    NineStar(9, "Purple", Element.FIRE),
]

# Offset added to the birth star number for each direction
DIRECTION_MODIFIERS = {
    "North": 1,
    "Northeast": 2,
    "East": 3,
    "Southeast": 8,
    "South": 7,
    "Southwest": 6,
    "West": 5,
    "Northwest": 4,
    "Center": 0,
}

LUCKY_STARS = {1, 6, 8}
CHALLENGING_STARS = {2, 5, 7}


# ============================================================
# TRAIT TABLES
# ============================================================

PERSONALITY = {
    1: ["Leadership", "Independence", "Determination"],
    2: ["Cooperation", "Patience", "Stability"],
    3: ["Creativity", "Communication", "Optimism"],
    4: ["Organization", "Discipline", "Reliability"],
    5: ["Balance", "Harmony", "Adaptability"],
    6: ["Nurturing", "Responsibility", "Loyalty"],
    7: ["Analysis", "Precision", "Independence"],
    8: ["Authority", "Justice", "Protection"],
    9: ["Wisdom", "Spirituality", "Humanitarianism"],
}

CAREER = {
    1: ["Leadership roles", "Entrepreneurship", "Management"],
    2: ["Team work", "Support roles", "Education"],
    3: ["Creative fields", "Communication", "Arts"],
    4: ["Administrative work", "Finance", "Planning"],
    5: ["Mediation", "Counseling", "Public service"],
    6: ["Healthcare", "Teaching", "Service industry"],
    7: ["Research", "Technology", "Analysis"],
    8: ["Legal field", "Government", "Security"],
    9: ["Counseling", "Spirituality", "Humanitarian work"],
}

RELATIONSHIPS = {
    1: ["Values independence", "Strong partnerships", "Leadership in relationships"],
    2: ["Harmonious relationships", "Supportive partner", "Family-oriented"],
    3: ["Expressive communication", "Creative connections", "Social butterfly"],
    4: ["Stable relationships", "Practical approach", "Loyal companion"],
    5: ["Balanced partnerships", "Harmonious unions", "Diplomatic nature"],
    6: ["Nurturing relationships", "Caring partner", "Family focus"],
    7: ["Independent relationships", "Intellectual connections", "Selective bonds"],
    8: ["Protective partnerships", "Strong commitments", "Justice in relationships"],
    9: ["Spiritual connections", "Wise partnerships", "Humanitarian bonds"],
}

HEALTH = {
    1: ["Headaches", "High blood pressure", "Stress management"],
    2: ["Digestive health", "Kidney function", "Emotional balance"],
    3: ["Throat/respiratory", "Communication-related stress", "Heart health"],
    4: ["Liver/gallbladder", "Structural alignment", "Discipline in health"],
    5: ["Overall balance", "Digestive harmony", "Emotional stability"],
    6: ["Stomach/intestines", "Nurturing self-care", "Immune system"],
    7: ["Lungs/respiratory", "Mental clarity", "Analytical health approach"],
    8: ["Heart/circulation", "Authority in health decisions", "Protective measures"],
    9: ["Spiritual well-being", "Wisdom in health choices", "Holistic approach"],
}

FALLBACK_PERSONALITY = ["Balanced", "Harmonious"]
FALLBACK_CAREER = ["Versatile career options"]
FALLBACK_RELATIONSHIPS = ["Balanced relationship approach"]
FALLBACK_HEALTH = ["General health maintenance"]


def personality_traits(star: int) -> list[str]:
    return list(PERSONALITY.get(star, FALLBACK_PERSONALITY))


def career_traits(star: int) -> list[str]:
    return list(CAREER.get(star, FALLBACK_CAREER))


def relationship_traits(star: int) -> list[str]:
    return list(RELATIONSHIPS.get(star, FALLBACK_RELATIONSHIPS))


def health_traits(star: int) -> list[str]:
    return list(HEALTH.get(star, FALLBACK_HEALTH))


# ============================================================
# STAR CALCULATIONS
# ============================================================

def star_by_number(number: int) -> NineStar:
    if number < 1 or number > 9:
        raise ValidationError("star", "must be between 1 and 9", kind="range")
    return NINE_STARS[number - 1]


def birth_star(year: int) -> NineStar:
    """Star at ((year - 1984) mod 9 + 9) mod 9 in the star table."""
    return NINE_STARS[((year - REFERENCE_YEAR) % 9 + 9) % 9]


def current_year_star(birth_year: int, current_year: int) -> NineStar:
    return NINE_STARS[abs(current_year - birth_year) % 9]


def directional_stars(star: NineStar) -> dict[str, NineStar]:
    """Project the birth star onto each compass direction and the center."""
    return {
        direction: star_by_number(((star.number + modifier - 1) % 9) + 1)
        for direction, modifier in DIRECTION_MODIFIERS.items()
    }


def lucky_directions(directions: dict[str, NineStar]) -> list[str]:
    return [d for d, s in directions.items() if s.number in LUCKY_STARS]


def challenging_directions(directions: dict[str, NineStar]) -> list[str]:
    return [d for d, s in directions.items() if s.number in CHALLENGING_STARS]


@dataclass(frozen=True)
class StarAnalysis:
    personality: list[str]
    career: list[str]
    relationships: list[str]
    health: list[str]
    lucky_directions: list[str]
    challenging_directions: list[str]

    def to_dict(self):
        return {
            "personality": list(self.personality),
            "career": list(self.career),
            "relationships": list(self.relationships),
            "health": list(self.health),
            "lucky_directions": list(self.lucky_directions),
            "challenging_directions": list(self.challenging_directions),
        }


@dataclass(frozen=True)
class NineStarProfile:
    birth_star: NineStar
    current_star: NineStar
    directions: dict  # direction -> NineStar
    analysis: StarAnalysis

    def to_dict(self):
        return {
            "birth_star": self.birth_star.label,
            "birth_star_element": self.birth_star.element.value,
            "current_star": self.current_star.label,
            "directions": {d: s.label for d, s in self.directions.items()},
            "analysis": self.analysis.to_dict(),
        }


def calculate(birth_year: int, current_year: Optional[int] = None) -> NineStarProfile:
    """
    Full Nine Star Ki profile for a birth year.

    Args:
        birth_year: Gregorian birth year
        current_year: year to project the current star for (defaults to this year)
    """
    if current_year is None:
        current_year = date.today().year

    star = birth_star(birth_year)
    directions = directional_stars(star)
    analysis = StarAnalysis(
        personality=personality_traits(star.number),
        career=career_traits(star.number),
        relationships=relationship_traits(star.number),
        health=health_traits(star.number),
        lucky_directions=lucky_directions(directions),
        challenging_directions=challenging_directions(directions),
    )
    return NineStarProfile(star, current_year_star(birth_year, current_year), directions, analysis)
