"""
Five Elements (Wu Xing) analysis of a Four Pillars chart.

Handles:
- Element counting (stems weight 1.0, branch secondary elements weight 0.5)
- Strongest / weakest element and balance classification
- Element relationship graph per element
- Directional element compatibility scoring
- Remedy suggestions for the weakest element
"""

from dataclasses import dataclass, field

from chinese_astro.bazi import FourPillarsChart
from chinese_astro.stems_branches import (
    Element, GENERATION_CYCLE, CONTROL_CYCLE, controlled_by, generated_by, generates, controls,
)

STEM_WEIGHT = 1.0
BRANCH_WEIGHT = 0.5

# (upper bound of max-min range, label), checked in order
BALANCE_BANDS = [
    (0.5, "Well Balanced"),
    (1.0, "Balanced"),
    (1.5, "Moderately Balanced"),
    (2.0, "Unbalanced"),
]
SEVERELY_UNBALANCED = "Severely Unbalanced"

REMEDIES = {
    Element.WOOD: ["Add green colors", "Wooden furniture", "East-facing rooms"],
    Element.FIRE: ["Add red colors", "Candles/lights", "South-facing rooms"],
    Element.EARTH: ["Add yellow colors", "Clay/ceramic items", "Center rooms"],
    Element.METAL: ["Add white/gray colors", "Metal objects", "West-facing rooms"],
    Element.WATER: ["Add blue/black colors", "Water features", "North-facing rooms"],
}


@dataclass(frozen=True)
class ElementRelationship:
    generates: Element
    controls: Element
    controlled_by: Element
    generated_by: Element
    strength: float

    def to_dict(self):
        return {
            "generates": self.generates.value,
            "controls": self.controls.value,
            "controlled_by": self.controlled_by.value,
            "generated_by": self.generated_by.value,
            "strength": self.strength,
        }


@dataclass(frozen=True)
class ElementAnalysis:
    summary: str
    recommendations: list[str] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)

    def to_dict(self):
        return {
            "summary": self.summary,
            "recommendations": list(self.recommendations),
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
        }


@dataclass(frozen=True)
class ElementBalance:
    counts: dict  # Element -> float
    strongest: Element
    weakest: Element
    balance: str
    relationships: dict  # Element -> ElementRelationship
    analysis: ElementAnalysis

    @property
    def total(self) -> float:
        return sum(self.counts.values())

    def count(self, element: Element) -> float:
        return self.counts.get(element, 0.0)

    def to_dict(self):
        return {
            "counts": {e.value: c for e, c in self.counts.items()},
            "strongest": self.strongest.value,
            "weakest": self.weakest.value,
            "balance": self.balance,
            "relationships": {e.value: r.to_dict() for e, r in self.relationships.items()},
            "analysis": self.analysis.to_dict(),
        }


# ============================================================
# COUNTING AND CLASSIFICATION
# ============================================================

def count_elements(chart: FourPillarsChart) -> dict:
    counts = {e: 0.0 for e in Element}
    for pillar in chart.pillars:
        counts[pillar.element] += STEM_WEIGHT
    for pillar in chart.pillars:
        counts[pillar.branch.element] += BRANCH_WEIGHT
    return counts


def strongest_element(counts: dict) -> Element:
    # Strict comparison: first element in Wood..Water order wins ties
    best, best_count = None, -1.0
    for element in Element:
        if counts[element] > best_count:
            best, best_count = element, counts[element]
    return best


def weakest_element(counts: dict) -> Element:
    worst, worst_count = None, float("inf")
    for element in Element:
        if counts[element] < worst_count:
            worst, worst_count = element, counts[element]
    return worst


def assess_balance(counts: dict) -> str:
    spread = max(counts.values()) - min(counts.values())
    for upper, label in BALANCE_BANDS:
        if spread <= upper:
            return label
    return SEVERELY_UNBALANCED


def element_relationships(counts: dict) -> dict:
    return {
        e: ElementRelationship(
            generates=GENERATION_CYCLE[e],
            controls=CONTROL_CYCLE[e],
            controlled_by=controlled_by(e),
            generated_by=generated_by(e),
            strength=counts[e],
        )
        for e in Element
    }


def _analysis(counts: dict, strongest: Element, weakest: Element) -> ElementAnalysis:
    recommendations = []
    if counts[weakest] < 1:
        recommendations.append(f"Strengthen {weakest.value} element through appropriate remedies.")
    if counts[strongest] > 2:
        recommendations.append(f"Balance excess {strongest.value} energy to avoid imbalance.")

    strengths = [f"{e.value} ({c:g} points)" for e, c in counts.items() if c >= 2]
    weaknesses = [f"{e.value} ({c:g} points)" for e, c in counts.items() if c < 1]

    return ElementAnalysis(
        summary=f"Your chart shows {strongest.value} as the dominant element with "
                f"{weakest.value} being the weakest.",
        recommendations=recommendations,
        strengths=strengths,
        weaknesses=weaknesses,
    )


def analyze(chart: FourPillarsChart) -> ElementBalance:
    """
    Full Five Elements analysis of a chart.

    The counts always total 6.0: four stems at 1.0 plus four branches at 0.5.
    """
    counts = count_elements(chart)
    strongest = strongest_element(counts)
    weakest = weakest_element(counts)
    return ElementBalance(
        counts=counts,
        strongest=strongest,
        weakest=weakest,
        balance=assess_balance(counts),
        relationships=element_relationships(counts),
        analysis=_analysis(counts, strongest, weakest),
    )


# ============================================================
# COMPATIBILITY AND REMEDIES
# ============================================================

def compatibility_score(e1: Element, e2: Element) -> float:
    """
    Directional compatibility of e1 towards e2.

    1.0 same, 0.8 e1 feeds e2, 0.6 e2 feeds e1,
    -0.5 e1 restrains e2, -0.7 e2 restrains e1, 0 otherwise.
    """
    if e1 == e2:
        return 1.0
    if generates(e1, e2):
        return 0.8
    if generates(e2, e1):
        return 0.6
    if controls(e1, e2):
        return -0.5
    if controls(e2, e1):
        return -0.7
    return 0.0


def relationship_kind(e1: Element, e2: Element) -> str:
    """'generative', 'controlling' or 'neutral' between two elements, either direction."""
    if generates(e1, e2) or generates(e2, e1):
        return "generative"
    if controls(e1, e2) or controls(e2, e1):
        return "controlling"
    return "neutral"


def suggest_remedies(balance: ElementBalance) -> list[str]:
    """Colors, materials and directions that strengthen the weakest element."""
    return list(REMEDIES.get(balance.weakest, []))
