"""
Chinese zodiac animal sign compatibility.

Handles:
- Triangle (San He) group compatibility, with a bonus for adjacent members
- Polar opposite (Liu Chong) attraction
- Secret friend (Liu He) bonds
- Element, polarity and direction factors
- Weighted combination with a traditional-bias blend, clamped to [1, 10]
- An engine with a bounded result cache, optional 12x12 matrix,
  per-sign trends and statistics

Every factor is symmetric in its two signs, so score(A, B) == score(B, A).
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from chinese_astro.cache import BoundedCache
from chinese_astro.errors import CalculationError, ChineseAstrologyError, ValidationError
from chinese_astro.five_elements import compatibility_score
from chinese_astro.observability import MetricsSink, NullMetrics
from chinese_astro.settings import CachePolicy
from chinese_astro.stems_branches import (
    POLAR_OPPOSITES, SECRET_FRIENDS, SIGN_BY_NAME, TRIANGLE_GROUPS, ZODIAC_SIGNS,
    Element, Polarity, sign_meta,
)

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5.5
TRIANGLE_ALLY_SCORE = 8.0
TRIANGLE_ADJACENT_BONUS = 1.0
TRIANGLE_NEUTRAL_SCORE = 6.5
POLAR_OPPOSITE_SCORE = 7.5
SECRET_FRIEND_SCORE = 8.5
ELEMENT_BONUS = 0.5

TRADITIONAL_BIAS = 7.0
BIAS_BLEND = 0.15

MIN_SCORE = 1.0
MAX_SCORE = 10.0

DEFAULT_WEIGHTS = {
    "triangle": 2.0,
    "polar": 1.5,
    "secret_friend": 1.8,
    "element": 1.3,
    "polarity": 0.8,
    "direction": 0.6,
}

# Analysis bands on the final score
EXCELLENT_THRESHOLD = 8.5
GOOD_THRESHOLD = 7.5
MODERATE_THRESHOLD = 6.5

SIGN_NAMES = [s.name for s in ZODIAC_SIGNS]


# ============================================================
# VALIDATION
# ============================================================

def normalize_sign(sign) -> str:
    """'rAT' -> 'Rat'. Raises ValidationError on non-strings and unknown signs."""
    if not isinstance(sign, str) or not sign.strip():
        raise ValidationError("sign", f"expected a non-empty string, got {sign!r}", kind="type")
    name = sign.strip().capitalize()
    if name not in SIGN_BY_NAME:
        raise ValidationError("sign", f"unknown zodiac sign {sign!r}", kind="sign")
    return name


def validate_signs(sign1, sign2) -> tuple[str, str]:
    a, b = normalize_sign(sign1), normalize_sign(sign2)
    if a == b:
        raise ValidationError("sign2", f"compatibility needs two different signs, got {a} twice", kind="sign")
    return a, b


# ============================================================
# FACTORS
# ============================================================

@dataclass(frozen=True)
class TriangleAnalysis:
    compatibility: float
    relationship: str  # triangle_adjacent / triangle_ally / triangle_neutral
    triangle1: int
    triangle2: int
    explanation: str


@dataclass(frozen=True)
class PolarAnalysis:
    compatibility: float
    relationship: str  # polar_opposite / non_polar
    attraction: str
    explanation: str


@dataclass(frozen=True)
class SecretFriendAnalysis:
    compatibility: float
    relationship: str  # secret_friend / neutral
    friendship: str
    explanation: str


def clamp_score(score: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def mutual_element_score(e1: Element, e2: Element) -> float:
    """Both directions of the element relationship summed, so it is order independent."""
    return compatibility_score(e1, e2) + compatibility_score(e2, e1)


def analyze_triangle_compatibility(sign1: str, sign2: str) -> TriangleAnalysis:
    m1, m2 = sign_meta(sign1), sign_meta(sign2)

    if m1.triangle_group == m2.triangle_group:
        group = TRIANGLE_GROUPS[m1.triangle_group]
        if abs(group.index(sign1) - group.index(sign2)) == 1:
            return TriangleAnalysis(
                TRIANGLE_ALLY_SCORE + TRIANGLE_ADJACENT_BONUS, "triangle_adjacent",
                m1.triangle_group, m2.triangle_group,
                f"{sign1} and {sign2} are adjacent in their triangle, suggesting excellent "
                f"harmony and complementary energies.",
            )
        return TriangleAnalysis(
            TRIANGLE_ALLY_SCORE, "triangle_ally", m1.triangle_group, m2.triangle_group,
            f"{sign1} and {sign2} share the same triangle group, indicating natural "
            f"compatibility and mutual understanding.",
        )

    return TriangleAnalysis(
        TRIANGLE_NEUTRAL_SCORE, "triangle_neutral", m1.triangle_group, m2.triangle_group,
        f"{sign1} and {sign2} belong to different triangles, requiring effort to understand "
        f"each other's perspectives.",
    )


def analyze_polar_compatibility(sign1: str, sign2: str) -> PolarAnalysis:
    if POLAR_OPPOSITES.get(sign1) != sign2:
        return PolarAnalysis(
            NEUTRAL_SCORE, "non_polar", "neutral",
            f"{sign1} and {sign2} are not polar opposites, so their relationship follows "
            f"different compatibility patterns.",
        )

    score, attraction = POLAR_OPPOSITE_SCORE, "strong"
    if mutual_element_score(sign_meta(sign1).element, sign_meta(sign2).element) > 1.0:
        score += ELEMENT_BONUS
        attraction = "very_strong"
    text = "very strong magnetic attraction" if attraction == "very_strong" else "strong magnetic attraction"
    return PolarAnalysis(
        clamp_score(score), "polar_opposite", attraction,
        f"{sign1} and {sign2} are polar opposites, creating {text} but also potential "
        f"challenges that can lead to growth.",
    )


def analyze_secret_friend_compatibility(sign1: str, sign2: str) -> SecretFriendAnalysis:
    if SECRET_FRIENDS.get(sign1) != sign2:
        return SecretFriendAnalysis(
            NEUTRAL_SCORE, "neutral", "casual",
            f"{sign1} and {sign2} are not secret friends, though they may still develop "
            f"strong relationships through other compatibility factors.",
        )

    score, friendship = SECRET_FRIEND_SCORE, "deep"
    if mutual_element_score(sign_meta(sign1).element, sign_meta(sign2).element) >= 1.1:
        score += ELEMENT_BONUS
        friendship = "very_deep"
    depth = "very deep and profound" if friendship == "very_deep" else "deep and meaningful"
    return SecretFriendAnalysis(
        clamp_score(score), "secret_friend", friendship,
        f"{sign1} and {sign2} are secret friends, sharing a {depth} bond that may not be "
        f"immediately apparent but grows stronger over time.",
    )


def element_factor(e1: Element, e2: Element) -> float:
    """Element compatibility averaged over both directions, scaled by 10. Can be negative."""
    return mutual_element_score(e1, e2) / 2 * 10


def polarity_compatibility(p1: Polarity, p2: Polarity) -> float:
    # Yin and Yang complement each other
    return 8.0 if p1 != p2 else 6.0


def direction_compatibility(d1: float, d2: float) -> float:
    diff = abs(d1 - d2) % 360
    diff = min(diff, 360 - diff)
    return 10 - diff / 180 * 5


def weighted_score(scores: dict, weights: dict) -> float:
    total_weight = sum(weights[name] for name in scores)
    if total_weight <= 0:
        raise CalculationError("weighted_score", "weights must sum to a positive value")
    return sum(scores[name] * weights[name] for name in scores) / total_weight


def apply_traditional_bias(score: float) -> float:
    return (1 - BIAS_BLEND) * score + BIAS_BLEND * TRADITIONAL_BIAS


# ============================================================
# RESULT
# ============================================================

@dataclass(frozen=True)
class FactorScore:
    score: float
    weight: float
    relationship: str = ""
    explanation: str = ""

    def to_dict(self):
        d = {"score": round(self.score, 4), "weight": self.weight}
        if self.relationship:
            d["relationship"] = self.relationship
        if self.explanation:
            d["explanation"] = self.explanation
        return d


@dataclass(frozen=True)
class CompatibilityAnalysis:
    summary: str
    strengths: list[str] = field(default_factory=list)
    challenges: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    long_term_potential: str = ""

    def to_dict(self):
        return {
            "summary": self.summary,
            "strengths": list(self.strengths),
            "challenges": list(self.challenges),
            "recommendations": list(self.recommendations),
            "long_term_potential": self.long_term_potential,
        }


@dataclass(frozen=True)
class CompatibilityResult:
    sign1: str
    sign2: str
    overall_score: float
    relationship_type: str
    breakdown: dict  # factor name -> FactorScore
    analysis: CompatibilityAnalysis
    base_score: float
    source: str = "calculated"

    @property
    def score(self) -> float:
        return self.overall_score

    def to_dict(self):
        return {
            "sign1": self.sign1,
            "sign2": self.sign2,
            "overall_score": self.overall_score,
            "relationship_type": self.relationship_type,
            "breakdown": {k: v.to_dict() for k, v in self.breakdown.items()},
            "analysis": self.analysis.to_dict(),
            "base_score": round(self.base_score, 4),
            "source": self.source,
        }


def determine_relationship_type(triangle: TriangleAnalysis, polar: PolarAnalysis,
                                secret_friend: SecretFriendAnalysis) -> str:
    """Priority: secret friend > triangle (ally or adjacent) > polar opposite > neutral."""
    if secret_friend.relationship == "secret_friend":
        return "secret_friend"
    if triangle.relationship != "triangle_neutral":
        return triangle.relationship
    if polar.relationship == "polar_opposite":
        return "polar_opposite"
    return "neutral"


def compatibility_analysis(sign1: str, sign2: str, score: float, relationship_type: str) -> CompatibilityAnalysis:
    strengths, challenges, recommendations = [], [], []

    if score >= EXCELLENT_THRESHOLD:
        summary = f"{sign1} and {sign2} have excellent compatibility with strong natural harmony."
        strengths.append("Natural understanding and mutual respect")
        potential = "High potential for long-term success"
    elif score >= GOOD_THRESHOLD:
        summary = f"{sign1} and {sign2} have good compatibility with complementary energies."
        strengths.append("Complementary strengths and perspectives")
        potential = "Good potential with mutual effort"
    elif score >= MODERATE_THRESHOLD:
        summary = f"{sign1} and {sign2} have moderate compatibility requiring understanding."
        challenges.append("May need to work on communication")
        potential = "Moderate potential with compromise"
    else:
        summary = f"{sign1} and {sign2} have challenging compatibility requiring significant effort."
        challenges.append("Fundamental differences in approach")
        potential = "Challenging but possible with dedication"

    if relationship_type == "secret_friend":
        strengths.append("Deep, unspoken understanding")
        recommendations.append("Allow relationship to develop naturally")
    elif relationship_type in ("triangle_ally", "triangle_adjacent"):
        strengths.append("Shared values and goals")
        recommendations.append("Leverage complementary skills")
    elif relationship_type == "polar_opposite":
        strengths.append("Exciting attraction and growth opportunities")
        challenges.append("Potential for conflict and misunderstanding")
        recommendations.append("Practice patience and communication")

    return CompatibilityAnalysis(summary, strengths, challenges, recommendations, potential)


def calculate_comprehensive_compatibility(sign1, sign2, include_polarity_direction: bool = False,
                                          weights: Optional[dict] = None) -> CompatibilityResult:
    """
    Full compatibility between two different signs.

    Args:
        sign1, sign2: animal names, any case
        include_polarity_direction: add the polarity and direction factors
        weights: overrides for DEFAULT_WEIGHTS (partial dicts are fine)
    """
    a, b = validate_signs(sign1, sign2)
    w = dict(DEFAULT_WEIGHTS)
    if weights:
        unknown = set(weights) - set(DEFAULT_WEIGHTS)
        if unknown:
            raise ValidationError("weights", f"unknown factors {sorted(unknown)}", kind="range")
        w.update(weights)

    m1, m2 = sign_meta(a), sign_meta(b)
    triangle = analyze_triangle_compatibility(a, b)
    polar = analyze_polar_compatibility(a, b)
    secret = analyze_secret_friend_compatibility(a, b)

    breakdown = {
        "triangle": FactorScore(triangle.compatibility, w["triangle"], triangle.relationship, triangle.explanation),
        "polar": FactorScore(polar.compatibility, w["polar"], polar.relationship, polar.explanation),
        "secret_friend": FactorScore(secret.compatibility, w["secret_friend"], secret.relationship,
                                     secret.explanation),
        "element": FactorScore(element_factor(m1.element, m2.element), w["element"],
                               f"{m1.element.value}-{m2.element.value}"),
    }
    if include_polarity_direction:
        breakdown["polarity"] = FactorScore(polarity_compatibility(m1.polarity, m2.polarity), w["polarity"],
                                            f"{m1.polarity.value}-{m2.polarity.value}")
        breakdown["direction"] = FactorScore(direction_compatibility(m1.direction, m2.direction),
                                             w["direction"], f"{m1.direction}-{m2.direction}")

    base = weighted_score({k: f.score for k, f in breakdown.items()}, w)
    final = round(clamp_score(apply_traditional_bias(base)), 2)
    relationship_type = determine_relationship_type(triangle, polar, secret)

    return CompatibilityResult(
        sign1=a,
        sign2=b,
        overall_score=final,
        relationship_type=relationship_type,
        breakdown=breakdown,
        analysis=compatibility_analysis(a, b, final, relationship_type),
        base_score=base,
    )


# ============================================================
# ENGINE
# ============================================================

@dataclass(frozen=True)
class CompatibilityTrends:
    sign: str
    best_matches: list[str]
    challenging_matches: list[str]
    average_score: float
    distribution: dict

    def to_dict(self):
        return {
            "sign": self.sign,
            "best_matches": list(self.best_matches),
            "challenging_matches": list(self.challenging_matches),
            "average_score": self.average_score,
            "distribution": dict(self.distribution),
        }


class ZodiacCompatibilityEngine:
    """
    Compatibility calculations with a per-instance bounded cache.

    With use_matrix=True the full 12x12 matrix (diagonal excluded) is
    computed up front and served until force_calculation is requested.
    """

    def __init__(self, cache_policy: Optional[CachePolicy] = None, use_matrix: bool = False,
                 weights: Optional[dict] = None, logger: Optional[logging.Logger] = None,
                 metrics: Optional[MetricsSink] = None):
        self.custom_weights = dict(weights or {})
        self.cache = BoundedCache(cache_policy or CachePolicy(max_entries=144))
        self.logger = logger or logging.getLogger(__name__)
        self.metrics = metrics or NullMetrics()
        self.calculations = 0
        self.matrix = self.generate_compatibility_matrix() if use_matrix else None

    @staticmethod
    def cache_key(sign1: str, sign2: str, include_polarity_direction: bool = False) -> str:
        key = f"{sign1}-{sign2}"
        return f"{key}+polarity-direction" if include_polarity_direction else key

    def _calculate(self, sign1: str, sign2: str, include_polarity_direction: bool) -> CompatibilityResult:
        self.calculations += 1
        return calculate_comprehensive_compatibility(
            sign1, sign2, include_polarity_direction, self.custom_weights or None)

    def calculate_compatibility(self, sign1, sign2, *, skip_cache: bool = False,
                                force_calculation: bool = False,
                                include_polarity_direction: bool = False) -> CompatibilityResult:
        a, b = validate_signs(sign1, sign2)
        key = self.cache_key(a, b, include_polarity_direction)

        if not skip_cache:
            hit = self.cache.get(key)
            if hit is not None:
                self.metrics.increment("compatibility_cache_hit")
                return hit
            self.metrics.increment("compatibility_cache_miss")

        try:
            if self.matrix is not None and not force_calculation and not include_polarity_direction:
                result = replace(self.matrix[a][b], source="matrix")
            else:
                result = self._calculate(a, b, include_polarity_direction)
        except ChineseAstrologyError:
            raise
        except Exception as exc:
            self.logger.exception("Compatibility calculation failed for %s", key)
            raise CalculationError("calculate_compatibility", f"{key}: {exc}") from exc

        self.cache.set(key, result)
        self.metrics.increment("compatibility_calculations")
        self.logger.debug("Compatibility %s = %.2f (%s)", key, result.overall_score, result.source)
        return result

    def get_compatibility_trends(self, sign) -> CompatibilityTrends:
        name = normalize_sign(sign)
        best, challenging, scores = [], [], []

        for other in SIGN_NAMES:
            if other == name:
                continue
            score = self.calculate_compatibility(name, other).overall_score
            scores.append(score)
            if score >= GOOD_THRESHOLD:
                best.append(other)
            elif score <= MODERATE_THRESHOLD:
                challenging.append(other)

        distribution = {
            "excellent": sum(1 for s in scores if s >= EXCELLENT_THRESHOLD),
            "good": sum(1 for s in scores if GOOD_THRESHOLD <= s < EXCELLENT_THRESHOLD),
            "moderate": sum(1 for s in scores if MODERATE_THRESHOLD <= s < GOOD_THRESHOLD),
            "challenging": sum(1 for s in scores if s < MODERATE_THRESHOLD),
        }
        return CompatibilityTrends(name, best, challenging, round(sum(scores) / len(scores), 4), distribution)

    def generate_compatibility_matrix(self) -> dict:
        """{sign1: {sign2: CompatibilityResult}} for every ordered pair of different signs."""
        return {
            a: {b: self._calculate(a, b, False) for b in SIGN_NAMES if b != a}
            for a in SIGN_NAMES
        }

    def clear_cache(self) -> None:
        self.cache.clear()

    def statistics(self) -> dict:
        return {
            "cache": self.cache.stats(),
            "calculations_performed": self.calculations,
            "matrix_enabled": self.matrix is not None,
            "custom_weights": bool(self.custom_weights),
        }
