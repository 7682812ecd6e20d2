"""
Chinese horoscope generation over daily, weekly, monthly and yearly periods.

Handles:
- The shared prediction core: overall score, rating, key influences,
  six category predictions, challenges, remedies and confidence
- Daily enrichment: day element, lunar mansion, auspicious/challenging hours
- Weekly enrichment: per-day lunar snapshots, peak and challenging days
- Monthly enrichment: new/full moon scan, dominant mansion, solar terms,
  elemental shifts, auspicious dates and challenging periods
- Yearly enrichment: year animal and element, Chinese New Year estimate,
  major events, life areas and yearly remedies

Every function here is pure: the same chart and dates give the same result.
The timeframes share one core and differ only by the details they attach.
"""

from dataclasses import dataclass, fields, is_dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional, Union

from chinese_astro.astro_calendar import DateLike, as_datetime, month_dates
from chinese_astro.astronomy import (
    LunarData, SolarTerm, current_solar_term, lunar_data, solar_terms, solar_terms_between,
)
from chinese_astro.bazi import FourPillarsChart
from chinese_astro.errors import ValidationError
from chinese_astro.five_elements import (
    ElementBalance, analyze, compatibility_score, relationship_kind, suggest_remedies,
)
from chinese_astro.stems_branches import ANIMALS, CONTROL_CYCLE, Element, controls, generates

PERIOD_TYPES = ("daily", "weekly", "monthly", "yearly")

CATEGORIES = ["wealth", "career", "health", "relationships", "family", "spiritual"]

# Element order used for the day element and the year element
ELEMENT_ORDER = list(Element)

LUNAR_PHASE_WEIGHTS = {
    "New Moon": 0.6,
    "Waxing Crescent": 0.7,
    "First Quarter": 0.8,
    "Waxing Gibbous": 0.9,
    "Full Moon": 1.0,
    "Waning Gibbous": 0.8,
    "Last Quarter": 0.6,
    "Waning Crescent": 0.4,
}
DEFAULT_PHASE_WEIGHT = 0.5
NEUTRAL_ANIMAL_SCORE = 0.5

LUNAR_WEIGHT = 0.3
ELEMENTAL_WEIGHT = 0.4
ANIMAL_WEIGHT = 0.3

RATING_THRESHOLDS = [
    (0.8, "Excellent"),
    (0.7, "Very Good"),
    (0.6, "Good"),
    (0.5, "Fair"),
    (0.4, "Challenging"),
]
LOWEST_RATING = "Difficult"

CATEGORY_ELEMENTS = {
    "wealth": [Element.EARTH, Element.METAL],
    "career": [Element.FIRE, Element.WOOD],
    "health": [Element.EARTH, Element.WATER],
    "relationships": [Element.FIRE, Element.WOOD],
    "family": [Element.EARTH, Element.WATER],
    "spiritual": [Element.WATER, Element.WOOD],
}

CATEGORY_TEXT = {
    "wealth": {
        "high": "Excellent prospects for financial growth and material abundance.",
        "medium": "Good financial stability with opportunities for moderate gains.",
        "low": "Financial caution advised, focus on conservation and planning.",
    },
    "career": {
        "high": "Strong career advancement and professional recognition possible.",
        "medium": "Steady career progress with good productivity.",
        "low": "Career challenges, maintain patience and focus on fundamentals.",
    },
    "health": {
        "high": "Good health and vitality throughout the period.",
        "medium": "Generally good health with minor concerns to address.",
        "low": "Health needs attention, prioritize rest and wellness practices.",
    },
    "relationships": {
        "high": "Harmonious relationships and good social connections.",
        "medium": "Generally positive interactions with others.",
        "low": "Relationship challenges, focus on communication and understanding.",
    },
    "family": {
        "high": "Harmonious family relationships and emotional well-being.",
        "medium": "Generally good family interactions.",
        "low": "Family matters need attention and patience.",
    },
    "spiritual": {
        "high": "Excellent for spiritual growth and inner peace.",
        "medium": "Good for spiritual practices and reflection.",
        "low": "Spiritual challenges, maintain faith and practice.",
    },
}

SUMMARY_TEMPLATES = {
    "daily": {
        "Excellent": "A highly favorable day with excellent elemental harmony and positive animal sign influences.",
        "Very Good": "A positive day with good elemental balance and supportive lunar energies.",
        "Good": "A generally positive day with balanced elements and manageable animal sign influences.",
        "Fair": "A mixed day with some elemental imbalances and varying animal sign compatibility.",
        "Challenging": "A challenging day requiring attention to elemental balance and animal sign conflicts.",
        "Difficult": "A difficult day with significant elemental disharmony and conflicting animal energies.",
    },
    "weekly": {
        "Excellent": "An outstanding week with excellent elemental harmony and lunar support.",
        "Very Good": "A very positive week with good elemental balance and favorable lunar energies.",
        "Good": "A generally good week with balanced elements and supportive lunar influences.",
        "Fair": "A mixed week with some elemental imbalances and varying lunar conditions.",
        "Challenging": "A challenging week requiring attention to elemental balance and lunar cycles.",
        "Difficult": "A difficult week with significant elemental disharmony and conflicting lunar energies.",
    },
    "monthly": {
        "Excellent": "An exceptional month with outstanding elemental harmony and lunar support.",
        "Very Good": "A very favorable month with excellent elemental balance and lunar energies.",
        "Good": "A good month with positive elemental developments and supportive lunar influences.",
        "Fair": "A mixed month with some elemental imbalances and varying lunar conditions.",
        "Challenging": "A challenging month requiring attention to elemental balance and lunar cycles.",
        "Difficult": "A difficult month with significant elemental disharmony and conflicting lunar energies.",
    },
    "yearly": {
        "Excellent": "An exceptional year with outstanding elemental harmony and animal sign support.",
        "Very Good": "A very favorable year with excellent elemental balance and positive influences.",
        "Good": "A good year with positive elemental developments and supportive energies.",
        "Fair": "A mixed year with some elemental imbalances and varying influences.",
        "Challenging": "A challenging year requiring attention to elemental balance and personal growth.",
        "Difficult": "A difficult year with significant elemental disharmony and challenging energies.",
    },
}


# ============================================================
# SERIALIZATION
# ============================================================

def _plain(value):
    """Recursively turn dataclasses, enums and dates into JSON-friendly values."""
    if hasattr(value, "to_dict") and not isinstance(value, type):
        return value.to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {(k.value if isinstance(k, Enum) else k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


# ============================================================
# VALUE OBJECTS
# ============================================================

@dataclass(frozen=True)
class AnimalInfluence:
    primary: str
    compatibility: float


@dataclass(frozen=True)
class KeyInfluence:
    type: str
    factor: str
    impact: str


@dataclass(frozen=True)
class OverallPrediction:
    score: float
    rating: str
    summary: str
    key_influences: list[KeyInfluence]


@dataclass(frozen=True)
class CategoryPrediction:
    score: float
    rating: str
    prediction: str
    advice: str


@dataclass(frozen=True)
class Period:
    name: str
    start: datetime
    end: datetime
    significance: str


@dataclass(frozen=True)
class Challenge:
    type: str
    description: str
    severity: str  # low / medium / high


@dataclass(frozen=True)
class Predictions:
    overall: OverallPrediction
    categories: dict  # category -> CategoryPrediction
    auspicious_periods: list[Period]
    challenges: list[Challenge]
    remedies: list[str]


@dataclass(frozen=True)
class HoroscopeCore:
    period_type: str
    start: datetime
    end: datetime
    animal_sign: str
    predictions: Predictions
    lunar: LunarData
    balance: ElementBalance
    confidence: float


@dataclass(frozen=True)
class HourWindow:
    name: str
    start: int
    end: int
    significance: str


@dataclass(frozen=True)
class DailyDetails:
    lunar_phase: str
    solar_term: SolarTerm
    lunar_mansion: int
    day_element: Element
    auspicious_hours: list[HourWindow]
    challenging_hours: list[HourWindow]


@dataclass(frozen=True)
class DaySnapshot:
    date: date
    phase: str
    mansion: int
    element: Element
    score: float


@dataclass(frozen=True)
class DayNote:
    date: date
    score: float
    reason: str


@dataclass(frozen=True)
class ActivityRecommendation:
    timing: str
    activities: list[str]
    reason: str


@dataclass(frozen=True)
class WeeklyDetails:
    days: list[DaySnapshot]
    peak_days: list[DayNote]
    challenging_days: list[DayNote]
    best_activities: list[ActivityRecommendation]


@dataclass(frozen=True)
class PhaseEvent:
    date: date
    phase: str
    significance: str


@dataclass(frozen=True)
class ElementShift:
    date: date
    from_element: Element
    to_element: Element
    relationship: str  # generative / controlling / neutral
    significance: str


@dataclass(frozen=True)
class MonthlyDetails:
    new_moon: Optional[date]
    full_moon: Optional[date]
    dominant_mansion: int
    solar_terms: list[SolarTerm]
    lunar_phases: list[PhaseEvent]
    elemental_shifts: list[ElementShift]
    auspicious_dates: list[DayNote]
    challenging_periods: list[DayNote]


@dataclass(frozen=True)
class YearEvent:
    type: str
    significance: str
    timing: str


@dataclass(frozen=True)
class LifeAreaInfluence:
    score: float
    rating: str
    description: str


@dataclass(frozen=True)
class YearlyRemedy:
    type: str
    description: str
    suggestion: str
    priority: str


@dataclass(frozen=True)
class YearlyDetails:
    year_animal: str
    year_element: Element
    chinese_new_year: date
    lunar_cycles: int
    solar_terms: list[SolarTerm]
    major_events: list[YearEvent]
    life_areas: dict  # category -> LifeAreaInfluence
    remedies: list[YearlyRemedy]


Details = Union[DailyDetails, WeeklyDetails, MonthlyDetails, YearlyDetails]


@dataclass(frozen=True)
class HoroscopePeriod:
    """A core prediction plus the details of exactly one timeframe."""
    core: HoroscopeCore
    details: Details

    @property
    def type(self) -> str:
        return self.core.period_type

    @property
    def predictions(self) -> Predictions:
        return self.core.predictions

    @property
    def confidence(self) -> float:
        return self.core.confidence

    def to_dict(self):
        core = self.core
        return {
            "type": core.period_type,
            "date_range": {"start": core.start.isoformat(), "end": core.end.isoformat()},
            "animal_sign": core.animal_sign,
            "predictions": _plain(core.predictions),
            "lunar_data": core.lunar.to_dict(),
            "elemental_balance": core.balance.to_dict(),
            "confidence": core.confidence,
            core.period_type: _plain(self.details),
        }


# ============================================================
# SHARED SCORING
# ============================================================

def lunar_phase_weight(phase: str) -> float:
    return LUNAR_PHASE_WEIGHTS.get(phase, DEFAULT_PHASE_WEIGHT)


def rating_from_score(score: float) -> str:
    """Step function; each threshold belongs to the higher tier."""
    for threshold, rating in RATING_THRESHOLDS:
        if score >= threshold:
            return rating
    return LOWEST_RATING


def text_tier(score: float) -> str:
    if score >= 0.7:
        return "high"
    if score >= 0.5:
        return "medium"
    return "low"


def animal_score(animal: str) -> float:
    """Placeholder affinity of the year animal: position in the cycle / 12."""
    return (ANIMALS.index(animal) + 1) / 12


def animal_influence(chart: FourPillarsChart) -> AnimalInfluence:
    animal = chart.year.animal
    return AnimalInfluence(primary=animal, compatibility=animal_score(animal))


def overall_score(phase: str, balance: ElementBalance, animal: float = NEUTRAL_ANIMAL_SCORE) -> float:
    total = (lunar_phase_weight(phase) * LUNAR_WEIGHT
             + compatibility_score(balance.strongest, balance.strongest) * ELEMENTAL_WEIGHT
             + animal * ANIMAL_WEIGHT)
    return total / (LUNAR_WEIGHT + ELEMENTAL_WEIGHT + ANIMAL_WEIGHT)


def key_influences(lunar: LunarData, balance: ElementBalance, animal: AnimalInfluence) -> list[KeyInfluence]:
    return [
        KeyInfluence("lunar", lunar.phase,
                     "positive" if lunar_phase_weight(lunar.phase) > 0.7 else "neutral"),
        KeyInfluence("elemental", balance.strongest.value, "dominant"),
        KeyInfluence("animal", animal.primary,
                     "positive" if animal.compatibility > 0.7 else "neutral"),
    ]


def category_prediction(category: str, balance: ElementBalance) -> CategoryPrediction:
    relevant = CATEGORY_ELEMENTS[category]
    score = sum(balance.count(e) for e in relevant) / len(relevant)
    tier = text_tier(score)
    if tier == "high":
        advice = f"Take advantage of favorable {category} energies."
    elif tier == "medium":
        advice = f"Maintain balance in {category} matters."
    else:
        advice = f"Focus on strengthening {category} foundations."
    return CategoryPrediction(score, rating_from_score(score), CATEGORY_TEXT[category][tier], advice)


def base_challenges(balance: ElementBalance) -> list[Challenge]:
    if balance.balance == "Severely Unbalanced":
        return [Challenge("elemental", "Significant elemental disharmony", "high")]
    return []


def confidence(lunar: LunarData, balance: ElementBalance) -> float:
    value = 0.7
    if balance.balance == "Well Balanced":
        value += 0.1
    if lunar.illumination > 50:
        value += 0.1
    return min(round(value, 2), 1.0)


def horoscope_core(chart: FourPillarsChart, start: DateLike, end: DateLike, period_type: str,
                   auspicious_periods: Optional[list[Period]] = None,
                   extra_challenges: tuple = ()) -> HoroscopeCore:
    """
    The prediction shared by every timeframe.

    Lunar data is taken at the start of the period. Timeframes that know
    better auspicious periods or extra challenges pass them in.
    """
    if period_type not in PERIOD_TYPES:
        raise ValidationError("type", f"must be one of {PERIOD_TYPES}", kind="range")
    start = as_datetime(start)
    end = as_datetime(end)

    lunar = lunar_data(start)
    balance = analyze(chart)
    animal = animal_influence(chart)

    score = overall_score(lunar.phase, balance, animal.compatibility)
    rating = rating_from_score(score)
    overall = OverallPrediction(
        score=round(score, 4),
        rating=rating,
        summary=SUMMARY_TEMPLATES[period_type][rating],
        key_influences=key_influences(lunar, balance, animal),
    )

    if auspicious_periods is None:
        auspicious_periods = [Period("Harmonious Period", start, end, "Generally favorable energies")]

    predictions = Predictions(
        overall=overall,
        categories={c: category_prediction(c, balance) for c in CATEGORIES},
        auspicious_periods=auspicious_periods,
        challenges=base_challenges(balance) + list(extra_challenges),
        remedies=suggest_remedies(balance),
    )

    return HoroscopeCore(
        period_type=period_type,
        start=start,
        end=end,
        animal_sign=animal.primary,
        predictions=predictions,
        lunar=lunar,
        balance=balance,
        confidence=confidence(lunar, balance),
    )


def day_element(day: DateLike) -> Element:
    """Day element cycles Wood..Water with the day of the month."""
    return ELEMENT_ORDER[(as_datetime(day).day - 1) % 5]


def day_score(balance: ElementBalance, lunar: LunarData) -> float:
    """Score of a single day inside a longer period (neutral animal influence)."""
    return round(overall_score(lunar.phase, balance, NEUTRAL_ANIMAL_SCORE), 4)


def is_harmonious(element: Element, balance: ElementBalance) -> bool:
    return element == balance.strongest


# ============================================================
# DAILY
# ============================================================

AUSPICIOUS_HOURS = {
    Element.WATER: HourWindow("Zi Hour", 23, 1, "Rest and planning"),
    Element.FIRE: HourWindow("Wu Hour", 11, 13, "Action and energy"),
    Element.WOOD: HourWindow("Mao Hour", 5, 7, "Growth and development"),
    Element.EARTH: HourWindow("You Hour", 17, 19, "Stability and grounding"),
    Element.METAL: HourWindow("Shen Hour", 15, 17, "Focus and clarity"),
}

# Keyed by the element the day element restrains
CHALLENGING_HOURS = {
    Element.METAL: HourWindow("Conflicting Element Hour", 13, 15, "Avoid important decisions"),
    Element.WOOD: HourWindow("Challenging Element Hour", 7, 9, "Exercise caution"),
    Element.WATER: HourWindow("Unfavorable Element Hour", 19, 21, "Rest and reflect"),
    Element.FIRE: HourWindow("Conflicting Element Hour", 9, 11, "Avoid conflicts"),
    Element.EARTH: HourWindow("Challenging Element Hour", 21, 23, "Stay grounded"),
}


def auspicious_hours(day: DateLike) -> list[HourWindow]:
    window = AUSPICIOUS_HOURS.get(day_element(day))
    return [window] if window else []


def challenging_hours(day: DateLike) -> list[HourWindow]:
    window = CHALLENGING_HOURS.get(CONTROL_CYCLE[day_element(day)])
    return [window] if window else []


def _window_period(day: date, window: HourWindow) -> Period:
    start = datetime.combine(day, time(window.start))
    end = datetime.combine(day, time(window.end))
    if end <= start:
        end += timedelta(days=1)
    return Period(window.name, start, end, window.significance)


def daily_horoscope(chart: FourPillarsChart, day: DateLike, solar_term_method: str = "mean") -> HoroscopePeriod:
    day = as_datetime(day).date()
    start = datetime.combine(day, time.min)
    end = datetime.combine(day, time(23, 59, 59))

    element = day_element(day)
    balance = analyze(chart)
    lunar = lunar_data(start)

    challenges = []
    if balance.weakest == element:
        challenges.append(Challenge(
            "daily_element",
            f"Day element ({element.value}) conflicts with weakest personal element",
            "medium",
        ))
    if lunar.phase == "New Moon":
        challenges.append(Challenge("lunar_phase", "New Moon may bring uncertainty and new beginnings", "low"))

    good_hours = auspicious_hours(day)
    core = horoscope_core(
        chart, start, end, "daily",
        auspicious_periods=[_window_period(day, w) for w in good_hours],
        extra_challenges=tuple(challenges),
    )
    details = DailyDetails(
        lunar_phase=lunar.phase,
        solar_term=current_solar_term(start, solar_term_method),
        lunar_mansion=lunar.mansion,
        day_element=element,
        auspicious_hours=good_hours,
        challenging_hours=challenging_hours(day),
    )
    return HoroscopePeriod(core, details)


# ============================================================
# WEEKLY
# ============================================================

def _peak_reason(lunar: LunarData, element: Element, balance: ElementBalance) -> str:
    parts = []
    if lunar.phase == "Full Moon":
        parts.append("Full Moon energy for manifestation.")
    if is_harmonious(element, balance):
        parts.append(f"Harmonious {element.value} element influence.")
    return " ".join(parts) or "Favorable elemental and lunar alignment"


def _challenging_reason(lunar: LunarData, element: Element, balance: ElementBalance) -> str:
    parts = []
    if lunar.phase == "New Moon":
        parts.append("New Moon uncertainty.")
    if not is_harmonious(element, balance):
        parts.append(f"Conflicting {element.value} element energy.")
    return " ".join(parts) or "Unfavorable elemental and lunar conditions"


def weekly_horoscope(chart: FourPillarsChart, week_start: DateLike) -> HoroscopePeriod:
    """Seven days from week_start (normally a Sunday)."""
    first = as_datetime(week_start).date()
    days = [first + timedelta(days=i) for i in range(7)]
    balance = analyze(chart)

    snapshots, peak, challenging = [], [], []
    for day in days:
        lunar = lunar_data(day)
        element = day_element(day)
        score = day_score(balance, lunar)
        snapshots.append(DaySnapshot(day, lunar.phase, lunar.mansion, element, score))
        if score >= 0.8:
            peak.append(DayNote(day, score, _peak_reason(lunar, element, balance)))
        if score < 0.4:
            challenging.append(DayNote(day, score, _challenging_reason(lunar, element, balance)))

    activities = []
    if peak:
        activities.append(ActivityRecommendation(
            "Peak Days",
            ["Start new projects", "Make important decisions", "Social activities"],
            "High energy and favorable alignments",
        ))
    if any(s.phase == "Full Moon" for s in snapshots):
        activities.append(ActivityRecommendation(
            "Full Moon Period",
            ["Manifest intentions", "Complete projects", "Celebrate achievements"],
            "Peak lunar energy for completion and manifestation",
        ))

    core = horoscope_core(chart, datetime.combine(first, time.min),
                          datetime.combine(days[-1], time(23, 59, 59)), "weekly")
    return HoroscopePeriod(core, WeeklyDetails(snapshots, peak, challenging, activities))


# ============================================================
# MONTHLY
# ============================================================

PHASE_SIGNIFICANCE = {
    "New Moon": "New beginnings, setting intentions, planting seeds",
    "Full Moon": "Manifestation, completion, heightened emotions",
}


def shift_significance(from_element: Element, to_element: Element) -> str:
    if generates(from_element, to_element):
        return "Supportive energy flow - growth and development"
    if controls(from_element, to_element):
        return "Challenging energy - requires balance and adaptation"
    return "Neutral energy transition"


def elemental_shifts(days: list[date]) -> list[ElementShift]:
    shifts = []
    previous = None
    for day in days:
        current = day_element(day)
        if previous is not None and previous != current:
            shifts.append(ElementShift(
                day, previous, current,
                relationship_kind(previous, current),
                shift_significance(previous, current),
            ))
        previous = current
    return shifts


def monthly_horoscope(chart: FourPillarsChart, year: int, month: int,
                      solar_term_method: str = "mean") -> HoroscopePeriod:
    """
    Monthly horoscope. Each day of the month is evaluated once and
    independently; all day-level findings come from that single scan.
    """
    days = month_dates(year, month)
    balance = analyze(chart)
    lunar_by_day = [(day, lunar_data(day)) for day in days]

    new_moon = next((d for d, l in lunar_by_day if l.phase == "New Moon"), None)
    full_moon = next((d for d, l in lunar_by_day if l.phase == "Full Moon"), None)

    mansion_counts = [0] * 28
    for _, lunar in lunar_by_day:
        mansion_counts[lunar.mansion] += 1
    dominant_mansion = mansion_counts.index(max(mansion_counts))

    phases = [PhaseEvent(d, l.phase, PHASE_SIGNIFICANCE[l.phase])
              for d, l in lunar_by_day if l.phase in PHASE_SIGNIFICANCE]

    auspicious, challenging = [], []
    for day, lunar in lunar_by_day:
        element = day_element(day)
        score = day_score(balance, lunar)
        if score >= 0.7:
            parts = []
            if lunar.phase == "Waxing Gibbous":
                parts.append("Building lunar energy.")
            if is_harmonious(element, balance):
                parts.append(f"Harmonious {element.value} element.")
            auspicious.append(DayNote(day, score, " ".join(parts) or "Favorable elemental and lunar alignment"))
        if score < 0.5:
            parts = []
            if lunar.phase == "Waning Crescent":
                parts.append("Low lunar energy.")
            if not is_harmonious(element, balance):
                parts.append(f"Conflicting {element.value} element.")
            challenging.append(DayNote(day, score, " ".join(parts) or "Unfavorable elemental and lunar conditions"))

    details = MonthlyDetails(
        new_moon=new_moon,
        full_moon=full_moon,
        dominant_mansion=dominant_mansion,
        solar_terms=solar_terms_between(days[0], days[-1], solar_term_method),
        lunar_phases=phases,
        elemental_shifts=elemental_shifts(days),
        auspicious_dates=auspicious,
        challenging_periods=challenging,
    )
    core = horoscope_core(chart, datetime.combine(days[0], time.min),
                          datetime.combine(days[-1], time(23, 59, 59)), "monthly")
    return HoroscopePeriod(core, details)


# ============================================================
# YEARLY
# ============================================================

LIFE_AREA_ELEMENTS = {
    "wealth": {"strong": [Element.EARTH, Element.METAL], "weak": [Element.WOOD, Element.FIRE]},
    "career": {"strong": [Element.FIRE, Element.WOOD], "weak": [Element.WATER, Element.EARTH]},
    "health": {"strong": [Element.EARTH, Element.WATER], "weak": [Element.METAL, Element.WOOD]},
    "relationships": {"strong": [Element.FIRE, Element.WOOD], "weak": [Element.METAL, Element.WATER]},
    "family": {"strong": [Element.EARTH, Element.WATER], "weak": [Element.FIRE, Element.METAL]},
    "spiritual": {"strong": [Element.WATER, Element.WOOD], "weak": [Element.EARTH, Element.FIRE]},
}


def year_animal(year: int) -> str:
    return ANIMALS[(year - 4) % 12]


def year_element(year: int) -> Element:
    return ELEMENT_ORDER[(((year - 4) % 60) // 12) % 5]


def chinese_new_year(year: int) -> date:
    """Rough estimate: Jan 21, one day later in years divisible by 4."""
    return date(year, 1, 1) + timedelta(days=20 + (1 if year % 4 == 0 else 0))


def lunar_cycles(year: int) -> int:
    # Metonic approximation
    return 12 + (1 if year % 19 == 0 else 0)


def major_events(year: int) -> list[YearEvent]:
    element = year_element(year)
    animal = year_animal(year)
    events = []
    if element == Element.WOOD:
        events.append(YearEvent("Growth Period", "Year of expansion and new beginnings", "Throughout the year"))
    if element == Element.FIRE:
        events.append(YearEvent("Transformation Period", "Year of change and passion", "Throughout the year"))
    if year % 10 == 0:
        events.append(YearEvent("Chinese New Year", "Major transition and renewal",
                                chinese_new_year(year).isoformat()))
    events.append(YearEvent(f"{animal} Year Influence",
                            f"Characteristics of the {animal} will be prominent",
                            "Throughout the year"))
    return events


def life_area_influence(element: Element, area: str) -> LifeAreaInfluence:
    mapping = LIFE_AREA_ELEMENTS[area]
    if element in mapping["strong"]:
        score = 0.8
    elif element in mapping["weak"]:
        score = 0.3
    else:
        score = 0.5

    if score >= 0.7:
        description = f"Favorable year for {area} with strong elemental support."
    elif score >= 0.5:
        description = f"Balanced year for {area} with moderate elemental influence."
    else:
        description = f"Challenging year for {area} requiring attention to elemental balance."
    return LifeAreaInfluence(score, rating_from_score(score), description)


def yearly_remedies(year: int, balance: ElementBalance) -> list[YearlyRemedy]:
    element = year_element(year)
    personal = balance.strongest
    remedies = []
    if element != personal:
        if controls(element, personal):
            remedies.append(YearlyRemedy(
                "Elemental Balance",
                f"Year element {element.value} controls your personal element {personal.value}",
                f"Strengthen {personal.value} energy through corresponding colors and directions",
                "High",
            ))
        elif controls(personal, element):
            remedies.append(YearlyRemedy(
                "Elemental Harmony",
                f"Your personal element {personal.value} controls the year element {element.value}",
                "Leverage your natural advantage while maintaining balance",
                "Medium",
            ))
    remedies.append(YearlyRemedy(
        "Annual Feng Shui",
        "Optimize living and working spaces",
        "Consult Feng Shui principles for the year",
        "Medium",
    ))
    remedies.append(YearlyRemedy(
        "Charitable Activities",
        "Balance karma through giving",
        "Engage in charitable activities aligned with your element",
        "Low",
    ))
    return remedies


def yearly_horoscope(chart: FourPillarsChart, year: int, solar_term_method: str = "mean") -> HoroscopePeriod:
    balance = analyze(chart)
    element = year_element(year)
    details = YearlyDetails(
        year_animal=year_animal(year),
        year_element=element,
        chinese_new_year=chinese_new_year(year),
        lunar_cycles=lunar_cycles(year),
        solar_terms=solar_terms(year, solar_term_method),
        major_events=major_events(year),
        life_areas={area: life_area_influence(element, area) for area in CATEGORIES},
        remedies=yearly_remedies(year, balance),
    )
    core = horoscope_core(chart, datetime(year, 1, 1), datetime(year, 12, 31, 23, 59, 59), "yearly")
    return HoroscopePeriod(core, details)
