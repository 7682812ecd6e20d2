"""
Error taxonomy for the Chinese astrology engine.

- ValidationError: bad input, raised before any calculation runs
- CalculationError: an internal fault inside a calculator (e.g. a table miss)
- StateError: the engine is asked to do something it is not ready for
  (no chart loaded, no solar term available)

Everything derives from ChineseAstrologyError so callers can catch the
whole family in one place.
"""


class ChineseAstrologyError(Exception):
    """Base class. Carries a machine-readable code and a details dict."""

    code = "CHINESE_ASTROLOGY_ERROR"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(ChineseAstrologyError):
    """
    Invalid input.

    kind is one of:
        "required" - a mandatory field is missing
        "type"     - a field has the wrong type
        "range"    - a field is outside its allowed range
        "date"     - the date components are inconsistent (e.g. Feb 30)
        "sign"     - an unknown, malformed or identical zodiac sign
    """

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str, kind: str = "range"):
        super().__init__(
            f"Validation failed for field '{field}': {reason}",
            {"field": field, "reason": reason, "kind": kind},
        )
        self.field = field
        self.reason = reason
        self.kind = kind


class CalculationError(ChineseAstrologyError):
    """Unexpected failure inside a calculator."""

    code = "CALCULATION_ERROR"

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Calculation failed for '{operation}': {reason}",
            {"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason


class StateError(ChineseAstrologyError):
    code = "STATE_ERROR"


class ChartNotSetError(StateError):
    code = "CHART_NOT_SET"

    def __init__(self, message: str = "Ba-Zi chart not available. Generate or set a chart first."):
        super().__init__(message)


class SolarTermNotFoundError(StateError):
    code = "SOLAR_TERM_NOT_FOUND"

    def __init__(self, when: str):
        super().__init__(f"No solar term found for {when}", {"when": when})
