"""
Fuelling state of a starbase, and the classifier that assigns it.
"""

from __future__ import annotations

from enum import Enum

from ..core.run_config import FuelThresholds


class FuelState(str, Enum):
    """
    Discrete fuelling state, ordered by increasing urgency.

    UNKNOWN only ever appears as the previous state of a starbase with no
    persisted record; classification never produces it.
    """

    UNKNOWN = "unknown"
    GOOD = "good"
    WARNING = "warning"
    DANGER = "danger"

    @classmethod
    def parse(cls, value: str | None) -> FuelState:
        """Parse a persisted label, treating anything unrecognised as UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def severity(self) -> int:
        return _SEVERITY_ORDER[self]

    def __str__(self) -> str:
        return self.value


_SEVERITY_ORDER: dict[FuelState, int] = {
    FuelState.UNKNOWN: 0,
    FuelState.GOOD: 1,
    FuelState.WARNING: 2,
    FuelState.DANGER: 3,
}


def classify(days_remaining: float, thresholds: FuelThresholds) -> FuelState:
    """
    Translate days of fuel left into a fuelling state.

    Both boundaries are inclusive: exactly danger_days is DANGER, exactly
    warning_days is WARNING.

    Args:
        days_remaining: Fuel left in (fractional) days
        thresholds: Configured danger/warning breakpoints

    Returns:
        DANGER, WARNING or GOOD (never UNKNOWN)

    Examples:
        >>> classify(1.0, FuelThresholds(danger_days=3, warning_days=7))
        <FuelState.DANGER: 'danger'>
        >>> classify(7.0, FuelThresholds(danger_days=3, warning_days=7))
        <FuelState.WARNING: 'warning'>
    """
    if days_remaining <= thresholds.danger_days:
        return FuelState.DANGER
    if days_remaining <= thresholds.warning_days:
        return FuelState.WARNING
    return FuelState.GOOD
