"""
Player Owned Starbase model.

A Starbase combines the corporation starbase list entry with its detail
record and a display name, and derives how long its fuel will last.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.run_config import FuelPolicy, FuelThresholds
from .fuel_state import FuelState, classify


class DataError(Exception):
    """Exception raised when ESI starbase data lacks a required field."""

    def __init__(self, message: str, starbase_id: Optional[int] = None) -> None:
        self.message = message
        self.starbase_id = starbase_id
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        result: dict[str, Any] = {"error": "data_error", "message": self.message}
        if self.starbase_id is not None:
            result["starbase_id"] = self.starbase_id
        return result


def count_fuel_blocks(fuels: Optional[list[Mapping[str, Any]]], excluded_type_id: int) -> int:
    """
    Count the fuel blocks in a starbase fuel bay.

    Takes the first bay entry whose type is not the excluded reagent
    (Strontium Clathrates). An empty or missing bay holds no fuel.

    Raises:
        DataError: If the selected entry has a missing or negative quantity
    """
    bay = next((b for b in fuels or [] if b.get("type_id") != excluded_type_id), None)
    if bay is None:
        return 0
    quantity = bay.get("quantity")
    if not isinstance(quantity, int) or quantity < 0:
        raise DataError(f"Invalid fuel quantity {quantity!r} for type {bay.get('type_id')}")
    return quantity


@dataclass
class Starbase:
    """
    One monitored control tower.

    fuel_hours rounds down, to be on the safe side. fuel_days is not rounded
    before classification.
    """

    starbase_id: int
    system_id: int
    name: str
    fuel_blocks: int
    type_id: Optional[int] = None
    moon_id: Optional[int] = None
    policy: FuelPolicy = field(default_factory=FuelPolicy)
    thresholds: FuelThresholds = field(default_factory=FuelThresholds)
    previous_state: FuelState = FuelState.UNKNOWN

    @classmethod
    def from_esi(
        cls,
        basic: Mapping[str, Any],
        detail: Mapping[str, Any],
        name: str,
        policy: FuelPolicy,
        thresholds: FuelThresholds,
    ) -> Starbase:
        """
        Build a Starbase from raw ESI records.

        Args:
            basic: Entry from the corporation starbase list
            detail: Starbase detail record (holds the fuel bay)
            name: Display name, normally the moon the tower is anchored at
            policy: Fuel consumption policy
            thresholds: Classification breakpoints

        Raises:
            DataError: If starbase_id or system_id is missing, or the fuel bay is malformed
        """
        starbase_id = basic.get("starbase_id")
        if starbase_id is None:
            raise DataError("Starbase record has no starbase_id")
        system_id = basic.get("system_id")
        if system_id is None:
            raise DataError("Starbase record has no system_id", starbase_id=starbase_id)

        try:
            fuel_blocks = count_fuel_blocks(detail.get("fuels"), policy.excluded_type_id)
        except DataError as e:
            raise DataError(e.message, starbase_id=starbase_id) from e

        return cls(
            starbase_id=int(starbase_id),
            system_id=int(system_id),
            name=name,
            fuel_blocks=fuel_blocks,
            type_id=basic.get("type_id"),
            moon_id=basic.get("moon_id"),
            policy=policy,
            thresholds=thresholds,
        )

    @property
    def fuel_per_hour(self) -> int:
        return self.policy.fuel_per_hour

    @property
    def fuel_hours(self) -> int:
        """Whole hours of fuel left."""
        return self.fuel_blocks // self.fuel_per_hour

    @property
    def fuel_days(self) -> float:
        return self.fuel_hours / 24.0

    @property
    def state(self) -> FuelState:
        """Current fuelling state."""
        return classify(self.fuel_days, self.thresholds)

    @property
    def has_changed(self) -> bool:
        return self.state != self.previous_state
