"""
Change Detection.

Compares each starbase's freshly classified state with the state persisted
on the previous run. Only starbases whose state moved are reported; every
starbase's current state is carried forward for persistence.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..core.logging import get_logger
from ..models.fuel_state import FuelState
from ..models.starbase import Starbase

logger = get_logger(__name__)


@dataclass
class ChangeSet:
    """Outcome of comparing one run against the previous one."""

    reportable: list[Starbase] = field(default_factory=list)
    """Starbases whose state changed, in input order."""

    current_states: dict[int, str] = field(default_factory=dict)
    """starbase_id -> current state for every starbase examined."""

    @property
    def any_danger(self) -> bool:
        """True if a reportable starbase has newly entered DANGER."""
        return any(sb.state == FuelState.DANGER for sb in self.reportable)

    @property
    def is_empty(self) -> bool:
        return not self.reportable


def detect_changes(starbases: Sequence[Starbase], previous: Mapping[int, str]) -> ChangeSet:
    """
    Partition starbases into changed and unchanged.

    Sets previous_state on each starbase from the persisted mapping
    (missing entries are UNKNOWN, so a first observation always reports).

    Args:
        starbases: Starbases in reporting order
        previous: Persisted starbase_id -> state label mapping

    Returns:
        ChangeSet with the reportable starbases and the states to persist
    """
    changes = ChangeSet()
    for starbase in starbases:
        starbase.previous_state = FuelState.parse(previous.get(starbase.starbase_id))
        state = starbase.state
        changes.current_states[starbase.starbase_id] = state.value

        if starbase.has_changed:
            worse = state.severity > starbase.previous_state.severity
            logger.info(
                "%s %s from %s to %s",
                starbase.name,
                "escalated" if worse else "eased",
                starbase.previous_state,
                state,
            )
            changes.reportable.append(starbase)
        else:
            logger.debug("%s unchanged (%s)", starbase.name, state)

    return changes
