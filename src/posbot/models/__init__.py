"""
posbot Models

Data structures for monitored starbases and their fuelling state.
"""

from .fuel_state import FuelState, classify
from .starbase import DataError, Starbase

__all__ = [
    "DataError",
    "FuelState",
    "Starbase",
    "classify",
]
