"""
TypedDict definitions for the ESI responses used by the fuel check.

Only the fields posbot reads are listed.
"""

from __future__ import annotations

from typing import TypedDict

from typing_extensions import NotRequired


class StarbaseInfo(TypedDict):
    """One entry of GET /corporations/{corporation_id}/starbases/."""

    starbase_id: int
    system_id: int
    type_id: int
    moon_id: NotRequired[int]
    state: NotRequired[str]


class StarbaseFuel(TypedDict):
    """One fuel bay entry of a starbase detail record."""

    type_id: int
    quantity: int


class StarbaseDetail(TypedDict):
    """GET /corporations/{corporation_id}/starbases/{starbase_id}/ response (subset)."""

    fuels: NotRequired[list[StarbaseFuel]]
    state: NotRequired[str]


class MoonInfo(TypedDict):
    """GET /universe/moons/{moon_id}/ response."""

    moon_id: int
    name: str
    system_id: int


class CharacterInfo(TypedDict):
    """GET /characters/{character_id}/ response (public subset)."""

    name: str
    corporation_id: int
    alliance_id: NotRequired[int]
