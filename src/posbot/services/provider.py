"""
ESI Starbase Provider.

Fetches the corporation's control towers from ESI and builds Starbase models.

There are three calls per tower. The corporation starbase list gives the
starbase_id, system_id and moon_id; the detail endpoint gives the fuel bay;
the moon lookup gives a display name (ESI does not expose tower names, so the
moon name stands in for it).
"""

from __future__ import annotations

from typing import cast

from ..core.client import ESIClient, ESIError
from ..core.logging import get_logger
from ..core.run_config import FuelPolicy, FuelThresholds
from ..models.esi_types import CharacterInfo, MoonInfo, StarbaseDetail, StarbaseInfo
from ..models.starbase import DataError, Starbase

logger = get_logger(__name__)


class StarbaseProvider:
    """
    Builds Starbase models for one corporation.

    Usage:
        with ESIClient(token=token.access_token) as client:
            provider = StarbaseProvider.for_character(client, character_id, policy, thresholds)
            starbases = provider.fetch_starbases()
    """

    def __init__(
        self,
        client: ESIClient,
        corporation_id: int,
        policy: FuelPolicy,
        thresholds: FuelThresholds,
    ) -> None:
        self.client = client
        self.corporation_id = corporation_id
        self.policy = policy
        self.thresholds = thresholds

    @classmethod
    def for_character(
        cls,
        client: ESIClient,
        character_id: int,
        policy: FuelPolicy,
        thresholds: FuelThresholds,
    ) -> StarbaseProvider:
        """
        Create a provider for the corporation of the authenticated character.

        Raises:
            ESIError: If the character lookup fails
        """
        character = cast(CharacterInfo, client.get_dict(f"/characters/{character_id}/"))
        corporation_id = character.get("corporation_id")
        if corporation_id is None:
            raise ESIError(f"Character {character_id} has no corporation_id")
        logger.info("Checking starbases of corporation %s", corporation_id)
        return cls(client, int(corporation_id), policy, thresholds)

    def list_starbases(self) -> list[StarbaseInfo]:
        """Fetch the corporation starbase list (all pages)."""
        return self.client.get_paged_list(
            f"/corporations/{self.corporation_id}/starbases/", auth=True
        )

    def get_detail(self, starbase_id: int, system_id: int) -> StarbaseDetail:
        """Fetch one starbase's detail record."""
        detail = self.client.get_dict(
            f"/corporations/{self.corporation_id}/starbases/{starbase_id}/",
            auth=True,
            params={"system_id": system_id},
        )
        return cast(StarbaseDetail, detail)

    def get_name(self, basic: StarbaseInfo) -> str:
        """Name a tower after its moon, or by id if it is not anchored at one."""
        moon_id = basic.get("moon_id")
        if moon_id is None:
            return f"Starbase {basic.get('starbase_id')}"
        moon = cast(MoonInfo, self.client.get_dict(f"/universe/moons/{moon_id}/"))
        return moon.get("name") or f"Moon {moon_id}"

    def fetch_starbases(self) -> list[Starbase]:
        """
        Fetch every tower and build Starbase models.

        Raises:
            ESIError: If any ESI call fails
            DataError: If a starbase record lacks its identifiers
        """
        starbases = []
        for basic in self.list_starbases():
            starbase_id = basic.get("starbase_id")
            system_id = basic.get("system_id")
            if starbase_id is None or system_id is None:
                raise DataError("Starbase record has no starbase_id or system_id")

            detail = self.get_detail(starbase_id, system_id)
            name = self.get_name(basic)
            starbase = Starbase.from_esi(basic, detail, name, self.policy, self.thresholds)
            logger.debug(
                "%s: %d blocks, %d hours, %s",
                starbase.name,
                starbase.fuel_blocks,
                starbase.fuel_hours,
                starbase.state,
            )
            starbases.append(starbase)

        logger.info("Fetched %d starbases", len(starbases))
        return starbases

    def resolve_system_ids(self, names: list[str]) -> set[int]:
        """
        Resolve solar system names to IDs.

        Names ESI does not recognise are logged and skipped.

        Raises:
            ESIError: If the name resolution call fails
        """
        if not names:
            return set()

        result = self.client.resolve_names(names)
        systems = result.get("systems", [])
        found = {s["name"].lower(): s["id"] for s in systems}

        for name in names:
            if name.lower() not in found:
                logger.warning("Unknown solar system %r in configuration", name)

        return set(found.values())
