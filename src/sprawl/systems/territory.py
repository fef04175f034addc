"""
Territory map for Sprawl.

Each territory has at most one controlling faction. The territory table in
EngineState is canonical; every faction's controlled_territories set is
updated in the same call so both read paths always agree.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.event_bus import EventType
from .errors import ErrorCode, failure, unknown_faction

if TYPE_CHECKING:
    from ..engine import StandingEngine

logger = logging.getLogger(__name__)


class TerritoryMap:
    """Territory -> controlling faction, mirrored onto faction records."""

    def __init__(self, engine: "StandingEngine"):
        self.engine = engine

    @property
    def _state(self):
        return self.engine.state

    def _move(self, territory_id: str, faction_id: str | None) -> str | None:
        """Reassign (or clear) control. Returns the previous controller."""
        old_controller = self._state.territories.get(territory_id)

        if old_controller is not None:
            old_faction = self._state.factions.get(old_controller)
            if old_faction is not None:
                old_faction.controlled_territories.discard(territory_id)

        if faction_id is None:
            self._state.territories.pop(territory_id, None)
        else:
            self._state.territories[territory_id] = faction_id
            self._state.factions[faction_id].controlled_territories.add(territory_id)

        return old_controller

    def set_territory_control(self, territory_id: str, faction_id: str) -> dict:
        """
        Give a faction control of a territory.

        Returns:
            Dict with old and new controller, or a failure if the
            faction doesn't exist
        """
        if faction_id not in self._state.factions:
            return unknown_faction(faction_id)

        old_controller = self._move(territory_id, faction_id)
        return {
            "success": True,
            "territory_id": territory_id,
            "old_controller": old_controller,
            "new_controller": faction_id,
        }

    def transfer_territory(self, territory_id: str, to_faction_id: str, method: str = "Transfer") -> dict:
        """
        Hand a territory to another faction, recording how it happened.

        Args:
            territory_id: Territory changing hands
            to_faction_id: New controller
            method: Cause label ("Conquest", "Treaty", ...)
        """
        result = self.set_territory_control(territory_id, to_faction_id)
        if not result["success"]:
            return result

        result["method"] = method
        logger.info(
            f"Territory {territory_id}: {result['old_controller'] or 'uncontrolled'} → "
            f"{to_faction_id} ({method})"
        )
        self.engine.emit(
            EventType.TERRITORY_TRANSFERRED,
            territory_id=territory_id,
            old_controller=result["old_controller"],
            new_controller=to_faction_id,
            method=method,
        )
        return result

    def release_territory(self, territory_id: str, reason: str = "") -> dict:
        """Leave a territory uncontrolled."""
        if territory_id not in self._state.territories:
            return failure(
                ErrorCode.UNKNOWN_TERRITORY,
                f"Territory {territory_id} has no controller",
                territory_id=territory_id,
            )

        old_controller = self._move(territory_id, None)
        self.engine.emit(
            EventType.TERRITORY_RELEASED,
            territory_id=territory_id,
            old_controller=old_controller,
            reason=reason,
        )
        return {
            "success": True,
            "territory_id": territory_id,
            "old_controller": old_controller,
            "new_controller": None,
        }

    def get_territory_controller(self, territory_id: str) -> str | None:
        return self._state.territories.get(territory_id)

    def get_faction_territories(self, faction_id: str) -> set[str]:
        faction = self._state.factions.get(faction_id)
        if faction is None:
            return set()
        return set(faction.controlled_territories)

    def list_territories(self) -> dict[str, str]:
        return dict(self._state.territories)

    def rebuild_index(self) -> None:
        """Re-derive every faction's territory set from the territory table."""
        for territory_id, faction_id in list(self._state.territories.items()):
            if faction_id not in self._state.factions:
                logger.warning(f"Dropping territory {territory_id}: unknown controller {faction_id}")
                del self._state.territories[territory_id]

        for faction in self._state.factions.values():
            faction.controlled_territories = set()
        for territory_id, faction_id in self._state.territories.items():
            self._state.factions[faction_id].controlled_territories.add(territory_id)
