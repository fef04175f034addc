"""
Faction registry for Sprawl.

Owns faction records and the relationship matrix between factions.
Relationships are undirected: (A, B) and (B, A) share one stored entry,
and a pair with no entry is implicitly Neutral.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from ..state.event_bus import EventType
from ..state.schema import (
    ALLIED_RELATIONSHIPS,
    HOSTILE_RELATIONSHIPS,
    Faction,
    FactionRelationship,
    FactionType,
    Relationship,
    relationship_key,
)
from .errors import ErrorCode, failure, unknown_faction

if TYPE_CHECKING:
    from ..engine import StandingEngine

logger = logging.getLogger(__name__)


class FactionRegistry:
    """
    Faction records and inter-faction relationships.

    Creation and removal cascade into the reputation ledger and the
    territory map so the three tables never disagree.
    """

    def __init__(self, engine: "StandingEngine"):
        self.engine = engine

    @property
    def _state(self):
        return self.engine.state

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_faction(
        self,
        faction_id: str,
        name: str,
        faction_type: FactionType | str,
        controlled_territories: Iterable[str] = (),
        **overrides,
    ) -> dict:
        """
        Register a new faction.

        Args:
            faction_id: Unique key
            name: Display name
            faction_type: FactionType or its string value
            controlled_territories: Territories to claim immediately
            **overrides: Optional Faction fields (description, is_hidden,
                danger_level, wealth_level, services, leader, headquarters)

        Returns:
            Dict with the created faction, or a failure
        """
        if faction_id in self._state.factions:
            return failure(
                ErrorCode.DUPLICATE_FACTION,
                f"Faction already exists: {faction_id}",
                faction_id=faction_id,
            )

        try:
            faction_type = FactionType(faction_type)
        except ValueError:
            return failure(
                ErrorCode.INVALID_FACTION_TYPE,
                f"Unknown faction type: {faction_type}",
                faction_id=faction_id,
            )

        faction = Faction(id=faction_id, name=name, type=faction_type, **overrides)
        self._state.factions[faction_id] = faction
        self.engine.reputation.init_record(faction_id)

        for territory_id in controlled_territories:
            self.engine.territory.set_territory_control(territory_id, faction_id)

        logger.info(f"Created faction {faction_id} ({faction_type.value})")
        self.engine.emit(
            EventType.FACTION_CREATED,
            faction_id=faction_id,
            name=name,
            type=faction_type.value,
        )
        return {"success": True, "faction": faction}

    def get_faction(self, faction_id: str) -> Faction | None:
        return self._state.factions.get(faction_id)

    def list_factions(
        self,
        faction_type: FactionType | str | None = None,
        include_hidden: bool = False,
    ) -> list[Faction]:
        """Factions in registration order. Hidden ones only on request."""
        factions = []
        for faction in self._state.factions.values():
            if faction.is_hidden and not include_hidden:
                continue
            if faction_type is not None and faction.type != faction_type:
                continue
            factions.append(faction)
        return factions

    def set_faction_active(self, faction_id: str, active: bool) -> bool:
        faction = self._state.factions.get(faction_id)
        if faction is None:
            return False
        if faction.is_active != active:
            faction.is_active = active
            self.engine.emit(
                EventType.FACTION_STATUS_CHANGED,
                faction_id=faction_id,
                is_active=active,
            )
        return True

    def set_faction_hidden(self, faction_id: str, hidden: bool) -> bool:
        faction = self._state.factions.get(faction_id)
        if faction is None:
            return False
        faction.is_hidden = hidden
        return True

    def remove_faction(self, faction_id: str) -> bool:
        """
        Delete a faction outright.

        Its territories become uncontrolled (never reassigned), its
        reputation record and relationships are dropped, and shops it
        owned lose their owner.
        """
        faction = self._state.factions.get(faction_id)
        if faction is None:
            return False

        territories = sorted(faction.controlled_territories)
        for territory_id in territories:
            self.engine.territory.release_territory(territory_id, reason=f"{faction_id} removed")

        for key in [k for k, rel in self._state.relationships.items() if rel.involves(faction_id)]:
            del self._state.relationships[key]

        for shop in self._state.shops.values():
            if shop.faction_id == faction_id:
                shop.faction_id = None

        self.engine.reputation.drop_record(faction_id)
        del self._state.factions[faction_id]

        logger.info(f"Removed faction {faction_id} (released {len(territories)} territories)")
        self.engine.emit(
            EventType.FACTION_REMOVED,
            faction_id=faction_id,
            released_territories=territories,
        )
        return True

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------

    def set_relationship(self, faction_a: str, faction_b: str, relationship: Relationship | str) -> dict:
        for faction_id in (faction_a, faction_b):
            if faction_id not in self._state.factions:
                return unknown_faction(faction_id)
        if faction_a == faction_b:
            return failure(
                ErrorCode.INVALID_RELATIONSHIP,
                "A faction has no relationship with itself",
                faction_id=faction_a,
            )

        parsed = Relationship.parse(relationship)
        if parsed is None:
            return failure(ErrorCode.INVALID_RELATIONSHIP, f"Unknown relationship: {relationship}")

        key = relationship_key(faction_a, faction_b)
        previous = self._state.relationships.get(key)
        first, second = sorted((faction_a, faction_b))
        self._state.relationships[key] = FactionRelationship(
            faction_a=first,
            faction_b=second,
            relationship=parsed,
        )

        before = previous.relationship if previous else Relationship.NEUTRAL
        if before != parsed:
            self.engine.emit(
                EventType.RELATIONSHIP_CHANGED,
                faction_a=first,
                faction_b=second,
                before=before.value,
                after=parsed.value,
            )

        return {
            "success": True,
            "faction_a": first,
            "faction_b": second,
            "relationship": parsed.value,
        }

    def get_relationship(self, faction_a: str, faction_b: str) -> dict:
        """Relationship between two factions, order-independent."""
        for faction_id in (faction_a, faction_b):
            if faction_id not in self._state.factions:
                return unknown_faction(faction_id)

        entry = self._state.relationships.get(relationship_key(faction_a, faction_b))
        if entry is None:
            return {"success": True, "relationship": Relationship.NEUTRAL.value, "is_default": True}
        return {"success": True, "relationship": entry.relationship.value, "is_default": False}

    def _relationship(self, faction_a: str, faction_b: str) -> Relationship | None:
        result = self.get_relationship(faction_a, faction_b)
        if not result["success"]:
            return None
        return Relationship(result["relationship"])

    def are_hostile(self, faction_a: str, faction_b: str) -> bool:
        return self._relationship(faction_a, faction_b) in HOSTILE_RELATIONSHIPS

    def are_allied(self, faction_a: str, faction_b: str) -> bool:
        return self._relationship(faction_a, faction_b) in ALLIED_RELATIONSHIPS

    def related_factions(self, faction_id: str, relationships: set[Relationship] | frozenset[Relationship]) -> list[str]:
        """Ids of factions whose explicit relationship with faction_id is in the set."""
        related = [
            entry.other(faction_id)
            for entry in self._state.relationships.values()
            if entry.involves(faction_id) and entry.relationship in relationships
        ]
        return sorted(related)

    def get_rivals(self, faction_id: str) -> list[str]:
        return self.related_factions(faction_id, {Relationship.RIVAL})

    def get_allies(self, faction_id: str) -> list[str]:
        return self.related_factions(faction_id, ALLIED_RELATIONSHIPS)

    def get_enemies(self, faction_id: str) -> list[str]:
        return self.related_factions(faction_id, HOSTILE_RELATIONSHIPS)

    def get_faction_summary(self, faction_id: str) -> dict:
        """Record, type defaults, territories, reputation and relations in one view."""
        faction = self._state.factions.get(faction_id)
        if faction is None:
            return unknown_faction(faction_id)

        reputation = self.engine.reputation.get_reputation(faction_id)
        return {
            "success": True,
            "faction_id": faction.id,
            "name": faction.name,
            "type": faction.type.value,
            "is_active": faction.is_active,
            "is_hidden": faction.is_hidden,
            "organization_level": faction.type_info.organization_level,
            "danger_level": faction.effective_danger,
            "wealth_level": faction.effective_wealth,
            "services": faction.effective_services,
            "territories": sorted(self.engine.territory.get_faction_territories(faction_id)),
            "reputation": {
                "score": reputation["score"],
                "tier": reputation["tier"],
            },
            "allies": self.get_allies(faction_id),
            "rivals": self.get_rivals(faction_id),
            "enemies": self.get_enemies(faction_id),
        }
