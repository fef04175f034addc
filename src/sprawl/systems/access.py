"""
Standing-based access gates.

Every gate reduces to comparing tiers by rank (Hostile lowest, Allied
highest) or comparing a tier's access level with a requirement.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..state.schema import Standing
from .errors import unknown_faction, unknown_shop

if TYPE_CHECKING:
    from ..engine import StandingEngine


# Access level needed before a faction offers its services
SERVICE_ACCESS_LEVEL = 2


class AccessGate:
    """Threshold checks for shops, quests, services and territory."""

    def __init__(self, engine: "StandingEngine"):
        self.engine = engine

    @property
    def _state(self):
        return self.engine.state

    def access_level(self, player_standing: str | Standing | None) -> int:
        """Access level for a tier name. Unrecognized names get 0."""
        tier = self.engine.reputation.tier_for_standing(player_standing)
        return tier.access_level if tier else 0

    def can_access(self, required_access_level: int, player_standing: str | Standing | None) -> bool:
        return self.access_level(player_standing) >= required_access_level

    def can_access_shop(self, shop_id: str, player_standing: str | Standing | None) -> dict:
        shop = self._state.shops.get(shop_id)
        if shop is None:
            return unknown_shop(shop_id)

        current = Standing.parse(player_standing)
        required = shop.vendor_info.min_standing
        result = {
            "success": True,
            "shop_id": shop_id,
            "required_standing": required.value,
            "current_standing": current.value if current else str(player_standing),
        }

        if not shop.is_active:
            return {**result, "can_access": False, "reason": "Shop is closed"}

        if current is None or current.rank < required.rank:
            return {
                **result,
                "can_access": False,
                "reason": f"Requires {required.value} standing (currently {result['current_standing']})",
            }

        return {**result, "can_access": True, "reason": ""}

    def meets_standing(self, faction_id: str, required_standing: str | Standing) -> dict:
        """
        Whether the player's tier with a faction is at least the requirement.

        Used for quest and service availability.
        """
        current = self.engine.reputation.standing_of(faction_id)
        if current is None:
            return unknown_faction(faction_id)

        required = Standing.parse(required_standing) or Standing.NEUTRAL
        return {
            "success": True,
            "faction_id": faction_id,
            "meets": current.rank >= required.rank,
            "required_standing": required.value,
            "current_standing": current.value,
        }

    def available_services(self, faction_id: str) -> dict:
        """Services a faction will sell the player at their current tier."""
        faction = self._state.factions.get(faction_id)
        if faction is None:
            return unknown_faction(faction_id)

        standing = self.engine.reputation.standing_of(faction_id)
        level = self.access_level(standing)
        services = faction.effective_services if faction.is_active and level >= SERVICE_ACCESS_LEVEL else []
        return {
            "success": True,
            "faction_id": faction_id,
            "access_level": level,
            "services": services,
        }

    def can_enter_territory(self, territory_id: str) -> dict:
        """
        Whether the player can move through a territory safely.

        Uncontrolled territory is always open. Controlled territory is
        closed when the controller's tier is attack-on-sight.
        """
        controller = self.engine.territory.get_territory_controller(territory_id)
        if controller is None:
            return {"success": True, "territory_id": territory_id, "can_enter": True,
                    "controller": None, "reason": ""}

        score = self._state.reputations[controller].score
        tier = self.engine.reputation.tier_for_score(score)
        if tier.attack_on_sight:
            return {
                "success": True,
                "territory_id": territory_id,
                "can_enter": False,
                "controller": controller,
                "reason": f"{controller} shoots on sight ({tier.standing.value})",
            }
        return {"success": True, "territory_id": territory_id, "can_enter": True,
                "controller": controller, "reason": ""}
