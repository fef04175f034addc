"""
Standing engine lifecycle and wiring.

One StandingEngine owns one EngineState and one instance of each system.
There is no module-level state: build an engine per process (or per test)
and pass it to whatever needs it.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import EngineConfig
from .state.event_bus import EventBus, EventType, GameEvent
from .state.schema import EngineState, Standing, StateSnapshot, relationship_key
from .state.store import JsonSnapshotStore, SnapshotStore
from .systems.access import AccessGate
from .systems.errors import EngineError, ErrorCode, failure
from .systems.factions import FactionRegistry
from .systems.pricing import PricingEngine
from .systems.reputation import ReputationLedger
from .systems.shops import ShopRegistry
from .systems.territory import TerritoryMap

logger = logging.getLogger(__name__)


class StandingEngine:
    """
    Faction, reputation, territory and pricing state for one game.

    Systems:
    - reputation: ReputationLedger (scores, tiers, rivalry spread)
    - territory: TerritoryMap (territory -> controller)
    - factions: FactionRegistry (records, relationships)
    - shops: ShopRegistry (catalog, shops, supply modifiers)
    - pricing: PricingEngine (buy/sell prices)
    - access: AccessGate (standing thresholds)
    """

    def __init__(
        self,
        config: EngineConfig | dict[str, Any] | None = None,
        bus: EventBus | None = None,
        store: SnapshotStore | Path | str | None = None,
    ):
        """
        Initialize an empty engine.

        Args:
            config: EngineConfig, or a loose options dict (camelCase or
                snake_case keys; bad values fall back to defaults)
            bus: Optional event bus. Without one, events are dropped.
            store: SnapshotStore instance, or path for JsonSnapshotStore
        """
        if isinstance(config, EngineConfig):
            self.config = config
        else:
            self.config = EngineConfig.from_options(config)

        self.bus = bus
        if isinstance(store, (Path, str)):
            self.store: SnapshotStore | None = JsonSnapshotStore(store)
        else:
            self.store = store

        self.state = EngineState()

        self.reputation = ReputationLedger(self)
        self.territory = TerritoryMap(self)
        self.factions = FactionRegistry(self)
        self.shops = ShopRegistry(self)
        self.pricing = PricingEngine(self)
        self.access = AccessGate(self)

    def emit(self, event_type: EventType, **data) -> GameEvent | None:
        """Publish to the bus if there is one."""
        if self.bus is None:
            return None
        return self.bus.emit(event_type, **data)

    # -------------------------------------------------------------------------
    # Common operations (delegates)
    # -------------------------------------------------------------------------

    def create_faction(self, faction_id: str, name: str, faction_type, **kwargs) -> dict:
        return self.factions.create_faction(faction_id, name, faction_type, **kwargs)

    def add_reputation(self, faction_id: str, delta: int, reason: str = "") -> dict:
        return self.reputation.add_reputation(faction_id, delta, reason)

    def set_reputation(self, faction_id: str, value: int, reason: str = "") -> dict:
        return self.reputation.set_reputation(faction_id, value, reason)

    def get_reputation(self, faction_id: str) -> dict:
        return self.reputation.get_reputation(faction_id)

    def transfer_territory(self, territory_id: str, to_faction_id: str, method: str = "Transfer") -> dict:
        return self.territory.transfer_territory(territory_id, to_faction_id, method)

    def get_buy_price(self, shop_id: str, item_id: str, player_standing: str | Standing | None,
                      quantity: int = 1) -> int | None:
        return self.pricing.get_buy_price(shop_id, item_id, player_standing, quantity)

    def get_sell_price(self, shop_id: str, item_id: str, player_standing: str | Standing | None,
                       quantity: int = 1) -> int | None:
        return self.pricing.get_sell_price(shop_id, item_id, player_standing, quantity)

    def can_access_shop(self, shop_id: str, player_standing: str | Standing | None) -> dict:
        return self.access.can_access_shop(shop_id, player_standing)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot.model_validate(self.state.model_dump())

    def export_state(self) -> dict:
        """JSON-serializable copy of every table."""
        return self.snapshot().model_dump(mode="json")

    def import_state(self, snapshot: StateSnapshot | dict, merge: bool = False) -> dict:
        """
        Load a snapshot, replacing or merging into the current state.

        Merging overlays incoming entries on existing ones (incoming wins
        on id collisions). Either way the result is normalized: scores are
        re-clamped to this engine's bounds, every faction gets a reputation
        record, and territory sets are rebuilt from the territory table.
        """
        try:
            if isinstance(snapshot, StateSnapshot):
                incoming = snapshot.model_copy(deep=True).to_state()
            else:
                incoming = StateSnapshot.model_validate(snapshot).to_state()
        except ValidationError as e:
            logger.warning(f"Rejected snapshot: {e.error_count()} validation errors")
            return failure(ErrorCode.INVALID_SNAPSHOT, f"Invalid snapshot: {e.error_count()} errors")

        if merge:
            for table in EngineState.model_fields:
                getattr(self.state, table).update(getattr(incoming, table))
        else:
            self.state = incoming

        self._normalize()

        logger.info(
            f"Imported snapshot ({'merge' if merge else 'replace'}): "
            f"{len(self.state.factions)} factions, {len(self.state.territories)} territories"
        )
        self.emit(EventType.STATE_IMPORTED, merge=merge, factions=len(self.state.factions))
        return {
            "success": True,
            "merge": merge,
            "factions": len(self.state.factions),
            "territories": len(self.state.territories),
        }

    def _normalize(self) -> None:
        for faction_id in self.state.factions:
            if faction_id not in self.state.reputations:
                self.reputation.init_record(faction_id)
        for faction_id in list(self.state.reputations):
            if faction_id not in self.state.factions:
                del self.state.reputations[faction_id]
        for record in self.state.reputations.values():
            record.score = self.config.clamp(record.score)

        # Re-key by the sorted pair so every lookup path agrees
        relationships = {}
        for rel in self.state.relationships.values():
            if rel.faction_a == rel.faction_b:
                continue
            if rel.faction_a not in self.state.factions or rel.faction_b not in self.state.factions:
                continue
            first, second = sorted((rel.faction_a, rel.faction_b))
            relationships[relationship_key(first, second)] = rel.model_copy(
                update={"faction_a": first, "faction_b": second}
            )
        self.state.relationships = relationships

        for shop in self.state.shops.values():
            if shop.faction_id is not None and shop.faction_id not in self.state.factions:
                shop.faction_id = None

        self.territory.rebuild_index()

    def save(self, name: str) -> dict:
        if self.store is None:
            raise EngineError("No snapshot store configured")
        self.store.save(name, self.snapshot())
        self.emit(EventType.STATE_SAVED, name=name)
        return {"success": True, "name": name}

    def load(self, name: str, merge: bool = False) -> dict:
        if self.store is None:
            raise EngineError("No snapshot store configured")
        snapshot = self.store.load(name)
        if snapshot is None:
            return failure(ErrorCode.INVALID_SNAPSHOT, f"No snapshot named {name}")
        return self.import_state(snapshot, merge=merge)

    # -------------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------------

    def check_invariants(self) -> None:
        """Raise EngineError if the tables disagree with each other."""
        for faction_id, record in self.state.reputations.items():
            if not self.config.min_reputation <= record.score <= self.config.max_reputation:
                raise EngineError(f"Score {record.score} for {faction_id} out of bounds")

        for territory_id, faction_id in self.state.territories.items():
            faction = self.state.factions.get(faction_id)
            if faction is None or territory_id not in faction.controlled_territories:
                raise EngineError(f"Territory {territory_id} not mirrored on {faction_id}")

        for faction in self.state.factions.values():
            for territory_id in faction.controlled_territories:
                if self.state.territories.get(territory_id) != faction.id:
                    raise EngineError(f"{faction.id} lists {territory_id} it doesn't control")
            if faction.id not in self.state.reputations:
                raise EngineError(f"{faction.id} has no reputation record")

        for key, rel in self.state.relationships.items():
            if key != rel.key or rel.faction_a == rel.faction_b:
                raise EngineError(f"Relationship row {key} is not keyed by its pair")
