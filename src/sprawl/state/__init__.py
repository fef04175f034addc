"""State models, events and storage for Sprawl."""

from .schema import (
    EngineState,
    StateSnapshot,
    Faction,
    FactionRelationship,
    FactionType,
    Item,
    Rarity,
    Relationship,
    ReputationChange,
    ReputationRecord,
    Shop,
    ShopStock,
    Standing,
    StandingTier,
    SupplyModifier,
    VendorType,
    FACTION_TYPE_INFO,
    STANDING_TIERS,
    VENDOR_TYPES,
)
from .store import SnapshotStore, JsonSnapshotStore, MemorySnapshotStore
from .event_bus import EventBus, EventType, GameEvent

__all__ = [
    # Schema
    "EngineState",
    "StateSnapshot",
    "Faction",
    "FactionRelationship",
    "FactionType",
    "Item",
    "Rarity",
    "Relationship",
    "ReputationChange",
    "ReputationRecord",
    "Shop",
    "ShopStock",
    "Standing",
    "StandingTier",
    "SupplyModifier",
    "VendorType",
    "FACTION_TYPE_INFO",
    "STANDING_TIERS",
    "VENDOR_TYPES",
    # Store
    "SnapshotStore",
    "JsonSnapshotStore",
    "MemorySnapshotStore",
    # Event Bus
    "EventBus",
    "EventType",
    "GameEvent",
]
