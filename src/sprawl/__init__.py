"""Sprawl: faction standing, territory and pricing engine."""

from .config import EngineConfig, load_config
from .engine import StandingEngine
from .state import (
    EventBus,
    EventType,
    GameEvent,
    FactionType,
    Relationship,
    Rarity,
    Standing,
    VendorType,
)
from .systems.errors import EngineError, ErrorCode

__all__ = [
    "EngineConfig",
    "load_config",
    "StandingEngine",
    "EventBus",
    "EventType",
    "GameEvent",
    "FactionType",
    "Relationship",
    "Rarity",
    "Standing",
    "VendorType",
    "EngineError",
    "ErrorCode",
]
