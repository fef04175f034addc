"""
Game systems for Sprawl.

Each system operates on the engine's state and reaches its siblings
through the engine.
"""

from .reputation import ReputationLedger
from .territory import TerritoryMap
from .factions import FactionRegistry
from .shops import ShopRegistry
from .pricing import PricingEngine
from .access import AccessGate
from .errors import EngineError, ErrorCode, failure

__all__ = [
    "ReputationLedger",
    "TerritoryMap",
    "FactionRegistry",
    "ShopRegistry",
    "PricingEngine",
    "AccessGate",
    "EngineError",
    "ErrorCode",
    "failure",
]
