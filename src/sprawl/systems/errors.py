"""
Failure results and internal errors.

Expected failures (missing ids, insufficient standing) are returned as dicts
so callers branch on ``result["success"]``. Only a broken invariant raises.
"""

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN_FACTION = "unknown_faction"
    UNKNOWN_SHOP = "unknown_shop"
    UNKNOWN_ITEM = "unknown_item"
    UNKNOWN_TERRITORY = "unknown_territory"
    DUPLICATE_FACTION = "duplicate_faction"
    DUPLICATE_SHOP = "duplicate_shop"
    DUPLICATE_ITEM = "duplicate_item"
    INVALID_RELATIONSHIP = "invalid_relationship"
    INVALID_FACTION_TYPE = "invalid_faction_type"
    INVALID_VENDOR_TYPE = "invalid_vendor_type"
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_SNAPSHOT = "invalid_snapshot"
    UNKNOWN_COMMAND = "unknown_command"
    INVALID_ARGUMENTS = "invalid_arguments"


class EngineError(Exception):
    """Internal invariant violation. Not a business-rule failure."""


def failure(code: ErrorCode, reason: str, **extra) -> dict:
    """Build a structured failure result."""
    return {"success": False, "error": code.value, "reason": reason, **extra}


def unknown_faction(faction_id: str) -> dict:
    return failure(ErrorCode.UNKNOWN_FACTION, f"Unknown faction: {faction_id}",
                   faction_id=faction_id)


def unknown_shop(shop_id: str) -> dict:
    return failure(ErrorCode.UNKNOWN_SHOP, f"Unknown shop: {shop_id}", shop_id=shop_id)


def unknown_item(item_id: str) -> dict:
    return failure(ErrorCode.UNKNOWN_ITEM, f"Unknown item: {item_id}", item_id=item_id)
