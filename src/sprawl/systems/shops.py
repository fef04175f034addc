"""
Shop registry for Sprawl.

Holds the item catalog, the shops that sell from it, and the category-wide
supply modifiers that world events push around. Prices themselves are
computed by PricingEngine.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from ..state.event_bus import EventType
from ..state.schema import (
    Item,
    Rarity,
    Shop,
    ShopStock,
    SUPPLY_MODIFIER_MAX,
    SUPPLY_MODIFIER_MIN,
    SupplyModifier,
    VendorType,
)
from .errors import ErrorCode, failure, unknown_faction, unknown_item, unknown_shop

if TYPE_CHECKING:
    from ..engine import StandingEngine

logger = logging.getLogger(__name__)


class ShopRegistry:
    """Catalog, shops and supply modifiers."""

    def __init__(self, engine: "StandingEngine"):
        self.engine = engine

    @property
    def _state(self):
        return self.engine.state

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    def register_item(
        self,
        item_id: str,
        name: str,
        base_price: int,
        category: str,
        rarity: Rarity | str = Rarity.COMMON,
        is_illegal: bool = False,
    ) -> dict:
        if item_id in self._state.items:
            return failure(ErrorCode.DUPLICATE_ITEM, f"Item already exists: {item_id}", item_id=item_id)

        item = Item(
            id=item_id,
            name=name,
            base_price=base_price,
            category=category,
            rarity=Rarity(rarity),
            is_illegal=is_illegal,
        )
        self._state.items[item_id] = item
        return {"success": True, "item": item}

    def get_item(self, item_id: str) -> Item | None:
        return self._state.items.get(item_id)

    def list_items(self, category: str | None = None) -> list[Item]:
        return [
            item for item in self._state.items.values()
            if category is None or item.category == category
        ]

    # -------------------------------------------------------------------------
    # Shops
    # -------------------------------------------------------------------------

    def create_shop(
        self,
        shop_id: str,
        name: str,
        vendor_type: VendorType | str,
        faction_id: str | None = None,
        markup_modifier: float = 1.0,
        custom_pricing: dict[str, int] | None = None,
    ) -> dict:
        """
        Open a shop.

        Args:
            shop_id: Unique key
            name: Display name
            vendor_type: Archetype supplying markup, buyback and access rules
            faction_id: Owning faction (optional, must exist if given)
            markup_modifier: Per-shop multiplier on the vendor markup
            custom_pricing: item_id -> base price override for this shop
        """
        if shop_id in self._state.shops:
            return failure(ErrorCode.DUPLICATE_SHOP, f"Shop already exists: {shop_id}", shop_id=shop_id)
        try:
            vendor_type = VendorType(vendor_type)
        except ValueError:
            return failure(ErrorCode.INVALID_VENDOR_TYPE, f"Unknown vendor type: {vendor_type}")
        if faction_id is not None and faction_id not in self._state.factions:
            return unknown_faction(faction_id)

        shop = Shop(
            id=shop_id,
            name=name,
            vendor_type=vendor_type,
            faction_id=faction_id,
            markup_modifier=markup_modifier,
            custom_pricing=dict(custom_pricing or {}),
        )
        self._state.shops[shop_id] = shop
        logger.info(f"Opened shop {shop_id} ({vendor_type.value})")
        return {"success": True, "shop": shop}

    def get_shop(self, shop_id: str) -> Shop | None:
        return self._state.shops.get(shop_id)

    def list_shops(self, faction_id: str | None = None, include_closed: bool = True) -> list[Shop]:
        return [
            shop for shop in self._state.shops.values()
            if (faction_id is None or shop.faction_id == faction_id)
            and (include_closed or shop.is_active)
        ]

    def set_shop_active(self, shop_id: str, active: bool) -> bool:
        shop = self._state.shops.get(shop_id)
        if shop is None:
            return False
        if shop.is_active != active:
            shop.is_active = active
            self.engine.emit(EventType.SHOP_STATUS_CHANGED, shop_id=shop_id, is_active=active)
        return True

    def stock_item(
        self,
        shop_id: str,
        item_id: str,
        quantity: int | None = None,
        custom_price: int | None = None,
    ) -> dict:
        """Add (or replace) an inventory line. quantity None = unlimited."""
        shop = self._state.shops.get(shop_id)
        if shop is None:
            return unknown_shop(shop_id)
        if item_id not in self._state.items:
            return unknown_item(item_id)

        stock = ShopStock(item_id=item_id, quantity=quantity, custom_price=custom_price)
        shop.inventory[item_id] = stock
        return {"success": True, "shop_id": shop_id, "stock": stock}

    def set_custom_price(self, shop_id: str, item_id: str, price: int | None) -> dict:
        """Shop-level base price override. None removes it."""
        shop = self._state.shops.get(shop_id)
        if shop is None:
            return unknown_shop(shop_id)
        if item_id not in self._state.items:
            return unknown_item(item_id)

        if price is None:
            shop.custom_pricing.pop(item_id, None)
        else:
            shop.custom_pricing[item_id] = price
        return {"success": True, "shop_id": shop_id, "item_id": item_id, "custom_price": price}

    def accepts_item(self, shop_id: str, item_id: str) -> dict:
        """Whether a shop deals in an item (category and legality rules)."""
        shop = self._state.shops.get(shop_id)
        if shop is None:
            return unknown_shop(shop_id)
        item = self._state.items.get(item_id)
        if item is None:
            return unknown_item(item_id)

        info = shop.vendor_info
        if info.accepted_categories and item.category not in info.accepted_categories:
            return {"success": True, "accepted": False,
                    "reason": f"{shop.name} doesn't deal in {item.category}"}
        if item.is_illegal and not info.sells_illegal:
            return {"success": True, "accepted": False,
                    "reason": f"{shop.name} won't touch contraband"}
        if not item.is_illegal and not info.sells_legal:
            return {"success": True, "accepted": False,
                    "reason": f"{shop.name} only moves contraband"}
        return {"success": True, "accepted": True, "reason": ""}

    # -------------------------------------------------------------------------
    # Supply and demand
    # -------------------------------------------------------------------------

    def set_supply_modifier(self, category: str, modifier: float, reason: str = "") -> dict:
        """
        Set the price multiplier for a whole category.

        Clamped to [0.5, 3.0]. Overwrites any previous value; modifiers
        don't stack.
        """
        clamped = max(SUPPLY_MODIFIER_MIN, min(SUPPLY_MODIFIER_MAX, modifier))
        previous = self._state.supply_modifiers.get(category)
        self._state.supply_modifiers[category] = SupplyModifier(
            category=category,
            modifier=clamped,
            reason=reason,
            updated_at=datetime.now(),
        )

        logger.info(f"Supply modifier {category}: {clamped} ({reason})")
        self.engine.emit(
            EventType.SUPPLY_CHANGED,
            category=category,
            before=previous.modifier if previous else 1.0,
            after=clamped,
            reason=reason,
        )
        return {
            "success": True,
            "category": category,
            "modifier": clamped,
            "clamped": clamped != modifier,
            "reason": reason,
        }

    def get_supply_modifier(self, category: str) -> float:
        entry = self._state.supply_modifiers.get(category)
        return entry.modifier if entry else 1.0

    def reset_supply_modifier(self, category: str | None = None) -> int:
        """Clear one category (or all). Returns how many were cleared."""
        if category is None:
            cleared = list(self._state.supply_modifiers)
            self._state.supply_modifiers.clear()
        else:
            cleared = [category] if self._state.supply_modifiers.pop(category, None) else []

        for name in cleared:
            self.engine.emit(EventType.SUPPLY_CHANGED, category=name, before=None, after=1.0,
                             reason="reset")
        return len(cleared)
