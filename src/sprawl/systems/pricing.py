"""
Pricing engine for Sprawl.

Buy price:
    effective base × rarity × standing modifier × (vendor markup × shop
    modifier) × supply modifier × quantity, rounded up.

Sell price:
    catalog base × vendor buyback × clamp(2.0 - standing modifier, 0.5, 1.5)
    × quantity, rounded down, never below 1.

Both roundings favour the vendor. Standing is passed in by tier name; an
unrecognized name prices as 1.0.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..state.schema import Item, Shop, Standing
from .errors import ErrorCode, failure, unknown_item, unknown_shop

if TYPE_CHECKING:
    from ..engine import StandingEngine


SELL_MODIFIER_MIN = 0.5
SELL_MODIFIER_MAX = 1.5

# Float products are rounded to this many places before ceil/floor
PRICE_PRECISION = 6


class PricingEngine:
    """Combines rarity, standing, markup and supply into prices."""

    def __init__(self, engine: "StandingEngine"):
        self.engine = engine

    @property
    def _state(self):
        return self.engine.state

    def _lookup(self, shop_id: str, item_id: str, quantity: int) -> tuple[Shop, Item] | dict:
        shop = self._state.shops.get(shop_id)
        if shop is None:
            return unknown_shop(shop_id)
        item = self._state.items.get(item_id)
        if item is None:
            return unknown_item(item_id)
        if quantity < 1:
            return failure(ErrorCode.INVALID_QUANTITY, f"Quantity must be at least 1, got {quantity}")
        return shop, item

    def standing_modifier(self, player_standing: str | Standing | None) -> float:
        tier = self.engine.reputation.tier_for_standing(player_standing)
        return tier.price_modifier if tier else 1.0

    def effective_base_price(self, shop: Shop, item: Item) -> int:
        """Stock-line override, then shop-level override, then catalog price."""
        stock = shop.inventory.get(item.id)
        if stock is not None and stock.custom_price and stock.custom_price > 0:
            return stock.custom_price
        if item.id in shop.custom_pricing:
            return shop.custom_pricing[item.id]
        return item.base_price

    def quote_buy(self, shop_id: str, item_id: str, player_standing: str | Standing | None,
                  quantity: int = 1) -> dict:
        """
        Price for the player buying from a shop.

        Returns:
            Dict with price and a breakdown of every multiplier, or a failure
        """
        found = self._lookup(shop_id, item_id, quantity)
        if isinstance(found, dict):
            return found
        shop, item = found

        base = self.effective_base_price(shop, item)
        standing_mod = self.standing_modifier(player_standing)
        markup = shop.effective_markup
        supply = self.engine.shops.get_supply_modifier(item.category)

        raw = base * item.rarity_modifier * standing_mod * markup * supply * quantity
        price = math.ceil(round(raw, PRICE_PRECISION))

        return {
            "success": True,
            "shop_id": shop_id,
            "item_id": item_id,
            "quantity": quantity,
            "price": price,
            "breakdown": {
                "base_price": base,
                "rarity_modifier": item.rarity_modifier,
                "standing_modifier": standing_mod,
                "markup": markup,
                "supply_modifier": supply,
            },
        }

    def quote_sell(self, shop_id: str, item_id: str, player_standing: str | Standing | None,
                   quantity: int = 1) -> dict:
        """
        Price the shop pays the player for an item.

        Custom pricing is ignored here: sell value always starts from the
        catalog price.
        """
        found = self._lookup(shop_id, item_id, quantity)
        if isinstance(found, dict):
            return found
        shop, item = found

        buyback = shop.vendor_info.buyback_rate
        buy_mod = self.standing_modifier(player_standing)
        sell_mod = max(SELL_MODIFIER_MIN, min(SELL_MODIFIER_MAX, 2.0 - buy_mod))

        raw = item.base_price * buyback * sell_mod * quantity
        price = max(1, math.floor(round(raw, PRICE_PRECISION)))

        return {
            "success": True,
            "shop_id": shop_id,
            "item_id": item_id,
            "quantity": quantity,
            "price": price,
            "breakdown": {
                "base_price": item.base_price,
                "buyback_rate": buyback,
                "standing_modifier": sell_mod,
            },
        }

    def get_buy_price(self, shop_id: str, item_id: str, player_standing: str | Standing | None,
                      quantity: int = 1) -> int | None:
        result = self.quote_buy(shop_id, item_id, player_standing, quantity)
        return result["price"] if result["success"] else None

    def get_sell_price(self, shop_id: str, item_id: str, player_standing: str | Standing | None,
                       quantity: int = 1) -> int | None:
        result = self.quote_sell(shop_id, item_id, player_standing, quantity)
        return result["price"] if result["success"] else None

    def quote_for_faction(self, shop_id: str, item_id: str, quantity: int = 1, sell: bool = False) -> dict:
        """Quote using the player's current tier with the shop's owner."""
        shop = self._state.shops.get(shop_id)
        if shop is None:
            return unknown_shop(shop_id)

        standing = Standing.NEUTRAL
        if shop.faction_id is not None:
            standing = self.engine.reputation.standing_of(shop.faction_id) or Standing.NEUTRAL

        quote = self.quote_sell if sell else self.quote_buy
        result = quote(shop_id, item_id, standing, quantity)
        if result["success"]:
            result["standing"] = standing.value
        return result
