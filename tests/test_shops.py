"""Tests for the catalog, shop records and category acceptance."""

from sprawl import EventType


class TestCatalog:

    def test_register_and_list(self, market_engine):
        tech = market_engine.shops.list_items(category="Tech")

        assert {i.id for i in tech} == {"deck", "spike"}
        assert market_engine.shops.get_item("deck").rarity_modifier == 2.5

    def test_duplicate_item(self, market_engine):
        result = market_engine.shops.register_item("pistol", "Other", 5, "Weapon")

        assert result["success"] is False
        assert result["error"] == "duplicate_item"


class TestShops:

    def test_duplicate_shop(self, market_engine):
        result = market_engine.shops.create_shop("fixer", "Other", "Fixer")

        assert result["success"] is False
        assert result["error"] == "duplicate_shop"

    def test_unknown_vendor_type(self, market_engine):
        result = market_engine.shops.create_shop("x", "X", "Vending Machine")

        assert result["success"] is False
        assert result["error"] == "invalid_vendor_type"

    def test_unknown_owner(self, market_engine):
        result = market_engine.shops.create_shop("x", "X", "Fixer", faction_id="nobody")

        assert result["success"] is False
        assert result["error"] == "unknown_faction"

    def test_list_by_owner(self, market_engine):
        shops = market_engine.shops.list_shops(faction_id="corp1")

        assert [s.id for s in shops] == ["corp-store"]

    def test_list_open_only(self, market_engine):
        market_engine.shops.set_shop_active("market", False)

        open_ids = {s.id for s in market_engine.shops.list_shops(include_closed=False)}
        assert "market" not in open_ids

    def test_stock_unknown_item(self, market_engine):
        result = market_engine.shops.stock_item("corp-store", "railgun")

        assert result["success"] is False
        assert result["error"] == "unknown_item"

    def test_status_event(self, market_engine, recorder):
        market_engine.shops.set_shop_active("market", False)

        assert recorder[-1].type == EventType.SHOP_STATUS_CHANGED
        assert recorder[-1].data == {"shop_id": "market", "is_active": False}


class TestAcceptsItem:

    def test_corporate_store_refuses_contraband(self, market_engine):
        result = market_engine.shops.accepts_item("corp-store", "spike")

        assert result["accepted"] is False
        assert "contraband" in result["reason"]

    def test_black_market_takes_contraband(self, market_engine):
        assert market_engine.shops.accepts_item("market", "spike")["accepted"] is True

    def test_category_filter(self, market_engine):
        market_engine.shops.register_item("scrap", "Scrap Metal", 3, "Junk")

        assert market_engine.shops.accepts_item("corp-store", "scrap")["accepted"] is False
        assert market_engine.shops.accepts_item("stall", "scrap")["accepted"] is True

    def test_unknown_ids(self, market_engine):
        assert market_engine.shops.accepts_item("nowhere", "pistol")["error"] == "unknown_shop"
        assert market_engine.shops.accepts_item("stall", "railgun")["error"] == "unknown_item"


class TestSupplyEvents:

    def test_supply_change_event(self, market_engine, recorder):
        market_engine.shops.set_supply_modifier("Weapon", 1.8, "Arms embargo")

        event = recorder[-1]
        assert event.type == EventType.SUPPLY_CHANGED
        assert event.data["before"] == 1.0
        assert event.data["after"] == 1.8
        assert event.data["reason"] == "Arms embargo"
