"""
Pytest fixtures for Sprawl engine tests.

Every test gets its own engine; nothing is shared between tests.
"""

import pytest

from sprawl import EventBus, StandingEngine
from sprawl.state import MemorySnapshotStore


@pytest.fixture
def engine():
    """Empty engine with default config and no bus."""
    return StandingEngine()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def memory_store():
    return MemorySnapshotStore()


@pytest.fixture
def bus_engine(bus, memory_store):
    """Engine wired to a bus and an in-memory snapshot store."""
    return StandingEngine(bus=bus, store=memory_store)


@pytest.fixture
def recorder(bus):
    """List that receives every event emitted on the bus."""
    events = []
    bus.on_all(events.append)
    return events


@pytest.fixture
def factions_engine(bus_engine):
    """Engine with a handful of factions and some territory."""
    bus_engine.create_faction("corp1", "Arasaka-Lin", "Corporation",
                              controlled_territories=["downtown", "harbor"])
    bus_engine.create_faction("crew1", "Null Set", "Crew")
    bus_engine.create_faction("gang1", "Razor Kids", "YoungTeam",
                              controlled_territories=["old-market"])
    bus_engine.create_faction("ghost", "The Quiet", "Underground", is_hidden=True)
    return bus_engine


@pytest.fixture
def market_engine(factions_engine):
    """Faction engine plus a catalog and a few shops."""
    shops = factions_engine.shops
    shops.register_item("pistol", "Kessler 9mm", 100, "Weapon")
    shops.register_item("deck", "Cyberdeck Mk.III", 400, "Tech", rarity="Rare")
    shops.register_item("optics", "Kiroshi Optics", 200, "Cyberware", rarity="Uncommon")
    shops.register_item("spike", "ICE Breaker Spike", 150, "Tech", is_illegal=True)
    shops.register_item("stim", "Combat Stim", 20, "Consumable")

    shops.create_shop("corp-store", "Arasaka-Lin Outlet", "CorporateStore", faction_id="corp1")
    shops.create_shop("market", "Night Market Stall", "BlackMarket", faction_id="gang1")
    shops.create_shop("stall", "Noodle & Parts", "StreetVendor")
    shops.create_shop("fixer", "Mama Oyelaran", "Fixer", faction_id="crew1")
    return factions_engine
