"""
Tests for the territory map.

A territory has at most one controller, and the territory table always
agrees with each faction's controlled_territories set.
"""

from sprawl import EventType


class TestTerritoryControl:

    def test_initial_territories_registered(self, factions_engine):
        """Territories passed at creation are controlled by the new faction."""
        territory = factions_engine.territory

        assert territory.get_territory_controller("downtown") == "corp1"
        assert territory.get_faction_territories("corp1") == {"downtown", "harbor"}
        assert factions_engine.factions.get_faction("corp1").controlled_territories == {"downtown", "harbor"}

    def test_set_control_moves_territory(self, factions_engine):
        """After A then B, only B controls the territory."""
        territory = factions_engine.territory
        territory.set_territory_control("docks", "corp1")

        result = territory.set_territory_control("docks", "crew1")

        assert result["success"] is True
        assert result["old_controller"] == "corp1"
        assert result["new_controller"] == "crew1"
        assert territory.get_territory_controller("docks") == "crew1"
        assert "docks" not in factions_engine.factions.get_faction("corp1").controlled_territories
        assert "docks" in factions_engine.factions.get_faction("crew1").controlled_territories
        factions_engine.check_invariants()

    def test_set_control_same_owner_is_idempotent(self, factions_engine):
        result = factions_engine.territory.set_territory_control("downtown", "corp1")

        assert result["old_controller"] == "corp1"
        assert factions_engine.territory.get_faction_territories("corp1") == {"downtown", "harbor"}

    def test_unknown_faction_fails(self, factions_engine):
        result = factions_engine.territory.set_territory_control("downtown", "nobody")

        assert result["success"] is False
        assert result["error"] == "unknown_faction"
        assert factions_engine.territory.get_territory_controller("downtown") == "corp1"

    def test_uncontrolled_territory_reads_none(self, engine):
        assert engine.territory.get_territory_controller("badlands") is None

    def test_unknown_faction_has_no_territories(self, engine):
        assert engine.territory.get_faction_territories("nobody") == set()


class TestTransferTerritory:

    def test_transfer_records_method(self, factions_engine):
        result = factions_engine.transfer_territory("harbor", "gang1", "Conquest")

        assert result == {
            "success": True,
            "territory_id": "harbor",
            "old_controller": "corp1",
            "new_controller": "gang1",
            "method": "Conquest",
        }
        assert factions_engine.territory.get_faction_territories("gang1") == {"harbor", "old-market"}

    def test_transfer_without_prior_controller(self, factions_engine):
        """A never-controlled territory can still be transferred."""
        result = factions_engine.transfer_territory("wasteland", "crew1", "Settlement")

        assert result["success"] is True
        assert result["old_controller"] is None
        assert factions_engine.territory.get_territory_controller("wasteland") == "crew1"

    def test_transfer_emits_event(self, factions_engine, recorder):
        factions_engine.transfer_territory("harbor", "gang1", "Conquest")

        events = [e for e in recorder if e.type == EventType.TERRITORY_TRANSFERRED]
        assert len(events) == 1
        assert events[0].data["method"] == "Conquest"
        assert events[0].data["old_controller"] == "corp1"

    def test_transfer_to_unknown_faction_fails(self, factions_engine):
        result = factions_engine.transfer_territory("harbor", "nobody", "Conquest")

        assert result["success"] is False
        assert factions_engine.territory.get_territory_controller("harbor") == "corp1"


class TestReleaseTerritory:

    def test_release_clears_both_sides(self, factions_engine):
        result = factions_engine.territory.release_territory("harbor", "Abandoned")

        assert result["success"] is True
        assert result["old_controller"] == "corp1"
        assert factions_engine.territory.get_territory_controller("harbor") is None
        assert factions_engine.territory.get_faction_territories("corp1") == {"downtown"}

    def test_release_uncontrolled_fails(self, factions_engine):
        result = factions_engine.territory.release_territory("nowhere")

        assert result["success"] is False
        assert result["error"] == "unknown_territory"

    def test_list_territories_is_a_copy(self, factions_engine):
        listing = factions_engine.territory.list_territories()
        listing["downtown"] = "gang1"

        assert factions_engine.territory.get_territory_controller("downtown") == "corp1"
