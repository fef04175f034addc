"""
Tests for the faction registry: lifecycle, type defaults and the
symmetric relationship matrix.
"""

import pytest

from sprawl import EventType, FactionType


class TestCreateFaction:

    def test_create_returns_faction(self, engine):
        result = engine.create_faction("corp1", "Arasaka-Lin", "Corporation", leader="Hanako Lin")

        assert result["success"] is True
        faction = result["faction"]
        assert faction.type == FactionType.CORPORATION
        assert faction.leader == "Hanako Lin"
        assert faction.is_active is True
        assert faction.is_hidden is False

    def test_duplicate_rejected_and_original_untouched(self, engine):
        engine.create_faction("corp1", "Arasaka-Lin", "Corporation")
        engine.set_reputation("corp1", 40)

        result = engine.create_faction("corp1", "Impostor", "Crew")

        assert result["success"] is False
        assert result["error"] == "duplicate_faction"
        assert engine.factions.get_faction("corp1").name == "Arasaka-Lin"
        assert engine.get_reputation("corp1")["score"] == 40

    def test_invalid_type_rejected(self, engine):
        result = engine.create_faction("x", "X", "Cult")

        assert result["success"] is False
        assert result["error"] == "invalid_faction_type"
        assert engine.factions.get_faction("x") is None

    def test_creation_emits_event(self, bus_engine, recorder):
        bus_engine.create_faction("crew1", "Null Set", "Crew")

        assert recorder[-1].type == EventType.FACTION_CREATED
        assert recorder[-1].data["faction_id"] == "crew1"


class TestTypeInfo:

    def test_type_defaults(self, engine):
        faction = engine.create_faction("corp1", "Arasaka-Lin", "Corporation")["faction"]

        assert faction.type_info.organization_level == 5
        assert faction.effective_danger == 3
        assert "Cyberware" in faction.effective_services

    def test_overrides_win_over_type_defaults(self, engine):
        faction = engine.create_faction(
            "gang1", "Razor Kids", "YoungTeam", danger_level=5, services=["Chrome"],
        )["faction"]

        assert faction.effective_danger == 5
        assert faction.effective_services == ["Chrome"]
        assert faction.effective_wealth == faction.type_info.wealth_level

    def test_type_table_is_shared_not_copied(self, engine):
        a = engine.create_faction("a", "A", "Crew")["faction"]
        b = engine.create_faction("b", "B", "Crew")["faction"]

        assert a.type_info is b.type_info


class TestListAndStatus:

    def test_hidden_excluded_unless_requested(self, factions_engine):
        visible = {f.id for f in factions_engine.factions.list_factions()}
        everything = {f.id for f in factions_engine.factions.list_factions(include_hidden=True)}

        assert "ghost" not in visible
        assert "ghost" in everything

    def test_filter_by_type(self, factions_engine):
        crews = factions_engine.factions.list_factions(faction_type="Crew")

        assert [f.id for f in crews] == ["crew1"]

    def test_set_active(self, factions_engine):
        assert factions_engine.factions.set_faction_active("crew1", False) is True
        assert factions_engine.factions.get_faction("crew1").is_active is False

    def test_set_active_unknown(self, factions_engine):
        assert factions_engine.factions.set_faction_active("nobody", False) is False


class TestRemoveFaction:

    def test_remove_clears_territories(self, factions_engine):
        """Removed faction's territories become uncontrolled, not reassigned."""
        assert factions_engine.factions.remove_faction("corp1") is True

        assert factions_engine.factions.get_faction("corp1") is None
        assert factions_engine.territory.get_territory_controller("downtown") is None
        assert factions_engine.territory.get_territory_controller("harbor") is None
        assert factions_engine.get_reputation("corp1")["success"] is False
        factions_engine.check_invariants()

    def test_remove_drops_relationships(self, factions_engine):
        factions_engine.factions.set_relationship("corp1", "crew1", "AtWar")

        factions_engine.factions.remove_faction("corp1")

        assert factions_engine.factions.get_enemies("crew1") == []

    def test_remove_unknown(self, factions_engine):
        assert factions_engine.factions.remove_faction("nobody") is False


class TestRelationships:

    def test_default_is_neutral(self, factions_engine):
        result = factions_engine.factions.get_relationship("corp1", "crew1")

        assert result["relationship"] == "Neutral"
        assert result["is_default"] is True

    @pytest.mark.parametrize("relationship", ["AtWar", "Hostile", "Rival", "Neutral", "Friendly", "Allied"])
    def test_symmetric(self, factions_engine, relationship):
        factions_engine.factions.set_relationship("corp1", "gang1", relationship)

        forward = factions_engine.factions.get_relationship("corp1", "gang1")
        backward = factions_engine.factions.get_relationship("gang1", "corp1")
        assert forward["relationship"] == backward["relationship"] == relationship
        assert forward["is_default"] is False

    def test_overwrite_from_other_direction(self, factions_engine):
        factions_engine.factions.set_relationship("corp1", "gang1", "Hostile")
        factions_engine.factions.set_relationship("gang1", "corp1", "Allied")

        assert factions_engine.factions.get_relationship("corp1", "gang1")["relationship"] == "Allied"
        assert len(factions_engine.state.relationships) == 1

    def test_predicates(self, factions_engine):
        factions_engine.factions.set_relationship("corp1", "gang1", "AtWar")
        factions_engine.factions.set_relationship("corp1", "crew1", "Friendly")

        assert factions_engine.factions.are_hostile("gang1", "corp1") is True
        assert factions_engine.factions.are_allied("gang1", "corp1") is False
        assert factions_engine.factions.are_allied("crew1", "corp1") is True
        assert factions_engine.factions.are_hostile("crew1", "gang1") is False

    def test_rival_is_neither_hostile_nor_allied(self, factions_engine):
        factions_engine.factions.set_relationship("corp1", "gang1", "Rival")

        assert factions_engine.factions.are_hostile("corp1", "gang1") is False
        assert factions_engine.factions.are_allied("corp1", "gang1") is False
        assert factions_engine.factions.get_rivals("gang1") == ["corp1"]

    def test_self_relationship_rejected(self, factions_engine):
        result = factions_engine.factions.set_relationship("corp1", "corp1", "Allied")

        assert result["success"] is False
        assert result["error"] == "invalid_relationship"

    def test_unknown_relationship_rejected(self, factions_engine):
        result = factions_engine.factions.set_relationship("corp1", "crew1", "Frenemies")

        assert result["success"] is False
        assert result["error"] == "invalid_relationship"

    def test_unknown_faction(self, factions_engine):
        result = factions_engine.factions.get_relationship("corp1", "nobody")

        assert result["success"] is False
        assert result["error"] == "unknown_faction"


class TestFactionSummary:

    def test_summary_combines_tables(self, factions_engine):
        factions_engine.factions.set_relationship("corp1", "crew1", "Allied")
        factions_engine.set_reputation("corp1", 55)

        summary = factions_engine.factions.get_faction_summary("corp1")

        assert summary["territories"] == ["downtown", "harbor"]
        assert summary["reputation"] == {"score": 55, "tier": "Friendly"}
        assert summary["allies"] == ["crew1"]
        assert summary["organization_level"] == 5
