"""Tests for the slash-command bridge."""

import pytest

from sprawl.interface import CommandCategory, create_default_registry
from sprawl.interface.command_registry import fuzzy_match


@pytest.fixture
def registry():
    return create_default_registry()


class TestFuzzyMatch:

    def test_prefix_scores_highest(self):
        matched, score = fuzzy_match("rep", "reps")

        assert matched is True
        assert score > 500

    def test_out_of_order_fails(self):
        assert fuzzy_match("per", "rep") == (False, 0)


class TestDispatch:

    def test_reputation_lookup(self, registry, factions_engine):
        result = registry.dispatch(factions_engine, "/rep corp1")

        assert result["success"] is True
        assert result["tier"] == "Neutral"

    def test_adjust_with_reason(self, registry, factions_engine):
        result = registry.dispatch(factions_engine, '/adjust corp1 60 "Recovered the prototype"')

        assert result["new_score"] == 60
        assert result["reason"] == "Recovered the prototype"

    def test_bad_number(self, registry, factions_engine):
        result = registry.dispatch(factions_engine, "/adjust corp1 lots")

        assert result["success"] is False
        assert result["error"] == "invalid_arguments"
        assert "Usage" in result["reason"]

    def test_missing_arguments(self, registry, factions_engine):
        result = registry.dispatch(factions_engine, "/transfer harbor")

        assert result["success"] is False
        assert result["reason"] == "Usage: /transfer <territory> <faction> [method]"

    def test_transfer(self, registry, factions_engine):
        result = registry.dispatch(factions_engine, "/transfer harbor gang1 Conquest")

        assert result["method"] == "Conquest"
        assert factions_engine.territory.get_territory_controller("harbor") == "gang1"

    def test_relation_set_and_get(self, registry, factions_engine):
        registry.dispatch(factions_engine, "/relation corp1 gang1 AtWar")

        result = registry.dispatch(factions_engine, "/relation gang1 corp1")
        assert result["relationship"] == "AtWar"

    def test_price_and_alias(self, registry, market_engine):
        assert registry.dispatch(market_engine, "/price corp-store pistol Neutral")["price"] == 150
        assert registry.dispatch(market_engine, "/buy corp-store pistol Neutral 2")["price"] == 300

    def test_sell(self, registry, market_engine):
        assert registry.dispatch(market_engine, "/sell corp-store pistol Friendly")["price"] == 55

    def test_access(self, registry, market_engine):
        result = registry.dispatch(market_engine, "/access fixer Neutral")

        assert result["can_access"] is False

    def test_supply(self, registry, market_engine):
        result = registry.dispatch(market_engine, "/supply Weapon 9 Corporate lockdown")

        assert result["modifier"] == 3.0
        assert result["reason"] == "Corporate lockdown"

    def test_unknown_command_suggests(self, registry, factions_engine):
        result = registry.dispatch(factions_engine, "/xyzzy")

        assert result["success"] is False
        assert result["error"] == "unknown_command"
        assert result["suggestions"] == []

    def test_autocorrect_prefix(self, registry, factions_engine):
        result = registry.dispatch(factions_engine, "/factio corp1")

        assert result["success"] is True
        assert result["note"] == "Autocorrected to /faction"

    def test_autocorrect_never_runs_state_changes(self, registry, factions_engine):
        result = registry.dispatch(factions_engine, "/transf downtown crew1")

        assert result["success"] is False
        assert result["error"] == "unknown_command"
        assert result["suggestions"] == ["/transfer"]
        assert factions_engine.territory.get_territory_controller("downtown") == "corp1"

    def test_exact_name_still_runs_state_changes(self, registry, factions_engine):
        result = registry.dispatch(factions_engine, "/adjust crew1 5")

        assert result["success"] is True
        assert "note" not in result

    def test_unavailable_without_factions(self, registry, engine):
        result = registry.dispatch(engine, "/rep corp1")

        assert result["success"] is False
        assert "isn't available" in result["reason"]

    def test_empty_line(self, registry, engine):
        assert registry.dispatch(engine, "   ")["success"] is False

    def test_unbalanced_quotes(self, registry, engine):
        result = registry.dispatch(engine, '/supply Weapon 2 "oops')

        assert result["error"] == "invalid_arguments"


class TestHelp:

    def test_help_hides_hidden_and_unavailable(self, registry, engine):
        result = registry.dispatch(engine, "/help")

        names = [c["name"] for group in result["commands"].values() for c in group]
        assert "/setrep" not in names
        assert "/rep" not in names
        assert "/territory" in names

    def test_by_category(self, registry, market_engine):
        grouped = registry.by_category(market_engine)

        assert [c.name for c in grouped[CommandCategory.SHOP]] == [
            "/access", "/price", "/sell", "/supply",
        ]

    def test_recent_usage_boost(self, registry, factions_engine):
        registry.dispatch(factions_engine, "/reps")

        assert registry.get_recent_boost("/reps") == 500
        assert registry.get_recent_boost("/rep") == 0
