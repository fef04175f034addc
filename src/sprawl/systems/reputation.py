"""
Reputation ledger for Sprawl.

Tracks the player's numeric score with every faction and maps scores onto
standing tiers. Tiers drive prices (PricingEngine) and access (AccessGate).

Scores are integers clamped to [min_reputation, max_reputation]. Clamping
happens before tier lookup, so an out-of-range input always lands on a
real tier.

Rivalry spread (optional): helping a faction costs standing with its
rivals. The spread is one hop only; a rival's own rivals are untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from ..state.event_bus import EventType
from ..state.schema import (
    Relationship,
    ReputationChange,
    ReputationRecord,
    STANDING_TIERS,
    Standing,
    StandingTier,
)
from .errors import ErrorCode, failure, unknown_faction

if TYPE_CHECKING:
    from ..engine import StandingEngine

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


class ReputationLedger:
    """
    Per-faction reputation scores and tier lookups.

    Requires a StandingEngine for state, config and event access.
    """

    def __init__(self, engine: "StandingEngine", tiers: tuple[StandingTier, ...] = STANDING_TIERS):
        self.engine = engine
        self.tiers = tiers
        self._history: list[ReputationChange] = []

    @property
    def _state(self):
        return self.engine.state

    @property
    def _config(self):
        return self.engine.config

    # -------------------------------------------------------------------------
    # Tier lookups
    # -------------------------------------------------------------------------

    def tier_index(self, score: int) -> int:
        """Index into the tier table for a score (descending threshold scan)."""
        for index in range(len(self.tiers) - 1, -1, -1):
            min_score = self.tiers[index].min_score
            if min_score is None or score >= min_score:
                return index
        return 0

    def tier_for_score(self, score: int) -> StandingTier:
        return self.tiers[self.tier_index(score)]

    def tier_for_standing(self, standing: str | Standing | None) -> StandingTier | None:
        """Look up a tier row by name. None if the name isn't a tier."""
        parsed = Standing.parse(standing)
        if parsed is None:
            return None
        for tier in self.tiers:
            if tier.standing == parsed:
                return tier
        return None

    def next_threshold(self, score: int) -> dict | None:
        """Next tier up and the points needed to reach it."""
        index = self.tier_index(score)
        if index >= len(self.tiers) - 1:
            return None
        upcoming = self.tiers[index + 1]
        if upcoming.min_score > self._config.max_reputation:
            return None
        return {
            "tier": upcoming.standing.value,
            "min_score": upcoming.min_score,
            "points_needed": upcoming.min_score - score,
        }

    def standing_of(self, faction_id: str) -> Standing | None:
        """Current tier name for a faction, or None if unknown."""
        record = self._state.reputations.get(faction_id)
        if record is None:
            return None
        return self.tier_for_score(record.score).standing

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def init_record(self, faction_id: str) -> ReputationRecord:
        """Create the record for a new faction at the configured default."""
        record = ReputationRecord(
            faction_id=faction_id,
            score=self._config.clamp(self._config.default_player_reputation),
        )
        self._state.reputations[faction_id] = record
        return record

    def drop_record(self, faction_id: str) -> None:
        self._state.reputations.pop(faction_id, None)

    def _write(self, faction_id: str, value: int, delta: int, reason: str, source: str) -> tuple[int, int]:
        """Clamp and store. Returns (old_score, new_score)."""
        record = self._state.reputations[faction_id]
        old_score = record.score
        record.score = self._config.clamp(value)
        record.updated_at = datetime.now()

        if record.score != old_score:
            self._history.append(ReputationChange(
                faction_id=faction_id,
                old_score=old_score,
                new_score=record.score,
                delta=record.score - old_score if source == "set" else delta,
                reason=reason,
                source=source,
            ))
            if len(self._history) > HISTORY_LIMIT:
                self._history = self._history[-HISTORY_LIMIT:]
            self._announce(faction_id, old_score, record.score, reason, source)

        return old_score, record.score

    def _announce(self, faction_id: str, old_score: int, new_score: int, reason: str, source: str) -> None:
        old_tier = self.tier_for_score(old_score).standing
        new_tier = self.tier_for_score(new_score).standing

        self.engine.emit(
            EventType.REPUTATION_CHANGED,
            faction_id=faction_id,
            old_score=old_score,
            new_score=new_score,
            reason=reason,
            source=source,
        )
        if old_tier != new_tier:
            logger.info(f"Standing with {faction_id}: {old_tier.value} → {new_tier.value}")
            self.engine.emit(
                EventType.STANDING_CHANGED,
                faction_id=faction_id,
                before=old_tier.value,
                after=new_tier.value,
                reason=reason,
            )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def set_reputation(self, faction_id: str, value: int, reason: str = "") -> dict:
        """
        Set a faction's score outright.

        Args:
            faction_id: Target faction
            value: New score (clamped to configured bounds)
            reason: Description for the history log

        Returns:
            Dict with old/new score and the new tier, or a failure
        """
        if faction_id not in self._state.reputations:
            return unknown_faction(faction_id)
        if not _is_whole(value):
            return failure(ErrorCode.INVALID_ARGUMENTS, f"Score must be a whole number, got {value!r}")

        old_score, new_score = self._write(faction_id, value, 0, reason, "set")
        return {
            "success": True,
            "faction_id": faction_id,
            "old_score": old_score,
            "new_score": new_score,
            "new_tier": self.tier_for_score(new_score).standing.value,
            "clamped": new_score != value,
        }

    def add_reputation(self, faction_id: str, delta: int, reason: str = "") -> dict:
        """
        Shift a faction's score by delta, with optional rivalry spread.

        When rivalry spread is enabled, every faction marked Rival to
        faction_id receives int(-delta * rivalry_spread_factor).

        Args:
            faction_id: Target faction
            delta: Score change (negative to lose standing)
            reason: What caused the change (quest, combat, ...)

        Returns:
            Dict with before/after scores and tiers, plus any spread
        """
        if faction_id not in self._state.reputations:
            return unknown_faction(faction_id)
        if not _is_whole(delta):
            return failure(ErrorCode.INVALID_ARGUMENTS, f"Delta must be a whole number, got {delta!r}")

        current = self._state.reputations[faction_id].score
        old_score, new_score = self._write(faction_id, current + delta, delta, reason, "direct")
        old_tier = self.tier_for_score(old_score).standing
        new_tier = self.tier_for_score(new_score).standing

        spread = []
        if self._config.rivalry_reputation_spread and delta:
            spread = self._spread_to_rivals(faction_id, delta, reason)

        logger.debug(f"Reputation {faction_id}: {old_score} → {new_score} ({reason})")

        return {
            "success": True,
            "faction_id": faction_id,
            "old_score": old_score,
            "new_score": new_score,
            "old_tier": old_tier.value,
            "new_tier": new_tier.value,
            "delta": delta,
            "tier_changed": old_tier != new_tier,
            "clamped": new_score != current + delta,
            "reason": reason,
            "spread": spread,
        }

    def _spread_to_rivals(self, faction_id: str, delta: int, reason: str) -> list[dict]:
        rival_delta = int(-delta * self._config.rivalry_spread_factor)
        if rival_delta == 0:
            return []

        spread = []
        for rival_id in self.engine.factions.related_factions(faction_id, {Relationship.RIVAL}):
            if rival_id not in self._state.reputations:
                continue
            current = self._state.reputations[rival_id].score
            old_score, new_score = self._write(
                rival_id,
                current + rival_delta,
                rival_delta,
                f"Rivalry with {faction_id}: {reason}" if reason else f"Rivalry with {faction_id}",
                "rivalry",
            )
            spread.append({
                "faction_id": rival_id,
                "delta": rival_delta,
                "old_score": old_score,
                "new_score": new_score,
            })
        return spread

    def get_reputation(self, faction_id: str) -> dict:
        """Full read of a faction's score and what its tier grants."""
        record = self._state.reputations.get(faction_id)
        if record is None:
            return unknown_faction(faction_id)

        tier = self.tier_for_score(record.score)
        return {
            "success": True,
            "faction_id": faction_id,
            "score": record.score,
            "tier": tier.standing.value,
            "price_modifier": tier.price_modifier,
            "access_level": tier.access_level,
            "attack_on_sight": tier.attack_on_sight,
            "next_threshold": self.next_threshold(record.score),
        }

    def get_all_reputations(self, include_hidden: bool = False) -> list[dict]:
        """Every faction's reputation, highest score first."""
        views = []
        for faction_id, record in self._state.reputations.items():
            faction = self._state.factions.get(faction_id)
            if faction is None or (faction.is_hidden and not include_hidden):
                continue
            view = self.get_reputation(faction_id)
            view["name"] = faction.name
            views.append(view)
        return sorted(views, key=lambda v: (-v["score"], v["faction_id"]))

    def get_history(self, faction_id: str | None = None) -> list[ReputationChange]:
        """
        Recent score changes, oldest first.

        Args:
            faction_id: Filter to one faction, or None for all
        """
        if faction_id is None:
            return list(self._history)
        return [c for c in self._history if c.faction_id == faction_id]

    def clear_history(self) -> None:
        self._history.clear()


def _is_whole(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
