"""
Command registry for Sprawl.

Bridges slash commands ("/rep corp1 +10 delivered the drive") onto engine
calls. Any front end (chat client, terminal, HTTP wrapper) parses nothing
itself: it hands the raw line to CommandRegistry.dispatch() and renders the
result dict it gets back.

Pattern: registration with context predicates, fuzzy completion.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TYPE_CHECKING

from ..systems.errors import ErrorCode, failure

if TYPE_CHECKING:
    from ..engine import StandingEngine

logger = logging.getLogger(__name__)


class CommandCategory(str, Enum):
    """Command categories for organized display."""
    FACTION = "Faction"
    REPUTATION = "Reputation"
    TERRITORY = "Territory"
    SHOP = "Shop"
    SYSTEM = "System"


# Type aliases
CommandHandler = Callable[["StandingEngine", list[str]], dict]
ContextPredicate = Callable[["StandingEngine"], bool]


# -----------------------------------------------------------------------------
# Context Predicates
# -----------------------------------------------------------------------------

def has_factions(engine: "StandingEngine") -> bool:
    return bool(engine.state.factions)


def has_shops(engine: "StandingEngine") -> bool:
    return bool(engine.state.shops)


def always_available(engine: "StandingEngine") -> bool:
    return True


# -----------------------------------------------------------------------------
# Command Definition
# -----------------------------------------------------------------------------

@dataclass
class Command:
    """
    A single command definition with all metadata.

    Attributes:
        name: The command name including slash (e.g., "/rep")
        description: Short description for help and completion
        category: Category for grouping in help/completion
        handler: Function to execute the command (engine, args)
        usage: Argument synopsis shown on bad input
        min_args: Fewest positional arguments the handler accepts
        available_when: Predicate function checking if command is available
        aliases: Alternative names for the command
        hidden: If True, don't show in help or completion
        mutates: If True, the command changes engine state and never runs
            from an autocorrected name
    """
    name: str
    description: str
    category: CommandCategory
    handler: CommandHandler
    usage: str = ""
    min_args: int = 0
    available_when: ContextPredicate = always_available
    aliases: list[str] = field(default_factory=list)
    hidden: bool = False
    mutates: bool = False

    def is_available(self, engine: "StandingEngine") -> bool:
        return self.available_when(engine)


# -----------------------------------------------------------------------------
# Fuzzy Matching
# -----------------------------------------------------------------------------

def fuzzy_match(pattern: str, text: str) -> tuple[bool, int]:
    """
    Check if pattern fuzzy-matches text.
    Returns (matches, score) where score is higher for better matches.
    """
    pattern = pattern.lower()
    text = text.lower()

    # Exact prefix match gets highest score
    if text.startswith(pattern):
        return True, 1000 - len(text)

    # Fuzzy match: all pattern chars must appear in order
    pattern_idx = 0
    score = 0
    consecutive = 0

    for i, char in enumerate(text):
        if pattern_idx < len(pattern) and char == pattern[pattern_idx]:
            pattern_idx += 1
            consecutive += 1
            score += consecutive * 10
            if i == 0 or text[i - 1] in "/_-":
                score += 50
        else:
            consecutive = 0

    if pattern_idx == len(pattern):
        return True, score
    return False, 0


# -----------------------------------------------------------------------------
# Command Registry
# -----------------------------------------------------------------------------

class CommandRegistry:
    """
    Central registry for engine commands.

    Each front end builds one with create_default_registry() and routes
    every input line through dispatch().
    """

    def __init__(self):
        self._commands: dict[str, Command] = {}
        self._recent: list[str] = []
        self._max_recent = 5

    def register(self, command: Command) -> None:
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

    def command(
        self,
        name: str,
        description: str,
        category: CommandCategory,
        usage: str = "",
        min_args: int = 0,
        available_when: ContextPredicate = always_available,
        aliases: list[str] | None = None,
        hidden: bool = False,
        mutates: bool = False,
    ) -> Callable[[CommandHandler], CommandHandler]:
        """
        Decorator form of register():

            @registry.command("/rep", "Show reputation", CommandCategory.REPUTATION)
            def cmd_rep(engine, args):
                ...
        """
        def decorator(fn: CommandHandler) -> CommandHandler:
            self.register(Command(
                name=name,
                description=description,
                category=category,
                handler=fn,
                usage=usage,
                min_args=min_args,
                available_when=available_when,
                aliases=aliases or [],
                hidden=hidden,
                mutates=mutates,
            ))
            return fn
        return decorator

    def get(self, name: str) -> Command | None:
        return self._commands.get(name)

    def record_usage(self, name: str) -> None:
        """Record a command as recently used."""
        if name in self._recent:
            self._recent.remove(name)
        self._recent.insert(0, name)
        self._recent = self._recent[:self._max_recent]

    def get_recent_boost(self, name: str) -> int:
        if name in self._recent:
            idx = self._recent.index(name)
            return (self._max_recent - idx) * 100
        return 0

    def all_commands(self) -> list[Command]:
        """Get all unique commands (excludes aliases)."""
        seen = set()
        result = []
        for cmd in self._commands.values():
            if cmd.name not in seen:
                seen.add(cmd.name)
                result.append(cmd)
        return result

    def available_commands(self, engine: "StandingEngine") -> list[Command]:
        return [
            cmd for cmd in self.all_commands()
            if not cmd.hidden and cmd.is_available(engine)
        ]

    def by_category(self, engine: "StandingEngine | None" = None) -> dict[CommandCategory, list[Command]]:
        """Get commands grouped by category, alphabetical within each."""
        result: dict[CommandCategory, list[Command]] = {cat: [] for cat in CommandCategory}

        for cmd in self.all_commands():
            if cmd.hidden:
                continue
            if engine is not None and not cmd.is_available(engine):
                continue
            result[cmd.category].append(cmd)

        for cat in result:
            result[cat].sort(key=lambda c: c.name)

        return result

    def search(
        self,
        query: str,
        engine: "StandingEngine | None" = None,
        include_unavailable: bool = False,
    ) -> list[tuple[Command, int]]:
        """
        Search commands with fuzzy matching.

        Returns list of (command, score) tuples, sorted by score descending.
        """
        results: list[tuple[Command, int]] = []
        search_pattern = query.lstrip("/").lower()

        for cmd in self.all_commands():
            if cmd.hidden:
                continue
            if not include_unavailable and engine is not None and not cmd.is_available(engine):
                continue

            is_match, score = fuzzy_match(search_pattern, cmd.name.lstrip("/"))
            if not is_match:
                is_match, score = fuzzy_match(search_pattern, cmd.description)
                if is_match:
                    score = score // 2  # Description matches rank lower

            if is_match:
                results.append((cmd, score + self.get_recent_boost(cmd.name)))

        category_order = list(CommandCategory)
        results.sort(key=lambda x: (
            -x[1],
            category_order.index(x[0].category),
            x[0].name,
        ))
        return results

    def autocorrect(self, cmd: str) -> tuple[str, str | None]:
        """
        Attempt to autocorrect a mistyped command.

        Returns (corrected_cmd, correction_message) or (original_cmd, None).
        """
        if cmd in self._commands:
            return cmd, None

        results = self.search(cmd, include_unavailable=True)
        if results and results[0][1] > 500:  # High confidence threshold
            corrected = results[0][0].name
            return corrected, f"Autocorrected to {corrected}"

        return cmd, None

    def dispatch(self, engine: "StandingEngine", line: str) -> dict:
        """
        Parse and run one command line.

        Returns the handler's result dict, or a failure for unknown,
        unavailable or malformed commands.
        """
        try:
            parts = shlex.split(line.strip())
        except ValueError as e:
            return failure(ErrorCode.INVALID_ARGUMENTS, f"Could not parse input: {e}")
        if not parts:
            return failure(ErrorCode.UNKNOWN_COMMAND, "Empty command")

        name, args = parts[0].lower(), parts[1:]
        if not name.startswith("/"):
            name = f"/{name}"

        corrected, note = self.autocorrect(name)
        cmd = self.get(corrected)
        if cmd is None:
            suggestions = [c.name for c, _ in self.search(name, engine)[:3]]
            return failure(ErrorCode.UNKNOWN_COMMAND, f"Unknown command: {name}",
                           suggestions=suggestions)

        if not cmd.is_available(engine):
            return failure(ErrorCode.UNKNOWN_COMMAND, f"{cmd.name} isn't available right now")

        if note and cmd.mutates:
            return failure(ErrorCode.UNKNOWN_COMMAND, f"Unknown command: {name}. Did you mean {cmd.name}?",
                           suggestions=[cmd.name])

        if len(args) < cmd.min_args:
            return failure(ErrorCode.INVALID_ARGUMENTS, f"Usage: {cmd.name} {cmd.usage}".strip())

        try:
            result = cmd.handler(engine, args)
        except ValueError as e:
            return failure(ErrorCode.INVALID_ARGUMENTS, f"{e}. Usage: {cmd.name} {cmd.usage}".strip())

        self.record_usage(cmd.name)
        logger.debug(f"Dispatched {cmd.name} {args}")
        if note:
            result = {**result, "note": note}
        return result


# -----------------------------------------------------------------------------
# Default commands
# -----------------------------------------------------------------------------

def _int(value: str, label: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{label} must be a whole number, got {value!r}") from None


def _float(value: str, label: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{label} must be a number, got {value!r}") from None


def _faction_view(faction) -> dict[str, Any]:
    return {
        "faction_id": faction.id,
        "name": faction.name,
        "type": faction.type.value,
        "is_active": faction.is_active,
        "territories": sorted(faction.controlled_territories),
    }


def create_default_registry() -> CommandRegistry:
    """Registry with the standard reputation, territory and shop commands."""
    registry = CommandRegistry()

    @registry.command("/rep", "Show reputation with a faction", CommandCategory.REPUTATION,
                      usage="<faction>", min_args=1, available_when=has_factions)
    def cmd_rep(engine, args):
        return engine.reputation.get_reputation(args[0])

    @registry.command("/reps", "List reputation with every faction", CommandCategory.REPUTATION,
                      available_when=has_factions, aliases=["/standings"])
    def cmd_reps(engine, args):
        return {"success": True, "reputations": engine.reputation.get_all_reputations()}

    @registry.command("/adjust", "Shift reputation with a faction", CommandCategory.REPUTATION,
                      usage="<faction> <delta> [reason...]", min_args=2, available_when=has_factions,
                      mutates=True)
    def cmd_adjust(engine, args):
        delta = _int(args[1], "delta")
        return engine.reputation.add_reputation(args[0], delta, " ".join(args[2:]))

    @registry.command("/setrep", "Set reputation with a faction", CommandCategory.REPUTATION,
                      usage="<faction> <score> [reason...]", min_args=2, available_when=has_factions,
                      hidden=True, mutates=True)
    def cmd_setrep(engine, args):
        score = _int(args[1], "score")
        return engine.reputation.set_reputation(args[0], score, " ".join(args[2:]))

    @registry.command("/faction", "Show a faction summary", CommandCategory.FACTION,
                      usage="<faction>", min_args=1, available_when=has_factions)
    def cmd_faction(engine, args):
        return engine.factions.get_faction_summary(args[0])

    @registry.command("/factions", "List known factions", CommandCategory.FACTION)
    def cmd_factions(engine, args):
        faction_type = args[0] if args else None
        factions = engine.factions.list_factions(faction_type=faction_type)
        return {"success": True, "factions": [_faction_view(f) for f in factions]}

    @registry.command("/relation", "Show or set the relationship between two factions",
                      CommandCategory.FACTION, usage="<faction> <faction> [relationship]",
                      min_args=2, available_when=has_factions,
                      mutates=True)
    def cmd_relation(engine, args):
        if len(args) > 2:
            return engine.factions.set_relationship(args[0], args[1], args[2])
        return engine.factions.get_relationship(args[0], args[1])

    @registry.command("/territory", "Show who controls a territory", CommandCategory.TERRITORY,
                      usage="<territory>", min_args=1)
    def cmd_territory(engine, args):
        return {
            "success": True,
            "territory_id": args[0],
            "controller": engine.territory.get_territory_controller(args[0]),
        }

    @registry.command("/transfer", "Hand a territory to a faction", CommandCategory.TERRITORY,
                      usage="<territory> <faction> [method]", min_args=2, available_when=has_factions,
                      mutates=True)
    def cmd_transfer(engine, args):
        method = " ".join(args[2:]) or "Transfer"
        return engine.territory.transfer_territory(args[0], args[1], method)

    @registry.command("/price", "Quote a buy price", CommandCategory.SHOP,
                      usage="<shop> <item> <standing> [quantity]", min_args=3,
                      available_when=has_shops, aliases=["/buy"])
    def cmd_price(engine, args):
        quantity = _int(args[3], "quantity") if len(args) > 3 else 1
        return engine.pricing.quote_buy(args[0], args[1], args[2], quantity)

    @registry.command("/sell", "Quote a sell price", CommandCategory.SHOP,
                      usage="<shop> <item> <standing> [quantity]", min_args=3,
                      available_when=has_shops)
    def cmd_sell(engine, args):
        quantity = _int(args[3], "quantity") if len(args) > 3 else 1
        return engine.pricing.quote_sell(args[0], args[1], args[2], quantity)

    @registry.command("/access", "Check whether a standing can use a shop", CommandCategory.SHOP,
                      usage="<shop> <standing>", min_args=2, available_when=has_shops)
    def cmd_access(engine, args):
        return engine.access.can_access_shop(args[0], args[1])

    @registry.command("/supply", "Set a category supply modifier", CommandCategory.SHOP,
                      usage="<category> <modifier> [reason...]", min_args=2,
                      mutates=True)
    def cmd_supply(engine, args):
        modifier = _float(args[1], "modifier")
        return engine.shops.set_supply_modifier(args[0], modifier, " ".join(args[2:]))

    @registry.command("/help", "List available commands", CommandCategory.SYSTEM, aliases=["/?"])
    def cmd_help(engine, args):
        grouped = registry.by_category(engine)
        return {
            "success": True,
            "commands": {
                category.value: [
                    {"name": c.name, "usage": c.usage, "description": c.description}
                    for c in commands
                ]
                for category, commands in grouped.items()
                if commands
            },
        }

    return registry
