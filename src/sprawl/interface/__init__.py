"""Front-end bridges into the engine."""

from .command_registry import (
    Command,
    CommandCategory,
    CommandRegistry,
    create_default_registry,
)

__all__ = ["Command", "CommandCategory", "CommandRegistry", "create_default_registry"]
