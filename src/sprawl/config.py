"""
Engine configuration.

Options arrive as a plain dict (from a host program, or a JSON/YAML file).
Bad values never stop the engine: an unrecognized key is ignored and a
mismatched value falls back to that option's default.
"""

import json
import logging
import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class EngineConfig(BaseModel):
    """Reputation bounds and rivalry rules."""
    default_player_reputation: int = 0
    min_reputation: int = -1000
    max_reputation: int = 1000
    rivalry_reputation_spread: bool = False
    rivalry_spread_factor: float = 0.5

    def clamp(self, value: int) -> int:
        return max(self.min_reputation, min(self.max_reputation, value))

    @classmethod
    def from_options(cls, options: dict[str, Any] | None) -> "EngineConfig":
        """
        Build a config from a loose options dict.

        Keys may be camelCase (``minReputation``) or snake_case
        (``min_reputation``). Each value is validated on its own so one bad
        option doesn't discard the others.
        """
        if not options:
            return cls()

        accepted: dict[str, Any] = {}
        for key, value in options.items():
            field_name = _OPTION_KEYS.get(key)
            if field_name is None:
                logger.debug(f"Ignoring unknown config option: {key}")
                continue
            if not _valid_for(field_name, value):
                logger.warning(
                    f"Invalid value {value!r} for config option '{key}', using default"
                )
                continue
            accepted[field_name] = value

        config = cls.model_validate(accepted)
        if config.min_reputation > config.max_reputation:
            logger.warning(
                f"minReputation {config.min_reputation} > maxReputation "
                f"{config.max_reputation}, using default bounds"
            )
            defaults = cls()
            config = config.model_copy(update={
                "min_reputation": defaults.min_reputation,
                "max_reputation": defaults.max_reputation,
            })
        return config


# Host programs send camelCase
_OPTION_KEYS: dict[str, str] = {
    "defaultPlayerReputation": "default_player_reputation",
    "minReputation": "min_reputation",
    "maxReputation": "max_reputation",
    "rivalryReputationSpread": "rivalry_reputation_spread",
    "rivalrySpreadFactor": "rivalry_spread_factor",
}
_OPTION_KEYS.update({name: name for name in _OPTION_KEYS.values()})


def _valid_for(field_name: str, value: Any) -> bool:
    """Strict per-field type check (no "10" -> 10 coercion, no bool for int, no NaN)."""
    annotation = EngineConfig.model_fields[field_name].annotation
    if annotation is bool:
        return isinstance(value, bool)
    if annotation is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if annotation is float:
        return (isinstance(value, (int, float)) and not isinstance(value, bool)
                and math.isfinite(value))
    try:
        EngineConfig.model_validate({field_name: value})
    except ValidationError:
        return False
    return True


def load_config(path: Path | str) -> EngineConfig:
    """Load config from a JSON or YAML file, or return defaults if unreadable."""
    path = Path(path)

    if not path.exists():
        return EngineConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                options = yaml.safe_load(f)
            else:
                options = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError, OSError) as e:
        logger.warning(f"Could not read config {path}: {e}")
        return EngineConfig()

    if not isinstance(options, dict):
        logger.warning(f"Config {path} is not a mapping, using defaults")
        return EngineConfig()

    return EngineConfig.from_options(options)
