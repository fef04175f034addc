"""
Snapshot storage abstraction.

Separates persistence from engine logic for testability.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from .schema import StateSnapshot

logger = logging.getLogger(__name__)


@runtime_checkable
class SnapshotStore(Protocol):
    """
    Abstract storage interface for engine snapshots.

    Implementations:
    - JsonSnapshotStore: File-based persistence (production)
    - MemorySnapshotStore: In-memory storage (testing)
    """

    def save(self, name: str, snapshot: StateSnapshot) -> None:
        """Persist a snapshot under a name."""
        ...

    def load(self, name: str) -> StateSnapshot | None:
        """Load a snapshot by name. Returns None if not found."""
        ...

    def delete(self, name: str) -> bool:
        """Delete a snapshot. Returns True if deleted."""
        ...

    def list_all(self) -> list[dict]:
        """List all snapshots with metadata."""
        ...

    def exists(self, name: str) -> bool:
        """Check if a snapshot exists."""
        ...


class JsonSnapshotStore:
    """
    File-based snapshot storage using JSON.

    One file per snapshot name. The previous save is kept as
    <name>.json.bak.
    """

    def __init__(self, saves_dir: Path | str = "saves"):
        self.saves_dir = Path(saves_dir)
        self.saves_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        return self.saves_dir / f"{name}.json"

    def save(self, name: str, snapshot: StateSnapshot) -> None:
        """Save snapshot to JSON file with backup."""
        save_file = self._path(name)

        if save_file.exists():
            backup = save_file.with_suffix(".json.bak")
            backup.write_text(save_file.read_text(encoding="utf-8"), encoding="utf-8")

        save_file.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Saved snapshot '{name}' to {save_file}")

    def load(self, name: str) -> StateSnapshot | None:
        save_file = self._path(name)
        if not save_file.exists():
            return None

        try:
            data = json.loads(save_file.read_text(encoding="utf-8"))
            return StateSnapshot.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Could not read snapshot '{name}': {e}")
            return None

    def delete(self, name: str) -> bool:
        save_file = self._path(name)
        if save_file.exists():
            save_file.unlink()
            return True
        return False

    def list_all(self) -> list[dict]:
        """
        List all snapshots, newest first.

        Returns list of dicts with: name, factions, exported_at
        """
        saves = []
        for f in sorted(
            self.saves_dir.glob("*.json"),
            key=lambda x: x.stat().st_mtime,
            reverse=True,
        ):
            try:
                data = json.loads(f.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                continue
            if not isinstance(data, dict):
                continue
            saves.append({
                "name": f.stem,
                "factions": len(data.get("factions", {})),
                "exported_at": data.get("exported_at", ""),
            })
        return saves

    def exists(self, name: str) -> bool:
        return self._path(name).exists()


class MemorySnapshotStore:
    """
    In-memory snapshot storage for testing.

    Stores deep copies so later engine mutations don't leak into saves.
    """

    def __init__(self):
        self._snapshots: dict[str, StateSnapshot] = {}

    def save(self, name: str, snapshot: StateSnapshot) -> None:
        self._snapshots[name] = snapshot.model_copy(deep=True)

    def load(self, name: str) -> StateSnapshot | None:
        snapshot = self._snapshots.get(name)
        return snapshot.model_copy(deep=True) if snapshot else None

    def delete(self, name: str) -> bool:
        if name in self._snapshots:
            del self._snapshots[name]
            return True
        return False

    def list_all(self) -> list[dict]:
        return [
            {
                "name": name,
                "factions": len(snap.factions),
                "exported_at": snap.exported_at.isoformat(),
            }
            for name, snap in sorted(
                self._snapshots.items(),
                key=lambda x: x[1].exported_at,
                reverse=True,
            )
        ]

    def exists(self, name: str) -> bool:
        return name in self._snapshots

    def clear(self) -> None:
        """Clear all stored snapshots."""
        self._snapshots.clear()
