"""Tests for snapshot stores."""

from sprawl import StandingEngine
from sprawl.state import JsonSnapshotStore, MemorySnapshotStore, SnapshotStore


def _snapshot():
    engine = StandingEngine()
    engine.create_faction("corp1", "Arasaka-Lin", "Corporation", controlled_territories=["downtown"])
    engine.set_reputation("corp1", 42)
    return engine.snapshot()


class TestJsonSnapshotStore:

    def test_protocol(self, tmp_path):
        assert isinstance(JsonSnapshotStore(tmp_path), SnapshotStore)

    def test_save_load(self, tmp_path):
        store = JsonSnapshotStore(tmp_path)
        store.save("slot1", _snapshot())

        loaded = store.load("slot1")

        assert loaded.reputations["corp1"].score == 42
        assert loaded.territories == {"downtown": "corp1"}

    def test_backup_on_overwrite(self, tmp_path):
        store = JsonSnapshotStore(tmp_path)
        store.save("slot1", _snapshot())
        store.save("slot1", _snapshot())

        assert (tmp_path / "slot1.json.bak").exists()

    def test_missing_and_corrupt(self, tmp_path):
        store = JsonSnapshotStore(tmp_path)
        (tmp_path / "broken.json").write_text("{nope")

        assert store.load("missing") is None
        assert store.load("broken") is None

    def test_list_and_delete(self, tmp_path):
        store = JsonSnapshotStore(tmp_path)
        store.save("slot1", _snapshot())

        listing = store.list_all()
        assert listing[0]["name"] == "slot1"
        assert listing[0]["factions"] == 1

        assert store.delete("slot1") is True
        assert store.exists("slot1") is False
        assert store.delete("slot1") is False


class TestMemorySnapshotStore:

    def test_protocol(self):
        assert isinstance(MemorySnapshotStore(), SnapshotStore)

    def test_saved_copy_is_isolated(self):
        store = MemorySnapshotStore()
        snapshot = _snapshot()
        store.save("slot1", snapshot)

        snapshot.reputations["corp1"].score = -5

        assert store.load("slot1").reputations["corp1"].score == 42

    def test_list_delete_clear(self):
        store = MemorySnapshotStore()
        store.save("a", _snapshot())
        store.save("b", _snapshot())

        assert {s["name"] for s in store.list_all()} == {"a", "b"}
        assert store.delete("a") is True
        store.clear()
        assert store.exists("b") is False
