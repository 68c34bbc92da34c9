import pytest

from salvo.game.infra.store import InMemoryStateStore, JsonFileStateStore


def test_in_memory_store_copies_values() -> None:
    store = InMemoryStateStore({"scene": {"phase": "PLACING"}})
    value = store.get("scene")
    value["phase"] = "BATTLING"
    assert store.get("scene") == {"phase": "PLACING"}
    assert store.get("missing") is None

    board = [None, "Hit"]
    store.set("boardA", board)
    board.append("Miss")
    assert store.get("boardA") == [None, "Hit"]


def test_json_file_store_round_trips_slots(tmp_path) -> None:
    store = JsonFileStateStore(tmp_path / "state")
    store.set("placedShipsA", {"destroyer": [0, 1]})
    assert store.get("placedShipsA") == {"destroyer": [0, 1]}
    assert JsonFileStateStore(tmp_path / "state").get("placedShipsA") == {"destroyer": [0, 1]}
    assert not list((tmp_path / "state").glob("*.tmp"))


def test_json_file_store_missing_or_corrupt_slot_is_none(tmp_path) -> None:
    store = JsonFileStateStore(tmp_path)
    assert store.get("boardB") is None
    (tmp_path / "boardB.json").write_text("{broken", encoding="utf-8")
    assert store.get("boardB") is None


def test_json_file_store_rejects_path_like_slot_names(tmp_path) -> None:
    store = JsonFileStateStore(tmp_path)
    with pytest.raises(ValueError):
        store.set("../escape", 1)
    with pytest.raises(ValueError):
        store.get("")
