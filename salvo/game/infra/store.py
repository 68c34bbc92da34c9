"""Key-value state stores for persisted match slots."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Protocol

import orjson


class StateStore(Protocol):
    """Get/set storage of JSON-like values per named slot."""

    def get(self, slot: str) -> Any | None: ...

    def set(self, slot: str, value: Any) -> None: ...


class InMemoryStateStore:
    """Dict-backed store; values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._slots: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, slot: str) -> Any | None:
        return copy.deepcopy(self._slots.get(slot))

    def set(self, slot: str, value: Any) -> None:
        self._slots[slot] = copy.deepcopy(value)


class JsonFileStateStore:
    """One JSON file per slot under a root directory."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    def get(self, slot: str) -> Any | None:
        """Return the slot value, or None when missing or unreadable."""
        path = self._path_for(slot)
        try:
            raw = path.read_bytes()
        except OSError:
            return None
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError:
            return None

    def set(self, slot: str, value: Any) -> None:
        path = self._path_for(slot)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_bytes(orjson.dumps(value, option=orjson.OPT_INDENT_2))
        tmp.replace(path)

    def _path_for(self, slot: str) -> Path:
        cleaned = slot.strip()
        if not cleaned or not all(char.isalnum() or char in {"-", "_"} for char in cleaned):
            raise ValueError(f"Invalid slot name: {slot!r}")
        return self._root / f"{cleaned}.json"
