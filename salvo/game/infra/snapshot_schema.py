"""Persisted slot payloads and their validation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from salvo.game.core.board import Board, empty_board, with_cells
from salvo.game.core.fleet import validate_placement_map
from salvo.game.core.models import (
    CELL_COUNT,
    HIT,
    MISS,
    Hit,
    MatchPhase,
    Miss,
    PlacementMap,
    Player,
    ShipOccupied,
    ShipType,
    parse_ship,
)

BOARD_SLOTS: dict[Player, str] = {Player.A: "boardA", Player.B: "boardB"}
PLACEMENT_SLOTS: dict[Player, str] = {Player.A: "placedShipsA", Player.B: "placedShipsB"}
SCENE_SLOT = "scene"

_SHIP_PREFIX = "ship:"


@dataclass(slots=True)
class SceneModel:
    """Serializable match scene (everything but boards and placements)."""

    game_id: str | None = None
    phase: MatchPhase = MatchPhase.PLACING
    turn: Player = Player.A
    winner: Player | None = None
    ready_a: bool = False
    ready_b: bool = False


def board_to_payload(board: Board) -> list[str | None]:
    """Encode a board as 100 tokens: null, `ship:<id>`, `Hit` or `Miss`."""
    tokens: list[str | None] = []
    for cell in board.cells():
        if isinstance(cell, ShipOccupied):
            tokens.append(f"{_SHIP_PREFIX}{cell.ship_id.value}")
        elif isinstance(cell, Hit):
            tokens.append("Hit")
        elif isinstance(cell, Miss):
            tokens.append("Miss")
        else:
            tokens.append(None)
    return tokens


def payload_to_board(payload: object, placements: Mapping[ShipType, tuple[int, ...]]) -> Board:
    """Decode board tokens; hit cells regain their owner from `placements`."""
    if not isinstance(payload, list) or len(payload) != CELL_COUNT:
        raise ValueError(f"Board payload must be a list of {CELL_COUNT} cells.")

    owners = {position: ship for ship, positions in placements.items() for position in positions}
    ship_cells: dict[ShipType, list[int]] = {}
    hits: list[int] = []
    misses: list[int] = []
    for index, token in enumerate(payload):
        if token is None:
            continue
        if token == "Hit":
            hits.append(index)
            if index in owners:
                ship_cells.setdefault(owners[index], []).append(index)
        elif token == "Miss":
            misses.append(index)
        elif isinstance(token, str) and token.startswith(_SHIP_PREFIX):
            ship = parse_ship(token[len(_SHIP_PREFIX) :])
            if ship is None:
                raise ValueError(f"Unknown ship in board cell {index}: {token!r}.")
            ship_cells.setdefault(ship, []).append(index)
        else:
            raise ValueError(f"Malformed board cell {index}: {token!r}.")

    board = empty_board()
    for ship, indices in ship_cells.items():
        board = with_cells(board, indices, ShipOccupied(ship))
    if hits:
        board = with_cells(board, hits, HIT)
    if misses:
        board = with_cells(board, misses, MISS)
    return board


def placements_to_payload(placements: Mapping[ShipType, tuple[int, ...]]) -> dict[str, list[int]]:
    return {ship.value: list(positions) for ship, positions in placements.items()}


def payload_to_placements(payload: object) -> PlacementMap:
    """Decode and validate a `{shipId: [indices]}` payload."""
    if not isinstance(payload, dict):
        raise ValueError("Placement payload must be an object.")
    placements: PlacementMap = {}
    for raw_ship, raw_positions in payload.items():
        ship = parse_ship(raw_ship)
        if ship is None:
            raise ValueError(f"Unknown ship id: {raw_ship!r}.")
        if not isinstance(raw_positions, list) or not all(
            isinstance(item, int) and not isinstance(item, bool) for item in raw_positions
        ):
            raise ValueError(f"Positions for {ship.value} must be a list of integers.")
        placements[ship] = tuple(raw_positions)
    valid, reason = validate_placement_map(placements)
    if not valid:
        raise ValueError(reason)
    return placements


def scene_to_payload(scene: SceneModel) -> dict[str, object]:
    return {
        "version": 1,
        "gameId": scene.game_id,
        "phase": scene.phase.value,
        "currentTurn": scene.turn.wire_name,
        "winner": scene.winner.wire_name if scene.winner is not None else None,
        "ready": {Player.A.value: scene.ready_a, Player.B.value: scene.ready_b},
    }


def payload_to_scene(payload: object) -> SceneModel:
    """Decode a scene payload."""
    if not isinstance(payload, dict):
        raise ValueError("Scene payload must be an object.")
    if payload.get("version", 1) != 1:
        raise ValueError("Unsupported scene version.")
    try:
        phase = MatchPhase(str(payload.get("phase", MatchPhase.PLACING.value)))
    except ValueError as exc:
        raise ValueError("Unknown match phase in scene payload.") from exc
    turn = Player.from_wire(payload.get("currentTurn", Player.A.wire_name))
    if turn is None:
        raise ValueError("Unknown current turn in scene payload.")
    raw_winner = payload.get("winner")
    winner = Player.from_wire(raw_winner)
    if raw_winner is not None and winner is None:
        raise ValueError("Unknown winner in scene payload.")
    ready = payload.get("ready", {})
    if not isinstance(ready, dict):
        raise ValueError("Scene ready flags must be an object.")
    game_id = payload.get("gameId")
    return SceneModel(
        game_id=str(game_id) if game_id else None,
        phase=phase,
        turn=turn,
        winner=winner,
        ready_a=bool(ready.get(Player.A.value, False)),
        ready_b=bool(ready.get(Player.B.value, False)),
    )
