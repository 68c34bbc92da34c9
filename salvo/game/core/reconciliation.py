"""Translation of remote authority responses into local verdicts.

The authority speaks loosely-typed JSON. Everything here maps those payloads
onto the small verdict types the turn rules consume, so the rules never see
raw responses and behave the same with or without an authority.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from salvo.game.core.models import Orientation, Player, ShipType


class RemoteUnavailableError(Exception):
    """Raised when the authority cannot be reached or answers unusably."""


class Authority(Protocol):
    """Remote decision-maker adjudicating placements and shots."""

    def create_game(self) -> dict[str, Any]: ...

    def place_ship(
        self,
        game_id: str,
        player: Player,
        ship: ShipType,
        start: int,
        orientation: Orientation,
    ) -> dict[str, Any]: ...

    def start(self, game_id: str) -> dict[str, Any]: ...

    def shoot(self, game_id: str, player: Player, index: int) -> dict[str, Any]: ...


@dataclass(frozen=True, slots=True)
class AttackVerdict:
    """Authority ruling on one shot."""

    result: str
    next_turn: Player | None = None
    winner: Player | None = None
    game_over: bool = False


@dataclass(frozen=True, slots=True)
class PlacementVerdict:
    """Authority ruling on one ship placement."""

    accepted: bool
    message: str


@dataclass(frozen=True, slots=True)
class StartVerdict:
    """Authority ruling on starting the battle."""

    started: bool
    message: str


def interpret_attack_response(resp: object) -> AttackVerdict:
    payload = resp if isinstance(resp, dict) else {}
    result = payload.get("result")
    winner_raw = payload.get("winner")
    return AttackVerdict(
        result=result if isinstance(result, str) else "",
        next_turn=Player.from_wire(payload.get("currentTurn")),
        winner=Player.from_wire(winner_raw),
        game_over=bool(payload.get("isGameOver")) or bool(winner_raw),
    )


def interpret_placement_response(resp: object) -> PlacementVerdict:
    """A missing `success` flag counts as acceptance."""
    payload = resp if isinstance(resp, dict) else {}
    message = payload.get("message")
    success = payload.get("success")
    if success is False:
        return PlacementVerdict(accepted=False, message=_text(message, "Placement failed"))
    return PlacementVerdict(accepted=True, message=_text(message, "Ship placed"))


def interpret_start_response(resp: object) -> StartVerdict:
    """Only an explicit `success: true` starts the battle."""
    payload = resp if isinstance(resp, dict) else {}
    message = payload.get("message")
    if payload.get("success") is True:
        return StartVerdict(started=True, message=_text(message, "Game started (server)"))
    return StartVerdict(started=False, message=_text(message, "Could not start game"))


def parse_create_game_response(resp: object) -> tuple[str | None, str | None]:
    """Return `(game_id, message)`; the id may sit at top level or under `game`."""
    payload = resp if isinstance(resp, dict) else {}
    game = payload.get("game")
    game_id = payload.get("gameId") or (game.get("gameId") if isinstance(game, dict) else None)
    if game_id:
        return str(game_id), None
    message = payload.get("message")
    return None, message if isinstance(message, str) else None


def _text(value: object, default: str) -> str:
    if isinstance(value, str) and value:
        return value
    return default
