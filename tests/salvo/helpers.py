from __future__ import annotations

from typing import Any

from salvo.game.core import rules
from salvo.game.core.models import DEFAULT_FLEET, Orientation, PlacementMap, Player, ShipType
from salvo.game.core.reconciliation import RemoteUnavailableError


def make_row_layout() -> PlacementMap:
    """Each ship horizontal at the start of its own row: rows 0, 1, 2, 3, 4."""
    return {
        ship: tuple(row * 10 + offset for offset in range(ship.size))
        for row, ship in enumerate(DEFAULT_FLEET)
    }


def fleet_cells(layout: PlacementMap) -> list[int]:
    return [cell for ship in DEFAULT_FLEET for cell in layout[ship]]


def place_row_layout(match: rules.MatchState, player: Player) -> None:
    for row, ship in enumerate(DEFAULT_FLEET):
        result = rules.place_ship(match, player, ship, row * 10, Orientation.HORIZONTAL)
        assert result.accepted, result.message


def battling_match() -> rules.MatchState:
    match = rules.create_match()
    for player in Player:
        place_row_layout(match, player)
        assert rules.finish_placing(match, player).accepted
    return match


class FakeAuthority:
    """Scripted authority recording every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.create_response: dict[str, Any] = {"gameId": "g-1"}
        self.place_response: dict[str, Any] = {}
        self.place_responses: list[dict[str, Any]] = []
        self.start_response: dict[str, Any] = {"success": True}
        self.shoot_responses: list[dict[str, Any]] = []
        self.unavailable = False

    def create_game(self) -> dict[str, Any]:
        self._record("create_game")
        return self.create_response

    def place_ship(
        self,
        game_id: str,
        player: Player,
        ship: ShipType,
        start: int,
        orientation: Orientation,
    ) -> dict[str, Any]:
        self._record("place_ship", game_id, player, ship, start, orientation)
        if self.place_responses:
            return self.place_responses.pop(0)
        return self.place_response

    def start(self, game_id: str) -> dict[str, Any]:
        self._record("start", game_id)
        return self.start_response

    def shoot(self, game_id: str, player: Player, index: int) -> dict[str, Any]:
        self._record("shoot", game_id, player, index)
        if self.shoot_responses:
            return self.shoot_responses.pop(0)
        return {"result": "Miss!"}

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def _record(self, *call: Any) -> None:
        if self.unavailable:
            raise RemoteUnavailableError("connection refused")
        self.calls.append(call)
