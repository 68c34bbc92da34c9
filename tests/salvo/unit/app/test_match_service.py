import logging
import random

from salvo.game.app.match_service import MatchService
from salvo.game.core.board import cell_at
from salvo.game.core.models import (
    DEFAULT_FLEET,
    HIT,
    MISS,
    MatchPhase,
    Player,
    ShipOccupied,
    ShipType,
)
from salvo.game.core.rules import RejectionKind
from salvo.game.infra.store import InMemoryStateStore


def _place_rows(service: MatchService, player: str) -> None:
    for row, ship in enumerate(DEFAULT_FLEET):
        result = service.place_ship(player, ship.value, row * 10, "horizontal")
        assert result.accepted, result.message


def _start_battle(service: MatchService) -> None:
    for player in ("player1", "player2"):
        _place_rows(service, player)
        assert service.finish_placing(player).accepted


def test_full_local_match_flow(service: MatchService) -> None:
    _start_battle(service)
    snapshot = service.snapshot()
    assert snapshot.phase is MatchPhase.BATTLING
    assert snapshot.turn is Player.A
    assert snapshot.last_message == "Battle started. Player A to move"

    hit = service.attack("player1", 40)
    assert hit.message == "Player A HIT B at 40"
    miss = service.attack("player2", 99)
    assert miss.message == "Player B missed at 99"
    sunk = service.attack("player1", 41)
    assert sunk.messages == ("Player A HIT B at 41", "Ship destroyer sunk (B)")

    snapshot = service.snapshot()
    assert snapshot.sunk[Player.B][ShipType.DESTROYER]
    assert cell_at(snapshot.boards[Player.B], 41) == HIT
    assert cell_at(snapshot.boards[Player.A], 99) == MISS


def test_unknown_player_is_illegal(service: MatchService) -> None:
    result = service.place_ship("player3", "carrier", 0)
    assert result.rejection is RejectionKind.ILLEGAL_INTENT
    assert result.message == "Unknown player: player3"
    assert service.attack("nobody", 0).rejection is RejectionKind.ILLEGAL_INTENT


def test_rejected_intent_does_not_touch_store(service: MatchService, store) -> None:
    assert service.place_ship("player1", "carrier", 7).rejection is (
        RejectionKind.VALIDATION_REJECTED
    )
    assert store.get("boardA") is None
    assert service.snapshot().last_message == "Place your fleet."


def test_accepted_intents_persist_every_slot(service: MatchService, store) -> None:
    service.place_ship("player1", "destroyer", 0, "vertical")

    board = store.get("boardA")
    assert len(board) == 100
    assert board[0] == "ship:destroyer" and board[10] == "ship:destroyer"
    assert store.get("placedShipsA") == {"destroyer": [0, 10]}
    assert store.get("placedShipsB") == {}
    assert store.get("scene")["phase"] == "PLACING"


def test_reload_restores_match_from_store(store) -> None:
    first = MatchService(store)
    _start_battle(first)
    first.attack("player1", 0)
    first.attack("player2", 55)

    reloaded = MatchService(store)
    snapshot = reloaded.snapshot()
    assert snapshot.phase is MatchPhase.BATTLING
    assert snapshot.turn is Player.A
    assert snapshot.ready == {Player.A: True, Player.B: True}
    assert cell_at(snapshot.boards[Player.B], 0) == HIT
    assert snapshot.boards[Player.B].ship_at(0) is ShipType.CARRIER
    assert cell_at(snapshot.boards[Player.B], 1) == ShipOccupied(ShipType.CARRIER)
    assert snapshot.placements == first.snapshot().placements
    assert reloaded.attack("player1", 0).rejection is RejectionKind.ALREADY_ATTACKED


def test_reload_recomputes_sunk_flags(store) -> None:
    first = MatchService(store)
    _start_battle(first)
    first.attack("player1", 40)
    first.attack("player2", 99)
    first.attack("player1", 41)

    reloaded = MatchService(store)
    assert reloaded.snapshot().sunk[Player.B][ShipType.DESTROYER]
    assert not reloaded.snapshot().sunk[Player.B][ShipType.CARRIER]


def test_corrupt_slots_fall_back_to_defaults(caplog) -> None:
    store = InMemoryStateStore(
        {
            "boardA": ["junk"] * 100,
            "placedShipsA": {"destroyer": [0, 1]},
            "placedShipsB": {"frigate": [0]},
            "scene": {"phase": "SLEEPING"},
        }
    )
    with caplog.at_level(logging.WARNING):
        service = MatchService(store)

    snapshot = service.snapshot()
    assert snapshot.phase is MatchPhase.PLACING
    assert snapshot.placements == {Player.A: {}, Player.B: {}}
    assert "store_slot_invalid" in caplog.text


def test_battling_scene_without_fleets_is_ignored() -> None:
    store = InMemoryStateStore(
        {"scene": {"version": 1, "phase": "BATTLING", "currentTurn": "player2"}}
    )
    snapshot = MatchService(store).snapshot()
    assert snapshot.phase is MatchPhase.PLACING
    assert snapshot.turn is Player.A


def test_auto_place_fills_remaining_ships(service: MatchService) -> None:
    service.place_ship("player1", "carrier", 0)
    result = service.auto_place("player1", random.Random(3))
    assert result.accepted

    placements = service.snapshot().placements[Player.A]
    assert set(placements) == set(DEFAULT_FLEET)
    assert placements[ShipType.CARRIER] == (0, 1, 2, 3, 4)
    assert service.finish_placing("player1").accepted

    again = service.auto_place("player1", random.Random(3))
    assert again.rejection is RejectionKind.ILLEGAL_INTENT


def test_reset_clears_everything(service: MatchService, store) -> None:
    _start_battle(service)
    service.attack("player1", 0)

    result = service.reset()
    assert result.message == "Boards reset"
    snapshot = service.snapshot()
    assert snapshot.phase is MatchPhase.PLACING
    assert snapshot.placements == {Player.A: {}, Player.B: {}}
    assert store.get("boardB") == [None] * 100
    assert store.get("scene")["gameId"] is None


def test_snapshot_is_detached_from_match(service: MatchService) -> None:
    service.place_ship("player1", "carrier", 0)
    snapshot = service.snapshot()
    snapshot.placements[Player.A].clear()
    assert ShipType.CARRIER in service.match.placements[Player.A]


def test_ready_flag_without_fleet_is_dropped_on_load(caplog) -> None:
    store = InMemoryStateStore(
        {
            "placedShipsA": {"carrier": [0, 1]},
            "placedShipsB": {
                ship.value: [row * 10 + i for i in range(ship.size)]
                for row, ship in enumerate(DEFAULT_FLEET)
            },
            "scene": {"version": 1, "phase": "PLACING", "ready": {"A": True, "B": False}},
        }
    )
    with caplog.at_level(logging.WARNING):
        service = MatchService(store)

    assert service.snapshot().ready == {Player.A: False, Player.B: False}
    assert "store_ready_flag_dropped" in caplog.text
    assert cell_at(service.snapshot().boards[Player.B], 0) == ShipOccupied(ShipType.CARRIER)
    assert service.place_ship("player1", "carrier", 0).accepted
    assert service.finish_placing("player2").accepted
    assert service.snapshot().phase is MatchPhase.PLACING


def test_auto_place_reports_every_placed_ship(service: MatchService) -> None:
    result = service.auto_place("player2", random.Random(11))
    assert result.accepted
    assert len(result.messages) == len(DEFAULT_FLEET)
    assert result.messages[0] == "Placed carrier for player B"
    assert len(result.positions) == 17
