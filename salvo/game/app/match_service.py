"""Match orchestration between the view layer, the rules, the store and an authority."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import cast

from salvo.game.core import rules
from salvo.game.core.board import Board
from salvo.game.core.fleet import all_ships_placed, random_placement_map, sunk_set
from salvo.game.core.models import (
    DEFAULT_FLEET,
    MatchPhase,
    Orientation,
    PlacementMap,
    Player,
    ShipType,
    parse_orientation,
    parse_ship,
)
from salvo.game.core.placement import apply_placement
from salvo.game.core.reconciliation import (
    Authority,
    RemoteUnavailableError,
    interpret_attack_response,
    interpret_placement_response,
    interpret_start_response,
    parse_create_game_response,
)
from salvo.game.core.rules import IntentResult, MatchState, RejectionKind
from salvo.game.infra.snapshot_schema import (
    BOARD_SLOTS,
    PLACEMENT_SLOTS,
    SCENE_SLOT,
    SceneModel,
    board_to_payload,
    payload_to_board,
    payload_to_placements,
    payload_to_scene,
    placements_to_payload,
    scene_to_payload,
)
from salvo.game.infra.store import StateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatchSnapshot:
    """Read-only view of a match handed to the view layer."""

    boards: dict[Player, Board]
    placements: dict[Player, PlacementMap]
    sunk: dict[Player, dict[ShipType, bool]]
    ready: dict[Player, bool]
    phase: MatchPhase
    turn: Player
    winner: Player | None
    last_message: str


class MatchService:
    """Serializes intents for one match: guard, consult authority, apply, persist."""

    def __init__(self, store: StateStore, authority: Authority | None = None) -> None:
        self._store = store
        self._authority = authority
        self._game_id: str | None = None
        self._match = self._load()

    @property
    def match(self) -> MatchState:
        return self._match

    @property
    def game_id(self) -> str | None:
        return self._game_id

    def snapshot(self) -> MatchSnapshot:
        match = self._match
        return MatchSnapshot(
            boards=dict(match.boards),
            placements={player: dict(placed) for player, placed in match.placements.items()},
            sunk={player: dict(flags) for player, flags in match.sunk.items()},
            ready=dict(match.ready),
            phase=match.phase,
            turn=match.turn,
            winner=match.winner,
            last_message=match.last_message,
        )

    def place_ship(
        self,
        player: Player | str,
        ship_id: ShipType | str,
        start: int,
        orientation: Orientation | str = Orientation.HORIZONTAL,
    ) -> IntentResult:
        seat = Player.from_wire(player)
        if seat is None:
            return self._unknown_player("place_ship", player)
        rejection = rules.check_place_ship(self._match, seat, ship_id, start, orientation)
        if rejection is not None:
            return self._reject("place_ship", rejection)

        verdict = None
        authority = self._authority
        if authority is not None:
            ship = cast(ShipType, parse_ship(ship_id))
            resolved = cast(Orientation, parse_orientation(orientation))
            try:
                game_id = self._ensure_remote_game(authority)
                response = authority.place_ship(game_id, seat, ship, start, resolved)
            except RemoteUnavailableError as exc:
                return self._remote_unavailable("place_ship", exc)
            verdict = interpret_placement_response(response)

        result = rules.place_ship(self._match, seat, ship_id, start, orientation, verdict)
        return self._complete("place_ship", result)

    def auto_place(self, player: Player | str, rng: random.Random) -> IntentResult:
        """Place every ship `player` has not placed yet at random.

        Each ship is its own placement intent. If one is rejected, the ships
        placed before it stay placed and that rejection is returned; otherwise
        the result carries the messages and positions of every placed ship.
        """
        seat = Player.from_wire(player)
        if seat is None:
            return self._unknown_player("auto_place", player)
        existing = self._match.placements[seat]
        missing = [ship for ship in DEFAULT_FLEET if ship not in existing]
        if not missing:
            return self._reject(
                "auto_place",
                rules.rejected(
                    RejectionKind.ILLEGAL_INTENT, f"All ships already placed for player {seat}"
                ),
            )
        planned, _ = random_placement_map(rng, self._match.boards[seat], existing)
        messages: list[str] = []
        placed: list[int] = []
        for ship in missing:
            positions = planned[ship]
            step = positions[1] - positions[0]
            orientation = Orientation.VERTICAL if step == 10 else Orientation.HORIZONTAL
            result = self.place_ship(seat, ship, positions[0], orientation)
            if not result.accepted:
                return result
            messages.extend(result.messages)
            placed.extend(result.positions)
        return IntentResult(accepted=True, messages=tuple(messages), positions=tuple(placed))

    def finish_placing(self, player: Player | str) -> IntentResult:
        seat = Player.from_wire(player)
        if seat is None:
            return self._unknown_player("finish_placing", player)
        rejection = rules.check_finish_placing(self._match, seat)
        if rejection is not None:
            return self._reject("finish_placing", rejection)

        verdict = None
        authority = self._authority
        if authority is not None and rules.starts_battle(self._match, seat):
            try:
                game_id = self._ensure_remote_game(authority)
                response = authority.start(game_id)
            except RemoteUnavailableError as exc:
                return self._remote_unavailable("finish_placing", exc)
            verdict = interpret_start_response(response)

        result = rules.finish_placing(self._match, seat, verdict)
        return self._complete("finish_placing", result)

    def attack(self, player: Player | str, index: int) -> IntentResult:
        seat = Player.from_wire(player)
        if seat is None:
            return self._unknown_player("attack", player)
        rejection = rules.check_attack(self._match, seat, index)
        if rejection is not None:
            return self._reject("attack", rejection)

        verdict = None
        authority = self._authority
        if authority is not None:
            try:
                game_id = self._ensure_remote_game(authority)
                response = authority.shoot(game_id, seat, index)
            except RemoteUnavailableError as exc:
                return self._remote_unavailable("attack", exc)
            verdict = interpret_attack_response(response)

        result = rules.attack(self._match, seat, index, verdict)
        return self._complete("attack", result)

    def reset(self) -> IntentResult:
        self._game_id = None
        result = rules.reset_match(self._match)
        return self._complete("reset", result)

    def _ensure_remote_game(self, authority: Authority) -> str:
        if self._game_id is not None:
            return self._game_id
        game_id, message = parse_create_game_response(authority.create_game())
        if game_id is None:
            raise RemoteUnavailableError(message or "Authority did not return a game id.")
        self._game_id = game_id
        logger.info("remote_game_created game_id=%s", game_id)
        return game_id

    def _complete(self, intent: str, result: IntentResult) -> IntentResult:
        if not result.accepted:
            return self._reject(intent, result)
        self._persist()
        logger.info(
            "intent_accepted intent=%s phase=%s turn=%s message=%s",
            intent,
            self._match.phase.value,
            self._match.turn.value,
            result.message,
        )
        return result

    def _unknown_player(self, intent: str, player: object) -> IntentResult:
        rejection = rules.rejected(RejectionKind.ILLEGAL_INTENT, f"Unknown player: {player}")
        return self._reject(intent, rejection)

    @staticmethod
    def _reject(intent: str, result: IntentResult) -> IntentResult:
        logger.info(
            "intent_rejected intent=%s kind=%s message=%s",
            intent,
            result.rejection.value if result.rejection is not None else "",
            result.message,
        )
        return result

    @staticmethod
    def _remote_unavailable(intent: str, exc: RemoteUnavailableError) -> IntentResult:
        logger.warning("authority_unavailable intent=%s error=%s", intent, exc)
        return rules.rejected(RejectionKind.REMOTE_UNAVAILABLE, f"Authority unavailable: {exc}")

    def _scene(self) -> SceneModel:
        match = self._match
        return SceneModel(
            game_id=self._game_id,
            phase=match.phase,
            turn=match.turn,
            winner=match.winner,
            ready_a=match.ready[Player.A],
            ready_b=match.ready[Player.B],
        )

    def _persist(self) -> None:
        for player in Player:
            self._store.set(BOARD_SLOTS[player], board_to_payload(self._match.boards[player]))
            self._store.set(
                PLACEMENT_SLOTS[player], placements_to_payload(self._match.placements[player])
            )
        self._store.set(SCENE_SLOT, scene_to_payload(self._scene()))

    def _load(self) -> MatchState:
        match = rules.create_match()
        for player in Player:
            placements, board = self._load_player(player)
            match.placements[player] = placements
            match.boards[player] = board
            match.sunk[player] = sunk_set(placements, board)

        raw_scene = self._store.get(SCENE_SLOT)
        if raw_scene is None:
            return match
        try:
            scene = payload_to_scene(raw_scene)
        except ValueError as exc:
            logger.warning("store_slot_invalid slot=%s error=%s", SCENE_SLOT, exc)
            return match
        if scene.phase is not MatchPhase.PLACING and not all(
            all_ships_placed(match.placements[player]) for player in Player
        ):
            logger.warning("store_scene_inconsistent phase=%s", scene.phase.value)
            return match

        self._game_id = scene.game_id
        match.phase = scene.phase
        match.turn = scene.turn
        match.winner = scene.winner
        for player, ready in ((Player.A, scene.ready_a), (Player.B, scene.ready_b)):
            complete = all_ships_placed(match.placements[player])
            if ready and not complete:
                logger.warning("store_ready_flag_dropped player=%s", player.value)
            match.ready[player] = ready and complete
        return match

    def _load_player(self, player: Player) -> tuple[PlacementMap, Board]:
        fallback = rules.create_match()
        raw_placements = self._store.get(PLACEMENT_SLOTS[player])
        raw_board = self._store.get(BOARD_SLOTS[player])
        try:
            placements = payload_to_placements(raw_placements) if raw_placements is not None else {}
            if raw_board is not None:
                board = payload_to_board(raw_board, placements)
            else:
                board = fallback.boards[player]
                for ship, positions in placements.items():
                    board = apply_placement(board, ship, positions)
        except ValueError as exc:
            logger.warning("store_slot_invalid player=%s error=%s", player.value, exc)
            return {}, fallback.boards[player]
        return placements, board
