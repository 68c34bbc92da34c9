"""Turn and phase rules for a two-player match.

Every intent has a guard (`check_*`) that inspects the match without
changing it, and an apply function that re-runs the guard and mutates the
match only when the intent is accepted. A rejected intent never leaves a
partial update behind.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from salvo.game.core.board import Board, cell_at, empty_board
from salvo.game.core.fleet import all_ships_placed, fleet_exhausted, newly_sunk, sunk_set
from salvo.game.core.models import (
    DEFAULT_FLEET,
    MatchPhase,
    Orientation,
    PlacementMap,
    Player,
    ShipType,
    ShotOutcome,
    in_bounds,
    parse_orientation,
    parse_ship,
)
from salvo.game.core.placement import PlacementRejected, apply_placement, compute_placement
from salvo.game.core.reconciliation import AttackVerdict, PlacementVerdict, StartVerdict
from salvo.game.core.shot_resolution import AlreadyAttacked, is_terminal, resolve_attack


class RejectionKind(StrEnum):
    """Typed reason for refusing an intent."""

    VALIDATION_REJECTED = "VALIDATION_REJECTED"
    ILLEGAL_INTENT = "ILLEGAL_INTENT"
    ALREADY_ATTACKED = "ALREADY_ATTACKED"
    REMOTE_UNAVAILABLE = "REMOTE_UNAVAILABLE"


@dataclass(frozen=True, slots=True)
class IntentResult:
    """Outcome of one intent, accepted or not."""

    accepted: bool
    messages: tuple[str, ...]
    rejection: RejectionKind | None = None
    shot: ShotOutcome | None = None
    positions: tuple[int, ...] = ()
    newly_sunk: tuple[ShipType, ...] = ()
    winner: Player | None = None

    @property
    def message(self) -> str:
        return "; ".join(self.messages)


def rejected(kind: RejectionKind, message: str) -> IntentResult:
    """Build a rejection result."""
    return IntentResult(accepted=False, messages=(message,), rejection=kind)


def _per_player(factory: Callable[[], object]) -> Any:
    return field(default_factory=lambda: {player: factory() for player in Player})


@dataclass(slots=True)
class MatchState:
    """Mutable state of one match; owned by a single orchestrator."""

    boards: dict[Player, Board] = _per_player(empty_board)
    placements: dict[Player, PlacementMap] = _per_player(dict)
    ready: dict[Player, bool] = _per_player(bool)
    sunk: dict[Player, dict[ShipType, bool]] = _per_player(dict)
    phase: MatchPhase = MatchPhase.PLACING
    turn: Player = Player.A
    winner: Player | None = None
    last_message: str = "Place your fleet."
    history: list[str] = field(default_factory=list)


def create_match() -> MatchState:
    """Create a match with empty boards in the placement phase."""
    return MatchState()


def reset_match(match: MatchState) -> IntentResult:
    """Return the match to its initial state. Allowed in every phase."""
    fresh = create_match()
    match.boards = fresh.boards
    match.placements = fresh.placements
    match.ready = fresh.ready
    match.sunk = fresh.sunk
    match.phase = fresh.phase
    match.turn = fresh.turn
    match.winner = None
    match.history = []
    return _accept(match, ("Boards reset",))


# --- placement -------------------------------------------------------------


def check_place_ship(
    match: MatchState,
    player: Player,
    ship_id: ShipType | str,
    start: int,
    orientation: Orientation | str,
) -> IntentResult | None:
    """Return the rejection a placement would get, or None if it fits."""
    plan = _plan_placement(match, player, ship_id, start, orientation)
    return plan if isinstance(plan, IntentResult) else None


def place_ship(
    match: MatchState,
    player: Player,
    ship_id: ShipType | str,
    start: int,
    orientation: Orientation | str,
    verdict: PlacementVerdict | None = None,
) -> IntentResult:
    """Place one ship for `player` during the placement phase."""
    plan = _plan_placement(match, player, ship_id, start, orientation)
    if isinstance(plan, IntentResult):
        return plan
    ship, positions = plan
    if verdict is not None and not verdict.accepted:
        return rejected(RejectionKind.VALIDATION_REJECTED, verdict.message)

    match.boards[player] = apply_placement(match.boards[player], ship, positions)
    match.placements[player] = {**match.placements[player], ship: positions}
    result = _accept(match, (f"Placed {ship.value} for player {player}",))
    return IntentResult(accepted=True, messages=result.messages, positions=positions)


def _plan_placement(
    match: MatchState,
    player: Player,
    ship_id: ShipType | str,
    start: int,
    orientation: Orientation | str,
) -> IntentResult | tuple[ShipType, tuple[int, ...]]:
    if match.phase is MatchPhase.FINISHED:
        return rejected(RejectionKind.ILLEGAL_INTENT, "Match is finished")
    if match.phase is MatchPhase.BATTLING:
        return rejected(RejectionKind.ILLEGAL_INTENT, "Cannot place ships after placement phase")
    ship = parse_ship(ship_id)
    if ship is None:
        return rejected(RejectionKind.ILLEGAL_INTENT, "No ship selected")
    if match.ready[player]:
        return rejected(RejectionKind.ILLEGAL_INTENT, f"Player {player} already finished placing")
    if ship in match.placements[player]:
        return rejected(
            RejectionKind.ILLEGAL_INTENT, f"Ship {ship.value} already placed for player {player}"
        )
    resolved_orientation = parse_orientation(orientation)
    if resolved_orientation is None:
        return rejected(RejectionKind.ILLEGAL_INTENT, f"Unknown orientation: {orientation}")
    if not in_bounds(start):
        return rejected(RejectionKind.ILLEGAL_INTENT, f"Cell {start} is off the board")

    result = compute_placement(match.boards[player], start, ship.size, resolved_orientation)
    if isinstance(result, PlacementRejected):
        return rejected(
            RejectionKind.VALIDATION_REJECTED, f"Cannot place {ship.value}: {result.message}"
        )
    return ship, result.positions


def check_finish_placing(match: MatchState, player: Player) -> IntentResult | None:
    """Return the rejection `finish_placing` would get, or None."""
    if match.phase is MatchPhase.FINISHED:
        return rejected(RejectionKind.ILLEGAL_INTENT, "Match is finished")
    if match.phase is MatchPhase.BATTLING:
        return rejected(RejectionKind.ILLEGAL_INTENT, "Battle already started")
    if match.ready[player]:
        return rejected(RejectionKind.ILLEGAL_INTENT, f"Player {player} is already ready")
    if not all_ships_placed(match.placements[player]):
        return rejected(RejectionKind.ILLEGAL_INTENT, f"Not all ships placed for player {player}")
    return None


def starts_battle(match: MatchState, player: Player) -> bool:
    """Return whether `player` finishing placement would start the battle."""
    return match.phase is MatchPhase.PLACING and match.ready[player.opponent]


def finish_placing(
    match: MatchState, player: Player, verdict: StartVerdict | None = None
) -> IntentResult:
    """Mark `player` ready; the battle starts with player A once both are ready."""
    rejection = check_finish_placing(match, player)
    if rejection is not None:
        return rejection
    begins = starts_battle(match, player)
    if begins and verdict is not None and not verdict.started:
        return rejected(RejectionKind.ILLEGAL_INTENT, verdict.message)

    match.ready[player] = True
    messages = [f"Player {player} ready"]
    if begins:
        match.phase = MatchPhase.BATTLING
        match.turn = Player.A
        messages.append(f"Battle started. Player {Player.A} to move")
    return _accept(match, tuple(messages))


# --- battle ----------------------------------------------------------------


def check_attack(match: MatchState, player: Player, index: int) -> IntentResult | None:
    """Return the rejection an attack would get, or None."""
    if match.phase is MatchPhase.FINISHED:
        return rejected(RejectionKind.ILLEGAL_INTENT, "Match is finished")
    if match.phase is MatchPhase.PLACING:
        return rejected(RejectionKind.ILLEGAL_INTENT, "Cannot attack: game has not started yet")
    if match.turn is not player:
        return rejected(RejectionKind.ILLEGAL_INTENT, f"Not player {player}'s turn")
    if not in_bounds(index):
        return rejected(RejectionKind.ILLEGAL_INTENT, f"Cell {index} is off the board")
    if is_terminal(cell_at(match.boards[player.opponent], index)):
        return rejected(RejectionKind.ALREADY_ATTACKED, "Already attacked this cell")
    return None


def attack(
    match: MatchState, player: Player, index: int, verdict: AttackVerdict | None = None
) -> IntentResult:
    """Resolve `player` firing at `index` on the opponent's board."""
    rejection = check_attack(match, player, index)
    if rejection is not None:
        return rejection

    defender = player.opponent
    resolution = resolve_attack(
        match.boards[defender], index, verdict.result if verdict is not None else None
    )
    if isinstance(resolution, AlreadyAttacked):
        return rejected(RejectionKind.ALREADY_ATTACKED, "Already attacked this cell")

    board = resolution.board
    if resolution.outcome is ShotOutcome.HIT:
        messages = [f"Player {player} HIT {defender} at {index}"]
    else:
        messages = [f"Player {player} missed at {index}"]

    placements = match.placements[defender]
    previous = match.sunk[defender]
    delta = newly_sunk(placements, board, previous)
    current = sunk_set(placements, board)
    messages.extend(f"Ship {ship.value} sunk ({defender})" for ship in delta)

    winner: Player | None = None
    if verdict is not None and verdict.game_over:
        winner = verdict.winner or player
    elif fleet_exhausted(placements, board):
        winner = player

    match.boards[defender] = board
    match.sunk[defender] = {
        ship: previous.get(ship, False) or current.get(ship, False)
        for ship in DEFAULT_FLEET
        if ship in previous or ship in current
    }
    if winner is not None:
        match.phase = MatchPhase.FINISHED
        match.winner = winner
        messages.append(f"Game Over - winner: {winner.wire_name}")
    elif verdict is not None and verdict.next_turn is not None:
        match.turn = verdict.next_turn
    else:
        match.turn = defender

    _accept(match, tuple(messages))
    return IntentResult(
        accepted=True,
        messages=tuple(messages),
        shot=resolution.outcome,
        positions=(index,),
        newly_sunk=delta,
        winner=winner,
    )


def _accept(match: MatchState, messages: tuple[str, ...]) -> IntentResult:
    match.last_message = messages[-1]
    match.history.extend(messages)
    return IntentResult(accepted=True, messages=messages)
