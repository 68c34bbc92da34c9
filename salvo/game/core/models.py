"""Core domain models used by match logic."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

BOARD_SIZE = 10
CELL_COUNT = BOARD_SIZE * BOARD_SIZE


class Orientation(StrEnum):
    """Ship orientation."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class ShipType(StrEnum):
    """Classic Battleship ship types, keyed by catalog id."""

    CARRIER = "carrier"
    BATTLESHIP = "battleship"
    CRUISER = "cruiser"
    SUBMARINE = "submarine"
    DESTROYER = "destroyer"

    @property
    def size(self) -> int:
        return SHIP_LENGTHS[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


SHIP_LENGTHS: dict[ShipType, int] = {
    ShipType.CARRIER: 5,
    ShipType.BATTLESHIP: 4,
    ShipType.CRUISER: 3,
    ShipType.SUBMARINE: 3,
    ShipType.DESTROYER: 2,
}

DEFAULT_FLEET: tuple[ShipType, ...] = (
    ShipType.CARRIER,
    ShipType.BATTLESHIP,
    ShipType.CRUISER,
    ShipType.SUBMARINE,
    ShipType.DESTROYER,
)


@dataclass(frozen=True, slots=True)
class ShipSpec:
    """Static catalog entry shared by both players."""

    id: ShipType
    display_name: str
    length: int


SHIP_CATALOG: tuple[ShipSpec, ...] = tuple(
    ShipSpec(id=ship, display_name=ship.display_name, length=ship.size) for ship in DEFAULT_FLEET
)


class Player(StrEnum):
    """Match seat."""

    A = "A"
    B = "B"

    @property
    def opponent(self) -> Player:
        return Player.B if self is Player.A else Player.A

    @property
    def wire_name(self) -> str:
        return "player1" if self is Player.A else "player2"

    @property
    def seat(self) -> int:
        return 1 if self is Player.A else 2

    @classmethod
    def from_wire(cls, value: object) -> Player | None:
        """Map `player1`/`player2` (or `A`/`B`) to a seat; anything else is None."""
        if not isinstance(value, str):
            return None
        cleaned = value.strip()
        if cleaned in {"player1", "A"}:
            return cls.A
        if cleaned in {"player2", "B"}:
            return cls.B
        return None


class MatchPhase(StrEnum):
    """Match lifecycle phase."""

    PLACING = "PLACING"
    BATTLING = "BATTLING"
    FINISHED = "FINISHED"


class ShotOutcome(StrEnum):
    """Result of a resolved shot."""

    HIT = "HIT"
    MISS = "MISS"


@dataclass(frozen=True, slots=True)
class Empty:
    """Open water."""


@dataclass(frozen=True, slots=True)
class ShipOccupied:
    """Cell holding an unhit section of a ship."""

    ship_id: ShipType


@dataclass(frozen=True, slots=True)
class Hit:
    """Ship section that has been hit. Terminal."""


@dataclass(frozen=True, slots=True)
class Miss:
    """Water that has been fired upon. Terminal."""


Cell = Empty | ShipOccupied | Hit | Miss

EMPTY = Empty()
HIT = Hit()
MISS = Miss()

PlacementMap = dict[ShipType, tuple[int, ...]]


def parse_ship(value: object) -> ShipType | None:
    """Resolve a catalog ship from an id such as `carrier` or `CARRIER`."""
    if isinstance(value, ShipType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ShipType(value.strip().lower())
    except ValueError:
        return None


def parse_orientation(value: object) -> Orientation | None:
    """Resolve an orientation from `horizontal`/`vertical` in any case."""
    if isinstance(value, Orientation):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Orientation(value.strip().lower())
    except ValueError:
        return None


def index_of(row: int, col: int) -> int:
    """Row-major cell index."""
    return row * BOARD_SIZE + col


def row_col(index: int) -> tuple[int, int]:
    """Inverse of `index_of`."""
    return divmod(index, BOARD_SIZE)


def in_bounds(index: object) -> bool:
    """Return whether `index` addresses a board cell."""
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < CELL_COUNT
