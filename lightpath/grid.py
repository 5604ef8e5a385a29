"""Mutable mirror layer for a single play attempt."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Tuple, Union

from .errors import BudgetExceeded, CellOccupied, NoMirrorHere, OutOfBounds
from .level import CellKind, Direction, Level, Position, as_position

logger = logging.getLogger(__name__)


class Mirror(Enum):
    """Diagonal mirror orientations."""

    FORWARD_SLASH = "/"
    BACK_SLASH = "\\"

    @staticmethod
    def from_symbol(symbol: str) -> "Mirror":
        aliases = {
            "/": Mirror.FORWARD_SLASH,
            "\\": Mirror.BACK_SLASH,
            "forward": Mirror.FORWARD_SLASH,
            "forward_slash": Mirror.FORWARD_SLASH,
            "back": Mirror.BACK_SLASH,
            "back_slash": Mirror.BACK_SLASH,
            "backslash": Mirror.BACK_SLASH,
        }
        try:
            return aliases[symbol.strip().lower()]
        except KeyError as exc:
            raise ValueError(f"Unknown mirror orientation: {symbol}") from exc

    def reflect(self, direction: Direction) -> Direction:
        if self is Mirror.FORWARD_SLASH:
            mapping = {
                Direction.NORTH: Direction.EAST,
                Direction.SOUTH: Direction.WEST,
                Direction.EAST: Direction.NORTH,
                Direction.WEST: Direction.SOUTH,
            }
        else:
            mapping = {
                Direction.NORTH: Direction.WEST,
                Direction.SOUTH: Direction.EAST,
                Direction.EAST: Direction.SOUTH,
                Direction.WEST: Direction.NORTH,
            }
        return mapping[direction]

    def rotated(self) -> "Mirror":
        if self is Mirror.FORWARD_SLASH:
            return Mirror.BACK_SLASH
        return Mirror.FORWARD_SLASH


CellContent = Union[CellKind, Mirror]


class Grid:
    """Cell contents, mirror inventory and move counter of one session.

    The level itself is never modified: mirrors live in a separate layer
    keyed by position, and only cells that are empty in the level accept one.
    """

    def __init__(self, level: Level):
        self.level = level
        self.mirrors: Dict[Position, Mirror] = {}
        self.moves_used = 0

    @property
    def width(self) -> int:
        return self.level.width

    @property
    def height(self) -> int:
        return self.level.height

    @property
    def max_mirrors(self) -> int:
        return self.level.max_mirrors

    @property
    def mirrors_placed(self) -> int:
        return len(self.mirrors)

    @property
    def remaining_mirrors(self) -> int:
        return max(0, self.max_mirrors - self.mirrors_placed)

    def inside(self, position: Position) -> bool:
        return self.level.inside(position)

    def content_at(self, position: Position) -> CellContent:
        mirror = self.mirrors.get(position)
        if mirror is not None:
            return mirror
        return self.level.kind_at(position)

    def cell_contents(self) -> Tuple[Tuple[CellContent, ...], ...]:
        return tuple(
            tuple(self.content_at((x, y)) for x in range(len(row)))
            for y, row in enumerate(self.level.cells)
        )

    def free_cells(self) -> int:
        return self.level.free_cells() - self.mirrors_placed

    def place_mirror(self, position: Position, orientation: Mirror) -> None:
        position = as_position(position)
        if not self.inside(position):
            raise OutOfBounds(f"{position} is outside the {self.width}x{self.height} grid")
        if position in self.mirrors:
            raise CellOccupied(f"{position} already holds a mirror")
        kind = self.level.kind_at(position)
        if kind is not CellKind.EMPTY:
            raise CellOccupied(f"{position} is a {kind.value} cell")
        if self.mirrors_placed >= self.max_mirrors:
            raise BudgetExceeded(f"all {self.max_mirrors} mirrors are already placed")
        self.mirrors[position] = orientation
        logger.debug("Mirror %s placed at %s", orientation.value, position)

    def remove_mirror(self, position: Position) -> Mirror:
        position = as_position(position)
        mirror = self.mirrors.pop(position, None)
        if mirror is None:
            raise NoMirrorHere(f"no mirror at {position}")
        logger.debug("Mirror %s removed from %s", mirror.value, position)
        return mirror

    def rotate_mirror(self, position: Position) -> Mirror:
        position = as_position(position)
        mirror = self.mirrors.get(position)
        if mirror is None:
            raise NoMirrorHere(f"no mirror at {position}")
        self.mirrors[position] = mirror.rotated()
        return self.mirrors[position]

    def record_move(self) -> None:
        self.moves_used += 1
