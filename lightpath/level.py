"""Static level model and structural validation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

Position = Tuple[int, int]


def as_position(position: Sequence[int]) -> Position:
    x, y = position
    return int(x), int(y)


class Direction(Enum):
    """Cardinal directions for the light beam."""

    NORTH = (0, -1)
    EAST = (1, 0)
    SOUTH = (0, 1)
    WEST = (-1, 0)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value

    @staticmethod
    def from_name(name: str) -> "Direction":
        name = name.upper()
        try:
            return Direction[name]
        except KeyError as exc:
            raise ValueError(f"Unknown direction: {name}") from exc

    def step(self, position: Position) -> Position:
        return position[0] + self.value[0], position[1] + self.value[1]

    def reverse(self) -> "Direction":
        mapping = {
            Direction.NORTH: Direction.SOUTH,
            Direction.SOUTH: Direction.NORTH,
            Direction.EAST: Direction.WEST,
            Direction.WEST: Direction.EAST,
        }
        return mapping[self]


class CellKind(Enum):
    """Static content of a level cell."""

    EMPTY = "empty"
    WALL = "wall"
    LAMP = "lamp"
    TARGET = "target"


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @staticmethod
    def from_name(name: str) -> "Difficulty":
        key = name.strip().lower()
        if key == "normal":
            key = "medium"
        try:
            return Difficulty(key)
        except ValueError as exc:
            raise ValueError(f"Unknown difficulty: {name}") from exc


@dataclass(frozen=True)
class Lamp:
    position: Position
    direction: Direction


@dataclass(frozen=True)
class Level:
    """Immutable description of a puzzle.

    ``cells`` is indexed as ``cells[y][x]``.  ``lamp`` and ``target`` are
    derived from the lamp and target cells; they are optional only so that
    :func:`validate` can report levels assembled by hand without them.
    """

    name: str
    difficulty: Difficulty
    max_mirrors: int
    cells: Tuple[Tuple[CellKind, ...], ...]
    lamp: Optional[Lamp]
    target: Optional[Position]
    max_moves: Optional[int] = None
    description: str = ""
    hint: str = ""

    @classmethod
    def from_cells(
        cls,
        name: str,
        cells: Sequence[Sequence[CellKind]],
        lamp_direction: Direction,
        *,
        difficulty: Difficulty = Difficulty.EASY,
        max_mirrors: int = 0,
        max_moves: Optional[int] = None,
        description: str = "",
        hint: str = "",
    ) -> "Level":
        rows = tuple(tuple(row) for row in cells)
        lamp_position = _first_position(rows, CellKind.LAMP)
        return cls(
            name=name,
            difficulty=difficulty,
            max_mirrors=max_mirrors,
            cells=rows,
            lamp=Lamp(lamp_position, lamp_direction) if lamp_position is not None else None,
            target=_first_position(rows, CellKind.TARGET),
            max_moves=max_moves,
            description=description,
            hint=hint,
        )

    @property
    def width(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    @property
    def height(self) -> int:
        return len(self.cells)

    @property
    def metadata(self) -> Dict[str, object]:
        metadata: Dict[str, object] = {
            "name": self.name,
            "difficulty": self.difficulty.value,
            "dimensions": f"{self.width}x{self.height}",
            "max_mirrors": self.max_mirrors,
        }
        if self.max_moves is not None:
            metadata["max_moves"] = self.max_moves
        if self.description:
            metadata["description"] = self.description
        if self.hint:
            metadata["hint"] = self.hint
        return metadata

    def inside(self, position: Position) -> bool:
        x, y = position
        return 0 <= y < len(self.cells) and 0 <= x < len(self.cells[y])

    def kind_at(self, position: Position) -> CellKind:
        x, y = position
        return self.cells[y][x]

    def positions(self) -> Iterator[Position]:
        for y, row in enumerate(self.cells):
            for x in range(len(row)):
                yield x, y

    def free_cells(self) -> int:
        return sum(row.count(CellKind.EMPTY) for row in self.cells)

    def __str__(self) -> str:
        return f"Level: {self.name} ({self.width}x{self.height}, {self.difficulty.value})"


def _first_position(cells: Sequence[Sequence[CellKind]], kind: CellKind) -> Optional[Position]:
    for y, row in enumerate(cells):
        for x, cell in enumerate(row):
            if cell is kind:
                return x, y
    return None


class Violation(Enum):
    """Structural invariants a level can break."""

    MISSING_NAME = "missing_name"
    INVALID_DIFFICULTY = "invalid_difficulty"
    INVALID_MAX_MIRRORS = "invalid_max_mirrors"
    INVALID_MAX_MOVES = "invalid_max_moves"
    DUPLICATE_KEY = "duplicate_key"
    EMPTY_GRID = "empty_grid"
    NON_RECTANGULAR = "non_rectangular"
    UNKNOWN_SYMBOL = "unknown_symbol"
    MISSING_LAMP = "missing_lamp"
    MULTIPLE_LAMPS = "multiple_lamps"
    MISSING_TARGET = "missing_target"
    MULTIPLE_TARGETS = "multiple_targets"
    LAMP_MISMATCH = "lamp_mismatch"
    TARGET_MISMATCH = "target_mismatch"


@dataclass(frozen=True)
class ValidationIssue:
    violation: Violation
    message: str
    position: Optional[Position] = None


@dataclass(frozen=True)
class ValidationResult:
    """Result of :func:`validate`; truthy when no invariant is violated."""

    issues: Tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    def __bool__(self) -> bool:
        return self.ok

    def violations(self) -> List[Violation]:
        return [issue.violation for issue in self.issues]


def validate(level: Level) -> ValidationResult:
    """Check every structural invariant of *level* without modifying it."""

    issues: List[ValidationIssue] = []

    if not level.name or not level.name.strip():
        issues.append(ValidationIssue(Violation.MISSING_NAME, "level has no name"))
    if not isinstance(level.difficulty, Difficulty):
        issues.append(
            ValidationIssue(
                Violation.INVALID_DIFFICULTY, f"unknown difficulty {level.difficulty!r}"
            )
        )
    if isinstance(level.max_mirrors, bool) or not isinstance(level.max_mirrors, int) or level.max_mirrors < 0:
        issues.append(
            ValidationIssue(
                Violation.INVALID_MAX_MIRRORS,
                f"max_mirrors must be a non-negative integer, got {level.max_mirrors!r}",
            )
        )
    if level.max_moves is not None and (
        isinstance(level.max_moves, bool) or not isinstance(level.max_moves, int) or level.max_moves < 1
    ):
        issues.append(
            ValidationIssue(
                Violation.INVALID_MAX_MOVES,
                f"max_moves must be a positive integer, got {level.max_moves!r}",
            )
        )

    issues.extend(_grid_issues(level))
    return ValidationResult(tuple(issues))


def _grid_issues(level: Level) -> List[ValidationIssue]:
    cells = level.cells
    if not cells or not cells[0]:
        return [ValidationIssue(Violation.EMPTY_GRID, "grid has no cells")]

    issues: List[ValidationIssue] = []
    width = len(cells[0])
    for y, row in enumerate(cells):
        if len(row) != width:
            issues.append(
                ValidationIssue(
                    Violation.NON_RECTANGULAR,
                    f"row {y} has width {len(row)}, expected {width}",
                    (0, y),
                )
            )

    lamps = [position for position in level.positions() if level.kind_at(position) is CellKind.LAMP]
    targets = [position for position in level.positions() if level.kind_at(position) is CellKind.TARGET]

    if not lamps:
        issues.append(ValidationIssue(Violation.MISSING_LAMP, "grid has no lamp"))
    for position in lamps[1:]:
        issues.append(ValidationIssue(Violation.MULTIPLE_LAMPS, f"extra lamp at {position}", position))
    if not targets:
        issues.append(ValidationIssue(Violation.MISSING_TARGET, "grid has no target"))
    for position in targets[1:]:
        issues.append(
            ValidationIssue(Violation.MULTIPLE_TARGETS, f"extra target at {position}", position)
        )

    if lamps:
        lamp = level.lamp
        if lamp is None or lamp.position != lamps[0] or not isinstance(lamp.direction, Direction):
            issues.append(
                ValidationIssue(
                    Violation.LAMP_MISMATCH,
                    f"lamp record {lamp!r} does not match the lamp cell at {lamps[0]}",
                    lamps[0],
                )
            )
    if targets and level.target != targets[0]:
        issues.append(
            ValidationIssue(
                Violation.TARGET_MISMATCH,
                f"target record {level.target!r} does not match the target cell at {targets[0]}",
                targets[0],
            )
        )
    return issues
