"""Reading and writing the plain-text level format.

A level file is a ``key: value`` header followed by a character grid::

    # comment lines start with '#'
    name: Tutorial
    difficulty: easy
    max_mirrors: 1
    ---
    XXXXX
    X>..X
    X..TX
    XXXXX

The header ends at a blank line, a ``---`` sentinel, or the first line that
is not a ``key: value`` pair.  Trailing whitespace on grid rows is padding;
a space inside a row is floor, as is ``.``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .errors import MalformedLevel
from .level import (
    CellKind,
    Difficulty,
    Direction,
    Level,
    ValidationIssue,
    Violation,
    validate,
)

logger = logging.getLogger(__name__)

HEADER_SENTINEL = "---"
COMMENT_PREFIX = "#"

FLOOR_SYMBOL = "."
FLOOR_SYMBOLS = (FLOOR_SYMBOL, " ")
WALL_SYMBOLS = ("X", "█")
LAMP_SYMBOLS: Dict[str, Direction] = {
    ">": Direction.EAST,
    "<": Direction.WEST,
    "^": Direction.NORTH,
    "v": Direction.SOUTH,
    "►": Direction.EAST,
    "◄": Direction.WEST,
    "▲": Direction.NORTH,
    "▼": Direction.SOUTH,
}
TARGET_SYMBOLS = ("T", "◎", "△", "▷", "▽", "◁")

LAMP_GLYPHS: Dict[Direction, str] = {
    Direction.EAST: ">",
    Direction.WEST: "<",
    Direction.NORTH: "^",
    Direction.SOUTH: "v",
}
CELL_GLYPHS: Dict[CellKind, str] = {
    CellKind.EMPTY: FLOOR_SYMBOL,
    CellKind.WALL: WALL_SYMBOLS[0],
    CellKind.TARGET: TARGET_SYMBOLS[0],
}

_KEY_VALUE = re.compile(r"^(?P<key>[A-Za-z][A-Za-z0-9_\- ]*?)\s*:\s*(?P<value>.*)$")
_KNOWN_KEYS = ("name", "difficulty", "max_mirrors", "max_moves", "description", "hint")

HeaderLine = Tuple[int, str, str]
GridLine = Tuple[int, str]


def parse(text: str, *, source: str = "") -> Level:
    """Parse level *text* into a :class:`Level`.

    Raises :class:`MalformedLevel` listing every problem found, so a level
    author sees all of them at once.
    """

    header, grid_lines = _split_sections(text)
    issues: List[ValidationIssue] = []
    metadata = _parse_header(header, issues)
    cells, lamp_direction = _parse_grid(grid_lines, issues)

    level = Level.from_cells(
        metadata["name"],
        cells,
        lamp_direction or Direction.EAST,
        difficulty=metadata["difficulty"],
        max_mirrors=metadata["max_mirrors"],
        max_moves=metadata["max_moves"],
        description=metadata["description"],
        hint=metadata["hint"],
    )
    issues.extend(validate(level).issues)
    if issues:
        raise MalformedLevel(issues, source)

    logger.debug("Parsed %s", level)
    return level


def load_level(path: Union[str, Path]) -> Level:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    return parse(path.read_text(encoding="utf-8"), source=str(path))


def dumps(level: Level) -> str:
    """Serialise *level* into the canonical ASCII form accepted by :func:`parse`."""

    lines = [
        f"name: {level.name}",
        f"difficulty: {level.difficulty.value}",
        f"max_mirrors: {level.max_mirrors}",
    ]
    if level.max_moves is not None:
        lines.append(f"max_moves: {level.max_moves}")
    if level.description:
        lines.append(f"description: {level.description}")
    if level.hint:
        lines.append(f"hint: {level.hint}")
    lines.append(HEADER_SENTINEL)
    for row in level.cells:
        lines.append("".join(_glyph(level, cell) for cell in row))
    return "\n".join(lines) + "\n"


def _glyph(level: Level, cell: CellKind) -> str:
    if cell is CellKind.LAMP:
        if level.lamp is None:
            raise ValueError("cannot serialise a lamp cell without a lamp direction")
        return LAMP_GLYPHS[level.lamp.direction]
    return CELL_GLYPHS[cell]


def _split_sections(text: str) -> Tuple[List[HeaderLine], List[GridLine]]:
    header: List[HeaderLine] = []
    grid: List[GridLine] = []
    in_header = True

    for lineno, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if stripped.startswith(COMMENT_PREFIX):
            continue
        if in_header:
            if not stripped:
                if header:
                    in_header = False
                continue
            if stripped == HEADER_SENTINEL:
                in_header = False
                continue
            match = _KEY_VALUE.match(stripped)
            if match:
                header.append((lineno, match.group("key"), match.group("value").strip()))
                continue
            in_header = False
        if not stripped:
            continue
        grid.append((lineno, raw.rstrip()))

    return header, _dedent(grid)


def _dedent(grid: List[GridLine]) -> List[GridLine]:
    if not grid:
        return grid
    indent = min(len(line) - len(line.lstrip(" ")) for _, line in grid)
    return [(lineno, line[indent:]) for lineno, line in grid]


def _normalise_key(key: str) -> str:
    return re.sub(r"[\s\-]+", "_", key.strip().lower())


def _parse_header(header: List[HeaderLine], issues: List[ValidationIssue]) -> Dict[str, object]:
    values: Dict[str, Tuple[int, str]] = {}
    for lineno, raw_key, value in header:
        key = _normalise_key(raw_key)
        if key not in _KNOWN_KEYS:
            logger.warning("Ignoring unknown level key %r on line %d", raw_key, lineno)
            continue
        if key in values:
            issues.append(
                ValidationIssue(Violation.DUPLICATE_KEY, f"line {lineno}: duplicate key {key!r}")
            )
            continue
        values[key] = (lineno, value)

    metadata: Dict[str, object] = {
        "name": values.get("name", (0, ""))[1],
        "difficulty": Difficulty.EASY,
        "max_mirrors": 0,
        "max_moves": None,
        "description": values.get("description", (0, ""))[1],
        "hint": values.get("hint", (0, ""))[1],
    }

    if "difficulty" in values:
        lineno, value = values["difficulty"]
        try:
            metadata["difficulty"] = Difficulty.from_name(value)
        except ValueError:
            issues.append(
                ValidationIssue(
                    Violation.INVALID_DIFFICULTY, f"line {lineno}: unknown difficulty {value!r}"
                )
            )

    if "max_mirrors" not in values:
        issues.append(ValidationIssue(Violation.INVALID_MAX_MIRRORS, "missing max_mirrors"))
    else:
        lineno, value = values["max_mirrors"]
        count = _parse_int(value)
        if count is None or count < 0:
            issues.append(
                ValidationIssue(
                    Violation.INVALID_MAX_MIRRORS,
                    f"line {lineno}: max_mirrors must be a non-negative integer, got {value!r}",
                )
            )
        else:
            metadata["max_mirrors"] = count

    if "max_moves" in values:
        lineno, value = values["max_moves"]
        count = _parse_int(value)
        if count is None or count < 1:
            issues.append(
                ValidationIssue(
                    Violation.INVALID_MAX_MOVES,
                    f"line {lineno}: max_moves must be a positive integer, got {value!r}",
                )
            )
        else:
            metadata["max_moves"] = count

    return metadata


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_grid(
    grid: List[GridLine], issues: List[ValidationIssue]
) -> Tuple[List[List[CellKind]], Optional[Direction]]:
    cells: List[List[CellKind]] = []
    lamp_direction: Optional[Direction] = None

    for y, (lineno, line) in enumerate(grid):
        row: List[CellKind] = []
        for x, symbol in enumerate(line):
            kind = _classify(symbol)
            if kind is None:
                issues.append(
                    ValidationIssue(
                        Violation.UNKNOWN_SYMBOL,
                        f"line {lineno}: unknown symbol {symbol!r} at column {x}",
                        (x, y),
                    )
                )
                kind = CellKind.EMPTY
            elif kind is CellKind.LAMP and lamp_direction is None:
                lamp_direction = LAMP_SYMBOLS[symbol]
            row.append(kind)
        cells.append(row)

    return cells, lamp_direction


def _classify(symbol: str) -> Optional[CellKind]:
    if symbol in FLOOR_SYMBOLS:
        return CellKind.EMPTY
    if symbol in WALL_SYMBOLS:
        return CellKind.WALL
    if symbol in LAMP_SYMBOLS:
        return CellKind.LAMP
    if symbol in TARGET_SYMBOLS:
        return CellKind.TARGET
    return None
