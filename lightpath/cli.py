"""Command line front-end for playing and checking levels."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Dict, List, Optional, Sequence, Tuple

from .catalog import LevelCatalog, SolutionValidator, resolve_directories
from .errors import ActionResult, MalformedLevel
from .grid import Mirror
from .level import CellKind, Direction, Position
from .logging_config import setup_logging
from .session import GameSession, LossPolicy, SessionSnapshot

BEAM_GLYPHS = {
    Direction.EAST: "-",
    Direction.WEST: "-",
    Direction.NORTH: "|",
    Direction.SOUTH: "|",
}


def render_text(snapshot: SessionSnapshot) -> str:
    """Draw the board as text with the beam marked on floor cells."""

    rows = [list(row) for row in snapshot.rows()]
    if snapshot.beam is not None:
        marks: Dict[Position, str] = {}
        for step in snapshot.beam.steps:
            if snapshot.content_at(step.position) is not CellKind.EMPTY:
                continue
            glyph = BEAM_GLYPHS[step.direction]
            previous = marks.get(step.position)
            marks[step.position] = glyph if previous in (None, glyph) else "+"
        for (x, y), glyph in marks.items():
            rows[y][x] = glyph

    lines = ["".join(row) for row in rows]
    lines.append("")
    lines.append(f"Level: {snapshot.level_name} ({snapshot.level.difficulty.value})")
    lines.append(f"State: {snapshot.state.value}")
    if snapshot.beam is not None:
        lines.append(
            f"Beam: {snapshot.beam.outcome.value} at {snapshot.beam.stop} "
            f"after {len(snapshot.beam.steps)} cells"
        )
    moves = f"{snapshot.moves_used}"
    if snapshot.max_moves is not None:
        moves += f"/{snapshot.max_moves}"
    lines.append(f"Mirrors: {snapshot.mirrors_placed}/{snapshot.max_mirrors}  Moves: {moves}")
    return "\n".join(lines)


def parse_move(text: str) -> Tuple[str, Optional[Position], Optional[Mirror]]:
    """Parse ``place X,Y [/|\\]``, ``remove X,Y``, ``rotate X,Y``, ``undo`` or ``redo``."""

    tokens = text.split()
    if not tokens:
        raise ValueError("empty move")
    verb = tokens[0].lower()
    if verb in ("undo", "redo"):
        if len(tokens) != 1:
            raise ValueError(f"{verb} takes no arguments")
        return verb, None, None
    if verb not in ("place", "remove", "rotate"):
        raise ValueError(f"unknown move {verb!r}")
    if len(tokens) < 2:
        raise ValueError(f"{verb} needs a position like 3,4")
    try:
        x, y = (int(part) for part in tokens[1].split(","))
    except ValueError as exc:
        raise ValueError(f"bad position {tokens[1]!r}") from exc
    orientation = None
    if verb == "place":
        orientation = Mirror.from_symbol(tokens[2] if len(tokens) > 2 else "/")
    return verb, (x, y), orientation


def apply_move(session: GameSession, text: str) -> ActionResult:
    verb, position, orientation = parse_move(text)
    if verb == "undo":
        return session.undo()
    if verb == "redo":
        return session.redo()
    assert position is not None
    if verb == "place":
        assert orientation is not None
        return session.place_mirror(position, orientation)
    if verb == "remove":
        return session.remove_mirror(position)
    return session.rotate_mirror(position)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lightpath", description="Light beam mirror puzzle")
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print resolved level and solution directories and exit.",
    )
    parser.add_argument("--list-levels", action="store_true", help="List available levels and exit.")
    parser.add_argument("--difficulty", help="Only list levels of this difficulty.")
    parser.add_argument("--level", help="Level to play (defaults to the first one).")
    parser.add_argument(
        "--move",
        action="append",
        default=[],
        metavar="MOVE",
        help="Move to apply, e.g. 'place 3,1 \\', 'remove 3,1', 'rotate 3,1', 'undo'. Repeatable.",
    )
    parser.add_argument(
        "--solution",
        action="store_true",
        help="Replay the stored solution for the level and report whether it holds.",
    )
    parser.add_argument(
        "--loss-policy",
        choices=[policy.value for policy in LossPolicy],
        default=LossPolicy.NEVER.value,
    )
    parser.add_argument("--json", action="store_true", help="Print the final snapshot as JSON.")
    parser.add_argument("--log-level", default="warning")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        directories = resolve_directories()
    except FileNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.info:
        print(
            "Lightpath directories\n"
            f"  levels: {directories.level_root}\n"
            f"  solutions: {directories.solution_root}\n"
            "Set LIGHTPATH_LEVEL_ROOT / LIGHTPATH_SOLUTION_ROOT to use custom directories."
        )
        return 0

    catalog = LevelCatalog(directories.level_root)

    if args.list_levels:
        return _list_levels(catalog, args.difficulty)

    names = catalog.names()
    level_name = args.level or (names[0] if names else None)
    if level_name is None:
        print(f"error: no levels in {catalog.root}", file=sys.stderr)
        return 2

    try:
        level = catalog.load(level_name)
    except (FileNotFoundError, MalformedLevel) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.solution:
        validator = SolutionValidator(catalog, directories.solution_root)
        try:
            solution = validator.load_solution(level_name)
        except FileNotFoundError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        session, results = validator.replay(level, solution, loss_policy=LossPolicy(args.loss_policy))
        valid = validator.evaluate(session, results, solution)
        print(render_text(session.snapshot()))
        print(f"Solution {'holds' if valid else 'FAILS'}")
        return 0 if valid else 1

    session = GameSession(level, loss_policy=LossPolicy(args.loss_policy))
    for move in args.move:
        try:
            result = apply_move(session, move)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        if not result:
            assert result.error is not None
            print(f"rejected {move!r}: {result.error.value} ({result.message})")

    snapshot = session.snapshot()
    print(render_text(snapshot))
    if args.json:
        print(json.dumps(snapshot.as_dict(), indent=2))
    return 0


def _list_levels(catalog: LevelCatalog, difficulty: Optional[str]) -> int:
    levels, failures = catalog.load_all()
    if difficulty:
        try:
            entries: List = catalog.by_difficulty(difficulty)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
    else:
        entries = list(levels.items())

    print("Available levels:")
    for name, level in entries:
        print(
            f"  {name:<24} {level.difficulty.value:<7} {level.name} "
            f"(mirrors: {level.max_mirrors})"
        )
    for name, exc in failures.items():
        print(f"  {name:<24} BROKEN  {exc}")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    sys.exit(main())
