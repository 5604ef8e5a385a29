"""Light-path simulation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple

from .grid import CellContent, Mirror
from .level import CellKind, Direction, Level, Position

logger = logging.getLogger(__name__)


class Outcome(Enum):
    HIT_TARGET = "hit_target"
    HIT_WALL = "hit_wall"
    EXITED_BOUNDS = "exited_bounds"
    INFINITE_LOOP = "infinite_loop"


class Board(Protocol):
    """Anything the beam can be traced through: a grid or a snapshot of one."""

    level: Level

    def content_at(self, position: Position) -> CellContent:
        ...


@dataclass(frozen=True)
class BeamStep:
    """Cell crossed by the beam and the direction it entered with."""

    position: Position
    direction: Direction


@dataclass(frozen=True)
class BeamSegment:
    """Straight piece of beam between the centres of two adjacent cells."""

    start: Position
    end: Position
    direction: Direction


@dataclass(frozen=True)
class BeamPath:
    """Full beam path and how it ended.

    ``stop`` is the position that ended the trace: the target, the wall the
    beam ran into, the first position outside the grid, or the cell at which
    the beam would start repeating itself.  For loops ``loop_start`` is the
    index into ``steps`` where the cycle begins.
    """

    steps: Tuple[BeamStep, ...]
    outcome: Outcome
    stop: Position
    loop_start: Optional[int] = None

    @property
    def hit_target(self) -> bool:
        return self.outcome is Outcome.HIT_TARGET

    def positions(self) -> List[Position]:
        return [step.position for step in self.steps]

    def segments(self) -> List[BeamSegment]:
        return [
            BeamSegment(start=previous.position, end=current.position, direction=current.direction)
            for previous, current in zip(self.steps, self.steps[1:])
        ]

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "outcome": self.outcome.value,
            "stop": list(self.stop),
            "steps": [
                {"position": list(step.position), "direction": step.direction.name}
                for step in self.steps
            ],
        }
        if self.loop_start is not None:
            payload["loop_start"] = self.loop_start
        return payload


def trace(board: Board) -> BeamPath:
    """Follow the beam from the lamp until it stops.

    Every ``(position, direction)`` state is visited at most once, so the
    walk ends after at most ``width * height * 4`` steps.
    """

    level = board.level
    if level.lamp is None:
        raise ValueError(f"{level.name!r} has no lamp to trace from")

    position = level.lamp.position
    direction = level.lamp.direction
    steps: List[BeamStep] = [BeamStep(position, direction)]
    visited: Dict[Tuple[Position, Direction], int] = {(position, direction): 0}

    while True:
        content = board.content_at(position)
        if isinstance(content, Mirror):
            direction = content.reflect(direction)

        next_position = direction.step(position)
        if not level.inside(next_position):
            return _finish(level, steps, Outcome.EXITED_BOUNDS, next_position)

        next_content = board.content_at(next_position)
        if next_content is CellKind.WALL:
            return _finish(level, steps, Outcome.HIT_WALL, next_position)
        if next_content is CellKind.TARGET:
            steps.append(BeamStep(next_position, direction))
            return _finish(level, steps, Outcome.HIT_TARGET, next_position)

        state = (next_position, direction)
        if state in visited:
            return _finish(level, steps, Outcome.INFINITE_LOOP, next_position, visited[state])

        visited[state] = len(steps)
        steps.append(BeamStep(next_position, direction))
        position = next_position


def _finish(
    level: Level,
    steps: List[BeamStep],
    outcome: Outcome,
    stop: Position,
    loop_start: Optional[int] = None,
) -> BeamPath:
    logger.debug(
        "Beam in %r: %s at %s after %d steps", level.name, outcome.value, stop, len(steps)
    )
    return BeamPath(steps=tuple(steps), outcome=outcome, stop=stop, loop_start=loop_start)
