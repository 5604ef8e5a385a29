"""Reversible player actions with undo/redo stacks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Union

from .errors import ActionResult, NothingToRedo, NothingToUndo, PuzzleError
from .grid import Grid, Mirror
from .level import Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaceMirror:
    position: Position
    orientation: Mirror

    def perform(self, grid: Grid) -> "PlaceMirror":
        grid.place_mirror(self.position, self.orientation)
        return self

    def revert(self, grid: Grid) -> None:
        grid.remove_mirror(self.position)

    def describe(self) -> str:
        return f"place {self.orientation.value} at {self.position}"


@dataclass(frozen=True)
class RemoveMirror:
    """Remove the mirror at ``position``.

    ``orientation`` is filled in when the action is performed so the removal
    can be undone.
    """

    position: Position
    orientation: Optional[Mirror] = None

    def perform(self, grid: Grid) -> "RemoveMirror":
        removed = grid.remove_mirror(self.position)
        return replace(self, orientation=removed)

    def revert(self, grid: Grid) -> None:
        if self.orientation is None:
            raise ValueError("cannot revert a removal that was never performed")
        grid.place_mirror(self.position, self.orientation)

    def describe(self) -> str:
        return f"remove mirror at {self.position}"


@dataclass(frozen=True)
class RotateMirror:
    position: Position

    def perform(self, grid: Grid) -> "RotateMirror":
        grid.rotate_mirror(self.position)
        return self

    def revert(self, grid: Grid) -> None:
        grid.rotate_mirror(self.position)

    def describe(self) -> str:
        return f"rotate mirror at {self.position}"


Action = Union[PlaceMirror, RemoveMirror, RotateMirror]


class MoveHistory:
    """Linear undo/redo history over one grid.

    Applying an action counts as a move.  Undo and redo only replay the grid
    change; ``moves_used`` is left alone.
    """

    def __init__(self, grid: Grid):
        self.grid = grid
        self.undo_stack: List[Action] = []
        self.redo_stack: List[Action] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def apply(self, action: Action) -> ActionResult:
        try:
            performed = action.perform(self.grid)
        except PuzzleError as exc:
            logger.info("Rejected %s: %s", action.describe(), exc.message)
            return ActionResult.failure(exc)
        self.grid.record_move()
        self.undo_stack.append(performed)
        self.redo_stack.clear()
        return ActionResult.success(performed.describe())

    def undo(self) -> ActionResult:
        if not self.undo_stack:
            return ActionResult.failure(NothingToUndo("nothing to undo"))
        action = self.undo_stack.pop()
        action.revert(self.grid)
        self.redo_stack.append(action)
        return ActionResult.success(f"undo {action.describe()}")

    def redo(self) -> ActionResult:
        if not self.redo_stack:
            return ActionResult.failure(NothingToRedo("nothing to redo"))
        action = self.redo_stack.pop()
        action.perform(self.grid)
        self.undo_stack.append(action)
        return ActionResult.success(f"redo {action.describe()}")

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()
