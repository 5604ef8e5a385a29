"""Session controller: one attempt at one level."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .errors import (
    ActionResult,
    MalformedLevel,
    PuzzleError,
    SessionBusy,
    SessionFinished,
    SessionNotStarted,
)
from .grid import CellContent, Grid, Mirror
from .history import Action, MoveHistory, PlaceMirror, RemoveMirror, RotateMirror
from .level import CellKind, Level, Position, as_position, validate
from .level_format import CELL_GLYPHS, LAMP_GLYPHS
from .simulator import BeamPath, trace

logger = logging.getLogger(__name__)


class SessionState(Enum):
    SETUP = "setup"
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class LossPolicy(Enum):
    """When a session gives up on the player.

    ``NEVER`` keeps the attempt open until the target is hit.  ``EXHAUSTED``
    declares a loss once the level's move budget is used up without a hit,
    or when the beam misses and no placement or removal is possible at all.
    """

    NEVER = "never"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only, point-in-time copy of a session for renderers."""

    level: Level
    cell_contents: Tuple[Tuple[CellContent, ...], ...]
    mirrors_placed: int
    max_mirrors: int
    moves_used: int
    max_moves: Optional[int]
    beam: Optional[BeamPath]
    state: SessionState
    can_undo: bool = False
    can_redo: bool = False

    @property
    def level_name(self) -> str:
        return self.level.name

    @property
    def width(self) -> int:
        return self.level.width

    @property
    def height(self) -> int:
        return self.level.height

    def content_at(self, position: Position) -> CellContent:
        x, y = position
        return self.cell_contents[y][x]

    def mirrors(self) -> Dict[Position, Mirror]:
        return {
            (x, y): content
            for y, row in enumerate(self.cell_contents)
            for x, content in enumerate(row)
            if isinstance(content, Mirror)
        }

    def rows(self) -> List[str]:
        """Cell contents as text rows using the level file glyphs."""

        rows = []
        for row in self.cell_contents:
            rows.append("".join(self._glyph(content) for content in row))
        return rows

    def _glyph(self, content: CellContent) -> str:
        if isinstance(content, Mirror):
            return content.value
        if content is CellKind.LAMP and self.level.lamp is not None:
            return LAMP_GLYPHS[self.level.lamp.direction]
        return CELL_GLYPHS[content]

    def as_dict(self) -> Dict[str, object]:
        return {
            "level": self.level.metadata,
            "state": self.state.value,
            "cells": self.rows(),
            "mirrors_placed": self.mirrors_placed,
            "max_mirrors": self.max_mirrors,
            "moves_used": self.moves_used,
            "max_moves": self.max_moves,
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
            "beam": self.beam.as_dict() if self.beam is not None else None,
        }


Listener = Callable[[SessionSnapshot], None]


class GameSession:
    """Owns the grid, history and latest beam for one level attempt.

    Every player action returns an :class:`ActionResult` carrying the
    snapshot taken afterwards.  Actions are processed one at a time: a
    request issued while another is in progress (for example from a
    listener) is rejected with ``SESSION_BUSY``.
    """

    def __init__(
        self,
        level: Level,
        *,
        loss_policy: LossPolicy = LossPolicy.NEVER,
        autostart: bool = True,
    ):
        self.level = level
        self.loss_policy = loss_policy
        self.state = SessionState.SETUP
        self.grid: Optional[Grid] = None
        self.history: Optional[MoveHistory] = None
        self.beam: Optional[BeamPath] = None
        self._listeners: List[Listener] = []
        self._busy = False
        if autostart:
            self.start()

    # ------------------------------------------------------------------
    # Lifecycle
    def start(self) -> SessionSnapshot:
        if self.state is not SessionState.SETUP:
            raise RuntimeError(f"session for {self.level.name!r} already started")
        result = validate(self.level)
        if not result:
            raise MalformedLevel(result.issues, self.level.name)
        return self._begin()

    def restart(self) -> ActionResult:
        """Throw away the current attempt and start over on a fresh grid."""

        if self._busy:
            return self._reject(SessionBusy("cannot restart while an action is being processed"))
        if self.state is SessionState.SETUP:
            snapshot = self.start()
        else:
            logger.info("Restarting %r", self.level.name)
            snapshot = self._begin()
        return replace(ActionResult.success(f"restart {self.level.name}"), snapshot=snapshot)

    def _begin(self) -> SessionSnapshot:
        self.grid = Grid(self.level)
        self.history = MoveHistory(self.grid)
        self.state = SessionState.PLAYING
        self._refresh()
        snapshot = self.snapshot()
        self._busy = True
        try:
            self._notify(snapshot)
        finally:
            self._busy = False
        return snapshot

    @property
    def finished(self) -> bool:
        return self.state in (SessionState.WON, SessionState.LOST)

    # ------------------------------------------------------------------
    # Player actions
    def place_mirror(self, position: Position, orientation: Mirror) -> ActionResult:
        return self._apply(PlaceMirror(as_position(position), orientation))

    def remove_mirror(self, position: Position) -> ActionResult:
        return self._apply(RemoveMirror(as_position(position)))

    def rotate_mirror(self, position: Position) -> ActionResult:
        return self._apply(RotateMirror(as_position(position)))

    def undo(self) -> ActionResult:
        return self._perform(lambda history: history.undo())

    def redo(self) -> ActionResult:
        return self._perform(lambda history: history.redo())

    def _apply(self, action: Action) -> ActionResult:
        return self._perform(lambda history: history.apply(action))

    def _perform(self, operation: Callable[[MoveHistory], ActionResult]) -> ActionResult:
        if self._busy:
            return self._reject(SessionBusy("another action is still being processed"))
        if self.state is SessionState.SETUP or self.history is None:
            return self._reject(SessionNotStarted("the session has not started"))
        if self.finished:
            return self._reject(SessionFinished(f"the session is already {self.state.value}"))

        self._busy = True
        try:
            result = operation(self.history)
            if result.ok:
                self._refresh()
            snapshot = self.snapshot()
            result = replace(result, snapshot=snapshot)
            if result.ok:
                self._notify(snapshot)
        finally:
            self._busy = False
        return result

    def _reject(self, error: PuzzleError) -> ActionResult:
        logger.info("Rejected action on %r: %s", self.level.name, error.message)
        return replace(ActionResult.failure(error), snapshot=self.snapshot())

    # ------------------------------------------------------------------
    # Evaluation
    def _refresh(self) -> None:
        assert self.grid is not None
        self.beam = trace(self.grid)
        if self.beam.hit_target:
            self.state = SessionState.WON
            logger.info(
                "Level %r solved with %d mirror(s) in %d move(s)",
                self.level.name,
                self.grid.mirrors_placed,
                self.grid.moves_used,
            )
        elif self._exhausted():
            self.state = SessionState.LOST
            logger.info("Level %r lost after %d move(s)", self.level.name, self.grid.moves_used)

    def _exhausted(self) -> bool:
        if self.loss_policy is LossPolicy.NEVER:
            return False
        assert self.grid is not None
        max_moves = self.level.max_moves
        if max_moves is not None and self.grid.moves_used >= max_moves:
            return True
        can_place = self.grid.remaining_mirrors > 0 and self.grid.free_cells() > 0
        return not can_place and self.grid.mirrors_placed == 0

    # ------------------------------------------------------------------
    # Snapshots
    def snapshot(self) -> SessionSnapshot:
        if self.grid is None:
            cells: Tuple[Tuple[CellContent, ...], ...] = self.level.cells
            mirrors_placed = moves_used = 0
        else:
            cells = self.grid.cell_contents()
            mirrors_placed = self.grid.mirrors_placed
            moves_used = self.grid.moves_used
        return SessionSnapshot(
            level=self.level,
            cell_contents=cells,
            mirrors_placed=mirrors_placed,
            max_mirrors=self.level.max_mirrors,
            moves_used=moves_used,
            max_moves=self.level.max_moves,
            beam=self.beam,
            state=self.state,
            can_undo=bool(self.history and self.history.can_undo) and not self.finished,
            can_redo=bool(self.history and self.history.can_redo) and not self.finished,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with every new snapshot; returns an unsubscribe hook."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, snapshot: SessionSnapshot) -> None:
        for listener in list(self._listeners):
            listener(snapshot)
