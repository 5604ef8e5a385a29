"""Minimal pygame view over a game session.

The view only reads :class:`SessionSnapshot` objects and turns mouse and
keyboard events into session requests, so it can be exercised in automated
tests using the SDL ``dummy`` video driver.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, Optional, Tuple

from ..errors import ActionResult
from ..grid import Mirror
from ..level import CellKind, Position
from ..session import GameSession, SessionSnapshot
from ..simulator import Outcome
from . import layout

logger = logging.getLogger(__name__)

# Pygame is only needed for the view.  The import is performed lazily in
# ``ensure_pygame`` so test environments can select the SDL drivers first.
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
        _PYGAME.font.init()
    return _PYGAME


class SessionView:
    """Draws the latest snapshot of a session and forwards player input.

    Left click places the selected mirror on a free cell or rotates an
    existing one, right click removes a mirror.  ``U`` undoes, ``R`` redoes,
    ``Tab`` switches the selected orientation and ``Backspace`` restarts.
    """

    def __init__(
        self,
        session: GameSession,
        *,
        cell_size: int = layout.TILE_SIZE,
        surface=None,
        use_display: bool = False,
    ) -> None:
        pygame = ensure_pygame()
        self.session = session
        self.cell_size = cell_size
        width = session.level.width * cell_size
        height = session.level.height * cell_size
        self.surface = surface or pygame.Surface((width, height))
        self.screen = None
        if use_display:
            self.screen = pygame.display.set_mode((width, height))
        self.orientation = Mirror.FORWARD_SLASH
        self.last_result: Optional[ActionResult] = None
        self.snapshot: SessionSnapshot = session.snapshot()
        self._unsubscribe = session.subscribe(self._on_snapshot)

    def close(self) -> None:
        self._unsubscribe()

    def _on_snapshot(self, snapshot: SessionSnapshot) -> None:
        self.snapshot = snapshot

    @property
    def status_text(self) -> str:
        snapshot = self.snapshot
        text = (
            f"{snapshot.level_name}  {snapshot.state.value}  "
            f"mirrors {snapshot.mirrors_placed}/{snapshot.max_mirrors}  "
            f"moves {snapshot.moves_used}"
        )
        if self.last_result is not None and not self.last_result.ok:
            text += f"  ({self.last_result.message})"
        return text

    # ------------------------------------------------------------------
    # Input handling
    def toggle_orientation(self) -> Mirror:
        self.orientation = self.orientation.rotated()
        return self.orientation

    def process_events(self, events: Iterable[object]) -> None:
        pygame = ensure_pygame()
        for event in events:
            if event.type == pygame.MOUSEBUTTONDOWN:
                cell = self._grid_from_pixel(event.pos)
                if cell is None:
                    continue
                if event.button == 1:
                    self._handle_primary(cell)
                elif event.button == 3:
                    self._record(self.session.remove_mirror(cell))
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        pygame = ensure_pygame()
        if key == pygame.K_u:
            self._record(self.session.undo())
        elif key == pygame.K_r:
            self._record(self.session.redo())
        elif key == pygame.K_TAB:
            self.toggle_orientation()
        elif key == pygame.K_BACKSPACE:
            self._record(self.session.restart())

    def _handle_primary(self, cell: Position) -> None:
        if isinstance(self.snapshot.content_at(cell), Mirror):
            self._record(self.session.rotate_mirror(cell))
        else:
            self._record(self.session.place_mirror(cell, self.orientation))

    def _record(self, result: ActionResult) -> None:
        self.last_result = result
        if result.snapshot is not None:
            self.snapshot = result.snapshot

    def _grid_from_pixel(self, pos: Tuple[int, int]) -> Optional[Position]:
        x, y = pos
        grid_x = x // self.cell_size
        grid_y = y // self.cell_size
        if not self.session.level.inside((grid_x, grid_y)):
            return None
        return grid_x, grid_y

    # ------------------------------------------------------------------
    # Rendering helpers
    def render(self):
        pygame = ensure_pygame()
        self.surface.fill(layout.BACKGROUND_COLOR)
        self._draw_cells()
        self._draw_beam()
        if self.screen:
            self.screen.blit(self.surface, (0, 0))
            pygame.display.flip()
        return self.surface

    def _cell_rect(self, position: Position):
        pygame = ensure_pygame()
        return pygame.Rect(
            position[0] * self.cell_size,
            position[1] * self.cell_size,
            self.cell_size,
            self.cell_size,
        )

    def _cell_center(self, position: Position) -> Tuple[int, int]:
        return (
            position[0] * self.cell_size + self.cell_size // 2,
            position[1] * self.cell_size + self.cell_size // 2,
        )

    def _draw_cells(self) -> None:
        pygame = ensure_pygame()
        snapshot = self.snapshot
        lit = snapshot.beam is not None and snapshot.beam.hit_target
        for y, row in enumerate(snapshot.cell_contents):
            for x, content in enumerate(row):
                rect = self._cell_rect((x, y))
                if content is CellKind.WALL:
                    self.surface.fill(layout.WALL_COLOR, rect)
                    continue
                self.surface.fill(layout.FLOOR_COLOR, rect)
                pygame.draw.rect(self.surface, layout.GRID_LINE_COLOR, rect, layout.GRID_LINE_WIDTH)
                if content is CellKind.LAMP:
                    pygame.draw.circle(
                        self.surface, layout.LAMP_COLOR, rect.center, self.cell_size // 3
                    )
                elif content is CellKind.TARGET:
                    color = layout.TARGET_LIT_COLOR if lit else layout.TARGET_COLOR
                    pygame.draw.rect(self.surface, color, rect.inflate(-self.cell_size // 3, -self.cell_size // 3))
                elif isinstance(content, Mirror):
                    self._draw_mirror(rect, content)

    def _draw_mirror(self, rect, mirror: Mirror) -> None:
        pygame = ensure_pygame()
        inset = self.cell_size // 8
        if mirror is Mirror.FORWARD_SLASH:
            start = (rect.left + inset, rect.bottom - inset - 1)
            end = (rect.right - inset - 1, rect.top + inset)
        else:
            start = (rect.left + inset, rect.top + inset)
            end = (rect.right - inset - 1, rect.bottom - inset - 1)
        pygame.draw.line(self.surface, layout.MIRROR_COLOR, start, end, layout.MIRROR_WIDTH)

    def _draw_beam(self) -> None:
        pygame = ensure_pygame()
        beam = self.snapshot.beam
        if beam is None:
            return
        color = layout.LOOP_BEAM_COLOR if beam.outcome is Outcome.INFINITE_LOOP else layout.BEAM_COLOR
        for segment in beam.segments():
            pygame.draw.line(
                self.surface,
                color,
                self._cell_center(segment.start),
                self._cell_center(segment.end),
                layout.BEAM_WIDTH,
            )


__all__ = ["SessionView", "ensure_pygame"]
