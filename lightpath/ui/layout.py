"""Layout constants for the pygame view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# Tile metrics
TILE_SIZE: int = 48
BOARD_OUTER_PADDING: int = 24

# Status bar below the board
STATUS_HEIGHT: int = 56

# Line widths
BEAM_WIDTH: int = 4
MIRROR_WIDTH: int = 5
GRID_LINE_WIDTH: int = 1

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Tuple[int, int, int] = (12, 14, 26)
FLOOR_COLOR: Tuple[int, int, int] = (20, 24, 44)
WALL_COLOR: Tuple[int, int, int] = (78, 88, 122)
GRID_LINE_COLOR: Tuple[int, int, int] = (40, 44, 72)
LAMP_COLOR: Tuple[int, int, int] = (130, 210, 255)
TARGET_COLOR: Tuple[int, int, int] = (140, 255, 180)
TARGET_LIT_COLOR: Tuple[int, int, int] = (255, 220, 110)
MIRROR_COLOR: Tuple[int, int, int] = (240, 240, 240)
BEAM_COLOR: Tuple[int, int, int] = (255, 140, 60)
LOOP_BEAM_COLOR: Tuple[int, int, int] = (190, 80, 100)
TEXT_COLOR: Tuple[int, int, int] = (232, 236, 244)


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel rectangles for the board and the status bar."""

    board: Tuple[int, int, int, int]
    status: Tuple[int, int, int, int]
    window: Tuple[int, int]


def compute_geometry(level_width: int, level_height: int, tile_size: int = TILE_SIZE) -> BoardGeometry:
    """Compute the rectangles used to lay out a window for a level."""

    board_width = level_width * tile_size
    board_height = level_height * tile_size

    board_rect = (BOARD_OUTER_PADDING, BOARD_OUTER_PADDING, board_width, board_height)
    status_rect = (
        BOARD_OUTER_PADDING,
        BOARD_OUTER_PADDING + board_height,
        board_width,
        STATUS_HEIGHT,
    )
    window = (
        board_width + 2 * BOARD_OUTER_PADDING,
        board_height + STATUS_HEIGHT + 2 * BOARD_OUTER_PADDING,
    )
    return BoardGeometry(board=board_rect, status=status_rect, window=window)
