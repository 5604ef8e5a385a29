"""Headless tests for the pygame session view.

A fixed ``cell_size`` keeps pixel positions predictable.
"""

from __future__ import annotations

from lightpath.errors import ErrorCode
from lightpath.grid import Mirror
from lightpath.level_format import parse
from lightpath.session import GameSession, SessionState
from lightpath.ui import SessionView, compute_geometry
from lightpath.ui import layout

CELL = 32

LEVEL = """\
name: View test
max_mirrors: 2
---
>..X
....
.T..
"""


def make_view(pygame):
    session = GameSession(parse(LEVEL))
    view = SessionView(
        session,
        cell_size=CELL,
        surface=pygame.Surface((4 * CELL, 3 * CELL)),
    )
    return session, view


def click(pygame, cell, button=1):
    pos = (cell[0] * CELL + CELL // 2, cell[1] * CELL + CELL // 2)
    return pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=button, pos=pos)


def key(pygame, code):
    return pygame.event.Event(pygame.KEYDOWN, key=code)


def pixel(surface, x, y):
    return tuple(surface.get_at((x, y)))[:3]


def test_render_draws_static_cells(pygame_module):
    pygame = pygame_module
    _, view = make_view(pygame)

    surface = view.render()

    assert pixel(surface, 3 * CELL + CELL // 2, CELL // 2) == layout.WALL_COLOR
    assert pixel(surface, CELL // 2, 2 * CELL + CELL // 2) == layout.FLOOR_COLOR
    assert pixel(surface, CELL // 2, CELL // 2 - 6) == layout.LAMP_COLOR
    assert pixel(surface, CELL + 8, 2 * CELL + 8) == layout.TARGET_COLOR
    assert pixel(surface, CELL + CELL // 2 + 8, CELL // 2) == layout.BEAM_COLOR


def test_click_places_then_rotates_mirror(pygame_module):
    pygame = pygame_module
    session, view = make_view(pygame)

    view.process_events([click(pygame, (1, 0))])

    assert view.snapshot.content_at((1, 0)) is Mirror.FORWARD_SLASH
    assert view.last_result.ok

    view.process_events([click(pygame, (1, 0))])

    assert view.snapshot.content_at((1, 0)) is Mirror.BACK_SLASH
    assert session.state is SessionState.WON
    surface = view.render()
    assert pixel(surface, CELL + 8, 2 * CELL + 8) == layout.TARGET_LIT_COLOR


def test_right_click_removes_and_reports_rejections(pygame_module):
    pygame = pygame_module
    session, view = make_view(pygame)
    view.process_events([click(pygame, (2, 1))])

    view.process_events([click(pygame, (2, 1), button=3)])
    assert session.snapshot().mirrors() == {}

    view.process_events([click(pygame, (2, 1), button=3)])
    assert view.last_result.error is ErrorCode.NO_MIRROR_HERE
    assert view.last_result.message in view.status_text


def test_tab_switches_orientation_before_placing(pygame_module):
    pygame = pygame_module
    session, view = make_view(pygame)

    view.process_events([key(pygame, pygame.K_TAB), click(pygame, (1, 0))])

    assert view.orientation is Mirror.BACK_SLASH
    assert session.state is SessionState.WON


def test_keys_undo_redo_and_restart(pygame_module):
    pygame = pygame_module
    session, view = make_view(pygame)
    view.process_events([click(pygame, (2, 1))])

    view.process_events([key(pygame, pygame.K_u)])
    assert view.snapshot.mirrors() == {}
    assert view.snapshot.can_redo

    view.process_events([key(pygame, pygame.K_r)])
    assert view.snapshot.mirrors() == {(2, 1): Mirror.FORWARD_SLASH}

    view.process_events([key(pygame, pygame.K_BACKSPACE)])
    assert view.snapshot.mirrors() == {}
    assert view.snapshot.moves_used == 0
    assert view.last_result.ok


def test_clicks_outside_board_are_ignored(pygame_module):
    pygame = pygame_module
    session, view = make_view(pygame)

    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(4 * CELL + 5, 5))
    view.process_events([event])

    assert view.last_result is None
    assert session.snapshot().moves_used == 0


def test_view_follows_session_until_closed(pygame_module):
    pygame = pygame_module
    session, view = make_view(pygame)

    session.place_mirror((2, 1), Mirror.BACK_SLASH)
    assert view.snapshot.content_at((2, 1)) is Mirror.BACK_SLASH

    view.close()
    session.undo()

    assert view.snapshot.content_at((2, 1)) is Mirror.BACK_SLASH
    assert view.status_text.startswith("View test  playing")


def test_compute_geometry_places_status_below_board():
    geometry = compute_geometry(4, 3, tile_size=CELL)

    pad = layout.BOARD_OUTER_PADDING
    assert geometry.board == (pad, pad, 4 * CELL, 3 * CELL)
    assert geometry.status == (pad, pad + 3 * CELL, 4 * CELL, layout.STATUS_HEIGHT)
    assert geometry.window == (4 * CELL + 2 * pad, 3 * CELL + layout.STATUS_HEIGHT + 2 * pad)
