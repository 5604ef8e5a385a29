import pytest

from lightpath.errors import (
    BudgetExceeded,
    CellOccupied,
    ErrorCode,
    NoMirrorHere,
    OutOfBounds,
)
from lightpath.grid import Grid, Mirror
from lightpath.history import MoveHistory, PlaceMirror, RemoveMirror, RotateMirror
from lightpath.level import CellKind
from lightpath.level_format import parse


LEVEL = """\
name: Sandbox
max_mirrors: 2
---
>..X
....
.T..
"""


@pytest.fixture
def grid() -> Grid:
    return Grid(parse(LEVEL))


def test_place_and_remove_mirror(grid: Grid):
    grid.place_mirror((1, 1), Mirror.BACK_SLASH)

    assert grid.content_at((1, 1)) is Mirror.BACK_SLASH
    assert grid.mirrors_placed == 1
    assert grid.remaining_mirrors == 1
    assert grid.free_cells() == grid.level.free_cells() - 1

    assert grid.remove_mirror((1, 1)) is Mirror.BACK_SLASH
    assert grid.content_at((1, 1)) is CellKind.EMPTY
    assert grid.mirrors_placed == 0


@pytest.mark.parametrize("position", [(-1, 0), (4, 0), (0, 3), (2, -5)])
def test_place_outside_grid_is_rejected(grid: Grid, position):
    with pytest.raises(OutOfBounds):
        grid.place_mirror(position, Mirror.FORWARD_SLASH)


@pytest.mark.parametrize("position", [(0, 0), (3, 0), (1, 2)])
def test_place_on_fixed_cell_is_rejected(grid: Grid, position):
    with pytest.raises(CellOccupied):
        grid.place_mirror(position, Mirror.FORWARD_SLASH)

    assert grid.mirrors == {}


def test_place_on_existing_mirror_is_rejected(grid: Grid):
    grid.place_mirror((1, 0), Mirror.FORWARD_SLASH)

    with pytest.raises(CellOccupied):
        grid.place_mirror((1, 0), Mirror.BACK_SLASH)

    assert grid.content_at((1, 0)) is Mirror.FORWARD_SLASH


def test_budget_is_never_exceeded(grid: Grid):
    grid.place_mirror((1, 0), Mirror.FORWARD_SLASH)
    grid.place_mirror((2, 0), Mirror.FORWARD_SLASH)

    with pytest.raises(BudgetExceeded):
        grid.place_mirror((2, 1), Mirror.FORWARD_SLASH)

    assert grid.mirrors_placed == grid.max_mirrors
    assert grid.remaining_mirrors == 0


def test_occupied_is_reported_before_budget(grid: Grid):
    grid.place_mirror((1, 0), Mirror.FORWARD_SLASH)
    grid.place_mirror((2, 0), Mirror.FORWARD_SLASH)

    with pytest.raises(CellOccupied):
        grid.place_mirror((3, 0), Mirror.FORWARD_SLASH)


def test_remove_and_rotate_need_a_mirror(grid: Grid):
    with pytest.raises(NoMirrorHere):
        grid.remove_mirror((1, 1))
    with pytest.raises(NoMirrorHere):
        grid.rotate_mirror((0, 0))


def test_rotate_flips_orientation(grid: Grid):
    grid.place_mirror((1, 1), Mirror.FORWARD_SLASH)

    assert grid.rotate_mirror((1, 1)) is Mirror.BACK_SLASH
    assert grid.rotate_mirror((1, 1)) is Mirror.FORWARD_SLASH


def test_level_is_not_modified_by_mirrors(grid: Grid):
    cells = grid.level.cells
    grid.place_mirror((1, 1), Mirror.FORWARD_SLASH)

    assert grid.level.cells == cells
    assert grid.level.kind_at((1, 1)) is CellKind.EMPTY


def test_apply_counts_moves_and_undo_redo_do_not(grid: Grid):
    history = MoveHistory(grid)

    assert history.apply(PlaceMirror((1, 1), Mirror.BACK_SLASH))
    assert grid.moves_used == 1

    result = history.undo()
    assert result.ok
    assert grid.mirrors == {}
    assert history.can_redo

    result = history.redo()
    assert result.ok
    assert grid.mirrors == {(1, 1): Mirror.BACK_SLASH}
    assert grid.moves_used == 1


def test_undo_restores_removed_orientation(grid: Grid):
    history = MoveHistory(grid)
    history.apply(PlaceMirror((2, 1), Mirror.BACK_SLASH))
    history.apply(RemoveMirror((2, 1)))

    assert grid.mirrors == {}
    assert history.undo_stack[-1] == RemoveMirror((2, 1), Mirror.BACK_SLASH)

    history.undo()

    assert grid.mirrors == {(2, 1): Mirror.BACK_SLASH}
    assert grid.moves_used == 2


def test_undo_rotation(grid: Grid):
    history = MoveHistory(grid)
    history.apply(PlaceMirror((2, 1), Mirror.FORWARD_SLASH))
    history.apply(RotateMirror((2, 1)))

    assert grid.content_at((2, 1)) is Mirror.BACK_SLASH

    history.undo()

    assert grid.content_at((2, 1)) is Mirror.FORWARD_SLASH


def test_undo_then_redo_round_trips_any_sequence(grid: Grid):
    history = MoveHistory(grid)
    actions = [
        PlaceMirror((1, 0), Mirror.FORWARD_SLASH),
        PlaceMirror((2, 1), Mirror.BACK_SLASH),
        RotateMirror((1, 0)),
        RemoveMirror((2, 1)),
    ]
    states = [dict(grid.mirrors)]
    for action in actions:
        assert history.apply(action)
        states.append(dict(grid.mirrors))

    for expected in reversed(states[:-1]):
        assert history.undo()
        assert grid.mirrors == expected
    assert not history.undo()

    for expected in states[1:]:
        assert history.redo()
        assert grid.mirrors == expected
    assert grid.moves_used == len(actions)


def test_new_action_clears_redo_stack(grid: Grid):
    history = MoveHistory(grid)
    history.apply(PlaceMirror((1, 1), Mirror.FORWARD_SLASH))
    history.undo()

    history.apply(PlaceMirror((2, 1), Mirror.FORWARD_SLASH))

    assert not history.can_redo
    result = history.redo()
    assert result.error is ErrorCode.NOTHING_TO_REDO


def test_rejected_action_leaves_history_untouched(grid: Grid):
    history = MoveHistory(grid)
    history.apply(PlaceMirror((1, 1), Mirror.FORWARD_SLASH))
    history.undo()

    result = history.apply(PlaceMirror((0, 0), Mirror.FORWARD_SLASH))

    assert not result
    assert result.error is ErrorCode.CELL_OCCUPIED
    assert history.can_redo
    assert not history.can_undo
    assert grid.moves_used == 1


def test_empty_history_reports_nothing_to_undo(grid: Grid):
    result = MoveHistory(grid).undo()

    assert not result
    assert result.error is ErrorCode.NOTHING_TO_UNDO
    assert result.message
