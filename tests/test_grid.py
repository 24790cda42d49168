import pytest

from contribution_drawer.constants import COLS
from contribution_drawer.constants import PALETTE_SIZE
from contribution_drawer.constants import ROWS
from contribution_drawer.models import Grid
from contribution_drawer.models import InvalidLevel
from contribution_drawer.models import OutOfBounds


def test_unset_cells_read_as_level_zero() -> None:
    grid = Grid.empty()

    assert grid.get(0, 0) == 0
    assert grid.get(COLS - 1, ROWS - 1) == 0
    assert grid.is_empty()


def test_get_returns_most_recent_set() -> None:
    grid = Grid.empty().set(3, 2, 1).set(3, 2, 4).set(10, 6, 2)

    assert grid.get(3, 2) == 4
    assert grid.get(10, 6) == 2
    assert grid.get(3, 3) == 0


def test_set_does_not_mutate_original() -> None:
    original = Grid.empty()

    painted = original.set(5, 5, 3)

    assert original.is_empty()
    assert painted.get(5, 5) == 3


def test_set_same_level_returns_same_grid() -> None:
    grid = Grid.empty().set(1, 1, 2)

    assert grid.set(1, 1, 2) is grid


def test_painting_level_zero_erases_cell() -> None:
    grid = Grid.empty().set(4, 4, 3).set(4, 4, 0)

    assert grid.is_empty()
    assert grid == Grid.empty()
    assert grid.painted_count == 0


def test_equality_is_structural() -> None:
    first = Grid.empty().set(0, 0, 1).set(1, 1, 2)
    second = Grid.empty().set(1, 1, 2).set(0, 0, 1)

    assert first.equals(second)
    assert first == second
    assert hash(first) == hash(second)
    assert first != second.set(0, 0, 3)


def test_cells_are_ordered_by_week_then_day() -> None:
    grid = Grid.empty().set(2, 0, 1).set(0, 5, 2).set(0, 1, 3)

    assert list(grid.cells()) == [(0, 1, 3), (0, 5, 2), (2, 0, 1)]


@pytest.mark.parametrize(
    ("week", "day"),
    [(-1, 0), (0, -1), (COLS, 0), (0, ROWS), (1.5, 0), (True, 0)],
)
def test_out_of_bounds_coordinates_are_rejected(week, day) -> None:
    grid = Grid.empty()

    with pytest.raises(OutOfBounds):
        grid.get(week, day)
    with pytest.raises(OutOfBounds):
        grid.set(week, day, 1)


@pytest.mark.parametrize("level", [-1, PALETTE_SIZE, None, "2"])
def test_invalid_levels_are_rejected(level) -> None:
    with pytest.raises(InvalidLevel):
        Grid.empty().set(0, 0, level)


def test_constructor_validates_and_drops_zero_levels() -> None:
    grid = Grid({(0, 0): 0, (1, 2): 3})

    assert grid.painted_count == 1
    with pytest.raises(OutOfBounds):
        Grid({(COLS, 0): 1})
