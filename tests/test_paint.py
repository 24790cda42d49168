import pytest

from contribution_drawer.constants import DEFAULT_LEVEL
from contribution_drawer.models import Grid
from contribution_drawer.models import InvalidLevel
from contribution_drawer.models import OutOfBounds
from contribution_drawer.services.history_service import History
from contribution_drawer.services.paint_service import PaintController


def _drag(controller: PaintController, cells: list[tuple[int, int]]) -> None:
    first, *rest = cells
    controller.pointer_down(*first)
    for week, day in rest:
        controller.pointer_enter(week, day, True)
    controller.pointer_up()


def test_new_controller_starts_empty_with_default_color() -> None:
    controller = PaintController()

    assert controller.is_empty()
    assert controller.selected_color == DEFAULT_LEVEL
    assert not controller.drawing
    assert not controller.can_undo()
    assert not controller.can_redo()


def test_stroke_commits_exactly_one_history_entry() -> None:
    controller = PaintController()
    controller.select_color(3)

    _drag(controller, [(0, 0), (1, 0), (2, 0), (2, 1)])

    assert len(controller.history) == 2
    assert controller.grid.get(2, 1) == 3
    assert controller.history.current() == controller.grid


def test_cells_are_not_committed_before_pointer_up() -> None:
    controller = PaintController()

    controller.pointer_down(4, 4)
    controller.pointer_enter(5, 4, True)

    assert controller.drawing
    assert controller.grid.get(5, 4) == DEFAULT_LEVEL
    assert len(controller.history) == 1
    assert controller.history.current().is_empty()


def test_enter_without_primary_button_does_not_paint() -> None:
    controller = PaintController()
    controller.pointer_down(0, 0)

    controller.pointer_enter(1, 0, False)
    controller.pointer_up()

    assert controller.grid.get(1, 0) == 0
    assert controller.grid.get(0, 0) == DEFAULT_LEVEL


def test_pressed_enter_without_down_starts_stroke() -> None:
    controller = PaintController()

    controller.pointer_enter(6, 2, True)
    assert controller.drawing
    controller.pointer_up()

    assert controller.grid.get(6, 2) == DEFAULT_LEVEL
    assert controller.can_undo()


def test_duplicate_pointer_down_is_ignored() -> None:
    controller = PaintController()
    controller.pointer_down(0, 0)

    controller.pointer_down(9, 6)
    controller.pointer_up()

    assert controller.grid.get(9, 6) == 0
    assert len(controller.history) == 2


def test_stray_pointer_up_is_noop() -> None:
    controller = PaintController()

    controller.pointer_up()

    assert len(controller.history) == 1


def test_repainting_same_color_is_noop_stroke() -> None:
    controller = PaintController()
    _drag(controller, [(0, 0), (1, 0)])

    _drag(controller, [(0, 0), (1, 0), (0, 0)])

    assert len(controller.history) == 2


def test_stroke_that_paints_then_reverts_is_not_recorded() -> None:
    controller = PaintController()
    controller.select_color(2)
    _drag(controller, [(3, 3)])

    controller.select_color(4)
    controller.pointer_down(3, 3)
    controller.select_color(2)
    controller.pointer_enter(3, 3, True)
    controller.pointer_up()

    assert len(controller.history) == 2
    assert controller.history.index == 1


def test_two_gestures_undo_twice_then_redo_twice() -> None:
    controller = PaintController()
    first_cells = [(week, 0) for week in range(5)]
    second_cells = [(week, 3) for week in range(10, 15)]
    _drag(controller, first_cells)
    after_first = controller.grid
    _drag(controller, second_cells)
    after_both = controller.grid
    assert after_both.painted_count == 10

    controller.undo()
    assert controller.grid == after_first
    controller.undo()
    assert controller.is_empty()

    controller.redo()
    controller.redo()
    assert controller.grid == after_both
    assert not controller.can_redo()


def test_painting_after_undo_discards_redo() -> None:
    controller = PaintController()
    _drag(controller, [(0, 0)])
    _drag(controller, [(1, 1)])
    controller.undo()
    assert controller.can_redo()

    _drag(controller, [(2, 2)])

    assert not controller.can_redo()
    assert controller.grid.get(1, 1) == 0


def test_clear_commits_empty_grid() -> None:
    controller = PaintController()
    _drag(controller, [(0, 0), (1, 1)])

    controller.clear()

    assert controller.is_empty()
    assert len(controller.history) == 3
    assert controller.undo().painted_count == 2


def test_clear_on_empty_grid_still_hands_grid_to_history() -> None:
    commits: list[Grid] = []

    class RecordingHistory(History):
        def commit(self, snapshot: Grid) -> bool:
            commits.append(snapshot)
            return super().commit(snapshot)

    controller = PaintController(history=RecordingHistory())

    controller.clear()

    assert commits == [Grid.empty()]
    assert len(controller.history) == 1


def test_undo_during_stroke_cancels_it() -> None:
    controller = PaintController()
    _drag(controller, [(0, 0)])
    controller.pointer_down(5, 5)

    controller.undo()
    controller.pointer_up()

    assert not controller.drawing
    assert controller.is_empty()
    assert controller.can_redo()


def test_selected_color_is_not_undoable() -> None:
    controller = PaintController()
    _drag(controller, [(0, 0)])
    controller.select_color(4)

    controller.undo()

    assert controller.selected_color == 4


def test_invalid_input_leaves_state_unchanged() -> None:
    controller = PaintController()

    with pytest.raises(InvalidLevel):
        controller.select_color(5)
    with pytest.raises(OutOfBounds):
        controller.pointer_down(53, 0)

    assert not controller.drawing
    assert controller.selected_color == DEFAULT_LEVEL
    assert controller.is_empty()
