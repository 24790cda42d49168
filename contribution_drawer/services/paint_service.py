import logging

from contribution_drawer.constants import DEFAULT_LEVEL
from contribution_drawer.models import Grid
from contribution_drawer.models import Snapshot
from contribution_drawer.models import check_cell
from contribution_drawer.models import check_level
from contribution_drawer.services.history_service import History


logger = logging.getLogger(__name__)


class PaintController:
    """Turn pointer gestures into grid edits and history entries.

    A stroke runs from pointer down (or a pressed pointer entering the grid)
    to pointer up. Cells painted during the stroke only change the working
    grid; the stroke becomes a single history entry when it ends, and only
    if the grid actually differs from where the stroke started.
    """

    def __init__(
        self, history: History | None = None, selected_color: int = DEFAULT_LEVEL
    ) -> None:
        check_level(selected_color)
        self.history = history if history is not None else History()
        self._grid = self.history.current()
        self._selected_color = selected_color
        self._drawing = False
        self._stroke_origin: Snapshot | None = None

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def selected_color(self) -> int:
        return self._selected_color

    @property
    def drawing(self) -> bool:
        return self._drawing

    def select_color(self, level: int) -> None:
        check_level(level)
        self._selected_color = level

    def pointer_down(self, week: int, day: int) -> None:
        check_cell(week, day)
        if self._drawing:
            return
        self._start_stroke()
        self._paint(week, day)

    def pointer_enter(self, week: int, day: int, primary_pressed: bool) -> None:
        check_cell(week, day)
        if not primary_pressed:
            return
        if not self._drawing:
            # Drag started outside the grid.
            self._start_stroke()
        self._paint(week, day)

    def pointer_up(self) -> None:
        if not self._drawing:
            return
        origin = self._stroke_origin
        self._drawing = False
        self._stroke_origin = None

        if origin is not None and self._grid.equals(origin):
            logger.debug("Stroke left the grid unchanged, nothing recorded")
            return
        self.history.commit(self._grid)

    def undo(self) -> Grid:
        self._cancel_stroke()
        self._grid = self.history.undo()
        return self._grid

    def redo(self) -> Grid:
        self._cancel_stroke()
        self._grid = self.history.redo()
        return self._grid

    def clear(self) -> None:
        self._cancel_stroke()
        self._grid = Grid.empty()
        self.history.commit(self._grid)

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def is_empty(self) -> bool:
        return self._grid.is_empty()

    def _start_stroke(self) -> None:
        self._drawing = True
        self._stroke_origin = self.history.current()
        self._grid = self._stroke_origin

    def _cancel_stroke(self) -> None:
        self._drawing = False
        self._stroke_origin = None

    def _paint(self, week: int, day: int) -> None:
        if self._grid.get(week, day) == self._selected_color:
            return
        self._grid = self._grid.set(week, day, self._selected_color)
