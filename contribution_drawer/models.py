from collections.abc import Iterator
from collections.abc import Mapping

from contribution_drawer.constants import COLS
from contribution_drawer.constants import PALETTE_SIZE
from contribution_drawer.constants import ROWS


class GridContractError(Exception):
    """Raised when a caller breaks the grid's coordinate or level contract."""


class OutOfBounds(GridContractError):
    """Raised when a (week, day) coordinate lies outside the grid."""


class InvalidLevel(GridContractError):
    """Raised when a level is not an index into the palette."""


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_cell(week: int, day: int) -> None:
    """Validate a cell coordinate against the fixed grid dimensions."""

    if not _is_int(week) or not _is_int(day):
        raise OutOfBounds(f"cell coordinates must be integers, got ({week!r}, {day!r})")
    if not 0 <= week < COLS or not 0 <= day < ROWS:
        raise OutOfBounds(
            f"cell ({week}, {day}) is outside the {COLS}x{ROWS} grid"
        )


def check_level(level: int) -> None:
    """Validate a level against the palette size."""

    if not _is_int(level) or not 0 <= level < PALETTE_SIZE:
        raise InvalidLevel(
            f"level {level!r} is outside the palette range 0..{PALETTE_SIZE - 1}"
        )


class Grid:
    """Immutable, sparse contribution grid.

    Only non-zero levels are stored, so two grids showing the same colours
    always compare equal no matter how they were painted. Every mutation
    returns a new grid; an instance that has been handed out is never
    modified, which is what lets history keep grids as snapshots.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Mapping[tuple[int, int], int] | None = None) -> None:
        stored: dict[tuple[int, int], int] = {}
        for (week, day), level in (cells or {}).items():
            check_cell(week, day)
            check_level(level)
            if level:
                stored[(week, day)] = level
        self._cells = stored

    @classmethod
    def empty(cls) -> "Grid":
        return cls()

    def get(self, week: int, day: int) -> int:
        check_cell(week, day)
        return self._cells.get((week, day), 0)

    def set(self, week: int, day: int, level: int) -> "Grid":
        check_cell(week, day)
        check_level(level)
        if self._cells.get((week, day), 0) == level:
            return self

        updated = Grid()
        updated._cells = dict(self._cells)
        if level:
            updated._cells[(week, day)] = level
        else:
            del updated._cells[(week, day)]
        return updated

    def is_empty(self) -> bool:
        return not self._cells

    def equals(self, other: "Grid") -> bool:
        return self._cells == other._cells

    @property
    def painted_count(self) -> int:
        return len(self._cells)

    def cells(self) -> Iterator[tuple[int, int, int]]:
        """Yield (week, day, level) for painted cells, ordered by week then day."""

        for week, day in sorted(self._cells):
            yield week, day, self._cells[(week, day)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash(frozenset(self._cells.items()))

    def __repr__(self) -> str:
        return f"Grid({self.painted_count} painted cells)"


# History stores grids directly; they are already immutable.
Snapshot = Grid
