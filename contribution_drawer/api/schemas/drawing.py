from pydantic import BaseModel


class CellPosition(BaseModel):
    """Grid cell addressed by week column and day row."""

    week: int
    day: int


class PointerEnter(CellPosition):
    """Pointer entering a cell, with the primary button state."""

    primary_pressed: bool


class ColorSelection(BaseModel):
    level: int


class PaintedCell(BaseModel):
    week: int
    day: int
    level: int


class SessionState(BaseModel):
    """Current grid and control enablement for one drawing session."""

    id: str
    selected_color: int
    drawing: bool
    can_undo: bool
    can_redo: bool
    is_empty: bool
    cells: list[PaintedCell]


class PaletteResponse(BaseModel):
    colors: list[str]
    weeks: int
    days: int
    default_level: int
