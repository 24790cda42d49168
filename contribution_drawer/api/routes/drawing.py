from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Request
from fastapi import Response

from contribution_drawer.api.schemas.drawing import CellPosition
from contribution_drawer.api.schemas.drawing import ColorSelection
from contribution_drawer.api.schemas.drawing import PaintedCell
from contribution_drawer.api.schemas.drawing import PaletteResponse
from contribution_drawer.api.schemas.drawing import PointerEnter
from contribution_drawer.api.schemas.drawing import SessionState
from contribution_drawer.constants import COLS
from contribution_drawer.constants import DEFAULT_LEVEL
from contribution_drawer.constants import EXPORT_FILENAME
from contribution_drawer.constants import PALETTE
from contribution_drawer.constants import ROWS
from contribution_drawer.services.export_service import ExportError
from contribution_drawer.services.session_service import DrawingSession
from contribution_drawer.services.session_service import SessionNotFoundError
from contribution_drawer.services.session_service import SessionStore


# Handlers that touch a session are async so they all run on the event loop
# thread, one at a time.
router = APIRouter()


async def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


async def get_session(
    session_id: str, store: SessionStore = Depends(get_session_store)
) -> DrawingSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="session not found") from exc


def session_state(session: DrawingSession) -> SessionState:
    controller = session.controller
    return SessionState(
        id=session.id,
        selected_color=controller.selected_color,
        drawing=controller.drawing,
        can_undo=controller.can_undo(),
        can_redo=controller.can_redo(),
        is_empty=controller.is_empty(),
        cells=[
            PaintedCell(week=week, day=day, level=level)
            for week, day, level in controller.grid.cells()
        ],
    )


@router.get("/palette")
async def get_palette() -> PaletteResponse:
    """Return the colour palette and grid dimensions."""

    return PaletteResponse(
        colors=list(PALETTE), weeks=COLS, days=ROWS, default_level=DEFAULT_LEVEL
    )


@router.post("/sessions", status_code=201)
async def create_session(
    store: SessionStore = Depends(get_session_store),
) -> SessionState:
    """Start a new drawing session with an empty grid."""

    return session_state(store.create())


@router.get("/sessions/{session_id}")
async def read_session(session: DrawingSession = Depends(get_session)) -> SessionState:
    return session_state(session)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str, store: SessionStore = Depends(get_session_store)
) -> Response:
    try:
        store.delete(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="session not found") from exc
    return Response(status_code=204)


@router.put("/sessions/{session_id}/color")
async def select_color(
    payload: ColorSelection, session: DrawingSession = Depends(get_session)
) -> SessionState:
    session.controller.select_color(payload.level)
    return session_state(session)


@router.post("/sessions/{session_id}/pointer/down")
async def pointer_down(
    payload: CellPosition, session: DrawingSession = Depends(get_session)
) -> SessionState:
    session.controller.pointer_down(payload.week, payload.day)
    return session_state(session)


@router.post("/sessions/{session_id}/pointer/enter")
async def pointer_enter(
    payload: PointerEnter, session: DrawingSession = Depends(get_session)
) -> SessionState:
    session.controller.pointer_enter(payload.week, payload.day, payload.primary_pressed)
    return session_state(session)


@router.post("/sessions/{session_id}/pointer/up")
async def pointer_up(session: DrawingSession = Depends(get_session)) -> SessionState:
    session.controller.pointer_up()
    return session_state(session)


@router.post("/sessions/{session_id}/undo")
async def undo(session: DrawingSession = Depends(get_session)) -> SessionState:
    session.controller.undo()
    return session_state(session)


@router.post("/sessions/{session_id}/redo")
async def redo(session: DrawingSession = Depends(get_session)) -> SessionState:
    session.controller.redo()
    return session_state(session)


@router.post("/sessions/{session_id}/clear")
async def clear(session: DrawingSession = Depends(get_session)) -> SessionState:
    session.controller.clear()
    return session_state(session)


@router.get("/sessions/{session_id}/export")
async def export_image(session: DrawingSession = Depends(get_session)) -> Response:
    """Return the grid as a 1500x500 PNG download."""

    try:
        image_bytes = await session.export_image()
    except ExportError as exc:
        raise HTTPException(status_code=500, detail="Failed to export image") from exc

    return Response(
        content=image_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
