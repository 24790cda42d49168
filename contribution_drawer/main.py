from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse

from contribution_drawer.api.routes.drawing import router as drawing_router
from contribution_drawer.api.routes.health import router as health_router
from contribution_drawer.core.middleware import DrawingRateLimitMiddleware
from contribution_drawer.core.observability import init_sentry
from contribution_drawer.models import GridContractError
from contribution_drawer.services.session_service import SessionStore
from contribution_drawer.settings import Settings


async def grid_contract_error_handler(
    request: Request, exc: GridContractError
) -> JSONResponse:
    """Report out-of-range cells and levels sent by the client."""

    return JSONResponse(status_code=422, content={"detail": str(exc)})


def create_app() -> FastAPI:
    app_settings = Settings()
    init_sentry(app_settings)

    app = FastAPI(title="Contribution Graph Drawer")
    app.state.sessions = SessionStore(
        history_max_depth=app_settings.history_max_depth,
        font_path=app_settings.export_font_path,
        max_sessions=app_settings.max_sessions,
        idle_seconds=app_settings.session_idle_seconds,
    )
    app.add_middleware(
        DrawingRateLimitMiddleware,
        requests_per_window=app_settings.rate_limit_per_minute,
        window_seconds=app_settings.rate_limit_window_seconds,
    )
    app.add_exception_handler(GridContractError, grid_contract_error_handler)
    app.include_router(health_router)
    app.include_router(drawing_router)
    return app


app = create_app()
