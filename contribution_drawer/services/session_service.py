import logging
from collections import OrderedDict
from collections.abc import Callable
from time import monotonic
from uuid import uuid4

from starlette.concurrency import run_in_threadpool

from contribution_drawer.services.export_service import ExportError
from contribution_drawer.services.export_service import request_export
from contribution_drawer.services.history_service import History
from contribution_drawer.services.paint_service import PaintController


logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when no drawing session exists for the given id."""


class DrawingSession:
    """One user's grid, history and selected colour, plus export."""

    def __init__(
        self,
        session_id: str,
        controller: PaintController,
        font_path: str | None = None,
        last_used: float = 0.0,
    ) -> None:
        self.id = session_id
        self.controller = controller
        self.font_path = font_path
        self.last_used = last_used

    async def export_image(self) -> bytes:
        """Return the grid as a fixed-size PNG.

        The grid reference is taken before the first suspension point, so
        edits made while the image is rendered do not leak into it. Failures
        are logged and re-raised; they never touch the grid or its history.
        """

        grid = self.controller.grid
        try:
            pending = await run_in_threadpool(
                request_export, grid, font_path=self.font_path
            )
            return await pending.resolve()
        except ExportError:
            logger.exception("Export failed for session %s", self.id)
            raise


class SessionStore:
    """In-memory drawing sessions, bounded in count and idle time.

    Sessions are kept in least-recently-used order. Creating a session first
    drops sessions idle for longer than ``idle_seconds``, then the least
    recently used ones until there is room under ``max_sessions``.
    """

    def __init__(
        self,
        history_max_depth: int | None = None,
        font_path: str | None = None,
        max_sessions: int = 1000,
        idle_seconds: float | None = 3600,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.history_max_depth = history_max_depth
        self.font_path = font_path
        self.max_sessions = max_sessions
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._sessions: OrderedDict[str, DrawingSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self) -> DrawingSession:
        now = self._clock()
        self._drop_expired(now)
        while len(self._sessions) >= self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("Evicted least recently used session %s", evicted_id)

        history = History(max_depth=self.history_max_depth)
        session = DrawingSession(
            session_id=uuid4().hex,
            controller=PaintController(history=history),
            font_path=self.font_path,
            last_used=now,
        )
        self._sessions[session.id] = session
        logger.info("Created drawing session %s", session.id)
        return session

    def get(self, session_id: str) -> DrawingSession:
        now = self._clock()
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if self._expired(session, now):
            del self._sessions[session_id]
            logger.info("Dropped idle session %s", session_id)
            raise SessionNotFoundError(session_id)

        session.last_used = now
        self._sessions.move_to_end(session_id)
        return session

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)

    def _expired(self, session: DrawingSession, now: float) -> bool:
        return self.idle_seconds is not None and now - session.last_used > self.idle_seconds

    def _drop_expired(self, now: float) -> None:
        # Oldest first; stop at the first session still in use.
        while self._sessions:
            session = next(iter(self._sessions.values()))
            if not self._expired(session, now):
                break
            del self._sessions[session.id]
            logger.info("Dropped idle session %s", session.id)
