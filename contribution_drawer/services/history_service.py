from contribution_drawer.models import Snapshot


class History:
    """Linear undo/redo log of grid snapshots.

    Committing while positioned before the end discards every redo state;
    there is no branching. ``max_depth`` optionally bounds the log by
    dropping the oldest snapshots.
    """

    def __init__(
        self, initial: Snapshot | None = None, max_depth: int | None = None
    ) -> None:
        if max_depth is not None and max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._snapshots: list[Snapshot] = [initial if initial is not None else Snapshot()]
        self._index = 0
        self.max_depth = max_depth

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._snapshots)

    def current(self) -> Snapshot:
        return self._snapshots[self._index]

    def commit(self, snapshot: Snapshot) -> bool:
        """Append a snapshot after the current one.

        Returns False without touching the log when the snapshot equals the
        current one.
        """

        if snapshot.equals(self.current()):
            return False

        del self._snapshots[self._index + 1 :]
        self._snapshots.append(snapshot)

        if self.max_depth is not None and len(self._snapshots) > self.max_depth:
            del self._snapshots[: len(self._snapshots) - self.max_depth]

        self._index = len(self._snapshots) - 1
        return True

    def undo(self) -> Snapshot:
        if self._index > 0:
            self._index -= 1
        return self.current()

    def redo(self) -> Snapshot:
        if self._index < len(self._snapshots) - 1:
            self._index += 1
        return self.current()

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1
