"""
Undo/redo history for the placed-visual collection.

HistoryStack keeps bounded snapshot stacks. HistoryRecorder sits in front of
it and coalesces bursts of edits into a single snapshot taken after the
edits pause.
"""
import logging
import time
from contextlib import contextmanager
from threading import Lock, Timer
from typing import List, Optional

from app.core.schemas import ProjectSnapshot, Visual

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 50


def _copy_visuals(visuals: List[Visual]) -> List[Visual]:
    return [v.model_copy(deep=True) for v in visuals]


class HistoryStack:
    """
    Snapshot-based undo/redo.

    The current state always sits on top of ``past``; undo is therefore a
    no-op until at least two states have been pushed. Pushing a new state
    clears ``future``. The oldest snapshot is evicted once ``past`` exceeds
    ``max_history``.
    """

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY):
        self.max_history = max_history
        self.past: List[ProjectSnapshot] = []
        self.future: List[ProjectSnapshot] = []
        self._lock = Lock()

    def push_state(self, visuals: List[Visual]) -> None:
        snapshot = ProjectSnapshot(visuals=_copy_visuals(visuals), timestamp=time.time())
        with self._lock:
            self.past.append(snapshot)
            if len(self.past) > self.max_history:
                self.past.pop(0)
            self.future = []
        logger.debug(f"History push: {len(snapshot.visuals)} visuals, depth {len(self.past)}")

    def undo(self) -> Optional[List[Visual]]:
        """Step back one snapshot. Returns None when there is nothing to undo."""
        with self._lock:
            if len(self.past) <= 1:
                return None

            current = self.past.pop()
            self.future.insert(0, current)
            return _copy_visuals(self.past[-1].visuals)

    def redo(self) -> Optional[List[Visual]]:
        """Re-apply the most recently undone snapshot, or None."""
        with self._lock:
            if not self.future:
                return None

            following = self.future.pop(0)
            self.past.append(following)
            return _copy_visuals(following.visuals)

    def can_undo(self) -> bool:
        return len(self.past) > 1

    def can_redo(self) -> bool:
        return len(self.future) > 0

    def clear_history(self) -> None:
        with self._lock:
            self.past = []
            self.future = []

    def get_current_snapshot(self) -> Optional[ProjectSnapshot]:
        return self.past[-1] if self.past else None


class HistoryRecorder:
    """
    Coalescing timer in front of a HistoryStack.

    Each ``record`` call replaces the pending state and restarts the delay;
    only the last state before a pause is pushed. ``flush`` pushes the
    pending state immediately and ``close`` flushes and stops accepting
    states. While ``suppressed`` is active, ``record`` does nothing; undo and
    redo apply their restored state inside it.
    """

    def __init__(self, history: HistoryStack, delay_seconds: float = 0.3):
        self.history = history
        self.delay_seconds = delay_seconds
        self._pending: Optional[List[Visual]] = None
        self._timer: Optional[Timer] = None
        self._lock = Lock()
        # held across take-and-push so a concurrent flush waits for the push
        self._commit_lock = Lock()
        self._suppress_depth = 0
        self._closed = False

    def record(self, visuals: List[Visual]) -> None:
        if self._suppress_depth or self._closed:
            return

        if self.delay_seconds <= 0:
            self.history.push_state(visuals)
            return

        with self._lock:
            self._pending = _copy_visuals(visuals)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = Timer(self.delay_seconds, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """Push the pending state now. Returns True if something was pushed."""
        with self._commit_lock:
            with self._lock:
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None
                pending, self._pending = self._pending, None

            if pending is None:
                return False
            self.history.push_state(pending)
            return True

    def cancel(self) -> None:
        """Drop the pending state without pushing it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @contextmanager
    def suppressed(self):
        self._suppress_depth += 1
        try:
            yield
        finally:
            self._suppress_depth -= 1

    def close(self) -> None:
        self.flush()
        self._closed = True
