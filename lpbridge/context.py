"""
Cancellation contexts for long-running solves
"""
import threading
import time
from typing import List, Optional

from .errors import Canceled, ContextError, DeadlineExceeded


class CancelContext:
    """
    Cancellation signal with an optional deadline.

    A context is done once :meth:`cancel` was called, its deadline passed,
    or its parent is done. Once done it stays done. Solver engines poll it
    at their own cadence through the abort callback, so cancellation is
    cooperative.

    Thread-safety: all methods may be called from any thread.

    Parameters
    ----------
    deadline : float, optional
        Absolute deadline in :func:`time.monotonic` seconds
    parent : CancelContext, optional
        Context whose cancellation propagates to this one

    Examples
    --------
    >>> ctx = CancelContext.with_timeout(30.0)
    >>> result = model.solve_with_context(ctx)
    """

    def __init__(self, deadline: Optional[float] = None,
                 parent: Optional['CancelContext'] = None):
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline = deadline
        self._parent = parent
        self._lock = threading.Lock()
        self._error: Optional[ContextError] = None
        self._children: List['CancelContext'] = []
        if parent is not None:
            parent._add_child(self)

    @classmethod
    def with_timeout(cls, seconds: float, parent: Optional['CancelContext'] = None) -> 'CancelContext':
        """Context that expires ``seconds`` from now."""
        return cls(deadline=time.monotonic() + seconds, parent=parent)

    @classmethod
    def with_deadline(cls, deadline: float, parent: Optional['CancelContext'] = None) -> 'CancelContext':
        """Context that expires at ``deadline`` (monotonic clock)."""
        return cls(deadline=deadline, parent=parent)

    def child(self) -> 'CancelContext':
        return CancelContext(parent=self)

    def _add_child(self, child: 'CancelContext'):
        with self._lock:
            error = self._error
            if error is None:
                self._children.append(child)
        if error is not None:
            child._finish(error)

    def _finish(self, error: ContextError):
        with self._lock:
            if self._error is not None:
                return
            self._error = error
            children, self._children = self._children, []
        if self._parent is not None:
            self._parent._remove_child(self)
        for child in children:
            child._finish(error)

    def _remove_child(self, child: 'CancelContext'):
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    def cancel(self) -> None:
        """Cancel this context and its children. Later calls have no effect."""
        self._finish(Canceled())

    def error(self) -> Optional[ContextError]:
        """Return why the context is done, or None while it is still live."""
        with self._lock:
            if self._error is not None:
                return self._error
        if self._parent is not None:
            parent_error = self._parent.error()
            if parent_error is not None:
                self._finish(parent_error)
                return parent_error
        if self.deadline is not None and time.monotonic() >= self.deadline:
            self._finish(DeadlineExceeded())
            return self.error()
        return None

    @property
    def done(self) -> bool:
        return self.error() is not None

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (None if there is none)."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def __repr__(self):
        error = self.error()
        state = str(error) if error is not None else "live"
        return f"<CancelContext {state}>"
