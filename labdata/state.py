"""Observable state containers for the facades.

A facade owns one :class:`StateContainer` holding an immutable snapshot
dataclass.  The UI reads :meth:`StateContainer.snapshot` and re-renders from
a callback registered with :meth:`StateContainer.subscribe`; nothing here
depends on a particular UI toolkit.

Writes go through a single lock, and :class:`RequestSequencer` lets a facade
discard a response that completes after a newer request was issued.
"""
import contextlib
import enum
import itertools
import logging
import threading
from dataclasses import replace
from typing import Any, Callable, Generic, Iterator, List, TypeVar

S = TypeVar('S')

logger = logging.getLogger('labkit.state')


class FeedStatus(enum.Enum):
    """Lifecycle of one logical feed: IDLE -> LOADING -> LOADED | ERRORED."""

    IDLE = 'idle'
    LOADING = 'loading'
    LOADED = 'loaded'
    ERRORED = 'errored'


class StateContainer(Generic[S]):
    """Single-writer holder of a frozen snapshot with change notification."""

    def __init__(self, initial: S) -> None:
        self._state = initial
        self._lock = threading.RLock()
        self._subscribers: List[Callable[[S], Any]] = []
        self._depth = 0
        self._dirty = False

    @contextlib.contextmanager
    def transaction(self) -> Iterator['StateContainer[S]']:
        """Hold the lock for a read-modify-write sequence.

        Writes made inside the block are published once, with the final
        snapshot, after the outermost transaction has released the lock.
        """
        published = []
        try:
            with self._lock:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                    if self._depth == 0 and self._dirty:
                        self._dirty = False
                        published.append(self._state)
        finally:
            # Writes that happened before an exception are still published
            for state in published:
                self._notify(state)

    def snapshot(self) -> S:
        with self._lock:
            return self._state

    def update(self, **changes) -> S:
        """Replace fields of the current snapshot and notify subscribers."""
        with self.transaction():
            self._state = replace(self._state, **changes)
            self._dirty = True
            return self._state

    def set(self, state: S) -> None:
        with self.transaction():
            self._state = state
            self._dirty = True

    def subscribe(self, callback: Callable[[S], Any]) -> Callable[[], None]:
        """Register *callback*; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, state: S) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(state)
            except Exception:
                logger.exception("State subscriber %r failed", callback)


class RequestSequencer:
    """Issues monotonically increasing request tokens.

    Only the most recently issued token is current; a response carrying an
    older token is stale and must be dropped.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    def begin(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._latest
