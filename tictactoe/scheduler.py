"""
Deferred, cancellable callbacks.
The session uses a scheduler to hold the computer's move back for a short
"thinking" delay, and cancels it if the game changes underneath.

Anything with call_later(delay_s, callback) -> handle, where the handle has
cancel(), can be used. The window uses Tk's after() (see ui.py).
"""

import heapq
import itertools
import logging
import threading
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


class TimerHandle:
    """A scheduled callback that can be cancelled before it runs."""

    def __init__(self, callback: Callable[[], None]):
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ThreadingScheduler:
    """Runs each callback on its own threading.Timer thread."""

    class _Handle(TimerHandle):
        def __init__(self, callback: Callable[[], None], delay_s: float):
            super().__init__(callback)
            self.timer = threading.Timer(delay_s, self._run)
            self.timer.daemon = True

        def _run(self):
            if not self.cancelled:
                self.callback()

        def cancel(self):
            super().cancel()
            self.timer.cancel()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        handle = self._Handle(callback, delay_s)
        handle.timer.start()
        logger.debug("Scheduled callback in %.3fs", delay_s)
        return handle


class ManualScheduler:
    """
    A scheduler on a virtual clock.

    Nothing runs until advance() moves the clock past a callback's due
    time. Handy for the console game (advance after sleeping) and for
    tests (no real waiting).
    """

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback)
        heapq.heappush(self._queue, (self.now + delay_s, next(self._counter), handle))
        return handle

    @property
    def pending(self) -> int:
        """Number of callbacks still waiting to run."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and run everything that became due.

        Callbacks scheduled while advancing run too if they fall inside
        the window.

        Returns:
            How many callbacks ran.
        """
        deadline = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, handle = heapq.heappop(self._queue)
            self.now = due
            if handle.cancelled:
                continue
            handle.callback()
            ran += 1
        self.now = deadline
        return ran

    def run_all(self) -> int:
        """Run every pending callback, however far in the future."""
        ran = 0
        while self._queue:
            due, _, _ = self._queue[0]
            ran += self.advance(max(0.0, due - self.now))
        return ran
