"""Schedulable delays for round timers and rotation.

Services never sleep. They ask a clock to call them back later and keep the
returned handle so the call can be cancelled. ``SocketIOClock`` runs the
callbacks on Flask-SocketIO background tasks. ``ManualClock`` keeps virtual
time that only moves when ``advance`` is called, which lets tests step
through a round deterministically.
"""
import heapq
import itertools
import logging
import time
from typing import Callable, List, Tuple


class ScheduledCall:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def run(self) -> None:
        if not self.cancelled:
            self.cancelled = True
            self.callback()


class SocketIOClock:
    def __init__(self, socketio, logger=None):
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self.now() + max(0.0, delay), callback)

        def _runner(c: ScheduledCall):
            sleep_for = max(0.0, c.due - self.now())
            if sleep_for:
                self.socketio.sleep(sleep_for)
            if c.cancelled:
                return
            try:
                c.run()
            except Exception:
                self.logger.exception('[clock] scheduled callback failed')

        self.socketio.start_background_task(_runner, call)
        return call


class ManualClock:
    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (call.due, next(self._seq), call))
        return call

    def pending(self) -> int:
        return sum(1 for _, _, c in self._queue if not c.cancelled)

    def advance(self, seconds: float) -> None:
        """Move time forward, running every call that falls due on the way.

        Calls scheduled by a running callback are honoured if they are due
        before the target time.
        """
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            call.run()
        self._now = target
