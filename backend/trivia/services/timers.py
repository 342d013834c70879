import math
from typing import Callable, Optional

from trivia.models import Session


class RoundTimer:
    """Countdown for one round.

    Ticks are scheduled against the start time, not chained off each other,
    and carry the remaining seconds derived from elapsed clock time. Once
    ``cancel`` has run no tick or expiry fires.
    """

    def __init__(self, clock, session_id: str, duration: int,
                 on_tick: Callable[['RoundTimer', int], None],
                 on_expire: Callable[['RoundTimer'], None],
                 interval: float = 1.0):
        self.clock = clock
        self.session_id = session_id
        self.duration = duration
        self.interval = interval
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.started_at: Optional[float] = None
        self.cancelled = False
        self.expired = False
        self._tick_call = None
        self._expiry_call = None
        self._ticks = 0

    @property
    def active(self) -> bool:
        return self.started_at is not None and not self.cancelled and not self.expired

    def start(self) -> 'RoundTimer':
        self.started_at = self.clock.now()
        self._schedule_tick()
        self._expiry_call = self.clock.call_later(self.duration, self._fire_expiry)
        return self

    def remaining(self) -> int:
        if self.started_at is None:
            return self.duration
        elapsed = self.clock.now() - self.started_at
        return max(0, self.duration - int(math.floor(elapsed)))

    def cancel(self) -> bool:
        if self.cancelled:
            return False
        self.cancelled = True
        for call in (self._tick_call, self._expiry_call):
            if call is not None:
                call.cancel()
        self._tick_call = None
        self._expiry_call = None
        return True

    def _schedule_tick(self) -> None:
        offset = (self._ticks + 1) * self.interval
        if offset >= self.duration:
            self._tick_call = None
            return
        due = self.started_at + offset
        self._tick_call = self.clock.call_later(due - self.clock.now(), self._fire_tick)

    def _fire_tick(self) -> None:
        if not self.active:
            return
        self._ticks += 1
        self._schedule_tick()
        self.on_tick(self, self.remaining())

    def _fire_expiry(self) -> None:
        if not self.active:
            return
        self.expired = True
        if self._tick_call is not None:
            self._tick_call.cancel()
            self._tick_call = None
        self.on_expire(self)


class TimerManager:
    """Owns the one active round timer of each session."""

    def __init__(self, clock, interval: float = 1.0, logger=None):
        self.clock = clock
        self.interval = interval
        self.logger = logger

    def start(self, session: Session, duration: int, on_tick, on_expire) -> RoundTimer:
        self.cancel(session)
        timer = RoundTimer(self.clock, session.id, duration, on_tick, on_expire,
                           interval=self.interval)
        session.timer = timer.start()
        if self.logger:
            self.logger.info(f"[timer-set] session={session.id} round={session.round_id} duration={duration}s")
        return timer

    def cancel(self, session: Session) -> bool:
        timer = session.timer
        session.timer = None
        if timer is None:
            return False
        cancelled = timer.cancel()
        if cancelled and self.logger:
            self.logger.info(f"[timer-cancel] session={session.id} round={session.round_id} remaining={timer.remaining()}s")
        return cancelled
