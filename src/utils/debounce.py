from __future__ import annotations

import asyncio
import enum
import heapq
from typing import Any, Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


class DebounceState(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    FIRED = "fired"


class Debouncer:
    """
    Runs `action` once `delay_seconds` have passed since the last trigger.

    idle -> pending(timer) -> fired; each trigger cancels the live timer first,
    so at most one timer is pending and only the last trigger of a burst fires.
    The scheduler defaults to the running asyncio loop; tests pass a ManualScheduler.
    """

    def __init__(
        self,
        action: Callable[[], Any],
        delay_seconds: float,
        *,
        scheduler: Scheduler | None = None,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._action = action
        self._delay = float(delay_seconds)
        self._scheduler = scheduler
        self._handle: TimerHandle | None = None
        self._state = DebounceState.IDLE

    @property
    def state(self) -> DebounceState:
        return self._state

    @property
    def delay_seconds(self) -> float:
        return self._delay

    def trigger(self) -> None:
        self.cancel()
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._handle = scheduler.call_later(self._delay, self._fire)
        self._state = DebounceState.PENDING

    __call__ = trigger

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            self._state = DebounceState.IDLE

    def _fire(self) -> None:
        self._handle = None
        self._state = DebounceState.FIRED
        self._action()


def schedule_debounced(
    action: Callable[[], Any],
    delay_seconds: float,
    *,
    scheduler: Scheduler | None = None,
) -> Debouncer:
    """Debounced wrapper for `action`; call the result (or `.trigger()`) on every event."""
    return Debouncer(action, delay_seconds, scheduler=scheduler)


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock for tests: timers fire only when `advance()` moves time past them."""

    def __init__(self) -> None:
        self.now = 0.0
        self._seq = 0
        self._timers: list[tuple[float, int, Callable[[], Any], _ManualHandle]] = []

    def call_later(self, delay: float, callback: Callable[[], Any]) -> _ManualHandle:
        handle = _ManualHandle()
        self._seq += 1
        heapq.heappush(self._timers, (self.now + float(delay), self._seq, callback, handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, _, h in self._timers if not h.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + float(seconds)
        while self._timers and self._timers[0][0] <= target:
            when, _, callback, handle = heapq.heappop(self._timers)
            if handle.cancelled:
                continue
            self.now = when
            callback()
        self.now = target
