"""
Countdown state machine for timed practice tests.

``ExamTimer`` moves through ``idle -> running <-> paused -> finished``.
While running on an asyncio loop it decrements once per second; without a
running loop the caller drives it by calling ``tick()``. Listeners are
registered per event name with ``on()`` and receive a payload dict.
``close()`` stops the countdown and leaves a running timer paused.

Events: ``started``, ``paused``, ``resumed``, ``reset``, ``state-changed``,
``tick``, ``warning``, ``critical-warning`` and ``time-up``.
"""

import asyncio
import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any]], None]
Sleeper = Callable[[float], Awaitable[None]]

DEFAULT_WARNING_THRESHOLD = 300
DEFAULT_CRITICAL_THRESHOLD = 60


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


def format_time(seconds: int) -> str:
    """Render seconds as M:SS, e.g. 125 -> '2:05'; negative values render as '0:00'."""
    seconds = max(int(seconds), 0)
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


class ExamTimer:
    def __init__(
        self,
        duration_seconds: int,
        *,
        warning_threshold: int = DEFAULT_WARNING_THRESHOLD,
        critical_threshold: int = DEFAULT_CRITICAL_THRESHOLD,
        sleep: Sleeper = asyncio.sleep,
    ):
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")
        self.duration = duration_seconds
        self.remaining = duration_seconds
        self.warning_threshold = warning_threshold
        self.critical_threshold = critical_threshold
        self.state = TimerState.IDLE
        self.finished = asyncio.Event()
        self._sleep = sleep
        self._warned: Set[str] = set()
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._task: Optional[asyncio.Task] = None

    # listeners

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)

    def _emit(self, event: str, **payload: Any) -> None:
        payload.setdefault("remaining", self.remaining)
        for listener in list(self._listeners[event]):
            listener(payload)

    def _set_state(self, new_state: TimerState) -> None:
        old_state, self.state = self.state, new_state
        if old_state != new_state:
            self._emit("state-changed", previous=old_state.value, state=new_state.value)

    # scheduling

    def _schedule(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop: ticks are driven by the caller
            return
        self._task = loop.create_task(self._run())

    def _cancel(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    async def _run(self) -> None:
        while self.state == TimerState.RUNNING:
            await self._sleep(1)
            if self.state != TimerState.RUNNING:
                break
            self.tick()

    # transitions

    @property
    def is_running(self) -> bool:
        return self.state == TimerState.RUNNING

    @property
    def formatted_time(self) -> str:
        return format_time(self.remaining)

    def start(self) -> bool:
        """Start from idle or paused. Returns False when the transition is not allowed."""
        if self.state not in (TimerState.IDLE, TimerState.PAUSED):
            return False
        was_idle = self.state == TimerState.IDLE
        self._set_state(TimerState.RUNNING)
        self._schedule()
        if was_idle:
            self._emit("started")
        return True

    def pause(self) -> bool:
        if self.state != TimerState.RUNNING:
            return False
        self._cancel()
        self._set_state(TimerState.PAUSED)
        self._emit("paused")
        return True

    def resume(self) -> bool:
        if self.state != TimerState.PAUSED:
            return False
        self.start()
        self._emit("resumed")
        return True

    def reset(self) -> bool:
        """Return to idle with the full duration; a finished timer stays finished."""
        if self.state == TimerState.FINISHED:
            return False
        self._cancel()
        self.remaining = self.duration
        self._warned.clear()
        self._set_state(TimerState.IDLE)
        self._emit("reset")
        return True

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if self.state != TimerState.RUNNING:
            return
        self.remaining = max(self.remaining - 1, 0)
        self._emit("tick")

        if self.remaining <= self.warning_threshold and "warning" not in self._warned:
            self._warned.add("warning")
            self._emit("warning")
        if self.remaining <= self.critical_threshold and "critical" not in self._warned:
            self._warned.add("critical")
            self._emit("critical-warning")

        if self.remaining == 0:
            self._cancel()
            self._set_state(TimerState.FINISHED)
            self.finished.set()
            logger.info("Exam timer finished after %s seconds", self.duration)
            self._emit("time-up")

    def close(self) -> None:
        """Stop any scheduled countdown; a running timer is left paused so it can be resumed."""
        self._cancel()
        if self.state == TimerState.RUNNING:
            self._set_state(TimerState.PAUSED)

    async def wait(self) -> None:
        await self.finished.wait()
