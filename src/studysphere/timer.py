"""Pomodoro countdown engine with drift-corrected ticking.

The engine never counts ticks. Each periodic callback measures the whole
seconds elapsed since `lastTickAt` on the wall clock and advances the
anchor by exactly that amount, so late, throttled or irregular callbacks
neither lose nor invent time.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from studysphere.models import Durations, PomodoroState, TimerMode
from studysphere.store import PersistentStore

logger = logging.getLogger(__name__)

DEFAULT_DURATIONS = {TimerMode.FOCUS: 25, TimerMode.SHORT: 5, TimerMode.LONG: 15}
DURATION_BOUNDS = {TimerMode.FOCUS: (10, 90), TimerMode.SHORT: (3, 30), TimerMode.LONG: (5, 60)}
LONG_BREAK_EVERY = 3
TICK_INTERVAL = 0.4  # seconds; must stay below one second


def clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, n))


def parse_minutes(value, default: int) -> int:
    """Read a minutes value from user input; junk or zero becomes `default`."""
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        return default
    return minutes or default


def duration_for(pomodoro: PomodoroState, mode: TimerMode) -> int:
    """Minutes for `mode`, from the custom override when set, always in bounds."""
    default = DEFAULT_DURATIONS[mode]
    minutes = getattr(pomodoro.custom, mode.value) if pomodoro.custom else default
    lo, hi = DURATION_BOUNDS[mode]
    return clamp(minutes or default, lo, hi)


def format_clock(seconds: int) -> str:
    s = max(0, int(seconds))
    return f"{s // 60:02d}:{s % 60:02d}"


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class IntervalHandle:
    """A repeating callback registered with an IntervalScheduler."""

    def __init__(self, scheduler: "IntervalScheduler", seconds: float,
                 callback: Callable[[], None], next_at: float):
        self._scheduler = scheduler
        self.seconds = seconds
        self.callback = callback
        self.next_at = next_at

    @property
    def active(self) -> bool:
        return self in self._scheduler._handles

    def cancel(self) -> None:
        if self.active:
            self._scheduler._handles.remove(self)


class IntervalScheduler:
    """Cooperative periodic callbacks driven from the host's own loop.

    Nothing runs in the background: the host calls `run_pending()` and
    every due callback executes synchronously, to completion, in the
    caller's control flow.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._handles: list[IntervalHandle] = []

    def every(self, seconds: float, callback: Callable[[], None]) -> IntervalHandle:
        handle = IntervalHandle(self, seconds, callback, self._clock() + seconds)
        self._handles.append(handle)
        return handle

    def run_pending(self) -> int:
        """Fire each due callback once; missed periods are coalesced."""
        now = self._clock()
        fired = 0
        for handle in list(self._handles):
            if not handle.active or handle.next_at > now:
                continue
            while handle.next_at <= now:
                handle.next_at += handle.seconds
            handle.callback()
            fired += 1
        return fired

    @property
    def active_count(self) -> int:
        return len(self._handles)


@dataclass(frozen=True)
class TimerSnapshot:
    mode: TimerMode
    is_running: bool
    seconds_left: int
    focus_count: int
    durations: dict

    @property
    def clock(self) -> str:
        return format_clock(self.seconds_left)


class TimerEngine:
    def __init__(self, store: PersistentStore, scheduler: IntervalScheduler,
                 clock: Callable[[], int] = wall_clock_ms):
        self.store = store
        self.scheduler = scheduler
        self._clock = clock
        self._handle: Optional[IntervalHandle] = None
        self._listeners: list[Callable[[TimerMode], None]] = []
        if self.pomodoro.is_running:
            # a running timer was saved; restore its tick loop
            self.pomodoro.last_tick_at = self._clock()
            self.store.save()
            self._start_loop()

    @property
    def pomodoro(self) -> PomodoroState:
        return self.store.state.pomodoro

    @property
    def is_ticking(self) -> bool:
        return self._handle is not None and self._handle.active

    def durations(self) -> dict[TimerMode, int]:
        return {mode: duration_for(self.pomodoro, mode) for mode in TimerMode}

    def snapshot(self) -> TimerSnapshot:
        p = self.pomodoro
        return TimerSnapshot(
            mode=p.mode,
            is_running=p.is_running,
            seconds_left=p.seconds_left,
            focus_count=p.focus_count,
            durations=self.durations(),
        )

    def on_complete(self, callback: Callable[[TimerMode], None]) -> Callable[[], None]:
        """Listen for finished sessions; returns a function that removes the listener."""
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def set_mode(self, mode: TimerMode | str) -> None:
        self.pomodoro.mode = TimerMode(mode)
        self.reset()

    def reset(self, mode: TimerMode | str | None = None) -> None:
        """Refill the countdown for `mode` (default: current); running state is kept."""
        p = self.pomodoro
        mode = TimerMode(mode) if mode is not None else p.mode
        p.seconds_left = duration_for(p, mode) * 60
        p.last_tick_at = None
        self.store.save()

    def toggle_run(self) -> bool:
        p = self.pomodoro
        p.is_running = not p.is_running
        if p.is_running:
            p.last_tick_at = self._clock()
        self.store.save()
        if p.is_running:
            self._start_loop()
        else:
            self._stop_loop()
        return p.is_running

    def skip(self) -> TimerMode:
        logger.debug("Skipping %s session", self.pomodoro.mode.value)
        return self._advance()

    def apply_durations(self, focus, short, long) -> Durations:
        """Store custom durations (clamped) and refill the current countdown."""
        custom = Durations(
            focus=clamp(parse_minutes(focus, 25), *DURATION_BOUNDS[TimerMode.FOCUS]),
            short=clamp(parse_minutes(short, 5), *DURATION_BOUNDS[TimerMode.SHORT]),
            long=clamp(parse_minutes(long, 15), *DURATION_BOUNDS[TimerMode.LONG]),
        )
        self.pomodoro.custom = custom
        self.reset()
        return custom

    def tick(self) -> None:
        """Periodic callback: apply whole seconds elapsed since the last anchor."""
        p = self.pomodoro
        if not p.is_running:
            return
        now = self._clock()
        if p.last_tick_at is None:
            # countdown was refilled mid-run; start measuring from here
            p.last_tick_at = now
            self.store.save()
            return
        delta = (now - p.last_tick_at) // 1000
        if delta <= 0:
            return
        p.seconds_left = max(0, p.seconds_left - delta)
        p.last_tick_at += delta * 1000
        if p.seconds_left == 0:
            self._complete()
        else:
            self.store.save()

    def close(self) -> None:
        self._stop_loop()

    def _complete(self) -> None:
        p = self.pomodoro
        finished = p.mode
        p.is_running = False
        self.store.save()
        self._stop_loop()
        logger.info("%s session complete", finished.value)
        for callback in list(self._listeners):
            callback(finished)
        self._advance()

    def _advance(self) -> TimerMode:
        p = self.pomodoro
        if p.mode == TimerMode.FOCUS:
            p.focus_count += 1
            next_mode = TimerMode.LONG if p.focus_count % LONG_BREAK_EVERY == 0 else TimerMode.SHORT
        else:
            next_mode = TimerMode.FOCUS
        self.set_mode(next_mode)
        return next_mode

    def _start_loop(self) -> None:
        self._stop_loop()
        self._handle = self.scheduler.every(TICK_INTERVAL, self.tick)

    def _stop_loop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
