"""Tick-driven timers measured against elapsed monotonic time."""

from enum import Enum


class TimerMode(Enum):
    ONCE = "once"
    REPEATING = "repeating"


class Timer:
    """
    Timer advanced explicitly by the scheduling loop.

    ``just_finished()`` is an edge: it is true only for the tick in which the
    timer reached its duration. A ONCE timer finishes a single time and then
    stays finished; a REPEATING timer wraps its elapsed time so the period
    does not drift.
    """

    def __init__(self, duration: float, mode: TimerMode = TimerMode.ONCE) -> None:
        if duration < 0:
            raise ValueError(f"timer duration must be >= 0, got {duration}")
        if mode is TimerMode.REPEATING and duration == 0:
            raise ValueError("repeating timer needs a positive duration")
        self._duration = duration
        self._mode = mode
        self._elapsed = 0.0
        self._finished = False
        self._times_finished = 0

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def mode(self) -> TimerMode:
        return self._mode

    @property
    def elapsed(self) -> float:
        return self._elapsed

    def tick(self, delta: float) -> "Timer":
        """Advance the timer by ``delta`` seconds."""
        if delta < 0:
            raise ValueError(f"cannot tick a timer backwards ({delta})")

        self._times_finished = 0
        if self._mode is TimerMode.ONCE:
            if self._finished:
                return self
            self._elapsed = min(self._elapsed + delta, self._duration)
            if self._elapsed >= self._duration:
                self._finished = True
                self._times_finished = 1
            return self

        self._elapsed += delta
        if self._elapsed >= self._duration:
            self._times_finished = int(self._elapsed // self._duration)
            self._elapsed -= self._times_finished * self._duration
        return self

    def just_finished(self) -> bool:
        return self._times_finished > 0

    def finished(self) -> bool:
        """Level flag: a ONCE timer stays finished; a REPEATING one mirrors the edge."""
        if self._mode is TimerMode.ONCE:
            return self._finished
        return self.just_finished()

    def times_finished_this_tick(self) -> int:
        return self._times_finished

    def reset(self) -> None:
        self._elapsed = 0.0
        self._finished = False
        self._times_finished = 0
