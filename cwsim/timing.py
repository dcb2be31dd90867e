from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional, Protocol

from .stations import Station

# Timeline entries kept for display; trimmed to the newest half when exceeded.
MAX_TIMELINE = 2000


class Clock(Protocol):
    """Monotonic clock abstraction; audio end times live on the same time base."""

    def now(self) -> float:
        ...


class MonotonicClock:
    def now(self) -> float:
        return time.monotonic()


class AudioEngine(Protocol):
    def play_sentence(self, text: str, start_time: float, voice: Station) -> float:
        """Key ``text`` with ``voice`` no earlier than ``start_time``; return the end time."""
        ...

    def stop_all(self) -> None:
        ...


@dataclass(frozen=True)
class ScheduledUtterance:
    callsign: str
    text: str
    requested_start: float
    start: float
    end: float


class TimingScheduler:
    """Single audio channel shared by the trainee and every simulated station.

    Utterances never overlap: each one starts no earlier than the current lock
    time, and the lock moves to its end. User commands are rejected while the
    lock lies in the future.
    """

    def __init__(self, engine: AudioEngine, clock: Clock):
        self.engine = engine
        self.clock = clock
        self.lock_time = 0.0
        self.timeline: List[ScheduledUtterance] = []
        self._dropped = 0

    def is_locked(self) -> bool:
        return self.lock_time > self.clock.now()

    def schedule(self, voice: Station, text: Optional[str], start: Optional[float] = None) -> float:
        requested = self.clock.now() if start is None else float(start)
        effective = max(requested, self.lock_time)
        message = " ".join((text or "").split())
        if not message:
            return effective

        end = float(self.engine.play_sentence(message, effective, voice))
        end = max(end, effective)
        self.lock_time = end
        self.timeline.append(
            ScheduledUtterance(
                callsign=voice.callsign,
                text=message,
                requested_start=requested,
                start=effective,
                end=end,
            )
        )
        if len(self.timeline) > MAX_TIMELINE:
            drop = len(self.timeline) - MAX_TIMELINE // 2
            self._dropped += drop
            self.timeline = self.timeline[drop:]
        return end

    @property
    def scheduled_count(self) -> int:
        """Utterances scheduled since the last ``cancel_all``, trimmed ones included."""
        return self._dropped + len(self.timeline)

    def since(self, count: int) -> List[ScheduledUtterance]:
        """Utterances scheduled after the first ``count`` that are still kept."""
        return self.timeline[max(count - self._dropped, 0):]

    def cancel_all(self) -> None:
        self.engine.stop_all()
        self.lock_time = 0.0
        self.timeline.clear()
        self._dropped = 0
