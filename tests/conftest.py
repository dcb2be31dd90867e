from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

import pytest

from cwsim.stations import Station


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t


@dataclass
class FixedAudio:
    """Every utterance lasts ``seconds`` regardless of text or speed."""

    seconds: float = 1.0
    played: List[tuple] = field(default_factory=list)
    stops: int = 0

    def play_sentence(self, text: str, start_time: float, voice: Station) -> float:
        self.played.append((voice.callsign, text, start_time))
        return start_time + self.seconds

    def stop_all(self) -> None:
        self.stops += 1


class ScriptedGenerator:
    """Hands out stations with the given callsigns in order, then cycles."""

    def __init__(self, callsigns: Iterable[str], *, wpm: int = 20, wait: float = 0.1):
        self.callsigns = list(callsigns)
        self.wpm = wpm
        self.wait = wait
        self.drawn = 0

    def set_callers(self, callers) -> None:
        pass

    def next_station(self, config=None) -> Station:
        call = self.callsigns[self.drawn % len(self.callsigns)]
        self.drawn += 1
        return Station(
            callsign=call,
            wpm=self.wpm,
            farnsworth_speed=self.wpm,
            wait=self.wait,
            name="BOB",
            state="TX",
            cwops_number=1234,
            serial_number=self.drawn,
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def audio() -> FixedAudio:
    return FixedAudio()


@pytest.fixture
def scripted():
    return ScriptedGenerator
