from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .adaptive import AdaptiveWeightEngine
from .callsign_pool import CallerRecord

US_STATES: Tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
)

OPERATOR_NAMES: Tuple[str, ...] = (
    "AL", "ANN", "ART", "BOB", "BILL", "CARL", "DAN", "DAVE", "ED", "FRED",
    "GARY", "HANK", "JACK", "JIM", "JOE", "JOHN", "KEN", "LEE", "LIZ", "MARK",
    "MIKE", "NED", "PAT", "PETE", "RAY", "RICK", "ROB", "SAM", "SUE", "TOM",
)

DEFAULT_PREFIX_WEIGHTS: Dict[str, float] = {
    "K": 35.0,
    "W": 20.0,
    "N": 15.0,
    "AA": 1.5,
    "AB": 1.5,
    "AC": 1.5,
    "AD": 0.8,
    "AE": 0.8,
    "AF": 0.8,
    "AG": 0.8,
    "AH": 0.8,
    "AI": 0.8,
    "AJ": 0.8,
    "AK": 0.8,
    "AL": 0.8,
    "VE": 5.0,
    "VA": 2.5,
    "VO": 2.5,
    **{f"X{ch}": 0.4 for ch in "ABCDEFGHIJKLMNOPQRSTUVWXYZ"},
}

MAX_CALLSIGN_TRIES = 25


@dataclass
class Station:
    callsign: str
    wpm: int = 20
    enable_farnsworth: bool = False
    farnsworth_speed: int = 20
    tone: float = 600.0
    volume: float = 0.5
    wait: float = 0.5
    name: str = ""
    state: str = ""
    cwops_number: Optional[int] = None
    serial_number: Optional[int] = None

    @property
    def wpm_label(self) -> str:
        if self.enable_farnsworth:
            return f"{self.wpm} / {self.farnsworth_speed}"
        return f"{self.wpm}"


@dataclass
class OperatorConfig:
    callsign: str = "K1XYZ"
    name: str = "ALEX"
    state: str = "MA"
    wpm: int = 25
    tone: float = 600.0
    volume: float = 0.5


@dataclass
class RespondingStationConfig:
    min_stations: int = 1
    max_stations: int = 3
    min_speed: int = 18
    max_speed: int = 28
    min_tone: int = 500
    max_tone: int = 800
    min_volume: float = 0.4
    max_volume: float = 0.8
    min_wait: float = 0.2
    max_wait: float = 1.0
    enable_farnsworth: bool = False
    farnsworth_speed: int = 15
    us_only: bool = False


@dataclass
class CallsignConfig:
    formats: List[str] = field(default_factory=lambda: ["1x2", "1x3", "2x1", "2x2", "2x3"])
    allowed_letters: str = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    allowed_numbers: str = "0123456789"
    min_length: int = 3
    max_length: int = 6
    require_prefix: bool = True
    allowed_prefixes: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_PREFIX_WEIGHTS))
    slash_percentage: float = 0.0
    callers_file: Optional[str] = None


def your_station(operator: OperatorConfig) -> Station:
    wpm = max(int(operator.wpm), 5)
    return Station(
        callsign=operator.callsign.strip().upper(),
        wpm=wpm,
        farnsworth_speed=wpm,
        tone=float(operator.tone),
        volume=float(operator.volume),
        wait=0.0,
        name=operator.name.strip().upper(),
        state=operator.state.strip().upper(),
    )


def is_us_prefix(prefix: str) -> bool:
    p = prefix.upper()
    if p[:1] in ("K", "W", "N"):
        return True
    return len(p) == 2 and p[0] == "A" and "A" <= p[1] <= "L"


class StationGenerator:
    """Draws simulated calling stations.

    Callsign characters go through the session's AdaptiveWeightEngine so that
    characters the trainee keeps missing show up more often. When a caller
    list is loaded, whole records are drawn instead, weighted by the mean
    weight of their characters.
    """

    def __init__(
        self,
        stations: RespondingStationConfig,
        callsigns: CallsignConfig,
        weights: AdaptiveWeightEngine,
        *,
        rng: Optional[random.Random] = None,
        callers: Sequence[CallerRecord] = (),
    ):
        self.stations = stations
        self.callsigns = callsigns
        self.weights = weights
        self.rng = rng or random.Random()
        self._callers: List[CallerRecord] = list(callers)
        self._serial = 0

    def set_callers(self, callers: Sequence[CallerRecord]) -> None:
        self._callers = list(callers)

    @property
    def caller_count(self) -> int:
        return len(self._callers)

    def next_station(self, config: Optional[RespondingStationConfig] = None) -> Station:
        cfg = config or self.stations
        rng = self.rng

        record = self._draw_caller()
        if record is not None:
            callsign = record.callsign
            name = record.name or rng.choice(OPERATOR_NAMES)
            state = record.state or rng.choice(US_STATES)
        else:
            callsign = self._synthesize_callsign(cfg.us_only)
            name = rng.choice(OPERATOR_NAMES)
            state = rng.choice(US_STATES)

        wpm = rng.randint(*_ordered(int(cfg.min_speed), int(cfg.max_speed)))
        farnsworth = min(int(cfg.farnsworth_speed), wpm) if cfg.enable_farnsworth else wpm
        self._serial += 1
        return Station(
            callsign=callsign,
            wpm=wpm,
            enable_farnsworth=bool(cfg.enable_farnsworth),
            farnsworth_speed=farnsworth,
            tone=float(rng.randint(*_ordered(int(cfg.min_tone), int(cfg.max_tone)))),
            volume=round(rng.uniform(*_ordered(float(cfg.min_volume), float(cfg.max_volume))), 2),
            wait=round(rng.uniform(*_ordered(float(cfg.min_wait), float(cfg.max_wait))), 2),
            name=name,
            state=state,
            cwops_number=rng.randint(1, 3999),
            serial_number=self._serial,
        )

    def _draw_caller(self) -> Optional[CallerRecord]:
        if not self._callers:
            return None
        weights = [self._callsign_weight(rec.callsign) for rec in self._callers]
        return self.rng.choices(self._callers, weights=weights, k=1)[0]

    def _callsign_weight(self, callsign: str) -> float:
        chars = [ch for ch in callsign.upper() if ch.isalnum()]
        if not chars:
            return self.weights.base_weight
        return sum(self.weights.weight(ch) for ch in chars) / len(chars)

    def _synthesize_callsign(self, us_only: bool) -> str:
        cfg = self.callsigns
        formats = [f for f in (_parse_format(raw) for raw in cfg.formats) if f is not None]
        if not formats:
            formats = [(1, 2), (2, 2)]
        letters = cfg.allowed_letters.upper() or "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
        numbers = cfg.allowed_numbers or "0123456789"
        lo, hi = _ordered(int(cfg.min_length), int(cfg.max_length))

        call = ""
        for _ in range(MAX_CALLSIGN_TRIES):
            prefix_len, suffix_len = self.rng.choice(formats)
            prefix = self._draw_prefix(prefix_len, letters, us_only)
            digit = self.weights.sample_weighted(numbers, self.rng)
            suffix = "".join(self.weights.sample_weighted(letters, self.rng) for _ in range(suffix_len))
            call = f"{prefix}{digit}{suffix}"
            if lo <= len(call) <= hi:
                break

        if cfg.slash_percentage > 0 and self.rng.random() * 100.0 < cfg.slash_percentage:
            call = f"{call}/{self.weights.sample_weighted(numbers, self.rng)}"
        return call

    def _draw_prefix(self, length: int, letters: str, us_only: bool) -> str:
        if self.callsigns.require_prefix:
            table = [
                (value.upper(), float(weight))
                for value, weight in self.callsigns.allowed_prefixes.items()
                if len(value) == length and float(weight) > 0 and (not us_only or is_us_prefix(value))
            ]
            if table:
                values, weights = zip(*table)
                return self.rng.choices(values, weights=weights, k=1)[0]
        if us_only:
            first = self.rng.choice("KWN")
            return first + "".join(self.weights.sample_weighted(letters, self.rng) for _ in range(length - 1))
        return "".join(self.weights.sample_weighted(letters, self.rng) for _ in range(length))


def _parse_format(raw: str) -> Optional[Tuple[int, int]]:
    parts = str(raw).lower().split("x")
    if len(parts) != 2:
        return None
    try:
        prefix_len, suffix_len = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if prefix_len < 1 or suffix_len < 1:
        return None
    return prefix_len, suffix_len


def _ordered(a, b):
    return (a, b) if a <= b else (b, a)
