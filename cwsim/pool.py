from __future__ import annotations

import random
from typing import Dict, Iterator, List, Optional

from .stations import Station, StationGenerator

# Redraws allowed when the generator returns a callsign already in the pool.
MAX_DUPLICATE_REDRAWS = 10


class StationPool:
    """Stations currently calling in a multi-station session.

    Stations live under integer handles that are never reused, so a handle
    kept across a removal resolves to ``None`` instead of another station.
    Iteration order is insertion (call) order.
    """

    def __init__(
        self,
        generator: StationGenerator,
        *,
        min_stations: int = 1,
        max_stations: int = 1,
        rng: Optional[random.Random] = None,
    ):
        self.generator = generator
        self.min_stations = max(int(min_stations), 0)
        self.max_stations = max(int(max_stations), 1, self.min_stations)
        self.rng = rng or random.Random()
        self._stations: Dict[int, Station] = {}
        self._next_handle = 1

    def __len__(self) -> int:
        return len(self._stations)

    def __iter__(self) -> Iterator[Station]:
        return iter(list(self._stations.values()))

    def __contains__(self, handle: object) -> bool:
        return handle in self._stations

    @property
    def handles(self) -> List[int]:
        return list(self._stations)

    @property
    def stations(self) -> List[Station]:
        return list(self._stations.values())

    def get(self, handle: Optional[int]) -> Optional[Station]:
        if handle is None:
            return None
        return self._stations.get(handle)

    def add(self) -> int:
        station = self._draw()
        handle = self._next_handle
        self._next_handle += 1
        self._stations[handle] = station
        return handle

    def ensure_minimum(self) -> List[int]:
        added: List[int] = []
        while len(self._stations) < self.min_stations:
            added.append(self.add())
        return added

    def maybe_add_one(self, probability: float) -> Optional[int]:
        if len(self._stations) < self.min_stations:
            return self.add()
        if len(self._stations) >= self.max_stations:
            return None
        p = float(probability)
        if p <= 0.0:
            return None
        if p < 1.0 and self.rng.random() >= p:
            return None
        return self.add()

    def remove(self, handle: int) -> Optional[Station]:
        return self._stations.pop(handle, None)

    def clear(self) -> None:
        self._stations.clear()

    def _draw(self) -> Station:
        active = {s.callsign for s in self._stations.values()}
        station = self.generator.next_station()
        for _ in range(MAX_DUPLICATE_REDRAWS):
            if station.callsign not in active:
                break
            station = self.generator.next_station()
        return station
