from __future__ import annotations

import random

from cwsim.pool import StationPool


def test_ensure_minimum_fills_to_min(scripted):
    pool = StationPool(scripted(["K1ABC", "W2XYZ", "N3DEF"]), min_stations=2, max_stations=3)
    added = pool.ensure_minimum()
    assert len(added) == 2
    assert [s.callsign for s in pool] == ["K1ABC", "W2XYZ"]
    assert pool.ensure_minimum() == []


def test_maybe_add_one_never_exceeds_max(scripted):
    pool = StationPool(scripted(["K1ABC", "W2XYZ", "N3DEF", "K4GHI"]), min_stations=1, max_stations=3)
    for _ in range(10):
        pool.maybe_add_one(1.0)
    assert len(pool) == 3


def test_maybe_add_one_adds_unconditionally_below_minimum(scripted):
    pool = StationPool(scripted(["K1ABC", "W2XYZ"]), min_stations=1, max_stations=3)
    assert pool.maybe_add_one(0.0) is not None
    assert pool.maybe_add_one(0.0) is None
    assert len(pool) == 1


def test_maybe_add_one_respects_probability(scripted):
    pool = StationPool(
        scripted([f"K{i}AB" for i in range(10)]),
        min_stations=0,
        max_stations=1000,
        rng=random.Random(5),
    )
    joined = sum(pool.maybe_add_one(0.4) is not None for _ in range(1000))
    assert 330 < joined < 470


def test_handles_survive_removal_of_other_stations(scripted):
    pool = StationPool(scripted(["K1ABC", "W2XYZ", "N3DEF"]), min_stations=3, max_stations=3)
    first, second, third = pool.ensure_minimum()
    removed = pool.remove(first)
    assert removed.callsign == "K1ABC"
    assert pool.get(first) is None
    assert first not in pool
    assert pool.get(third).callsign == "N3DEF"
    assert pool.handles == [second, third]

    new = pool.add()
    assert new not in (first, second, third)


def test_duplicate_callsigns_are_redrawn(scripted):
    pool = StationPool(scripted(["K1ABC", "K1ABC", "W2XYZ"]), min_stations=2, max_stations=2)
    pool.ensure_minimum()
    assert sorted(s.callsign for s in pool) == ["K1ABC", "W2XYZ"]


def test_clear_empties_pool(scripted):
    pool = StationPool(scripted(["K1ABC", "W2XYZ"]), min_stations=2, max_stations=2)
    pool.ensure_minimum()
    pool.clear()
    assert len(pool) == 0
    assert pool.stations == []
