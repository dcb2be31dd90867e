from __future__ import annotations

import random

from cwsim.adaptive import AdaptiveWeightEngine


def test_record_mistake_counts_positional_differences_only():
    w = AdaptiveWeightEngine()
    w.record_mistake("K1ABC", "K1ABD")
    assert dict(w.snapshot()) == {"C": 1}


def test_record_mistake_counts_missing_tail_and_ignores_separators():
    w = AdaptiveWeightEngine()
    w.record_mistake("W2X/3", "W")
    assert dict(w.snapshot()) == {"2": 1, "X": 1, "3": 1}


def test_record_mistake_is_case_insensitive_and_ignores_extra_submitted_chars():
    w = AdaptiveWeightEngine()
    w.record_mistake("k1abc", "K1ABCDEF")
    assert not w.has_mistakes


def test_weight_grows_by_half_per_mistake_and_caps_at_five():
    w = AdaptiveWeightEngine()
    assert w.weight("Q") == 1.0
    w.record_mistake("Q", "")
    assert w.weight("Q") == 1.5
    for _ in range(20):
        w.record_mistake("Q", "")
    assert w.weight("Q") == 5.0
    assert w.weight("q") == 5.0


def test_sample_weighted_prefers_missed_characters():
    w = AdaptiveWeightEngine()
    for _ in range(8):
        w.record_mistake("Q", "")
    rng = random.Random(7)
    picks = [w.sample_weighted("QRS", rng) for _ in range(3000)]
    # Expected share of Q is 5 / 7.
    assert 0.65 < picks.count("Q") / len(picks) < 0.78


def test_sample_weighted_uniform_when_no_mistakes():
    w = AdaptiveWeightEngine()
    rng = random.Random(3)
    picks = [w.sample_weighted("AB", rng) for _ in range(2000)]
    assert 0.45 < picks.count("A") / len(picks) < 0.55


def test_sample_weighted_falls_back_to_uniform_when_total_weight_is_zero():
    w = AdaptiveWeightEngine(base_weight=0, mistake_multiplier=0)
    rng = random.Random(1)
    picks = {w.sample_weighted("XYZ", rng) for _ in range(200)}
    assert picks == {"X", "Y", "Z"}
    assert w.sample_weighted("", rng) == ""


def test_snapshot_does_not_alias_live_state():
    w = AdaptiveWeightEngine()
    w.record_mistake("AB", "")
    snap = dict(w.snapshot())
    snap["A"] = 99
    assert w.snapshot()["A"] == 1
    frozen = w.snapshot()
    w.record_mistake("A", "")
    assert frozen["A"] == 1


def test_reset_is_idempotent():
    w = AdaptiveWeightEngine()
    w.record_mistake("AB", "")
    w.reset()
    w.reset()
    assert dict(w.snapshot()) == {}
    assert w.weight("A") == 1.0


def test_single_character_alphabet_always_returns_that_character():
    w = AdaptiveWeightEngine()
    rng = random.Random(2)
    assert {w.sample_weighted("Q", rng) for _ in range(50)} == {"Q"}
    for _ in range(12):
        w.record_mistake("QZ", "")
    assert {w.sample_weighted("Z", rng) for _ in range(50)} == {"Z"}
