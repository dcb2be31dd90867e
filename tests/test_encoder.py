from __future__ import annotations

import numpy as np
import pytest

from cwsim.audio import MorseAudioEngine
from cwsim.encoder import TAIL_SECONDS, CWEncoder, CWEncoderConfig
from cwsim.stations import Station


def test_paris_takes_fifty_dot_units_minus_trailing_word_gap():
    enc = CWEncoder(CWEncoderConfig(wpm=20.0))
    # PARIS is 43 units of keyed time and intra-word gaps.
    assert enc.duration_seconds("PARIS") == pytest.approx(43 * 0.06)


def test_word_gap_is_seven_units():
    enc = CWEncoder(CWEncoderConfig(wpm=20.0))
    assert enc.duration_seconds("E E") == pytest.approx(9 * 0.06)


def test_prosign_letters_run_together():
    enc = CWEncoder(CWEncoderConfig(wpm=20.0))
    assert enc.duration_seconds("<BK>") < enc.duration_seconds("BK")


def test_farnsworth_stretches_only_the_gaps():
    plain = CWEncoder(CWEncoderConfig(wpm=20.0))
    slow = CWEncoder(CWEncoderConfig(wpm=20.0, farnsworth_wpm=10.0))
    keyed_plain = sum(d for down, d in plain.text_to_pulses("K1ABC") if down)
    keyed_slow = sum(d for down, d in slow.text_to_pulses("K1ABC") if down)
    assert keyed_slow == pytest.approx(keyed_plain)
    assert slow.duration_seconds("K1ABC") > plain.duration_seconds("K1ABC")


def test_encode_to_audio_length_matches_pulses_plus_tail():
    cfg = CWEncoderConfig(sample_rate=8000, wpm=25.0, volume=0.7)
    enc = CWEncoder(cfg)
    audio = enc.encode_to_audio("TU")
    expected = (enc.duration_seconds("TU") + TAIL_SECONDS) * cfg.sample_rate
    assert audio.dtype == np.float32
    assert abs(audio.size - expected) < 10
    assert float(np.max(np.abs(audio))) <= 0.7 + 1e-6


def test_engine_end_time_tracks_voice_speed():
    engine = MorseAudioEngine(sample_rate=8000)
    fast = Station("K1ABC", wpm=30)
    slow = Station("K1ABC", wpm=30, enable_farnsworth=True, farnsworth_speed=10)
    end_fast = engine.play_sentence("K1ABC", 100.0, fast)
    end_slow = engine.play_sentence("K1ABC", 100.0, slow)
    assert end_fast > 100.0 + TAIL_SECONDS
    assert end_slow > end_fast
    engine.close()


def test_bare_word_matching_a_prosign_keeps_letter_gaps():
    enc = CWEncoder(CWEncoderConfig(wpm=20.0))
    gaps = [d for down, d in enc.text_to_pulses("AR") if not down]
    # A: .-  then a three-dot letter gap, then R: .-.
    assert gaps == pytest.approx([0.06, 0.18, 0.06, 0.06])
    assert enc.duration_seconds("AR") == pytest.approx(enc.duration_seconds("AN") + 2 * 0.06)
    assert enc.duration_seconds("<AR>") == pytest.approx(enc.duration_seconds("AR") - 2 * 0.06)
