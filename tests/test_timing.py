from __future__ import annotations

from cwsim.stations import Station
from cwsim.timing import MAX_TIMELINE, TimingScheduler


def test_utterances_never_overlap_and_lock_follows_last_end(clock, audio):
    audio.seconds = 2.0
    sched = TimingScheduler(audio, clock)

    end1 = sched.schedule(Station("K1XYZ"), "CQ TEST K1XYZ", 0.0)
    end2 = sched.schedule(Station("W2ABC"), "W2ABC", 0.5)
    end3 = sched.schedule(Station("N3DEF"), "N3DEF", 10.0)

    assert (end1, end2, end3) == (2.0, 4.0, 12.0)
    assert sched.lock_time == 12.0
    starts = [u.start for u in sched.timeline]
    ends = [u.end for u in sched.timeline]
    assert all(s >= e for s, e in zip(starts[1:], ends[:-1]))
    assert sched.timeline[1].requested_start == 0.5


def test_lock_is_active_until_end_time(clock, audio):
    audio.seconds = 1.5
    sched = TimingScheduler(audio, clock)
    sched.schedule(Station("K1XYZ"), "TU")
    assert sched.is_locked()
    clock.t = 1.5
    assert not sched.is_locked()


def test_empty_text_is_not_scheduled(clock, audio):
    clock.t = 3.0
    sched = TimingScheduler(audio, clock)
    assert sched.schedule(Station("K1XYZ"), "   ") == 3.0
    assert sched.schedule(Station("K1XYZ"), None, 4.0) == 4.0
    assert audio.played == []
    assert sched.timeline == []
    assert sched.lock_time == 0.0


def test_cancel_all_zeroes_lock_and_drops_timeline(clock, audio):
    audio.seconds = 5.0
    sched = TimingScheduler(audio, clock)
    sched.schedule(Station("K1XYZ"), "CQ")
    sched.cancel_all()
    assert sched.lock_time == 0.0
    assert sched.timeline == []
    assert audio.stops == 1
    assert not sched.is_locked()


def test_timeline_is_trimmed_but_keeps_counting(clock, audio):
    sched = TimingScheduler(audio, clock)
    for i in range(MAX_TIMELINE + 1):
        sched.schedule(Station("K1XYZ"), f"N{i}")
    assert len(sched.timeline) == MAX_TIMELINE // 2
    assert sched.scheduled_count == MAX_TIMELINE + 1
    assert sched.timeline[-1].text == f"N{MAX_TIMELINE}"

    seen = sched.scheduled_count
    sched.schedule(Station("K1XYZ"), "TU")
    assert [u.text for u in sched.since(seen)] == ["TU"]
    assert sched.since(0) == sched.timeline

    sched.cancel_all()
    assert sched.scheduled_count == 0
