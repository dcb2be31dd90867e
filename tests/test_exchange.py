from __future__ import annotations

from cwsim.exchange import CutNumberConfig, apply_cut_numbers, cut_number_map, render_cq, render_exchange
from cwsim.modes import Mode, get_mode_config
from cwsim.stations import Station


def _you() -> Station:
    return Station(callsign="K1XYZ", name="ALEX", state="MA")


def _them() -> Station:
    return Station(callsign="W9NDN", name="BOB", state="TX", cwops_number=1905)


def test_render_cq_uses_mode_template():
    assert render_cq(get_mode_config(Mode.POTA), _you()) == "CQ POTA DE K1XYZ"
    assert render_cq(get_mode_config(Mode.TROUBLED_LETTERS), _you()) == ""


def test_render_exchange_fills_all_four_stages():
    out = render_exchange(get_mode_config(Mode.POTA), _you(), _them(), "tx")
    assert out.your_exchange == "UR 5NN <BK>"
    assert out.their_exchange == "<BK> UR 5NN TX TX <BK>"
    assert out.your_signoff == "<BK> TU TX 73 EE"
    assert out.their_signoff == "EE"


def test_absent_stages_render_as_none():
    out = render_exchange(get_mode_config(Mode.CONTEST), _you(), _them())
    assert out.your_signoff is None
    assert out.their_signoff is None


def test_cut_numbers_replace_digits_in_exchange_but_not_callsigns():
    mapping = cut_number_map(["0", "9"])
    out = render_exchange(get_mode_config(Mode.CWT), _you(), _them(), None, mapping)
    assert out.their_exchange == "BOB 1NT5 TU"
    # Signoff carries the callsign and is never substituted.
    assert out.your_signoff == "TU K1XYZ"


def test_apply_cut_numbers_skips_protected_words():
    text = apply_cut_numbers("W9NDN 599 TU", {"9": "N", "5": "E"}, ["W9NDN"])
    assert text == "W9NDN ENN TU"


def test_cut_number_config_mapping_only_when_enabled():
    cfg = CutNumberConfig(enabled=False, digits=["0"])
    assert cfg.mapping() is None
    cfg.enabled = True
    assert cfg.mapping() == {"0": "T"}
    assert cut_number_map(["4", "6", "1"]) == {"1": "A"}
