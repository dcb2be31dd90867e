from __future__ import annotations

import pytest

from cwsim.modes import MODE_CONFIGS, Mode, ModeConfig, get_mode_config, parse_mode


def test_every_mode_has_a_config():
    assert set(MODE_CONFIGS) == set(Mode)


def test_extra_info_fields_only_with_tu_step():
    for cfg in MODE_CONFIGS.values():
        if not cfg.show_tu_step:
            assert cfg.extra_info_field_key is None
            assert cfg.extra_info_field_key2 is None


def test_extra_info_field_without_tu_step_is_rejected():
    with pytest.raises(ValueError):
        ModeConfig(
            mode_name="Broken",
            cq_message=lambda you, them, arb: "CQ",
            your_exchange=None,
            their_exchange=None,
            your_signoff=None,
            their_signoff=None,
            extra_info_field_key="name",
        )


def test_pileup_modes_are_multi_station():
    assert not get_mode_config(Mode.SINGLE).multi_station
    assert not get_mode_config(Mode.TROUBLED_LETTERS).multi_station
    for mode in (Mode.CONTEST, Mode.POTA, Mode.SST, Mode.CWT):
        assert get_mode_config(mode).multi_station


def test_parse_mode_accepts_values_and_names():
    assert parse_mode("contest") is Mode.CONTEST
    assert parse_mode("CWT") is Mode.CWT
    assert parse_mode("troubledletters") is Mode.TROUBLED_LETTERS
    assert parse_mode("troubled_letters") is Mode.TROUBLED_LETTERS
    assert parse_mode(Mode.SST) is Mode.SST
    assert parse_mode("fieldday") is None
    assert parse_mode(None) is None
