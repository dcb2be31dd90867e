from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exchange import CUT_NUMBER_LETTERS, CutNumberConfig
from .modes import Mode, parse_mode
from .session import SessionConfig
from .stations import CallsignConfig, OperatorConfig, RespondingStationConfig


@dataclass
class AudioRuntimeConfig:
    sample_rate: int = 48000
    output_device: Optional[int] = None
    playback: bool = False


@dataclass
class AppConfig:
    audio: AudioRuntimeConfig = field(default_factory=AudioRuntimeConfig)
    operator: OperatorConfig = field(default_factory=OperatorConfig)
    stations: RespondingStationConfig = field(default_factory=RespondingStationConfig)
    callsigns: CallsignConfig = field(default_factory=CallsignConfig)
    cut_numbers: CutNumberConfig = field(default_factory=CutNumberConfig)
    session: SessionConfig = field(default_factory=SessionConfig)


def load_config(path: str | Path) -> AppConfig:
    p = Path(path)
    if not p.exists():
        cfg = AppConfig()
        save_config(p, cfg)
        return cfg

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    cfg = AppConfig()

    _apply_dataclass_updates(cfg.audio, raw.get("audio", {}))
    _apply_dataclass_updates(cfg.operator, raw.get("operator", {}))
    _apply_dataclass_updates(cfg.stations, raw.get("stations", {}))
    _apply_dataclass_updates(cfg.callsigns, raw.get("callsigns", {}))
    _apply_dataclass_updates(cfg.cut_numbers, raw.get("cut_numbers", {}))
    _apply_dataclass_updates(cfg.session, raw.get("session", {}))
    normalize_config(cfg)
    return cfg


def save_config(path: str | Path, config: AppConfig) -> None:
    payload = asdict(config)
    p = Path(path)
    p.write_text(yaml.safe_dump(payload, sort_keys=False, allow_unicode=False), encoding="utf-8")


def normalize_config(cfg: AppConfig) -> None:
    st = cfg.stations
    st.min_stations = max(0, int(st.min_stations))
    st.max_stations = max(1, int(st.max_stations), st.min_stations)
    # Older configs and hand edits sometimes carry reversed ranges.
    for lo, hi in (
        ("min_speed", "max_speed"),
        ("min_tone", "max_tone"),
        ("min_volume", "max_volume"),
        ("min_wait", "max_wait"),
    ):
        a, b = getattr(st, lo), getattr(st, hi)
        if a > b:
            setattr(st, lo, b)
            setattr(st, hi, a)
    st.min_speed = max(5, int(st.min_speed))
    st.max_speed = max(st.min_speed, int(st.max_speed))
    st.min_wait = max(0.0, float(st.min_wait))
    st.max_wait = max(st.min_wait, float(st.max_wait))

    cs = cfg.callsigns
    if cs.min_length > cs.max_length:
        cs.min_length, cs.max_length = cs.max_length, cs.min_length
    cs.slash_percentage = max(0.0, min(100.0, float(cs.slash_percentage)))
    if not isinstance(cs.allowed_prefixes, dict):
        cs.allowed_prefixes = CallsignConfig().allowed_prefixes
    cs.allowed_prefixes = {str(k).strip().upper(): float(v) for k, v in cs.allowed_prefixes.items() if str(k).strip()}
    cs.formats = [str(f).strip().lower() for f in (cs.formats or []) if str(f).strip()]

    cut = cfg.cut_numbers
    cut.digits = [str(d) for d in (cut.digits or []) if str(d) in CUT_NUMBER_LETTERS]

    ses = cfg.session
    ses.join_probability = max(0.0, min(1.0, float(ses.join_probability)))
    ses.cq_join_probability = max(0.0, min(1.0, float(ses.cq_join_probability)))
    ses.qrs_step = max(1, int(ses.qrs_step))
    ses.qrs_floor = max(1, int(ses.qrs_floor))
    mode = parse_mode(ses.mode)
    ses.mode = (mode or Mode.SINGLE).value

    cfg.operator.callsign = str(cfg.operator.callsign or "").strip().upper()


def _apply_dataclass_updates(target: Any, updates: Dict[str, Any]) -> None:
    if not isinstance(updates, dict):
        return
    for key, value in updates.items():
        if hasattr(target, key):
            setattr(target, key, value)
