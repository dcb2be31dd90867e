"""Operating modes as data.

Each mode carries its message templates and behaviour flags; the session
controller reads these instead of branching on the mode name.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from .stations import Station

# (your_station, their_station, arbitrary) -> text
Template = Callable[[Station, Optional[Station], Optional[str]], str]


class Mode(str, Enum):
    SINGLE = "single"
    CONTEST = "contest"
    POTA = "pota"
    SST = "sst"
    CWT = "cwt"
    TROUBLED_LETTERS = "troubledLetters"


@dataclass(frozen=True)
class ModeConfig:
    mode_name: str
    cq_message: Template
    your_exchange: Optional[Template]
    their_exchange: Optional[Template]
    your_signoff: Optional[Template]
    their_signoff: Optional[Template]
    requires_info_field: bool = False
    requires_info_field2: bool = False
    show_tu_step: bool = False
    extra_info_field_key: Optional[str] = None
    extra_info_field_key2: Optional[str] = None
    # Stations live in a pileup pool rather than one at a time.
    multi_station: bool = False
    # Stations answer a submission that matches nobody.
    respond_on_no_match: bool = False
    # Index (0 or 1) of the confirmation field passed to the signoff templates.
    signoff_arbitrary_field: Optional[int] = None
    info_field_placeholder: str = ""
    info_field2_placeholder: str = ""
    results_header: str = ""
    extra_column_header: str = ""

    def __post_init__(self) -> None:
        if not self.show_tu_step and (self.extra_info_field_key or self.extra_info_field_key2):
            raise ValueError(f"{self.mode_name}: extra info fields require a TU step")
        if self.signoff_arbitrary_field not in (None, 0, 1):
            raise ValueError(f"{self.mode_name}: signoff_arbitrary_field must be 0, 1 or None")


def _arb(value: Optional[str]) -> str:
    return (value or "").strip().upper()


MODE_CONFIGS: Mapping[Mode, ModeConfig] = MappingProxyType(
    {
        Mode.SINGLE: ModeConfig(
            mode_name="Single",
            cq_message=lambda you, them, arb: f"CQ DE {you.callsign} K",
            your_exchange=lambda you, them, arb: "5NN",
            their_exchange=lambda you, them, arb: "R 5NN TU",
            your_signoff=lambda you, them, arb: "TU EE",
            their_signoff=lambda you, them, arb: "EE",
            respond_on_no_match=True,
            results_header="Single Mode Results",
        ),
        Mode.CONTEST: ModeConfig(
            mode_name="Contest",
            cq_message=lambda you, them, arb: f"CQ TEST {you.callsign}",
            your_exchange=lambda you, them, arb: "5NN",
            their_exchange=lambda you, them, arb: "EE",
            your_signoff=None,
            their_signoff=None,
            multi_station=True,
            respond_on_no_match=True,
            results_header="Contest Mode Results",
        ),
        Mode.POTA: ModeConfig(
            mode_name="POTA",
            cq_message=lambda you, them, arb: f"CQ POTA DE {you.callsign}",
            your_exchange=lambda you, them, arb: "UR 5NN <BK>",
            their_exchange=lambda you, them, arb: f"<BK> UR 5NN {them.state} {them.state} <BK>",
            your_signoff=lambda you, them, arb: f"<BK> TU {_arb(arb)} 73 EE",
            their_signoff=lambda you, them, arb: "EE",
            requires_info_field=True,
            show_tu_step=True,
            extra_info_field_key="state",
            multi_station=True,
            signoff_arbitrary_field=0,
            info_field_placeholder="State",
            results_header="POTA Mode Results",
            extra_column_header="State",
        ),
        Mode.SST: ModeConfig(
            mode_name="SST",
            cq_message=lambda you, them, arb: f"CQ SST {you.callsign}",
            your_exchange=lambda you, them, arb: f"{you.name} {you.state}",
            their_exchange=lambda you, them, arb: f"TU {you.name} {them.name} {them.state}",
            your_signoff=lambda you, them, arb: f"GL {_arb(arb)} TU {you.callsign} SST",
            their_signoff=None,
            requires_info_field=True,
            requires_info_field2=True,
            show_tu_step=True,
            extra_info_field_key="name",
            extra_info_field_key2="state",
            multi_station=True,
            signoff_arbitrary_field=0,
            info_field_placeholder="Name",
            info_field2_placeholder="State",
            results_header="SST Mode Results",
            extra_column_header="Additional Info",
        ),
        Mode.CWT: ModeConfig(
            mode_name="CWT",
            cq_message=lambda you, them, arb: f"CQ CWT {you.callsign}",
            your_exchange=lambda you, them, arb: f"{you.name} CWA",
            their_exchange=lambda you, them, arb: f"{them.name} {them.cwops_number} TU",
            your_signoff=lambda you, them, arb: f"TU {you.callsign}",
            their_signoff=None,
            requires_info_field=True,
            requires_info_field2=True,
            show_tu_step=True,
            extra_info_field_key="name",
            extra_info_field_key2="cwops_number",
            multi_station=True,
            info_field_placeholder="Name",
            info_field2_placeholder="CW Ops No.",
            results_header="CWT Mode Results",
            extra_column_header="Additional Info",
        ),
        Mode.TROUBLED_LETTERS: ModeConfig(
            mode_name="Troubled Letters",
            cq_message=lambda you, them, arb: "",
            your_exchange=None,
            their_exchange=lambda you, them, arb: "R",
            your_signoff=None,
            their_signoff=None,
            respond_on_no_match=True,
            results_header="Troubled Letters Mode Results",
        ),
    }
)


def get_mode_config(mode: Mode) -> ModeConfig:
    return MODE_CONFIGS[mode]


def parse_mode(name: object) -> Optional[Mode]:
    if isinstance(name, Mode):
        return name
    key = str(name or "").strip().lower()
    for mode in Mode:
        if key in (mode.value.lower(), mode.name.lower()):
            return mode
    return None
