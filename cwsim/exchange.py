from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from .modes import ModeConfig, Template
from .stations import Station

# Traditional cut numbers: digit -> letter sent in its place.
CUT_NUMBER_LETTERS: Mapping[str, str] = MappingProxyType(
    {
        "0": "T",
        "1": "A",
        "2": "U",
        "3": "V",
        "5": "E",
        "7": "G",
        "8": "D",
        "9": "N",
    }
)

_DIGIT_RE = re.compile(r"\d")


@dataclass
class CutNumberConfig:
    enabled: bool = False
    digits: List[str] = field(default_factory=lambda: ["0", "9"])

    def mapping(self) -> Optional[Mapping[str, str]]:
        if not self.enabled:
            return None
        return cut_number_map(self.digits)


@dataclass(frozen=True)
class RenderedExchange:
    your_exchange: Optional[str]
    their_exchange: Optional[str]
    your_signoff: Optional[str]
    their_signoff: Optional[str]


def cut_number_map(digits: Iterable[str]) -> Mapping[str, str]:
    return {str(d): CUT_NUMBER_LETTERS[str(d)] for d in digits if str(d) in CUT_NUMBER_LETTERS}


def apply_cut_numbers(text: str, mapping: Mapping[str, str], protected: Iterable[str] = ()) -> str:
    """Replace digits via ``mapping`` in every word except the ``protected`` ones (callsigns)."""
    if not mapping:
        return text
    keep = {p.upper() for p in protected if p}
    words = text.split(" ")
    out = []
    for word in words:
        if word.upper() in keep:
            out.append(word)
        else:
            out.append(_DIGIT_RE.sub(lambda m: mapping.get(m.group(0), m.group(0)), word))
    return " ".join(out)


def render_cq(mode_config: ModeConfig, your_station: Station) -> str:
    return mode_config.cq_message(your_station, None, None)


def render_exchange(
    mode_config: ModeConfig,
    your_station: Station,
    their_station: Station,
    arbitrary: Optional[str] = None,
    cut_numbers: Optional[Mapping[str, str]] = None,
) -> RenderedExchange:
    your_exchange = _render(mode_config.your_exchange, your_station, their_station, arbitrary)
    their_exchange = _render(mode_config.their_exchange, your_station, their_station, arbitrary)
    if cut_numbers:
        callsigns = (your_station.callsign, their_station.callsign)
        if your_exchange is not None:
            your_exchange = apply_cut_numbers(your_exchange, cut_numbers, callsigns)
        if their_exchange is not None:
            their_exchange = apply_cut_numbers(their_exchange, cut_numbers, callsigns)
    return RenderedExchange(
        your_exchange=your_exchange,
        their_exchange=their_exchange,
        your_signoff=_render(mode_config.your_signoff, your_station, their_station, arbitrary),
        their_signoff=_render(mode_config.their_signoff, your_station, their_station, arbitrary),
    )


def _render(
    template: Optional[Template],
    your_station: Station,
    their_station: Station,
    arbitrary: Optional[str],
) -> Optional[str]:
    if template is None:
        return None
    return template(your_station, their_station, arbitrary)
