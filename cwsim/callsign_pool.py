from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence


@dataclass(frozen=True)
class CallerRecord:
    callsign: str
    name: str = ""
    state: str = ""


def parse_caller_lines(lines: Sequence[str]) -> List[CallerRecord]:
    """Parse ``CALL[,NAME[,STATE]]`` rows; comments and repeated calls are skipped."""
    records: List[CallerRecord] = []
    seen = set()
    for raw in lines:
        line = raw.strip().lstrip("\ufeff")
        if not line or line.startswith("#"):
            continue
        fields = [part.strip().upper() for part in line.split(",")]
        call = fields[0]
        if not call or call.startswith("#") or call in seen:
            continue
        seen.add(call)
        name = fields[1] if len(fields) > 1 else ""
        state = fields[2] if len(fields) > 2 else ""
        records.append(CallerRecord(callsign=call, name=name, state=state))
    return records


def parse_caller_text(text: str) -> List[CallerRecord]:
    return parse_caller_lines(text.splitlines())


def load_callers_file(path: str | Path) -> List[CallerRecord]:
    p = Path(path)
    data = p.read_text(encoding="utf-8", errors="ignore")
    return parse_caller_text(data)
