from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .stations import Station

NUMERIC_FIELDS = frozenset({"serial_number", "cwops_number"})


class FieldVerdict(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    MISSING = "missing"
    NOT_APPLICABLE = "not_applicable"


@dataclass(frozen=True)
class FieldComparison:
    key: str
    submitted: str
    expected: str
    verdict: FieldVerdict

    @property
    def annotation(self) -> str:
        if self.verdict is FieldVerdict.CORRECT:
            return self.submitted
        if self.verdict is FieldVerdict.INCORRECT:
            return f"{self.submitted} ({self.expected})"
        if self.verdict is FieldVerdict.MISSING:
            return f"? ({self.expected})"
        return "N/A"


def compare_field(key: str, submitted: Optional[str], station: Station) -> FieldComparison:
    raw_expected = getattr(station, key, None)
    text = (submitted or "").strip()

    if key in NUMERIC_FIELDS:
        expected_num = _parse_int(raw_expected)
        expected = "" if raw_expected is None else str(raw_expected)
        value = _parse_int(text)
        if value is None:
            return FieldComparison(key, text, expected, FieldVerdict.MISSING)
        verdict = FieldVerdict.CORRECT if value == expected_num else FieldVerdict.INCORRECT
        return FieldComparison(key, str(value), expected, verdict)

    expected = str(raw_expected if raw_expected is not None else "").strip().upper()
    value_text = text.upper()
    if not expected:
        return FieldComparison(key, value_text, expected, FieldVerdict.NOT_APPLICABLE)
    verdict = FieldVerdict.CORRECT if value_text == expected else FieldVerdict.INCORRECT
    return FieldComparison(key, value_text, expected, verdict)


def format_annotations(comparisons: Sequence[FieldComparison]) -> str:
    return " / ".join(c.annotation for c in comparisons)


def _parse_int(value: object) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
