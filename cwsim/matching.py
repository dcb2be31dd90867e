from __future__ import annotations

import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from enum import Enum
from typing import Protocol


class MatchResult(str, Enum):
    PERFECT = "perfect"
    PARTIAL = "partial"
    NONE = "none"


class StringMatcher(Protocol):
    def classify(self, expected: str, submitted: str) -> MatchResult:
        """Classify a submitted callsign against the expected one."""
        ...


@dataclass(frozen=True)
class PartialMatchPolicy:
    # A contiguous fragment of the callsign this long counts as partial copy.
    min_fragment: int = 2
    # difflib ratio at or above which a near miss counts as partial copy.
    min_similarity: float = 0.6


class FuzzyCallsignMatcher:
    """Default matcher.

    ``perfect`` is exact equality (case and whitespace insensitive).
    ``partial`` is any of: a ``?`` wildcard pattern matching the callsign
    (``K1?`` or ``?ABC``), a fragment of at least ``min_fragment`` characters,
    or a similarity ratio of at least ``min_similarity``.
    """

    def __init__(self, policy: PartialMatchPolicy = PartialMatchPolicy()):
        self.policy = policy

    def classify(self, expected: str, submitted: str) -> MatchResult:
        exp = _compact(expected)
        sub = _compact(submitted)
        if not exp or not sub:
            return MatchResult.NONE
        if exp == sub:
            return MatchResult.PERFECT
        if "?" in sub:
            return MatchResult.PARTIAL if _wildcard_matches_call(sub, exp) else MatchResult.NONE
        if len(sub) >= self.policy.min_fragment and sub in exp:
            return MatchResult.PARTIAL
        if SequenceMatcher(None, exp, sub).ratio() >= self.policy.min_similarity:
            return MatchResult.PARTIAL
        return MatchResult.NONE


DEFAULT_MATCHER = FuzzyCallsignMatcher()


def classify(expected: str, submitted: str) -> MatchResult:
    return DEFAULT_MATCHER.classify(expected, submitted)


def _compact(text: str) -> str:
    return "".join((text or "").upper().split())


def _wildcard_matches_call(pattern_token: str, call: str) -> bool:
    if not any(ch.isalnum() for ch in pattern_token):
        return False
    # Ham shorthand: '?' stands for the part that was not copied.
    pattern = "^" + re.escape(pattern_token).replace(r"\?", ".*") + "$"
    return re.match(pattern, call) is not None
