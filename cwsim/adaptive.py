"""Adaptive character weighting.

Tracks which callsign characters the trainee gets wrong during a session and
biases future callsign generation toward them. The bias is additive and capped
so a frequently missed character never becomes a near-certain pick.
"""

from __future__ import annotations

import random
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence

BASE_WEIGHT = 1.0
MISTAKE_WEIGHT_MULTIPLIER = 0.5
MAX_WEIGHT_MULTIPLIER = 5.0


def _is_tracked(ch: str) -> bool:
    return len(ch) == 1 and ("A" <= ch <= "Z" or "0" <= ch <= "9")


class AdaptiveWeightEngine:
    def __init__(
        self,
        *,
        base_weight: float = BASE_WEIGHT,
        mistake_multiplier: float = MISTAKE_WEIGHT_MULTIPLIER,
        max_weight: float = MAX_WEIGHT_MULTIPLIER,
    ):
        self.base_weight = float(base_weight)
        self.mistake_multiplier = float(mistake_multiplier)
        self.max_weight = float(max_weight)
        self._mistakes: Dict[str, int] = {}

    def record_mistake(self, expected: str, actual: str) -> None:
        """Count every expected character that the submission got wrong or left out.

        Comparison is positional; characters outside A-Z/0-9 are never tracked.
        """
        exp = (expected or "").upper()
        act = (actual or "").upper()
        # Positions past the end of ``expected`` have nothing to count.
        for i, ch in enumerate(exp):
            if i < len(act) and act[i] == ch:
                continue
            if not _is_tracked(ch):
                continue
            self._mistakes[ch] = self._mistakes.get(ch, 0) + 1

    def weight(self, char: str) -> float:
        count = self._mistakes.get(char.upper(), 0)
        return min(self.base_weight + count * self.mistake_multiplier, self.max_weight)

    def sample_weighted(self, alphabet: Sequence[str], rng: Optional[random.Random] = None) -> str:
        choices = list(alphabet)
        if not choices:
            return ""
        r = rng or random
        weights = [self.weight(ch) for ch in choices]
        if sum(weights) <= 0:
            return r.choice(choices)
        return r.choices(choices, weights=weights, k=1)[0]

    def reset(self) -> None:
        self._mistakes.clear()

    def snapshot(self) -> Mapping[str, int]:
        return MappingProxyType(dict(self._mistakes))

    @property
    def has_mistakes(self) -> bool:
        return bool(self._mistakes)
