from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .morse import is_prosign_token, token_to_morse_letters, tokenize_text
from .stations import Station

Pulse = Tuple[bool, float]  # (key_down, duration_seconds)

# Silence appended after each rendered sentence.
TAIL_SECONDS = 0.3


@dataclass
class CWEncoderConfig:
    sample_rate: int = 48000
    tone_hz: float = 600.0
    wpm: float = 20.0
    farnsworth_wpm: Optional[float] = None
    volume: float = 0.5
    attack_ms: float = 4.0
    release_ms: float = 6.0

    @property
    def dot_seconds(self) -> float:
        return 1.2 / max(self.wpm, 1.0)

    @property
    def space_dot_seconds(self) -> float:
        if self.farnsworth_wpm and 1.0 <= self.farnsworth_wpm < self.wpm:
            return 1.2 / self.farnsworth_wpm
        return self.dot_seconds

    @classmethod
    def for_voice(cls, voice: Station, sample_rate: int = 48000) -> "CWEncoderConfig":
        farnsworth = float(voice.farnsworth_speed) if voice.enable_farnsworth else None
        return cls(
            sample_rate=sample_rate,
            tone_hz=float(voice.tone),
            wpm=float(voice.wpm),
            farnsworth_wpm=farnsworth,
            volume=float(voice.volume),
        )


class CWEncoder:
    def __init__(self, config: CWEncoderConfig):
        self.config = config

    def text_to_pulses(self, text: str) -> List[Pulse]:
        tokens = tokenize_text(text)
        pulses: List[Pulse] = []
        dot = self.config.dot_seconds
        char_gap = 3.0 * self.config.space_dot_seconds
        word_gap = 7.0 * self.config.space_dot_seconds

        for token_idx, token in enumerate(tokens):
            letters = token_to_morse_letters(token)
            if not letters:
                continue

            # Prosigns run their letters together with element spacing only.
            letter_gap = dot if is_prosign_token(token) else char_gap
            for letter_idx, morse in enumerate(letters):
                for element_idx, element in enumerate(morse):
                    pulses.append((True, dot if element == "." else 3.0 * dot))
                    if element_idx < len(morse) - 1:
                        pulses.append((False, dot))
                if letter_idx < len(letters) - 1:
                    pulses.append((False, letter_gap))

            if token_idx < len(tokens) - 1:
                pulses.append((False, word_gap))

        return _merge_same_state_pulses(pulses)

    def duration_seconds(self, text: str) -> float:
        return float(sum(duration for _, duration in self.text_to_pulses(text)))

    def encode_to_audio(self, text: str) -> np.ndarray:
        pulses = self.text_to_pulses(text)
        sr = self.config.sample_rate
        tail = np.zeros(max(int(TAIL_SECONDS * sr), 1), dtype=np.float32)
        if not pulses:
            return tail

        volume = float(np.clip(self.config.volume, 0.0, 1.0))
        phase_step = 2.0 * np.pi * self.config.tone_hz / sr
        chunks: List[np.ndarray] = []
        phase = 0.0
        for key_down, duration_sec in pulses:
            n = max(int(round(duration_sec * sr)), 1)
            if not key_down:
                chunks.append(np.zeros(n, dtype=np.float32))
                continue
            t = np.arange(n, dtype=np.float32)
            wave = np.sin(phase + phase_step * t, dtype=np.float32)
            phase = float((phase + phase_step * n) % (2.0 * np.pi))
            chunks.append((wave * self._envelope(n) * volume).astype(np.float32))

        chunks.append(tail)
        return np.concatenate(chunks, dtype=np.float32)

    def _envelope(self, n: int) -> np.ndarray:
        sr = self.config.sample_rate
        attack = min(max(int(sr * self.config.attack_ms / 1000.0), 0), n)
        release = min(max(int(sr * self.config.release_ms / 1000.0), 0), n)
        env = np.ones(n, dtype=np.float32)
        if attack + release > n and n > 1:
            mid = n // 2
            env[:mid] = np.linspace(0.0, 1.0, mid, endpoint=False, dtype=np.float32)
            env[mid:] = np.linspace(1.0, 0.0, n - mid, endpoint=False, dtype=np.float32)
            return env
        if attack > 0:
            env[:attack] = np.linspace(0.0, 1.0, attack, endpoint=False, dtype=np.float32)
        if release > 0:
            env[-release:] *= np.linspace(1.0, 0.0, release, endpoint=False, dtype=np.float32)
        return env


def _merge_same_state_pulses(pulses: Sequence[Pulse]) -> List[Pulse]:
    if not pulses:
        return []
    merged: List[Pulse] = [pulses[0]]
    for state, duration in pulses[1:]:
        prev_state, prev_dur = merged[-1]
        if prev_state == state:
            merged[-1] = (state, prev_dur + duration)
        else:
            merged.append((state, duration))
    return merged
