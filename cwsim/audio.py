from __future__ import annotations

import queue
import threading
import time
from typing import List, Optional, Tuple

import numpy as np

from .encoder import TAIL_SECONDS, CWEncoder, CWEncoderConfig
from .stations import Station

try:
    import sounddevice as sd
except Exception:  # pragma: no cover - optional runtime dependency
    sd = None


class AudioOutputWorker:
    """Plays rendered utterances at their scheduled monotonic start times."""

    def __init__(self, sample_rate: int, device: Optional[int]):
        self.sample_rate = sample_rate
        self.device = device
        self.queue: queue.Queue[object] = queue.Queue(maxsize=128)
        self.stop_event = threading.Event()
        self.thread = threading.Thread(target=self._run, daemon=True)
        self._generation = 0
        self._lock = threading.Lock()

    def start(self) -> None:
        if not self.thread.is_alive():
            self.thread.start()

    def stop(self) -> None:
        self.stop_event.set()
        try:
            self.queue.put_nowait("__STOP__")
        except queue.Full:
            pass
        if self.thread.is_alive():
            self.thread.join(timeout=1.5)

    def enqueue_audio(self, audio: np.ndarray, *, start_at: float) -> None:
        if audio.size == 0:
            return
        with self._lock:
            generation = self._generation
        try:
            self.queue.put_nowait((generation, float(start_at), audio.astype(np.float32, copy=False)))
        except queue.Full:
            pass

    def clear_pending(self) -> None:
        with self._lock:
            self._generation += 1
        while True:
            try:
                self.queue.get_nowait()
            except queue.Empty:
                break
        if sd is not None:
            sd.stop()

    def _run(self) -> None:
        while not self.stop_event.is_set():
            try:
                item = self.queue.get(timeout=0.2)
            except queue.Empty:
                continue
            if item == "__STOP__":
                break
            if sd is None or not isinstance(item, tuple):
                continue
            generation, start_at, audio = item
            delay = start_at - time.monotonic()
            if delay > 0.0 and self.stop_event.wait(delay):
                break
            with self._lock:
                if generation != self._generation:
                    continue
            sd.play(audio, samplerate=self.sample_rate, device=self.device, blocking=True)


class MorseAudioEngine:
    """AudioEngine that times utterances from their Morse pulse lengths.

    End times are pure functions of text, voice speed and start time. With
    ``playback`` enabled the rendered tone is also sent to the sound device;
    start times must then come from a ``time.monotonic`` clock.
    """

    def __init__(self, *, sample_rate: int = 48000, playback: bool = False, device: Optional[int] = None):
        self.sample_rate = sample_rate
        self.playback = playback
        self._worker: Optional[AudioOutputWorker] = None
        if playback:
            if sd is None:
                raise RuntimeError("sounddevice is not installed; install with: python -m pip install sounddevice")
            self._worker = AudioOutputWorker(sample_rate, device)
            self._worker.start()

    def play_sentence(self, text: str, start_time: float, voice: Station) -> float:
        encoder = CWEncoder(CWEncoderConfig.for_voice(voice, self.sample_rate))
        if self._worker is not None:
            self._worker.enqueue_audio(encoder.encode_to_audio(text), start_at=start_time)
        return start_time + encoder.duration_seconds(text) + TAIL_SECONDS

    def stop_all(self) -> None:
        if self._worker is not None:
            self._worker.clear_pending()

    def close(self) -> None:
        if self._worker is not None:
            self._worker.clear_pending()
            self._worker.stop()
            self._worker = None


def list_output_devices() -> List[Tuple[int, str]]:
    if sd is None:
        return []
    outputs: List[Tuple[int, str]] = []
    for i, d in enumerate(sd.query_devices()):
        if d.get("max_output_channels", 0) > 0:
            outputs.append((i, d.get("name", f"device-{i}")))
    return outputs
