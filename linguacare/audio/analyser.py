"""Time-domain analyser used for live input volume metering."""

import threading
from typing import Optional

import numpy as np


def compute_volume_level(samples: np.ndarray, gain: float = 5.0) -> float:
    """Root-mean-square level of normalized samples, scaled by gain and clamped to [0, 1]."""
    if samples.size == 0:
        return 0.0
    rms = float(np.sqrt(np.mean(np.square(samples))))
    return min(1.0, rms * gain)


class VolumeAnalyser:
    """Keeps the most recent window of samples from a live stream."""

    def __init__(self, fft_size: int = 256):
        self.fft_size = fft_size
        self._lock = threading.Lock()
        self._window: Optional[np.ndarray] = np.zeros(0, dtype=np.float32)

    @property
    def is_closed(self) -> bool:
        return self._window is None

    def feed(self, audio_chunk: bytes) -> None:
        """Update the window from a block of 16-bit PCM."""
        if not audio_chunk:
            return
        usable = len(audio_chunk) - len(audio_chunk) % 2
        samples = np.frombuffer(audio_chunk[:usable], dtype=np.int16)
        normalized = samples[-self.fft_size:].astype(np.float32) / 32768.0
        with self._lock:
            if self._window is not None:
                self._window = normalized

    def get_time_domain_data(self) -> np.ndarray:
        """Current amplitude samples normalized to [-1, 1]."""
        with self._lock:
            if self._window is None:
                return np.zeros(0, dtype=np.float32)
            return self._window.copy()

    def close(self) -> None:
        with self._lock:
            self._window = None
