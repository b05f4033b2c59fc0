"""
Two-of-ten tone pair signal generator

Builds synthetic test audio for the demodulator: sums of signalling
frequencies, silence, pair sequences and additive noise. Deterministic
for a given seed, usable at any sample rate.
"""

import logging
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.signal import windows

from .googletone_constants import SAMPLE_RATE, TONE_FREQUENCIES_HZ, NUM_TONES

logger = logging.getLogger(__name__)


class ToneSignalGenerator:
    """
    Generate tone-pair audio.

    Usage:
        gen = ToneSignalGenerator(sample_rate=22050)
        audio = gen.generate_sequence([((2, 7), 0.2), (None, 0.1), ((0, 9), 0.2)])
    """

    def __init__(self, sample_rate: int = SAMPLE_RATE):
        self.sample_rate = sample_rate
        self.dt = 1.0 / sample_rate

    def _num_samples(self, duration_sec: float) -> int:
        return int(round(duration_sec * self.sample_rate))

    def generate_silence(self, duration_sec: float) -> np.ndarray:
        return np.zeros(self._num_samples(duration_sec), dtype=np.float32)

    def generate_tones(
        self,
        indices: Sequence[int],
        duration_sec: float,
        amplitude: Union[float, Sequence[float]] = 0.4,
        phases: Optional[Sequence[float]] = None,
        taper: float = 0.0
    ) -> np.ndarray:
        """
        Sum of the given signalling frequencies.

        Args:
            indices: Tone indices in [0, 9]
            duration_sec: Length of the signal
            amplitude: One amplitude for every tone, or one per tone
            phases: Starting phase per tone in radians (default all 0)
            taper: Tukey taper fraction (0 = hard keyed)

        Returns:
            float32 signal

        Raises:
            ValueError: for an index outside [0, 9] or a phases list whose
                        length differs from indices
        """
        for idx in indices:
            if not 0 <= idx < NUM_TONES:
                raise ValueError(f"Tone index {idx} outside [0, {NUM_TONES - 1}]")

        n = self._num_samples(duration_sec)
        t = np.arange(n) * self.dt
        amplitudes = np.broadcast_to(np.asarray(amplitude, dtype=np.float64), (len(indices),))
        if phases is None:
            phases = [0.0] * len(indices)
        elif len(phases) != len(indices):
            raise ValueError(f"Got {len(phases)} phases for {len(indices)} tones")

        out = np.zeros(n, dtype=np.float64)
        for idx, amp, phase in zip(indices, amplitudes, phases):
            out += amp * np.sin(2 * np.pi * TONE_FREQUENCIES_HZ[idx] * t + phase)

        if taper > 0 and n > 0:
            out *= windows.tukey(n, alpha=taper)
        return out.astype(np.float32)

    def generate_pair(self, low: int, high: int, duration_sec: float,
                      amplitude: float = 0.4, taper: float = 0.0) -> np.ndarray:
        return self.generate_tones([low, high], duration_sec, amplitude, taper=taper)

    def generate_sequence(
        self,
        segments: Iterable[Tuple[Optional[Tuple[int, int]], float]],
        amplitude: float = 0.4
    ) -> np.ndarray:
        """
        Concatenate pairs and gaps.

        Args:
            segments: (pair, seconds) items; pair None means silence
        """
        parts = []
        for pair, duration_sec in segments:
            if pair is None:
                parts.append(self.generate_silence(duration_sec))
            else:
                parts.append(self.generate_pair(pair[0], pair[1], duration_sec, amplitude))
        if not parts:
            return np.zeros(0, dtype=np.float32)
        logger.debug(f"Generated sequence of {len(parts)} segments, "
                     f"{sum(len(p) for p in parts)} samples")
        return np.concatenate(parts)

    def add_noise(self, signal: np.ndarray, noise_amplitude: float,
                  seed: Optional[int] = None) -> np.ndarray:
        """Add Gaussian noise with standard deviation ``noise_amplitude``."""
        rng = np.random.default_rng(seed)
        noise = rng.normal(0.0, noise_amplitude, size=len(signal))
        return (signal + noise).astype(np.float32)
