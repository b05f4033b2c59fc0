"""
Fixed-point oscillator bank.

Ten phase accumulators, one per signalling frequency, stepped once per
sample. Reference values come from a cosine lookup table indexed by the
top bits of the 16-bit phase, so the output depends only on the number of
samples elapsed and the frequency table.
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from .googletone_constants import (
    SAMPLE_RATE,
    TONE_FREQUENCIES_HZ,
    PHASE_RANGE,
    TRIG_TABLE_SIZE,
    PHASE_TO_TABLE_SHIFT,
    SINE_PHASE_OFFSET,
    phase_increment,
)

logger = logging.getLogger(__name__)

PHASE_MASK = PHASE_RANGE - 1

COS_TABLE = np.cos(2 * np.pi * np.arange(TRIG_TABLE_SIZE) / TRIG_TABLE_SIZE)
COS_TABLE.setflags(write=False)


def table_cos(phase: np.ndarray) -> np.ndarray:
    """Cosine of fixed-point phase(s) via the lookup table."""
    return COS_TABLE[(phase & PHASE_MASK) >> PHASE_TO_TABLE_SHIFT]


def table_sin(phase: np.ndarray) -> np.ndarray:
    """Sine of fixed-point phase(s): cosine three quarters of a cycle ahead."""
    return table_cos(phase + SINE_PHASE_OFFSET)


class OscillatorBank:
    """
    Quadrature reference generator for the ten target frequencies.

    The increments are computed once and never change. Phases start at 0 and
    wrap modulo PHASE_RANGE.

    Usage:
        bank = OscillatorBank(sample_rate=22050)
        cos_ref, sin_ref = bank.references()      # current sample
        bank.advance()
        cos_blk, sin_blk = bank.references(220)   # next 220 samples, shape (10, 220)
        bank.advance(220)
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        frequencies_hz: Sequence[int] = TONE_FREQUENCIES_HZ
    ):
        self.sample_rate = sample_rate
        self.frequencies_hz = tuple(frequencies_hz)
        increments = np.array(
            [phase_increment(f, sample_rate) for f in self.frequencies_hz],
            dtype=np.int64
        )
        increments.setflags(write=False)
        self._increments = increments
        self._phases = np.zeros(len(self.frequencies_hz), dtype=np.int64)

        logger.debug(f"OscillatorBank: rate={sample_rate}Hz, "
                     f"increments={increments.tolist()}")

    @property
    def increments(self) -> np.ndarray:
        """Read-only per-frequency phase increments."""
        return self._increments

    @property
    def phases(self) -> np.ndarray:
        """Copy of the current phases, each in [0, PHASE_RANGE)."""
        return self._phases.copy()

    def reset(self) -> None:
        self._phases[:] = 0

    def _phase_matrix(self, count: int) -> np.ndarray:
        steps = np.arange(count, dtype=np.int64)
        return (self._phases[:, None] + self._increments[:, None] * steps[None, :]) & PHASE_MASK

    def references(self, count: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Cosine and sine references without advancing.

        Args:
            count: None for the current sample only (shape (10,)), otherwise
                   the next ``count`` samples (shape (10, count))

        Returns:
            (cos, sin) reference arrays
        """
        if count is None:
            return table_cos(self._phases), table_sin(self._phases)
        phase = self._phase_matrix(count)
        return table_cos(phase), table_sin(phase)

    def advance(self, count: int = 1) -> None:
        """Step every phase ``count`` samples forward, wrapping modulo PHASE_RANGE."""
        self._phases = (self._phases + self._increments * count) & PHASE_MASK
