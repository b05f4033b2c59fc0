"""
Block accumulator and sliding window.

Samples are integrated into an open block: total energy plus, for each
target frequency, an in-phase and a quadrature dot product against the
oscillator bank. Every BLOCKLEN samples the block closes, replaces the
oldest block of the sliding window, and the window is re-aggregated:

    E_total = Σ_blocks energy × (BLOCKNUM × BLOCKLEN × 0.5)
    M_k     = (Σ_blocks I_k)² + (Σ_blocks Q_k)²

Correlation components are summed across blocks before squaring, so the
window behaves like one coherent single-bin filter over BLOCKNUM×BLOCKLEN
samples rather than an average of per-block powers.

Samples are consumed a segment at a time (never crossing a block
boundary), which gives the same sums as stepping sample by sample.
"""

import logging
from typing import Callable, List, Optional, Tuple

import numpy as np

from .googletone_constants import BLOCKLEN, BLOCKNUM, NUM_TONES, energy_scale
from .interfaces.data_models import WindowSummary
from .oscillator import OscillatorBank

logger = logging.getLogger(__name__)


class SlidingWindow:
    """
    Fixed-capacity ring of the most recent closed blocks.

    Zero-filled until BLOCKNUM blocks have been inserted; afterwards every
    insert evicts the oldest block. Implemented with a moving head index
    instead of shifting rows.
    """

    def __init__(self, capacity: int = BLOCKNUM, num_tones: int = NUM_TONES):
        self.capacity = capacity
        self.num_tones = num_tones
        self.energy = np.zeros(capacity, dtype=np.float64)
        self.inphase = np.zeros((capacity, num_tones), dtype=np.float64)
        self.quadrature = np.zeros((capacity, num_tones), dtype=np.float64)
        self._head = 0  # slot the next block goes into (= oldest block)
        self._inserted = 0

    def reset(self) -> None:
        self.energy[:] = 0.0
        self.inphase[:] = 0.0
        self.quadrature[:] = 0.0
        self._head = 0
        self._inserted = 0

    @property
    def is_full(self) -> bool:
        return self._inserted >= self.capacity

    def __len__(self) -> int:
        return min(self._inserted, self.capacity)

    def insert(self, energy: float, inphase: np.ndarray, quadrature: np.ndarray) -> None:
        """Store a closed block in place of the oldest one."""
        self.energy[self._head] = energy
        self.inphase[self._head] = inphase
        self.quadrature[self._head] = quadrature
        self._head = (self._head + 1) % self.capacity
        self._inserted += 1

    def totals(self) -> Tuple[float, np.ndarray, np.ndarray]:
        """Window sums: (energy, in-phase per tone, quadrature per tone)."""
        return (
            float(self.energy.sum()),
            self.inphase.sum(axis=0),
            self.quadrature.sum(axis=0),
        )

    def blocks(self) -> List[Tuple[float, np.ndarray, np.ndarray]]:
        """Stored blocks ordered oldest to newest (diagnostics only)."""
        order = [(self._head + k) % self.capacity for k in range(self.capacity)]
        return [
            (float(self.energy[k]), self.inphase[k].copy(), self.quadrature[k].copy())
            for k in order
        ]


class BlockAccumulator:
    """
    Per-sample energy and correlation integrator.

    Args:
        oscillator: Reference generator, advanced once per ingested sample
        blocklen: Samples per block
        blocknum: Blocks in the sliding window
        on_window: Called synchronously with each WindowSummary when a
                   block closes, before ingest() returns
    """

    def __init__(
        self,
        oscillator: OscillatorBank,
        blocklen: int = BLOCKLEN,
        blocknum: int = BLOCKNUM,
        on_window: Optional[Callable[[WindowSummary], None]] = None
    ):
        if blocklen <= 0:
            raise ValueError(f"Block length must be positive, got {blocklen}")
        self.oscillator = oscillator
        self.blocklen = blocklen
        self.blocknum = blocknum
        self.on_window = on_window
        self.energy_scale = energy_scale(blocklen, blocknum)

        num_tones = len(oscillator.frequencies_hz)
        self.window = SlidingWindow(blocknum, num_tones)
        self._open_energy = 0.0
        self._open_inphase = np.zeros(num_tones, dtype=np.float64)
        self._open_quadrature = np.zeros(num_tones, dtype=np.float64)
        self.countdown = blocklen
        self.blocks_closed = 0
        self.samples_ingested = 0

    def reset(self) -> None:
        self.window.reset()
        self._open_energy = 0.0
        self._open_inphase[:] = 0.0
        self._open_quadrature[:] = 0.0
        self.countdown = self.blocklen
        self.blocks_closed = 0
        self.samples_ingested = 0

    def ingest(self, samples) -> List[WindowSummary]:
        """
        Integrate samples into the open block, closing blocks as they fill.

        Args:
            samples: A single sample or a 1-D buffer of any length

        Returns:
            One WindowSummary per block closed while consuming the input
        """
        samples = np.atleast_1d(np.asarray(samples, dtype=np.float64))
        summaries: List[WindowSummary] = []

        pos = 0
        total = len(samples)
        while pos < total:
            take = min(self.countdown, total - pos)
            segment = samples[pos:pos + take]

            cos_ref, sin_ref = self.oscillator.references(take)
            self._open_energy += float(np.dot(segment, segment))
            self._open_inphase += cos_ref @ segment
            self._open_quadrature += sin_ref @ segment
            self.oscillator.advance(take)

            pos += take
            self.samples_ingested += take
            self.countdown -= take
            if self.countdown == 0:
                summaries.append(self._close_block())

        return summaries

    def _close_block(self) -> WindowSummary:
        self.window.insert(self._open_energy, self._open_inphase, self._open_quadrature)
        self._open_energy = 0.0
        self._open_inphase = np.zeros_like(self._open_inphase)
        self._open_quadrature = np.zeros_like(self._open_quadrature)
        self.countdown = self.blocklen

        summary = self.aggregate()
        self.blocks_closed += 1
        if self.on_window is not None:
            self.on_window(summary)
        return summary

    def aggregate(self) -> WindowSummary:
        """Summarize the current window contents."""
        energy, inphase, quadrature = self.window.totals()
        magnitudes = inphase ** 2 + quadrature ** 2
        return WindowSummary(
            block_index=self.blocks_closed,
            total_energy=energy * self.energy_scale,
            magnitudes=tuple(float(m) for m in magnitudes),
            sample_count=self.samples_ingested,
        )
