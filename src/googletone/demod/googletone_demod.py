#!/usr/bin/env python3
"""
Google Tone Demodulator - Two-of-Ten Tone Pair Detection

================================================================================
PURPOSE
================================================================================
Detect which two of the ten signalling frequencies are present in a
continuous stream of real audio samples and report the pair whenever it
changes.

================================================================================
SIGNAL PROCESSING CHAIN
================================================================================
1. INPUT: Real float32 samples at 22050 Hz, any buffer length

2. OSCILLATOR BANK: Ten fixed-point phase accumulators
   - cos/sin references from a 1024-entry table

3. BLOCK ACCUMULATION (10 ms blocks):
   - E     += x[n]²
   - I_k   += cos(φ_k[n]) · x[n]
   - Q_k   += sin(φ_k[n]) · x[n]

4. SLIDING WINDOW (4 blocks, 40 ms), re-aggregated at each block closure:
   - M_k = (Σ I_k)² + (Σ Q_k)²
   - E_total = Σ E × (BLOCKNUM × BLOCKLEN × 0.5)

5. SELECTION: two dominant peaks, third-peak dominance check, signal floor
   → NoSignal / Ambiguous / Pair(low, high)

6. DEBOUNCE: report a pair only when it differs from the previous decision

================================================================================
COST
================================================================================
Per sample: 10 oscillator steps and 20 multiply-accumulates.
Per block: a BLOCKNUM×10 window re-sum and two 10-bin scans.
Nothing blocks, allocates per sample or performs I/O.

================================================================================
USAGE
================================================================================
    demod = GoogleToneDemodulator()

    for buffer in audio_buffers:              # float32 arrays at 22050 Hz
        for det in demod.process(buffer):
            print(det)                        # "GOOGLETONE: 2 7"

    # Or through the registration record, as a host would:
    state = DEMOD_GOOGLETONE.create()
    DEMOD_GOOGLETONE.demod(state, buffer)
"""

import logging
from typing import Callable, Dict, List, Optional

import numpy as np

from .googletone_constants import SAMPLE_RATE, BLOCKNUM, BLOCKS_PER_SECOND, blocklen_for_rate
from .interfaces.data_models import Decision, DecisionKind, PairDetection, WindowSummary
from .interfaces.demodulator import Demodulator, DemodulatorDescriptor
from .accumulator import BlockAccumulator
from .oscillator import OscillatorBank
from .reporter import DetectionReporter
from .selector import ToneSelector

logger = logging.getLogger(__name__)


class GoogleToneDemodulator(Demodulator):
    """
    Streaming two-of-ten tone pair demodulator.

    One instance per audio channel. All state (oscillator phases, sliding
    window, debounce) belongs to the instance.
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        on_detection: Optional[Callable[[PairDetection], None]] = None
    ):
        """
        Initialize the demodulator.

        Args:
            sample_rate: Input sample rate (Hz), 22050 in the reference setup
            on_detection: Optional callable invoked with each report

        Raises:
            ValueError: if the rate cannot hold at least one sample per block
        """
        if sample_rate < BLOCKS_PER_SECOND:
            raise ValueError(
                f"Sample rate must be at least {BLOCKS_PER_SECOND} Hz, got {sample_rate}"
            )
        self.sample_rate = sample_rate
        self.blocklen = blocklen_for_rate(sample_rate)

        self.oscillator = OscillatorBank(sample_rate)
        self.accumulator = BlockAccumulator(
            self.oscillator,
            blocklen=self.blocklen,
            blocknum=BLOCKNUM,
            on_window=self._process_window
        )
        self.selector = ToneSelector()
        self.reporter = DetectionReporter(sample_rate, sink=on_detection)

        self._pending: List[PairDetection] = []
        self._last_window: Optional[WindowSummary] = None
        self._decision_counts: Dict[DecisionKind, int] = {kind: 0 for kind in DecisionKind}

        logger.info(f"GoogleToneDemodulator initialized - sample_rate={sample_rate}Hz, "
                    f"block={self.blocklen} samples, window={BLOCKNUM} blocks")

    @property
    def last_decision(self) -> Decision:
        return self.reporter.previous

    @property
    def last_window(self) -> Optional[WindowSummary]:
        return self._last_window

    def reset(self) -> None:
        self.oscillator.reset()
        self.accumulator.reset()
        self.reporter.reset()
        self._pending = []
        self._last_window = None
        self._decision_counts = {kind: 0 for kind in DecisionKind}

    def process(self, samples) -> List[PairDetection]:
        """
        Consume one buffer of real samples.

        Args:
            samples: 1-D array-like (a scalar counts as one sample)

        Returns:
            Reports emitted while consuming the buffer

        Raises:
            TypeError: for complex input
            ValueError: for input with more than one dimension

        An exception raised by the on_detection callback propagates; the
        rest of the buffer is not consumed.
        """
        buffer = np.asarray(samples)
        if np.iscomplexobj(buffer):
            raise TypeError("GOOGLETONE consumes real samples, got a complex buffer")
        if buffer.ndim > 1:
            raise ValueError(f"Expected a 1-D sample buffer, got shape {buffer.shape}")
        buffer = np.atleast_1d(buffer).astype(np.float32, copy=False)
        if buffer.size == 0:
            return []

        self._pending = []
        try:
            self.accumulator.ingest(buffer)
            return self._pending
        finally:
            self._pending = []

    def _process_window(self, summary: WindowSummary) -> None:
        self._last_window = summary
        if logger.isEnabledFor(logging.DEBUG):
            window = self.accumulator.window
            if not window.is_full:
                logger.debug(f"GOOGLETONE: window warming up "
                             f"({len(window)}/{window.capacity} blocks)")
            block_energies = " ".join(f"{e:8.5f}" for e, _, _ in window.blocks())
            logger.debug(f"GOOGLETONE: Block energies: {block_energies}")
            logger.debug(f"GOOGLETONE: Energies: {summary.format_energies()}")

        decision = self.selector.select_window(summary)
        self._decision_counts[decision.kind] += 1

        detection = self.reporter.report(
            decision,
            block_index=summary.block_index,
            sample_index=summary.sample_count
        )
        if detection is not None:
            self._pending.append(detection)

    def get_statistics(self) -> Dict[str, int]:
        return {
            'samples_processed': self.accumulator.samples_ingested,
            'blocks_processed': self.accumulator.blocks_closed,
            'no_signal_decisions': self._decision_counts[DecisionKind.NO_SIGNAL],
            'ambiguous_decisions': self._decision_counts[DecisionKind.AMBIGUOUS],
            'pair_decisions': self._decision_counts[DecisionKind.PAIR],
            'reports_emitted': self.reporter.reports_emitted,
        }


def _googletone_init(state: GoogleToneDemodulator) -> None:
    state.reset()


def _googletone_demod(state: GoogleToneDemodulator, samples: np.ndarray) -> List[PairDetection]:
    return state.process(samples)


DEMOD_GOOGLETONE = DemodulatorDescriptor(
    name="GOOGLETONE",
    always_available=True,
    sample_rate=SAMPLE_RATE,
    complex_samples=False,
    overlap=0,
    factory=GoogleToneDemodulator,
    init=_googletone_init,
    demod=_googletone_demod,
    deinit=None,
)
