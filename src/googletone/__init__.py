"""
googletone: Two-of-Ten Tone Pair Demodulator

Detects which two of ten fixed audio frequencies are keyed together in a
stream of samples and reports the pair whenever it changes. The scheme is
a DTMF-like paging/telemetry code.

Architecture:
    samples → OscillatorBank → BlockAccumulator (10 ms blocks, 40 ms window)
            → ToneSelector → DetectionReporter → PairDetection

Version: 1.0.0
"""

__version__ = "1.0.0"

from .demod.interfaces.data_models import (
    Decision,
    DecisionKind,
    PairDetection,
    WindowSummary,
)
from .demod.googletone_demod import GoogleToneDemodulator, DEMOD_GOOGLETONE

__all__ = [
    "Decision",
    "DecisionKind",
    "PairDetection",
    "WindowSummary",
    "GoogleToneDemodulator",
    "DEMOD_GOOGLETONE",
    "__version__",
]
