"""Interface definitions for demodulator components."""

from .data_models import Decision, DecisionKind, WindowSummary, PairDetection
from .demodulator import Demodulator, DemodulatorDescriptor

__all__ = [
    'Decision', 'DecisionKind', 'WindowSummary', 'PairDetection',
    'Demodulator', 'DemodulatorDescriptor',
]
