"""
Demodulator Interface

Defines the contract a host audio framework relies on when it drives a
demodulator: a registration record describing what the demodulator needs,
and the per-instance operations it calls while streaming.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from .data_models import PairDetection


class Demodulator(ABC):
    """
    Interface for a streaming demodulator instance.

    Each instance owns all of its state. Instances never share anything,
    so one instance per channel can run on its own thread without locking.
    """

    @abstractmethod
    def reset(self) -> None:
        """
        Return every piece of internal state to its initial value.

        Called by the host before the first buffer and whenever the stream
        is restarted.
        """
        pass

    @abstractmethod
    def process(self, samples: np.ndarray) -> List[PairDetection]:
        """
        Consume one buffer of samples.

        Buffers may have any length. Accumulation state carries across
        buffer boundaries, so splitting a stream differently never changes
        the reports.

        Args:
            samples: 1-D buffer of real samples at the descriptor's rate

        Returns:
            Reports emitted while consuming this buffer (often empty)
        """
        pass

    @abstractmethod
    def get_statistics(self) -> Dict[str, int]:
        """
        Get processing counters.

        Returns:
            dict with at least 'samples_processed', 'blocks_processed'
            and 'reports_emitted'
        """
        pass


@dataclass(frozen=True)
class DemodulatorDescriptor:
    """
    Registration record consumed by a host framework.

    The host selects demodulators by ``name``, converts its input to
    ``sample_rate``, creates state with ``factory``, then calls ``init``
    once and ``demod`` per buffer. ``deinit`` is optional.

    Attributes:
        name: Protocol name the host selects by
        always_available: True if the demodulator needs no optional support
        sample_rate: Required input rate (Hz)
        complex_samples: True if the demodulator consumes IQ samples
        overlap: Samples each buffer must repeat from the previous one
        factory: Creates a fresh demodulator state
        init: Resets a state (``init(state)``)
        demod: Processes one buffer (``demod(state, samples)``)
        deinit: Optional teardown hook
    """
    name: str
    always_available: bool
    sample_rate: int
    complex_samples: bool
    overlap: int
    factory: Callable[[], Demodulator]
    init: Callable[[Demodulator], None]
    demod: Callable[[Demodulator, np.ndarray], Any]
    deinit: Optional[Callable[[Demodulator], None]] = None

    def create(self) -> Demodulator:
        """Create and initialize a new state the way a host would."""
        state = self.factory()
        self.init(state)
        return state
