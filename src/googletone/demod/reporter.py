"""
Detection reporter (debounce).

Emits a PairDetection only when a Pair decision differs from the previous
decision. NoSignal and Ambiguous are never emitted but still replace the
previous decision, so Pair(a,b) → NoSignal → Pair(a,b) reports twice.
"""

import logging
from typing import Callable, Optional

from .googletone_constants import SAMPLE_RATE
from .interfaces.data_models import Decision, PairDetection

logger = logging.getLogger(__name__)


class DetectionReporter:
    """
    Debounce layer between the selector and the report sink.

    Args:
        sample_rate: Used to express report positions in seconds
        sink: Optional callable receiving each PairDetection
    """

    def __init__(self, sample_rate: int = SAMPLE_RATE,
                 sink: Optional[Callable[[PairDetection], None]] = None):
        self.sample_rate = sample_rate
        self.sink = sink
        self.previous = Decision.no_signal()
        self.reports_emitted = 0

    def reset(self) -> None:
        self.previous = Decision.no_signal()
        self.reports_emitted = 0

    def report(self, decision: Decision, block_index: int = 0,
               sample_index: int = 0) -> Optional[PairDetection]:
        """
        Record a decision, emitting a report if it is a new pair.

        Returns:
            The emitted PairDetection, or None
        """
        changed = decision != self.previous
        self.previous = decision
        if not (changed and decision.is_pair):
            return None

        detection = PairDetection.from_decision(
            decision, block_index, sample_index, self.sample_rate
        )
        self.reports_emitted += 1
        logger.info(str(detection))
        if self.sink is not None:
            self.sink(detection)
        return detection
