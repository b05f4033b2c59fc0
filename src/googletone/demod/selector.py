"""
Tone-pair selection.

Given the ten window magnitudes and the scaled window energy, decide
whether exactly two tones dominate:

1. Primary peak i: largest strictly positive magnitude.
2. Secondary peak j: largest strictly positive magnitude other than i.
3. Dominance: any third bin above DOMINANCE_RATIO × M_j → Ambiguous.
4. Signal floor: SIGNAL_FLOOR_RATIO × E_total > M_i + M_j → NoSignal.
5. Otherwise Pair(min(i, j), max(i, j)).

Scans use strict '>' comparisons, so on ties the lower index wins.
"""

import logging
from typing import Optional, Sequence

from .googletone_constants import DOMINANCE_RATIO, SIGNAL_FLOOR_RATIO
from .interfaces.data_models import Decision, WindowSummary

logger = logging.getLogger(__name__)

NOT_FOUND = -1
AMBIGUOUS = -2


def find_peak(magnitudes: Sequence[float], ignore: Optional[int] = None,
              dominance_ratio: float = DOMINANCE_RATIO) -> int:
    """
    Index of the largest positive magnitude, skipping ``ignore``.

    When ``ignore`` is given (secondary search) the found peak must also
    dominate every remaining bin by 1/dominance_ratio.

    Returns:
        The peak index, NOT_FOUND (-1) if nothing is positive, or
        AMBIGUOUS (-2) if the secondary peak fails the dominance check
    """
    best = 0.0
    idx = NOT_FOUND
    for k, value in enumerate(magnitudes):
        if k != ignore and value > best:
            best = value
            idx = k
    if idx == NOT_FOUND:
        return NOT_FOUND

    if ignore is not None:
        floor = best * dominance_ratio
        for k, value in enumerate(magnitudes):
            if k != ignore and k != idx and value > floor:
                return AMBIGUOUS
    return idx


class ToneSelector:
    """Turns window magnitudes into a Decision."""

    def __init__(self, dominance_ratio: float = DOMINANCE_RATIO,
                 signal_floor_ratio: float = SIGNAL_FLOOR_RATIO):
        self.dominance_ratio = dominance_ratio
        self.signal_floor_ratio = signal_floor_ratio

    def select(self, magnitudes: Sequence[float], total_energy: float) -> Decision:
        debug = logger.isEnabledFor(logging.DEBUG)

        i = find_peak(magnitudes, dominance_ratio=self.dominance_ratio)
        if i < 0:
            if debug:
                logger.debug(f"GOOGLETONE: no primary peak (i={i})")
            return Decision.no_signal()

        j = find_peak(magnitudes, ignore=i, dominance_ratio=self.dominance_ratio)
        if j == NOT_FOUND:
            if debug:
                logger.debug(f"GOOGLETONE: no secondary peak (i={i} j={j})")
            return Decision.no_signal()
        if j == AMBIGUOUS:
            if debug:
                logger.debug(f"GOOGLETONE: more than two significant peaks (i={i})")
            return Decision.ambiguous()

        threshold = total_energy * self.signal_floor_ratio
        if threshold > magnitudes[i] + magnitudes[j]:
            if debug:
                logger.debug(f"GOOGLETONE: below signal floor i={i} j={j} "
                             f"M[i]={magnitudes[i]:8.5f} M[j]={magnitudes[j]:8.5f} "
                             f"threshold={threshold:8.5f}")
            return Decision.no_signal()

        return Decision.pair(i, j)

    def select_window(self, summary: WindowSummary) -> Decision:
        return self.select(summary.magnitudes, summary.total_energy)
