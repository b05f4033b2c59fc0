"""
Data Models for the Google Tone demodulator

These data structures define the contracts between the demodulator stages
and between the demodulator and whatever host drives it.

Design principles:
- Immutable where possible (frozen dataclasses)
- Decisions keep NoSignal and Ambiguous apart even though neither is reported
- Reports carry the packed byte used on the wire as well as readable fields
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Tuple, Dict, Any
import json

from ..googletone_constants import (
    NUM_TONES,
    TONE_FREQUENCIES_HZ,
    CODE_NO_SIGNAL,
    CODE_AMBIGUOUS,
    pack_pair,
)


# ============================================================================
# DECISIONS (ToneSelector output)
# ============================================================================

class DecisionKind(str, Enum):
    """Outcome of one window evaluation."""
    NO_SIGNAL = "no_signal"    # Silence, or the two peaks do not dominate the energy
    AMBIGUOUS = "ambiguous"    # More than two significant peaks
    PAIR = "pair"              # Exactly two dominant tones


@dataclass(frozen=True)
class Decision:
    """
    Result of selecting tones from one sliding window.

    For PAIR decisions ``low`` < ``high`` always holds, so the order in which
    the two peaks were found never leaks into the result.
    """
    kind: DecisionKind
    low: Optional[int] = None
    high: Optional[int] = None

    @classmethod
    def no_signal(cls) -> "Decision":
        return cls(DecisionKind.NO_SIGNAL)

    @classmethod
    def ambiguous(cls) -> "Decision":
        return cls(DecisionKind.AMBIGUOUS)

    @classmethod
    def pair(cls, i: int, j: int) -> "Decision":
        """
        Build a normalized pair decision.

        Raises:
            ValueError: if an index is outside [0, 9] or both are equal
        """
        for idx in (i, j):
            if not 0 <= idx < NUM_TONES:
                raise ValueError(f"Tone index {idx} outside [0, {NUM_TONES - 1}]")
        if i == j:
            raise ValueError(f"A tone pair needs two distinct indices, got {i} twice")
        return cls(DecisionKind.PAIR, min(i, j), max(i, j))

    @property
    def is_pair(self) -> bool:
        return self.kind is DecisionKind.PAIR

    @property
    def code(self) -> int:
        """Packed code: -1 no signal, -2 ambiguous, (low << 4) | high for a pair."""
        if self.kind is DecisionKind.NO_SIGNAL:
            return CODE_NO_SIGNAL
        if self.kind is DecisionKind.AMBIGUOUS:
            return CODE_AMBIGUOUS
        return pack_pair(self.low, self.high)

    def __str__(self) -> str:
        if self.is_pair:
            return f"PAIR({self.low}, {self.high})"
        return self.kind.name


# ============================================================================
# WINDOW SUMMARY (BlockAccumulator output)
# ============================================================================

@dataclass(frozen=True)
class WindowSummary:
    """
    Window-level aggregate produced every time a block closes.

    Attributes:
        block_index: Sequence number of the block that just closed (0-based)
        total_energy: Summed window energy, scaled by BLOCKNUM*BLOCKLEN*0.5
        magnitudes: Per-frequency (Σ in-phase)² + (Σ quadrature)²
        sample_count: Samples consumed since reset when the block closed
    """
    block_index: int
    total_energy: float
    magnitudes: Tuple[float, ...]
    sample_count: int

    def format_energies(self) -> str:
        """Render energies the way the diagnostic log line shows them."""
        return f"{self.total_energy:8.5f}  " + " ".join(f"{m:8.5f}" for m in self.magnitudes)


# ============================================================================
# PAIR DETECTION (DetectionReporter output)
# ============================================================================

@dataclass
class PairDetection:
    """
    Report emitted when the decoded tone pair changes.

    Attributes:
        low_index: Smaller tone index (high nibble of the packed code)
        high_index: Larger tone index (low nibble of the packed code)
        low_frequency_hz: Frequency of low_index
        high_frequency_hz: Frequency of high_index
        block_index: Block whose closure produced the report
        sample_index: Samples consumed since reset at that closure
        time_offset_sec: sample_index expressed in seconds
    """
    low_index: int
    high_index: int
    low_frequency_hz: int
    high_frequency_hz: int
    block_index: int
    sample_index: int
    time_offset_sec: float

    @classmethod
    def from_decision(
        cls,
        decision: Decision,
        block_index: int,
        sample_index: int,
        sample_rate: int
    ) -> "PairDetection":
        if not decision.is_pair:
            raise ValueError(f"Only pair decisions can be reported, got {decision}")
        return cls(
            low_index=decision.low,
            high_index=decision.high,
            low_frequency_hz=TONE_FREQUENCIES_HZ[decision.low],
            high_frequency_hz=TONE_FREQUENCIES_HZ[decision.high],
            block_index=block_index,
            sample_index=sample_index,
            time_offset_sec=sample_index / sample_rate,
        )

    @property
    def code(self) -> int:
        return pack_pair(self.low_index, self.high_index)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['code'] = self.code
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def __str__(self) -> str:
        return f"GOOGLETONE: {self.low_index} {self.high_index}"
