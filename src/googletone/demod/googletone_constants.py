#!/usr/bin/env python3
"""
Google Tone (two-of-ten) Shared Constants

================================================================================
PURPOSE
================================================================================
Single source of truth for the protocol constants used by the tone-pair
demodulator: the ten signalling frequencies, the block/window geometry,
the fixed-point oscillator domain and the selection thresholds.

The frequency plan is fixed by the protocol. Nothing here is meant to be
tuned at runtime.

================================================================================
SIGNALLING SCHEME
================================================================================
Each symbol is a pair of simultaneously keyed tones taken from a palette of
ten frequencies. The pair is reported as two 4-bit indices, smaller first:

    Index:   0    1    2     3     4     5     6     7     8     9
    Hz:    740  831  933  1109  1245  1480  1661  1865  2217  2489

================================================================================
BLOCK / WINDOW GEOMETRY
================================================================================
    BLOCKLEN = SAMPLE_RATE / 100     (10 ms, 220 samples at 22050 Hz)
    BLOCKNUM = 4                     (sliding window of 40 ms)

A decision is taken every BLOCKLEN samples over the last BLOCKNUM blocks.

================================================================================
FIXED-POINT OSCILLATOR
================================================================================
Phase is a 16-bit fixed-point value, one full cycle = PHASE_RANGE = 65536:

    increment = frequency * PHASE_RANGE // sample_rate

Cosine is read from a 1024-entry table indexed by the top 10 bits of the
phase. Sine is the same table a quarter cycle behind:

    sin(phase) = cos(phase + 0xC000)
"""

from typing import Tuple

# =============================================================================
# SAMPLE RATE / BLOCK GEOMETRY
# =============================================================================

SAMPLE_RATE = 22050  # Hz - reference configuration of the protocol
BLOCKS_PER_SECOND = 100  # 10 ms blocks
BLOCKLEN = SAMPLE_RATE // BLOCKS_PER_SECOND
BLOCKNUM = 4  # blocks in the sliding window (40 ms)

# =============================================================================
# FREQUENCY PLAN
# =============================================================================

TONE_FREQUENCIES_HZ: Tuple[int, ...] = (
    740, 831, 933, 1109, 1245,
    1480, 1661, 1865, 2217, 2489,
)
NUM_TONES = len(TONE_FREQUENCIES_HZ)

# =============================================================================
# FIXED-POINT PHASE DOMAIN
# =============================================================================

PHASE_RANGE = 0x10000  # one full cycle
TRIG_TABLE_BITS = 10
TRIG_TABLE_SIZE = 1 << TRIG_TABLE_BITS
PHASE_TO_TABLE_SHIFT = 16 - TRIG_TABLE_BITS
SINE_PHASE_OFFSET = 0xC000  # three quarters of a cycle

# =============================================================================
# SELECTION THRESHOLDS
# =============================================================================

# A third bin above this fraction of the weaker peak makes the spectrum ambiguous
DOMINANCE_RATIO = 0.1

# The two peaks must carry at least this fraction of the scaled window energy
SIGNAL_FLOOR_RATIO = 0.4

# =============================================================================
# PACKED DECISION CODES
# =============================================================================

CODE_NO_SIGNAL = -1
CODE_AMBIGUOUS = -2


def blocklen_for_rate(sample_rate: int) -> int:
    """Samples per 10 ms block at the given rate."""
    return sample_rate // BLOCKS_PER_SECOND


def energy_scale(blocklen: int = BLOCKLEN, blocknum: int = BLOCKNUM) -> float:
    """
    Scale applied to the summed window energy.

    For a sinusoid of amplitude A over N = blocknum * blocklen samples the
    raw energy is N*A²/2 while the correlation magnitude is (N*A/2)², so
    multiplying the energy by N/2 puts both on the same footing.
    """
    return blocknum * blocklen * 0.5


def phase_increment(frequency_hz: int, sample_rate: int = SAMPLE_RATE) -> int:
    """Fixed-point phase increment per sample (truncating)."""
    return (frequency_hz * PHASE_RANGE) // sample_rate


def pack_pair(low: int, high: int) -> int:
    """Pack a normalized pair into one byte, smaller index in the high nibble."""
    return ((low << 4) & 0xF0) | (high & 0x0F)

