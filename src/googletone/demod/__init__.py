"""
Two-of-ten tone pair demodulation for googletone.

Oscillator bank, block accumulator, tone selector and reporter, glued
together by GoogleToneDemodulator.
"""

from .googletone_demod import GoogleToneDemodulator, DEMOD_GOOGLETONE
from .tone_signal import ToneSignalGenerator

__all__ = ['GoogleToneDemodulator', 'DEMOD_GOOGLETONE', 'ToneSignalGenerator']
