"""
Pytest configuration and fixtures for googletone tests.
"""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


@pytest.fixture
def sample_rate():
    """Reference sample rate of the protocol."""
    return 22050


@pytest.fixture
def generator(sample_rate):
    """Tone-pair signal generator at the reference rate."""
    from googletone.demod.tone_signal import ToneSignalGenerator
    return ToneSignalGenerator(sample_rate)


@pytest.fixture
def demod(sample_rate):
    """Fresh demodulator instance."""
    from googletone.demod.googletone_demod import GoogleToneDemodulator
    return GoogleToneDemodulator(sample_rate)
