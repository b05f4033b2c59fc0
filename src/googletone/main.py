#!/usr/bin/env python3
"""
googletone: Two-of-Ten Tone Pair Demodulator

Command-line driver. Reads recorded audio, converts it to the
demodulator's rate, streams it through GoogleToneDemodulator in fixed-size
buffers and prints every pair report.

Usage:
    # Decode a recording
    googletone recording.wav

    # JSON lines output, per-block diagnostics on stderr
    googletone --json --debug recording.wav

    # Settings from a config file
    googletone --config /etc/googletone/config.toml recording.wav

Output (text mode):
    GOOGLETONE: 2 7
    GOOGLETONE: 0 9
"""

import argparse
import copy
import logging
import struct
import sys
from math import gcd
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import numpy as np
import toml
from scipy.io import wavfile
from scipy.signal import resample_poly

from .demod.googletone_demod import DEMOD_GOOGLETONE
from .demod.interfaces.data_models import PairDetection
from .demod.interfaces.demodulator import DemodulatorDescriptor

logger = logging.getLogger('googletone')

DEFAULT_CONFIG: Dict[str, Any] = {
    'general': {
        'buffer_size': 4096,
    },
    'input': {
        'channel': 0,
    },
    'output': {
        'format': 'text',
    },
    'logging': {
        'level': 'INFO',
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from TOML file, falling back to defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            _merge(config, toml.load(f))
    elif config_path:
        logger.warning(f"Config file {config_path} not found - using defaults")
    return config


def to_float_samples(data: np.ndarray, channel: int = 0) -> np.ndarray:
    """
    Convert WAV data to float32 in [-1, 1), picking one channel.

    Integer PCM is scaled by its full-scale value; 8-bit WAV is unsigned
    with a 128 offset.
    """
    if data.ndim == 2:
        if not 0 <= channel < data.shape[1]:
            raise ValueError(f"Channel {channel} not present ({data.shape[1]} channels)")
        data = data[:, channel]

    if data.dtype == np.uint8:
        return ((data.astype(np.float32) - 128.0) / 128.0)
    if np.issubdtype(data.dtype, np.integer):
        full_scale = float(np.iinfo(data.dtype).max) + 1.0
        return (data.astype(np.float32) / full_scale)
    return data.astype(np.float32)


def resample_to(samples: np.ndarray, rate_in: int, rate_out: int) -> np.ndarray:
    """Polyphase resampling from rate_in to rate_out."""
    if rate_in == rate_out:
        return samples
    g = gcd(rate_in, rate_out)
    up, down = rate_out // g, rate_in // g
    logger.info(f"Resampling {rate_in} Hz -> {rate_out} Hz (up={up}, down={down})")
    return resample_poly(samples, up, down).astype(np.float32)


def read_audio(path: Path, sample_rate: int, channel: int = 0) -> np.ndarray:
    """Read a WAV file and return float32 samples at ``sample_rate``."""
    rate_in, data = wavfile.read(str(path))
    samples = to_float_samples(data, channel)
    return resample_to(samples, rate_in, sample_rate)


def iter_buffers(samples: np.ndarray, buffer_size: int) -> Iterator[np.ndarray]:
    for start in range(0, len(samples), buffer_size):
        yield samples[start:start + buffer_size]


def format_detection(detection: PairDetection, output_format: str) -> str:
    if output_format == 'json':
        return detection.to_json()
    return str(detection)


def run_file(
    path: Path,
    config: Dict[str, Any],
    descriptor: DemodulatorDescriptor = DEMOD_GOOGLETONE
) -> List[PairDetection]:
    """
    Stream one file through a fresh demodulator state.

    Returns:
        All reports, in order
    """
    samples = read_audio(path, descriptor.sample_rate, config['input']['channel'])
    buffer_size = int(config['general']['buffer_size'])
    if buffer_size <= 0:
        raise ValueError(f"buffer_size must be positive, got {buffer_size}")

    logger.info(f"{path}: {len(samples)} samples "
                f"({len(samples) / descriptor.sample_rate:.2f}s), {descriptor.name}")

    state = descriptor.create()
    detections: List[PairDetection] = []
    for buffer in iter_buffers(samples, buffer_size):
        detections.extend(descriptor.demod(state, buffer))
    if descriptor.deinit is not None:
        descriptor.deinit(state)

    stats = state.get_statistics()
    logger.info(f"{path}: {stats['blocks_processed']} blocks, "
                f"{stats['reports_emitted']} reports")
    return detections


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='googletone: Two-of-Ten Tone Pair Demodulator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    googletone recording.wav
    googletone --json --buffer-size 1024 a.wav b.wav
    googletone --config googletone.toml --debug recording.wav
"""
    )
    parser.add_argument('inputs', nargs='+', help='WAV files to decode')
    parser.add_argument('--config', help='Path to TOML configuration file')
    parser.add_argument('--buffer-size', type=int,
                        help='Samples per processing call (default: 4096)')
    parser.add_argument('--json', action='store_true',
                        help='Print reports as JSON lines')
    parser.add_argument('--debug', action='store_true',
                        help='Log per-block window energies and rejection reasons')

    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.buffer_size is not None:
        config['general']['buffer_size'] = args.buffer_size
    if args.json:
        config['output']['format'] = 'json'

    logging.basicConfig(
        level=getattr(logging, str(config['logging']['level']).upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    status = 0
    for name in args.inputs:
        path = Path(name)
        if not path.exists():
            logger.error(f"Input file not found: {path}")
            status = 1
            continue
        try:
            detections = run_file(path, config)
        except (ValueError, OSError, struct.error) as e:
            logger.error(f"{path}: cannot decode: {e}")
            status = 1
            continue
        for detection in detections:
            print(format_detection(detection, config['output']['format']))

    return status


if __name__ == '__main__':
    sys.exit(main())
