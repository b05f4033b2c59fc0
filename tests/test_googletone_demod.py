"""
Integration tests for the Google Tone demodulator.

Feeds synthetic tone-pair audio through the full chain (oscillators,
block accumulation, selection, debounce) and checks the reports.
"""

import pytest
import numpy as np

PAIRS = [(1, 6), (0, 9), (3, 8), (2, 5)]


def report_pairs(detections):
    return [(d.low_index, d.high_index) for d in detections]


class TestSilenceAndNoise:
    """Inputs that must never produce a pair."""
    
    def test_zero_input_is_no_signal(self, demod):
        from googletone.demod.interfaces.data_models import Decision
        
        assert demod.process(np.zeros(880 * 3, dtype=np.float32)) == []
        assert demod.last_decision == Decision.no_signal()
        stats = demod.get_statistics()
        assert stats['blocks_processed'] == 12
        assert stats['no_signal_decisions'] == 12
        assert stats['reports_emitted'] == 0
    
    def test_white_noise_reports_nothing(self, demod):
        rng = np.random.default_rng(1234)
        noise = rng.normal(0.0, 0.3, size=22050).astype(np.float32)
        assert demod.process(noise) == []
        assert demod.get_statistics()['pair_decisions'] == 0


class TestPairDetection:
    """Two-tone signals converge to the right pair."""
    
    @pytest.mark.parametrize("pair", PAIRS)
    def test_pair_detected_once(self, demod, generator, pair):
        audio = generator.generate_pair(pair[0], pair[1], 0.3)
        detections = demod.process(audio)
        
        assert report_pairs(detections) == [pair]
        assert detections[0].block_index < 4
    
    @pytest.mark.parametrize("pair", PAIRS)
    def test_tone_order_does_not_matter(self, sample_rate, generator, pair):
        from googletone.demod.googletone_demod import GoogleToneDemodulator
        
        forward = generator.generate_tones([pair[0], pair[1]], 0.3)
        backward = generator.generate_tones([pair[1], pair[0]], 0.3)
        a = GoogleToneDemodulator(sample_rate).process(forward)
        b = GoogleToneDemodulator(sample_rate).process(backward)
        
        assert report_pairs(a) == report_pairs(b) == [pair]
        assert a[0].code == b[0].code
    
    def test_third_tone_makes_ambiguous(self, demod, generator):
        from googletone.demod.interfaces.data_models import DecisionKind
        
        audio = generator.generate_tones([1, 6, 9], 0.3, amplitude=[0.4, 0.4, 0.2])
        assert demod.process(audio) == []
        assert demod.last_decision.kind is DecisionKind.AMBIGUOUS
        assert demod.get_statistics()['ambiguous_decisions'] > 0
    
    def test_same_signal_without_third_tone_is_pair(self, demod, generator):
        audio = generator.generate_tones([1, 6], 0.3, amplitude=[0.4, 0.4])
        assert report_pairs(demod.process(audio)) == [(1, 6)]
    
    def test_other_sample_rate(self):
        from googletone.demod.googletone_demod import GoogleToneDemodulator
        from googletone.demod.tone_signal import ToneSignalGenerator
        
        demod = GoogleToneDemodulator(8000)
        audio = ToneSignalGenerator(8000).generate_pair(2, 5, 0.3)
        assert demod.blocklen == 80
        assert report_pairs(demod.process(audio)) == [(2, 5)]


class TestDebounce:
    """Reports only on change."""
    
    def test_pair_gap_pair_reports_twice(self, demod, generator):
        audio = generator.generate_sequence([((3, 8), 0.2), (None, 0.2), ((3, 8), 0.2)])
        assert report_pairs(demod.process(audio)) == [(3, 8), (3, 8)]
    
    def test_pair_change_reports_each(self, demod, generator):
        audio = generator.generate_sequence([((1, 6), 0.2), ((3, 8), 0.2)])
        assert report_pairs(demod.process(audio)) == [(1, 6), (3, 8)]
    
    def test_reports_increase_in_time(self, demod, generator):
        audio = generator.generate_sequence([((0, 9), 0.2), (None, 0.1), ((2, 5), 0.2)])
        detections = demod.process(audio)
        assert len(detections) == 2
        assert detections[0].sample_index < detections[1].sample_index
        assert detections[1].time_offset_sec == pytest.approx(
            detections[1].sample_index / 22050)


class TestStreaming:
    """Buffering, reset and input validation."""
    
    def test_buffer_size_does_not_change_reports(self, sample_rate, generator):
        from googletone.demod.googletone_demod import GoogleToneDemodulator
        
        audio = generator.generate_sequence([((1, 6), 0.2), (None, 0.1), ((0, 9), 0.2)])
        whole = GoogleToneDemodulator(sample_rate).process(audio)
        
        chunked_demod = GoogleToneDemodulator(sample_rate)
        chunked = []
        for start in range(0, len(audio), 333):
            chunked.extend(chunked_demod.process(audio[start:start + 333]))
        
        assert [(d.low_index, d.high_index, d.block_index, d.sample_index) for d in whole] == \
               [(d.low_index, d.high_index, d.block_index, d.sample_index) for d in chunked]
    
    def test_single_sample_buffers(self, demod, generator):
        audio = generator.generate_pair(2, 5, 0.1)
        detections = []
        for x in audio:
            detections.extend(demod.process(x))
        assert report_pairs(detections) == [(2, 5)]
    
    def test_partial_block_is_not_finalized(self, demod):
        demod.process(np.ones(219, dtype=np.float32))
        stats = demod.get_statistics()
        assert stats['samples_processed'] == 219
        assert stats['blocks_processed'] == 0
        assert demod.last_window is None
    
    def test_empty_buffer_is_noop(self, demod):
        assert demod.process(np.zeros(0, dtype=np.float32)) == []
        assert demod.get_statistics()['samples_processed'] == 0
    
    def test_complex_input_rejected(self, demod):
        with pytest.raises(TypeError):
            demod.process(np.zeros(10, dtype=np.complex64))
    
    def test_multidimensional_input_rejected(self, demod):
        with pytest.raises(ValueError):
            demod.process(np.zeros((10, 2), dtype=np.float32))
    
    def test_low_sample_rate_rejected(self):
        from googletone.demod.googletone_demod import GoogleToneDemodulator
        
        with pytest.raises(ValueError):
            GoogleToneDemodulator(50)
    
    def test_reset_allows_same_pair_again(self, demod, generator):
        audio = generator.generate_pair(0, 9, 0.4)
        half = len(audio) // 2
        assert report_pairs(demod.process(audio[:half])) == [(0, 9)]
        assert demod.process(audio[half:]) == []

        demod.reset()
        assert demod.get_statistics()['samples_processed'] == 0
        assert report_pairs(demod.process(audio[:half])) == [(0, 9)]
    
    def test_on_detection_callback(self, sample_rate, generator):
        from googletone.demod.googletone_demod import GoogleToneDemodulator
        
        received = []
        demod = GoogleToneDemodulator(sample_rate, on_detection=received.append)
        demod.process(generator.generate_pair(1, 6, 0.2))
        assert report_pairs(received) == [(1, 6)]
    
    def test_callback_errors_propagate(self, sample_rate, generator):
        from googletone.demod.googletone_demod import GoogleToneDemodulator
        
        def fail(detection):
            raise RuntimeError("sink down")
        
        demod = GoogleToneDemodulator(sample_rate, on_detection=fail)
        with pytest.raises(RuntimeError):
            demod.process(generator.generate_pair(1, 6, 0.2))
    
    def test_failed_callback_leaves_no_stale_reports(self, sample_rate, generator):
        """After a sink error the next buffer returns only its own reports."""
        from googletone.demod.googletone_demod import GoogleToneDemodulator

        calls = []

        def fail_once(detection):
            calls.append(detection)
            if len(calls) == 1:
                raise RuntimeError("sink down")

        demod = GoogleToneDemodulator(sample_rate, on_detection=fail_once)
        with pytest.raises(RuntimeError):
            demod.process(generator.generate_pair(1, 6, 0.2))
        assert demod._pending == []

        detections = demod.process(generator.generate_sequence([(None, 0.1), ((3, 8), 0.2)]))
        assert report_pairs(detections) == [(3, 8)]

    def test_debug_log_shows_window_state(self, demod, caplog):
        import logging

        with caplog.at_level(logging.DEBUG, logger='googletone.demod.googletone_demod'):
            demod.process(np.zeros(220 * 5, dtype=np.float32))
        assert "window warming up (1/4 blocks)" in caplog.text
        assert "window warming up (4/4 blocks)" not in caplog.text
        assert "Block energies" in caplog.text
        assert "Energies:" in caplog.text

    def test_instances_are_independent(self, sample_rate, generator):
        from googletone.demod.googletone_demod import GoogleToneDemodulator
        
        a = GoogleToneDemodulator(sample_rate)
        b = GoogleToneDemodulator(sample_rate)
        a.process(generator.generate_pair(1, 6, 0.2))
        assert b.get_statistics()['samples_processed'] == 0
        assert report_pairs(b.process(generator.generate_pair(1, 6, 0.2))) == [(1, 6)]


class TestDescriptor:
    """Test the host registration record."""
    
    def test_descriptor_fields(self):
        from googletone.demod.googletone_demod import DEMOD_GOOGLETONE
        
        assert DEMOD_GOOGLETONE.name == "GOOGLETONE"
        assert DEMOD_GOOGLETONE.always_available is True
        assert DEMOD_GOOGLETONE.sample_rate == 22050
        assert DEMOD_GOOGLETONE.complex_samples is False
        assert DEMOD_GOOGLETONE.overlap == 0
        assert DEMOD_GOOGLETONE.deinit is None
    
    def test_host_style_usage(self, generator):
        from googletone.demod.googletone_demod import DEMOD_GOOGLETONE, GoogleToneDemodulator
        
        state = DEMOD_GOOGLETONE.create()
        assert isinstance(state, GoogleToneDemodulator)
        detections = DEMOD_GOOGLETONE.demod(state, generator.generate_pair(3, 8, 0.2))
        assert report_pairs(detections) == [(3, 8)]
        
        DEMOD_GOOGLETONE.init(state)
        assert state.get_statistics()['blocks_processed'] == 0
