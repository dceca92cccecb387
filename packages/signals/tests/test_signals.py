"""Tests for the signals package."""
import numpy as np
import polars as pl
import pytest


class TestHalfSineTemplate:
    def test_rises_and_falls(self):
        from signals.spikes import half_sine_template
        t = half_sine_template(101, peak=2.0)
        assert len(t) == 101
        assert t[0] == 0.0
        assert t[-1] == 0.0
        assert t[50] == pytest.approx(2.0)
        assert np.all(np.diff(t[:51]) > 0)
        assert np.all(np.diff(t[50:]) < 0)

    def test_single_sample(self):
        from signals.spikes import half_sine_template
        np.testing.assert_array_equal(half_sine_template(1, peak=3.0), [3.0])

    def test_zero_length(self):
        from signals.errors import InvalidParameter
        from signals.spikes import half_sine_template
        with pytest.raises(InvalidParameter):
            half_sine_template(0)


class TestGenerateSpikeSignal:
    def test_label_run(self):
        from signals.spikes import generate_spike_signal
        rng = np.random.default_rng(7)
        for _ in range(50):
            s = generate_spike_signal((1, 200), 40, 1.0, 0.0, rng)
            active = np.flatnonzero(s.label)
            assert len(active) == 40
            # contiguous
            assert active[-1] - active[0] == 39
            assert s.index[active[0]] == s.onset
            assert 1 <= s.onset <= 200 - 40 + 1
            assert s.index[active[-1]] <= 200

    def test_shape_and_index(self):
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((1, 1000), 100, 1.0, 0.0, np.random.default_rng(0))
        assert len(s) == 1000
        np.testing.assert_array_equal(s.index, np.arange(1, 1001))
        assert s.inactive_samples == 900

    def test_baseline_zero_outside_spike(self):
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((1, 500), 50, 1.0, 0.0, np.random.default_rng(3))
        assert np.all(s.baseline[s.inactive] == 0.0)
        assert s.baseline[s.active].max() == pytest.approx(1.0, abs=1e-3)

    def test_zero_noise_equals_baseline(self):
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((1, 300), 30, 0.0, 0.0, np.random.default_rng(1))
        np.testing.assert_array_equal(s.amplitude, s.baseline)

    def test_noise_mean_offset(self):
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((1, 20000), 10, 1.0, 5.0, np.random.default_rng(2))
        noise = s.amplitude - s.baseline
        assert abs(noise.mean() - 5.0) < 0.05
        assert abs(noise.std() - 1.0) < 0.05

    def test_seeded_reproducible(self):
        from signals.spikes import generate_spike_signal
        a = generate_spike_signal((1, 300), 30, 1.0, 0.0, np.random.default_rng(11))
        b = generate_spike_signal((1, 300), 30, 1.0, 0.0, np.random.default_rng(11))
        assert a.onset == b.onset
        np.testing.assert_array_equal(a.amplitude, b.amplitude)

    def test_spike_fills_range(self):
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((5, 14), 10, 1.0, 0.0, np.random.default_rng(0))
        assert s.onset == 5
        assert s.inactive_samples == 0

    def test_spike_too_long(self):
        from signals.errors import InvalidParameter
        from signals.spikes import generate_spike_signal
        with pytest.raises(InvalidParameter):
            generate_spike_signal((1, 50), 51, 1.0, 0.0, np.random.default_rng(0))

    def test_negative_noise_std(self):
        from signals.errors import InvalidParameter
        from signals.spikes import generate_spike_signal
        with pytest.raises(InvalidParameter):
            generate_spike_signal((1, 50), 5, -1.0, 0.0, np.random.default_rng(0))

    def test_invalid_parameter_is_value_error(self):
        from signals.spikes import generate_spike_signal
        with pytest.raises(ValueError):
            generate_spike_signal((10, 1), 1, 1.0, 0.0, np.random.default_rng(0))

    def test_arrays_read_only(self):
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((1, 50), 5, 1.0, 0.0, np.random.default_rng(0))
        with pytest.raises(ValueError):
            s.amplitude[0] = 1.0


class TestGenerateSignals:
    def test_count_and_ids(self):
        from signals.spikes import generate_signals
        signals = generate_signals(10, (1, 200), 20, seed=42)
        assert len(signals) == 10
        assert [s.signal_id for s in signals] == [f'signal_{i}' for i in range(10)]

    def test_same_seed_same_signals(self):
        from signals.spikes import generate_signals
        a = generate_signals(5, (1, 200), 20, seed=42)
        b = generate_signals(5, (1, 200), 20, seed=42)
        for x, y in zip(a, b):
            np.testing.assert_array_equal(x.amplitude, y.amplitude)

    def test_signals_differ(self):
        from signals.spikes import generate_signals
        a, b = generate_signals(2, (1, 200), 20, seed=42)
        assert not np.allclose(a.amplitude, b.amplitude)

    def test_prefix_stable(self):
        """Signal k does not depend on how many signals are requested."""
        from signals.spikes import generate_signals
        few = generate_signals(3, (1, 200), 20, seed=5)
        many = generate_signals(8, (1, 200), 20, seed=5)
        for x, y in zip(few, many):
            np.testing.assert_array_equal(x.amplitude, y.amplitude)

    def test_zero_signals(self):
        from signals.errors import InvalidParameter
        from signals.spikes import generate_signals
        with pytest.raises(InvalidParameter):
            generate_signals(0)


class TestSignalModel:
    def test_non_contiguous_rejected(self):
        from signals.errors import InvalidParameter
        from signals.model import Signal
        with pytest.raises(InvalidParameter):
            Signal('s', [1, 2, 3, 4], [0, 0, 0, 0], [0, 0, 0, 0], [1, 0, 1, 0], 1, 2)

    def test_length_mismatch_rejected(self):
        from signals.errors import InvalidParameter
        from signals.model import Signal
        with pytest.raises(InvalidParameter):
            Signal('s', [1, 2, 3], [0, 0], [0, 0, 0], [0, 1, 0], 2, 1)

    def test_window_truncates_activity(self):
        from signals.model import Signal
        s = Signal('s', np.arange(1, 11), np.zeros(10), np.zeros(10),
                   [0, 0, 1, 1, 1, 1, 1, 0, 0, 0], 3, 5)
        np.testing.assert_array_equal(np.flatnonzero(s.window(2)), [2, 3])
        np.testing.assert_array_equal(np.flatnonzero(s.window()), [2, 3, 4, 5, 6])
        np.testing.assert_array_equal(np.flatnonzero(s.window(50)), [2, 3, 4, 5, 6])


class TestFrame:
    def test_canonical_schema(self):
        from signals.frame import signals_to_frame
        from signals.spikes import generate_signals
        signals = generate_signals(3, (1, 100), 10, seed=0)
        df = signals_to_frame(signals)
        assert df.columns == ['signal_id', 'index', 'amplitude', 'baseline', 'label']
        assert len(df) == 300
        assert df['signal_id'].dtype == pl.String
        assert df['index'].dtype == pl.Int64
        assert df['label'].dtype == pl.Int8

    def test_rebuild_from_frame(self, tmp_path):
        from signals.frame import scores_from_frame, signals_from_frame, signals_to_frame
        from signals.spikes import generate_signals
        signals = generate_signals(3, (1, 100), 10, seed=0)
        scores = {s.signal_id: np.arange(len(s), dtype=float) for s in signals}
        path = tmp_path / 'signals.parquet'
        signals_to_frame(signals, scores).write_parquet(path)

        df = pl.read_parquet(path)
        rebuilt = {s.signal_id: s for s in signals_from_frame(df)}
        for s in signals:
            r = rebuilt[s.signal_id]
            assert r.onset == s.onset
            assert r.spike_length == 10
            np.testing.assert_array_equal(r.amplitude, s.amplitude)
        np.testing.assert_array_equal(scores_from_frame(df)['signal_1'], np.arange(100.0))

    def test_score_length_mismatch(self):
        from signals.errors import InvalidParameter
        from signals.frame import signals_to_frame
        from signals.spikes import generate_signals
        signals = generate_signals(1, (1, 100), 10, seed=0)
        with pytest.raises(InvalidParameter):
            signals_to_frame(signals, {'signal_0': np.zeros(5)})

    def test_missing_columns(self):
        from signals.errors import InvalidParameter
        from signals.frame import signals_from_frame
        with pytest.raises(InvalidParameter):
            signals_from_frame(pl.DataFrame({'signal_id': ['a'], 'index': [1]}))
