"""Tests for the cusum package."""
import numpy as np
import pytest


class TestCusumScores:
    def test_recurrence_with_reset(self):
        from cusum.detection import cusum_scores
        x = np.array([5.0, 1.0, -3.0, 2.0, 0.5])
        scores = cusum_scores(x, np.zeros(5))
        np.testing.assert_allclose(scores, [0.0, 1.0, 0.0, 2.0, 2.5])

    def test_first_score_zero_and_nonnegative(self):
        from baseline.reference import running_mean_reference
        from cusum.detection import cusum_scores
        rng = np.random.default_rng(42)
        for _ in range(20):
            x = rng.normal(size=500)
            scores = cusum_scores(x, running_mean_reference(x))
            assert scores[0] == 0.0
            assert np.all(scores >= 0.0)

    def test_single_sample(self):
        from cusum.detection import cusum_scores
        np.testing.assert_array_equal(cusum_scores(np.array([7.0]), np.array([0.0])), [0.0])

    def test_empty(self):
        from cusum.detection import cusum_scores
        assert len(cusum_scores(np.array([]), np.array([]))) == 0

    def test_length_mismatch(self):
        from cusum.detection import cusum_scores
        from signals.errors import InvalidParameter
        with pytest.raises(InvalidParameter):
            cusum_scores(np.zeros(3), np.zeros(4))

    def test_read_only(self):
        from cusum.detection import cusum_scores
        scores = cusum_scores(np.ones(3), np.zeros(3))
        with pytest.raises(ValueError):
            scores[0] = 1.0

    def test_causal(self):
        """Scores before a change in the input are unaffected by it."""
        from baseline.reference import running_mean_reference
        from cusum.detection import cusum_scores
        rng = np.random.default_rng(1)
        x = rng.normal(size=300)
        y = x.copy()
        y[200:] += 10.0
        a = cusum_scores(x, running_mean_reference(x))
        b = cusum_scores(y, running_mean_reference(y))
        np.testing.assert_array_equal(a[:200], b[:200])

    def test_rises_through_noise_free_spike(self):
        """Constant reference at the signal mean, no noise: score climbs on the rising half."""
        from cusum.detection import cusum_scores
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((1, 1000), 100, 0.0, 0.0, np.random.default_rng(3))
        x = s.amplitude
        scores = cusum_scores(x, np.full(len(x), x.mean()))

        assert np.all(scores >= 0.0)
        start = np.flatnonzero(s.label)[0]
        peak = start + 49
        above = start + np.flatnonzero(x[start:peak + 1] > x.mean())[0]
        assert np.all(np.diff(scores[above:peak + 1]) > 0)
        # flat zero before the spike never accumulates
        assert np.all(scores[:start] == 0.0)

    def test_spike_drives_max_score(self):
        from baseline.reference import running_mean_reference
        from cusum.detection import cusum_scores
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((1, 1000), 100, 1.0, 0.0, np.random.default_rng(9), peak=5.0)
        scores = cusum_scores(s.amplitude, running_mean_reference(s.amplitude))
        active = np.flatnonzero(s.label)
        assert scores[active].max() > np.max(scores[:active[0]], initial=0.0)


class TestCusumDetector:
    def test_matches_batch(self):
        from baseline.reference import running_mean_reference
        from cusum.detection import CusumDetector, cusum_scores
        rng = np.random.default_rng(0)
        x = rng.normal(size=400) + np.r_[np.zeros(200), np.ones(200)]
        ref = running_mean_reference(x)
        det = CusumDetector()
        online = [det.update(xi, ri) for xi, ri in zip(x, ref)]
        np.testing.assert_allclose(online, cusum_scores(x, ref))

    def test_reset(self):
        from cusum.detection import CusumDetector
        det = CusumDetector()
        det.update(0.0, 0.0)
        assert det.update(3.0, 0.0) == 3.0
        det.reset()
        assert det.update(3.0, 0.0) == 0.0


class TestScoreSignal:
    def test_default_reference(self):
        from baseline.reference import running_mean_reference
        from cusum.detection import cusum_scores, score_signal
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((1, 200), 20, 1.0, 0.0, np.random.default_rng(4))
        expected = cusum_scores(s.amplitude, running_mean_reference(s.amplitude))
        np.testing.assert_array_equal(score_signal(s), expected)

    def test_constant_reference(self):
        from cusum.detection import cusum_scores, score_signal
        from signals.spikes import generate_spike_signal
        s = generate_spike_signal((1, 200), 20, 1.0, 0.0, np.random.default_rng(4))
        scores = score_signal(s, 'constant', {'value': 0.5})
        np.testing.assert_array_equal(scores, cusum_scores(s.amplitude, np.full(200, 0.5)))
