"""Tests for the baseline package."""
import numpy as np
import pytest


class TestRunningMean:
    def test_cumulative_average(self):
        from baseline.reference import running_mean_reference
        ref = running_mean_reference(np.array([2.0, 4.0, 6.0, 0.0]))
        np.testing.assert_allclose(ref, [2.0, 3.0, 4.0, 3.0])

    def test_causal(self):
        """Changing a future sample never changes an earlier reference value."""
        from baseline.reference import running_mean_reference
        rng = np.random.default_rng(42)
        x = rng.normal(size=200)
        y = x.copy()
        y[150:] += 100.0
        np.testing.assert_array_equal(
            running_mean_reference(x)[:150], running_mean_reference(y)[:150]
        )

    def test_empty(self):
        from baseline.reference import running_mean_reference
        assert len(running_mean_reference(np.array([]))) == 0


class TestConstant:
    def test_value(self):
        from baseline.reference import constant_reference
        np.testing.assert_array_equal(constant_reference(np.zeros(4), 1.5), [1.5] * 4)


class TestEWMA:
    def test_alpha_one_tracks_signal(self):
        from baseline.reference import ewma_reference
        x = np.array([1.0, 5.0, -2.0])
        np.testing.assert_array_equal(ewma_reference(x, alpha=1.0), x)

    def test_recurrence(self):
        from baseline.reference import ewma_reference
        ref = ewma_reference(np.array([0.0, 10.0, 10.0]), alpha=0.5)
        np.testing.assert_allclose(ref, [0.0, 5.0, 7.5])

    def test_causal(self):
        from baseline.reference import ewma_reference
        rng = np.random.default_rng(0)
        x = rng.normal(size=100)
        y = x.copy()
        y[60:] = 0.0
        np.testing.assert_array_equal(ewma_reference(x, 0.2)[:60], ewma_reference(y, 0.2)[:60])

    @pytest.mark.parametrize('alpha', [0.0, -0.1, 1.5])
    def test_bad_alpha(self, alpha):
        from baseline.reference import ewma_reference
        from signals.errors import InvalidParameter
        with pytest.raises(InvalidParameter):
            ewma_reference(np.zeros(3), alpha=alpha)


class TestComputeReference:
    def test_default_is_running_mean(self):
        from baseline.reference import compute_reference, running_mean_reference
        x = np.array([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(compute_reference(x), running_mean_reference(x))

    def test_dispatch_with_params(self):
        from baseline.reference import compute_reference
        np.testing.assert_array_equal(compute_reference(np.zeros(2), 'constant', value=3.0), [3.0, 3.0])

    def test_unknown_method(self):
        from baseline.reference import compute_reference
        from signals.errors import InvalidParameter
        with pytest.raises(InvalidParameter):
            compute_reference(np.zeros(2), 'median')

    def test_unknown_param(self):
        from baseline.reference import compute_reference
        from signals.errors import InvalidParameter
        with pytest.raises(InvalidParameter):
            compute_reference(np.zeros(2), 'running_mean', window=5)

    def test_error_inside_reference_propagates(self):
        from baseline.reference import compute_reference
        from signals.errors import InvalidParameter
        with pytest.raises(TypeError) as exc:
            compute_reference(np.zeros(2), 'constant', value=None)
        assert not isinstance(exc.value, InvalidParameter)
