"""
Causal reference baselines for the CUSUM detector.

The detector accumulates observed[i] - reference[i]. Every reference
here uses only samples 0..i to produce reference[i]:

    running_mean   mean(x[0..i])                      (default)
    constant       a fixed value supplied by the caller
    ewma           m[i] = alpha * x[i] + (1 - alpha) * m[i-1],  m[0] = x[0]
"""

import inspect

import numpy as np
from typing import Callable, Dict

from signals.errors import InvalidParameter


def running_mean_reference(observed: np.ndarray) -> np.ndarray:
    """
    Online cumulative average.

    reference[i] = (x[0] + ... + x[i]) / (i + 1)
    """
    x = np.asarray(observed, dtype=np.float64).flatten()
    if len(x) == 0:
        return np.array([])
    return np.cumsum(x) / np.arange(1, len(x) + 1)


def constant_reference(observed: np.ndarray, value: float = 0.0) -> np.ndarray:
    """Externally supplied constant, e.g. the known noise mean."""
    x = np.asarray(observed, dtype=np.float64).flatten()
    return np.full(len(x), float(value))


def ewma_reference(observed: np.ndarray, alpha: float = 0.05) -> np.ndarray:
    """
    Exponentially weighted moving average.

    Parameters
    ----------
    observed : np.ndarray
        1D time series.
    alpha : float
        Weight of the newest sample, in (0, 1]. alpha=1 tracks the
        signal exactly.
    """
    if not (0.0 < alpha <= 1.0):
        raise InvalidParameter(f"ewma alpha must be in (0, 1], got {alpha}")

    x = np.asarray(observed, dtype=np.float64).flatten()
    ref = np.empty_like(x)
    if len(x) == 0:
        return ref

    ref[0] = x[0]
    for i in range(1, len(x)):
        ref[i] = alpha * x[i] + (1.0 - alpha) * ref[i - 1]
    return ref


REFERENCES: Dict[str, Callable[..., np.ndarray]] = {
    'running_mean': running_mean_reference,
    'constant': constant_reference,
    'ewma': ewma_reference,
}


def compute_reference(observed: np.ndarray, method: str = 'running_mean', **params) -> np.ndarray:
    """
    Compute a reference by name.

    Example:
        compute_reference(x)                          # running mean
        compute_reference(x, 'constant', value=0.0)
        compute_reference(x, 'ewma', alpha=0.1)
    """
    func = REFERENCES.get(method)
    if func is None:
        raise InvalidParameter(
            f"unknown reference {method!r}; expected one of {sorted(REFERENCES)}"
        )
    try:
        inspect.signature(func).bind(observed, **params)
    except TypeError as e:
        raise InvalidParameter(f"bad parameters for reference {method!r}: {e}") from e
    return func(observed, **params)
