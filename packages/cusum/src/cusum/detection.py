"""
One-sided CUSUM scores.

    S(0) = 0
    S(i) = max(0, S(i-1) + (x(i) - r(i)))

x is the observed signal, r a causal reference of the same length
(see the baseline package). The score climbs while the signal sits
above its reference and resets to zero whenever the accumulation would
go negative. A detection at threshold t is any sample with S(i) > t.
"""

import numpy as np
from typing import Any, Dict, Optional

from baseline.reference import compute_reference
from signals.errors import InvalidParameter
from signals.model import Signal


def cusum_scores(observed: np.ndarray, reference: np.ndarray) -> np.ndarray:
    """
    Batch CUSUM over a whole series.

    Parameters
    ----------
    observed : np.ndarray
        1D time series.
    reference : np.ndarray
        Same-length causal reference.

    Returns
    -------
    np.ndarray
        Read-only score sequence, same length as `observed`. First
        element is 0; a length-1 input gives [0.0].
    """
    x = np.asarray(observed, dtype=np.float64).flatten()
    r = np.asarray(reference, dtype=np.float64).flatten()
    if len(x) != len(r):
        raise InvalidParameter(
            f"observed and reference lengths differ ({len(x)} vs {len(r)})"
        )

    n = len(x)
    scores = np.zeros(n, dtype=np.float64)
    deviation = x - r

    # Reset-at-zero recurrence has no closed form; loop over plain floats
    s = 0.0
    for i, d in enumerate(deviation.tolist()[1:], start=1):
        s = s + d
        if s < 0.0:
            s = 0.0
        scores[i] = s

    scores.setflags(write=False)
    return scores


class CusumDetector:
    """
    Streaming form of cusum_scores.

    Feed one (observed, reference) pair per sample. The first update
    returns 0, matching the batch definition.
    """

    def __init__(self) -> None:
        self.score: float = 0.0
        self.n_updates: int = 0

    def update(self, observed: float, reference: float) -> float:
        if self.n_updates > 0:
            self.score = max(0.0, self.score + (float(observed) - float(reference)))
        self.n_updates += 1
        return self.score

    def reset(self) -> None:
        self.score = 0.0
        self.n_updates = 0


def score_signal(
    signal: Signal,
    reference: str = 'running_mean',
    reference_params: Optional[Dict[str, Any]] = None,
) -> np.ndarray:
    """Compute the named reference for a signal's amplitude, then its scores."""
    ref = compute_reference(signal.amplitude, reference, **(reference_params or {}))
    return cusum_scores(signal.amplitude, ref)
