"""
Synthetic spike signals with ground-truth activity labels.

Each signal is flat zero, then a half-sine spike, then flat zero again,
with i.i.d. Gaussian noise added to every sample:

    baseline[k] = peak * sin(pi * k / (L - 1))    k = 0..L-1 from onset
    amplitude   = baseline + N(noise_mean, noise_std)
    label       = 1 for onset <= i < onset + L

The onset is drawn uniformly so the whole spike fits in the index range.
All randomness comes from the Generator or seed the caller passes in.
"""

from typing import List, Optional, Tuple

import numpy as np

from signals.errors import InvalidParameter
from signals.model import Signal


# Defaults
DEFAULT_INDEX_RANGE = (1, 1000)
DEFAULT_SPIKE_LENGTH = 100
DEFAULT_NOISE_STD = 1.0
DEFAULT_NOISE_MEAN = 0.0
DEFAULT_PEAK = 1.0


def half_sine_template(length: int, peak: float = DEFAULT_PEAK) -> np.ndarray:
    """
    Spike shape: rises from 0 to `peak` and back to 0 over `length` samples.

    A length-1 spike is the single value `peak`.
    """
    if length < 1:
        raise InvalidParameter(f"spike length must be >= 1, got {length}")
    if length == 1:
        return np.array([float(peak)])
    k = np.arange(length, dtype=np.float64)
    template = peak * np.sin(np.pi * k / (length - 1))
    # sin(pi) is ~1e-16, not 0
    template[-1] = 0.0
    return template


def generate_spike_signal(
    index_range: Tuple[int, int],
    spike_length: int,
    noise_std: float,
    noise_mean: float,
    rng: np.random.Generator,
    peak: float = DEFAULT_PEAK,
    signal_id: str = 'signal_0',
) -> Signal:
    """
    Generate one labelled spike signal.

    Args:
        index_range: Inclusive (first, last) sample indices.
        spike_length: Number of active samples.
        noise_std: Standard deviation of the additive Gaussian noise.
        noise_mean: Mean of the additive Gaussian noise.
        rng: Random source for onset placement and noise.
        peak: Spike height.
        signal_id: Identifier carried on the Signal.

    Returns:
        Signal with amplitude, baseline and label arrays.

    Raises:
        InvalidParameter: if the spike cannot fit the index range, or a
        length/noise parameter is out of range.
    """
    first, last = (int(v) for v in index_range)
    if last < first:
        raise InvalidParameter(f"empty index range ({first}, {last})")
    if spike_length < 1:
        raise InvalidParameter(f"spike_length must be >= 1, got {spike_length}")
    n_samples = last - first + 1
    if spike_length > n_samples:
        raise InvalidParameter(
            f"spike_length {spike_length} exceeds the {n_samples} samples "
            f"in index range ({first}, {last})"
        )
    if noise_std < 0:
        raise InvalidParameter(f"noise_std must be >= 0, got {noise_std}")

    index = np.arange(first, last + 1, dtype=np.int64)

    # Generator.integers upper bound is exclusive
    onset = int(rng.integers(first, last - spike_length + 2))
    start = onset - first

    baseline = np.zeros(n_samples, dtype=np.float64)
    baseline[start:start + spike_length] = half_sine_template(spike_length, peak)

    label = np.zeros(n_samples, dtype=np.int8)
    label[start:start + spike_length] = 1

    noise = rng.normal(noise_mean, noise_std, size=n_samples)

    return Signal(
        signal_id=signal_id,
        index=index,
        amplitude=baseline + noise,
        baseline=baseline,
        label=label,
        onset=onset,
        spike_length=spike_length,
    )


def generate_signals(
    n_signals: int,
    index_range: Tuple[int, int] = DEFAULT_INDEX_RANGE,
    spike_length: int = DEFAULT_SPIKE_LENGTH,
    noise_std: float = DEFAULT_NOISE_STD,
    noise_mean: float = DEFAULT_NOISE_MEAN,
    seed: Optional[int] = None,
    peak: float = DEFAULT_PEAK,
) -> List[Signal]:
    """
    Generate a labelled signal set from a single seed.

    Each signal draws from its own child stream of the seed, so signal k
    is the same whether it is built alone, in a loop or in a worker.
    IDs are 'signal_0' .. 'signal_{n-1}'.
    """
    if n_signals < 1:
        raise InvalidParameter(f"n_signals must be >= 1, got {n_signals}")

    children = np.random.SeedSequence(seed).spawn(n_signals)
    return [
        generate_spike_signal(
            index_range=index_range,
            spike_length=spike_length,
            noise_std=noise_std,
            noise_mean=noise_mean,
            rng=np.random.default_rng(child),
            peak=peak,
            signal_id=f'signal_{i}',
        )
        for i, child in enumerate(children)
    ]
