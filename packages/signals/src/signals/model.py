"""
Signal: one labelled synthetic time series.

    index      sample indices (usually 1..N)
    amplitude  observed value = baseline + noise
    baseline   noise-free value (zero outside the spike)
    label      1 inside the activity run, 0 elsewhere

The label run is a single contiguous block of 1s. Arrays are frozen
after construction so a Signal can be shared between workers.
"""

from dataclasses import dataclass

import numpy as np

from signals.errors import InvalidParameter


@dataclass(frozen=True, eq=False)
class Signal:
    signal_id: str
    index: np.ndarray
    amplitude: np.ndarray
    baseline: np.ndarray
    label: np.ndarray
    onset: int
    spike_length: int

    def __post_init__(self):
        index = _frozen(self.index, np.int64)
        amplitude = _frozen(self.amplitude, np.float64)
        baseline = _frozen(self.baseline, np.float64)
        label = _frozen(self.label, np.int8)

        n = len(index)
        if not (len(amplitude) == len(baseline) == len(label) == n):
            raise InvalidParameter(
                f"signal {self.signal_id!r}: array lengths differ "
                f"(index={n}, amplitude={len(amplitude)}, "
                f"baseline={len(baseline)}, label={len(label)})"
            )
        if np.any((label != 0) & (label != 1)):
            raise InvalidParameter(f"signal {self.signal_id!r}: labels must be 0 or 1")

        active = np.flatnonzero(label)
        if len(active) != self.spike_length:
            raise InvalidParameter(
                f"signal {self.signal_id!r}: {len(active)} active samples, "
                f"expected spike_length={self.spike_length}"
            )
        if len(active) and active[-1] - active[0] + 1 != len(active):
            raise InvalidParameter(f"signal {self.signal_id!r}: activity run is not contiguous")
        if len(active) and index[active[0]] != self.onset:
            raise InvalidParameter(
                f"signal {self.signal_id!r}: onset {self.onset} does not match "
                f"first active index {index[active[0]]}"
            )

        object.__setattr__(self, 'index', index)
        object.__setattr__(self, 'amplitude', amplitude)
        object.__setattr__(self, 'baseline', baseline)
        object.__setattr__(self, 'label', label)

    def __len__(self) -> int:
        return len(self.index)

    @property
    def active(self) -> np.ndarray:
        """Boolean mask of the activity run."""
        return self.label == 1

    @property
    def inactive(self) -> np.ndarray:
        return self.label == 0

    @property
    def inactive_samples(self) -> int:
        return int(np.count_nonzero(self.label == 0))

    def window(self, latency=None) -> np.ndarray:
        """
        Boolean mask of the positive-activity evaluation window.

        The first `latency` samples of the activity run. None means the
        whole run.
        """
        mask = np.zeros(len(self.label), dtype=bool)
        active = np.flatnonzero(self.label)
        if latency is not None:
            active = active[:latency]
        mask[active] = True
        return mask


def _frozen(values, dtype) -> np.ndarray:
    arr = np.array(values, dtype=dtype).flatten()
    arr.setflags(write=False)
    return arr
