"""Threshold sweep: start, end, step -> ordered threshold grid."""

from dataclasses import dataclass
from typing import Any, Dict

import numpy as np

from signals.errors import InvalidParameter


# Grid points within this fraction of a step of `end` still count
_GRID_TOLERANCE = 1e-9


@dataclass(frozen=True)
class ThresholdSweep:
    """
    Inclusive threshold grid.

    ThresholdSweep(-20, 120, 0.5) gives -20.0, -19.5, ..., 120.0
    (281 values). `end` is included when it lies on the grid; otherwise
    the grid stops at the last point below it.
    """
    start: float
    end: float
    step: float

    def __post_init__(self):
        if not np.isfinite([self.start, self.end, self.step]).all():
            raise InvalidParameter(f"threshold sweep must be finite: {self}")
        if self.end < self.start:
            raise InvalidParameter(
                f"threshold sweep end {self.end} is below start {self.start}"
            )
        if self.step <= 0:
            raise InvalidParameter(f"threshold sweep step must be > 0, got {self.step}")

    def __len__(self) -> int:
        return int(np.floor((self.end - self.start) / self.step + _GRID_TOLERANCE)) + 1

    def values(self) -> np.ndarray:
        # start + k*step rather than arange, so float steps do not drift
        return self.start + self.step * np.arange(len(self), dtype=np.float64)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ThresholdSweep':
        """Build from a {'start', 'end', 'step'} mapping."""
        try:
            return cls(float(config['start']), float(config['end']), float(config['step']))
        except KeyError as e:
            raise InvalidParameter(f"threshold sweep is missing {e.args[0]!r}") from e
