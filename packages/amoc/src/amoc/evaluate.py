"""
AMOC evaluation: threshold sweep over scored signals.

For each threshold t and each signal:

    detected(i)     = score(i) > t
    false alarm(i)  = detected(i) and label(i) == 0
    outcome         = 1 if any detected sample falls in the first
                      `latency` samples of the activity run, else 0

Signals are tallied independently into a SignalTally keyed by
signal_id, then reduced:

    false_alarm_rate(t) = sum(false alarms) / sum(inactive samples)
    total_score(t)      = mean(outcome)

Repeated detections inside one signal are not weighted; each signal
counts once, as a success or a failure.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import polars as pl

from amoc.sweep import ThresholdSweep
from signals.errors import EmptySignalSet, InvalidParameter
from signals.model import Signal


logger = logging.getLogger(__name__)

AMOC_COLUMNS = ['threshold', 'false_alarm_rate', 'total_score']


@dataclass
class SignalTally:
    """Per-signal counts for every threshold in the sweep."""
    signal_id: str
    detected: np.ndarray        # (n_thresholds,) 0/1 outcome
    false_alarms: np.ndarray    # (n_thresholds,) detected inactive samples
    inactive_samples: int


@dataclass
class AmocCurve:
    """One (threshold, false_alarm_rate, total_score) row per swept threshold."""
    thresholds: np.ndarray
    false_alarm_rate: np.ndarray
    total_score: np.ndarray
    n_signals: int

    def __len__(self) -> int:
        return len(self.thresholds)

    def rows(self) -> List[Tuple[float, float, float]]:
        return [
            (float(t), float(f), float(s))
            for t, f, s in zip(self.thresholds, self.false_alarm_rate, self.total_score)
        ]

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame({
            'threshold': self.thresholds,
            'false_alarm_rate': self.false_alarm_rate,
            'total_score': self.total_score,
        }).with_columns([pl.col(c).cast(pl.Float64) for c in AMOC_COLUMNS])

    def area(self) -> float:
        """
        Trapezoidal area under the observed curve points.

        Points are ordered by false-alarm rate (ties by score). No
        (0, 0) or (1, 1) end points are added.
        """
        if len(self) < 2:
            return 0.0
        order = np.lexsort((self.total_score, self.false_alarm_rate))
        x = self.false_alarm_rate[order]
        y = self.total_score[order]
        return float(np.sum(np.diff(x) * (y[1:] + y[:-1]) / 2.0))

    def operating_point(self, max_false_alarm_rate: float) -> Optional[Dict[str, float]]:
        """
        Best total score with false_alarm_rate <= the given budget.

        Ties go to the higher (more conservative) threshold. None if no
        swept threshold meets the budget.
        """
        ok = np.flatnonzero(self.false_alarm_rate <= max_false_alarm_rate)
        if len(ok) == 0:
            return None
        best = ok[np.lexsort((self.thresholds[ok], self.total_score[ok]))[-1]]
        return {
            'threshold': float(self.thresholds[best]),
            'false_alarm_rate': float(self.false_alarm_rate[best]),
            'total_score': float(self.total_score[best]),
        }


def tally_signal(
    signal: Signal,
    scores: np.ndarray,
    thresholds: np.ndarray,
    latency: Optional[int] = None,
) -> SignalTally:
    """
    Count detections and false alarms for one signal at every threshold.

    Parameters
    ----------
    signal : Signal
        Labelled signal.
    scores : np.ndarray
        Detector scores, same length as the signal.
    thresholds : np.ndarray
        Thresholds to evaluate.
    latency : int or None
        Only the first `latency` active samples count toward a
        successful detection. None means the whole activity run.
    """
    scores = np.asarray(scores, dtype=np.float64).flatten()
    thresholds = np.asarray(thresholds, dtype=np.float64).flatten()
    if len(scores) != len(signal):
        raise InvalidParameter(
            f"signal {signal.signal_id!r}: {len(scores)} scores for {len(signal)} samples"
        )

    # (n_thresholds, n_samples)
    detected = scores[np.newaxis, :] > thresholds[:, np.newaxis]
    window = signal.window(latency)
    inactive = signal.inactive

    return SignalTally(
        signal_id=signal.signal_id,
        detected=np.any(detected & window, axis=1).astype(np.int64),
        false_alarms=np.count_nonzero(detected & inactive, axis=1).astype(np.int64),
        inactive_samples=int(np.count_nonzero(inactive)),
    )


def aggregate_tallies(
    tallies: Mapping[str, SignalTally],
    thresholds: np.ndarray,
) -> AmocCurve:
    """Reduce per-signal tallies into the AMOC curve. Order-independent."""
    if not tallies:
        raise EmptySignalSet("no signal tallies to aggregate")

    thresholds = np.asarray(thresholds, dtype=np.float64).flatten()
    n_thresholds = len(thresholds)

    detected = np.zeros(n_thresholds, dtype=np.int64)
    false_alarms = np.zeros(n_thresholds, dtype=np.int64)
    inactive_samples = 0
    for tally in tallies.values():
        detected += tally.detected
        false_alarms += tally.false_alarms
        inactive_samples += tally.inactive_samples

    if inactive_samples > 0:
        false_alarm_rate = false_alarms / inactive_samples
    else:
        # spikes fill every signal: nothing can be a false alarm
        false_alarm_rate = np.zeros(n_thresholds, dtype=np.float64)

    return AmocCurve(
        thresholds=thresholds,
        false_alarm_rate=false_alarm_rate.astype(np.float64),
        total_score=detected / len(tallies),
        n_signals=len(tallies),
    )


def evaluate_amoc(
    signals: Sequence[Signal],
    scores: Union[Mapping[str, np.ndarray], Sequence[np.ndarray]],
    thresholds: Union[ThresholdSweep, Sequence[float], np.ndarray],
    latency: Optional[int] = None,
    workers: int = 1,
) -> AmocCurve:
    """
    Sweep thresholds over a scored signal set.

    Args:
        signals: Labelled signals.
        scores: Score arrays keyed by signal_id, or a sequence aligned
                with `signals`.
        thresholds: A ThresholdSweep or explicit threshold values.
        latency: Maximum detection latency in samples (None = whole
                 activity run).
        workers: Processes used to tally signals. 1 runs inline.

    Returns:
        AmocCurve with one row per threshold, in the order given.

    Raises:
        EmptySignalSet: no signals.
        InvalidParameter: empty threshold set, bad latency, duplicate
                          signal IDs, or score/signal length mismatch.
    """
    signals = list(signals)
    if not signals:
        raise EmptySignalSet("cannot evaluate an empty signal set")

    if isinstance(thresholds, ThresholdSweep):
        thresholds = thresholds.values()
    thresholds = np.asarray(thresholds, dtype=np.float64).flatten()
    if len(thresholds) == 0:
        raise InvalidParameter("threshold set is empty")
    if latency is not None and latency < 1:
        raise InvalidParameter(f"latency must be >= 1, got {latency}")

    ids = [s.signal_id for s in signals]
    if len(set(ids)) != len(ids):
        raise InvalidParameter("signal IDs must be unique")

    if isinstance(scores, Mapping):
        missing = [i for i in ids if i not in scores]
        if missing:
            raise InvalidParameter(f"no scores for signals: {missing[:5]}")
        score_list = [scores[i] for i in ids]
    else:
        score_list = list(scores)
        if len(score_list) != len(signals):
            raise InvalidParameter(
                f"{len(score_list)} score sequences for {len(signals)} signals"
            )

    tallies: Dict[str, SignalTally] = {}
    if workers > 1 and len(signals) > 1:
        logger.debug("tallying %d signals on %d workers", len(signals), workers)
        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(tally_signal, signal, score, thresholds, latency)
                for signal, score in zip(signals, score_list)
            ]
            for fut in as_completed(futures):
                tally = fut.result()
                tallies[tally.signal_id] = tally
    else:
        for signal, score in zip(signals, score_list):
            tallies[signal.signal_id] = tally_signal(signal, score, thresholds, latency)

    curve = aggregate_tallies(tallies, thresholds)
    logger.debug(
        "AMOC over %d signals x %d thresholds, area=%.4f",
        curve.n_signals, len(curve), curve.area(),
    )
    return curve
