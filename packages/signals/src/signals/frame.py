"""
Long-format table conversion for signal sets.

One row per (signal_id, index):

    signal_id  str
    index      Int64
    amplitude  Float64
    baseline   Float64
    label      Int8
    score      Float64   (optional, detector output)

Rows are sorted by signal_id then index. Onset and spike length are not
stored; they are recovered from the label run on the way back in.
"""

from typing import Dict, List, Mapping, Optional

import numpy as np
import polars as pl

from signals.errors import InvalidParameter
from signals.model import Signal


SIGNAL_COLUMNS = ['signal_id', 'index', 'amplitude', 'baseline', 'label']


def signals_to_frame(
    signals: List[Signal],
    scores: Optional[Mapping[str, np.ndarray]] = None,
) -> pl.DataFrame:
    """Build the long-format table. `scores` is keyed by signal_id."""
    frames = []
    for signal in signals:
        n = len(signal)
        columns = {
            'signal_id': [signal.signal_id] * n,
            'index': signal.index,
            'amplitude': signal.amplitude,
            'baseline': signal.baseline,
            'label': signal.label,
        }
        if scores is not None:
            score = np.asarray(scores[signal.signal_id], dtype=np.float64)
            if len(score) != n:
                raise InvalidParameter(
                    f"signal {signal.signal_id!r}: {len(score)} scores for {n} samples"
                )
            columns['score'] = score
        frames.append(pl.DataFrame(columns))

    if not frames:
        schema = {
            'signal_id': pl.String,
            'index': pl.Int64,
            'amplitude': pl.Float64,
            'baseline': pl.Float64,
            'label': pl.Int8,
        }
        if scores is not None:
            schema['score'] = pl.Float64
        return pl.DataFrame(schema=schema)

    df = pl.concat(frames).sort(['signal_id', 'index'])

    casts = [
        pl.col('signal_id').cast(pl.String),
        pl.col('index').cast(pl.Int64),
        pl.col('amplitude').cast(pl.Float64),
        pl.col('baseline').cast(pl.Float64),
        pl.col('label').cast(pl.Int8),
    ]
    if 'score' in df.columns:
        casts.append(pl.col('score').cast(pl.Float64))
    return df.with_columns(casts)


def signals_from_frame(df: pl.DataFrame) -> List[Signal]:
    """Rebuild Signal objects from the long-format table."""
    missing = [c for c in SIGNAL_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidParameter(f"signal table is missing columns: {missing}")

    signals = []
    for part in df.sort(['signal_id', 'index']).partition_by('signal_id', maintain_order=True):
        signal_id = part['signal_id'][0]
        index = part['index'].to_numpy()
        label = part['label'].to_numpy()
        active = np.flatnonzero(label)
        onset = int(index[active[0]]) if len(active) else int(index[0])
        signals.append(Signal(
            signal_id=signal_id,
            index=index,
            amplitude=part['amplitude'].to_numpy(),
            baseline=part['baseline'].to_numpy(),
            label=label,
            onset=onset,
            spike_length=len(active),
        ))
    return signals


def scores_from_frame(df: pl.DataFrame) -> Dict[str, np.ndarray]:
    """Per-signal score arrays from a table that carries a 'score' column."""
    if 'score' not in df.columns:
        raise InvalidParameter("signal table has no 'score' column")
    return {
        part['signal_id'][0]: part['score'].to_numpy()
        for part in df.sort(['signal_id', 'index']).partition_by('signal_id', maintain_order=True)
    }
