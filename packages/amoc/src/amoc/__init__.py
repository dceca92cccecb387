"""
AMOC package for the AMOC bench.

Activity Monitor Operating Characteristic: the event-detection analogue
of an ROC curve. Sweeps a decision threshold over detector scores and
reports, per threshold:

- false_alarm_rate: detected inactive samples / inactive samples
- total_score: fraction of signals detected within the latency window

Aggregation is an explicit reduction over per-signal tallies keyed by
signal_id, so signals can be tallied in any order or in parallel.
"""

from amoc.evaluate import (
    AMOC_COLUMNS,
    AmocCurve,
    SignalTally,
    aggregate_tallies,
    evaluate_amoc,
    tally_signal,
)
from amoc.sweep import ThresholdSweep

__all__ = [
    'AMOC_COLUMNS',
    'AmocCurve',
    'SignalTally',
    'ThresholdSweep',
    'aggregate_tallies',
    'evaluate_amoc',
    'tally_signal',
]
