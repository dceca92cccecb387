"""
Signals package for the AMOC bench.

Labelled synthetic time series for detector evaluation:
- Signal: observed amplitude, noise-free baseline, 0/1 activity label
- Spike generator: half-sine activity embedded in Gaussian noise
- Frame conversion: long-format polars table in and out

Every other package consumes Signal objects from here. The two error
types shared by the whole bench live here too.
"""

from signals.errors import EmptySignalSet, InvalidParameter
from signals.model import Signal
from signals.spikes import generate_signals, generate_spike_signal, half_sine_template
from signals.frame import scores_from_frame, signals_from_frame, signals_to_frame

__all__ = [
    'EmptySignalSet',
    'InvalidParameter',
    'Signal',
    'generate_signals',
    'generate_spike_signal',
    'half_sine_template',
    'scores_from_frame',
    'signals_from_frame',
    'signals_to_frame',
]
