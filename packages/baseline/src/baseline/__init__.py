"""
Baseline package for the AMOC bench.

The reference a detector measures deviation against. All references
are causal: reference[i] depends only on samples up to and including i.

- running_mean: cumulative average from the first sample (default)
- constant: externally supplied level
- ewma: exponentially weighted moving average
"""

from baseline.reference import (
    REFERENCES,
    compute_reference,
    constant_reference,
    ewma_reference,
    running_mean_reference,
)

__all__ = [
    'REFERENCES',
    'compute_reference',
    'constant_reference',
    'ewma_reference',
    'running_mean_reference',
]
