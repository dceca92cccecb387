"""
CUSUM package for the AMOC bench.

One-sided cumulative-sum change detector:
- cusum_scores: batch score sequence from (observed, reference)
- CusumDetector: the same recurrence one sample at a time
- score_signal: reference + scores for a generated Signal

Scores feed the amoc evaluator, which thresholds them.
"""

from cusum.detection import CusumDetector, cusum_scores, score_signal

__all__ = ['CusumDetector', 'cusum_scores', 'score_signal']
