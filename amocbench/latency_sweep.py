"""
Latency Cutoff Sweep
====================
For each maximum detection latency K, patches the study config, re-runs
the evaluate stage over one shared set of scored signals, and collects
AMOC area and operating points into a comparison table.

Signals and scores are generated once; only the success window changes.
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import polars as pl

from amocbench.config import load_study_config
from orchestration.pipeline import Pipeline
from signals.errors import InvalidParameter


DEFAULT_LATENCIES = [10, 25, 50, 75, 100]
FAR_BUDGETS = [0.01, 0.05]


def patch_latency(config: Dict[str, Any], latency: Optional[int]) -> Dict[str, Any]:
    """Copy of `config` with evaluation.latency set."""
    patched = copy.deepcopy(config)
    patched['evaluation']['latency'] = latency
    return patched


def sweep_latency(
    config: Optional[Dict[str, Any]] = None,
    latencies: Sequence[int] = DEFAULT_LATENCIES,
    output_dir: Optional[Path] = None,
    verbose: bool = True,
) -> pl.DataFrame:
    """
    Evaluate the same scored signals under several latency cutoffs.

    Returns:
        DataFrame with one row per latency: latency, amoc_area and
        total score at each false-alarm budget in FAR_BUDGETS.
    """
    config = config if config is not None else load_study_config()
    latencies = list(latencies)
    if not latencies:
        raise InvalidParameter("no latencies to sweep")
    bad = [k for k in latencies if int(k) < 1]
    if bad:
        raise InvalidParameter(f"latencies must be >= 1, got {bad}")

    pipeline = Pipeline()
    if verbose:
        print("=" * 60)
        print("  LATENCY CUTOFF SWEEP")
        print("=" * 60)
        print(f"\n  Generating and scoring {config['signals']['n_signals']} signals...")
    context = pipeline.run(config, include=['score'])

    rows: List[Dict[str, Any]] = []
    for i, latency in enumerate(latencies, start=1):
        patched = patch_latency(config, int(latency))
        pipeline.run(patched, context=context, include=['evaluate'], skip=['generate', 'score'])
        curve = context['curve']

        row = {'latency': int(latency), 'amoc_area': curve.area()}
        for budget in FAR_BUDGETS:
            point = curve.operating_point(budget)
            row[f'score_at_far_{budget}'] = point['total_score'] if point else None
        rows.append(row)

        if verbose:
            print(f"  [{i:>2d}/{len(latencies)}] K={int(latency):>4d}  area={row['amoc_area']:.4f}")

    df = pl.DataFrame(rows)

    if verbose:
        best = df.sort('amoc_area', descending=True).row(0, named=True)
        print(f"\n  BEST: K={best['latency']} → AMOC area={best['amoc_area']:.4f}")

    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / 'latency_sweep.csv'
        df.write_csv(path)
        if verbose:
            print(f"  Results saved to {path}")

    return df
