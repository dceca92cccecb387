"""
Full study: config in, AMOC table out.
Every run is fresh. All output files overwritten.

Outputs (in the study directory):
    signals.parquet   long-format signals with detector scores
    amoc.csv          threshold, false_alarm_rate, total_score
    study.yaml        the resolved config the run used
    checksums.json    sha256 of every output, for reproducibility
"""

from pathlib import Path
from typing import Any, Dict, Optional

import polars as pl

from amocbench.config import dump_study_config, load_study_config
from orchestration.checksums import write_checksums
from orchestration.pipeline import Pipeline
from signals.frame import scores_from_frame, signals_from_frame, signals_to_frame


SIGNALS_FILE = "signals.parquet"
AMOC_FILE = "amoc.csv"
CONFIG_FILE = "study.yaml"


def run_study(
    output_dir: Path,
    config: Optional[Dict[str, Any]] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Run generate → score → evaluate and write every output.

    Args:
        output_dir: Study directory (created if needed).
        config: Resolved study config. Defaults to STUDY_CONFIG.
        verbose: Print progress.

    Returns:
        dict with the AmocCurve ('curve'), the signal count, the output
        paths and the study checksum.
    """
    config = config if config is not None else load_study_config()
    output_dir = Path(output_dir)
    if output_dir.exists() and verbose:
        print(f"  Overwriting existing output: {output_dir}")
    output_dir.mkdir(parents=True, exist_ok=True)

    sig = config['signals']
    sweep = config['evaluation']['thresholds']
    pipeline = Pipeline()

    if verbose:
        print(f"=== AMOC study: {output_dir.name} ===\n")
        print(f"[1/4] Generating {sig['n_signals']} signals "
              f"(index {sig['index_start']}..{sig['index_end']}, spike {sig['spike_length']}, "
              f"noise N({sig['noise_mean']}, {sig['noise_std']}), seed={sig['seed']})...")
    context = pipeline.run(config, include=['generate'])

    if verbose:
        print(f"[2/4] Scoring with CUSUM (reference={config['detector']['reference']})...")
    pipeline.run(config, context=context, include=['score'], skip=['generate'])

    if verbose:
        print(f"[3/4] Sweeping thresholds {sweep['start']}..{sweep['end']} step {sweep['step']}...")
    pipeline.run(config, context=context, include=['evaluate'], skip=['generate', 'score'])
    curve = context['curve']

    if verbose:
        print("[4/4] Writing outputs...")
    signals_path = output_dir / SIGNALS_FILE
    signals_to_frame(context['signals'], context['scores']).write_parquet(signals_path)
    amoc_path = _write_amoc(curve, output_dir)
    config_path = dump_study_config(config, output_dir / CONFIG_FILE)
    manifest = write_checksums(output_dir)

    if verbose:
        _print_summary(curve)
        print(f"\n  → {amoc_path}")

    return {
        'curve': curve,
        'n_signals': len(context['signals']),
        'signals_path': signals_path,
        'amoc_path': amoc_path,
        'config_path': config_path,
        'study_checksum': manifest['study_checksum'],
    }


def generate_study_signals(
    output_dir: Path,
    config: Optional[Dict[str, Any]] = None,
    verbose: bool = True,
) -> Path:
    """Generate and score signals only; write signals.parquet."""
    config = config if config is not None else load_study_config()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    context = Pipeline().run(config, include=['score'])
    path = output_dir / SIGNALS_FILE
    signals_to_frame(context['signals'], context['scores']).write_parquet(path)

    if verbose:
        n = len(context['signals'])
        print(f"  {n} signals × {len(context['signals'][0])} samples → {path}")
    return path


def evaluate_signal_table(
    signals_path: Path,
    output_dir: Optional[Path] = None,
    config: Optional[Dict[str, Any]] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Sweep thresholds over an existing signals.parquet.

    Uses the table's 'score' column when present, otherwise scores the
    signals with the configured detector first.
    """
    config = config if config is not None else load_study_config()
    signals_path = Path(signals_path)
    df = pl.read_parquet(signals_path)

    context = {'signals': signals_from_frame(df)}
    skip = ['generate']
    if 'score' in df.columns:
        context['scores'] = scores_from_frame(df)
        skip.append('score')
    elif verbose:
        print(f"  {signals_path.name} has no scores, scoring with {config['detector']['reference']}")

    Pipeline().run(config, context=context, skip=skip)
    curve = context['curve']

    result = {'curve': curve, 'n_signals': len(context['signals'])}
    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        result['amoc_path'] = _write_amoc(curve, output_dir)
    if verbose:
        _print_summary(curve)
    return result


def _write_amoc(curve, output_dir: Path) -> Path:
    path = output_dir / AMOC_FILE
    curve.to_frame().write_csv(path)
    return path


def _print_summary(curve) -> None:
    print(f"\n  {curve.n_signals} signals × {len(curve)} thresholds")
    print(f"  AMOC area: {curve.area():.4f}")
    for budget in (0.01, 0.05, 0.1):
        point = curve.operating_point(budget)
        if point is None:
            print(f"  FAR <= {budget:<5}: no threshold qualifies")
        else:
            print(f"  FAR <= {budget:<5}: score={point['total_score']:.3f} "
                  f"at threshold={point['threshold']:g} (FAR={point['false_alarm_rate']:.4f})")
