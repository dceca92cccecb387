"""
AMOC bench: one command, six modes.

    amocbench run                                   Full study, default settings → ./amoc_study
    amocbench run --config study.yaml --output out  Full study with YAML overrides
    amocbench generate --output out                 Signals + scores only
    amocbench evaluate out/signals.parquet          Sweep thresholds over an existing table
    amocbench stages                                Show the stage DAG
    amocbench verify out                            Re-check output checksums
    amocbench latency --latencies 10 50 100         Compare detection-latency cutoffs
"""

import argparse
import sys
from pathlib import Path

from signals.errors import EmptySignalSet, InvalidParameter


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    commands = {
        'run': _run_main,
        'generate': _generate_main,
        'evaluate': _evaluate_main,
        'stages': _stages_main,
        'verify': _verify_main,
        'latency': _latency_main,
    }
    if not argv or argv[0] not in commands:
        print(__doc__.strip())
        sys.exit(0 if argv and argv[0] in ('-h', '--help') else 2)

    try:
        commands[argv[0]](argv[1:])
    except (InvalidParameter, EmptySignalSet) as e:
        print(f"Error: {e}")
        sys.exit(1)


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='Study YAML; only the keys it sets override the defaults')
    parser.add_argument('--seed', type=int, default=None, help='Override signals.seed')
    parser.add_argument('--workers', type=int, default=None,
                        help='Override evaluation.workers (parallel processes)')
    parser.add_argument('--latency', type=int, default=None,
                        help='Override evaluation.latency (max detection latency in samples)')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress progress output')


def _resolve_config(args: argparse.Namespace) -> dict:
    from amocbench.config import load_study_config

    overrides = {}
    if args.seed is not None:
        overrides.setdefault('signals', {})['seed'] = args.seed
    if args.workers is not None:
        overrides.setdefault('evaluation', {})['workers'] = args.workers
    if args.latency is not None:
        overrides.setdefault('evaluation', {})['latency'] = args.latency
    return load_study_config(args.config, overrides)


def _run_main(argv: list):
    parser = argparse.ArgumentParser(
        prog='amocbench run',
        description='Generate signals, score them with CUSUM and sweep thresholds.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  amocbench run
  amocbench run --config study.yaml --output ~/studies/cusum_running_mean
  amocbench run --seed 7 --workers 4
""",
    )
    parser.add_argument('--output', '-o', type=str, default='amoc_study',
                        help='Study directory (default: ./amoc_study)')
    _add_config_args(parser)
    args = parser.parse_args(argv)

    from amocbench.pipeline import run_study
    config = _resolve_config(args)
    run_study(Path(args.output).expanduser().resolve(), config, verbose=not args.quiet)


def _generate_main(argv: list):
    parser = argparse.ArgumentParser(
        prog='amocbench generate',
        description='Generate scored synthetic signals as signals.parquet.',
    )
    parser.add_argument('--output', '-o', type=str, default='amoc_study',
                        help='Output directory (default: ./amoc_study)')
    _add_config_args(parser)
    args = parser.parse_args(argv)

    from amocbench.pipeline import generate_study_signals
    config = _resolve_config(args)
    generate_study_signals(Path(args.output).expanduser().resolve(), config, verbose=not args.quiet)


def _evaluate_main(argv: list):
    parser = argparse.ArgumentParser(
        prog='amocbench evaluate',
        description='Sweep thresholds over an existing signals.parquet.',
    )
    parser.add_argument('signals', help='Path to signals.parquet')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Directory for amoc.csv (default: beside the signals table)')
    _add_config_args(parser)
    args = parser.parse_args(argv)

    signals_path = Path(args.signals).expanduser().resolve()
    if not signals_path.exists():
        print(f"Error: {signals_path} does not exist")
        sys.exit(1)

    from amocbench.pipeline import evaluate_signal_table
    config = _resolve_config(args)
    output_dir = Path(args.output).expanduser().resolve() if args.output else signals_path.parent
    evaluate_signal_table(signals_path, output_dir, config, verbose=not args.quiet)


def _stages_main(argv: list):
    argparse.ArgumentParser(prog='amocbench stages', description='Show the stage DAG.').parse_args(argv)

    from orchestration.pipeline import Pipeline
    for i, entry in enumerate(Pipeline().plan(), start=1):
        print(f"  [{i}] {entry['stage']:<10} {entry['package']:<8} {entry['function']}  ({entry['status']})")


def _verify_main(argv: list):
    parser = argparse.ArgumentParser(
        prog='amocbench verify',
        description='Re-hash a study directory against its checksums.json.',
    )
    parser.add_argument('path', help='Study directory')
    args = parser.parse_args(argv)

    study_dir = Path(args.path).expanduser().resolve()
    if not (study_dir / 'checksums.json').exists():
        print(f"Error: no checksums.json in {study_dir}")
        sys.exit(1)

    from orchestration.checksums import verify_checksums
    report = verify_checksums(study_dir)
    if report['ok']:
        print("IDENTICAL -- all outputs match checksums.json")
        return
    print("DIFFERENCES FOUND")
    for key, mark in (('changed', '~'), ('missing', '-'), ('added', '+')):
        for name in report[key]:
            print(f"  {mark} {name}")
    sys.exit(1)


def _latency_main(argv: list):
    parser = argparse.ArgumentParser(
        prog='amocbench latency',
        description='Compare AMOC curves under several maximum detection latencies.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  amocbench latency
  amocbench latency --latencies 5 20 100 --output ~/studies/latency
""",
    )
    parser.add_argument('--latencies', type=int, nargs='+', default=None,
                        help='Latency cutoffs in samples (default: 10 25 50 75 100)')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Directory for latency_sweep.csv (default: print only)')
    _add_config_args(parser)
    args = parser.parse_args(argv)

    from amocbench.latency_sweep import DEFAULT_LATENCIES, sweep_latency
    config = _resolve_config(args)
    output_dir = Path(args.output).expanduser().resolve() if args.output else None
    sweep_latency(config, args.latencies or DEFAULT_LATENCIES, output_dir, verbose=not args.quiet)


if __name__ == "__main__":
    main()
