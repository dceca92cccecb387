"""
Stage functions: the glue between the study config and the packages.

Each stage takes the shared context and the study config and returns
the context entries it produces. No math lives here.

    generate   config['signals']                 -> signals
    score      signals, config['detector']       -> scores
    evaluate   signals, scores, config['evaluation'] -> curve
"""

from concurrent.futures import ProcessPoolExecutor
from functools import partial
from typing import Any, Dict

from amoc.evaluate import evaluate_amoc
from amoc.sweep import ThresholdSweep
from cusum.detection import score_signal
from signals.spikes import generate_signals


def generate(context: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
    cfg = config['signals']
    signals = generate_signals(
        n_signals=int(cfg['n_signals']),
        index_range=(int(cfg['index_start']), int(cfg['index_end'])),
        spike_length=int(cfg['spike_length']),
        noise_std=float(cfg['noise_std']),
        noise_mean=float(cfg['noise_mean']),
        seed=cfg.get('seed'),
        peak=float(cfg.get('peak', 1.0)),
    )
    return {'signals': signals}


def score(context: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
    cfg = config['detector']
    workers = int(config.get('evaluation', {}).get('workers', 1))
    signals = context['signals']
    scorer = partial(
        score_signal,
        reference=cfg.get('reference', 'running_mean'),
        reference_params=cfg.get('reference_params') or {},
    )

    if workers > 1 and len(signals) > 1:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(scorer, signals, chunksize=max(1, len(signals) // (4 * workers))))
    else:
        results = [scorer(s) for s in signals]

    return {'scores': {s.signal_id: r for s, r in zip(signals, results)}}


def evaluate(context: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
    cfg = config['evaluation']
    latency = cfg.get('latency')
    curve = evaluate_amoc(
        context['signals'],
        context['scores'],
        ThresholdSweep.from_config(cfg['thresholds']),
        latency=int(latency) if latency is not None else None,
        workers=int(cfg.get('workers', 1)),
    )
    return {'curve': curve}
