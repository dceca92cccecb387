"""
Study Configuration
===================
Every knob of an AMOC study: signal generation, detector reference,
threshold sweep. Single source of truth for defaults; a study YAML only
needs the keys it changes.

Usage:
    from amocbench.config.study_config import STUDY_CONFIG, get_setting
    spike_length = get_setting('signals.spike_length')

    config = load_study_config('study.yaml')
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from baseline.reference import REFERENCES
from signals.errors import InvalidParameter


STUDY_CONFIG = {

    # =================================================================
    # Synthetic signal set
    # =================================================================
    'signals': {
        'n_signals': 100,
        'index_start': 1,
        'index_end': 1000,
        'spike_length': 100,
        'peak': 1.0,
        'noise_std': 1.0,
        'noise_mean': 0.0,
        'seed': 42,
    },

    # =================================================================
    # Detector: one-sided CUSUM against a causal reference
    # =================================================================
    'detector': {
        'reference': 'running_mean',    # running_mean | constant | ewma
        'reference_params': {},         # e.g. {'value': 0.0} or {'alpha': 0.05}
    },

    # =================================================================
    # AMOC evaluation
    # =================================================================
    'evaluation': {
        'thresholds': {
            'start': -20.0,
            'end': 120.0,
            'step': 0.5,
        },
        # Max detection latency in samples; null = whole activity run
        'latency': None,
        'workers': 1,
    },
}


def get_setting(path: str, default=None, config: Optional[Dict[str, Any]] = None):
    """
    Get a setting by dot-notation path.

    Example:
        get_setting('signals.spike_length')          # Returns 100
        get_setting('evaluation.thresholds.step')    # Returns 0.5
    """
    value = STUDY_CONFIG if config is None else config
    for key in path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge `overrides` onto a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(config: Dict[str, Any]) -> List[str]:
    """Check a study config for consistency. Returns a list of errors."""
    errors = []

    unknown = sorted(set(config) - set(STUDY_CONFIG))
    if unknown:
        errors.append(f"unknown sections: {unknown}")
    for section, defaults in STUDY_CONFIG.items():
        extra = sorted(set(config.get(section) or {}) - set(defaults))
        if extra:
            errors.append(f"unknown keys in {section}: {extra}")

    sig = config.get('signals', {})
    try:
        n_samples = int(sig['index_end']) - int(sig['index_start']) + 1
        if int(sig['n_signals']) < 1:
            errors.append("signals.n_signals must be >= 1")
        if n_samples < 1:
            errors.append("signals.index_end must be >= signals.index_start")
        if int(sig['spike_length']) < 1:
            errors.append("signals.spike_length must be >= 1")
        elif int(sig['spike_length']) > n_samples:
            errors.append(f"signals.spike_length exceeds the {n_samples}-sample index range")
        if float(sig['noise_std']) < 0:
            errors.append("signals.noise_std must be >= 0")
    except (KeyError, TypeError, ValueError) as e:
        errors.append(f"signals: {e!r}")

    reference = get_setting('detector.reference', config=config)
    if not isinstance(reference, str) or reference not in REFERENCES:
        errors.append(f"detector.reference {reference!r} is not one of {', '.join(REFERENCES)}")

    sweep = get_setting('evaluation.thresholds', {}, config=config)
    try:
        if float(sweep['end']) < float(sweep['start']):
            errors.append("evaluation.thresholds.end must be >= start")
        if float(sweep['step']) <= 0:
            errors.append("evaluation.thresholds.step must be > 0")
    except (KeyError, TypeError, ValueError) as e:
        errors.append(f"evaluation.thresholds: {e!r}")

    latency = get_setting('evaluation.latency', config=config)
    if latency is not None and (not isinstance(latency, int) or latency < 1):
        errors.append("evaluation.latency must be null or an integer >= 1")
    workers = get_setting('evaluation.workers', 1, config=config)
    if not isinstance(workers, int) or workers < 1:
        errors.append("evaluation.workers must be an integer >= 1")

    return errors


def load_study_config(path=None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Resolve a study config: defaults, then YAML file, then overrides.

    Raises InvalidParameter listing every validation error.
    """
    config = copy.deepcopy(STUDY_CONFIG)
    if path is not None:
        with open(Path(path).expanduser()) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise InvalidParameter(f"{path}: study config must be a mapping")
        config = merge_config(config, loaded)
    if overrides:
        config = merge_config(config, overrides)

    errors = validate_config(config)
    if errors:
        raise InvalidParameter("invalid study config:\n  - " + "\n  - ".join(errors))
    return config


def dump_study_config(config: Dict[str, Any], path) -> Path:
    """Write the resolved config next to the study outputs."""
    path = Path(path)
    with open(path, 'w') as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
    return path


if __name__ == '__main__':
    import json
    print(json.dumps(STUDY_CONFIG, indent=2))

    errors = validate_config(STUDY_CONFIG)
    if errors:
        print("\nValidation errors:")
        for e in errors:
            print(f"  - {e}")
    else:
        print("\nConfig valid")
