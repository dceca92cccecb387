"""AMOC bench configuration module."""

from .study_config import (
    STUDY_CONFIG,
    dump_study_config,
    get_setting,
    load_study_config,
    merge_config,
    validate_config,
)

__all__ = [
    "STUDY_CONFIG",
    "dump_study_config",
    "get_setting",
    "load_study_config",
    "merge_config",
    "validate_config",
]
