"""
Orchestration package for the AMOC bench.

Runs the study in correct order:
generate → score → evaluate

This package imports and sequences all other packages over a shared
in-memory context, and fingerprints written outputs.
No math lives here. Only wiring.
"""

from orchestration.checksums import compare_checksums, verify_checksums, write_checksums
from orchestration.pipeline import STAGES, Pipeline, PipelineStage

__all__ = [
    'STAGES',
    'Pipeline',
    'PipelineStage',
    'compare_checksums',
    'verify_checksums',
    'write_checksums',
]
