"""
Pipeline runner: sequences the study stages.

Defines the DAG of stages with the context keys each one consumes and
produces. Runs stages in topological order over a shared in-memory
context dict.

No math lives here. Only wiring.
"""

import importlib
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


logger = logging.getLogger(__name__)


@dataclass
class PipelineStage:
    """Definition of a study stage."""
    name: str
    package: str
    function: str  # dotted path: 'orchestration.stages.generate'
    inputs: List[str]  # context keys consumed
    outputs: List[str]  # context keys produced
    optional: bool = False
    depends_on: List[str] = field(default_factory=list)


# Canonical stage ordering
STAGES: List[PipelineStage] = [
    PipelineStage(
        name='generate',
        package='signals',
        function='orchestration.stages.generate',
        inputs=[],
        outputs=['signals'],
    ),
    PipelineStage(
        name='score',
        package='cusum',
        function='orchestration.stages.score',
        inputs=['signals'],
        outputs=['scores'],
        depends_on=['generate'],
    ),
    PipelineStage(
        name='evaluate',
        package='amoc',
        function='orchestration.stages.evaluate',
        inputs=['signals', 'scores'],
        outputs=['curve'],
        depends_on=['score'],
    ),
]


class Pipeline:
    """
    Orchestrates execution of the study stages.

    Usage:
        pipeline = Pipeline()
        context = pipeline.run(config)
        context = pipeline.run(config, include=['score'])
        context = pipeline.run(config, context={'signals': loaded}, skip=['generate'])
    """

    def __init__(self, stages: Optional[List[PipelineStage]] = None):
        self.stages = stages or STAGES
        self._stage_map = {s.name: s for s in self.stages}
        self.results: List[Dict[str, Any]] = []

    def get_execution_order(
        self,
        include: Optional[List[str]] = None,
        skip_optional: bool = False,
    ) -> List[PipelineStage]:
        """
        Get topologically sorted execution order.

        Parameters
        ----------
        include : list of str, optional
            Only include these stages (plus dependencies).
        skip_optional : bool
            Skip optional stages.

        Returns
        -------
        list of PipelineStage in execution order.
        """
        if include:
            unknown = [name for name in include if name not in self._stage_map]
            if unknown:
                raise ValueError(f"unknown stages: {unknown}")
            needed = set()
            to_process = list(include)
            while to_process:
                name = to_process.pop()
                if name in needed:
                    continue
                needed.add(name)
                to_process.extend(self._stage_map[name].depends_on)
            stages = [s for s in self.stages if s.name in needed]
        else:
            stages = list(self.stages)

        if skip_optional:
            stages = [s for s in stages if not s.optional]

        return stages

    def resolve(self, stage: PipelineStage) -> Callable[..., Dict[str, Any]]:
        module_path, func_name = stage.function.rsplit('.', 1)
        return getattr(importlib.import_module(module_path), func_name)

    def run_stage(
        self,
        stage: PipelineStage,
        context: Dict[str, Any],
        config: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Run a single stage, merging its outputs into `context`.

        Returns dict with status and timing. Errors raised by the stage
        propagate to the caller.
        """
        missing = [key for key in stage.inputs if key not in context]
        result = {
            'stage': stage.name,
            'package': stage.package,
            'missing_inputs': missing,
        }
        if missing:
            result['status'] = 'skipped'
            result['reason'] = f'missing inputs: {missing}'
            logger.debug("stage %s skipped: %s", stage.name, result['reason'])
            return result

        t0 = time.time()
        produced = self.resolve(stage)(context, config)
        absent = [key for key in stage.outputs if key not in produced]
        if absent:
            raise RuntimeError(f"stage {stage.name} did not produce {absent}")
        context.update(produced)

        result['status'] = 'ok'
        result['elapsed'] = time.time() - t0
        logger.debug("stage %s done in %.3fs", stage.name, result['elapsed'])
        return result

    def run(
        self,
        config: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
        include: Optional[List[str]] = None,
        skip: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Run stages in order and return the populated context.

        `skip` drops stages whose outputs the caller already supplies in
        `context` (e.g. signals loaded from disk).
        """
        context = {} if context is None else context
        skip = set(skip or [])
        self.results = []
        for stage in self.get_execution_order(include):
            if stage.name in skip:
                self.results.append({
                    'stage': stage.name,
                    'package': stage.package,
                    'missing_inputs': [],
                    'status': 'skipped',
                    'reason': 'skipped by caller',
                })
                continue
            self.results.append(self.run_stage(stage, context, config))
        return context

    def plan(self, include: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """Dry-run: show what would execute and whether it resolves."""
        plan = []
        for stage in self.get_execution_order(include):
            entry = {'stage': stage.name, 'package': stage.package, 'function': stage.function}
            try:
                self.resolve(stage)
                entry['status'] = 'available'
            except (ImportError, AttributeError) as e:
                entry['status'] = 'not_installed'
                entry['error'] = str(e)
            plan.append(entry)
        return plan

    def list_stages(self) -> List[Dict[str, Any]]:
        """List all stages with their metadata."""
        return [
            {
                'name': s.name,
                'package': s.package,
                'inputs': s.inputs,
                'outputs': s.outputs,
                'optional': s.optional,
                'depends_on': s.depends_on,
            }
            for s in self.stages
        ]
