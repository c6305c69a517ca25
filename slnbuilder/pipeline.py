"""Sequential phase orchestrator with timing."""

from __future__ import annotations

import logging
import time

from slnbuilder.config import GenerationConfig, GenerationResult
from slnbuilder.errors import SlnBuilderError
from slnbuilder.output import build_result, write_output
from slnbuilder.phases.index import build_index
from slnbuilder.phases.layout import analyze_project
from slnbuilder.phases.resolve import ReferenceResolver
from slnbuilder.writers.solution_writer import SolutionWriter

logger = logging.getLogger(__name__)

_PHASE_LABELS = {
    "index": "Indexing source projects",
    "resolve": "Resolving project references",
    "layout": "Laying out solution",
    "write": "Writing solution file",
}


def run_pipeline(
    config: GenerationConfig,
    progress_callback=None,
) -> GenerationResult:
    """Execute the four-phase generation pipeline and return the result.

    Args:
        config: Generation configuration.
        progress_callback: Optional callable(phase_name, label) invoked
            when each phase starts. Used by the CLI for Rich progress.

    Raises:
        SlnBuilderError: the root project cannot be read or the solution
            cannot be written.
    """
    solution_path = config.resolved_solution_path()
    state: dict = {}
    timings: dict[str, float] = {}
    total_start = time.monotonic()

    def _index():
        state["index"] = build_index(
            config.resolved_search_paths(), config.deny_list(), config.workers
        )

    def _resolve():
        state["resolver"] = ReferenceResolver(state["index"])
        state["closure"] = state["resolver"].resolve(config.root_project)

    def _layout():
        state["solution"] = analyze_project(state["closure"], solution_path, config.configurations)

    def _write():
        state["writer"] = SolutionWriter()
        state["writer"].write(
            config.resolved_search_paths()[0], config.target_frameworks, state["solution"]
        )

    phases = [
        ("index", _index),
        ("resolve", _resolve),
        ("layout", _layout),
        ("write", _write),
    ]

    for name, phase_fn in phases:
        if progress_callback:
            progress_callback(name, _PHASE_LABELS.get(name, name))
        start = time.monotonic()
        phase_fn()
        timings[name] = time.monotonic() - start

    total_ms = (time.monotonic() - total_start) * 1000

    result = build_result(
        config,
        state["index"],
        state["resolver"].graph,
        state["solution"],
        state["writer"].written_projects,
        timings,
        total_ms,
    )
    if config.manifest_path:
        write_output(result, config.manifest_path)
    return result


def generate_solution(config: GenerationConfig, progress_callback=None) -> bool:
    """Resolve and write a solution for ``config.root_project``.

    Returns True when the solution file was written. Failures are logged
    rather than raised.
    """
    try:
        run_pipeline(config, progress_callback)
    except SlnBuilderError as e:
        logger.error(f"Solution generation failed: {e}")
        return False
    return True
