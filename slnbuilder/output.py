"""Generation summary and JSON manifest serialisation."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

from slnbuilder import __version__
from slnbuilder.config import GenerationConfig, GenerationResult
from slnbuilder.dotnet.assembly import AssemblyIndex
from slnbuilder.graph.reference_graph import ReferenceGraph
from slnbuilder.model.solution import Project, Solution
from slnbuilder.writers.solution_writer import format_guid


def _count_kinds(projects: list[Project]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for project in projects:
        ext = Path(project.full_path).suffix.lower()
        counts[ext] = counts.get(ext, 0) + 1
    return counts


def build_result(
    config: GenerationConfig,
    index: AssemblyIndex,
    graph: ReferenceGraph,
    solution: Solution,
    written: list[Project],
    timings: dict[str, float],
    total_ms: float,
) -> GenerationResult:
    """Build the GenerationResult from the pipeline's artefacts."""
    startup = solution.startup_project
    all_projects = list(solution.iter_projects())

    return GenerationResult(
        version="1.0",
        success=True,
        metadata={
            "root_project": str(Path(config.root_project).resolve()),
            "solution_path": solution.full_path,
            "search_paths": config.resolved_search_paths(),
            "target_frameworks": config.target_frameworks,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "slnbuilder_version": __version__,
            "generation_duration_ms": round(total_ms, 1),
            "phase_timings": timings,
        },
        stats={
            "indexed_assemblies": len(index),
            "graph_projects": graph.project_count(),
            "graph_references": graph.reference_count(),
            "solution_projects": len(all_projects),
            "written_projects": len(written),
            "filtered_projects": len(all_projects) - len(written),
            "configurations": len(solution.configurations),
            "kinds": _count_kinds(written),
        },
        projects=[
            {
                "name": p.name,
                "path": p.full_path,
                "guid": format_guid(p.guid),
                "startup": p is startup,
                "references": [d.name for d in graph.get_references(p.full_path)],
                "configurations": [
                    {
                        "solution": str(c.solution_configuration),
                        "project": str(c),
                        "build": c.enabled,
                    }
                    for c in p.configurations
                ],
            }
            for p in written
        ],
    )


def write_output(result: GenerationResult, output_path: str) -> None:
    """Write the generation result to a JSON file."""
    data = asdict(result)
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2, default=str)
