"""Phase 3: Populate a Solution from the resolved project closure."""

from __future__ import annotations

import logging
import os
from pathlib import PurePath

from slnbuilder.config import DEFAULT_CONFIGURATIONS, DescriptorKind, ProjectDescriptor
from slnbuilder.dotnet.project import infer_target_framework
from slnbuilder.model.solution import Solution

logger = logging.getLogger(__name__)


def _is_test_project(path: str) -> bool:
    parts = PurePath(path.replace("\\", "/")).parts
    return any(part in ("Test", "Tests") or ".Test." in part for part in parts)


def uses_platforms(descriptor: ProjectDescriptor) -> bool:
    """Whether a project should map solution platforms to real x64/x86 platforms.

    Framework-specific, native and test projects do; everything else
    builds Any CPU.
    """
    return (
        bool(infer_target_framework(descriptor.path))
        or descriptor.kind is DescriptorKind.NATIVE
        or _is_test_project(descriptor.path)
    )


def analyze_project(
    descriptors: list[ProjectDescriptor],
    solution_path: str,
    configurations: list[tuple[str, str]] | tuple[tuple[str, str], ...] = DEFAULT_CONFIGURATIONS,
) -> Solution:
    """Build a flat solution containing every project in ``descriptors``.

    The first descriptor is treated as the root project and becomes the
    startup project.
    """
    name = os.path.splitext(os.path.basename(solution_path))[0]
    solution = Solution(name, solution_path)

    for config, platform in configurations:
        solution.add_configuration(config, platform)

    seen: set[str] = set()
    for descriptor in descriptors:
        key = os.path.normcase(descriptor.path)
        if key in seen:
            continue
        seen.add(key)

        existing = solution.get_project(descriptor.name)
        if existing is not None and existing.full_path != descriptor.path:
            logger.warning(
                f"Project name {descriptor.name} already used by {existing.full_path}; "
                f"skipping {descriptor.path}"
            )
            continue
        solution.add_project(descriptor.name, descriptor.path, uses_platforms(descriptor))

    if descriptors:
        solution.set_startup_project(solution.get_project(descriptors[0].name))

    return solution
