"""Phase 1: Source project index construction."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from slnbuilder.config import DEFAULT_EXCLUDE, DescriptorKind, ProjectDescriptor
from slnbuilder.dotnet.assembly import AssemblyIndex
from slnbuilder.dotnet.project import parse_descriptor
from slnbuilder.errors import DescriptorError

logger = logging.getLogger(__name__)


def _should_ignore(path: str, patterns: list[str] | tuple[str, ...]) -> bool:
    """Check if a project path matches any deny-list substring."""
    normalised = path.replace("\\", "/")
    return any(p.replace("\\", "/") in normalised for p in patterns)


def find_project_files(
    search_roots: list[str],
    exclude_patterns: list[str] | tuple[str, ...] = DEFAULT_EXCLUDE,
) -> list[str]:
    """Enumerate project files under every root in a stable order.

    Per root, all managed projects come before all native ones, each group
    sorted by path.
    """
    found: list[str] = []
    for root in search_roots:
        root_path = Path(root)
        if not root_path.is_dir():
            logger.warning(f"Search path {root} is not a directory")
            continue
        for kind in DescriptorKind:
            for project_file in sorted(root_path.rglob(f"*{kind.value}")):
                full_path = str(project_file.resolve())
                if _should_ignore(full_path, exclude_patterns):
                    logger.debug(f"Excluded {full_path}")
                    continue
                found.append(full_path)
    return found


def _try_parse(path: str) -> ProjectDescriptor | None:
    try:
        return parse_descriptor(path)
    except DescriptorError as e:
        logger.warning(f"Skipping {path}: {e}")
        return None


def build_index(
    search_roots: list[str],
    exclude_patterns: list[str] | tuple[str, ...] = DEFAULT_EXCLUDE,
    workers: int = 1,
) -> AssemblyIndex:
    """Scan search roots and map each assembly identity to its project.

    Parsing can be fanned out over ``workers`` threads. Results are merged
    in enumeration order, so the first project found for an identity wins
    regardless of which thread parsed it.
    """
    paths = find_project_files(search_roots, exclude_patterns)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            descriptors = list(pool.map(_try_parse, paths))
    else:
        descriptors = [_try_parse(p) for p in paths]

    index = AssemblyIndex()
    for descriptor in descriptors:
        if descriptor is None:
            continue
        if index.register(descriptor):
            logger.debug(f"Indexed {descriptor.identity} -> {descriptor.path}")

    logger.info(f"Indexed {len(index)} assemblies from {len(paths)} project files")
    return index
