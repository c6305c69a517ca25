"""Phase 2: Transitive project reference resolution."""

from __future__ import annotations

import logging
import os
import posixpath

from slnbuilder.config import (
    LEGACY_FRAMEWORK,
    MODERN_FRAMEWORK,
    TARGET_FRAMEWORK_PLACEHOLDER,
    DescriptorKind,
    ProjectDescriptor,
    ReferenceDecl,
    ReferenceKind,
)
from slnbuilder.dotnet.assembly import AssemblyIndex
from slnbuilder.dotnet.project import parse_descriptor
from slnbuilder.errors import DescriptorError, MissingReferencedDescriptor
from slnbuilder.graph.reference_graph import ReferenceGraph, project_key

logger = logging.getLogger(__name__)


def dual_target_lookup(index: AssemblyIndex, identity: str) -> list[ProjectDescriptor]:
    """Find the project(s) building ``identity``, pairing native framework siblings."""
    return index.lookup(identity)


def project_reference_paths(include: str, base_dir: str) -> list[str]:
    """Expand a ProjectReference include into the concrete file(s) it stands for.

    ``Foo.$(TargetFramework).vcxproj`` becomes ``Foo.net472.vcxproj``; any
    include whose file name names the legacy framework also yields its
    net6.0-windows sibling in the same directory.
    """
    concrete = include.replace("\\", "/")
    if concrete.endswith(f"{TARGET_FRAMEWORK_PLACEHOLDER}{DescriptorKind.NATIVE.value}"):
        concrete = concrete.replace(TARGET_FRAMEWORK_PLACEHOLDER, LEGACY_FRAMEWORK)

    candidates = [concrete]
    directory, file_name = posixpath.split(concrete)
    if LEGACY_FRAMEWORK in file_name:
        sibling = file_name.replace(LEGACY_FRAMEWORK, MODERN_FRAMEWORK)
        candidates.append(posixpath.join(directory, sibling))

    return [os.path.normpath(os.path.join(base_dir, c)) for c in candidates]


class ReferenceResolver:
    """Computes the closure of projects referenced by a root project."""

    def __init__(self, index: AssemblyIndex) -> None:
        self.index = index
        self.graph = ReferenceGraph()

    def find_references(self, descriptor: ProjectDescriptor) -> list[ProjectDescriptor]:
        """Direct references of one project that have source in the index."""
        matches: list[ProjectDescriptor] = []
        for ref in descriptor.references:
            if ref.kind is ReferenceKind.ASSEMBLY:
                matches.extend(dual_target_lookup(self.index, ref.assembly_name))
            else:
                matches.extend(self._follow_project_reference(ref, descriptor))
        return matches

    def _follow_project_reference(
        self, ref: ReferenceDecl, owner: ProjectDescriptor
    ) -> list[ProjectDescriptor]:
        matches: list[ProjectDescriptor] = []
        for path in project_reference_paths(ref.target, owner.directory):
            try:
                if not os.path.isfile(path):
                    raise MissingReferencedDescriptor(path, owner.path)
                referenced = parse_descriptor(path)
            except DescriptorError as e:
                logger.warning(f"Skipping project reference: {e}")
                continue
            matches.extend(dual_target_lookup(self.index, referenced.identity))
        return matches

    def resolve(self, root_path: str) -> list[ProjectDescriptor]:
        """Return the root project and every project it transitively references.

        Each project is expanded once, so shared sub-references and cycles
        do not cause repeated traversal.

        Raises:
            DescriptorError: the root project cannot be read.
        """
        root = parse_descriptor(root_path)
        self.graph.add_project(root)

        expanded: set[str] = set()
        pending = [root]
        while pending:
            descriptor = pending.pop()
            key = project_key(descriptor.path)
            if key in expanded:
                continue
            expanded.add(key)

            references = self.find_references(descriptor)
            for referenced in references:
                logger.debug(f"{descriptor.name} -> {referenced.name}")
                self.graph.add_reference(descriptor, referenced)
            pending.extend(
                r for r in reversed(references) if project_key(r.path) not in expanded
            )

        if self.graph.has_cycles():
            logger.warning(f"Reference graph of {root.name} contains cycles")

        return self.graph.closure(root.path)


def resolve(root_path: str, index: AssemblyIndex) -> list[ProjectDescriptor]:
    """Resolve the deduplicated reference closure of ``root_path``, root first."""
    return ReferenceResolver(index).resolve(root_path)
