"""Core data types and configuration for solution generation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from slnbuilder.errors import UnsupportedDescriptorKind

LEGACY_FRAMEWORK = "net472"
MODERN_FRAMEWORK = "net6.0-windows"
TARGET_FRAMEWORK_PLACEHOLDER = "$(TargetFramework)"

# Vendor and internal trees whose project files never resolve to buildable source.
DEFAULT_EXCLUDE = (
    "/Bentley.",
    "Haestad.Arx",
    "Shanghai",
)

DEFAULT_CONFIGURATIONS = (
    ("Debug", "x64"),
    ("Debug", "x86"),
    ("Release", "x64"),
    ("Release", "x86"),
)


class DescriptorKind(str, Enum):
    MANAGED = ".csproj"
    NATIVE = ".vcxproj"

    @classmethod
    def from_path(cls, path: str) -> DescriptorKind:
        """Select the descriptor kind from a file extension."""
        ext = os.path.splitext(path)[1].lower()
        for kind in cls:
            if kind.value == ext:
                return kind
        raise UnsupportedDescriptorKind(path, ext)


class ReferenceKind(str, Enum):
    ASSEMBLY = "Reference"
    PROJECT = "ProjectReference"


@dataclass
class ReferenceDecl:
    """A reference item declared in a descriptor's item groups.

    For assembly references ``target`` is the hint path; for project
    references it is the include path, possibly still carrying the
    ``$(TargetFramework)`` placeholder.
    """
    kind: ReferenceKind
    target: str

    @property
    def assembly_name(self) -> str:
        return os.path.splitext(os.path.basename(self.target.replace("\\", "/")))[0]


@dataclass
class ProjectDescriptor:
    """Parsed, read-only view of a .csproj/.vcxproj file."""
    path: str
    kind: DescriptorKind
    identity: str
    references: list[ReferenceDecl] = field(default_factory=list)
    project_guid: str | None = None
    target_framework: str = ""

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)


@dataclass
class GenerationConfig:
    root_project: str = ""
    search_paths: list[str] = field(default_factory=list)
    solution_path: str | None = None
    target_frameworks: str = f"{LEGACY_FRAMEWORK},{MODERN_FRAMEWORK}"
    exclude_patterns: list[str] = field(default_factory=list)
    configurations: list[tuple[str, str]] = field(
        default_factory=lambda: list(DEFAULT_CONFIGURATIONS)
    )
    workers: int = 1
    manifest_path: str | None = None
    verbose: bool = False
    quiet: bool = False

    def resolved_solution_path(self) -> str:
        if self.solution_path:
            return os.path.abspath(self.solution_path)
        root = os.path.abspath(self.root_project)
        base = os.path.splitext(os.path.basename(root))[0]
        return os.path.join(os.path.dirname(root), f"{base}.sln")

    def resolved_search_paths(self) -> list[str]:
        if self.search_paths:
            return [os.path.abspath(p) for p in self.search_paths]
        return [os.path.dirname(os.path.abspath(self.root_project))]

    def deny_list(self) -> list[str]:
        return [*DEFAULT_EXCLUDE, *self.exclude_patterns]


@dataclass
class GenerationResult:
    version: str = "1.0"
    success: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    stats: dict[str, Any] = field(default_factory=dict)
    projects: list[dict] = field(default_factory=list)
