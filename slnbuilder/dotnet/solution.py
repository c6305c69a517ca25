"""Parse .sln files (custom text format, not XML)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass
class SolutionProject:
    """A project entry from a .sln file."""
    type_guid: str
    name: str
    path: str
    project_guid: str


@dataclass
class SolutionFile:
    """Everything slnbuilder reads back from a .sln file."""
    projects: list[SolutionProject] = field(default_factory=list)
    folders: list[SolutionProject] = field(default_factory=list)
    configurations: list[str] = field(default_factory=list)
    project_configurations: list[tuple[str, str, str, str]] = field(default_factory=list)
    nested: list[tuple[str, str]] = field(default_factory=list)


# Regex to match Project lines in .sln files
# Project("{TYPE-GUID}") = "Name", "Path\To\Project.csproj", "{PROJECT-GUID}"
_PROJECT_RE = re.compile(
    r'^Project\(\"\{([^}]+)\}\"\)\s*=\s*\"([^\"]+)\"\s*,\s*\"([^\"]+)\"\s*,\s*\"\{([^}]+)\}\"',
    re.MULTILINE,
)

# {GUID}.Debug|x64.ActiveCfg = Debug|Any CPU
_PROJECT_CONFIG_RE = re.compile(
    r'^\s*\{([^}]+)\}\.([^.=]+\|[^.=]+)\.(ActiveCfg|Build\.0)\s*=\s*(.+?)\s*$',
    re.MULTILINE,
)

_NESTED_RE = re.compile(r'^\s*\{([^}]+)\}\s*=\s*\{([^}]+)\}\s*$', re.MULTILINE)

_SECTION_RE = re.compile(
    r'GlobalSection\((\w+)\)\s*=\s*\w+(.*?)EndGlobalSection',
    re.DOTALL,
)

_SOLUTION_FOLDER_GUID = "2150E333-8FDC-42A3-9474-1A3956D46DE8"


def read_solution(sln_path: str) -> SolutionFile:
    """Parse a .sln file into declarations and global sections.

    Returns an empty SolutionFile if the file cannot be read.
    """
    result = SolutionFile()
    try:
        with open(sln_path, "r", encoding="utf-8-sig") as f:
            content = f.read()
    except OSError:
        return result

    for match in _PROJECT_RE.finditer(content):
        entry = SolutionProject(
            type_guid=match.group(1).upper(),
            name=match.group(2),
            # Normalise path separators
            path=match.group(3).replace("\\", "/"),
            project_guid=match.group(4).upper(),
        )
        if entry.type_guid == _SOLUTION_FOLDER_GUID:
            result.folders.append(entry)
        else:
            result.projects.append(entry)

    sections = {m.group(1): m.group(2) for m in _SECTION_RE.finditer(content)}

    for line in sections.get("SolutionConfigurationPlatforms", "").splitlines():
        if "=" in line:
            result.configurations.append(line.split("=", 1)[0].strip())

    for match in _PROJECT_CONFIG_RE.finditer(sections.get("ProjectConfigurationPlatforms", "")):
        result.project_configurations.append(
            (match.group(1).upper(), match.group(2), match.group(3), match.group(4))
        )

    for match in _NESTED_RE.finditer(sections.get("NestedProjects", "")):
        result.nested.append((match.group(1).upper(), match.group(2).upper()))

    return result


def parse_solution(sln_path: str) -> list[SolutionProject]:
    """Parse a .sln file and return project entries.

    Excludes solution folders (virtual projects for organising).
    """
    return read_solution(sln_path).projects
