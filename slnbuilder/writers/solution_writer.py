"""Serialise a Solution to the Visual Studio .sln text format."""

from __future__ import annotations

import logging
import os
import uuid
from typing import TextIO

from slnbuilder.config import DescriptorKind
from slnbuilder.dotnet.project import infer_target_framework, read_project_guid
from slnbuilder.errors import DescriptorError, SolutionWriteError, UnsupportedDescriptorKind
from slnbuilder.model.solution import NIL_GUID, Configuration, Folder, Project, ProjectConfiguration, Solution

logger = logging.getLogger(__name__)

SOLUTION_FOLDER_GUID = "{2150E333-8FDC-42A3-9474-1A3956D46DE8}"
VC_PROJECT_GUID = "{8BC9CEB8-8B4A-11D0-8D11-00A0C91BC942}"
CPS_CSPROJ_GUID = "{9A19103F-16F7-4668-BE54-9A1E7A4F7556}"

_TYPE_GUIDS = {
    DescriptorKind.MANAGED: CPS_CSPROJ_GUID,
    DescriptorKind.NATIVE: VC_PROJECT_GUID,
}

_HEADER = (
    "Microsoft Visual Studio Solution File, Format Version 12.00",
    "# Visual Studio Version 17",
    "VisualStudioVersion = 17.6.33815.320",
    "MinimumVisualStudioVersion = 10.0.40219.1",
)


def format_guid(guid: uuid.UUID) -> str:
    return "{" + str(guid).upper() + "}"


class SolutionWriter:
    """Writes a solution file in a single sequential pass.

    Native projects whose framework (inferred from their path) is not part
    of ``target_frameworks`` are left out of every section, so one model
    can produce net472-only, net6.0-windows-only or combined solutions.
    """

    def __init__(self) -> None:
        self.root_path = ""
        self.target_frameworks = ""
        self._platform_projects: list[Project] = []

    def write(self, root_path: str, target_frameworks: str, solution: Solution) -> bool:
        """Write ``solution`` to its ``full_path``, replacing any existing file.

        Raises:
            SolutionWriteError: the directory or file could not be written.
        """
        self.root_path = root_path
        self.target_frameworks = target_frameworks
        self._platform_projects = []

        try:
            os.makedirs(os.path.dirname(solution.full_path), exist_ok=True)
            with open(solution.full_path, "w", encoding="utf-8-sig", newline="\r\n") as out:
                self._write_header(out)
                self._write_projects(out, solution)
                self._write_global_section(out, solution)
        except OSError as e:
            raise SolutionWriteError(solution.full_path, e) from e

        logger.info(
            f"Wrote {solution.full_path} with {len(self._platform_projects)} projects"
        )
        return True

    @property
    def written_projects(self) -> list[Project]:
        return list(self._platform_projects)

    # --- Project declarations ---

    def is_included(self, project: Project) -> bool:
        """False for native projects built for a framework outside the filter."""
        if os.path.splitext(project.full_path)[1].lower() != DescriptorKind.NATIVE.value:
            return True
        return infer_target_framework(project.full_path) in self.target_frameworks.lower()

    def _write_header(self, out: TextIO) -> None:
        for line in _HEADER:
            out.write(f"{line}\n")

    def _write_projects(self, out: TextIO, solution: Solution) -> None:
        startup = solution.startup_project
        if startup is not None:
            self._write_project(out, startup, solution)

        for project in solution.projects:
            if project is startup:
                continue
            self._write_project(out, project, solution)

        for folder in solution.folders:
            self._write_folders(out, folder, solution)

    def _write_folders(self, out: TextIO, folder: Folder, solution: Solution) -> None:
        self._write_folder(out, folder)

        for project in folder.projects:
            if project is solution.startup_project:
                continue
            self._write_project(out, project, solution)

        for child in folder.folders:
            self._write_folders(out, child, solution)

    def _write_folder(self, out: TextIO, folder: Folder) -> None:
        out.write(
            f'Project("{SOLUTION_FOLDER_GUID}") = "{folder.name}", "{folder.name}", '
            f'"{format_guid(folder.guid)}"\n'
        )
        out.write("EndProject\n")

    def _relative_project_path(self, project: Project, solution: Solution) -> str:
        solution_dir = os.path.dirname(solution.full_path)
        project_dir = os.path.dirname(os.path.abspath(project.full_path))
        try:
            relative_dir = os.path.relpath(project_dir, solution_dir)
        except ValueError:
            # Different drives on Windows
            relative_dir = project_dir
        relative = os.path.normpath(os.path.join(relative_dir, project.file_name or ""))
        return relative.replace("/", "\\")

    def _resolve_guid(self, project: Project) -> uuid.UUID:
        declared = None
        try:
            declared = read_project_guid(project.full_path)
        except DescriptorError as e:
            logger.warning(f"Cannot read ProjectGuid, keeping generated one: {e}")

        if declared and declared != str(project.guid).upper():
            logger.debug(f"{project.name}: using ProjectGuid {declared} from project file")
        return project.finalize_guid(declared)

    def _write_project(self, out: TextIO, project: Project, solution: Solution) -> None:
        if not self.is_included(project):
            logger.debug(f"Skipping {project.name}: framework not in {self.target_frameworks!r}")
            return

        try:
            kind = DescriptorKind.from_path(project.full_path)
        except UnsupportedDescriptorKind as e:
            logger.warning(f"Skipping project: {e}")
            return

        guid = self._resolve_guid(project)
        name = os.path.splitext(project.name)[0]
        relative_path = self._relative_project_path(project, solution)

        out.write(
            f'Project("{_TYPE_GUIDS[kind]}") = "{name}", "{relative_path}", '
            f'"{format_guid(guid)}"\n'
        )
        out.write("EndProject\n")

        self._platform_projects.append(project)

    # --- Global section ---

    def _write_global_section(self, out: TextIO, solution: Solution) -> None:
        out.write("Global\n")
        self._write_solution_platforms(out, solution)
        self._write_project_platforms(out)
        self._write_solution_properties(out)
        self._write_nested_projects(out, solution)
        self._write_extensibility_globals(out)
        out.write("EndGlobal\n")

    def _write_solution_platforms(self, out: TextIO, solution: Solution) -> None:
        out.write("\tGlobalSection(SolutionConfigurationPlatforms) = preSolution\n")
        for config in solution.configurations:
            out.write(f"\t\t{config} = {config}\n")
        out.write("\tEndGlobalSection\n")

    def _write_project_platforms(self, out: TextIO) -> None:
        out.write("\tGlobalSection(ProjectConfigurationPlatforms) = postSolution\n")
        for project in self._platform_projects:
            guid = format_guid(project.guid)
            for config in project.configurations:
                self._write_platform_configuration(out, guid, config.solution_configuration, config, "ActiveCfg")
                if config.enabled:
                    self._write_platform_configuration(out, guid, config.solution_configuration, config, "Build.0")
        out.write("\tEndGlobalSection\n")

    def _write_platform_configuration(
        self,
        out: TextIO,
        guid: str,
        solution_config: Configuration,
        config: ProjectConfiguration,
        suffix: str,
    ) -> None:
        out.write(f"\t\t{guid}.{solution_config}.{suffix} = {config}\n")

    def _write_solution_properties(self, out: TextIO) -> None:
        out.write("\tGlobalSection(SolutionProperties) = preSolution\n")
        out.write("\t\tHideSolutionNode = FALSE\n")
        out.write("\tEndGlobalSection\n")

    def _write_nested_projects(self, out: TextIO, solution: Solution) -> None:
        out.write("\tGlobalSection(NestedProjects) = preSolution\n")
        for folder in solution.folders:
            self._write_nested_folder(out, folder)
        for project in solution.projects:
            self._write_nested_project(out, project)
        out.write("\tEndGlobalSection\n")

    def _write_nested_folder(self, out: TextIO, folder: Folder) -> None:
        if folder.guid != NIL_GUID and folder.parent is not None and folder.parent.guid != NIL_GUID:
            out.write(f"\t\t{format_guid(folder.guid)} = {format_guid(folder.parent.guid)}\n")

        for child in folder.folders:
            self._write_nested_folder(out, child)
        for project in folder.projects:
            self._write_nested_project(out, project)

    def _write_nested_project(self, out: TextIO, project: Project) -> None:
        # Only projects that were declared may be nested
        if not any(p is project for p in self._platform_projects):
            return
        if project.parent.guid != NIL_GUID:
            out.write(f"\t\t{format_guid(project.guid)} = {format_guid(project.parent.guid)}\n")

    def _write_extensibility_globals(self, out: TextIO) -> None:
        out.write("\tGlobalSection(ExtensibilityGlobals) = postSolution\n")
        out.write(f"\t\tSolutionGuid = {format_guid(uuid.uuid4())}\n")
        out.write("\tEndGlobalSection\n")
