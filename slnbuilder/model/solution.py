"""In-memory solution model: folders, projects and configurations."""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from typing import Iterator

NIL_GUID = uuid.UUID(int=0)

ANY_CPU = "Any CPU"
_DEFAULT_SOLUTION_CONFIGURATIONS = (
    ("Debug", "x64"),
    ("Debug", "x86"),
    ("Release", "x64"),
    ("Release", "x86"),
)


@dataclass(frozen=True)
class Configuration:
    """A solution configuration such as Debug|x64."""
    config: str
    platform: str

    def __str__(self) -> str:
        return f"{self.config}|{self.platform}"


@dataclass
class ProjectConfiguration:
    """The project configuration built when ``solution_configuration`` is selected."""
    solution_configuration: Configuration
    config: str
    platform: str
    enabled: bool = True

    def __str__(self) -> str:
        return f"{self.config}|{self.platform}"


class Project:
    """A project node in the solution tree.

    The GUID is assigned in two phases: a provisional random GUID at
    creation, and a final GUID once the project file's own ProjectGuid has
    been read (see ``finalize_guid``). ``guid`` returns the final value
    when there is one.
    """

    def __init__(self, parent: Folder, name: str, full_path: str) -> None:
        self.parent = parent
        self.name = name
        self.full_path = full_path
        self.provisional_guid = uuid.uuid4()
        self._final_guid: uuid.UUID | None = None
        self._configurations: list[ProjectConfiguration] = []

    def __repr__(self) -> str:
        return f"Project({self.name!r}, {self.full_path!r})"

    @property
    def guid(self) -> uuid.UUID:
        return self._final_guid or self.provisional_guid

    @property
    def is_finalized(self) -> bool:
        return self._final_guid is not None

    def finalize_guid(self, guid: uuid.UUID | str | None) -> uuid.UUID:
        """Fix the project's GUID, preferring ``guid`` over the provisional one."""
        if isinstance(guid, str):
            guid = uuid.UUID(guid.strip("{}"))
        self._final_guid = guid or self.provisional_guid
        return self._final_guid

    @property
    def file_name(self) -> str | None:
        if not self.full_path:
            return None
        return os.path.basename(self.full_path)

    @property
    def configurations(self) -> tuple[ProjectConfiguration, ...]:
        return tuple(self._configurations)

    def add_configuration(
        self,
        solution_configuration: Configuration,
        config: str,
        platform: str,
        enabled: bool = True,
    ) -> ProjectConfiguration:
        """Map a solution configuration onto a project configuration.

        A solution configuration maps to at most one project configuration;
        adding it again replaces that mapping's project pair and flag.
        """
        for existing in self._configurations:
            if existing.solution_configuration == solution_configuration:
                existing.config = config
                existing.platform = platform
                existing.enabled = enabled
                return existing
        project_config = ProjectConfiguration(solution_configuration, config, platform, enabled)
        self._configurations.append(project_config)
        return project_config

    def remove_configuration(self, config: str, platform: str) -> None:
        self._configurations = [
            c for c in self._configurations
            if not (c.config == config and c.platform == platform)
        ]

    def reset_configurations(self) -> None:
        self._configurations.clear()


class Folder:
    """A solution folder. Child folder and project names are unique per folder."""

    def __init__(self, parent: Folder | None, name: str, guid: uuid.UUID | None = None) -> None:
        self.parent = parent
        self.name = name
        self.guid = guid if guid is not None else uuid.uuid4()
        self._folders: list[Folder] = []
        self._projects: list[Project] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    @property
    def folders(self) -> tuple[Folder, ...]:
        return tuple(self._folders)

    @property
    def projects(self) -> tuple[Project, ...]:
        return tuple(self._projects)

    def add_folder(self, name: str) -> Folder:
        """Return the child folder called ``name``, creating it if needed."""
        folder = self.get_folder(name)
        if folder is None:
            folder = Folder(self, name)
            self._folders.append(folder)
        return folder

    def get_folder(self, name: str) -> Folder | None:
        return next((f for f in self._folders if f.name == name), None)

    def add_project(self, name: str, full_path: str, use_platforms: bool = False) -> Project:
        """Return the project called ``name``, creating it with default configurations.

        New projects build Debug/Release for both x64 and x86 solution
        platforms. Without ``use_platforms`` every one of them maps to the
        project's Any CPU platform; with it each maps to the matching
        project platform.
        """
        project = self.get_project(name)
        if project is not None:
            return project

        project = Project(self, name, full_path)
        for config, platform in _DEFAULT_SOLUTION_CONFIGURATIONS:
            project.add_configuration(Configuration(config, platform), config, ANY_CPU)

        if use_platforms:
            project.reset_configurations()
            for config, platform in _DEFAULT_SOLUTION_CONFIGURATIONS:
                project.add_configuration(Configuration(config, platform), config, platform)

        self._projects.append(project)
        return project

    def add_existing_project(self, project: Project) -> Project:
        """Attach a project created for this folder.

        Raises:
            ValueError: the project belongs to another folder, or a different
                project with the same name is already here.
        """
        if project.parent is not self:
            raise ValueError(f"{project.name} belongs to folder {project.parent.name!r}")
        existing = self.get_project(project.name)
        if existing is None:
            self._projects.append(project)
        elif existing is not project:
            raise ValueError(f"A project named {project.name!r} already exists in {self.name!r}")
        return project

    def get_project(self, name: str) -> Project | None:
        return next((p for p in self._projects if p.name == name), None)

    def iter_projects(self) -> Iterator[Project]:
        """Yield every project in this folder and its subfolders."""
        yield from self._projects
        for folder in self._folders:
            yield from folder.iter_projects()

    def iter_folders(self) -> Iterator[Folder]:
        for folder in self._folders:
            yield folder
            yield from folder.iter_folders()


class Solution(Folder):
    """The root folder of the tree. It has no parent and the nil GUID."""

    def __init__(self, name: str, full_path: str) -> None:
        super().__init__(None, name, guid=NIL_GUID)
        self.full_path = os.path.abspath(full_path)
        self._configurations: list[Configuration] = []
        self._startup_project: Project | None = None

    @property
    def configurations(self) -> tuple[Configuration, ...]:
        return tuple(self._configurations)

    @property
    def startup_project(self) -> Project | None:
        return self._startup_project

    def add_configuration(self, config: str, platform: str) -> Configuration:
        configuration = Configuration(config, platform)
        if configuration not in self._configurations:
            self._configurations.append(configuration)
        return configuration

    def remove_configuration(self, config: str, platform: str) -> None:
        self._configurations = [
            c for c in self._configurations
            if not (c.config == config and c.platform == platform)
        ]

    def set_startup_project(self, project: Project | None) -> None:
        """Make ``project`` the default startup project. Passing None changes nothing."""
        if project is None:
            return
        if not any(p is project for p in self.iter_projects()):
            raise ValueError(f"{project.name} is not part of solution {self.name}")
        self._startup_project = project

    def save(self, writer, root_path: str, target_frameworks: str) -> bool:
        return writer.write(root_path, target_frameworks, self)
