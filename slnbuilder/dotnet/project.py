"""Parse .csproj/.vcxproj files (XML with MSBuild schema)."""

from __future__ import annotations

import logging
import os
import uuid
import xml.etree.ElementTree as ET

from slnbuilder.config import (
    LEGACY_FRAMEWORK,
    MODERN_FRAMEWORK,
    DescriptorKind,
    ProjectDescriptor,
    ReferenceDecl,
    ReferenceKind,
)
from slnbuilder.errors import UnparseableDescriptor

logger = logging.getLogger(__name__)

_VAR_PROJECTNAME = "$(ProjectName)"
_VAR_TARGETNAME = "$(TargetName)"


def infer_target_framework(path: str) -> str:
    """Guess the framework generation a project builds for from its path.

    Native projects built for both generations live side by side as
    ``Foo.net472.vcxproj`` and ``Foo.net6.0-windows.vcxproj`` (or in
    similarly named folders), so the path is the only reliable signal.
    """
    lowered = path.lower()
    if MODERN_FRAMEWORK in lowered:
        return MODERN_FRAMEWORK
    if LEGACY_FRAMEWORK in lowered:
        return LEGACY_FRAMEWORK
    return ""


def _load(path: str) -> tuple[ET.Element, str]:
    try:
        tree = ET.parse(path)
    except (ET.ParseError, OSError) as e:
        raise UnparseableDescriptor(path, str(e)) from e

    root = tree.getroot()
    # Strip namespace from tags for easier querying
    ns = ""
    if root.tag.startswith("{"):
        ns = root.tag.split("}")[0] + "}"
    return root, ns


def _local(tag: str) -> str:
    return tag.split("}", 1)[1] if tag.startswith("{") else tag


def _text(elem: ET.Element | None) -> str:
    if elem is None or not elem.text:
        return ""
    return elem.text.strip()


def _find_property(root: ET.Element, ns: str, name: str) -> str:
    for pg in root.iter(f"{ns}PropertyGroup"):
        value = _text(pg.find(f"{ns}{name}"))
        if value:
            return value
    return ""


def _managed_identity(root: ET.Element, ns: str, path: str) -> str:
    assembly_name = _find_property(root, ns, "AssemblyName")
    if assembly_name:
        return assembly_name
    return os.path.splitext(os.path.basename(path))[0]


def _native_identity(root: ET.Element, ns: str, path: str) -> str:
    base_name = os.path.splitext(os.path.basename(path))[0]

    for pg in root.iter(f"{ns}PropertyGroup"):
        if "Debug|" in pg.get("Condition", ""):
            continue

        target_elem = pg.find(f"{ns}TargetName")
        if target_elem is None:
            continue

        target_name = _text(target_elem)
        if _VAR_PROJECTNAME in target_name:
            target_name = target_name.replace(_VAR_PROJECTNAME, base_name)
        elif target_name == _VAR_TARGETNAME:
            target_name = base_name

        framework = infer_target_framework(path)
        if framework:
            target_name = f"{target_name}.{framework}"
        return target_name

    return base_name


def _references(root: ET.Element, ns: str) -> list[ReferenceDecl]:
    refs: list[ReferenceDecl] = []
    for ig in root.iter(f"{ns}ItemGroup"):
        for item in ig:
            tag = _local(item.tag)
            if tag == ReferenceKind.ASSEMBLY.value:
                # HintPath is usually child metadata, but SDK-style
                # projects may also carry it as an attribute
                hint_path = _text(item.find(f"{ns}HintPath")) or item.get("HintPath", "")
                if hint_path:
                    refs.append(ReferenceDecl(ReferenceKind.ASSEMBLY, hint_path))
            elif tag == ReferenceKind.PROJECT.value:
                include = item.get("Include", "")
                if include:
                    refs.append(ReferenceDecl(ReferenceKind.PROJECT, include))
    return refs


def _project_guid(root: ET.Element, ns: str, path: str) -> str | None:
    value = _find_property(root, ns, "ProjectGuid")
    if not value:
        return None
    try:
        return str(uuid.UUID(value.strip("{}"))).upper()
    except ValueError:
        logger.warning(f"Ignoring malformed ProjectGuid {value!r} in {path}")
        return None


def parse_descriptor(path: str) -> ProjectDescriptor:
    """Parse a project file once and return everything the resolver needs.

    Raises:
        UnsupportedDescriptorKind: the extension is not .csproj/.vcxproj.
        UnparseableDescriptor: the file cannot be read as XML.
    """
    kind = DescriptorKind.from_path(path)
    full_path = os.path.realpath(path)
    root, ns = _load(full_path)

    if kind is DescriptorKind.MANAGED:
        identity = _managed_identity(root, ns, full_path)
    else:
        identity = _native_identity(root, ns, full_path)

    return ProjectDescriptor(
        path=full_path,
        kind=kind,
        identity=identity,
        references=_references(root, ns),
        project_guid=_project_guid(root, ns, full_path),
        target_framework=infer_target_framework(full_path),
    )


def read_assembly_identity(path: str) -> str:
    """Return the assembly name a project produces, framework-suffixed for native projects."""
    return parse_descriptor(path).identity


def read_references(path: str) -> list[ReferenceDecl]:
    return parse_descriptor(path).references


def read_project_guid(path: str) -> str | None:
    """Return the project's declared ProjectGuid (upper case, no braces) or None."""
    DescriptorKind.from_path(path)
    root, ns = _load(os.path.abspath(path))
    return _project_guid(root, ns, path)
