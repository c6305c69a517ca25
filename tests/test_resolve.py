"""Tests for transitive reference resolution."""

from __future__ import annotations

import os

import pytest

from slnbuilder.errors import UnparseableDescriptor, UnsupportedDescriptorKind
from slnbuilder.phases.index import build_index
from slnbuilder.phases.resolve import ReferenceResolver, project_reference_paths, resolve

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")
DUAL_TARGET = os.path.join(FIXTURES_DIR, "dual_target")


def _write_csproj(path, assembly_name=None, project_refs=(), hint_paths=()) -> str:
    props = f"<AssemblyName>{assembly_name}</AssemblyName>" if assembly_name else ""
    items = "".join(f'<ProjectReference Include="{r}" />' for r in project_refs)
    items += "".join(
        f'<Reference Include="{os.path.basename(h)}"><HintPath>{h}</HintPath></Reference>'
        for h in hint_paths
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        f'<Project Sdk="Microsoft.NET.Sdk"><PropertyGroup>{props}</PropertyGroup>'
        f"<ItemGroup>{items}</ItemGroup></Project>"
    )
    return str(path)


def _write_vcxproj(path, target_name: str) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        '<Project xmlns="http://schemas.microsoft.com/developer/msbuild/2003">'
        f"<PropertyGroup><TargetName>{target_name}</TargetName></PropertyGroup></Project>"
    )
    return str(path)


def _names(descriptors) -> list[str]:
    return [d.name for d in descriptors]


@pytest.fixture
def bridge_tree(tmp_path):
    """A managed root referencing a dual-targeted native Bridge project."""
    src = tmp_path / "src"
    _write_vcxproj(src / "Bridge" / "Bridge.net472.vcxproj", "Bridge")
    _write_vcxproj(src / "Bridge" / "Bridge.net6.0-windows.vcxproj", "Bridge")
    return src


class TestProjectReferencePaths:
    def test_placeholder_expands_to_both_frameworks(self):
        paths = project_reference_paths("..\\Bridge\\Bridge.$(TargetFramework).vcxproj", "/src/App")
        assert paths == [
            os.path.normpath("/src/Bridge/Bridge.net472.vcxproj"),
            os.path.normpath("/src/Bridge/Bridge.net6.0-windows.vcxproj"),
        ]

    def test_plain_reference(self):
        assert project_reference_paths("..\\Core\\Core.csproj", "/src/App") == [
            os.path.normpath("/src/Core/Core.csproj")
        ]

    def test_framework_directory_is_not_rewritten(self):
        paths = project_reference_paths("..\\net472\\Foo.$(TargetFramework).vcxproj", "/src/App")
        assert paths == [
            os.path.normpath("/src/net472/Foo.net472.vcxproj"),
            os.path.normpath("/src/net472/Foo.net6.0-windows.vcxproj"),
        ]

    def test_legacy_directory_without_legacy_file_name(self):
        assert project_reference_paths("..\\net472\\Core.csproj", "/src/App") == [
            os.path.normpath("/src/net472/Core.csproj")
        ]

    def test_placeholder_only_expanded_for_native_projects(self):
        paths = project_reference_paths("Lib.$(TargetFramework).csproj", "/src")
        assert paths == [os.path.normpath("/src/Lib.$(TargetFramework).csproj")]


class TestResolver:
    def test_fixture_closure(self):
        index = build_index([DUAL_TARGET])
        closure = resolve(os.path.join(DUAL_TARGET, "App", "App.csproj"), index)

        assert _names(closure) == [
            "App.csproj",
            "Bridge.net472.vcxproj",
            "Bridge.net6.0-windows.vcxproj",
            "Core.csproj",
            "Utils.csproj",
        ]

    def test_closure_is_deduplicated_by_path(self):
        index = build_index([DUAL_TARGET])
        closure = resolve(os.path.join(DUAL_TARGET, "App", "App.csproj"), index)
        paths = [d.path for d in closure]
        assert len(paths) == len(set(paths))

    def test_closure_is_idempotent(self):
        index = build_index([DUAL_TARGET])
        closure = resolve(os.path.join(DUAL_TARGET, "App", "App.csproj"), index)
        paths = {d.path for d in closure}

        for descriptor in closure:
            assert {d.path for d in resolve(descriptor.path, index)} <= paths

    def test_placeholder_reference_pulls_in_both_siblings(self, bridge_tree):
        root = _write_csproj(
            bridge_tree / "Root" / "Root.csproj",
            project_refs=["..\\Bridge\\Bridge.$(TargetFramework).vcxproj"],
        )
        closure = resolve(root, build_index([str(bridge_tree)]))

        assert _names(closure) == ["Root.csproj", "Bridge.net472.vcxproj", "Bridge.net6.0-windows.vcxproj"]

    def test_legacy_reference_pulls_in_modern_sibling(self, bridge_tree):
        root = _write_csproj(
            bridge_tree / "Root" / "Root.csproj",
            project_refs=["../Bridge/Bridge.net472.vcxproj"],
        )
        closure = resolve(root, build_index([str(bridge_tree)]))
        assert len(closure) == 3

    def test_assembly_reference_to_dual_target_project(self, bridge_tree):
        root = _write_csproj(bridge_tree / "Root" / "Root.csproj", hint_paths=["..\\bin\\Bridge.dll"])
        closure = resolve(root, build_index([str(bridge_tree)]))

        assert _names(closure) == ["Root.csproj", "Bridge.net472.vcxproj", "Bridge.net6.0-windows.vcxproj"]

    def test_missing_referenced_project_is_skipped(self, tmp_path):
        src = tmp_path / "src"
        _write_csproj(src / "Core" / "Core.csproj")
        root = _write_csproj(
            src / "Root" / "Root.csproj",
            project_refs=["..\\Gone\\Gone.csproj", "..\\Core\\Core.csproj"],
        )
        closure = resolve(root, build_index([str(src)]))
        assert _names(closure) == ["Root.csproj", "Core.csproj"]

    def test_unindexed_reference_contributes_nothing(self, tmp_path):
        src = tmp_path / "src"
        outside = _write_csproj(tmp_path / "outside" / "Outside.csproj")
        root = _write_csproj(src / "Root" / "Root.csproj", project_refs=[outside])
        closure = resolve(root, build_index([str(src)]))
        assert _names(closure) == ["Root.csproj"]

    def test_cycle_terminates(self, tmp_path):
        src = tmp_path / "src"
        _write_csproj(src / "A" / "A.csproj", project_refs=["..\\B\\B.csproj"])
        _write_csproj(src / "B" / "B.csproj", project_refs=["..\\A\\A.csproj"])

        resolver = ReferenceResolver(build_index([str(src)]))
        closure = resolver.resolve(str(src / "A" / "A.csproj"))

        assert _names(closure) == ["A.csproj", "B.csproj"]
        assert resolver.graph.has_cycles()

    def test_shared_reference_expanded_once(self, tmp_path):
        src = tmp_path / "src"
        _write_csproj(src / "Shared" / "Shared.csproj")
        _write_csproj(src / "Left" / "Left.csproj", hint_paths=["..\\bin\\Shared.dll"])
        _write_csproj(src / "Right" / "Right.csproj", hint_paths=["..\\bin\\Shared.dll"])
        root = _write_csproj(
            src / "Root" / "Root.csproj",
            hint_paths=["..\\bin\\Left.dll", "..\\bin\\Right.dll"],
        )

        resolver = ReferenceResolver(build_index([str(src)]))
        closure = resolver.resolve(root)

        assert _names(closure) == ["Root.csproj", "Left.csproj", "Shared.csproj", "Right.csproj"]
        assert resolver.graph.reference_count() == 4

    def test_graph_lists_direct_references(self, tmp_path):
        src = tmp_path / "src"
        _write_csproj(src / "Shared" / "Shared.csproj")
        left = _write_csproj(src / "Left" / "Left.csproj", hint_paths=["..\\bin\\Shared.dll"])
        root = _write_csproj(src / "Root" / "Root.csproj", hint_paths=["..\\bin\\Left.dll"])

        resolver = ReferenceResolver(build_index([str(src)]))
        resolver.resolve(root)

        assert _names(resolver.graph.get_references(root)) == ["Left.csproj"]
        assert _names(resolver.graph.get_references(left)) == ["Shared.csproj"]
        assert resolver.graph.get_references(str(src / "Missing.csproj")) == []

    def test_missing_root_is_fatal(self, tmp_path):
        with pytest.raises(UnparseableDescriptor):
            resolve(str(tmp_path / "Missing.csproj"), build_index([str(tmp_path)]))

    def test_unsupported_root_is_fatal(self, tmp_path):
        root = tmp_path / "Installer.wixproj"
        root.write_text("<Project />")
        with pytest.raises(UnsupportedDescriptorKind):
            resolve(str(root), build_index([str(tmp_path)]))
