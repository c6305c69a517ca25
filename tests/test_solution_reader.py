"""Tests for reading .sln files back."""

from __future__ import annotations

import os

from slnbuilder.dotnet.solution import parse_solution, read_solution

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")
MIXED_SLN = os.path.join(FIXTURES_DIR, "solutions", "Mixed.sln")


class TestSolutionParser:
    def test_parse_sln(self):
        projects = parse_solution(MIXED_SLN)

        assert [p.name for p in projects] == ["App", "Bridge.net472"]

    def test_sln_project_paths(self):
        projects = parse_solution(MIXED_SLN)

        bridge = next(p for p in projects if p.name == "Bridge.net472")
        assert bridge.path == "Bridge/Bridge.net472.vcxproj"

    def test_sln_guids_are_upper_case(self):
        projects = parse_solution(MIXED_SLN)
        assert projects[1].project_guid == "A1B2C3D4-0000-4000-8000-000000000472"

    def test_folders_are_separate(self):
        sln = read_solution(MIXED_SLN)
        assert [f.name for f in sln.folders] == ["Native"]

    def test_global_sections(self):
        sln = read_solution(MIXED_SLN)

        assert sln.configurations == ["Debug|x64", "Release|x64"]
        assert len(sln.project_configurations) == 3
        assert sln.project_configurations[1] == (
            "6F1C2B8E-3D4A-4E5F-9A0B-1C2D3E4F5A6B", "Debug|x64", "Build.0", "Debug|Any CPU",
        )
        assert sln.nested == [
            ("A1B2C3D4-0000-4000-8000-000000000472", "11111111-2222-4333-8444-555555555555"),
        ]

    def test_parse_nonexistent_sln(self):
        assert parse_solution("/nonexistent/path.sln") == []
