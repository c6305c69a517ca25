"""Project reference graph backed by networkx.DiGraph."""

from __future__ import annotations

import os

import networkx as nx

from slnbuilder.config import ProjectDescriptor


def project_key(path: str) -> str:
    return os.path.normcase(os.path.realpath(path))


class ReferenceGraph:
    """Wrapper around networkx.DiGraph with one node per project file.

    Edges point from a project to each project it references, in the
    order the references were discovered.
    """

    def __init__(self) -> None:
        self.graph = nx.DiGraph()

    def add_project(self, descriptor: ProjectDescriptor) -> str:
        key = project_key(descriptor.path)
        if key not in self.graph:
            self.graph.add_node(key, descriptor=descriptor)
        return key

    def add_reference(self, source: ProjectDescriptor, target: ProjectDescriptor) -> None:
        source_key = self.add_project(source)
        target_key = self.add_project(target)
        self.graph.add_edge(source_key, target_key, edge_type="REFERENCES")

    def get_references(self, path: str) -> list[ProjectDescriptor]:
        key = project_key(path)
        if key not in self.graph:
            return []
        return [self.graph.nodes[n]["descriptor"] for n in self.graph.successors(key)]

    def closure(self, root_path: str) -> list[ProjectDescriptor]:
        """All projects reachable from the root, root first, in depth-first discovery order."""
        key = project_key(root_path)
        if key not in self.graph:
            return []
        return [self.graph.nodes[n]["descriptor"] for n in nx.dfs_preorder_nodes(self.graph, key)]

    def has_cycles(self) -> bool:
        return not nx.is_directed_acyclic_graph(self.graph)

    def project_count(self) -> int:
        return self.graph.number_of_nodes()

    def reference_count(self) -> int:
        return self.graph.number_of_edges()
