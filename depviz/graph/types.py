"""Shared data structures for the graph module.

Every value here is immutable. Pipeline stages never patch a Graph in place;
they build a new one with ``Graph.with_nodes`` (or ``dataclasses.replace``),
which re-derives dependency and dependent counts from the edge set.
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class NodeRole(Enum):
    """Structural role of a file in the graph."""

    CORE = "core"
    UTILITY = "utility"
    STANDALONE = "standalone"


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class SourceFile:
    """One scanned file and the canonical paths it imports."""

    path: str
    display_name: str
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class Node:
    """Represents one file in the dependency graph."""

    id: str
    label: str
    dependency_count: int = 0
    dependent_count: int = 0
    is_circular: bool = False
    role: NodeRole = NodeRole.CORE
    position: Position = field(default_factory=Position)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "dependencyCount": self.dependency_count,
            "dependentCount": self.dependent_count,
            "isCircular": self.is_circular,
            "role": self.role.value,
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class Edge:
    """``source`` imports ``target``. The ordered pair is the identity."""

    source: str
    target: str

    @property
    def id(self) -> str:
        return f"e-{self.source}-{self.target}"

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "source": self.source, "target": self.target}


@dataclass(frozen=True)
class AnalysisStats:
    total_files: int
    total_dependencies: int
    circular_dependencies: int

    def to_dict(self) -> dict[str, int]:
        return {
            "totalFiles": self.total_files,
            "totalDependencies": self.total_dependencies,
            "circularDependencies": self.circular_dependencies,
        }


@dataclass(frozen=True)
class Graph:
    """Nodes and edges for one analysis run.

    Construction enforces the graph invariants: node ids are unique, edges are
    unique and both endpoints exist, and each node's counts match the edges.
    """

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    def __post_init__(self):
        ids = [node.id for node in self.nodes]
        if len(set(ids)) != len(ids):
            duplicates = sorted(i for i, n in Counter(ids).items() if n > 1)
            raise ValueError(f"Duplicate node ids: {duplicates[:5]}")

        known = set(ids)
        unique_edges = tuple(dict.fromkeys(self.edges))
        for edge in unique_edges:
            if edge.source not in known or edge.target not in known:
                raise ValueError(f"Dangling edge {edge.id}")

        outgoing = Counter(edge.source for edge in unique_edges)
        incoming = Counter(edge.target for edge in unique_edges)
        counted = tuple(
            node
            if node.dependency_count == outgoing[node.id] and node.dependent_count == incoming[node.id]
            else replace(node, dependency_count=outgoing[node.id], dependent_count=incoming[node.id])
            for node in self.nodes
        )
        object.__setattr__(self, "nodes", counted)
        object.__setattr__(self, "edges", unique_edges)

    def node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def adjacency(self) -> dict[str, list[str]]:
        """Outgoing neighbours per node, in edge order."""
        adj: dict[str, list[str]] = {node.id: [] for node in self.nodes}
        for edge in self.edges:
            adj[edge.source].append(edge.target)
        return adj

    def with_nodes(self, nodes) -> "Graph":
        """New Graph with replaced node values and the same edges."""
        return Graph(nodes=tuple(nodes), edges=self.edges)

    def stats(self) -> AnalysisStats:
        return AnalysisStats(
            total_files=len(self.nodes),
            total_dependencies=len(self.edges),
            circular_dependencies=sum(1 for node in self.nodes if node.is_circular),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "stats": self.stats().to_dict(),
        }
