"""Data contracts for pipeline execution."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from depviz.errors import ParseWarning
from depviz.graph.types import AnalysisStats, Graph, NodeRole


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analysis run.

    JSON-serializable through ``to_dict`` in the shape the rendering layer
    consumes: nodes, edges, stats, plus the per-file warnings collected along
    the way.
    """

    root: Path
    graph: Graph
    warnings: tuple[ParseWarning, ...] = ()
    run_id: str = ""
    elapsed: float = 0.0
    strategy: str = "layered"
    skipped: tuple[str, ...] = field(default=())

    @property
    def stats(self) -> AnalysisStats:
        return self.graph.stats()

    def nodes_with_role(self, role: NodeRole) -> list[str]:
        return [node.id for node in self.graph.nodes if node.role is role]

    @property
    def unused_files(self) -> list[str]:
        """Standalone files: nothing imports them and they import nothing."""
        return self.nodes_with_role(NodeRole.STANDALONE)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        payload = self.graph.to_dict()
        payload["warnings"] = [warning.to_dict() for warning in self.warnings]
        return payload
