"""Node classification into structural roles (core / utility / standalone)."""

from dataclasses import replace

from depviz.config_runtime import DEFAULTS
from depviz.graph.types import Graph, Node, NodeRole

UTILITY_MARKERS: tuple[str, ...] = tuple(DEFAULTS["classify"]["utility_markers"])
FAN_IN_THRESHOLD: int = DEFAULTS["classify"]["fan_in_threshold"]


class NodeClassifier:
    """Assign each node a role from its degree and its file name.

    - standalone: no incoming and no outgoing edges
    - utility: label contains a marker (case-insensitive), or more than
      ``fan_in_threshold`` distinct importers
    - core: everything else

    Per-node and order-independent; counts and edges are left untouched.
    """

    def __init__(self, utility_markers=None, fan_in_threshold: int | None = None):
        markers = utility_markers if utility_markers is not None else UTILITY_MARKERS
        self.utility_markers = tuple(m.lower() for m in markers)
        self.fan_in_threshold = FAN_IN_THRESHOLD if fan_in_threshold is None else fan_in_threshold

    def role_of(self, node: Node) -> NodeRole:
        if node.dependency_count == 0 and node.dependent_count == 0:
            return NodeRole.STANDALONE
        label = node.label.lower()
        if any(marker in label for marker in self.utility_markers):
            return NodeRole.UTILITY
        if node.dependent_count > self.fan_in_threshold:
            return NodeRole.UTILITY
        return NodeRole.CORE

    def classify(self, graph: Graph) -> Graph:
        return graph.with_nodes(replace(node, role=self.role_of(node)) for node in graph.nodes)


def classify_nodes(graph: Graph) -> Graph:
    return NodeClassifier().classify(graph)
