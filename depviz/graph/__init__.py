"""Graph package - import graph construction, analysis and layout.

Core modules:
- types: immutable Graph / Node / Edge values
- builder: Graph construction from resolved source files
- analyzer: circular dependency detection
- classifier: structural roles (core / utility / standalone)
- layout: layered and zoned-force positioning
"""

from .analyzer import CycleDetector, detect_circular_dependencies
from .builder import GraphBuilder, build_graph
from .classifier import NodeClassifier, classify_nodes
from .layout import LayeredLayout, LayoutStrategy, ZonedForceLayout, apply_layout, center_on_node
from .types import AnalysisStats, Edge, Graph, Node, NodeRole, Position, SourceFile

__all__ = [
    "AnalysisStats",
    "CycleDetector",
    "Edge",
    "Graph",
    "GraphBuilder",
    "LayeredLayout",
    "LayoutStrategy",
    "Node",
    "NodeClassifier",
    "NodeRole",
    "Position",
    "SourceFile",
    "ZonedForceLayout",
    "apply_layout",
    "build_graph",
    "center_on_node",
    "classify_nodes",
    "detect_circular_dependencies",
]
