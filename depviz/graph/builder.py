"""Graph builder module - constructs the import graph from resolved source files."""

import os
from collections.abc import Iterable

from depviz.graph.types import Edge, Graph, Node, SourceFile
from depviz.utils.logging import logger


class GraphBuilder:
    """Assemble nodes and edges from the complete set of SourceFiles.

    Must see every SourceFile before any edge is built: an edge is only kept
    when its target is itself one of the scanned files.
    """

    def build(self, source_files: Iterable[SourceFile]) -> Graph:
        files = list(source_files)

        nodes: dict[str, Node] = {}
        for source in files:
            if source.path in nodes:
                continue
            nodes[source.path] = Node(id=source.path, label=os.path.basename(source.path))

        edges: dict[Edge, None] = {}
        dropped = 0
        for source in files:
            for dependency in source.dependencies:
                if dependency in nodes:
                    edges.setdefault(Edge(source.path, dependency), None)
                else:
                    dropped += 1

        if dropped:
            logger.debug("Dropped {} dependencies outside the scanned file set", dropped)

        return Graph(nodes=tuple(nodes.values()), edges=tuple(edges))


def build_graph(source_files: Iterable[SourceFile]) -> Graph:
    return GraphBuilder().build(source_files)
