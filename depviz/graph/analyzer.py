"""Graph analyzer module - circular dependency detection.

Single-pass DFS marking. Every marked node lies on a directed cycle, and every
mutual import pair is marked, but a node that only reaches a cycle through a
cross edge into an already finished DFS subtree is not. Example: with
A->B->C->A found first, a later path B->D->C leaves D unmarked.
"""

from dataclasses import replace

from depviz.graph.types import Graph
from depviz.utils.logging import logger

# TODO: mark every member of each strongly connected component (Tarjan) so
# nodes reached via cross edges into a finished cycle are flagged too.


class CycleDetector:
    """Flag nodes that sit on at least one import cycle."""

    def circular_nodes(self, graph: Graph) -> set[str]:
        """
        Depth-first traversal from every unvisited node, in graph node order.

        A neighbour that is still on the recursion stack closes a back edge:
        both ends are marked, and while the recursion unwinds every frame
        between the back edge and the node it points to is marked as well.
        Marking stops at that node, so ancestors above the cycle stay clean.

        Iterative, so long import chains cannot hit the recursion limit.
        """
        adj = graph.adjacency()
        visited: set[str] = set()
        on_stack: dict[str, int] = {}  # node -> depth on the current DFS path
        circular: set[str] = set()

        for root in graph.node_ids:
            if root in visited:
                continue

            visited.add(root)
            on_stack[root] = 0
            stack = [(root, iter(adj[root]))]
            # Shallowest stack depth a cycle below each frame points back to
            pending: list[int | None] = [None]

            while stack:
                node, neighbors = stack[-1]
                depth = len(stack) - 1
                descended = False

                for neighbor in neighbors:
                    if neighbor not in visited:
                        visited.add(neighbor)
                        on_stack[neighbor] = len(stack)
                        stack.append((neighbor, iter(adj[neighbor])))
                        pending.append(None)
                        descended = True
                        break
                    if neighbor in on_stack:
                        circular.add(node)
                        circular.add(neighbor)
                        pending[depth] = _shallowest(pending[depth], on_stack[neighbor])

                if descended:
                    continue

                stack.pop()
                del on_stack[node]
                origin = pending.pop()
                if origin is not None and origin < depth:
                    parent = stack[-1][0]
                    circular.add(parent)
                    pending[depth - 1] = _shallowest(pending[depth - 1], origin)

        return circular

    def annotate(self, graph: Graph) -> Graph:
        """Return a new Graph with ``is_circular`` set on every node."""
        circular = self.circular_nodes(graph)
        if circular:
            logger.debug("Circular dependency members: {}", len(circular))
        return graph.with_nodes(replace(node, is_circular=node.id in circular) for node in graph.nodes)


def _shallowest(current: int | None, candidate: int) -> int:
    return candidate if current is None else min(current, candidate)


def detect_circular_dependencies(graph: Graph) -> Graph:
    return CycleDetector().annotate(graph)
