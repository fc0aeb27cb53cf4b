"""Layout engine - assigns 2-D node centres to a classified graph.

Two strategies:

- LayeredLayout: longest-path ranking from the files nobody imports, one row
  per rank, parents centred over their children. Deterministic.
- ZonedForceLayout: three fixed zones (core / utility / standalone). Core
  nodes run a fixed number of force-simulation ticks (charge, links,
  collision, centring, grid pull) from random starting points, then snap to a
  grid. Utility and standalone nodes are laid out as row-major grids. The
  random source is injectable (``numpy.random.Generator`` or a seed).

Both return a new Graph; edges and counts are never touched.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

import networkx as nx
import numpy as np

from depviz.config_runtime import DEFAULTS
from depviz.graph.types import Graph, NodeRole, Position
from depviz.utils.logging import logger

LAYOUT_DEFAULTS: dict[str, Any] = DEFAULTS["layout"]


class LayoutStrategy(Enum):
    LAYERED = "layered"
    ZONED = "zoned"


@dataclass(frozen=True)
class Zone:
    """Rectangle given by its centre and size."""

    cx: float
    cy: float
    width: float
    height: float

    @classmethod
    def from_config(cls, values) -> "Zone":
        cx, cy, width, height = (float(v) for v in values)
        return cls(cx, cy, width, height)

    @property
    def left(self) -> float:
        return self.cx - self.width / 2

    @property
    def top(self) -> float:
        return self.cy - self.height / 2


def _merged(overrides: dict[str, Any] | None) -> dict[str, Any]:
    settings = dict(LAYOUT_DEFAULTS)
    if overrides:
        settings.update({k: v for k, v in overrides.items() if k in settings})
    return settings


def _with_positions(graph: Graph, positions: dict[str, Position]) -> Graph:
    return graph.with_nodes(
        replace(node, position=positions[node.id]) if node.id in positions else node for node in graph.nodes
    )


# ---------------------------------------------------------------------------
# Layered
# ---------------------------------------------------------------------------


class LayeredLayout:
    """Hierarchical rows; importers above the files they import."""

    def __init__(self, settings: dict[str, Any] | None = None):
        s = _merged(settings)
        self.node_width = float(s["node_width"])
        self.node_height = float(s["node_height"])
        self.rank_sep = float(s["rank_sep"])
        self.node_sep = float(s["node_sep"])

    def ranks(self, graph: Graph) -> dict[str, int]:
        """Longest path from any source, with each cycle collapsed to one rank."""
        digraph = nx.DiGraph()
        digraph.add_nodes_from(graph.node_ids)
        digraph.add_edges_from((edge.source, edge.target) for edge in graph.edges)

        condensed = nx.condensation(digraph)
        component_rank: dict[int, int] = {}
        for component in nx.topological_sort(condensed):
            component_rank[component] = max(
                (component_rank[p] + 1 for p in condensed.predecessors(component)), default=0
            )

        mapping = condensed.graph["mapping"]
        return {node_id: component_rank[mapping[node_id]] for node_id in graph.node_ids}

    def positions(self, graph: Graph) -> dict[str, Position]:
        if not graph.nodes:
            return {}

        rank = self.ranks(graph)
        rows: list[list[str]] = [[] for _ in range(max(rank.values()) + 1)]
        for node_id in graph.node_ids:
            rows[rank[node_id]].append(node_id)

        parents: dict[str, list[str]] = {node_id: [] for node_id in graph.node_ids}
        children: dict[str, list[str]] = {node_id: [] for node_id in graph.node_ids}
        for edge in graph.edges:
            if rank[edge.source] < rank[edge.target]:
                parents[edge.target].append(edge.source)
                children[edge.source].append(edge.target)

        # Order each row by the barycentre of its parents in the rows above.
        slot: dict[str, float] = {}
        for row in rows:
            def barycentre(node_id: str, fallback: int) -> float:
                placed = [slot[p] for p in parents[node_id] if p in slot]
                return sum(placed) / len(placed) if placed else float(fallback)

            keyed = [(barycentre(node_id, i), i, node_id) for i, node_id in enumerate(row)]
            keyed.sort()
            row[:] = [node_id for _, _, node_id in keyed]
            for i, node_id in enumerate(row):
                slot[node_id] = float(i)

        pitch = self.node_width + self.node_sep
        x = {node_id: slot[node_id] * pitch for node_id in graph.node_ids}

        # Bottom-up: centre each parent over its children, left to right without overlap.
        for row in reversed(rows):
            cursor = -math.inf
            for node_id in row:
                kids = children[node_id]
                desired = sum(x[k] for k in kids) / len(kids) if kids else x[node_id]
                x[node_id] = max(desired, cursor + pitch)
                cursor = x[node_id]

        shift = self.node_width / 2 - min(x.values())
        row_pitch = self.node_height + self.rank_sep
        return {
            node_id: Position(x[node_id] + shift, rank[node_id] * row_pitch + self.node_height / 2)
            for node_id in graph.node_ids
        }

    def apply(self, graph: Graph) -> Graph:
        return _with_positions(graph, self.positions(graph))


# ---------------------------------------------------------------------------
# Zoned force
# ---------------------------------------------------------------------------


class ZonedForceLayout:
    """Core cluster relaxed by a force simulation; utilities and standalones in grids."""

    ALPHA_MIN = 0.001
    INITIAL_SPREAD = 0.8

    def __init__(
        self,
        settings: dict[str, Any] | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ):
        s = _merged(settings)
        self.canvas = (float(s["canvas_width"]), float(s["canvas_height"]))
        self.zones = {
            NodeRole.CORE: Zone.from_config(s["core_zone"]),
            NodeRole.UTILITY: Zone.from_config(s["utility_zone"]),
            NodeRole.STANDALONE: Zone.from_config(s["standalone_zone"]),
        }
        self.box_width = float(s["box_width"])
        self.box_height = float(s["box_height"])
        self.box_spacing = float(s["box_spacing"])
        self.iterations = int(s["iterations"])
        self.link_distance = float(s["link_distance"])
        self.link_strength = float(s["link_strength"])
        self.charge_strength = float(s["charge_strength"])
        self.charge_distance_min = float(s["charge_distance_min"])
        self.charge_distance_max = float(s["charge_distance_max"])
        self.grid_pull_size = float(s["grid_pull_size"])
        self.grid_pull_strength = float(s["grid_pull_strength"])
        self.snap_grid = float(s["snap_grid"])
        self.min_separation = float(s["min_separation"])
        self.velocity_decay = float(s["velocity_decay"])
        self.collide_radius = self.box_width / 2 + self.box_spacing
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    # -- grids ---------------------------------------------------------------

    def grid_positions(self, node_ids: list[str], zone: Zone) -> dict[str, Position]:
        """Row-major grid, ``ceil(sqrt(n))`` columns, centred on the zone horizontally
        and filled from its top edge.

        Cells shrink to fit the zone but never below ``min_separation``; a grid
        too large for the zone at that pitch overflows it evenly on both sides.
        """
        if not node_ids:
            return {}
        side = math.ceil(math.sqrt(len(node_ids)))
        rows = math.ceil(len(node_ids) / side)
        col_pitch = max(min(self.box_width + self.box_spacing, zone.width / side), self.min_separation)
        row_pitch = max(min(self.box_height + self.box_spacing, zone.height / rows), self.min_separation)
        positions = {}
        for i, node_id in enumerate(node_ids):
            row, col = divmod(i, side)
            positions[node_id] = Position(
                zone.cx + (col - (side - 1) / 2) * col_pitch,
                zone.top + (row + 0.5) * row_pitch,
            )
        return positions

    # -- simulation ----------------------------------------------------------

    def simulate(self, n: int, links: list[tuple[int, int]], zone: Zone) -> np.ndarray:
        """Run the fixed number of ticks and return an (n, 2) array of centres."""
        pos = np.column_stack(
            [
                zone.cx + (self.rng.random(n) - 0.5) * zone.width * self.INITIAL_SPREAD,
                zone.cy + (self.rng.random(n) - 0.5) * zone.height * self.INITIAL_SPREAD,
            ]
        )
        vel = np.zeros_like(pos)
        if n == 0:
            return pos

        center = np.array([zone.cx, zone.cy])
        alpha = 1.0
        alpha_decay = 1 - self.ALPHA_MIN ** (1 / max(self.iterations, 1))

        if links:
            src = np.array([s for s, _ in links])
            dst = np.array([t for _, t in links])
            degree = np.bincount(np.concatenate([src, dst]), minlength=n).astype(float)
            bias = degree[src] / (degree[src] + degree[dst])

        not_self = ~np.eye(n, dtype=bool)
        charge_min2 = self.charge_distance_min ** 2
        charge_max2 = self.charge_distance_max ** 2
        collide_reach = 2 * self.collide_radius

        for _ in range(self.iterations):
            alpha += (0.0 - alpha) * alpha_decay

            # Links pull connected core nodes towards link_distance.
            if links:
                delta = (pos[dst] + vel[dst]) - (pos[src] + vel[src])
                length = np.maximum(np.hypot(delta[:, 0], delta[:, 1]), 1e-6)
                k = (length - self.link_distance) / length * alpha * self.link_strength
                delta *= k[:, None]
                np.add.at(vel, dst, -delta * bias[:, None])
                np.add.at(vel, src, delta * (1 - bias)[:, None])

            # Many-body charge between every pair within charge_distance_max.
            diff = pos[None, :, :] - pos[:, None, :]  # diff[i, j] = pos[j] - pos[i]
            dist2 = np.einsum("ijk,ijk->ij", diff, diff)
            near = not_self & (dist2 < charge_max2)
            clamped = np.where(dist2 < charge_min2, np.sqrt(charge_min2 * dist2), dist2)
            weight = np.where(near, self.charge_strength * alpha / np.maximum(clamped, 1e-6), 0.0)
            vel += np.einsum("ijk,ij->ik", diff, weight)

            # Collision: overlapping pairs are pushed apart, half each.
            predicted = pos + vel
            pdiff = predicted[:, None, :] - predicted[None, :, :]  # pdiff[i, j] = p_i - p_j
            pdist = np.sqrt(np.einsum("ijk,ijk->ij", pdiff, pdiff))
            overlap = not_self & (pdist < collide_reach) & (pdist > 0)
            push = np.where(overlap, (collide_reach - pdist) / np.maximum(pdist, 1e-6) * 0.5, 0.0)
            vel += np.einsum("ijk,ij->ik", pdiff, push)

            # Weak pull towards the nearest grid line keeps rows and columns tidy.
            target = np.round(pos / self.grid_pull_size) * self.grid_pull_size
            vel += (target - pos) * self.grid_pull_strength * alpha

            # Centring translates the whole cluster onto the zone centre.
            pos += center - pos.mean(axis=0)

            vel *= 1 - self.velocity_decay
            pos += vel

        return pos

    def _core_positions(self, graph: Graph, core_ids: list[str]) -> dict[str, Position]:
        if not core_ids:
            return {}
        index = {node_id: i for i, node_id in enumerate(core_ids)}
        links = [
            (index[edge.source], index[edge.target])
            for edge in graph.edges
            if edge.source in index and edge.target in index and edge.source != edge.target
        ]
        pos = self.simulate(len(core_ids), links, self.zones[NodeRole.CORE])
        snapped = np.round(pos / self.snap_grid) * self.snap_grid
        return {node_id: Position(float(snapped[i, 0]), float(snapped[i, 1])) for node_id, i in index.items()}

    # -- separation ----------------------------------------------------------

    def _ring(self, radius: int):
        """Grid offsets on the square ring at Chebyshev distance ``radius``, nearest first."""
        cells = [
            (dx, dy)
            for dx in range(-radius, radius + 1)
            for dy in range(-radius, radius + 1)
            if max(abs(dx), abs(dy)) == radius
        ]
        cells.sort(key=lambda c: (c[0] ** 2 + c[1] ** 2, c[1], c[0]))
        return cells

    def separate(self, ordered: list[tuple[str, Position]]) -> dict[str, Position]:
        """Greedy pass: keep each node where it is unless it sits within
        ``min_separation`` of an earlier one, else move it to the nearest free
        snap-grid cell."""
        placed: dict[str, Position] = {}
        coords = np.empty((0, 2))
        min2 = self.min_separation ** 2 - 1e-9

        def free(x: float, y: float) -> bool:
            if not len(coords):
                return True
            d2 = (coords[:, 0] - x) ** 2 + (coords[:, 1] - y) ** 2
            return bool(np.all(d2 >= min2))

        moved = 0
        for node_id, position in ordered:
            x, y = position.x, position.y
            if not free(x, y):
                moved += 1
                radius = 1
                found = None
                while found is None:
                    for dx, dy in self._ring(radius):
                        cx, cy = x + dx * self.snap_grid, y + dy * self.snap_grid
                        if free(cx, cy):
                            found = (cx, cy)
                            break
                    radius += 1
                x, y = found
            placed[node_id] = Position(x, y)
            coords = np.vstack([coords, [x, y]])

        if moved:
            logger.debug("Separation pass moved {} nodes", moved)
        return placed

    # -- entry points --------------------------------------------------------

    def positions(self, graph: Graph) -> dict[str, Position]:
        by_role: dict[NodeRole, list[str]] = {role: [] for role in NodeRole}
        for node in graph.nodes:
            by_role[node.role].append(node.id)

        fixed = {}
        fixed.update(self.grid_positions(by_role[NodeRole.UTILITY], self.zones[NodeRole.UTILITY]))
        fixed.update(self.grid_positions(by_role[NodeRole.STANDALONE], self.zones[NodeRole.STANDALONE]))
        core = self._core_positions(graph, by_role[NodeRole.CORE])

        ordered = [(node_id, fixed[node_id]) for node_id in by_role[NodeRole.UTILITY]]
        ordered += [(node_id, fixed[node_id]) for node_id in by_role[NodeRole.STANDALONE]]
        ordered += [(node_id, core[node_id]) for node_id in by_role[NodeRole.CORE]]
        return self.separate(ordered)

    def apply(self, graph: Graph) -> Graph:
        return _with_positions(graph, self.positions(graph))


def apply_layout(
    graph: Graph,
    strategy: LayoutStrategy | str = LayoutStrategy.LAYERED,
    settings: dict[str, Any] | None = None,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> Graph:
    """Position every node with the chosen strategy."""
    strategy = LayoutStrategy(strategy)
    if strategy is LayoutStrategy.ZONED:
        return ZonedForceLayout(settings, rng=rng, seed=seed).apply(graph)
    return LayeredLayout(settings).apply(graph)


def center_on_node(graph: Graph, node_id: str, canvas: tuple[float, float] | None = None) -> Graph:
    """Translate every position so ``node_id`` sits at the canvas centre.

    Unknown ids return the graph unchanged.
    """
    target = graph.node(node_id)
    if target is None:
        return graph
    width, height = canvas or (float(LAYOUT_DEFAULTS["canvas_width"]), float(LAYOUT_DEFAULTS["canvas_height"]))
    dx = width / 2 - target.position.x
    dy = height / 2 - target.position.y
    return graph.with_nodes(
        replace(node, position=Position(node.position.x + dx, node.position.y + dy)) for node in graph.nodes
    )
