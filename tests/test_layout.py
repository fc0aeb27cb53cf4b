"""Tests for the layered and zoned-force layouts."""

import itertools
import math

import numpy as np
import pytest

from depviz.config_runtime import DEFAULTS
from depviz.graph import (
    LayeredLayout,
    LayoutStrategy,
    NodeRole,
    Position,
    ZonedForceLayout,
    apply_layout,
    center_on_node,
    classify_nodes,
)


def _positions(graph):
    return {n.id: (n.position.x, n.position.y) for n in graph.nodes}


def _min_distance(graph):
    points = [(n.position.x, n.position.y) for n in graph.nodes]
    return min(math.dist(p, q) for p, q in itertools.combinations(points, 2))


@pytest.fixture
def mixed_graph(make_graph):
    """Core cluster with a cycle, a shared utility and some unused files."""
    core = [f"core{i}.ts" for i in range(12)]
    pairs = [(core[i], core[i + 1]) for i in range(11)] + [(core[11], core[0]), (core[3], core[7])]
    pairs += [(c, "utils.ts") for c in core[:6]]
    unused = [f"orphan{i}.ts" for i in range(8)]
    graph = make_graph(core + ["utils.ts"] + unused, pairs)
    return classify_nodes(graph)


class TestLayeredLayout:
    def test_importer_sits_above_imported(self, make_graph):
        graph = LayeredLayout().apply(make_graph(["app", "page", "lib"], [("app", "page"), ("page", "lib")]))
        pos = _positions(graph)

        assert pos["app"][1] < pos["page"][1] < pos["lib"][1]

    def test_rank_is_longest_path(self, make_graph):
        graph = make_graph(["a", "b", "c"], [("a", "b"), ("b", "c"), ("a", "c")])

        assert LayeredLayout().ranks(graph) == {"a": 0, "b": 1, "c": 2}

    def test_cycle_members_share_a_rank(self, make_graph):
        graph = make_graph(["entry", "a", "b"], [("entry", "a"), ("a", "b"), ("b", "a")])

        ranks = LayeredLayout().ranks(graph)

        assert ranks["a"] == ranks["b"] == 1
        assert ranks["entry"] == 0

    def test_same_rank_nodes_do_not_overlap(self, make_graph):
        graph = make_graph(["root", "a", "b", "c", "d"], [("root", x) for x in "abcd"])
        laid_out = LayeredLayout().apply(graph)

        xs = sorted(n.position.x for n in laid_out.nodes if n.id != "root")
        gaps = [b - a for a, b in zip(xs, xs[1:])]
        assert all(gap >= DEFAULTS["layout"]["node_width"] for gap in gaps)

    def test_parent_is_centred_over_children(self, make_graph):
        graph = LayeredLayout().apply(make_graph(["root", "a", "b"], [("root", "a"), ("root", "b")]))
        pos = _positions(graph)

        assert pos["root"][0] == pytest.approx((pos["a"][0] + pos["b"][0]) / 2)

    def test_deterministic(self, mixed_graph):
        assert _positions(LayeredLayout().apply(mixed_graph)) == _positions(LayeredLayout().apply(mixed_graph))

    def test_positions_are_non_negative_centres(self, mixed_graph):
        graph = LayeredLayout().apply(mixed_graph)
        half_w = DEFAULTS["layout"]["node_width"] / 2
        half_h = DEFAULTS["layout"]["node_height"] / 2

        assert min(n.position.x for n in graph.nodes) == pytest.approx(half_w)
        assert min(n.position.y for n in graph.nodes) == pytest.approx(half_h)

    def test_empty_graph(self, make_graph):
        assert LayeredLayout().apply(make_graph([])).nodes == ()


class TestZonedForceLayout:
    def test_seeded_runs_are_reproducible(self, mixed_graph):
        first = ZonedForceLayout(seed=42).apply(mixed_graph)
        second = ZonedForceLayout(rng=np.random.default_rng(42)).apply(mixed_graph)

        assert _positions(first) == _positions(second)

    def test_min_separation_for_fifty_nodes(self, make_graph):
        ids = [f"n{i}.ts" for i in range(50)]
        pairs = [(ids[i], ids[(i * 7 + 3) % 50]) for i in range(50)]
        pairs += [(ids[i], "n0.ts") for i in range(1, 5)]
        graph = classify_nodes(make_graph(ids, pairs))

        for seed in (0, 1, 2):
            laid_out = ZonedForceLayout(seed=seed).apply(graph)
            assert _min_distance(laid_out) >= DEFAULTS["layout"]["min_separation"] - 1e-6

    def test_min_separation_with_all_roles(self, mixed_graph):
        laid_out = ZonedForceLayout(seed=3).apply(mixed_graph)

        assert _min_distance(laid_out) >= DEFAULTS["layout"]["min_separation"] - 1e-6

    def test_core_nodes_snap_to_grid(self, mixed_graph):
        laid_out = ZonedForceLayout(seed=5).apply(mixed_graph)
        snap = DEFAULTS["layout"]["snap_grid"]

        for node in laid_out.nodes:
            if node.role is NodeRole.CORE:
                assert node.position.x % snap == pytest.approx(0) or node.position.x % snap == pytest.approx(snap)
                assert node.position.y % snap == pytest.approx(0) or node.position.y % snap == pytest.approx(snap)

    def test_zone_placement(self, mixed_graph):
        layout = ZonedForceLayout(seed=11)
        laid_out = layout.apply(mixed_graph)

        core_xs = [n.position.x for n in laid_out.nodes if n.role is NodeRole.CORE]
        utility_xs = [n.position.x for n in laid_out.nodes if n.role is NodeRole.UTILITY]
        standalone_xs = [n.position.x for n in laid_out.nodes if n.role is NodeRole.STANDALONE]

        assert max(utility_xs) < min(core_xs)
        assert max(core_xs) < min(standalone_xs)

    def test_grid_nodes_stay_inside_their_zones(self, make_graph):
        core = [f"core{i}.ts" for i in range(6)]
        utils = [f"util{i}.ts" for i in range(4)]
        orphans = [f"orphan{i}.ts" for i in range(8)]
        pairs = [(core[i], core[i + 1]) for i in range(5)] + [(core[i], u) for i, u in enumerate(utils)]
        graph = classify_nodes(make_graph(core + utils + orphans, pairs))

        laid_out = ZonedForceLayout(seed=1).apply(graph)

        zones = {
            NodeRole.UTILITY: DEFAULTS["layout"]["utility_zone"],
            NodeRole.STANDALONE: DEFAULTS["layout"]["standalone_zone"],
        }
        grid_nodes = [n for n in laid_out.nodes if n.role in zones]
        assert len(grid_nodes) == 12
        for node in grid_nodes:
            cx, cy, width, height = zones[node.role]
            assert cx - width / 2 <= node.position.x <= cx + width / 2, node.id
            assert cy - height / 2 <= node.position.y <= cy + height / 2, node.id
        assert _min_distance(laid_out) >= DEFAULTS["layout"]["min_separation"] - 1e-6

    def test_oversized_grid_overflows_evenly(self, make_graph):
        orphans = [f"orphan{i}.ts" for i in range(25)]
        graph = classify_nodes(make_graph(orphans))

        laid_out = ZonedForceLayout(seed=0).apply(graph)

        xs = [n.position.x for n in laid_out.nodes]
        cx = DEFAULTS["layout"]["standalone_zone"][0]
        assert sum(xs) / len(xs) == pytest.approx(cx)
        assert max(xs) - min(xs) == pytest.approx(4 * DEFAULTS["layout"]["min_separation"])
        assert _min_distance(laid_out) >= DEFAULTS["layout"]["min_separation"] - 1e-6

    def test_grid_is_row_major(self, make_graph):
        graph = classify_nodes(make_graph([f"o{i}" for i in range(5)]))
        layout = ZonedForceLayout(seed=0)
        pos = _positions(layout.apply(graph))

        # 5 nodes -> 3 columns, 2 rows
        assert pos["o0"][1] == pos["o1"][1] == pos["o2"][1]
        assert pos["o3"][1] == pos["o4"][1] > pos["o0"][1]
        assert pos["o0"][0] < pos["o1"][0] < pos["o2"][0]
        assert pos["o3"][0] == pos["o0"][0]

    def test_grids_placed_without_core_nodes(self, make_graph):
        graph = classify_nodes(make_graph(["utils.ts", "helper.ts", "lonely.ts"], [("utils.ts", "helper.ts")]))
        assert NodeRole.CORE not in {n.role for n in graph.nodes}

        pos = _positions(ZonedForceLayout(seed=1).apply(graph))

        utility_right = DEFAULTS["layout"]["utility_zone"][0] + DEFAULTS["layout"]["utility_zone"][2] / 2
        standalone_left = DEFAULTS["layout"]["standalone_zone"][0] - DEFAULTS["layout"]["standalone_zone"][2] / 2
        assert pos["utils.ts"][0] < utility_right
        assert pos["lonely.ts"][0] > standalone_left

    def test_empty_graph(self, make_graph):
        assert ZonedForceLayout(seed=0).apply(make_graph([])).nodes == ()

    def test_edges_and_counts_untouched(self, mixed_graph):
        laid_out = ZonedForceLayout(seed=9).apply(mixed_graph)

        assert laid_out.edges == mixed_graph.edges
        assert [n.dependent_count for n in laid_out.nodes] == [n.dependent_count for n in mixed_graph.nodes]


class TestApplyLayout:
    def test_dispatch_by_name(self, mixed_graph):
        layered = apply_layout(mixed_graph, "layered")
        zoned = apply_layout(mixed_graph, LayoutStrategy.ZONED, seed=4)

        assert _positions(layered) == _positions(LayeredLayout().apply(mixed_graph))
        assert _positions(zoned) == _positions(ZonedForceLayout(seed=4).apply(mixed_graph))

    def test_unknown_strategy(self, mixed_graph):
        with pytest.raises(ValueError):
            apply_layout(mixed_graph, "circular")

    def test_settings_override(self, make_graph):
        graph = make_graph(["a", "b"], [("a", "b")])

        laid_out = apply_layout(graph, "layered", {"rank_sep": 300, "node_height": 100})
        pos = _positions(laid_out)

        assert pos["b"][1] - pos["a"][1] == pytest.approx(400)


class TestCenterOnNode:
    def test_selected_node_moves_to_canvas_centre(self, make_graph):
        graph = LayeredLayout().apply(make_graph(["a", "b"], [("a", "b")]))
        before = _positions(graph)

        centred = center_on_node(graph, "b")
        after = _positions(centred)

        assert after["b"] == (800.0, 500.0)
        dx, dy = after["a"][0] - before["a"][0], after["a"][1] - before["a"][1]
        assert (dx, dy) == (after["b"][0] - before["b"][0], after["b"][1] - before["b"][1])

    def test_custom_canvas(self, make_graph):
        graph = make_graph(["a"])

        assert center_on_node(graph, "a", canvas=(200, 100)).node("a").position == Position(100.0, 50.0)

    def test_unknown_id_returns_graph_unchanged(self, make_graph):
        graph = make_graph(["a"])

        assert center_on_node(graph, "missing") is graph
