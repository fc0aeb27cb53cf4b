"""Pytest configuration and fixtures."""
import os
from pathlib import Path

import pytest

from depviz.graph import Edge, Graph, Node


@pytest.fixture
def make_project(tmp_path):
    """Write a source tree from a {relative path: content} mapping.

    Returns the project root. Call it more than once to add files.
    """
    root = tmp_path / "project"
    root.mkdir()

    def _make(files: dict[str, str]) -> Path:
        for rel_path, content in files.items():
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def make_graph():
    """Build a Graph from bare ids and (source, target) pairs."""

    def _make(ids, pairs=()) -> Graph:
        nodes = tuple(Node(id=node_id, label=node_id) for node_id in ids)
        edges = tuple(Edge(source, target) for source, target in pairs)
        return Graph(nodes=nodes, edges=edges)

    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Strip DEPVIZ_* overrides so config tests see only what they set."""
    for key in list(os.environ):
        if key.startswith("DEPVIZ_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
