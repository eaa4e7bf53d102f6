import json
import pytest
from unittest.mock import AsyncMock
from epigen.models.decision_tree import DecisionEdge, DecisionNode, DecisionTree
from epigen.services.tree_store import TreeStore


def _make_node(node_id, node_type="solution", title=None, description="", tags=None):
    return DecisionNode(
        id=node_id,
        type=node_type,
        title=title or node_id.upper(),
        description=description or f"Description of {node_id}",
        tags=tags or [],
    )


def _make_tree(tree_id, nodes, edges=(), root_node_id=None):
    """`edges` is a list of (from_id, to_id) pairs; the first node is the root by default."""
    return DecisionTree(
        id=tree_id,
        root_node_id=root_node_id or nodes[0].id,
        nodes=nodes,
        edges=[
            DecisionEdge(id=f"e_{src}_{dst}", from_node_id=src, to_node_id=dst)
            for src, dst in edges
        ],
    )


@pytest.fixture
def make_node():
    return _make_node


@pytest.fixture
def make_tree():
    return _make_tree


@pytest.fixture
def store():
    return TreeStore()


@pytest.fixture
def chain_tree():
    """root -> x -> y"""
    return _make_tree("t1", [
        _make_node("root", "problem", title="Financial stress", description="Young adult under financial stress", tags=["youth"]),
        _make_node("x", "solution", title="Make a budget"),
        _make_node("y", "final", title="Stable finances"),
    ], [("root", "x"), ("x", "y")])


@pytest.fixture
def generator():
    """A generation backend whose replies are set per test as dicts."""
    mock = AsyncMock()

    def reply(*payloads):
        mock.generate.side_effect = [json.dumps(p) for p in payloads]

    mock.reply = reply
    return mock
