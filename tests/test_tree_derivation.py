import pytest
from epigen.core.errors import ValidationError
from epigen.models.decision_tree import DecisionTree
from epigen.services.tree_derivation import (
    SYNTHETIC_ROOT_ID,
    all_decision_trees_to_skill_nodes,
    compute_depths,
    decision_tree_to_skill_nodes,
)


def test_chain_derivation(make_tree, make_node):
    tree = make_tree("t", [
        make_node("a", "problem"),
        make_node("b", "solution"),
        make_node("c", "final"),
    ], [("a", "b"), ("b", "c")])

    nodes = decision_tree_to_skill_nodes(tree)

    assert [n.id for n in nodes] == ["t-a", "t-b", "t-c"]
    assert nodes[0].parent_ids is None
    assert nodes[1].parent_ids == ["t-a"]
    assert nodes[2].parent_ids == ["t-b"]
    assert compute_depths(tree) == {"a": 0, "b": 1, "c": 2}
    assert [n.score for n in nodes] == [0, 50, 100]
    assert nodes[1].label == "B"
    assert nodes[1].descriptions == ["Description of b"]


def test_multiple_parents_take_the_deepest(make_tree, make_node):
    # root -> a -> b -> d and root -> d
    tree = make_tree("t", [
        make_node("root", "problem"),
        make_node("a"),
        make_node("b"),
        make_node("d", "final"),
    ], [("root", "a"), ("a", "b"), ("b", "d"), ("root", "d")])

    nodes = {n.id: n for n in decision_tree_to_skill_nodes(tree)}

    assert compute_depths(tree)["d"] == 3
    assert nodes["t-d"].parent_ids == ["t-b", "t-root"]
    assert nodes["t-d"].score == 100
    assert nodes["t-a"].score == 33
    assert nodes["t-b"].score == 67


def test_scores_round_half_up(make_tree, make_node):
    ids = [f"n{i}" for i in range(9)]
    nodes = [make_node(ids[0], "problem")] + [make_node(i) for i in ids[1:]]
    tree = make_tree("t", nodes, list(zip(ids, ids[1:])))

    scores = [n.score for n in decision_tree_to_skill_nodes(tree)]
    # 1/8 of the way down is 12.5
    assert scores[1] == 13


def test_single_node_tree(make_tree, make_node):
    tree = make_tree("t", [make_node("root", "problem")])
    nodes = decision_tree_to_skill_nodes(tree)
    assert len(nodes) == 1
    assert nodes[0].score == 0
    assert nodes[0].parent_ids is None


def test_flat_non_problem_nodes_score_full(make_tree, make_node):
    tree = make_tree("t", [make_node("root", "problem"), make_node("loose", "final")])
    nodes = {n.id: n for n in decision_tree_to_skill_nodes(tree)}
    assert nodes["t-loose"].score == 100
    assert nodes["t-loose"].parent_ids == []


def test_cycle_does_not_recurse_forever(make_tree, make_node):
    tree = make_tree("t", [
        make_node("root", "problem"),
        make_node("a"),
        make_node("b"),
    ], [("root", "a"), ("a", "b"), ("b", "a")])

    depths = compute_depths(tree)
    assert depths["root"] == 0
    assert depths["b"] > depths["root"]


def test_empty_tree_is_rejected():
    tree = DecisionTree(id="t", root_node_id="root", nodes=[], edges=[])
    with pytest.raises(ValidationError):
        decision_tree_to_skill_nodes(tree)


def test_multi_tree_union(make_tree, make_node):
    t1 = make_tree("t1", [make_node("r", "problem")])
    t2 = make_tree("t2", [make_node("r", "problem")])

    nodes = all_decision_trees_to_skill_nodes([t1, t2])

    assert len(nodes) == 3
    root = nodes[0]
    assert root.id == SYNTHETIC_ROOT_ID
    assert root.hidden is True
    assert root.score == 0
    assert root.parent_ids is None
    assert [n.id for n in nodes[1:]] == ["t1-r", "t2-r"]
    assert all(n.parent_ids == [SYNTHETIC_ROOT_ID] for n in nodes[1:])


def test_multi_tree_union_keeps_inner_parents(chain_tree):
    nodes = {n.id: n for n in all_decision_trees_to_skill_nodes([chain_tree])}
    assert nodes["t1-root"].parent_ids == [SYNTHETIC_ROOT_ID]
    assert nodes["t1-x"].parent_ids == ["t1-root"]


def test_empty_union():
    assert all_decision_trees_to_skill_nodes([]) == []


def test_derivation_is_deterministic(chain_tree):
    assert decision_tree_to_skill_nodes(chain_tree) == decision_tree_to_skill_nodes(chain_tree)
