"""Projection of decision trees onto a skill-tree layout.

Scoring is depth-proportional: a node's score is its depth relative to the
deepest node of its tree, so the colour runs from the problem (0) to the
final steps (100). Problem nodes always score 0.
"""
import math
from typing import Dict, List
from epigen.core.errors import ValidationError
from epigen.models.decision_tree import DecisionTree
from epigen.models.skill_tree import SkillNode

SYNTHETIC_ROOT_ID = "epigen-root"
SYNTHETIC_ROOT_LABEL = "EpiGen Trees"


def namespaced_id(tree_id: str, node_id: str) -> str:
    return f"{tree_id}-{node_id}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parent_map(tree: DecisionTree) -> Dict[str, List[str]]:
    node_to_parents: Dict[str, List[str]] = {}
    for edge in tree.edges:
        node_to_parents.setdefault(edge.to_node_id, []).append(edge.from_node_id)
    return node_to_parents


def compute_depths(tree: DecisionTree) -> Dict[str, int]:
    """Longest distance from a parentless node, per node id."""
    node_to_parents = parent_map(tree)
    depths: Dict[str, int] = {}
    in_progress = set()

    def depth_of(node_id: str) -> int:
        if node_id in depths:
            return depths[node_id]
        if node_id in in_progress:
            # Cycle: cut it here
            return 0
        parents = node_to_parents.get(node_id, [])
        if not parents:
            depths[node_id] = 0
            return 0
        in_progress.add(node_id)
        depth = max(depth_of(pid) for pid in parents) + 1
        in_progress.discard(node_id)
        depths[node_id] = depth
        return depth

    for node in tree.nodes:
        depth_of(node.id)
    return depths


def decision_tree_to_skill_nodes(tree: DecisionTree) -> List[SkillNode]:
    if not tree.nodes:
        raise ValidationError(f"Tree {tree.id} has no nodes")

    node_to_parents = parent_map(tree)
    depths = compute_depths(tree)
    max_depth = max(depths.values())

    skill_nodes = []
    for node in tree.nodes:
        depth = depths.get(node.id, 0)
        if node.type == "problem":
            score = 0
        elif max_depth == 0:
            score = 100
        else:
            score = _round_half_up(depth / max_depth * 100)

        if node.id == tree.root_node_id:
            parent_ids = None
        else:
            parent_ids = [namespaced_id(tree.id, pid) for pid in node_to_parents.get(node.id, [])]

        skill_nodes.append(SkillNode(
            id=namespaced_id(tree.id, node.id),
            label=node.title,
            parent_ids=parent_ids,
            descriptions=[node.description],
            score=score,
        ))
    return skill_nodes


def all_decision_trees_to_skill_nodes(trees: List[DecisionTree]) -> List[SkillNode]:
    """Unions several trees under one hidden root so they render as a forest."""
    if not trees:
        return []

    all_skill_nodes = [SkillNode(
        id=SYNTHETIC_ROOT_ID,
        label=SYNTHETIC_ROOT_LABEL,
        parent_ids=None,
        descriptions=["Root node for every decision tree"],
        score=0,
        hidden=True,
    )]

    for tree in trees:
        tree_nodes = decision_tree_to_skill_nodes(tree)
        root_id = namespaced_id(tree.id, tree.root_node_id)
        for skill_node in tree_nodes:
            if skill_node.id == root_id:
                skill_node.parent_ids = [SYNTHETIC_ROOT_ID]
        all_skill_nodes.extend(tree_nodes)
    return all_skill_nodes
