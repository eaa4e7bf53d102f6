import threading
from typing import Any, Dict, Iterable, List, Optional
from epigen.core.errors import ConcurrentModificationError, ValidationError
from epigen.models.decision_tree import DecisionNode, DecisionTree, utc_now

IMMUTABLE_FIELDS = {"id", "created_at", "version"}


def validate_structure(tree: DecisionTree):
    """Raises ValidationError unless ids are unique and every edge resolves."""
    node_ids = set()
    for node in tree.nodes:
        if node.id in node_ids:
            raise ValidationError(f"Duplicate node id {node.id} in tree {tree.id}")
        node_ids.add(node.id)

    if tree.root_node_id not in node_ids:
        raise ValidationError(f"Root node {tree.root_node_id} not found in tree {tree.id}")

    edge_ids = set()
    for edge in tree.edges:
        if edge.id in edge_ids:
            raise ValidationError(f"Duplicate edge id {edge.id} in tree {tree.id}")
        edge_ids.add(edge.id)
        for endpoint in (edge.from_node_id, edge.to_node_id):
            if endpoint not in node_ids:
                raise ValidationError(f"Edge {edge.id} references unknown node {endpoint}")


def node_matches(node: DecisionNode, description: Optional[str] = None, tags: Optional[Iterable[str]] = None) -> bool:
    if description:
        desc_lower = description.lower()
        if desc_lower not in node.title.lower() and desc_lower not in node.description.lower():
            return False
    if tags:
        if not set(tags) & set(node.tags):
            return False
    return True


class TreeStore:
    """In-memory decision tree store.

    Reads hand out copies, so callers never hold a reference to stored state.
    Updates are atomic per tree id.
    """

    def __init__(self):
        self.trees: Dict[str, DecisionTree] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, tree_id: str) -> threading.Lock:
        with self._locks_guard:
            if tree_id not in self._locks:
                self._locks[tree_id] = threading.Lock()
            return self._locks[tree_id]

    def save(self, tree: DecisionTree):
        with self._lock_for(tree.id):
            self.trees[tree.id] = tree.model_copy(deep=True)

    def get(self, tree_id: str) -> Optional[DecisionTree]:
        tree = self.trees.get(tree_id)
        return tree.model_copy(deep=True) if tree else None

    def get_all(self) -> List[DecisionTree]:
        return [tree.model_copy(deep=True) for tree in list(self.trees.values())]

    def update(self, tree_id: str, updates: Dict[str, Any], expected_version: Optional[int] = None) -> Optional[DecisionTree]:
        """Shallow-merges `updates` into the stored tree and returns the new state.

        `nodes` and `edges` are replaced wholesale. Returns None when the tree
        does not exist. With `expected_version`, the write only happens if the
        stored tree is still at that version.
        """
        bad_fields = set(updates) - (set(DecisionTree.model_fields) - IMMUTABLE_FIELDS)
        if bad_fields:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(bad_fields))}")

        with self._lock_for(tree_id):
            current = self.trees.get(tree_id)
            if current is None:
                return None
            if expected_version is not None and current.version != expected_version:
                raise ConcurrentModificationError(tree_id, expected_version, current.version)

            merged = current.model_dump()
            merged.update(updates)
            merged["updated_at"] = utc_now()
            merged["version"] = current.version + 1
            updated = DecisionTree.model_validate(merged)
            validate_structure(updated)

            self.trees[tree_id] = updated.model_copy(deep=True)
            return updated

    def search_trees(self, description: Optional[str] = None, tags: Optional[List[str]] = None) -> List[DecisionTree]:
        all_trees = self.get_all()
        if not description and not tags:
            return all_trees

        results = []
        for tree in all_trees:
            root = tree.root_node
            if not root:
                continue
            # The root is part of tree.nodes, so one pass covers both
            if description and not any(node_matches(n, description=description) for n in tree.nodes):
                continue
            if tags and not any(node_matches(n, tags=tags) for n in tree.nodes):
                continue
            results.append(tree)
        return results

    def search_nodes(self, description: Optional[str] = None, tags: Optional[List[str]] = None) -> List[DecisionNode]:
        all_nodes = [node for tree in self.get_all() for node in tree.nodes]
        if not description and not tags:
            return all_nodes
        return [node for node in all_nodes if node_matches(node, description, tags)]
