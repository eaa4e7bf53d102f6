import logging
import uuid
from typing import List, Optional
from epigen.core import config
from epigen.core.errors import InvalidState, NotFound
from epigen.core.prompts import ALTERNATIVE_SYSTEM_PROMPT, SKIP_STEP_SYSTEM_PROMPT
from epigen.models.decision_tree import (
    AlternativeSolutionResponse,
    DecisionEdge,
    DecisionNode,
    DecisionTree,
    NodeMetadata,
    SkipStepResponse,
    utc_now,
)
from epigen.models.drafts import AlternativeDraft, SkipStepDraft
from epigen.services.generation_service import parse_draft
from epigen.services.tree_store import TreeStore

logger = logging.getLogger(__name__)

STYLE_SAMPLE_SIZE = 3
ALTERNATIVE_PATH_LABEL = "Alternative path"
CONTINUATION_LABEL = "Continuation of the alternative path"


def new_node_id() -> str:
    return f"node_{uuid.uuid4().hex}"


def new_edge_id() -> str:
    return f"edge_{uuid.uuid4().hex}"


def provenance() -> NodeMetadata:
    return NodeMetadata(source=config.GENERATION_SOURCE, created_at=utc_now())


def describe(node: DecisionNode) -> str:
    return f"- {node.title}: {node.description}"


class TreeExtensionService:
    """Appends generated alternatives to stored trees.

    Structural checks run before the generation call and again against a
    fresh read before committing, since the tree may have grown meanwhile.
    Nothing is ever removed from a tree.
    """

    def __init__(self, store: TreeStore, generator):
        self.store = store
        self.generator = generator

    def _get_tree(self, tree_id: str) -> DecisionTree:
        tree = self.store.get(tree_id)
        if not tree:
            raise NotFound(f"Tree {tree_id} not found")
        return tree

    def _require_node(self, tree: DecisionTree, node_id: str) -> DecisionNode:
        node = tree.get_node(node_id)
        if not node:
            raise NotFound(f"Node {node_id} not found in tree {tree.id}")
        return node

    def _require_edge(self, tree: DecisionTree, from_node_id: str, to_node_id: str) -> DecisionEdge:
        edge = tree.get_edge(from_node_id, to_node_id)
        if not edge:
            raise NotFound(f"No edge from {from_node_id} to {to_node_id} in tree {tree.id}")
        return edge

    def _commit(self, tree_id: str, nodes: List[DecisionNode], edges: List[DecisionEdge], check) -> DecisionTree:
        current = self._get_tree(tree_id)
        check(current)
        updated = self.store.update(
            tree_id,
            {"nodes": current.nodes + nodes, "edges": current.edges + edges},
            expected_version=current.version,
        )
        if updated is None:
            raise NotFound(f"Tree {tree_id} not found")
        return updated

    async def add_alternative(self, tree_id: str, node_id: str, reason: Optional[str] = None) -> AlternativeSolutionResponse:
        tree = self._get_tree(tree_id)
        current_node = self._require_node(tree, node_id)

        existing_solutions = "\n".join(
            describe(n) for n in tree.nodes if n.type in ("solution", "final")
        ) or "None"
        reason_line = f"Reason for alternative: {reason}" if reason else ""
        prompt = f"""Find an alternative solution for the following node in a decision tree:

Current node: {current_node.title}
Description: {current_node.description}
{reason_line}

Existing solutions (avoid similar approaches):
{existing_solutions}

Generate a new alternative solution based on research from digiconsumers.fi publications, especially Mette Ranta's work."""

        response = await self.generator.generate(prompt, ALTERNATIVE_SYSTEM_PROMPT)
        draft = parse_draft(response, AlternativeDraft)

        new_node = DecisionNode(
            id=new_node_id(),
            type=draft.node.type,
            title=draft.node.title,
            description=draft.node.description,
            tags=draft.node.tags,
            metadata=provenance(),
        )
        new_edge = DecisionEdge(
            id=new_edge_id(),
            from_node_id=node_id,
            to_node_id=new_node.id,
            description=draft.edge.description if draft.edge else None,
            rating=0,
            rating_count=0,
        )

        updated = self._commit(
            tree_id, [new_node], [new_edge],
            lambda current: self._require_node(current, node_id),
        )
        logger.info(f"Added alternative {new_node.id} under {node_id} in tree {tree_id}")
        return AlternativeSolutionResponse(tree=updated, new_node_id=new_node.id, new_edge_id=new_edge.id)

    async def skip_step(self, tree_id: str, from_node_id: str, to_node_id: str, reason: Optional[str] = None) -> SkipStepResponse:
        tree = self._get_tree(tree_id)
        source = self._require_node(tree, from_node_id)
        skipped = self._require_node(tree, to_node_id)
        self._require_edge(tree, from_node_id, to_node_id)

        successors = tree.successors(to_node_id)
        if not successors:
            raise InvalidState(f"Cannot skip {to_node_id}: no step follows it")

        examples = [n for n in tree.nodes if n.type == "solution"][:STYLE_SAMPLE_SIZE]
        reason_line = f"Reason for skipping: {reason}" if reason else ""
        successor_lines = "\n".join(describe(n) for n in successors)
        example_lines = "\n".join(describe(n) for n in examples) or "None"
        prompt = f"""Propose a step that replaces a step the user wants to skip.

Source step: {source.title}
Description: {source.description}

Step to skip: {skipped.title}
Description: {skipped.description}
{reason_line}

Steps that follow the skipped step (the new step must lead to them):
{successor_lines}

Example steps (match their style):
{example_lines}"""

        response = await self.generator.generate(prompt, SKIP_STEP_SYSTEM_PROMPT)
        draft = parse_draft(response, SkipStepDraft)

        new_node = DecisionNode(
            id=new_node_id(),
            type="solution",
            title=draft.node.title,
            description=draft.node.description,
            tags=draft.node.tags,
            metadata=provenance(),
        )
        new_edges = [DecisionEdge(
            id=new_edge_id(),
            from_node_id=from_node_id,
            to_node_id=new_node.id,
            description=ALTERNATIVE_PATH_LABEL,
            rating=0,
            rating_count=0,
        )]
        for successor in successors:
            new_edges.append(DecisionEdge(
                id=new_edge_id(),
                from_node_id=new_node.id,
                to_node_id=successor.id,
                description=CONTINUATION_LABEL,
                rating=0,
                rating_count=0,
            ))

        def still_valid(current: DecisionTree):
            self._require_node(current, from_node_id)
            self._require_node(current, to_node_id)
            self._require_edge(current, from_node_id, to_node_id)
            for successor in successors:
                self._require_node(current, successor.id)

        updated = self._commit(tree_id, [new_node], new_edges, still_valid)
        logger.info(f"Added bypass {new_node.id} around {to_node_id} in tree {tree_id}")
        return SkipStepResponse(
            tree=updated,
            new_node_id=new_node.id,
            new_edge_ids=[e.id for e in new_edges],
        )
