import logging
import uuid
from typing import Dict, List, Optional
from epigen.core import config
from epigen.core.errors import MalformedDraftError, ValidationError
from epigen.core.prompts import (
    BRANCHING_TREE_SYSTEM_PROMPT,
    LINEAR_TREE_SYSTEM_PROMPT,
    SIMILARITY_SYSTEM_PROMPT,
)
from epigen.models.decision_tree import CreateProblemResponse, DecisionEdge, DecisionNode, DecisionTree, utc_now
from epigen.models.drafts import LinearTreeDraft, SimilarityDraft, StepDraft, TreeDraft
from epigen.services.generation_service import parse_draft
from epigen.services.tree_extension_service import new_edge_id, new_node_id, provenance
from epigen.services.tree_store import TreeStore

logger = logging.getLogger(__name__)


def merge_tags(*tag_lists: Optional[List[str]]) -> List[str]:
    merged = []
    for tags in tag_lists:
        for tag in tags or []:
            if tag not in merged:
                merged.append(tag)
    return merged


def truncate_title(title: str, max_length: int) -> str:
    if len(title) > max_length:
        return title[:max_length - 3] + "..."
    return title


def check_reachable(root_id: str, node_ids: List[str], edges: List[DecisionEdge]):
    children: Dict[str, List[str]] = {}
    for edge in edges:
        children.setdefault(edge.from_node_id, []).append(edge.to_node_id)

    seen = {root_id}
    stack = [root_id]
    while stack:
        for child in children.get(stack.pop(), []):
            if child not in seen:
                seen.add(child)
                stack.append(child)

    unreachable = [nid for nid in node_ids if nid not in seen]
    if unreachable:
        raise MalformedDraftError(f"Nodes not reachable from the root: {', '.join(unreachable)}")


class ProblemService:
    """Turns a problem description into a tree id: an existing match or a new tree."""

    def __init__(self, store: TreeStore, generator, topology: Optional[str] = None):
        self.store = store
        self.generator = generator
        self.topology = topology or config.TREE_TOPOLOGY
        if self.topology not in config.TREE_TOPOLOGIES:
            raise ValueError(f"Unknown tree topology: {self.topology}")

    async def resolve(self, description: str, tags: Optional[List[str]] = None) -> CreateProblemResponse:
        if not description or not description.strip():
            raise ValidationError("Problem description is required")

        similar = await self.find_similar_tree(description)
        if similar:
            logger.info(f"Problem matches existing tree {similar.id}")
            return CreateProblemResponse(existing_tree_id=similar.id)

        tree = await self.create_tree(description, tags or [])
        self.store.save(tree)
        logger.info(f"Created {self.topology} tree {tree.id} with {len(tree.nodes)} nodes")
        return CreateProblemResponse(new_tree=tree)

    async def find_similar_tree(self, description: str) -> Optional[DecisionTree]:
        existing_trees = self.store.get_all()
        if not existing_trees:
            return None

        existing_problems = []
        for tree in existing_trees:
            root = tree.root_node
            title = root.title if root else ""
            root_description = root.description if root else ""
            existing_problems.append(f"Tree {tree.id}: {title} - {root_description}")
        problems_str = "\n\n".join(existing_problems)

        prompt = f"""Check if this problem matches any existing problems:

New problem: {description}

Existing problems:
{problems_str}

Return JSON with match analysis."""

        response = await self.generator.generate(prompt, SIMILARITY_SYSTEM_PROMPT)
        analysis = parse_draft(response, SimilarityDraft)

        if analysis.matches and analysis.similarity > config.SIMILARITY_THRESHOLD and analysis.tree_id:
            return self.store.get(analysis.tree_id)
        return None

    async def create_tree(self, description: str, tags: List[str]) -> DecisionTree:
        tags_line = f"Tags: {', '.join(tags)}" if tags else ""
        if self.topology == "linear":
            prompt = f"""Create a step-by-step path for the following problem:

Problem description: {description}
{tags_line}

Base the steps on research from digiconsumers.fi publications, especially focusing on Mette Ranta's work on financial identity and well-being."""
            system_prompt = LINEAR_TREE_SYSTEM_PROMPT.format(
                min_steps=config.LINEAR_MIN_STEPS, max_steps=config.LINEAR_MAX_STEPS
            )
            response = await self.generator.generate(prompt, system_prompt)
            return self.assemble_linear_tree(parse_draft(response, LinearTreeDraft), tags)

        prompt = f"""Create a decision tree for the following problem:

Problem description: {description}
{tags_line}

Generate a comprehensive decision tree with multiple solution paths based on research from digiconsumers.fi publications, especially focusing on Mette Ranta's work on financial identity and well-being."""
        response = await self.generator.generate(prompt, BRANCHING_TREE_SYSTEM_PROMPT)
        return self.assemble_branching_tree(parse_draft(response, TreeDraft), tags)

    def assemble_branching_tree(self, draft: TreeDraft, tags: List[str]) -> DecisionTree:
        if draft.root_node.type != "problem":
            raise MalformedDraftError("Root node must be of type 'problem'")

        draft_nodes = [draft.root_node] + draft.intermediate_nodes + draft.final_nodes
        id_map: Dict[str, str] = {}
        nodes = []
        for draft_node in draft_nodes:
            if draft_node.id in id_map:
                raise MalformedDraftError(f"Duplicate node id {draft_node.id}")
            if draft_node is not draft.root_node and draft_node.type == "problem":
                raise MalformedDraftError(f"Only the root may be a problem node ({draft_node.id})")
            id_map[draft_node.id] = new_node_id()
            nodes.append(DecisionNode(
                id=id_map[draft_node.id],
                type=draft_node.type,
                title=draft_node.title,
                description=draft_node.description,
                tags=merge_tags(draft_node.tags, tags) if draft_node is draft.root_node else draft_node.tags,
                metadata=provenance(),
            ))

        root_id = id_map[draft.root_node.id]
        edges = []
        for draft_edge in draft.edges:
            if draft_edge.from_node_id not in id_map or draft_edge.to_node_id not in id_map:
                raise MalformedDraftError(
                    f"Edge {draft_edge.from_node_id} -> {draft_edge.to_node_id} references an unknown node"
                )
            if id_map[draft_edge.to_node_id] == root_id:
                raise MalformedDraftError("The root node cannot have incoming edges")
            edges.append(DecisionEdge(
                id=new_edge_id(),
                from_node_id=id_map[draft_edge.from_node_id],
                to_node_id=id_map[draft_edge.to_node_id],
                description=draft_edge.description,
                rating=0,
                rating_count=0,
            ))

        check_reachable(root_id, [n.id for n in nodes], edges)
        now = utc_now()
        return DecisionTree(
            id=f"tree_{uuid.uuid4().hex}",
            root_node_id=root_id,
            nodes=nodes,
            edges=edges,
            created_at=now,
            updated_at=now,
        )

    def assemble_linear_tree(self, draft: LinearTreeDraft, tags: List[str]) -> DecisionTree:
        if len(draft.steps) < config.LINEAR_MIN_STEPS:
            raise MalformedDraftError(
                f"Expected at least {config.LINEAR_MIN_STEPS} steps, got {len(draft.steps)}"
            )
        steps = draft.steps[:config.LINEAR_MAX_STEPS]

        def make_node(step: StepDraft, node_type: str, title: str, node_tags: List[str]) -> DecisionNode:
            return DecisionNode(
                id=new_node_id(),
                type=node_type,
                title=title,
                description=step.description,
                tags=node_tags,
                metadata=provenance(),
            )

        root = make_node(
            draft.problem, "problem",
            truncate_title(draft.problem.title, config.LINEAR_TITLE_MAX_LENGTH),
            merge_tags(draft.problem.tags, tags),
        )
        chain = [root]
        chain += [make_node(step, "solution", step.title, step.tags) for step in steps]
        chain.append(make_node(draft.goal, "final", draft.goal.title, draft.goal.tags))

        edges = [
            DecisionEdge(
                id=new_edge_id(),
                from_node_id=parent.id,
                to_node_id=child.id,
                description="Next step",
                rating=0,
                rating_count=0,
            )
            for parent, child in zip(chain, chain[1:])
        ]

        now = utc_now()
        return DecisionTree(
            id=f"tree_{uuid.uuid4().hex}",
            root_node_id=root.id,
            nodes=chain,
            edges=edges,
            created_at=now,
            updated_at=now,
        )
