"""Shapes the generation backend is asked to return.

Drafts are untrusted: unknown keys, missing keys and mistyped values are all
rejected before anything is turned into a DecisionNode or DecisionEdge.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from epigen.models.decision_tree import NodeType


class DraftModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        strict=True,
    )


class NodeDraft(DraftModel):
    id: str
    type: NodeType
    title: str
    description: str
    tags: List[str] = []


class StepDraft(DraftModel):
    title: str
    description: str
    tags: List[str] = []


class EdgeDraft(DraftModel):
    from_node_id: Optional[str] = None
    to_node_id: Optional[str] = None
    description: Optional[str] = None


class TreeDraft(DraftModel):
    root_node: NodeDraft
    intermediate_nodes: List[NodeDraft] = []
    final_nodes: List[NodeDraft] = []
    edges: List[EdgeDraft] = []


class LinearTreeDraft(DraftModel):
    problem: StepDraft
    steps: List[StepDraft]
    goal: StepDraft


class AlternativeNodeDraft(DraftModel):
    id: Optional[str] = None
    type: Literal["solution", "final"] = "solution"
    title: str
    description: str
    tags: List[str] = []


class AlternativeDraft(DraftModel):
    node: AlternativeNodeDraft
    edge: Optional[EdgeDraft] = None


class SkipStepDraft(DraftModel):
    node: StepDraft


class SimilarityDraft(DraftModel):
    matches: bool
    similarity: float = Field(ge=0.0, le=1.0)
    tree_id: Optional[str] = None
    reason: Optional[str] = None
