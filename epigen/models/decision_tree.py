from datetime import datetime, timezone
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NodeType = Literal["problem", "solution", "final"]


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; both accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodeMetadata(CamelModel):
    source: Optional[str] = None
    author: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DecisionNode(CamelModel):
    id: str
    type: NodeType
    title: str
    description: str
    tags: List[str] = []
    metadata: Optional[NodeMetadata] = None


class DecisionEdge(CamelModel):
    id: str
    from_node_id: str
    to_node_id: str
    description: Optional[str] = None
    rating: Optional[float] = 0
    rating_count: Optional[int] = 0


class DecisionTree(CamelModel):
    id: str
    root_node_id: str
    nodes: List[DecisionNode] = []
    edges: List[DecisionEdge] = []
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)
    version: int = 0

    def get_node(self, node_id: str) -> Optional[DecisionNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, from_node_id: str, to_node_id: str) -> Optional[DecisionEdge]:
        for edge in self.edges:
            if edge.from_node_id == from_node_id and edge.to_node_id == to_node_id:
                return edge
        return None

    @property
    def root_node(self) -> Optional[DecisionNode]:
        return self.get_node(self.root_node_id)

    def successors(self, node_id: str) -> List[DecisionNode]:
        """Immediate successors of a node, in edge order, without duplicates."""
        seen = set()
        result = []
        for edge in self.edges:
            if edge.from_node_id == node_id and edge.to_node_id not in seen:
                node = self.get_node(edge.to_node_id)
                if node:
                    seen.add(edge.to_node_id)
                    result.append(node)
        return result


# Request / response shapes

class CreateProblemRequest(CamelModel):
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class CreateProblemResponse(CamelModel):
    existing_tree_id: Optional[str] = None
    new_tree: Optional[DecisionTree] = None


class AlternativeSolutionRequest(CamelModel):
    tree_id: Optional[str] = None
    node_id: Optional[str] = None
    reason: Optional[str] = None


class AlternativeSolutionResponse(CamelModel):
    tree: DecisionTree
    new_node_id: str
    new_edge_id: str


class SkipStepRequest(CamelModel):
    tree_id: Optional[str] = None
    from_node_id: Optional[str] = None
    to_node_id: Optional[str] = None
    reason: Optional[str] = None


class SkipStepResponse(CamelModel):
    tree: DecisionTree
    new_node_id: str
    new_edge_ids: List[str]


class SearchRequest(CamelModel):
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    limit: Optional[int] = None


class SearchResponse(CamelModel):
    nodes: List[DecisionNode]
    trees: List[DecisionTree]
