from typing import List, Optional
from pydantic import Field
from epigen.models.decision_tree import CamelModel


class SkillNode(CamelModel):
    id: str
    label: str
    # Multiple parents allowed; None for a root
    parent_ids: Optional[List[str]] = None
    descriptions: List[str] = []
    # Drives the node colour in the renderer
    score: int = Field(0, ge=0, le=100)
    hidden: bool = False
