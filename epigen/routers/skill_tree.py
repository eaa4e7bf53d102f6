from typing import List
from fastapi import APIRouter, Request
from epigen.models.skill_tree import SkillNode
from epigen.services.tree_derivation import all_decision_trees_to_skill_nodes

router = APIRouter()


@router.get("", response_model=List[SkillNode], response_model_exclude_none=True)
async def get_skill_tree(request: Request):
    """Every stored tree as one forest under a hidden root."""
    trees = [t for t in request.app.state.tree_store.get_all() if t.nodes]
    return all_decision_trees_to_skill_nodes(trees)
