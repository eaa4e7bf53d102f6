from typing import List
from fastapi import APIRouter, HTTPException, Request
from epigen.models.decision_tree import DecisionTree
from epigen.models.skill_tree import SkillNode
from epigen.services.tree_derivation import decision_tree_to_skill_nodes

router = APIRouter()


@router.get("", response_model=List[DecisionTree])
async def list_trees(request: Request):
    return request.app.state.tree_store.get_all()


@router.get("/{tree_id}", response_model=DecisionTree)
async def get_tree(tree_id: str, request: Request):
    tree = request.app.state.tree_store.get(tree_id)
    if not tree:
        raise HTTPException(404, f"Tree {tree_id} not found")
    return tree


@router.get("/{tree_id}/skill-tree", response_model=List[SkillNode], response_model_exclude_none=True)
async def get_tree_skill_nodes(tree_id: str, request: Request):
    tree = request.app.state.tree_store.get(tree_id)
    if not tree:
        raise HTTPException(404, f"Tree {tree_id} not found")
    return decision_tree_to_skill_nodes(tree)
