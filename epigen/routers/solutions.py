from fastapi import APIRouter, HTTPException, Request
from epigen.models.decision_tree import (
    AlternativeSolutionRequest,
    AlternativeSolutionResponse,
    SkipStepRequest,
    SkipStepResponse,
)

router = APIRouter()


@router.post("/alternative", response_model=AlternativeSolutionResponse)
async def alternative_solution(body: AlternativeSolutionRequest, request: Request):
    if not body.node_id or not body.tree_id:
        raise HTTPException(400, "nodeId and treeId are required")

    extension_service = request.app.state.tree_extension_service
    return await extension_service.add_alternative(body.tree_id, body.node_id, reason=body.reason)


@router.post("/skip-step", response_model=SkipStepResponse)
async def skip_step(body: SkipStepRequest, request: Request):
    if not body.tree_id or not body.from_node_id or not body.to_node_id:
        raise HTTPException(400, "treeId, fromNodeId and toNodeId are required")

    extension_service = request.app.state.tree_extension_service
    return await extension_service.skip_step(
        body.tree_id, body.from_node_id, body.to_node_id, reason=body.reason
    )
