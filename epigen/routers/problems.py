from fastapi import APIRouter, Request
from epigen.models.decision_tree import CreateProblemRequest, CreateProblemResponse

router = APIRouter()


@router.post("/create", response_model=CreateProblemResponse, response_model_exclude_none=True)
async def create_problem(body: CreateProblemRequest, request: Request):
    problem_service = request.app.state.problem_service
    # Blank descriptions are rejected by the service as a ValidationError (400)
    return await problem_service.resolve(body.description or "", tags=body.tags)
