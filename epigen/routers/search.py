from fastapi import APIRouter, Request
from epigen.core import config
from epigen.models.decision_tree import SearchRequest, SearchResponse

router = APIRouter()


@router.post("", response_model=SearchResponse)
async def search(body: SearchRequest, request: Request):
    store = request.app.state.tree_store
    trees = store.search_trees(description=body.description, tags=body.tags)
    nodes = store.search_nodes(description=body.description, tags=body.tags)

    limit = body.limit or config.SEARCH_DEFAULT_LIMIT
    return SearchResponse(trees=trees[:limit], nodes=nodes[:limit])
