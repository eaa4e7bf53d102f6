import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from epigen.core import config
from epigen.core.errors import EpiGenError
from epigen.services.generation_service import GeminiClient
from epigen.services.problem_service import ProblemService
from epigen.services.tree_extension_service import TreeExtensionService
from epigen.services.tree_store import TreeStore
from epigen.routers import problems, search, skill_tree, solutions, trees

if config.LOG_LEVEL == "NONE":
    logging.disable(logging.CRITICAL)
else:
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not config.AI_API_KEY:
        logger.warning("AI_API_KEY is not set; tree generation requests will fail")
    yield
    await app.state.generator.close()


app = FastAPI(title="EpiGen", lifespan=lifespan)


@app.exception_handler(EpiGenError)
async def epigen_error_handler(request: Request, exc: EpiGenError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Services
tree_store = TreeStore()
generator = GeminiClient()
problem_service = ProblemService(tree_store, generator)
tree_extension_service = TreeExtensionService(tree_store, generator)

# App State
app.state.tree_store = tree_store
app.state.generator = generator
app.state.problem_service = problem_service
app.state.tree_extension_service = tree_extension_service

# Include Routers
app.include_router(trees.router, prefix="/api/trees")
app.include_router(skill_tree.router, prefix="/api/skill-tree")
app.include_router(problems.router, prefix="/api/problems")
app.include_router(solutions.router, prefix="/api/solutions")
app.include_router(search.router, prefix="/api/search")

if __name__ == "__main__":
    import uvicorn
    import argparse

    parser = argparse.ArgumentParser(description="Run the EpiGen decision tree service")
    parser.add_argument("--port", type=int, default=8000, help="Port to run the service on")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host to bind to")
    args = parser.parse_args()

    uvicorn.run(app, host=args.host, port=args.port)
