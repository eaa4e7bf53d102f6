import json
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock
from epigen.core.errors import GenerationError, GenerationTimeoutError
from epigen.main import app
from epigen.services.problem_service import ProblemService
from epigen.services.tree_derivation import SYNTHETIC_ROOT_ID
from epigen.services.tree_extension_service import TreeExtensionService
from epigen.services.tree_store import TreeStore

client = TestClient(app)


@pytest.fixture
def services(chain_tree):
    """Fresh store and a mocked generation backend on app.state."""
    previous = (app.state.tree_store, app.state.problem_service, app.state.tree_extension_service)
    store = TreeStore()
    store.save(chain_tree)
    generator = AsyncMock()
    app.state.tree_store = store
    app.state.problem_service = ProblemService(store, generator, topology="branching")
    app.state.tree_extension_service = TreeExtensionService(store, generator)
    yield store, generator
    app.state.tree_store, app.state.problem_service, app.state.tree_extension_service = previous


def test_list_trees(services):
    response = client.get("/api/trees")
    assert response.status_code == 200
    data = response.json()
    assert [t["id"] for t in data] == ["t1"]
    assert data[0]["rootNodeId"] == "root"
    assert data[0]["edges"][0]["fromNodeId"] == "root"


def test_get_tree(services):
    response = client.get("/api/trees/t1")
    assert response.status_code == 200
    assert len(response.json()["nodes"]) == 3


def test_get_tree_not_found(services):
    response = client.get("/api/trees/missing")
    assert response.status_code == 404
    assert response.json()["detail"] == "Tree missing not found"


def test_tree_skill_nodes(services):
    response = client.get("/api/trees/t1/skill-tree")
    assert response.status_code == 200
    nodes = response.json()
    assert [n["id"] for n in nodes] == ["t1-root", "t1-x", "t1-y"]
    assert "parentIds" not in nodes[0]
    assert nodes[1]["parentIds"] == ["t1-root"]
    assert [n["score"] for n in nodes] == [0, 50, 100]


def test_skill_tree_union(services):
    response = client.get("/api/skill-tree")
    assert response.status_code == 200
    nodes = response.json()
    assert nodes[0]["id"] == SYNTHETIC_ROOT_ID
    assert nodes[0]["hidden"] is True
    assert nodes[1]["parentIds"] == [SYNTHETIC_ROOT_ID]


def test_skill_tree_empty_store(services):
    store, _ = services
    store.trees.clear()
    assert client.get("/api/skill-tree").json() == []


def test_search(services):
    response = client.post("/api/search", json={"description": "stress"})
    assert response.status_code == 200
    data = response.json()
    assert [t["id"] for t in data["trees"]] == ["t1"]
    assert [n["id"] for n in data["nodes"]] == ["root"]

    response = client.post("/api/search", json={"tags": ["unrelated"]})
    assert response.json() == {"nodes": [], "trees": []}


def test_search_limit(services):
    response = client.post("/api/search", json={"limit": 2})
    assert len(response.json()["nodes"]) == 2


def test_create_problem_blank(services):
    response = client.post("/api/problems/create", json={"description": "  "})
    assert response.status_code == 400
    assert response.json()["detail"] == "Problem description is required"


def test_create_problem_existing(services):
    _, generator = services
    generator.generate.return_value = json.dumps(
        {"matches": True, "similarity": 0.9, "treeId": "t1", "reason": "Same problem"}
    )
    response = client.post("/api/problems/create", json={"description": "Money stress", "tags": ["youth"]})
    assert response.status_code == 200
    assert response.json() == {"existingTreeId": "t1"}


def test_create_problem_generation_failure(services):
    _, generator = services
    generator.generate.side_effect = GenerationError("Gemini API error: boom", status=500, body="boom")
    response = client.post("/api/problems/create", json={"description": "Money stress"})
    assert response.status_code == 502
    assert "boom" in response.json()["detail"]


def test_generation_timeout_maps_to_504(services):
    _, generator = services
    generator.generate.side_effect = GenerationTimeoutError("Generation timed out after 60s")
    response = client.post("/api/solutions/alternative", json={"treeId": "t1", "nodeId": "x"})
    assert response.status_code == 504


def test_alternative_solution(services):
    store, generator = services
    generator.generate.return_value = json.dumps({
        "node": {"id": "n", "type": "solution", "title": "Ask a friend", "description": "Peer support", "tags": []},
        "edge": {"fromNodeId": "x", "toNodeId": "n", "description": "Alternative"},
    })
    response = client.post("/api/solutions/alternative", json={"treeId": "t1", "nodeId": "x", "reason": "Too hard"})
    assert response.status_code == 200
    data = response.json()
    assert data["newNodeId"] in [n["id"] for n in data["tree"]["nodes"]]
    assert data["newEdgeId"] == data["tree"]["edges"][-1]["id"]
    assert len(store.get("t1").nodes) == 4


def test_alternative_solution_missing_fields(services):
    response = client.post("/api/solutions/alternative", json={"treeId": "t1"})
    assert response.status_code == 400


def test_alternative_solution_unknown_tree(services):
    response = client.post("/api/solutions/alternative", json={"treeId": "missing", "nodeId": "x"})
    assert response.status_code == 404


def test_alternative_solution_unknown_node(services):
    _, generator = services
    response = client.post("/api/solutions/alternative", json={"treeId": "t1", "nodeId": "ghost"})
    assert response.status_code == 404
    generator.generate.assert_not_called()


def test_skip_step(services):
    _, generator = services
    generator.generate.return_value = json.dumps(
        {"node": {"title": "Use an app", "description": "Automate it", "tags": []}}
    )
    response = client.post("/api/solutions/skip-step", json={"treeId": "t1", "fromNodeId": "root", "toNodeId": "x"})
    assert response.status_code == 200
    data = response.json()
    assert len(data["newEdgeIds"]) == 2
    assert len(data["tree"]["edges"]) == 4


def test_skip_step_terminal(services):
    response = client.post("/api/solutions/skip-step", json={"treeId": "t1", "fromNodeId": "x", "toNodeId": "y"})
    assert response.status_code == 409


def test_skip_step_missing_fields(services):
    response = client.post("/api/solutions/skip-step", json={"treeId": "t1", "fromNodeId": "root"})
    assert response.status_code == 400
