"""Unit tests for graph build API endpoints."""

import os
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from order_graph_api.handlers.graph import handle_build_graph, summarize_graph
from order_graph_api.main import app
from order_graph_api.models.models import GraphData, GraphEdge, GraphNode
from order_graph_api.services.domain.json_to_graph import RuleTableError
from utils.graph_helpers import load_order_fixture

AUTH_HEADERS = {"Authorization": "Bearer devtoken"}


@pytest.mark.unit
class TestGraphBuildEndpoint:
    """Test suite for POST /api/graph/build."""

    @pytest.fixture
    def client(self):
        """Create test client for FastAPI app."""
        return TestClient(app)

    def test_build_returns_graph_and_summary(self, client):
        """Test that a valid order document returns nodes, edges and a summary."""
        # Arrange
        payload = {"json_text": load_order_fixture("sample_order.json")}

        # Act
        response = client.post("/api/graph/build", json=payload, headers=AUTH_HEADERS)

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert len(body["data"]["nodes"]) == 28
        assert len(body["data"]["edges"]) == 38
        assert body["summary"]["node_count"] == 28
        assert body["summary"]["edges_by_type"] == {"default": 27, "sequence": 3, "reference": 8}
        assert body["summary"]["max_depth"] == 3

    def test_status_omitted_when_absent(self, client):
        """Test that nodes without a status object have no 'status' key."""
        payload = {"json_text": load_order_fixture("sample_order.json"), "strategy": "domain"}

        response = client.post("/api/graph/build", json=payload, headers=AUTH_HEADERS)

        nodes = response.json()["data"]["nodes"]
        assert "status" not in nodes[0]
        assert nodes[7]["status"] == {"code": "IN_PROGRESS", "milestone": "ORDERED"}

    def test_strategy_from_request(self, client):
        """Test that the request's strategy overrides GRAPH_STRATEGY."""
        payload = {"json_text": '{"orderId": "O1", "products": []}', "strategy": "generic"}

        response = client.post("/api/graph/build", json=payload, headers=AUTH_HEADERS)

        assert response.status_code == 200
        labels = [n["label"] for n in response.json()["data"]["nodes"]]
        assert labels == ["Order: O1", "products [0]"]

    def test_invalid_json_returns_400(self, client):
        """Test that syntactically invalid JSON is rejected with 400."""
        payload = {"json_text": '{"orderId": '}

        response = client.post("/api/graph/build", json=payload, headers=AUTH_HEADERS)

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid JSON")

    def test_unknown_strategy_returns_400(self, client):
        """Test that an unknown strategy name is rejected with 400."""
        payload = {"json_text": "{}", "strategy": "fancy"}

        response = client.post("/api/graph/build", json=payload, headers=AUTH_HEADERS)

        assert response.status_code == 400
        assert "fancy" in response.json()["detail"]

    def test_non_object_root_returns_empty_graph(self, client):
        """Test that a JSON array or scalar yields an empty graph, not an error."""
        response = client.post("/api/graph/build", json={"json_text": "[1, 2]"}, headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert response.json()["data"] == {"nodes": [], "edges": []}
        assert response.json()["summary"]["node_count"] == 0

    @patch.dict(os.environ, {"MAX_INPUT_BYTES": "10"})
    def test_oversized_input_returns_413(self, client):
        """Test that input larger than MAX_INPUT_BYTES is rejected."""
        payload = {"json_text": '{"orderId": "ORD-1001"}'}

        response = client.post("/api/graph/build", json=payload, headers=AUTH_HEADERS)

        assert response.status_code == 413

    def test_unexpected_failure_returns_500(self, client):
        """Test that a converter defect is reported as 500 with a generic message."""
        with patch(
            "order_graph_api.services.domain.json_to_graph.converter.resolve_references",
            side_effect=KeyError("oops"),
        ):
            response = client.post("/api/graph/build", json={"json_text": "{}"}, headers=AUTH_HEADERS)

        assert response.status_code == 500
        assert response.json()["detail"] == "An unknown error occurred while building the graph."

    def test_wrong_token_returns_401(self, client):
        """Test that an invalid bearer token is rejected."""
        response = client.post(
            "/api/graph/build",
            json={"json_text": "{}"},
            headers={"Authorization": "Bearer wrong"},
        )

        assert response.status_code == 401

    @patch.dict(os.environ, {"DEV_TOKEN": "s3cret"})
    def test_configured_token(self, client):
        """Test that DEV_TOKEN replaces the development token."""
        ok = client.post("/api/graph/build", json={"json_text": "{}"}, headers={"Authorization": "Bearer s3cret"})
        rejected = client.post("/api/graph/build", json={"json_text": "{}"}, headers=AUTH_HEADERS)

        assert ok.status_code == 200
        assert rejected.status_code == 401

    def test_missing_json_text_returns_422(self, client):
        """Test request validation of the body."""
        response = client.post("/api/graph/build", json={"strategy": "auto"}, headers=AUTH_HEADERS)
        assert response.status_code == 422


@pytest.mark.unit
class TestGraphUploadEndpoint:
    """Test suite for POST /api/graph/upload."""

    @pytest.fixture
    def client(self):
        """Create test client for FastAPI app."""
        return TestClient(app)

    def test_upload_builds_graph(self, client):
        """Test that an uploaded order file is converted."""
        content = load_order_fixture("amended_order.json").encode("utf-8")

        response = client.post(
            "/api/graph/upload",
            files={"file": ("amended_order.json", content, "application/json")},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["node_count"] == 41
        assert summary["edges_by_type"]["amendment"] == 1

    def test_upload_with_strategy(self, client):
        """Test that the strategy form field is honored."""
        content = load_order_fixture("amended_order.json").encode("utf-8")

        response = client.post(
            "/api/graph/upload",
            files={"file": ("amended_order.json", content, "application/json")},
            data={"strategy": "domain"},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["summary"]["node_count"] == 1

    def test_upload_non_utf8_returns_400(self, client):
        """Test that binary uploads are rejected."""
        response = client.post(
            "/api/graph/upload",
            files={"file": ("order.json", b"\xff\xfe\x00", "application/json")},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 400
        assert "UTF-8" in response.json()["detail"]


@pytest.mark.unit
class TestProbes:
    """Test suite for liveness and readiness probes."""

    @pytest.fixture
    def client(self):
        return TestClient(app)

    def test_healthz(self, client):
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-API-Version" in response.headers

    def test_readyz_when_rules_load(self, client):
        response = client.get("/readyz")

        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_readyz_when_rules_fail(self, client):
        """Test that a broken rule table makes the service not ready."""
        with patch(
            "order_graph_api.services.domain.json_to_graph.load_graph_rules",
            side_effect=RuleTableError("bad table"),
        ):
            response = client.get("/readyz")

        assert response.status_code == 503


@pytest.mark.unit
class TestHandlerFunctions:
    """Test suite for handler functions called directly."""

    def test_summarize_graph(self):
        """Test per-type counts and maximum depth."""
        graph = GraphData(
            nodes=[
                GraphNode(id="node-0", label="Order: O", type="order"),
                GraphNode(id="node-1", label="Product: 1#", type="product", depth=1),
                GraphNode(id="node-2", label="Product: 2#", type="product", depth=1),
            ],
            edges=[
                GraphEdge(source="node-0", target="node-1"),
                GraphEdge(source="node-0", target="node-2"),
                GraphEdge(source="node-1", target="node-2", type="sequence"),
            ],
        )

        summary = summarize_graph(graph)

        assert summary.node_count == 3
        assert summary.edge_count == 3
        assert summary.max_depth == 1
        assert summary.nodes_by_type == {"order": 1, "product": 2}
        assert summary.edges_by_type == {"default": 2, "sequence": 1}

    def test_summarize_empty_graph(self):
        summary = summarize_graph(GraphData())
        assert summary.max_depth == 0
        assert summary.nodes_by_type == {}

    def test_handle_build_graph_parse_error(self):
        """Test that ParseError maps to HTTPException 400."""
        with pytest.raises(HTTPException) as exc_info:
            handle_build_graph("not json")

        assert exc_info.value.status_code == 400

    @patch.dict(os.environ, {"GRAPH_STRATEGY": "generic"})
    def test_handle_build_graph_uses_configured_strategy(self):
        """Test that GRAPH_STRATEGY applies when the request names none."""
        result = handle_build_graph('{"orderId": "O1", "products": []}')

        assert result["summary"]["nodes_by_type"] == {"order": 1, "array": 1}
