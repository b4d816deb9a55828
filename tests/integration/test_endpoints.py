"""Integration tests for API endpoints."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from model_router.services.resolver import ModelResolver

CHAT_BODY = {
    "model_id": "cerebras/gpt-oss-120b",
    "messages": [{"role": "user", "content": "Hello"}],
    "max_tokens": 100,
}


def _sse_events(text: str) -> list[tuple[str, dict]]:
    """Parse an SSE body into (event, data) pairs."""
    events = []
    event = "message"
    for line in text.splitlines():
        if line.startswith("event:"):
            event = line.split(":", 1)[1].strip()
        elif line.startswith("data:"):
            events.append((event, json.loads(line.split(":", 1)[1].strip())))
            event = "message"
    return events


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, test_client: TestClient):
        """Test basic health check returns 200."""
        response = test_client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "timestamp" in data

    def test_root_endpoint(self, test_client: TestClient):
        """Test root endpoint returns service info."""
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "model-router"
        assert "docs" in data

    @pytest.mark.parametrize(
        "environ, expected",
        [
            ({}, "unhealthy"),
            ({"CEREBRAS_API_KEY": "csk"}, "degraded"),
            ({"CEREBRAS_API_KEY": "csk", "AI_GATEWAY_API_KEY": "gw"}, "healthy"),
        ],
    )
    def test_detailed_health(self, test_client: TestClient, fake_environ: dict, environ: dict, expected: str):
        """Test overall status follows provider configuration."""
        fake_environ.update(environ)

        response = test_client.get("/api/v1/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == expected
        assert set(data["providers"]) == {"cerebras", "gateway"}


class TestModelsEndpoints:
    """Tests for models endpoints."""

    def test_list_models_only_enabled(self, test_client: TestClient, fake_environ: dict):
        """Test the listing shows only models with configured providers."""
        fake_environ["AI_GATEWAY_API_KEY"] = "gw-secret-value"

        response = test_client.get("/api/v1/models")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == len(data["models"]) > 0
        assert {m["provider"] for m in data["models"]} == {"gateway"}
        assert data["default_model"] == "anthropic/claude-haiku-4.5"
        assert data["meta"] == {
            "providers": {"cerebras": False, "gateway": True},
            "has_any_providers": True,
        }
        assert "gw-secret-value" not in response.text

    def test_list_models_follows_environment(self, test_client: TestClient, fake_environ: dict):
        """Test toggling a credential changes the listing between calls."""
        assert test_client.get("/api/v1/models").json()["total"] == 0

        fake_environ["CEREBRAS_API_KEY"] = "csk"
        models = test_client.get("/api/v1/models").json()["models"]
        assert models and all(m["id"].startswith("cerebras/") for m in models)

        del fake_environ["CEREBRAS_API_KEY"]
        data = test_client.get("/api/v1/models").json()
        assert data["total"] == 0
        assert data["meta"]["has_any_providers"] is False

    def test_get_model_with_slashes(self, test_client: TestClient, fake_environ: dict):
        """Test looking up a namespaced id."""
        response = test_client.get("/api/v1/models/groq/qwen/qwen3-32b")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "groq/qwen/qwen3-32b"
        assert data["supports_reasoning"] is True
        assert data["enabled"] is False

    def test_get_model_not_found(self, test_client: TestClient):
        """Test getting non-existent model returns 404."""
        response = test_client.get("/api/v1/models/nonexistent-model")

        assert response.status_code == 404


class TestChatEndpoints:
    """Tests for the chat endpoint."""

    def test_chat_success(self, test_client: TestClient, fake_environ: dict, fake_clients: dict):
        """Test a successful non-streaming chat."""
        fake_environ["CEREBRAS_API_KEY"] = "csk"

        response = test_client.post("/api/v1/chat", json=CHAT_BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["model"] == "cerebras/gpt-oss-120b"
        assert data["provider"] == "cerebras"
        assert data["content"] == "Hello! I'm here to help."
        assert data["generation_id"] == "gen_abc123"
        assert data["supports_tools"] is True
        assert data["supports_reasoning"] is False

        native_id, sent = fake_clients["cerebras"].chat.await_args.args
        assert native_id == "gpt-oss-120b"
        assert sent.max_tokens == 100

    def test_chat_unsupported_model(self, test_client: TestClient, fake_environ: dict):
        """Test an unknown model id returns 400 naming the id."""
        fake_environ.update({"CEREBRAS_API_KEY": "csk", "AI_GATEWAY_API_KEY": "gw"})

        response = test_client.post("/api/v1/chat", json={**CHAT_BODY, "model_id": "openai/gpt-9"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "unsupported_model"
        assert "openai/gpt-9" in data["detail"]

    def test_chat_empty_model_id_rejected(self, test_client: TestClient, fake_environ: dict):
        """Test an explicit empty model id is not replaced by the default."""
        fake_environ["CEREBRAS_API_KEY"] = "csk"

        response = test_client.post("/api/v1/chat", json={**CHAT_BODY, "model_id": ""})

        assert response.status_code == 400
        assert response.json()["error"] == "unsupported_model"

    def test_chat_missing_credentials(self, test_client: TestClient):
        """Test an unconfigured provider returns 500 naming the variable."""
        response = test_client.post("/api/v1/chat", json=CHAT_BODY)

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "missing_credentials"
        assert "CEREBRAS_API_KEY" in data["detail"]

    def test_chat_default_model(self, test_client: TestClient, fake_environ: dict, fake_clients: dict):
        """Test omitting the model id uses the first enabled model."""
        fake_environ["AI_GATEWAY_API_KEY"] = "gw"

        response = test_client.post("/api/v1/chat", json={"messages": CHAT_BODY["messages"]})

        assert response.status_code == 200
        assert response.json()["model"] == "anthropic/claude-haiku-4.5"
        assert fake_clients["gateway"].chat.await_args.args[0] == "anthropic/claude-haiku-4.5"

    def test_chat_drops_tools_for_unsupported_model(
        self, test_client: TestClient, fake_environ: dict, fake_clients: dict
    ):
        """Test tools are not sent to a model that cannot use them."""
        fake_environ["CEREBRAS_API_KEY"] = "csk"
        tools = [{"type": "function", "function": {"name": "lookup", "parameters": {}}}]

        response = test_client.post(
            "/api/v1/chat",
            json={**CHAT_BODY, "model_id": "cerebras/llama3.1-8b", "tools": tools},
        )

        assert response.status_code == 200
        assert response.json()["supports_tools"] is False
        native_id, sent = fake_clients["cerebras"].chat.await_args.args
        assert native_id == "llama3.1-8b"
        assert sent.tools is None

    def test_chat_upstream_error(self, test_client: TestClient, resolver: ModelResolver, fake_environ: dict):
        """Test provider failures return 502."""
        fake_environ["CEREBRAS_API_KEY"] = "csk"
        client = resolver.resolve("cerebras/gpt-oss-120b").handle.client
        client.chat.side_effect = httpx.ConnectError("connection refused")

        response = test_client.post("/api/v1/chat", json=CHAT_BODY)

        assert response.status_code == 502
        data = response.json()
        assert data["error"] == "upstream_error"
        assert "cerebras" in data["detail"]
        assert "connection refused" in data["detail"]

    def test_chat_missing_messages(self, test_client: TestClient):
        """Test chat without messages returns 422."""
        response = test_client.post("/api/v1/chat", json={"model_id": "cerebras/gpt-oss-120b"})

        assert response.status_code == 422

    def test_chat_invalid_temperature(self, test_client: TestClient):
        """Test chat with invalid temperature returns 422."""
        response = test_client.post("/api/v1/chat", json={**CHAT_BODY, "temperature": 3.0})

        assert response.status_code == 422

    def test_chat_stream(self, test_client: TestClient, fake_environ: dict):
        """Test streaming returns SSE message events ending with done."""
        fake_environ["AI_GATEWAY_API_KEY"] = "gw"

        response = test_client.post(
            "/api/v1/chat",
            json={**CHAT_BODY, "model_id": "moonshotai/kimi-k2-thinking-turbo", "stream": True},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = _sse_events(response.text)
        assert [e for e, _ in events] == ["message", "message", "message"]
        assert "".join(d["content"] for _, d in events) == "Hello there"
        assert events[-1][1]["done"] is True
        assert events[-1][1]["supports_reasoning"] is True

    def test_chat_stream_resolution_error_is_not_streamed(self, test_client: TestClient):
        """Test resolution failures keep their status code when streaming."""
        response = test_client.post("/api/v1/chat", json={**CHAT_BODY, "stream": True})

        assert response.status_code == 500
        assert response.json()["error"] == "missing_credentials"


class TestOpenAPISpec:
    """Tests for OpenAPI specification."""

    def test_openapi_available(self, test_client: TestClient):
        """Test OpenAPI spec is available."""
        response = test_client.get("/api/v1/openapi.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/api/v1/chat" in paths
        assert "/api/v1/models" in paths
        assert "/api/v1/health/detailed" in paths

    def test_docs_available(self, test_client: TestClient):
        """Test Swagger UI is available."""
        response = test_client.get("/api/v1/docs")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
