"""Pytest configuration and fixtures for Model Router tests."""

from typing import AsyncIterator, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from model_router.config import Settings
from model_router.main import app
from model_router.providers.adapters import ProviderAdapter
from model_router.providers.base import GenerateRequest, GenerateResponse, StreamChunk
from model_router.providers.openai_compat import OpenAICompatibleClient
from model_router.services.model_registry import DEFAULT_MODEL_DEFINITIONS, ModelRegistry
from model_router.services.provider_gate import ProviderGate
from model_router.services.resolver import ModelResolver, get_resolver


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(_env_file=None, config_path="/nonexistent/model-router.yaml")


@pytest.fixture
def fake_environ() -> dict[str, str]:
    """Credential store standing in for os.environ; mutate it per test."""
    return {}


@pytest.fixture
def gate(fake_environ: dict[str, str]) -> ProviderGate:
    """Provider gate reading the fake environment."""
    return ProviderGate(fake_environ.get)


@pytest.fixture
def registry() -> ModelRegistry:
    """Registry with the built-in model table."""
    return ModelRegistry(DEFAULT_MODEL_DEFINITIONS)


@pytest.fixture
def sample_generate_response() -> GenerateResponse:
    """Create a sample GenerateResponse for testing."""
    return GenerateResponse(
        id="gen-test-12345",
        model="gpt-oss-120b",
        provider="cerebras",
        content="Hello! I'm here to help.",
        tokens_input=12,
        tokens_output=8,
        latency_ms=240,
        finish_reason="stop",
        generation_id="gen_abc123",
    )


@pytest.fixture
def sample_stream_chunks() -> list[StreamChunk]:
    """Create sample StreamChunks for testing."""
    return [
        StreamChunk(id="gen-test-12345", content="Hello", done=False),
        StreamChunk(id="gen-test-12345", content=" there", done=False),
        StreamChunk(id="gen-test-12345", content="", done=True, finish_reason="stop", tokens_output=2),
    ]


@pytest.fixture
def fake_clients() -> dict[str, MagicMock]:
    """Mock provider clients created by the resolver, keyed by provider name."""
    return {}


@pytest.fixture
def client_factory(
    fake_clients: dict[str, MagicMock],
    sample_generate_response: GenerateResponse,
    sample_stream_chunks: list[StreamChunk],
):
    """Client factory that records the mocks it hands out."""

    def factory(adapter: ProviderAdapter, api_key: str) -> MagicMock:
        client = MagicMock(spec=OpenAICompatibleClient)
        client.name = adapter.kind.value
        client.api_key = api_key
        client.chat = AsyncMock(
            return_value=sample_generate_response.model_copy(update={"provider": adapter.kind.value})
        )

        async def chat_stream(model: str, request: GenerateRequest) -> AsyncIterator[StreamChunk]:
            for chunk in sample_stream_chunks:
                yield chunk

        client.chat_stream = MagicMock(side_effect=chat_stream)
        client.close = AsyncMock()
        fake_clients[adapter.kind.value] = client
        return client

    return factory


@pytest.fixture
def resolver(
    registry: ModelRegistry,
    gate: ProviderGate,
    settings: Settings,
    client_factory,
) -> ModelResolver:
    """Resolver wired to the fake environment and mock clients."""
    return ModelResolver(
        registry=registry,
        gate=gate,
        settings=settings,
        client_factory=client_factory,
    )


@pytest.fixture
def test_client(resolver: ModelResolver) -> Iterator[TestClient]:
    """Create a test client for the FastAPI app using the test resolver."""
    app.dependency_overrides[get_resolver] = lambda: resolver
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
