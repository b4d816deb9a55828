"""HTTP client for OpenAI-compatible chat completion APIs (Cerebras, AI Gateway)."""

import json
import re
import time
from typing import Any, AsyncIterator, Mapping
from uuid import uuid4

import httpx

from model_router.providers.base import GenerateRequest, GenerateResponse, StreamChunk

GENERATION_ID_HEADERS = (
    "x-generation-id",
    "x-vercel-ai-generation-id",
    "x-request-id",
    "generation-id",
)

_GENERATION_ID_PATTERN = re.compile(r"^gen_[A-Za-z0-9]+")


def extract_generation_id(headers: Mapping[str, str]) -> str | None:
    """
    Find the upstream generation id in response headers.

    The well-known header names are tried first; failing that, any header
    whose value looks like ``gen_...`` is accepted.
    """
    lowered = {k.lower(): v for k, v in headers.items()}
    for name in GENERATION_ID_HEADERS:
        value = lowered.get(name)
        if value and _GENERATION_ID_PATTERN.match(value):
            return value
    for value in lowered.values():
        if isinstance(value, str) and _GENERATION_ID_PATTERN.match(value):
            return value
    return None


class OpenAICompatibleClient:
    """
    Async client for an OpenAI-compatible ``/chat/completions`` endpoint.

    One instance is shared by every request routed to the same provider;
    it holds no per-request state.
    """

    def __init__(
        self,
        name: str,
        endpoint: str,
        api_key: str,
        timeout: float = 60.0,
    ):
        """
        Initialize the client.

        Args:
            name: Provider name reported in responses (e.g. "cerebras")
            endpoint: API base URL (e.g. https://api.cerebras.ai/v1)
            api_key: Bearer token for the API
            timeout: Request timeout in seconds
        """
        self.name = name
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _build_payload(self, model: str, request: GenerateRequest, stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "messages": request.to_openai_messages(),
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "stream": stream,
        }
        if request.tools:
            payload["tools"] = request.tools
        return payload

    async def chat(self, model: str, request: GenerateRequest) -> GenerateResponse:
        """
        Run a chat completion and wait for the full answer.

        Args:
            model: Provider-native model id
            request: Generation request

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
        """
        start_time = time.time()
        client = self._get_client()

        response = await client.post(
            f"{self.endpoint}/chat/completions",
            json=self._build_payload(model, request, stream=False),
        )
        response.raise_for_status()
        data = response.json()

        latency_ms = int((time.time() - start_time) * 1000)

        if data.get("choices"):
            choice = data["choices"][0]
            content = (choice.get("message") or {}).get("content") or ""
            finish_reason = choice.get("finish_reason") or "stop"
        else:
            content = ""
            finish_reason = "error"

        usage = data.get("usage") or {}

        return GenerateResponse(
            model=data.get("model", model),
            provider=self.name,
            content=content,
            tokens_input=usage.get("prompt_tokens", 0),
            tokens_output=usage.get("completion_tokens", 0),
            latency_ms=latency_ms,
            finish_reason=finish_reason,
            generation_id=extract_generation_id(response.headers),
        )

    async def chat_stream(self, model: str, request: GenerateRequest) -> AsyncIterator[StreamChunk]:
        """Run a streaming chat completion, yielding content deltas."""
        client = self._get_client()
        chunk_id = f"gen-{uuid4()}"
        url = f"{self.endpoint}/chat/completions"
        finished = False

        async with client.stream("POST", url, json=self._build_payload(model, request, stream=True)) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if not line.startswith("data: "):
                    continue
                data_str = line[6:]
                if data_str.strip() == "[DONE]":
                    break

                try:
                    data = json.loads(data_str)
                except json.JSONDecodeError:
                    continue

                if not data.get("choices"):
                    continue
                choice = data["choices"][0]
                content = (choice.get("delta") or {}).get("content") or ""
                finish_reason = choice.get("finish_reason")
                usage = data.get("usage") or {}
                finished = finish_reason is not None

                yield StreamChunk(
                    id=chunk_id,
                    content=content,
                    done=finished,
                    finish_reason=finish_reason,
                    tokens_output=usage.get("completion_tokens"),
                )
                if finished:
                    break

        if not finished:
            yield StreamChunk(id=chunk_id, content="", done=True, finish_reason="stop")
