"""Chat completion endpoint with streaming support."""

import json
import logging
from datetime import datetime
from typing import Any

import httpx
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sse_starlette.sse import EventSourceResponse

from model_router.errors import UnsupportedModelError, UpstreamProviderError
from model_router.providers.base import ChatMessage, GenerateRequest
from model_router.services.resolver import ModelResolver, ResolvedModel, get_resolver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


class ChatRequestModel(BaseModel):
    """Request model for chat completion."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str | None = Field(None, description="Model id; the default model when omitted")
    messages: list[ChatMessage] = Field(..., min_length=1, description="Conversation so far")
    system_prompt: str | None = Field(None, description="Optional system prompt")
    temperature: float = Field(0.7, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(2000, ge=1, le=100000, description="Maximum tokens to generate")
    tools: list[dict[str, Any]] | None = Field(None, description="OpenAI-style tool definitions")
    stream: bool = Field(False, description="Enable streaming response")


class ChatResponseModel(BaseModel):
    """Response model for a completed chat."""

    id: str
    model: str
    provider: str
    content: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    finish_reason: str
    generation_id: str | None
    cached: bool
    supports_tools: bool
    supports_reasoning: bool
    created_at: datetime


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str
    detail: str | None = None


def _build_request(request: ChatRequestModel, resolved: ResolvedModel) -> GenerateRequest:
    """Shape the provider request around the model's capabilities."""
    tools = request.tools
    if tools and not resolved.capabilities.supports_tools:
        logger.info(f"Dropping {len(tools)} tools: {resolved.model_id} does not support tools")
        tools = None

    return GenerateRequest(
        messages=request.messages,
        system_prompt=request.system_prompt,
        temperature=request.temperature,
        max_tokens=request.max_tokens,
        tools=tools,
    )


@router.post(
    "/chat",
    response_model=ChatResponseModel,
    responses={
        200: {"description": "Successful generation"},
        400: {"model": ErrorResponse, "description": "Unsupported model"},
        500: {"model": ErrorResponse, "description": "Provider not configured"},
        502: {"model": ErrorResponse, "description": "Upstream provider error"},
    },
)
async def chat(
    request: ChatRequestModel,
    resolver: ModelResolver = Depends(get_resolver),
) -> ChatResponseModel | EventSourceResponse:
    """
    Generate a chat completion from the requested model.

    If `stream=true`, returns a Server-Sent Events stream with chunks.
    Otherwise returns the complete response.

    ## Example Request
    ```json
    {
        "model_id": "cerebras/gpt-oss-120b",
        "messages": [{"role": "user", "content": "Write a haiku about routers"}],
        "max_tokens": 200
    }
    ```

    ## Streaming
    ```
    data: {"id": "gen-xxx", "content": "Packets ", "done": false}
    ...
    data: {"id": "gen-xxx", "content": "", "done": true, "finish_reason": "stop", "supports_reasoning": false}
    ```
    """
    model_id = request.model_id if request.model_id is not None else resolver.default_enabled_model_id()

    if model_id not in resolver.registry:
        logger.warning(f"Rejected unsupported model: {model_id}")
        raise UnsupportedModelError(model_id)

    resolved = resolver.resolve(model_id)
    internal_request = _build_request(request, resolved)

    if request.stream:
        return _chat_stream(internal_request, resolved)

    try:
        response = await resolved.handle.generate(internal_request)
    except httpx.HTTPError as e:
        logger.exception(f"Upstream error from {resolved.provider.value}: {e}")
        raise UpstreamProviderError(resolved.provider.value, str(e)) from e

    return ChatResponseModel(
        id=response.id,
        model=response.model,
        provider=response.provider,
        content=response.content,
        tokens_input=response.tokens_input,
        tokens_output=response.tokens_output,
        latency_ms=response.latency_ms,
        finish_reason=response.finish_reason,
        generation_id=response.generation_id,
        cached=response.cached,
        supports_tools=resolved.capabilities.supports_tools,
        supports_reasoning=resolved.capabilities.supports_reasoning,
        created_at=response.created_at,
    )


def _chat_stream(
    internal_request: GenerateRequest,
    resolved: ResolvedModel,
) -> EventSourceResponse:
    """Generate a streaming SSE response."""

    async def event_generator():
        """Generate SSE events from stream chunks."""
        try:
            async for chunk in resolved.handle.stream(internal_request):
                data: dict[str, Any] = {
                    "id": chunk.id,
                    "content": chunk.content,
                    "done": chunk.done,
                }
                if chunk.finish_reason:
                    data["finish_reason"] = chunk.finish_reason
                if chunk.tokens_output:
                    data["tokens_output"] = chunk.tokens_output
                if chunk.done:
                    data["supports_reasoning"] = resolved.capabilities.supports_reasoning

                yield {
                    "event": "message",
                    "data": json.dumps(data),
                }
        except httpx.HTTPError as e:
            logger.exception(f"Streaming error from {resolved.provider.value}: {e}")
            yield {
                "event": "error",
                "data": json.dumps({"error": "upstream_error", "detail": str(e)}),
            }

    return EventSourceResponse(event_generator())
