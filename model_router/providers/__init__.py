"""LLM provider clients and routing adapters."""

from model_router.providers.adapters import ProviderAdapter, get_adapter
from model_router.providers.base import (
    ChatMessage,
    GenerateRequest,
    GenerateResponse,
    ProviderKind,
    StreamChunk,
)
from model_router.providers.handle import ModelHandle
from model_router.providers.openai_compat import OpenAICompatibleClient

__all__ = [
    "ChatMessage",
    "GenerateRequest",
    "GenerateResponse",
    "ModelHandle",
    "OpenAICompatibleClient",
    "ProviderAdapter",
    "ProviderKind",
    "StreamChunk",
    "get_adapter",
]
