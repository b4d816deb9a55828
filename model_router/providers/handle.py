"""Callable model handle returned by the resolver."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, AsyncIterator

from model_router.providers.base import GenerateRequest, GenerateResponse, ProviderKind, StreamChunk
from model_router.providers.openai_compat import OpenAICompatibleClient

if TYPE_CHECKING:
    from model_router.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)


@dataclass
class ModelHandle:
    """
    A provider client bound to one model.

    ``model_id`` is the identifier the caller asked for; ``native_id`` is
    what the provider's API receives.
    """

    model_id: str
    native_id: str
    provider: ProviderKind
    client: OpenAICompatibleClient
    cache: "ResponseCache | None" = None

    def _log_request(self, request: GenerateRequest) -> None:
        logger.debug(
            f"[{self.provider.value}] Model request: model={self.native_id} "
            f"messages={len(request.messages)} tools={len(request.tools or [])} "
            f"max_tokens={request.max_tokens} temperature={request.temperature}"
        )

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Generate a complete response, consulting the cache when present."""
        self._log_request(request)

        cache_key = None
        if self.cache is not None:
            cache_key = self.cache.make_key(self.model_id, request)
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"[{self.provider.value}] Cache hit for {self.model_id}")
                return cached.model_copy(update={"cached": True})

        response = await self.client.chat(self.native_id, request)
        response = response.model_copy(update={"model": self.model_id})

        logger.info(
            f"[{self.model_id}] {response.latency_ms}ms | {response.total_tokens} tokens "
            f"(in: {response.tokens_input}, out: {response.tokens_output})"
        )

        if cache_key is not None:
            self.cache.set(cache_key, response)
        return response

    async def stream(self, request: GenerateRequest) -> AsyncIterator[StreamChunk]:
        """Stream a response chunk by chunk. Streams are never cached."""
        self._log_request(request)
        async for chunk in self.client.chat_stream(self.native_id, request):
            yield chunk
