"""Model resolver: turns a requested model id into a ready-to-call handle."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from model_router.config import Settings, get_settings
from model_router.errors import MissingCredentialsError, UnsupportedModelError
from model_router.providers.adapters import ProviderAdapter, get_adapter
from model_router.providers.base import ProviderKind
from model_router.providers.handle import ModelHandle
from model_router.providers.openai_compat import OpenAICompatibleClient
from model_router.services.model_registry import (
    ModelCapabilities,
    ModelDefinition,
    ModelRegistry,
    get_registry,
)
from model_router.services.provider_gate import ProviderGate
from model_router.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ProviderAdapter, str], OpenAICompatibleClient]


@dataclass
class ResolvedModel:
    """Result of resolution; owned by the request that created it."""

    handle: ModelHandle
    provider: ProviderKind
    capabilities: ModelCapabilities

    @property
    def model_id(self) -> str:
        return self.handle.model_id

    @property
    def native_id(self) -> str:
        return self.handle.native_id


class ModelResolver:
    """
    Central entry point for model selection.

    Responsibilities:
    - Validate the requested id against the registry allowlist
    - Refuse providers whose credentials are missing
    - Strip provider namespace prefixes
    - Share one client per provider, replacing it when the credential changes

    Resolution never retries and never substitutes another model.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        gate: ProviderGate | None = None,
        settings: Settings | None = None,
        client_factory: ClientFactory | None = None,
        cache: ResponseCache | None = None,
    ) -> None:
        self.registry = registry
        self.gate = gate or ProviderGate()
        self.settings = settings or get_settings()
        self._client_factory = client_factory or (
            lambda adapter, api_key: adapter.create_client(self.settings, api_key)
        )
        self.cache = cache
        self._clients: dict[ProviderKind, tuple[str, OpenAICompatibleClient]] = {}
        self._retired: list[OpenAICompatibleClient] = []
        self._closing: set[asyncio.Task] = set()

    def _get_client(self, adapter: ProviderAdapter, api_key: str) -> OpenAICompatibleClient:
        """Reuse the provider's client while its credential is unchanged."""
        cached = self._clients.get(adapter.kind)
        if cached is not None and cached[0] == api_key:
            return cached[1]

        client = self._client_factory(adapter, api_key)
        self._clients[adapter.kind] = (api_key, client)
        if cached is None:
            logger.info(f"Created client for provider {adapter.kind.value}")
        else:
            logger.info(f"Credential changed for provider {adapter.kind.value}; replacing client")
            self._retire(cached[1])
        return client

    def _retire(self, client: OpenAICompatibleClient) -> None:
        """Close a replaced client now if a loop is running, else at shutdown."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._retired.append(client)
            return
        task = loop.create_task(client.close())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    def resolve(self, model_id: str) -> ResolvedModel:
        """
        Resolve a model id to a callable handle.

        Args:
            model_id: Identifier from the request, e.g. "cerebras/gpt-oss-120b"

        Returns:
            ResolvedModel with the handle and capability flags

        Raises:
            UnsupportedModelError: If the id is not in the registry
            MissingCredentialsError: If the model's provider is not configured
        """
        definition = self.registry.get_definition(model_id)
        if definition is None:
            logger.warning(f"Rejected unsupported model: {model_id}")
            raise UnsupportedModelError(model_id)

        adapter = get_adapter(definition.provider)
        api_key = self.gate.credential(definition.provider)
        if api_key is None:
            logger.warning(
                f"Provider {definition.provider.value} not configured for model {model_id}"
            )
            raise MissingCredentialsError(
                definition.provider.value,
                self.gate.missing_credentials(definition.provider),
            )

        handle = ModelHandle(
            model_id=model_id,
            native_id=adapter.normalize_id(model_id),
            provider=definition.provider,
            client=self._get_client(adapter, api_key),
            cache=self.cache,
        )
        return ResolvedModel(
            handle=handle,
            provider=definition.provider,
            capabilities=definition.capabilities,
        )

    def list_enabled_definitions(self) -> list[ModelDefinition]:
        """Registry entries whose provider is configured right now."""
        return [
            d for d in self.registry.list_definitions()
            if self.gate.is_configured(d.provider)
        ]

    def is_model_enabled(self, model_id: str) -> bool:
        definition = self.registry.get_definition(model_id)
        if definition is None:
            return False
        return self.gate.is_configured(definition.provider)

    def has_any_configured_providers(self) -> bool:
        return len(self.list_enabled_definitions()) > 0

    def default_enabled_model_id(self) -> str:
        """
        Pick the model to use when the caller names none.

        The first enabled definition wins; without any configured provider
        the configured default (if registered) or the first registry id is
        returned so the error surfaces at resolution time.
        """
        enabled = self.list_enabled_definitions()
        if enabled:
            return enabled[0].id
        if self.settings.default_model in self.registry:
            return self.settings.default_model
        return self.registry.supported_ids()[0]

    async def close(self) -> None:
        """Close all cached and replaced provider clients."""
        if self._closing:
            await asyncio.gather(*self._closing)
        for _, client in self._clients.values():
            await client.close()
        for client in self._retired:
            await client.close()
        self._clients.clear()
        self._retired.clear()


# Global resolver instance
_resolver: ModelResolver | None = None


def get_resolver() -> ModelResolver:
    """Get the global model resolver instance."""
    global _resolver
    if _resolver is None:
        settings = get_settings()
        cache = None
        if settings.cache_enabled:
            cache = ResponseCache(
                max_size=settings.cache_max_size,
                ttl_seconds=settings.cache_ttl_seconds,
            )
        _resolver = ModelResolver(
            registry=get_registry(),
            settings=settings,
            cache=cache,
        )
    return _resolver


async def close_resolver() -> None:
    """Release the global resolver's clients."""
    global _resolver
    if _resolver is not None:
        await _resolver.close()
        _resolver = None
