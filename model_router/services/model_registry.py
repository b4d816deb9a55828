"""Model registry: the static table of models the router knows about."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from pydantic import BaseModel, ValidationError

from model_router.config import get_router_config
from model_router.providers.base import ProviderKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelCapabilities:
    """Features callers can rely on when building a request."""

    supports_tools: bool = True
    supports_reasoning: bool = False


@dataclass(frozen=True)
class ModelDefinition:
    """A model the router can serve."""

    id: str
    display_name: str
    provider: ProviderKind
    capabilities: ModelCapabilities = field(default_factory=ModelCapabilities)


def _cerebras(model_id: str, name: str, tools: bool = True, reasoning: bool = False) -> ModelDefinition:
    return ModelDefinition(model_id, name, ProviderKind.CEREBRAS, ModelCapabilities(tools, reasoning))


def _gateway(model_id: str, name: str, tools: bool = True, reasoning: bool = False) -> ModelDefinition:
    return ModelDefinition(model_id, name, ProviderKind.GATEWAY, ModelCapabilities(tools, reasoning))


# Declaration order is priority order: the first enabled entry is the default.
DEFAULT_MODEL_DEFINITIONS: tuple[ModelDefinition, ...] = (
    _cerebras("cerebras/zai-glm-4.6", "ZAI GLM 4.6"),
    _cerebras("cerebras/gpt-oss-120b", "GPT-OSS 120B"),
    _cerebras("cerebras/llama-3.3-70b", "Llama 3.3 70B"),
    _gateway("anthropic/claude-haiku-4.5", "Claude Haiku 4.5"),
    _gateway("anthropic/claude-sonnet-4.5", "Claude Sonnet 4.5"),
    _gateway("anthropic/claude-opus-4.5", "Claude Opus 4.5"),
    _gateway("google/gemini-2.5-flash", "Gemini 2.5 Flash"),
    _gateway("google/gemini-3-pro", "Gemini 3 Pro"),
    # Cerebras rejects streaming combined with tools for these models.
    _cerebras("cerebras/llama3.1-8b", "Llama 3.1 8B", tools=False),
    _cerebras("cerebras/qwen-3-235b-a22b-instruct-2507", "Qwen 3 235B Instruct", tools=False),
    _cerebras("cerebras/qwen-3-235b-a22b-thinking-2507", "Qwen 3 235B Thinking", tools=False, reasoning=True),
    _cerebras("cerebras/qwen-3-32b", "Qwen 3 32B", tools=False, reasoning=True),
    _cerebras("cerebras/qwen-3-coder-480b", "Qwen 3 Coder 480B", tools=False),
    _gateway("xai/grok-4-fast-non-reasoning", "Grok 4 Fast"),
    _gateway("moonshotai/kimi-k2-thinking-turbo", "Kimi K2 Thinking Turbo", reasoning=True),
    _gateway("groq/moonshotai/kimi-k2-instruct-0905", "Kimi K2 Instruct (Groq)"),
    _gateway("groq/qwen/qwen3-32b", "Qwen 3 32B (Groq)", reasoning=True),
)


class ModelRegistry:
    """
    Immutable, ordered table of model definitions.

    Safe to share between concurrent requests: nothing mutates it after
    construction.
    """

    def __init__(self, definitions: Iterable[ModelDefinition]) -> None:
        """
        Build the registry.

        Raises:
            ValueError: If two definitions share an id
        """
        self._definitions = tuple(definitions)
        self._by_id: dict[str, ModelDefinition] = {}
        for definition in self._definitions:
            if definition.id in self._by_id:
                existing = self._by_id[definition.id]
                raise ValueError(
                    f"Duplicate model id {definition.id!r} "
                    f"(providers: {existing.provider.value}, {definition.provider.value})"
                )
            self._by_id[definition.id] = definition

    def list_definitions(self) -> tuple[ModelDefinition, ...]:
        """Return every definition in declaration order."""
        return self._definitions

    def get_definition(self, model_id: str) -> ModelDefinition | None:
        """Exact-match lookup; None when the id is unknown."""
        return self._by_id.get(model_id)

    def supported_ids(self) -> tuple[str, ...]:
        """The allowlist of model ids callers may request."""
        return tuple(d.id for d in self._definitions)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._by_id

    def __iter__(self) -> Iterator[ModelDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)


class ModelEntryConfig(BaseModel):
    """One entry of the ``models`` list in model-router.yaml."""

    id: str
    name: str | None = None
    provider: ProviderKind
    supports_tools: bool = True
    supports_reasoning: bool = False


def definitions_from_config(items: list[dict[str, Any]]) -> list[ModelDefinition]:
    """
    Parse the ``models`` list of model-router.yaml.

    Capability flags accept YAML booleans and the strings left by
    ``${VAR:-default}`` substitution ("true", "false", "1", "0").

    Raises:
        ValueError: If an entry lacks an id, names an unknown provider or
            carries a malformed field
    """
    definitions = []
    for item in items:
        if "id" not in item:
            raise ValueError(f"Model entry without an id: {item}")
        try:
            ProviderKind(item.get("provider", ""))
        except ValueError:
            raise ValueError(
                f"Model {item['id']} has unknown provider {item.get('provider')!r}"
            ) from None
        try:
            entry = ModelEntryConfig.model_validate(item)
        except ValidationError as e:
            raise ValueError(f"Invalid model entry {item['id']}: {e}") from None
        definitions.append(
            ModelDefinition(
                id=entry.id,
                display_name=entry.name or entry.id,
                provider=entry.provider,
                capabilities=ModelCapabilities(
                    supports_tools=entry.supports_tools,
                    supports_reasoning=entry.supports_reasoning,
                ),
            )
        )
    return definitions


def load_registry(config: dict[str, Any] | None = None) -> ModelRegistry:
    """Build the registry from config, falling back to the built-in table."""
    if config is None:
        config = get_router_config()

    items = config.get("models")
    if items:
        registry = ModelRegistry(definitions_from_config(items))
        logger.info(f"Loaded {len(registry)} model definitions from config")
    else:
        registry = ModelRegistry(DEFAULT_MODEL_DEFINITIONS)
        logger.info(f"Using {len(registry)} built-in model definitions")
    return registry


# Global registry instance
_registry: ModelRegistry | None = None


def get_registry() -> ModelRegistry:
    """Get the global model registry instance."""
    global _registry
    if _registry is None:
        _registry = load_registry()
    return _registry
