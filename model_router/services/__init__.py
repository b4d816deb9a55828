"""Routing services: registry, provider gate, resolver and response cache."""

from model_router.services.model_registry import ModelCapabilities, ModelDefinition, ModelRegistry
from model_router.services.provider_gate import ProviderGate
from model_router.services.resolver import ModelResolver, ResolvedModel
from model_router.services.response_cache import ResponseCache

__all__ = [
    "ModelCapabilities",
    "ModelDefinition",
    "ModelRegistry",
    "ModelResolver",
    "ProviderGate",
    "ResolvedModel",
    "ResponseCache",
]
