"""Per-provider routing rules: credentials, endpoint and id normalization."""

from dataclasses import dataclass

from model_router.config import Settings
from model_router.providers.base import ProviderKind
from model_router.providers.openai_compat import OpenAICompatibleClient


@dataclass(frozen=True)
class ProviderAdapter:
    """
    How to reach one provider.

    Attributes:
        kind: Provider this adapter serves
        credential_env_vars: Environment variables holding a usable
            credential, in order of preference
        base_url_setting: Name of the Settings field with the API base URL
        namespace_prefix: Leading id segment the provider's own API does not
            expect, or None when ids are passed through unchanged
    """

    kind: ProviderKind
    credential_env_vars: tuple[str, ...]
    base_url_setting: str
    namespace_prefix: str | None = None

    def normalize_id(self, model_id: str) -> str:
        """Strip the provider namespace prefix, if present."""
        if self.namespace_prefix and model_id.startswith(self.namespace_prefix):
            return model_id[len(self.namespace_prefix):]
        return model_id

    def create_client(self, settings: Settings, api_key: str) -> OpenAICompatibleClient:
        """Build a client bound to this provider's endpoint and credential."""
        return OpenAICompatibleClient(
            name=self.kind.value,
            endpoint=getattr(settings, self.base_url_setting),
            api_key=api_key,
            timeout=settings.default_timeout,
        )


CEREBRAS = ProviderAdapter(
    kind=ProviderKind.CEREBRAS,
    credential_env_vars=("CEREBRAS_API_KEY",),
    base_url_setting="cerebras_base_url",
    namespace_prefix="cerebras/",
)

# The gateway addresses models as "vendor/model" and keeps the prefix.
GATEWAY = ProviderAdapter(
    kind=ProviderKind.GATEWAY,
    credential_env_vars=("AI_GATEWAY_API_KEY", "VERCEL_OIDC_TOKEN"),
    base_url_setting="ai_gateway_base_url",
)


def get_adapter(kind: ProviderKind) -> ProviderAdapter:
    """Select the adapter for a provider."""
    if kind is ProviderKind.CEREBRAS:
        return CEREBRAS
    if kind is ProviderKind.GATEWAY:
        return GATEWAY
    raise ValueError(f"Unknown provider: {kind}")
