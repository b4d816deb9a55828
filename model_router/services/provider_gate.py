"""Provider gate: checks whether a provider's credentials are present."""

import os
from typing import Callable

from model_router.providers.adapters import get_adapter
from model_router.providers.base import ProviderKind

EnvironLookup = Callable[[str], str | None]


def _read_environ(name: str) -> str | None:
    return os.environ.get(name)


class ProviderGate:
    """
    Answers "can this provider be used right now?".

    Nothing is cached: every call goes back to the lookup, so credentials
    added to or removed from the environment show up on the next check.
    Tests pass a fake lookup (e.g. ``{"CEREBRAS_API_KEY": "x"}.get``)
    instead of touching ``os.environ``.
    """

    def __init__(self, lookup: EnvironLookup | None = None) -> None:
        self._lookup = lookup or _read_environ

    def credential(self, provider: ProviderKind) -> str | None:
        """First non-blank credential for the provider, or None."""
        for name in get_adapter(provider).credential_env_vars:
            value = self._lookup(name)
            if value and value.strip():
                return value.strip()
        return None

    def is_configured(self, provider: ProviderKind) -> bool:
        """True if any recognized credential source is present."""
        return self.credential(provider) is not None

    def missing_credentials(self, provider: ProviderKind) -> tuple[str, ...]:
        """Environment variable names that would configure the provider."""
        return get_adapter(provider).credential_env_vars

    def provider_status(self) -> dict[str, bool]:
        """Configured flag for every provider, keyed by provider name."""
        return {kind.value: self.is_configured(kind) for kind in ProviderKind}
