"""Errors raised while resolving a model identifier."""

from typing import Sequence


class ModelRoutingError(Exception):
    """Base class for resolution failures surfaced to API callers."""

    status_code: int = 500
    error_code: str = "routing_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnsupportedModelError(ModelRoutingError):
    """The requested model id is not in the registry (caller's fault)."""

    status_code = 400
    error_code = "unsupported_model"

    def __init__(self, model_id: str) -> None:
        super().__init__(f"Model {model_id} is not supported")
        self.model_id = model_id


class MissingCredentialsError(ModelRoutingError):
    """The model's provider has no credential configured (deployment's fault)."""

    status_code = 500
    error_code = "missing_credentials"

    def __init__(self, provider: str, env_vars: Sequence[str]) -> None:
        names = " or ".join(env_vars)
        super().__init__(
            f"Provider '{provider}' is not configured: set {names} "
            "in the server environment or .env file"
        )
        self.provider = provider
        self.env_vars = tuple(env_vars)


class UpstreamProviderError(ModelRoutingError):
    """The provider was reached but the call failed."""

    status_code = 502
    error_code = "upstream_error"

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"Provider {provider} failed: {reason}")
        self.provider = provider
