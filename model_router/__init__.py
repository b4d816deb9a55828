"""Model Router: resolves model identifiers to provider clients."""

__version__ = "1.0.0"
