"""
Model Router command-line interface.

Lists registered models and smoke-tests them against their providers.
"""

from model_router.cli.main import app

__all__ = [
    "app",
]
