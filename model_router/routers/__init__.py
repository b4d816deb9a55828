"""API routers for Model Router."""

from model_router.routers.chat import router as chat_router
from model_router.routers.health import router as health_router
from model_router.routers.models import router as models_router

__all__ = [
    "chat_router",
    "health_router",
    "models_router",
]
