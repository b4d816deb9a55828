"""Models listing and info endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from model_router.services.model_registry import ModelDefinition
from model_router.services.resolver import ModelResolver, get_resolver

router = APIRouter(prefix="/models", tags=["models"])


class ModelResponse(BaseModel):
    """Model information response."""

    id: str
    name: str
    provider: str
    supports_tools: bool
    supports_reasoning: bool


class ModelDetailResponse(ModelResponse):
    """Single model lookup, including whether it can be used right now."""

    enabled: bool


class ModelsMeta(BaseModel):
    """Provider availability; never includes credential values."""

    providers: dict[str, bool]
    has_any_providers: bool


class ModelsListResponse(BaseModel):
    """Response for listing enabled models."""

    models: list[ModelResponse]
    total: int
    default_model: str
    meta: ModelsMeta


def _to_response(definition: ModelDefinition) -> ModelResponse:
    return ModelResponse(
        id=definition.id,
        name=definition.display_name,
        provider=definition.provider.value,
        supports_tools=definition.capabilities.supports_tools,
        supports_reasoning=definition.capabilities.supports_reasoning,
    )


@router.get("", response_model=ModelsListResponse)
async def list_models(
    resolver: ModelResolver = Depends(get_resolver),
) -> ModelsListResponse:
    """
    List the models that can be used right now.

    Only models whose provider has credentials configured are returned,
    in priority order.
    """
    models = [_to_response(d) for d in resolver.list_enabled_definitions()]

    return ModelsListResponse(
        models=models,
        total=len(models),
        default_model=resolver.default_enabled_model_id(),
        meta=ModelsMeta(
            providers=resolver.gate.provider_status(),
            has_any_providers=len(models) > 0,
        ),
    )


@router.get("/{model_id:path}", response_model=ModelDetailResponse)
async def get_model(
    model_id: str,
    resolver: ModelResolver = Depends(get_resolver),
) -> ModelDetailResponse:
    """
    Get information about a specific model.

    Raises:
        404: If the model is not in the registry
    """
    definition = resolver.registry.get_definition(model_id)

    if definition is None:
        raise HTTPException(
            status_code=404,
            detail=f"Model not found: {model_id}",
        )

    return ModelDetailResponse(
        **_to_response(definition).model_dump(),
        enabled=resolver.gate.is_configured(definition.provider),
    )
