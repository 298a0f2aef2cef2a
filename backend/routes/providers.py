"""Provider admin routes: configuration, health and usage.

Unauthenticated; deployments are expected to put these behind their own auth layer.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from backend.models import ProviderCreateRequest, ProviderSelectionResponse, ProviderUpdateRequest
from backend.providers.credentials import encrypt_credential
from backend.providers.models import (
    Capability,
    ProviderConfig,
    ProviderStatus,
    ProviderUsageSummary,
    UsageLogEntry,
)
from backend.providers.registry import ProviderRegistry
from backend.providers.store import ProviderExistsError

router = APIRouter()


def _get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


@router.get("/providers", response_model=list[ProviderConfig])
async def list_providers(request: Request, status: Optional[ProviderStatus] = None):
    return await _get_registry(request).store.list_providers(status=status)


@router.post("/providers", response_model=ProviderConfig, status_code=201)
async def create_provider(body: ProviderCreateRequest, request: Request):
    config = ProviderConfig(
        provider=body.provider,
        display_name=body.display_name or body.provider.title(),
        default_model=body.default_model,
        base_url=body.base_url,
        encrypted_credential=encrypt_credential(body.api_key) if body.api_key else None,
        priority=body.priority,
        capabilities=body.capabilities,
        status=body.status,
    )
    try:
        return await _get_registry(request).store.save_provider(config)
    except ProviderExistsError:
        raise HTTPException(status_code=409, detail=f"Provider '{body.provider}' already exists")


@router.get("/providers/selection", response_model=ProviderSelectionResponse)
async def preview_selection(
    request: Request,
    capability: Optional[Capability] = None,
    preferred: Optional[str] = None,
):
    """Show which provider would serve a request and the fallback order behind it."""
    selection = await _get_registry(request).select_provider_with_fallback(capability, preferred)
    if selection is None:
        raise HTTPException(status_code=503, detail="No healthy AI provider available")
    return ProviderSelectionResponse(
        capability=capability,
        provider=selection.provider.provider,
        fallbacks=[p.provider for p in selection.fallbacks],
    )


@router.patch("/providers/{provider}", response_model=ProviderConfig)
async def update_provider(provider: str, body: ProviderUpdateRequest, request: Request):
    fields = body.model_dump(exclude_unset=True)
    api_key = fields.pop("api_key", None)
    if api_key:
        fields["encrypted_credential"] = encrypt_credential(api_key)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = await _get_registry(request).store.update_provider(provider, **fields)
    if updated is None:
        raise HTTPException(status_code=404, detail="Provider not found")
    return updated


@router.delete("/providers/{provider}")
async def deactivate_provider(provider: str, request: Request):
    """Providers are never hard-deleted; this sets status to inactive."""
    if not await _get_registry(request).store.deactivate_provider(provider):
        raise HTTPException(status_code=404, detail="Provider not found")
    return {"provider": provider, "status": ProviderStatus.INACTIVE.value}


@router.post("/providers/{provider}/reset-health", response_model=ProviderConfig)
async def reset_provider_health(provider: str, request: Request):
    config = await _get_registry(request).reset_health(provider)
    if config is None:
        raise HTTPException(status_code=404, detail="Provider not found")
    return config


@router.get("/usage", response_model=list[UsageLogEntry])
async def list_usage(
    request: Request,
    provider: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
):
    return await _get_registry(request).store.list_usage(provider=provider, limit=limit)


@router.get("/usage/summary", response_model=list[ProviderUsageSummary])
async def usage_summary(request: Request):
    return await _get_registry(request).store.summarize_usage()
