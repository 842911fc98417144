from typing import Optional

from fastapi import APIRouter, Depends, Query

from hotel_admin.api.deps import Paging, ensure_admin_for_deleted, get_catalog_service
from hotel_admin.core.security import get_current_user, require_admin
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.catalog import ProviderCreate, ProviderPatch
from hotel_admin.models.common import page_envelope
from hotel_admin.services.catalog_service import CatalogService

router = APIRouter()


@router.post("/providers", status_code=201)
async def create_provider(
    body: ProviderCreate,
    user: AuthUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    provider = await catalog.create_provider(body)
    return {"id": provider.id}


@router.get("/providers")
async def list_providers(
    paging: Paging = Depends(),
    q: Optional[str] = None,
    service_id: Optional[str] = Query(None, alias="serviceId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    deleted: bool = False,
    user: AuthUser = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    ensure_admin_for_deleted(deleted, user)
    providers, total = await catalog.list_providers(paging.page, paging.limit, q, service_id, is_active, deleted)
    items = await catalog.with_service(providers)
    return page_envelope(items, total, paging.page, paging.limit)


@router.get("/providers/{provider_id}")
async def get_provider(
    provider_id: str,
    user: AuthUser = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    provider = await catalog.get_provider(provider_id)
    rows = await catalog.with_service([provider])
    return rows[0]


@router.patch("/providers/{provider_id}")
async def patch_provider(
    provider_id: str,
    body: ProviderPatch,
    user: AuthUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    provider = await catalog.update_provider(provider_id, body)
    return provider.to_api()


@router.delete("/providers/{provider_id}")
async def delete_provider(
    provider_id: str,
    user: AuthUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_provider(provider_id)
    return {"success": True}
