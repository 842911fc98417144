from typing import Optional

from fastapi import APIRouter, Depends, Query

from hotel_admin.api.deps import Paging, ensure_admin_for_deleted, get_catalog_service
from hotel_admin.core.security import get_current_user, require_admin
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.catalog import ServiceCreate, ServicePatch
from hotel_admin.models.common import page_envelope
from hotel_admin.services.catalog_service import CatalogService

router = APIRouter()


@router.post("/services", status_code=201)
async def create_service(
    body: ServiceCreate,
    user: AuthUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    service = await catalog.create_service(body)
    return {"id": service.id}


@router.get("/services")
async def list_services(
    paging: Paging = Depends(),
    q: Optional[str] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    deleted: bool = False,
    user: AuthUser = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    ensure_admin_for_deleted(deleted, user)
    services, total = await catalog.list_services(paging.page, paging.limit, q, is_active, deleted)
    return page_envelope([s.to_api() for s in services], total, paging.page, paging.limit)


@router.get("/services/{service_id}")
async def get_service(
    service_id: str,
    user: AuthUser = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    service = await catalog.get_service(service_id)
    return service.to_api()


@router.patch("/services/{service_id}")
async def patch_service(
    service_id: str,
    body: ServicePatch,
    user: AuthUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    service = await catalog.update_service(service_id, body)
    return service.to_api()


@router.delete("/services/{service_id}")
async def delete_service(
    service_id: str,
    user: AuthUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_service(service_id)
    return {"success": True}
