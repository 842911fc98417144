from typing import Any, Dict, List, Optional, Tuple

from hotel_admin.core.exceptions import NotFoundException
from hotel_admin.core.logger import logger
from hotel_admin.models.catalog import (
    Provider,
    ProviderCreate,
    ProviderPatch,
    Service,
    ServiceCreate,
    ServicePatch,
)
from hotel_admin.models.common import new_id, utcnow
from hotel_admin.services.db_service import DocumentStore, Query

SERVICES = "services"
PROVIDERS = "providers"


def _scope_deleted(query: Query, deleted: bool) -> Query:
    """Default listings hide soft-deleted rows; `deleted=True` lists only those."""
    return query.not_null("deleted_at") if deleted else query.is_null("deleted_at")


def _patch_fields(patch) -> Dict[str, Any]:
    fields = patch.updates()
    # An explicit `deletedAt: null` is a restore: the marker is cleared
    if "deleted_at" in patch.provided():
        fields["deleted_at"] = None
    fields["updated_at"] = utcnow().isoformat()
    return fields


class CatalogService:
    """Bookable services and the providers attached to them."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # --- Services ---

    async def create_service(self, data: ServiceCreate) -> Service:
        now = utcnow()
        service = Service(id=new_id(), created_at=now, updated_at=now, **data.model_dump())
        await self.store.insert(SERVICES, service.to_doc())
        logger.info(f"🆕 Service created: {service.name} (allowOverlap={service.allow_overlap})")
        return service

    async def get_service(self, service_id: str) -> Service:
        row = await self.store.get(SERVICES, service_id)
        if not row:
            raise NotFoundException()
        return Service.model_validate(row)

    async def list_services(
        self,
        page: int,
        limit: int,
        q: Optional[str] = None,
        is_active: Optional[bool] = None,
        deleted: bool = False,
    ) -> Tuple[List[Service], int]:
        query = _scope_deleted(Query(), deleted).search(["name", "description"], q)
        if is_active is not None:
            query.eq("is_active", is_active)
        rows, total = await self.store.find(SERVICES, query.order("name").page(page, limit))
        return [Service.model_validate(row) for row in rows], total

    async def update_service(self, service_id: str, patch: ServicePatch) -> Service:
        row = await self.store.update(SERVICES, service_id, _patch_fields(patch))
        if not row:
            raise NotFoundException()
        logger.info(f"✏️ Service {service_id} updated: {sorted(patch.provided())}")
        return Service.model_validate(row)

    async def delete_service(self, service_id: str) -> None:
        await self.get_service(service_id)
        now = utcnow().isoformat()
        await self.store.update(SERVICES, service_id, {"deleted_at": now, "updated_at": now})
        logger.info(f"🗑️ Service {service_id} soft deleted")

    async def live_service(self, service_id: str) -> Service:
        row = await self.store.find_one(SERVICES, Query().eq("id", service_id).is_null("deleted_at"))
        if not row:
            raise NotFoundException("Service not found")
        return Service.model_validate(row)

    # --- Providers ---

    async def create_provider(self, data: ProviderCreate) -> Provider:
        await self.live_service(data.service_id)
        now = utcnow()
        provider = Provider(id=new_id(), created_at=now, updated_at=now, **data.model_dump())
        await self.store.insert(PROVIDERS, provider.to_doc())
        logger.info(f"🆕 Provider created: {provider.name} for service {provider.service_id}")
        return provider

    async def get_provider(self, provider_id: str) -> Provider:
        row = await self.store.get(PROVIDERS, provider_id)
        if not row:
            raise NotFoundException()
        return Provider.model_validate(row)

    async def list_providers(
        self,
        page: int,
        limit: int,
        q: Optional[str] = None,
        service_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        deleted: bool = False,
    ) -> Tuple[List[Provider], int]:
        query = _scope_deleted(Query(), deleted).search(["name"], q)
        if service_id:
            query.eq("service_id", service_id)
        if is_active is not None:
            query.eq("is_active", is_active)
        rows, total = await self.store.find(PROVIDERS, query.order("name").page(page, limit))
        return [Provider.model_validate(row) for row in rows], total

    async def update_provider(self, provider_id: str, patch: ProviderPatch) -> Provider:
        if "service_id" in patch.provided():
            await self.live_service(patch.service_id)
        row = await self.store.update(PROVIDERS, provider_id, _patch_fields(patch))
        if not row:
            raise NotFoundException()
        logger.info(f"✏️ Provider {provider_id} updated: {sorted(patch.provided())}")
        return Provider.model_validate(row)

    async def delete_provider(self, provider_id: str) -> None:
        await self.get_provider(provider_id)
        now = utcnow().isoformat()
        await self.store.update(PROVIDERS, provider_id, {"deleted_at": now, "updated_at": now})
        logger.info(f"🗑️ Provider {provider_id} soft deleted")

    async def with_service(self, providers: List[Provider]) -> List[Dict[str, Any]]:
        """API rows for providers, each embedding {id, name} of its service."""
        service_ids = list({p.service_id for p in providers})
        names: Dict[str, str] = {}
        if service_ids:
            rows, _ = await self.store.find(SERVICES, Query().in_("id", service_ids))
            names = {row["id"]: row["name"] for row in rows}
        return [
            {**p.to_api(), "service": {"id": p.service_id, "name": names.get(p.service_id)}}
            for p in providers
        ]
