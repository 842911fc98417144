from typing import Any, Dict, List, Optional, Tuple

from hotel_admin.core.exceptions import NotFoundException
from hotel_admin.core.logger import logger
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.common import new_id, utcnow
from hotel_admin.models.stock import Stock, StockCreate, StockPatch
from hotel_admin.services.audit_service import AuditLogger, build_note, creation_changes, diff_fields
from hotel_admin.services.db_service import DocumentStore, Query

STOCKS = "stocks"
STOCK_AUDITS = "stock_audits"

SNAPSHOT_FIELDS = ("name", "quantity", "unit", "description", "minThreshold")


def stock_row(stock: Stock) -> Dict[str, Any]:
    return {**stock.to_api(), "isLowStock": stock.is_low_stock}


class StockService:
    def __init__(self, store: DocumentStore):
        self.store = store
        self.audit = AuditLogger(store, STOCK_AUDITS, "stock_id")

    async def get(self, stock_id: str) -> Stock:
        row = await self.store.get(STOCKS, stock_id)
        if not row:
            raise NotFoundException()
        return Stock.model_validate(row)

    async def create(self, data: StockCreate, user: AuthUser) -> Stock:
        now = utcnow()
        fields = data.model_dump(exclude_none=True)
        stock = Stock(id=new_id(), created_at=now, updated_at=now, **fields)
        await self.store.insert(STOCKS, stock.to_doc())
        logger.info(f"📦 Stock item created: {stock.name} ({stock.quantity} {stock.unit})")

        provided = [key for key in SNAPSHOT_FIELDS if key in data.model_dump(by_alias=True, exclude_none=True)]
        changes = creation_changes(stock.to_api(), provided)
        await self.audit.record(stock.id, "created", changes, user, note=f"Stock is created: {build_note(changes)}")
        return stock

    async def patch(self, stock_id: str, patch: StockPatch, user: AuthUser) -> Stock:
        current = await self.get(stock_id)
        updated = current.model_copy(update={name: getattr(patch, name) for name in patch.provided()})

        keys = [key for key in SNAPSHOT_FIELDS if key in patch.model_dump(by_alias=True, exclude_unset=True)]
        changes = diff_fields(current.to_api(), updated.to_api(), keys)
        if not changes:
            return current

        updated = updated.model_copy(update={"updated_at": utcnow()})
        doc = updated.to_doc()
        columns = set(patch.provided()) | {"updated_at"}
        await self.store.update(STOCKS, current.id, {key: doc[key] for key in columns})
        logger.info(f"✏️ Stock {current.id} updated: {[c.key for c in changes]}")

        await self.audit.record(current.id, "updated", changes, user, note=build_note(changes))
        return updated

    async def delete(self, stock_id: str, user: AuthUser) -> None:
        """Hard delete; the audit record keeps the full prior snapshot."""
        current = await self.get(stock_id)
        snapshot = current.to_api()
        changes = diff_fields(snapshot, {}, SNAPSHOT_FIELDS)

        await self.store.delete(STOCKS, current.id)
        logger.info(f"🗑️ Stock {current.id} ({current.name}) deleted")
        await self.audit.record(current.id, "deleted", changes, user, note=f"Stock is deleted: {current.name}")

    async def list(
        self,
        page: int,
        limit: int,
        q: Optional[str] = None,
        low_stock: bool = False,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = Query().search(["name", "description"], q).order("created_at", desc=True)
        if not low_stock:
            rows, total = await self.store.find(STOCKS, query.page(page, limit))
            return [stock_row(Stock.model_validate(row)) for row in rows], total

        # Threshold is per row, so the low stock filter is applied after the read
        rows, _ = await self.store.find(STOCKS, query)
        low = [stock for stock in map(Stock.model_validate, rows) if stock.is_low_stock]
        start = (page - 1) * limit
        return [stock_row(stock) for stock in low[start:start + limit]], len(low)

    async def audit_trail(self, stock_id: str, limit: Optional[int] = 50) -> List[Dict[str, Any]]:
        return await self.audit.list_for(stock_id, limit=limit)
