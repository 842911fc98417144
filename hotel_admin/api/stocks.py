from typing import Optional

from fastapi import APIRouter, Depends, Query

from hotel_admin.api.deps import Paging, get_stock_service
from hotel_admin.core.security import get_current_user, require_admin
from hotel_admin.models.audit import StockAudit
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.common import page_envelope
from hotel_admin.models.stock import StockCreate, StockPatch
from hotel_admin.services.stock_service import StockService, stock_row

router = APIRouter()


@router.post("/stocks", status_code=201)
async def create_stock(
    body: StockCreate,
    user: AuthUser = Depends(require_admin),
    stocks: StockService = Depends(get_stock_service),
):
    stock = await stocks.create(body, user)
    return {"id": stock.id}


@router.get("/stocks")
async def list_stocks(
    paging: Paging = Depends(),
    q: Optional[str] = None,
    low_stock: bool = Query(False, alias="lowStock"),
    user: AuthUser = Depends(get_current_user),
    stocks: StockService = Depends(get_stock_service),
):
    items, total = await stocks.list(paging.page, paging.limit, q, low_stock)
    return page_envelope(items, total, paging.page, paging.limit)


@router.get("/stocks/{stock_id}")
async def get_stock(
    stock_id: str,
    user: AuthUser = Depends(get_current_user),
    stocks: StockService = Depends(get_stock_service),
):
    return stock_row(await stocks.get(stock_id))


@router.patch("/stocks/{stock_id}")
async def patch_stock(
    stock_id: str,
    body: StockPatch,
    user: AuthUser = Depends(require_admin),
    stocks: StockService = Depends(get_stock_service),
):
    return stock_row(await stocks.patch(stock_id, body, user))


@router.delete("/stocks/{stock_id}")
async def delete_stock(
    stock_id: str,
    user: AuthUser = Depends(require_admin),
    stocks: StockService = Depends(get_stock_service),
):
    await stocks.delete(stock_id, user)
    return {"success": True}


@router.get("/stocks/{stock_id}/audit")
async def stock_audit(
    stock_id: str,
    limit: int = Query(50, ge=1, le=500),
    user: AuthUser = Depends(get_current_user),
    stocks: StockService = Depends(get_stock_service),
):
    rows = await stocks.audit_trail(stock_id, limit=limit)
    return {"items": [StockAudit.model_validate(row).to_api() for row in rows]}
