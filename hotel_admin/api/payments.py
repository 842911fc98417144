from typing import Optional

from fastapi import APIRouter, Depends, Query

from hotel_admin.api.deps import Paging, get_payment_service
from hotel_admin.core.security import require_admin
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.common import page_envelope
from hotel_admin.models.payment import (
    PaymentCreate,
    PaymentDirection,
    PaymentLogCreate,
    PaymentLogPatch,
    PaymentPatch,
    PaymentType,
)
from hotel_admin.services.payment_service import PaymentService, log_totals

# Payment definitions and their logs are admin only
router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/payments", status_code=201)
async def create_payment(body: PaymentCreate, payments: PaymentService = Depends(get_payment_service)):
    payment = await payments.create(body)
    return {"id": payment.id}


@router.get("/payments")
async def list_payments(
    paging: Paging = Depends(),
    q: Optional[str] = None,
    type: Optional[PaymentType] = None,
    direction: Optional[PaymentDirection] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    payments: PaymentService = Depends(get_payment_service),
):
    rows, total = await payments.list(paging.page, paging.limit, q, type, direction, is_active)
    return page_envelope([p.to_api() for p in rows], total, paging.page, paging.limit)


@router.get("/payments/{payment_id}")
async def get_payment(payment_id: str, payments: PaymentService = Depends(get_payment_service)):
    payment = await payments.get(payment_id)
    return payment.to_api()


@router.patch("/payments/{payment_id}")
async def patch_payment(
    payment_id: str,
    body: PaymentPatch,
    payments: PaymentService = Depends(get_payment_service),
):
    payment = await payments.patch(payment_id, body)
    return payment.to_api()


@router.delete("/payments/{payment_id}")
async def delete_payment(payment_id: str, payments: PaymentService = Depends(get_payment_service)):
    removed = await payments.delete(payment_id)
    return {"success": True, "deletedLogs": removed}


@router.post("/payments/{payment_id}/logs", status_code=201)
async def add_payment_log(
    payment_id: str,
    body: PaymentLogCreate,
    user: AuthUser = Depends(require_admin),
    payments: PaymentService = Depends(get_payment_service),
):
    log = await payments.add_log(payment_id, body, user)
    return {"id": log.id}


@router.get("/payments/{payment_id}/logs")
async def list_payment_logs(payment_id: str, payments: PaymentService = Depends(get_payment_service)):
    logs = await payments.list_logs(payment_id)
    total_received, total_sent = log_totals(logs)
    return {
        "items": [log.to_api() for log in logs],
        "totalReceived": total_received,
        "totalSent": total_sent,
    }


@router.patch("/payments/{payment_id}/logs/{log_id}")
async def patch_payment_log(
    payment_id: str,
    log_id: str,
    body: PaymentLogPatch,
    payments: PaymentService = Depends(get_payment_service),
):
    log = await payments.patch_log(payment_id, log_id, body)
    return log.to_api()


@router.delete("/payments/{payment_id}/logs/{log_id}")
async def delete_payment_log(
    payment_id: str,
    log_id: str,
    payments: PaymentService = Depends(get_payment_service),
):
    await payments.delete_log(payment_id, log_id)
    return {"success": True}
