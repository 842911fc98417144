from typing import Any, Dict, List, Optional, Tuple

from hotel_admin.core.exceptions import NotFoundException, ValidationException
from hotel_admin.core.logger import logger
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.common import UserSnapshot, new_id, utcnow
from hotel_admin.models.payment import (
    Payment,
    PaymentCreate,
    PaymentLog,
    PaymentLogCreate,
    PaymentLogPatch,
    PaymentPatch,
)
from hotel_admin.services.db_service import DocumentStore, Query

PAYMENTS = "payments"
PAYMENT_LOGS = "payment_logs"


def check_frequency(payment_type: str, frequency: Optional[str]) -> None:
    """A recurring payment must carry a frequency; a one-time payment must not."""
    if payment_type == "recurring" and not frequency:
        raise ValidationException("Frequency is required for recurring payments")
    if payment_type == "one_time" and frequency:
        raise ValidationException("Frequency is only allowed for recurring payments")


def log_totals(logs: List[PaymentLog]) -> Tuple[float, float]:
    """Returns (total_received, total_sent)."""
    received = sum(log.amount for log in logs if log.type == "received")
    sent = sum(log.amount for log in logs if log.type == "sent")
    return float(received), float(sent)


class PaymentService:
    def __init__(self, store: DocumentStore):
        self.store = store

    # --- Definitions ---

    async def get(self, payment_id: str) -> Payment:
        row = await self.store.get(PAYMENTS, payment_id)
        if not row:
            raise NotFoundException()
        return Payment.model_validate(row)

    async def create(self, data: PaymentCreate) -> Payment:
        check_frequency(data.type, data.frequency)
        now = utcnow()
        payment = Payment(id=new_id(), created_at=now, updated_at=now, **data.model_dump())
        await self.store.insert(PAYMENTS, payment.to_doc())
        logger.info(f"💳 Payment {payment.name} created ({payment.type}, {payment.direction}, {payment.amount})")
        return payment

    async def list(
        self,
        page: int,
        limit: int,
        q: Optional[str] = None,
        payment_type: Optional[str] = None,
        direction: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[Payment], int]:
        query = Query().search(["name", "description"], q)
        if payment_type:
            query.eq("type", payment_type)
        if direction:
            query.eq("direction", direction)
        if is_active is not None:
            query.eq("is_active", is_active)
        rows, total = await self.store.find(PAYMENTS, query.order("start_date", desc=True).page(page, limit))
        return [Payment.model_validate(row) for row in rows], total

    async def patch(self, payment_id: str, patch: PaymentPatch) -> Payment:
        current = await self.get(payment_id)
        provided = patch.provided()
        updates: Dict[str, Any] = {name: getattr(patch, name) for name in provided}

        payment_type = updates.get("type", current.type)
        if payment_type == "one_time" and "frequency" not in provided:
            # Switching to one-time drops the stored frequency
            updates["frequency"] = None
        check_frequency(payment_type, updates.get("frequency", current.frequency))

        start_date = updates.get("start_date", current.start_date)
        end_date = updates.get("end_date", current.end_date)
        if end_date is not None and end_date < start_date:
            raise ValidationException("endDate must not precede startDate")

        updated = current.model_copy(update={**updates, "updated_at": utcnow()})
        doc = updated.to_doc()
        await self.store.update(PAYMENTS, current.id, {key: doc[key] for key in set(updates) | {"updated_at"}})
        logger.info(f"✏️ Payment {current.id} updated: {sorted(updates)}")
        return updated

    async def delete(self, payment_id: str) -> int:
        """Removes the definition and its logs, logs first so none are left orphaned."""
        payment = await self.get(payment_id)
        removed = await self.store.delete_where(PAYMENT_LOGS, "payment_id", payment.id)
        await self.store.delete(PAYMENTS, payment.id)
        logger.info(f"🗑️ Payment {payment.id} deleted with {removed} log(s)")
        return removed

    # --- Logs ---

    async def add_log(self, payment_id: str, data: PaymentLogCreate, user: AuthUser) -> PaymentLog:
        payment = await self.get(payment_id)
        now = utcnow()
        log = PaymentLog(
            id=new_id(),
            payment_id=payment.id,
            user=UserSnapshot(id=user.id, email=user.email, role=user.role),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        await self.store.insert(PAYMENT_LOGS, log.to_doc())
        logger.info(f"💰 Payment {payment.id}: {log.type} {log.amount} logged by {user.email}")
        return log

    async def list_logs(self, payment_id: str) -> List[PaymentLog]:
        await self.get(payment_id)
        rows, _ = await self.store.find(PAYMENT_LOGS, Query().eq("payment_id", payment_id).order("date", desc=True))
        return [PaymentLog.model_validate(row) for row in rows]

    async def get_log(self, payment_id: str, log_id: str) -> PaymentLog:
        row = await self.store.get(PAYMENT_LOGS, log_id)
        if not row or row.get("payment_id") != payment_id:
            raise NotFoundException()
        return PaymentLog.model_validate(row)

    async def patch_log(self, payment_id: str, log_id: str, patch: PaymentLogPatch) -> PaymentLog:
        current = await self.get_log(payment_id, log_id)
        updates = {name: getattr(patch, name) for name in patch.provided()}
        updated = current.model_copy(update={**updates, "updated_at": utcnow()})
        doc = updated.to_doc()
        await self.store.update(PAYMENT_LOGS, log_id, {key: doc[key] for key in set(updates) | {"updated_at"}})
        return updated

    async def delete_log(self, payment_id: str, log_id: str) -> None:
        await self.get_log(payment_id, log_id)
        await self.store.delete(PAYMENT_LOGS, log_id)
        logger.info(f"🗑️ Payment log {log_id} deleted from payment {payment_id}")
