from typing import Any, List, Literal, Optional

from hotel_admin.models.common import ApiModel, UserSnapshot, UtcDatetime

BookingAuditAction = Literal["created", "updated", "deleted", "payment_received", "refunded"]
StockAuditAction = Literal["created", "updated", "deleted"]


class AuditChange(ApiModel):
    key: str
    old_value: Any = None
    new_value: Any = None


class AuditRecord(ApiModel):
    id: str
    action: str
    changes: List[AuditChange] = []
    user: Optional[UserSnapshot] = None
    note: Optional[str] = None
    created_at: UtcDatetime


class BookingAudit(AuditRecord):
    booking_id: str
    action: BookingAuditAction


class StockAudit(AuditRecord):
    stock_id: str
    action: StockAuditAction
