from typing import Any, Dict, List, Optional, Sequence, Tuple

from hotel_admin.core.config import settings
from hotel_admin.core.exceptions import NotFoundException, ValidationException
from hotel_admin.core.logger import logger
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.booking import (
    Booking,
    BookingCreate,
    BookingItem,
    BookingItemInput,
    BookingPatch,
    BookingPayment,
    BookingPaymentCreate,
)
from hotel_admin.models.catalog import Service
from hotel_admin.models.common import new_id, utcnow
from hotel_admin.services.audit_service import AuditLogger, build_note, creation_changes, diff_fields
from hotel_admin.services.availability import (
    AvailabilityChecker,
    ensure_valid_range,
    exclusive_service_ids,
)
from hotel_admin.services.db_service import DocumentStore, Query
from hotel_admin.services.pricing import apply_discount, booking_totals, calculate_item_total

BOOKINGS = "bookings"
BOOKING_AUDITS = "booking_audits"
BOOKING_PAYMENTS = "booking_payments"

# Keys of the camelCase snapshot compared after every patch
TRACKED_FIELDS = (
    "status",
    "eventName",
    "customerName",
    "customerPhone",
    "notes",
    "items",
    "startAt",
    "endAt",
    "discountAmount",
    "subtotal",
    "total",
    "deletedAt",
)

CREATED_FIELDS = (
    "customerName",
    "customerPhone",
    "eventName",
    "startAt",
    "endAt",
    "items",
    "subtotal",
    "discountAmount",
    "total",
    "status",
    "notes",
)

SIMPLE_FIELDS = ("status", "event_name", "customer_name", "customer_phone", "notes")

SORTABLE_FIELDS = {
    "startAt": "start_at",
    "endAt": "end_at",
    "createdAt": "created_at",
    "total": "total",
    "customerName": "customer_name",
}


def price_items(items: Sequence[BookingItemInput], services: Dict[str, Service]) -> List[BookingItem]:
    """Freeze client line items against the catalog and compute each line total."""
    priced = []
    for item in items:
        service = services[item.service_id]
        priced.append(
            BookingItem(
                service_id=service.id,
                service_name=service.name,
                allow_overlap=service.allow_overlap,
                variant_name=item.variant_name,
                price_type=item.price_type,
                unit_price=item.unit_price,
                units=item.units,
                custom_price=item.custom_price,
                discount_amount=item.discount_amount or 0,
                total=calculate_item_total(item),
            )
        )
    return priced


def summarize_payments(payments: Sequence[Dict[str, Any]]) -> Tuple[float, float]:
    """Returns (received, refunded) sums for a booking's payments."""
    received = sum(p.get("amount") or 0 for p in payments if p.get("type") == "received")
    refunded = sum(p.get("amount") or 0 for p in payments if p.get("type") == "refund")
    return float(received), float(refunded)


class BookingService:
    def __init__(self, store: DocumentStore):
        self.store = store
        self.availability = AvailabilityChecker(store)
        self.audit = AuditLogger(store, BOOKING_AUDITS, "booking_id")

    async def get(self, booking_id: str) -> Booking:
        row = await self.store.get(BOOKINGS, booking_id)
        if not row:
            raise NotFoundException()
        return Booking.model_validate(row)

    async def resolve_items(self, items: Sequence[BookingItemInput]) -> List[BookingItem]:
        """
        Re-read every referenced service from the catalog.
        Missing or soft-deleted services reject the whole item list.
        """
        service_ids = list(dict.fromkeys(item.service_id for item in items))
        rows, _ = await self.store.find("services", Query().in_("id", service_ids).is_null("deleted_at"))
        services = {row["id"]: Service.model_validate(row) for row in rows}

        missing = [sid for sid in service_ids if sid not in services]
        if missing:
            logger.warning(f"⚠️ Booking references unknown or deleted services: {missing}")
            raise ValidationException("Unknown or deleted service", {"serviceIds": missing})
        return price_items(items, services)

    async def _guard_overlap(self, booking: Booking, exclude_id: Optional[str] = None) -> None:
        # Cancelled or soft-deleted bookings hold no slot; a restore clears deleted_at first
        if booking.is_cancelled or booking.deleted_at is not None:
            return
        await self.availability.ensure_available(
            exclusive_service_ids(booking.items),
            booking.start_at,
            booking.end_at,
            exclude_id=exclude_id,
        )

    async def create(self, data: BookingCreate, user: AuthUser) -> Booking:
        ensure_valid_range(data.start_at, data.end_at)
        items = await self.resolve_items(data.items)
        subtotal, total = booking_totals((item.total for item in items), data.discount_amount)

        now = utcnow()
        booking = Booking(
            id=new_id(),
            customer_name=data.customer_name,
            customer_phone=data.customer_phone,
            event_name=data.event_name,
            start_at=data.start_at,
            end_at=data.end_at,
            status=data.status or "pending",
            items=items,
            subtotal=subtotal,
            discount_amount=data.discount_amount,
            total=total,
            notes=data.notes,
            created_at=now,
            updated_at=now,
        )
        await self._guard_overlap(booking)

        await self.store.insert(BOOKINGS, booking.to_doc())
        logger.info(f"✅ Booking {booking.id} created for {booking.customer_name} ({booking.total})")

        changes = creation_changes(booking.to_api(), CREATED_FIELDS)
        await self.audit.record(booking.id, "created", changes, user, note=f"Booking is created: {build_note(changes)}")
        return booking

    async def patch(self, booking_id: str, patch: BookingPatch, user: AuthUser) -> Booking:
        current = await self.get(booking_id)
        provided = patch.provided()
        updates: Dict[str, Any] = {}

        for name in SIMPLE_FIELDS:
            if name in provided:
                updates[name] = getattr(patch, name)

        dates_changed = "start_at" in provided or "end_at" in provided
        if dates_changed:
            start_at = patch.start_at if "start_at" in provided else current.start_at
            end_at = patch.end_at if "end_at" in provided else current.end_at
            ensure_valid_range(start_at, end_at)
            updates["start_at"] = start_at
            updates["end_at"] = end_at

        discount = patch.discount_amount if "discount_amount" in provided else current.discount_amount
        if "items" in provided:
            items = await self.resolve_items(patch.items)
            subtotal, total = booking_totals((item.total for item in items), discount)
            updates.update(items=items, subtotal=subtotal, total=total, discount_amount=discount)
        elif "discount_amount" in provided:
            updates.update(discount_amount=discount, total=apply_discount(current.subtotal, discount))

        restoring = "deleted_at" in provided and current.deleted_at is not None
        if "deleted_at" in provided:
            updates["deleted_at"] = None

        updated = current.model_copy(update=updates)

        reactivated = current.is_cancelled and not updated.is_cancelled
        if "items" in provided or dates_changed or reactivated or restoring:
            await self._guard_overlap(updated, exclude_id=current.id)

        changes = diff_fields(current.to_api(), updated.to_api(), TRACKED_FIELDS)
        if not changes:
            return current

        updated = updated.model_copy(update={"updated_at": utcnow()})
        doc = updated.to_doc()
        columns = set(updates) | {"updated_at"}
        await self.store.update(BOOKINGS, current.id, {key: doc[key] for key in columns})
        logger.info(f"✏️ Booking {current.id} updated: {[c.key for c in changes]}")

        await self.audit.record(current.id, "updated", changes, user, note=build_note(changes))
        return updated

    async def delete(self, booking_id: str, user: AuthUser) -> Booking:
        """Soft delete: only `deleted_at` is set, the rest of the record is kept."""
        current = await self.get(booking_id)
        if current.deleted_at is not None:
            return current

        now = utcnow()
        deleted = current.model_copy(update={"deleted_at": now, "updated_at": now})
        doc = deleted.to_doc()
        await self.store.update(BOOKINGS, current.id, {"deleted_at": doc["deleted_at"], "updated_at": doc["updated_at"]})
        logger.info(f"🗑️ Booking {current.id} soft deleted")

        changes = diff_fields(current.to_api(), deleted.to_api(), ("deletedAt",))
        await self.audit.record(current.id, "deleted", changes, user, note=f"Booking is deleted: {build_note(changes)}")
        return deleted

    async def list(
        self,
        page: int,
        limit: int,
        q: Optional[str] = None,
        status: Optional[str] = None,
        sort_by: str = "startAt",
        sort_order: str = "desc",
        deleted: bool = False,
    ) -> Tuple[List[Dict[str, Any]], int]:
        column = SORTABLE_FIELDS.get(sort_by)
        if column is None:
            raise ValidationException(f"Cannot sort by {sort_by}")

        query = Query().search(["customer_name", "customer_phone", "event_name"], q)
        if deleted:
            query.not_null("deleted_at")
        else:
            query.is_null("deleted_at")
        if status:
            query.eq("status", status)
        query.order(column, desc=sort_order != "asc").page(page, limit)

        rows, total = await self.store.find(BOOKINGS, query)
        bookings = [Booking.model_validate(row) for row in rows]

        payments: List[Dict[str, Any]] = []
        if bookings:
            payments, _ = await self.store.find(
                BOOKING_PAYMENTS, Query().in_("booking_id", [b.id for b in bookings])
            )

        items = []
        for booking in bookings:
            received, refunded = summarize_payments([p for p in payments if p["booking_id"] == booking.id])
            paid = received - refunded
            items.append({**booking.to_api(), "amountPaid": paid, "balanceDue": booking.total - paid})
        return items, total

    async def audit_trail(self, booking_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return await self.audit.list_for(booking_id, limit=limit)

    async def list_payments(self, booking_id: str) -> List[BookingPayment]:
        await self.get(booking_id)
        rows, _ = await self.store.find(
            BOOKING_PAYMENTS, Query().eq("booking_id", booking_id).order("created_at", desc=True)
        )
        return [BookingPayment.model_validate(row) for row in rows]

    async def add_payment(self, booking_id: str, data: BookingPaymentCreate, user: AuthUser) -> BookingPayment:
        """Record a receipt or refund directly against a booking, with image proof."""
        booking = await self.get(booking_id)

        payment = BookingPayment(
            id=new_id(),
            booking_id=booking.id,
            user_id=user.id,
            type=data.type,
            amount=data.amount,
            mode=data.mode,
            images=data.images,
            notes=data.notes,
            created_at=utcnow(),
        )
        await self.store.insert(BOOKING_PAYMENTS, payment.to_doc())
        logger.info(f"💰 Booking {booking.id}: {data.type} {data.amount} via {data.mode}")

        label = "Payment received" if data.type == "received" else "Payment refund"
        note = f"{label}: {settings.CURRENCY_SYMBOL}{data.amount:g} via {data.mode}"
        if data.notes:
            note += f" - {data.notes}"
        action = "payment_received" if data.type == "received" else "refunded"
        await self.audit.record(booking.id, action, [], user, note=note)
        return payment
