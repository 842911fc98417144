from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from hotel_admin.api.deps import Paging, ensure_admin_for_deleted, get_booking_service
from hotel_admin.core.security import get_current_user, require_admin
from hotel_admin.models.audit import BookingAudit
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.booking import BookingCreate, BookingPatch, BookingPaymentCreate, BookingStatus
from hotel_admin.models.common import ensure_utc, page_envelope
from hotel_admin.services.booking_service import BookingService

router = APIRouter()


@router.get("/bookings/availability")
async def availability(
    start_at: datetime = Query(alias="startAt"),
    end_at: datetime = Query(alias="endAt"),
    q: Optional[str] = None,
    user: AuthUser = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
):
    """Active services split into exclusive ones free in the window and overlap-allowed ones."""
    non_overlap, overlap_allowed = await bookings.availability.find_available(
        ensure_utc(start_at), ensure_utc(end_at), q
    )
    return {
        "nonOverlapServices": [s.to_api() for s in non_overlap],
        "overlapAllowedServices": [s.to_api() for s in overlap_allowed],
    }


@router.post("/bookings", status_code=201)
async def create_booking(
    body: BookingCreate,
    user: AuthUser = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
):
    booking = await bookings.create(body, user)
    return {"id": booking.id}


@router.get("/bookings")
async def list_bookings(
    paging: Paging = Depends(),
    q: Optional[str] = None,
    status: Optional[BookingStatus] = None,
    sort_by: str = Query("startAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    deleted: bool = False,
    user: AuthUser = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
):
    ensure_admin_for_deleted(deleted, user)
    items, total = await bookings.list(paging.page, paging.limit, q, status, sort_by, sort_order, deleted)
    return page_envelope(items, total, paging.page, paging.limit)


@router.get("/bookings/{booking_id}")
async def get_booking(
    booking_id: str,
    user: AuthUser = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
):
    booking = await bookings.get(booking_id)
    return booking.to_api()


@router.patch("/bookings/{booking_id}")
async def patch_booking(
    booking_id: str,
    body: BookingPatch,
    user: AuthUser = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
):
    booking = await bookings.patch(booking_id, body, user)
    return booking.to_api()


@router.delete("/bookings/{booking_id}")
async def delete_booking(
    booking_id: str,
    user: AuthUser = Depends(require_admin),
    bookings: BookingService = Depends(get_booking_service),
):
    await bookings.delete(booking_id, user)
    return {"success": True}


@router.get("/bookings/{booking_id}/audit")
async def booking_audit(
    booking_id: str,
    limit: Optional[int] = Query(None, ge=1, le=500),
    user: AuthUser = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
):
    await bookings.get(booking_id)
    rows = await bookings.audit_trail(booking_id, limit=limit)
    return {"items": [BookingAudit.model_validate(row).to_api() for row in rows]}


@router.get("/bookings/{booking_id}/payments")
async def booking_payments(
    booking_id: str,
    user: AuthUser = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
):
    payments = await bookings.list_payments(booking_id)
    return {"items": [p.to_api() for p in payments]}


@router.post("/bookings/{booking_id}/payments", status_code=201)
async def add_booking_payment(
    booking_id: str,
    body: BookingPaymentCreate,
    user: AuthUser = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service),
):
    payment = await bookings.add_payment(booking_id, body, user)
    return {"id": payment.id}
