from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from hotel_admin.core.exceptions import ServicesUnavailableException, ValidationException
from hotel_admin.core.logger import logger
from hotel_admin.models.booking import Booking, BookingItem
from hotel_admin.models.catalog import Service
from hotel_admin.services.db_service import DocumentStore, Query


def ranges_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open intervals: touching endpoints do not overlap."""
    return a_start < b_end and b_start < a_end


def ensure_valid_range(start_at: datetime, end_at: datetime) -> None:
    if start_at >= end_at:
        raise ValidationException("Invalid date range")


def exclusive_service_ids(items: Iterable[BookingItem]) -> List[str]:
    """Ids of line items whose service may not be double booked, in first-seen order."""
    seen: List[str] = []
    for item in items:
        if not item.allow_overlap and item.service_id not in seen:
            seen.append(item.service_id)
    return seen


def conflicting_service_ids(
    bookings: Iterable[Booking],
    service_ids: Iterable[str],
    start_at: datetime,
    end_at: datetime,
) -> Set[str]:
    wanted = set(service_ids)
    conflicts: Set[str] = set()
    if not wanted:
        return conflicts
    for booking in bookings:
        if booking.is_cancelled or booking.deleted_at is not None:
            continue
        if not ranges_overlap(start_at, end_at, booking.start_at, booking.end_at):
            continue
        conflicts.update(item.service_id for item in booking.items if item.service_id in wanted)
    return conflicts


def split_services(
    services: Sequence[Service],
    bookings: Sequence[Booking],
    start_at: datetime,
    end_at: datetime,
) -> Tuple[List[Service], List[Service]]:
    """
    Returns (non_overlap_services, overlap_allowed_services).
    Exclusive services are only listed when no overlapping booking uses them;
    overlap-allowed services are always listed.
    """
    exclusive = [s.id for s in services if not s.allow_overlap]
    taken = conflicting_service_ids(bookings, exclusive, start_at, end_at)

    non_overlap, overlap_allowed = [], []
    for service in services:
        if service.allow_overlap:
            overlap_allowed.append(service)
        elif service.id not in taken:
            non_overlap.append(service)
    return non_overlap, overlap_allowed


class AvailabilityChecker:
    """
    Reads bookings that could clash with a time window.

    The check is read-then-decide and is not isolated from concurrent writes:
    two requests racing for the same exclusive service and window can both pass.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def overlapping_bookings(
        self,
        start_at: datetime,
        end_at: datetime,
        exclude_id: Optional[str] = None,
    ) -> List[Booking]:
        query = (
            Query()
            .lt("start_at", end_at)
            .gt("end_at", start_at)
            .neq("status", "cancelled")
            .is_null("deleted_at")
        )
        if exclude_id:
            query.neq("id", exclude_id)
        rows, _ = await self.store.find("bookings", query)
        return [Booking.model_validate(row) for row in rows]

    async def active_services(self, q: Optional[str] = None) -> List[Service]:
        query = Query().eq("is_active", True).is_null("deleted_at").search(["name"], q).order("name")
        rows, _ = await self.store.find("services", query)
        return [Service.model_validate(row) for row in rows]

    async def find_available(
        self,
        start_at: datetime,
        end_at: datetime,
        q: Optional[str] = None,
    ) -> Tuple[List[Service], List[Service]]:
        ensure_valid_range(start_at, end_at)
        services = await self.active_services(q)
        bookings = await self.overlapping_bookings(start_at, end_at)
        return split_services(services, bookings, start_at, end_at)

    async def ensure_available(
        self,
        service_ids: Sequence[str],
        start_at: datetime,
        end_at: datetime,
        exclude_id: Optional[str] = None,
    ) -> None:
        if not service_ids:
            return
        bookings = await self.overlapping_bookings(start_at, end_at, exclude_id=exclude_id)
        taken = conflicting_service_ids(bookings, service_ids, start_at, end_at)
        if taken:
            logger.warning(f"⛔ Services already booked between {start_at} and {end_at}: {sorted(taken)}")
            raise ServicesUnavailableException(sorted(taken))
