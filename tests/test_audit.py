from unittest.mock import AsyncMock, patch

import pytest

from hotel_admin.models.audit import AuditChange
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.booking import BookingCreate, BookingItemInput, BookingPatch
from hotel_admin.services.audit_service import AuditLogger, build_note, diff_fields
from hotel_admin.services.booking_service import BookingService
from hotel_admin.services.memory_store import MemoryStore

ADMIN = AuthUser(id="u1", email="admin@sunrisehotel.com", role="admin")


def test_diff_is_structural():
    old = {"items": [{"a": 1, "b": 2}], "notes": "x"}
    new = {"items": [{"b": 2, "a": 1}], "notes": "y"}
    changes = diff_fields(old, new, ["items", "notes"])
    assert [c.key for c in changes] == ["notes"]


def test_diff_reports_old_and_new_values():
    changes = diff_fields({"status": "pending"}, {"status": "confirmed"}, ["status"])
    assert changes == [AuditChange(key="status", old_value="pending", new_value="confirmed")]


def test_note_format():
    changes = [
        AuditChange(key="status", old_value="pending", new_value="confirmed"),
        AuditChange(key="notes", old_value=None, new_value="VIP"),
    ]
    assert build_note(changes) == "status: pending -> confirmed; notes: null -> VIP"


@pytest.mark.asyncio
async def test_record_and_list_newest_first():
    store = MemoryStore()
    audit = AuditLogger(store, "stock_audits", "stock_id")

    await audit.record("s1", "created", [AuditChange(key="name", new_value="Soap")], ADMIN)
    await audit.record("s1", "updated", [AuditChange(key="quantity", old_value=1, new_value=2)], ADMIN)
    await audit.record("other", "created", [], ADMIN)

    rows = await audit.list_for("s1")
    assert [r["action"] for r in rows] == ["updated", "created"]
    assert rows[0]["user"] == {"id": "u1", "email": "admin@sunrisehotel.com", "role": "admin"}
    assert len(await audit.list_for("s1", limit=1)) == 1


@pytest.mark.asyncio
async def test_record_failure_is_swallowed():
    store = MemoryStore()
    store.insert = AsyncMock(side_effect=RuntimeError("database down"))
    audit = AuditLogger(store, "booking_audits", "booking_id")

    assert await audit.record("b1", "created", [], ADMIN) is None


@pytest.mark.asyncio
async def test_audit_failure_never_blocks_booking_writes():
    store = MemoryStore()
    await store.insert(
        "services",
        {"id": "s1", "name": "Hall", "variants": [], "is_active": True, "allow_overlap": False, "deleted_at": None},
    )
    service = BookingService(store)

    with patch.object(AuditLogger, "record", new_callable=AsyncMock) as mock_record:
        booking = await service.create(
            BookingCreate(
                customer_name="Asha",
                event_name="Wedding",
                start_at="2024-01-01T10:00:00Z",
                end_at="2024-01-01T12:00:00Z",
                items=[BookingItemInput(service_id="s1", price_type="fixed", unit_price=1000, discount_amount=100)],
            ),
            ADMIN,
        )
        assert mock_record.await_args.args[1] == "created"

    original_insert = store.insert

    async def failing_audit_insert(table, doc):
        if table == "booking_audits":
            raise RuntimeError("audit table gone")
        return await original_insert(table, doc)

    store.insert = failing_audit_insert
    updated = await service.patch(booking.id, BookingPatch(status="confirmed"), ADMIN)

    assert updated.status == "confirmed"
    assert store.tables["bookings"][booking.id]["status"] == "confirmed"
    assert "booking_audits" not in store.tables
