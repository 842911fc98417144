import pytest

PNG = "data:image/png;base64,iVBORw0KGgo="


def booking_payload(service_id, start="2024-01-01T10:00:00Z", end="2024-01-01T12:00:00Z", **overrides):
    payload = {
        "customerName": "Asha Rao",
        "customerPhone": "9876543210",
        "eventName": "Wedding",
        "startAt": start,
        "endAt": end,
        "items": [{"serviceId": service_id, "priceType": "fixed", "unitPrice": 1000, "discountAmount": 100}],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def hall(make_service):
    return make_service("Banquet Hall", allow_overlap=False)


@pytest.fixture
def booking_id(admin_client, hall):
    response = admin_client.post("/api/bookings", json=booking_payload(hall))
    assert response.status_code == 201
    return response.json()["id"]


def audit_of(client, booking_id):
    return client.get(f"/api/bookings/{booking_id}/audit").json()["items"]


def test_create_booking_computes_total_and_audits(admin_client, booking_id, store):
    booking = admin_client.get(f"/api/bookings/{booking_id}").json()
    assert booking["subtotal"] == 900
    assert booking["total"] == 900
    assert booking["items"][0]["serviceName"] == "Banquet Hall"
    assert booking["status"] == "pending"

    audits = audit_of(admin_client, booking_id)
    assert len(audits) == 1
    assert audits[0]["action"] == "created"
    assert audits[0]["user"]["email"] == "admin@sunrisehotel.com"
    assert all(change["oldValue"] is None for change in audits[0]["changes"])
    for change in audits[0]["changes"]:
        assert change["key"] in audits[0]["note"]


def test_overlapping_booking_conflicts(admin_client, hall, booking_id, store):
    payload = booking_payload(hall, start="2024-01-01T10:30:00Z", end="2024-01-01T11:30:00Z")
    response = admin_client.post("/api/bookings", json=payload)

    assert response.status_code == 409
    assert response.json() == {"error": "Selected services are not available in this time range"}
    assert len(store.tables["bookings"]) == 1


def test_touching_booking_is_allowed(admin_client, hall, booking_id):
    payload = booking_payload(hall, start="2024-01-01T12:00:00Z", end="2024-01-01T14:00:00Z")
    assert admin_client.post("/api/bookings", json=payload).status_code == 201


def test_overlap_allowed_service_never_conflicts(admin_client, make_service):
    dj = make_service("DJ", allow_overlap=True)
    assert admin_client.post("/api/bookings", json=booking_payload(dj)).status_code == 201
    assert admin_client.post("/api/bookings", json=booking_payload(dj)).status_code == 201


def test_cancelled_booking_frees_the_slot(admin_client, hall, booking_id):
    admin_client.patch(f"/api/bookings/{booking_id}", json={"status": "cancelled"})
    response = admin_client.post("/api/bookings", json=booking_payload(hall))
    assert response.status_code == 201

    # The cancelled one cannot come back while the slot is taken
    reactivate = admin_client.patch(f"/api/bookings/{booking_id}", json={"status": "confirmed"})
    assert reactivate.status_code == 409


def test_invalid_range_and_payload(admin_client, hall):
    bad_range = booking_payload(hall, start="2024-01-01T12:00:00Z", end="2024-01-01T10:00:00Z")
    response = admin_client.post("/api/bookings", json=bad_range)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid date range"}

    response = admin_client.post("/api/bookings", json=booking_payload(hall, items=[]))
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid payload"}


def test_unknown_service_rejected(admin_client):
    response = admin_client.post("/api/bookings", json=booking_payload("missing-service"))
    assert response.status_code == 400


def test_deleted_service_rejected(admin_client, hall):
    admin_client.delete(f"/api/services/{hall}")
    assert admin_client.post("/api/bookings", json=booking_payload(hall)).status_code == 400


def test_discount_only_patch(admin_client, booking_id):
    response = admin_client.patch(f"/api/bookings/{booking_id}", json={"discountAmount": 200})
    assert response.status_code == 200
    body = response.json()
    assert body["subtotal"] == 900
    assert body["total"] == 700

    latest = audit_of(admin_client, booking_id)[0]
    assert latest["action"] == "updated"
    assert sorted(c["key"] for c in latest["changes"]) == ["discountAmount", "total"]
    assert "discountAmount: 0.0 -> 200.0" in latest["note"] or "discountAmount: 0 -> 200" in latest["note"]


def test_items_patch_recomputes_totals(admin_client, hall, booking_id):
    items = [{"serviceId": hall, "priceType": "per_hour", "unitPrice": 500, "units": 3}]
    body = admin_client.patch(f"/api/bookings/{booking_id}", json={"items": items}).json()
    assert body["subtotal"] == 1500
    assert body["total"] == 1500
    assert body["items"][0]["total"] == 1500


def test_date_patch_rechecks_overlap(admin_client, hall, booking_id):
    other = booking_payload(hall, start="2024-01-01T14:00:00Z", end="2024-01-01T16:00:00Z")
    admin_client.post("/api/bookings", json=other)

    response = admin_client.patch(f"/api/bookings/{booking_id}", json={"endAt": "2024-01-01T15:00:00Z"})
    assert response.status_code == 409

    # Moving within its own window does not conflict with itself
    response = admin_client.patch(f"/api/bookings/{booking_id}", json={"startAt": "2024-01-01T09:00:00Z"})
    assert response.status_code == 200


def test_noop_patch_writes_no_audit(admin_client, booking_id):
    admin_client.patch(f"/api/bookings/{booking_id}", json={"eventName": "Wedding"})
    assert len(audit_of(admin_client, booking_id)) == 1


def test_explicit_null_rejected(admin_client, booking_id):
    response = admin_client.patch(f"/api/bookings/{booking_id}", json={"customerName": None})
    assert response.status_code == 400


def test_delete_requires_admin(client, login, manager, admin, booking_id):
    login(manager)
    assert client.delete(f"/api/bookings/{booking_id}").status_code == 403
    login(admin)
    assert client.delete(f"/api/bookings/{booking_id}").status_code == 200


def test_soft_delete_and_restore(admin_client, booking_id, store):
    assert admin_client.delete(f"/api/bookings/{booking_id}").status_code == 200
    assert store.tables["bookings"][booking_id]["deleted_at"] is not None

    listed = admin_client.get("/api/bookings").json()
    assert listed["total"] == 0
    deleted = admin_client.get("/api/bookings", params={"deleted": "true"}).json()
    assert [b["id"] for b in deleted["items"]] == [booking_id]

    restored = admin_client.patch(f"/api/bookings/{booking_id}", json={"deletedAt": None})
    assert restored.status_code == 200
    assert restored.json()["deletedAt"] is None
    assert store.tables["bookings"][booking_id]["deleted_at"] is None

    actions = [a["action"] for a in audit_of(admin_client, booking_id)]
    assert actions == ["updated", "deleted", "created"]


def test_restore_into_taken_slot_conflicts(admin_client, hall, booking_id, store):
    admin_client.delete(f"/api/bookings/{booking_id}")
    assert admin_client.post("/api/bookings", json=booking_payload(hall)).status_code == 201

    response = admin_client.patch(f"/api/bookings/{booking_id}", json={"deletedAt": None})
    assert response.status_code == 409
    assert store.tables["bookings"][booking_id]["deleted_at"] is not None


def test_deleted_booking_holds_no_slot(admin_client, hall, booking_id, store):
    admin_client.delete(f"/api/bookings/{booking_id}")
    other = booking_payload(hall, start="2024-01-01T14:00:00Z", end="2024-01-01T16:00:00Z")
    assert admin_client.post("/api/bookings", json=other).status_code == 201

    response = admin_client.patch(f"/api/bookings/{booking_id}", json={"endAt": "2024-01-01T15:00:00Z"})
    assert response.status_code == 200
    assert response.json()["endAt"].startswith("2024-01-01T15:00:00")
    assert store.tables["bookings"][booking_id]["deleted_at"] is not None

    # Bringing it back into the occupied window is still refused
    assert admin_client.patch(f"/api/bookings/{booking_id}", json={"deletedAt": None}).status_code == 409


def test_items_patch_to_deleted_service_rejected(admin_client, hall, booking_id, make_service, store):
    lawn = make_service("Lawn")
    admin_client.delete(f"/api/services/{lawn}")

    items = [{"serviceId": lawn, "priceType": "fixed", "unitPrice": 800}]
    response = admin_client.patch(f"/api/bookings/{booking_id}", json={"items": items})
    assert response.status_code == 400
    assert store.tables["bookings"][booking_id]["items"][0]["service_id"] == hall


def test_manager_cannot_list_deleted(manager_client):
    assert manager_client.get("/api/bookings", params={"deleted": "true"}).status_code == 403


def test_unauthenticated(client):
    response = client.get("/api/bookings")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_missing_booking(admin_client):
    assert admin_client.get("/api/bookings/nope").status_code == 404


def test_list_filters_sorting_and_balance(admin_client, make_service):
    dj = make_service("DJ", allow_overlap=True)
    first = admin_client.post("/api/bookings", json=booking_payload(dj, customerName="Zoya")).json()["id"]
    admin_client.post(
        "/api/bookings",
        json=booking_payload(dj, start="2024-02-01T10:00:00Z", end="2024-02-01T12:00:00Z", customerName="Arun"),
    )
    admin_client.post(
        f"/api/bookings/{first}/payments",
        json={"type": "received", "amount": 400, "mode": "cash", "images": [PNG]},
    )

    page = admin_client.get("/api/bookings", params={"sortBy": "customerName", "sortOrder": "asc"}).json()
    assert [b["customerName"] for b in page["items"]] == ["Arun", "Zoya"]
    assert page["pages"] == 1

    zoya = admin_client.get("/api/bookings", params={"q": "zoy"}).json()["items"][0]
    assert zoya["amountPaid"] == 400
    assert zoya["balanceDue"] == 500

    assert admin_client.get("/api/bookings", params={"sortBy": "secret"}).status_code == 400


def test_availability_endpoint(admin_client, hall, booking_id, make_service):
    lawn = make_service("Lawn")
    dj = make_service("DJ", allow_overlap=True)

    response = admin_client.get(
        "/api/bookings/availability",
        params={"startAt": "2024-01-01T11:00:00Z", "endAt": "2024-01-01T13:00:00Z"},
    )
    assert response.status_code == 200
    body = response.json()
    assert [s["id"] for s in body["nonOverlapServices"]] == [lawn]
    assert [s["id"] for s in body["overlapAllowedServices"]] == [dj]
    assert hall not in [s["id"] for s in body["nonOverlapServices"]]


def test_booking_payments(admin_client, booking_id):
    response = admin_client.post(
        f"/api/bookings/{booking_id}/payments",
        json={"type": "received", "amount": 500, "mode": "online", "images": [PNG], "notes": "advance"},
    )
    assert response.status_code == 201

    payments = admin_client.get(f"/api/bookings/{booking_id}/payments").json()["items"]
    assert len(payments) == 1
    assert payments[0]["amount"] == 500

    latest = audit_of(admin_client, booking_id)[0]
    assert latest["action"] == "payment_received"
    assert latest["changes"] == []
    assert latest["note"] == "Payment received: ₹500 via online - advance"


def test_booking_payment_requires_image(admin_client, booking_id):
    no_images = {"type": "refund", "amount": 100, "mode": "cash", "images": []}
    assert admin_client.post(f"/api/bookings/{booking_id}/payments", json=no_images).status_code == 400

    not_image = {"type": "refund", "amount": 100, "mode": "cash", "images": ["data:text/plain;base64,aGk="]}
    assert admin_client.post(f"/api/bookings/{booking_id}/payments", json=not_image).status_code == 400
