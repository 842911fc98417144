import pytest


def payment_payload(**overrides):
    payload = {
        "name": "Electricity bill",
        "amount": 4500,
        "type": "recurring",
        "frequency": "monthly",
        "direction": "sent",
        "startDate": "2024-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def payment_id(admin_client):
    response = admin_client.post("/api/payments", json=payment_payload())
    assert response.status_code == 201
    return response.json()["id"]


def add_log(client, payment_id, amount, log_type="sent", date="2024-01-05T00:00:00Z"):
    response = client.post(
        f"/api/payments/{payment_id}/logs", json={"amount": amount, "date": date, "type": log_type}
    )
    assert response.status_code == 201
    return response.json()["id"]


def test_payments_are_admin_only(manager_client):
    assert manager_client.get("/api/payments").status_code == 403
    assert manager_client.post("/api/payments", json=payment_payload()).status_code == 403


def test_frequency_rules(admin_client):
    response = admin_client.post("/api/payments", json=payment_payload(frequency=None))
    assert response.status_code == 400
    assert response.json() == {"error": "Frequency is required for recurring payments"}

    response = admin_client.post("/api/payments", json=payment_payload(type="one_time"))
    assert response.status_code == 400

    response = admin_client.post("/api/payments", json=payment_payload(type="one_time", frequency=None))
    assert response.status_code == 201


def test_end_date_not_before_start(admin_client):
    response = admin_client.post("/api/payments", json=payment_payload(endDate="2023-12-31T00:00:00Z"))
    assert response.status_code == 400


def test_switching_to_one_time_clears_frequency(admin_client, payment_id, store):
    response = admin_client.patch(f"/api/payments/{payment_id}", json={"type": "one_time"})
    assert response.status_code == 200
    assert response.json()["frequency"] is None
    assert store.tables["payments"][payment_id]["frequency"] is None

    response = admin_client.patch(f"/api/payments/{payment_id}", json={"frequency": "yearly"})
    assert response.status_code == 400


def test_list_filters(admin_client, payment_id):
    admin_client.post(
        "/api/payments",
        json=payment_payload(name="Hall rent", direction="received", startDate="2024-03-01T00:00:00Z"),
    )

    everything = admin_client.get("/api/payments").json()
    assert [p["name"] for p in everything["items"]] == ["Hall rent", "Electricity bill"]

    received = admin_client.get("/api/payments", params={"direction": "received"}).json()
    assert received["total"] == 1
    assert admin_client.get("/api/payments", params={"q": "electric"}).json()["total"] == 1


def test_logs_and_totals(admin_client, payment_id):
    add_log(admin_client, payment_id, 4500, date="2024-01-05T00:00:00Z")
    add_log(admin_client, payment_id, 300, log_type="received", date="2024-02-05T00:00:00Z")

    body = admin_client.get(f"/api/payments/{payment_id}/logs").json()
    assert [log["amount"] for log in body["items"]] == [300, 4500]
    assert body["totalSent"] == 4500
    assert body["totalReceived"] == 300
    assert body["items"][0]["user"]["email"] == "admin@sunrisehotel.com"


def test_log_must_belong_to_payment(admin_client, payment_id):
    other = admin_client.post("/api/payments", json=payment_payload(name="Water")).json()["id"]
    log_id = add_log(admin_client, other, 100)

    assert admin_client.patch(f"/api/payments/{payment_id}/logs/{log_id}", json={"amount": 1}).status_code == 404
    assert admin_client.delete(f"/api/payments/{payment_id}/logs/{log_id}").status_code == 404

    response = admin_client.patch(f"/api/payments/{other}/logs/{log_id}", json={"notes": "late fee"})
    assert response.status_code == 200
    assert response.json()["notes"] == "late fee"


def test_delete_cascades_to_logs(admin_client, payment_id, store):
    first = add_log(admin_client, payment_id, 100)
    second = add_log(admin_client, payment_id, 200)

    response = admin_client.delete(f"/api/payments/{payment_id}")
    assert response.status_code == 200
    assert response.json()["deletedLogs"] == 2

    assert first not in store.tables["payment_logs"]
    assert second not in store.tables["payment_logs"]
    assert admin_client.get(f"/api/payments/{payment_id}").status_code == 404
    assert admin_client.get(f"/api/payments/{payment_id}/logs").status_code == 404


def test_paging_defaults_and_clamps(admin_client, payment_id):
    body = admin_client.get("/api/payments").json()
    assert (body["page"], body["limit"]) == (1, 10)

    response = admin_client.get("/api/payments", params={"limit": 200, "page": 0})
    assert response.status_code == 200
    assert (response.json()["page"], response.json()["limit"]) == (1, 100)
    assert response.json()["total"] == 1

    assert admin_client.get("/api/payments", params={"limit": 0}).json()["limit"] == 1
