def service_payload(**overrides):
    payload = {
        "name": "Banquet Hall",
        "description": "Ground floor hall",
        "variants": [
            {
                "name": "Full day",
                "pricingElements": [{"type": "fixed", "price": 50000}, {"type": "custom"}],
            }
        ],
    }
    payload.update(overrides)
    return payload


def test_create_and_get_service(admin_client):
    response = admin_client.post("/api/services", json=service_payload())
    assert response.status_code == 201

    service = admin_client.get(f"/api/services/{response.json()['id']}").json()
    assert service["isActive"] is True
    assert service["allowOverlap"] is False
    assert service["variants"][0]["pricingElements"][1] == {"type": "custom", "price": None}


def test_priced_elements_require_price(admin_client):
    bad = service_payload(variants=[{"name": "Hourly", "pricingElements": [{"type": "per_hour"}]}])
    assert admin_client.post("/api/services", json=bad).status_code == 400
    assert admin_client.post("/api/services", json=service_payload(variants=[])).status_code == 400


def test_manager_cannot_create_service(manager_client):
    assert manager_client.post("/api/services", json=service_payload()).status_code == 403


def test_service_soft_delete_and_restore(admin_client, make_service):
    service_id = make_service("Lawn")
    make_service("Terrace")

    assert admin_client.delete(f"/api/services/{service_id}").status_code == 200
    live = admin_client.get("/api/services").json()
    assert [s["name"] for s in live["items"]] == ["Terrace"]
    deleted = admin_client.get("/api/services", params={"deleted": "true"}).json()
    assert [s["id"] for s in deleted["items"]] == [service_id]

    restored = admin_client.patch(f"/api/services/{service_id}", json={"deletedAt": None})
    assert restored.status_code == 200
    assert restored.json()["deletedAt"] is None
    assert admin_client.get("/api/services").json()["total"] == 2


def test_service_list_filters(admin_client, make_service):
    make_service("Lawn")
    inactive = make_service("Pool")
    admin_client.patch(f"/api/services/{inactive}", json={"isActive": False})

    assert admin_client.get("/api/services", params={"isActive": "true"}).json()["total"] == 1
    assert admin_client.get("/api/services", params={"q": "poo"}).json()["items"][0]["id"] == inactive


def test_provider_embeds_service(admin_client, make_service):
    service_id = make_service("Catering")
    response = admin_client.post(
        "/api/providers",
        json={"name": "Spice Route", "serviceId": service_id, "members": [{"name": "Ravi", "isHead": True}]},
    )
    assert response.status_code == 201
    provider_id = response.json()["id"]

    provider = admin_client.get(f"/api/providers/{provider_id}").json()
    assert provider["service"] == {"id": service_id, "name": "Catering"}

    listed = admin_client.get("/api/providers", params={"serviceId": service_id}).json()
    assert listed["items"][0]["service"]["name"] == "Catering"


def test_provider_requires_live_service(admin_client, make_service):
    service_id = make_service("Decor")
    admin_client.delete(f"/api/services/{service_id}")

    response = admin_client.post(
        "/api/providers", json={"name": "Bloom", "serviceId": service_id, "members": [{"name": "Anu"}]}
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Service not found"}


def test_provider_soft_delete(admin_client, make_service):
    service_id = make_service("Music")
    provider_id = admin_client.post(
        "/api/providers", json={"name": "Band", "serviceId": service_id, "members": [{"name": "Joe"}]}
    ).json()["id"]

    assert admin_client.delete(f"/api/providers/{provider_id}").status_code == 200
    assert admin_client.get("/api/providers").json()["total"] == 0
    assert admin_client.patch(f"/api/providers/{provider_id}", json={"deletedAt": None}).status_code == 200
    assert admin_client.get("/api/providers").json()["total"] == 1
