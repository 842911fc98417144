import pytest
from fastapi.testclient import TestClient

from hotel_admin.core.security import hash_password
from hotel_admin.main import create_app
from hotel_admin.models.auth import User
from hotel_admin.models.common import new_id
from hotel_admin.services.memory_store import MemoryStore

ADMIN_PASSWORD = "admin-pass"
MANAGER_PASSWORD = "manager-pass"


def make_user(store: MemoryStore, email: str, role: str, password: str) -> User:
    user = User(id=new_id(), email=email, password_hash=hash_password(password), role=role)
    store.tables.setdefault("users", {})[user.id] = user.to_doc()
    return user


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def admin(store):
    return make_user(store, "admin@sunrisehotel.com", "admin", ADMIN_PASSWORD)


@pytest.fixture
def manager(store):
    return make_user(store, "manager@sunrisehotel.com", "manager", MANAGER_PASSWORD)


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as test_client:
        yield test_client


PASSWORDS = {"admin": ADMIN_PASSWORD, "manager": MANAGER_PASSWORD}


def login_as(client: TestClient, user: User) -> TestClient:
    response = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORDS[user.role]})
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(client, admin):
    return login_as(client, admin)


@pytest.fixture
def manager_client(client, manager):
    return login_as(client, manager)


@pytest.fixture
def make_service(admin_client):
    def _make(name="Banquet Hall", allow_overlap=False, price=1000):
        payload = {
            "name": name,
            "allowOverlap": allow_overlap,
            "variants": [{"name": "Standard", "pricingElements": [{"type": "fixed", "price": price}]}],
        }
        response = admin_client.post("/api/services", json=payload)
        assert response.status_code == 201
        return response.json()["id"]

    return _make


@pytest.fixture
def login(client):
    """Switch the shared client's session to another user."""
    return lambda user: login_as(client, user)
