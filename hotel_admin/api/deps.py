from fastapi import Depends, Query, Request

from hotel_admin.core.exceptions import ForbiddenException
from hotel_admin.models.auth import AuthUser
from hotel_admin.services.auth_service import AuthService
from hotel_admin.services.booking_service import BookingService
from hotel_admin.services.catalog_service import CatalogService
from hotel_admin.services.company_service import CompanyService
from hotel_admin.services.db_service import DocumentStore
from hotel_admin.services.employee_service import EmployeeService
from hotel_admin.services.payment_service import PaymentService
from hotel_admin.services.stock_service import StockService


def get_store(request: Request) -> DocumentStore:
    """The store built once in the application lifespan."""
    return request.app.state.store


def get_auth_service(store: DocumentStore = Depends(get_store)) -> AuthService:
    return AuthService(store)


def get_booking_service(store: DocumentStore = Depends(get_store)) -> BookingService:
    return BookingService(store)


def get_catalog_service(store: DocumentStore = Depends(get_store)) -> CatalogService:
    return CatalogService(store)


def get_payment_service(store: DocumentStore = Depends(get_store)) -> PaymentService:
    return PaymentService(store)


def get_stock_service(store: DocumentStore = Depends(get_store)) -> StockService:
    return StockService(store)


def get_employee_service(store: DocumentStore = Depends(get_store)) -> EmployeeService:
    return EmployeeService(store)


def get_company_service(store: DocumentStore = Depends(get_store)) -> CompanyService:
    return CompanyService(store)


class Paging:
    """Page and limit query parameters. Out-of-range values are clamped rather than rejected."""

    max_limit = 100

    def __init__(self, page: int = Query(1), limit: int = Query(10)):
        self.page = max(1, page)
        self.limit = min(max(1, limit), self.max_limit)


class EmployeePaging(Paging):
    max_limit = 50


def ensure_admin_for_deleted(deleted: bool, user: AuthUser) -> None:
    """Only admins may list soft-deleted records."""
    if deleted and user.role != "admin":
        raise ForbiddenException()
