import secrets
import string
from typing import List, Optional, Tuple

from hotel_admin.core.exceptions import ConflictException, NotFoundException
from hotel_admin.core.logger import logger
from hotel_admin.models.common import new_id, utcnow
from hotel_admin.models.employee import Employee, EmployeeCreate, EmployeePatch, ManagerCredentials
from hotel_admin.services.auth_service import AuthService
from hotel_admin.services.db_service import DocumentStore, Query

EMPLOYEES = "employees"
CODE_PREFIX = "E"
MAX_CODE = 999

PASSWORD_ALPHABET = string.ascii_letters + string.digits + "@#$%"


def next_employee_code(existing: List[str]) -> str:
    """E001, E002, ... one past the highest existing code."""
    numbers = [int(code[1:]) for code in existing if code and code[1:].isdigit()]
    number = max(numbers, default=0) + 1
    if number > MAX_CODE:
        raise ConflictException("Employee code range exhausted")
    return f"{CODE_PREFIX}{number:03d}"


def generate_password(length: int = 12) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class EmployeeService:
    def __init__(self, store: DocumentStore):
        self.store = store
        self.auth = AuthService(store)

    async def get(self, employee_id: str) -> Employee:
        row = await self.store.get(EMPLOYEES, employee_id)
        if not row:
            raise NotFoundException()
        return Employee.model_validate(row)

    async def create(self, data: EmployeeCreate) -> Tuple[Employee, Optional[ManagerCredentials]]:
        if data.wants_manager_login and await self.auth.find_by_email(data.email):
            raise ConflictException("Email already in use")

        rows, _ = await self.store.find(EMPLOYEES, Query())
        code = next_employee_code([row.get("employee_code") for row in rows])

        now = utcnow()
        fields = data.model_dump(exclude={"email", "create_user"}, exclude_none=True)
        employee = Employee(id=new_id(), employee_code=code, created_at=now, updated_at=now, **fields)
        await self.store.insert(EMPLOYEES, employee.to_doc())
        logger.info(f"👷 Employee {employee.employee_code} created: {employee.name} ({employee.department})")

        credentials = None
        if data.wants_manager_login:
            password = generate_password()
            await self.auth.create_user(data.email, password, "manager")
            credentials = ManagerCredentials(email=data.email.strip().lower(), password=password)
        return employee, credentials

    async def list(
        self,
        page: int,
        limit: int,
        q: Optional[str] = None,
        department: Optional[str] = None,
    ) -> Tuple[List[Employee], int]:
        query = Query().search(["name", "employee_code", "phone_number"], q)
        if department:
            query.eq("department", department)
        rows, total = await self.store.find(EMPLOYEES, query.order("employee_code").page(page, limit))
        return [Employee.model_validate(row) for row in rows], total

    async def patch(self, employee_id: str, patch: EmployeePatch) -> Employee:
        current = await self.get(employee_id)
        updates = {name: getattr(patch, name) for name in patch.provided()}
        updated = current.model_copy(update={**updates, "updated_at": utcnow()})
        doc = updated.to_doc()
        await self.store.update(EMPLOYEES, current.id, {key: doc[key] for key in set(updates) | {"updated_at"}})
        logger.info(f"✏️ Employee {current.employee_code} updated: {sorted(updates)}")
        return updated

    async def toggle_active(self, employee_id: str) -> Employee:
        current = await self.get(employee_id)
        updated = current.model_copy(update={"is_active": not current.is_active, "updated_at": utcnow()})
        doc = updated.to_doc()
        await self.store.update(EMPLOYEES, current.id, {"is_active": doc["is_active"], "updated_at": doc["updated_at"]})
        logger.info(f"🔁 Employee {current.employee_code} active={updated.is_active}")
        return updated
