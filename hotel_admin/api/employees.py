from typing import Optional

from fastapi import APIRouter, Depends

from hotel_admin.api.deps import EmployeePaging, get_employee_service
from hotel_admin.core.security import get_current_user, require_admin
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.common import page_envelope
from hotel_admin.models.employee import Department, EmployeeCreate, EmployeePatch
from hotel_admin.services.employee_service import EmployeeService

router = APIRouter()


@router.post("/employees", status_code=201)
async def create_employee(
    body: EmployeeCreate,
    user: AuthUser = Depends(require_admin),
    employees: EmployeeService = Depends(get_employee_service),
):
    employee, credentials = await employees.create(body)
    result = {"id": employee.id, "employeeCode": employee.employee_code}
    if credentials:
        # Shown once; only the hash is stored
        result["managerCredentials"] = credentials.to_api()
    return result


@router.get("/employees")
async def list_employees(
    paging: EmployeePaging = Depends(),
    q: Optional[str] = None,
    department: Optional[Department] = None,
    user: AuthUser = Depends(get_current_user),
    employees: EmployeeService = Depends(get_employee_service),
):
    items, total = await employees.list(paging.page, paging.limit, q, department)
    return page_envelope([e.to_api() for e in items], total, paging.page, paging.limit)


@router.get("/employees/{employee_id}")
async def get_employee(
    employee_id: str,
    user: AuthUser = Depends(get_current_user),
    employees: EmployeeService = Depends(get_employee_service),
):
    employee = await employees.get(employee_id)
    return employee.to_api()


@router.patch("/employees/{employee_id}")
async def patch_employee(
    employee_id: str,
    body: EmployeePatch,
    user: AuthUser = Depends(require_admin),
    employees: EmployeeService = Depends(get_employee_service),
):
    employee = await employees.patch(employee_id, body)
    return employee.to_api()


@router.post("/employees/{employee_id}/toggle-active")
async def toggle_employee(
    employee_id: str,
    user: AuthUser = Depends(require_admin),
    employees: EmployeeService = Depends(get_employee_service),
):
    employee = await employees.toggle_active(employee_id)
    return {"id": employee.id, "isActive": employee.is_active}
