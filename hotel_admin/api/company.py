from fastapi import APIRouter, Depends

from hotel_admin.api.deps import get_company_service
from hotel_admin.core.security import get_current_user, require_admin
from hotel_admin.models.auth import AuthUser
from hotel_admin.models.company import CompanyProfileIn
from hotel_admin.services.company_service import CompanyService

router = APIRouter()


@router.get("/company")
async def get_company(
    user: AuthUser = Depends(get_current_user),
    company: CompanyService = Depends(get_company_service),
):
    profile = await company.get()
    return profile.to_api() if profile else {}


@router.put("/company")
async def save_company(
    body: CompanyProfileIn,
    user: AuthUser = Depends(require_admin),
    company: CompanyService = Depends(get_company_service),
):
    profile = await company.save(body)
    return profile.to_api()
