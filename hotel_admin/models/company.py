from typing import Optional

from pydantic import Field

from hotel_admin.models.common import ApiModel, UtcDatetime


class CompanyProfileIn(ApiModel):
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    contact_person_name: str = Field(min_length=1)
    contact_phone: str = Field(min_length=1)
    logo: Optional[str] = None
    gstin: Optional[str] = None


class CompanyProfile(CompanyProfileIn):
    id: str
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
