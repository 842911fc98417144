from datetime import date
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from hotel_admin.models.common import ApiModel, PatchModel, UtcDatetime

DEPARTMENTS = ("Cleaning", "Management", "Electricity")
ID_PROOF_TYPES = ("Aadhar", "PAN", "Ration Card", "Voter Id")

Department = Literal["Cleaning", "Management", "Electricity"]
IdProofType = Literal["Aadhar", "PAN", "Ration Card", "Voter Id"]
Gender = Literal["Male", "Female", "Other"]

EMPLOYEE_CODE_PATTERN = r"^[A-Z][0-9]{3}$"


class BankDetail(ApiModel):
    name: Optional[str] = None
    ifsc_code: Optional[str] = None
    account_number: Optional[str] = None
    passbook_photo: Optional[str] = None


class EmployeeFields(ApiModel):
    age: Optional[int] = Field(default=None, ge=14, le=100)
    gender: Optional[Gender] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    id_proof_type: Optional[IdProofType] = None
    id_proof_number: Optional[str] = None
    id_proof_photos: Optional[List[str]] = Field(default=None, min_length=2)
    date_of_joining: Optional[date] = None
    bank_detail: Optional[BankDetail] = None
    photo: Optional[str] = None


class EmployeeCreate(EmployeeFields):
    name: str = Field(min_length=1)
    department: Department
    is_active: bool = True
    email: Optional[EmailStr] = None
    create_user: Optional[bool] = None

    @property
    def wants_manager_login(self) -> bool:
        return self.department == "Management" and bool(self.email) and self.create_user is not False


class EmployeePatch(EmployeeFields, PatchModel):
    name: Optional[str] = Field(default=None, min_length=1)
    department: Optional[Department] = None
    is_active: Optional[bool] = None


class Employee(EmployeeFields):
    id: str
    name: str
    employee_code: str = Field(pattern=EMPLOYEE_CODE_PATTERN)
    department: Department
    is_active: bool = True
    id_proof_photos: List[str] = []
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class ManagerCredentials(ApiModel):
    email: str
    password: str
