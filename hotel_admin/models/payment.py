from typing import Literal, Optional

from pydantic import Field, model_validator

from hotel_admin.models.common import ApiModel, PatchModel, UserSnapshot, UtcDatetime

PaymentType = Literal["one_time", "recurring"]
PaymentFrequency = Literal["monthly", "quarterly", "half_yearly", "yearly"]
PaymentDirection = Literal["received", "sent"]


class PaymentCreate(ApiModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    amount: float = Field(ge=0)
    type: PaymentType
    frequency: Optional[PaymentFrequency] = None
    direction: PaymentDirection
    start_date: UtcDatetime
    end_date: Optional[UtcDatetime] = None
    is_active: bool = True

    @model_validator(mode="after")
    def _end_not_before_start(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not precede startDate")
        return self


class PaymentPatch(PatchModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    type: Optional[PaymentType] = None
    frequency: Optional[PaymentFrequency] = None
    direction: Optional[PaymentDirection] = None
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None
    is_active: Optional[bool] = None


class Payment(ApiModel):
    """Definition of an expected cash flow, one-time or recurring."""

    id: str
    name: str
    description: Optional[str] = None
    amount: float
    type: PaymentType
    frequency: Optional[PaymentFrequency] = None
    direction: PaymentDirection
    start_date: UtcDatetime
    end_date: Optional[UtcDatetime] = None
    is_active: bool = True
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class PaymentLogCreate(ApiModel):
    amount: float = Field(ge=0)
    date: UtcDatetime
    type: PaymentDirection
    notes: Optional[str] = None


class PaymentLogPatch(PatchModel):
    amount: Optional[float] = Field(default=None, ge=0)
    date: Optional[UtcDatetime] = None
    type: Optional[PaymentDirection] = None
    notes: Optional[str] = None


class PaymentLog(ApiModel):
    """One actual transaction recorded against a payment definition."""

    id: str
    payment_id: str
    amount: float
    date: UtcDatetime
    type: PaymentDirection
    notes: Optional[str] = None
    user: Optional[UserSnapshot] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
