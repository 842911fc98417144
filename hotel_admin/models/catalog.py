from typing import List, Literal, Optional

from pydantic import Field, model_validator

from hotel_admin.models.common import ApiModel, PatchModel, UtcDatetime

PriceType = Literal["per_unit", "fixed", "custom", "per_hour"]
PRICE_TYPES = ("per_unit", "fixed", "custom", "per_hour")


class PricingElement(ApiModel):
    type: PriceType
    price: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _price_required_unless_custom(self):
        if self.type != "custom" and self.price is None:
            raise ValueError(f"price is required for {self.type} pricing")
        return self


class ServiceVariant(ApiModel):
    name: str = Field(min_length=1)
    pricing_elements: List[PricingElement] = Field(min_length=1)


class ServiceCreate(ApiModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    variants: List[ServiceVariant] = Field(min_length=1)
    is_active: bool = True
    allow_overlap: bool = False


class ServicePatch(PatchModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    variants: Optional[List[ServiceVariant]] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
    allow_overlap: Optional[bool] = None
    deleted_at: None = None


class Service(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    variants: List[ServiceVariant] = []
    is_active: bool = True
    allow_overlap: bool = False
    deleted_at: Optional[UtcDatetime] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class ProviderMember(ApiModel):
    name: str = Field(min_length=1)
    phone_number: Optional[str] = None
    is_head: bool = False


class ProviderCreate(ApiModel):
    name: str = Field(min_length=1)
    service_id: str = Field(min_length=1)
    members: List[ProviderMember] = Field(min_length=1)
    is_active: bool = True


class ProviderPatch(PatchModel):
    name: Optional[str] = Field(default=None, min_length=1)
    service_id: Optional[str] = Field(default=None, min_length=1)
    members: Optional[List[ProviderMember]] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
    deleted_at: None = None


class Provider(ApiModel):
    id: str
    name: str
    service_id: str
    members: List[ProviderMember] = []
    is_active: bool = True
    deleted_at: Optional[UtcDatetime] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
