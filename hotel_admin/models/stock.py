from typing import Optional

from pydantic import Field

from hotel_admin.models.common import ApiModel, PatchModel, UtcDatetime


class StockCreate(ApiModel):
    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    unit: Optional[str] = None
    description: Optional[str] = None
    min_threshold: Optional[float] = Field(default=None, ge=0)


class StockPatch(PatchModel):
    name: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    description: Optional[str] = None
    min_threshold: Optional[float] = Field(default=None, ge=0)


class Stock(ApiModel):
    id: str
    name: str
    quantity: float = 0
    unit: str = "pieces"
    description: Optional[str] = None
    min_threshold: Optional[float] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None

    @property
    def is_low_stock(self) -> bool:
        if self.quantity <= 0:
            return True
        return bool(self.min_threshold) and self.quantity <= self.min_threshold
