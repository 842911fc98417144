from typing import Annotated, List, Literal, Optional

from pydantic import Field, StringConstraints

from hotel_admin.models.catalog import PriceType
from hotel_admin.models.common import ApiModel, PatchModel, UtcDatetime

BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]

IMAGE_DATA_URL = r"(?i)^data:image/(png|jpeg|jpg|webp);base64,"

ImageDataUrl = Annotated[str, StringConstraints(pattern=IMAGE_DATA_URL)]


class BookingItemInput(ApiModel):
    """A line item as submitted by the client, before pricing."""

    service_id: str = Field(min_length=1)
    variant_name: Optional[str] = None
    price_type: PriceType
    unit_price: Optional[float] = Field(default=None, ge=0)
    units: Optional[float] = Field(default=None, ge=0)
    custom_price: Optional[float] = Field(default=None, ge=0)
    discount_amount: Optional[float] = Field(default=None, ge=0)


class BookingItem(ApiModel):
    """Frozen line item: service name and overlap flag are copied at booking time."""

    service_id: str
    service_name: str
    allow_overlap: bool
    variant_name: Optional[str] = None
    price_type: PriceType
    unit_price: Optional[float] = None
    units: Optional[float] = None
    custom_price: Optional[float] = None
    discount_amount: float = 0
    total: float = Field(ge=0)


class BookingCreate(ApiModel):
    customer_name: str = Field(min_length=1)
    customer_phone: Optional[str] = None
    event_name: str = Field(min_length=1)
    start_at: UtcDatetime
    end_at: UtcDatetime
    items: List[BookingItemInput] = Field(min_length=1)
    discount_amount: float = Field(default=0, ge=0)
    notes: Optional[str] = None
    status: Optional[BookingStatus] = None


class BookingPatch(PatchModel):
    status: Optional[BookingStatus] = None
    event_name: Optional[str] = Field(default=None, min_length=1)
    customer_name: Optional[str] = Field(default=None, min_length=1)
    customer_phone: Optional[str] = None
    notes: Optional[str] = None
    start_at: Optional[UtcDatetime] = None
    end_at: Optional[UtcDatetime] = None
    items: Optional[List[BookingItemInput]] = Field(default=None, min_length=1)
    discount_amount: Optional[float] = Field(default=None, ge=0)
    deleted_at: None = None


class Booking(ApiModel):
    id: str
    customer_name: str
    customer_phone: Optional[str] = None
    event_name: str
    start_at: UtcDatetime
    end_at: UtcDatetime
    status: BookingStatus = "pending"
    items: List[BookingItem] = []
    subtotal: float = 0
    discount_amount: float = 0
    total: float = 0
    notes: Optional[str] = None
    deleted_at: Optional[UtcDatetime] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"


class BookingPaymentCreate(ApiModel):
    type: Literal["received", "refund"]
    amount: float = Field(gt=0)
    mode: Literal["cash", "online"]
    images: List[ImageDataUrl] = Field(min_length=1)
    notes: Optional[str] = None


class BookingPayment(ApiModel):
    id: str
    booking_id: str
    user_id: str
    type: Literal["received", "refund"]
    amount: float
    mode: Literal["cash", "online"]
    images: List[str]
    notes: Optional[str] = None
    created_at: UtcDatetime
