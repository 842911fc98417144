import uuid
from datetime import datetime, timezone
from math import ceil
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, List

from pydantic import AfterValidator, BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are read as UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class ApiModel(BaseModel):
    """
    Base for every schema in the project.
    Attributes and stored columns are snake_case, the JSON API is camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_doc(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class PatchModel(ApiModel):
    """
    Partial update payload: only keys present in the request body are applied.
    An explicit null is only accepted for the fields listed in `nullable_fields`.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"deleted_at"})

    @model_validator(mode="after")
    def _reject_explicit_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{name} may not be null")
        return self

    def provided(self) -> FrozenSet[str]:
        return frozenset(self.model_fields_set)

    def updates(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class UserSnapshot(ApiModel):
    """Copy of the acting user at the time of a write, never a live reference."""

    id: str
    email: str
    role: str


def page_envelope(items: List[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "pages": ceil(total / limit) if limit else 0,
    }
