from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def to_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def utc_iso(dt: datetime) -> str:
    """Naive UTC -> ``2026-01-01T08:30:00.000Z`` (the shape JS clients expect)."""
    return dt.replace(tzinfo=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DietLogCreate(BaseModel):
    user_id: str = Field(alias="userId", min_length=1)
    food_name: str = Field(alias="foodName", min_length=1)
    notes: Optional[str] = None
    logged_at: Optional[datetime] = Field(default=None, alias="loggedAt")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("logged_at", mode="before")
    def _falsy_means_now(cls, v: Any) -> Any:
        # "", 0, false and null all fall back to the insertion time.
        if not v:
            return None
        return v

    @field_validator("logged_at")
    def _naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else None


class DietLogUpdate(BaseModel):
    """Partial update.

    Only keys present in the request body are applied (``model_fields_set``).
    ``notes`` may be sent as ``""`` or ``null`` to clear it; ``foodName`` and
    ``loggedAt`` are NOT NULL columns and reject both.
    """

    food_name: Optional[str] = Field(default=None, alias="foodName", min_length=1)
    notes: Optional[str] = None
    logged_at: Optional[datetime] = Field(default=None, alias="loggedAt")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("food_name", "logged_at")
    def _not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("logged_at")
    def _naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(include=self.model_fields_set)


class DietLogRead(BaseModel):
    id: int
    user_id: str = Field(alias="userId")
    food_name: str = Field(alias="foodName")
    notes: Optional[str] = None
    logged_at: datetime = Field(alias="loggedAt")
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @field_serializer("logged_at", "created_at")
    def _serialize_ts(self, v: datetime) -> str:
        return utc_iso(to_naive_utc(v))


class DietLogResponse(BaseModel):
    success: bool = True
    data: DietLogRead


class DietLogListResponse(BaseModel):
    success: bool = True
    data: List[DietLogRead]


class DietLogDeleteResponse(BaseModel):
    success: bool = True
    message: str = "Diet log deleted"
    data: DietLogRead


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class StatusResponse(BaseModel):
    status: str = "OK"
    message: str
    timestamp: str


class TableCheckResponse(BaseModel):
    success: bool
    message: str
    table_exists: bool = Field(alias="tableExists")
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
