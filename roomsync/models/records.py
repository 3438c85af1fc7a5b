"""Document models for the users, tenants and rooms collections."""

from typing import Any, NewType
from pydantic import BaseModel, Field, field_validator
from bson import ObjectId

from roomsync.utils.helpers import coerce_object_id, room_number_text

# Each collection's primary key gets its own type so a tenant id can't be
# passed where a user id is expected without a type checker noticing.
UserId = NewType("UserId", ObjectId)
TenantId = NewType("TenantId", ObjectId)
RoomId = NewType("RoomId", ObjectId)


class UserRecord(BaseModel):
    """A login identity from the users collection."""
    id: UserId = Field(..., alias="_id")

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
        "extra": "ignore",
    }


class TenantRecord(BaseModel):
    """A tenant profile layered on top of a user."""
    id: TenantId = Field(..., alias="_id")
    user_id: UserId | None = Field(default=None, alias="userId")
    room_number: str | None = Field(default=None, alias="roomNumber")
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
        "extra": "ignore",
    }

    @field_validator("user_id", mode="before")
    @classmethod
    def _coerce_user_id(cls, value: Any) -> ObjectId | None:
        return coerce_object_id(value)

    @field_validator("room_number", mode="before")
    @classmethod
    def _room_number_as_text(cls, value: Any) -> Any:
        return room_number_text(value)

    @property
    def full_name(self) -> str:
        parts = (self.first_name, self.last_name)
        return " ".join(part for part in parts if part) or str(self.id)


class Occupancy(BaseModel):
    """Headcount tracking for a room."""
    current: int = 0
    max: int | None = None

    model_config = {"extra": "ignore"}

    @field_validator("current", mode="before")
    @classmethod
    def _missing_count_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class RoomRecord(BaseModel):
    """A physical room.

    ``current_tenant`` is kept exactly as stored: it may hold a user id, a
    tenant id written by the old assignment bug, or unparseable garbage.
    """
    id: RoomId = Field(..., alias="_id")
    room_number: str | None = Field(default=None, alias="roomNumber")
    current_tenant: Any = Field(default=None, alias="currentTenant")
    occupancy: Occupancy = Field(default_factory=Occupancy)

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
        "extra": "ignore",
    }

    @field_validator("occupancy", mode="before")
    @classmethod
    def _default_occupancy(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("room_number", mode="before")
    @classmethod
    def _room_number_as_text(cls, value: Any) -> Any:
        return room_number_text(value)

    @property
    def current_tenant_id(self) -> ObjectId | None:
        """The stored link as an ObjectId, or None if it isn't one."""
        return coerce_object_id(self.current_tenant)
