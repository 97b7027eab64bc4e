from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserCandidate(BaseModel):
    """Create/update body.

    Missing fields decode to empty values so the store reports them as a
    validation failure; ``id`` and timestamps in the body are ignored.
    Wrong JSON types (e.g. ``"age": "22"``) are rejected outright and
    surface as a malformed request.
    """

    model_config = ConfigDict(extra="ignore", json_schema_extra={
        "example": {"name": "Eve", "email": "eve@x.com", "age": 22},
    })

    name: str = Field(default="", strict=True, description="Display name, must be non-empty")
    email: str = Field(default="", strict=True, description="Unique email address (case-sensitive)")
    age: int = Field(default=0, strict=True, description="Age in years, must be > 0")


class UserResponse(BaseModel):
    # Built straight from the store's frozen User records.
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime


class CountResponse(BaseModel):
    count: int


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    detail: str
    error: str


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
    users: int
    id_seed: int
    sample_users_loaded: bool
