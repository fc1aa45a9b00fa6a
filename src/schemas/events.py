from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SeverityField = Literal["low", "medium", "high", "critical"]


class EventReport(BaseModel):
    type: str = Field(min_length=1, max_length=100)
    severity: SeverityField
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    camera_id: int | None = None
    timestamp: datetime | None = None
    metadata: dict[str, Any] | None = None
    license_plate: str | None = Field(default=None, max_length=20)


class EventBatchRequest(BaseModel):
    events: list[EventReport] = Field(min_length=1)


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    tenant_id: int
    hub_id: int
    camera_id: int | None = None
    type: str
    severity: str
    title: str
    description: str | None = None
    timestamp: datetime
    acknowledged: bool
    acknowledged_by: int | None = None
    acknowledged_at: datetime | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="event_metadata")
    license_plate: str | None = None


class EventListResponse(BaseModel):
    events: list[EventResponse]
