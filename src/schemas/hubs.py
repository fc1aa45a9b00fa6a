from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HeartbeatRequest(BaseModel):
    status: str | None = Field(default=None, max_length=50)
    ip_address: str | None = Field(default=None, max_length=45)
    version: str | None = Field(default=None, max_length=50)
    configuration: dict[str, Any] | None = None


class HubResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    license_id: int | None = None
    name: str
    location: str | None = None
    serial_number: str
    status: str
    system_armed: bool
    last_heartbeat: datetime | None = None
    ip_address: str | None = None
    version: str | None = None
    configuration: dict[str, Any] = Field(default_factory=dict)


class HeartbeatResponse(BaseModel):
    hub: HubResponse
    message: str


class HubListResponse(BaseModel):
    hubs: list[HubResponse]


class CameraReport(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    ip_address: str = Field(min_length=1, max_length=45)
    location: str | None = Field(default=None, max_length=255)
    status: str = Field(default="offline", max_length=50)
    protocol: str = Field(default="RTSP", max_length=20)
    port: int | None = Field(default=None, ge=1, le=65535)
    stream_url: str | None = Field(default=None, max_length=500)
    manufacturer: str | None = Field(default=None, max_length=100)
    model: str | None = Field(default=None, max_length=100)
    ptz_capable: bool = False
    is_recording: bool = False


class CameraBatchRequest(BaseModel):
    cameras: list[CameraReport] = Field(min_length=1)


class CameraResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    hub_id: int
    name: str
    location: str | None = None
    status: str
    ip_address: str
    protocol: str
    port: int | None = None
    stream_url: str | None = None
    manufacturer: str | None = None
    model: str | None = None
    ptz_capable: bool
    is_recording: bool


class CameraListResponse(BaseModel):
    cameras: list[CameraResponse]
