from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class HubLicenseCreateRequest(BaseModel):
    hub_name: str | None = Field(default=None, max_length=255)
    deployment_location: str | None = Field(default=None, max_length=255)
    max_cameras: PositiveInt | None = None
    features: dict[str, Any] | None = None
    expires_at: datetime | None = None


class HubLicenseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    sequence: int
    hub_serial: str
    hub_name: str | None = None
    deployment_location: str | None = None
    status: str
    max_cameras: int
    features: dict[str, Any] = Field(default_factory=dict)
    activated_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None


class HubLicenseIssuedResponse(BaseModel):
    license: HubLicenseResponse
    license_key: str
    message: str = "Hub license issued. The license key is shown only once."


class HubLicenseListResponse(BaseModel):
    licenses: list[HubLicenseResponse]


class HubLicenseStatusUpdateRequest(BaseModel):
    status: Literal["active", "suspended", "revoked"]
