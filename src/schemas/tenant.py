from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from src.core.keys import slugify

SubscriptionTierField = Literal["basic", "pro", "enterprise"]
TenantStatusField = Literal["active", "suspended", "cancelled"]


class TenantCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    subscription_tier: SubscriptionTierField = "basic"
    max_hubs: PositiveInt = 5
    max_cameras: PositiveInt = 50
    billing_email: str | None = Field(default=None, max_length=255)
    contact_phone: str | None = Field(default=None, max_length=50)
    address: dict[str, Any] | None = None
    settings: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def name_must_produce_slug(cls, value: str) -> str:
        if not slugify(value):
            raise ValueError("name must contain at least one letter or digit")
        return value.strip()


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    subscription_tier: str
    max_hubs: int
    max_cameras: int
    status: str
    billing_email: str | None = None
    contact_phone: str | None = None
    address: dict[str, Any] | None = None
    settings: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TenantCreatedResponse(BaseModel):
    tenant: TenantResponse
    api_key: str
    admin_user_token: str | None = None
    message: str = "Tenant created successfully. Save your API key securely!"


class TenantSnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    subscription_tier: str
    max_hubs: int
    max_cameras: int
    status: str


class TenantLimitsResponse(BaseModel):
    max_hubs: int
    max_cameras: int
    subscription_tier: str


class TenantUserSummary(BaseModel):
    id: int
    email: str
    role: str
    permissions: list[str]


class TenantInfoResponse(BaseModel):
    tenant: TenantSnapshotResponse
    limits: TenantLimitsResponse
    user: TenantUserSummary | None = None


class TenantUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    subscription_tier: SubscriptionTierField | None = None
    max_hubs: PositiveInt | None = None
    max_cameras: PositiveInt | None = None
    billing_email: str | None = Field(default=None, max_length=255)
    contact_phone: str | None = Field(default=None, max_length=50)
    address: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None


class TenantStatusUpdateRequest(BaseModel):
    status: TenantStatusField
