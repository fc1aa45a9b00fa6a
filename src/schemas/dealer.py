from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.licenses import HubLicenseResponse
from src.schemas.tenant import TenantCreateRequest, TenantResponse
from src.schemas.users import TenantUserResponse


class CustomerCreateRequest(TenantCreateRequest):
    billing_email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")


class CustomerCreatedResponse(BaseModel):
    customer: TenantResponse
    admin_user: TenantUserResponse
    api_key: str
    admin_user_token: str
    message: str = "Customer created successfully. Provide them with their API key for hub setup."


class CustomerDetailResponse(BaseModel):
    customer: TenantResponse
    users: list[TenantUserResponse]
    licenses: list[HubLicenseResponse]
    hub_count: int


class DealerStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_customers: int
    active_customers: int
    new_customers_this_month: int
    total_hubs: int
    online_hubs: int
    total_users: int
    total_licenses: int
