from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RoleField = Literal["viewer", "user", "operator", "manager", "admin"]


class TenantUserCreateRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: RoleField = "user"
    permissions: list[str] = Field(default_factory=list)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class TenantUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    email: str
    role: str
    permissions: list[str]
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool
    last_login: datetime | None = None


class TenantUserCreatedResponse(BaseModel):
    user: TenantUserResponse
    user_token: str
    message: str = "User created successfully. Save the user token securely!"
