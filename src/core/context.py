from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.models.hub_license import HubLicense
from src.models.tenant import Tenant
from src.models.tenant_user import TenantUser


@dataclass(frozen=True, slots=True)
class TenantSnapshot:
    id: int
    name: str
    slug: str
    subscription_tier: str
    max_hubs: int
    max_cameras: int
    status: str

    @classmethod
    def from_model(cls, tenant: Tenant) -> TenantSnapshot:
        return cls(
            id=tenant.id,
            name=tenant.name,
            slug=tenant.slug,
            subscription_tier=tenant.subscription_tier,
            max_hubs=tenant.max_hubs,
            max_cameras=tenant.max_cameras,
            status=tenant.status,
        )


@dataclass(frozen=True, slots=True)
class UserSnapshot:
    id: int
    email: str
    role: str
    permissions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_model(cls, user: TenantUser) -> UserSnapshot:
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            permissions=frozenset(user.permissions or ()),
        )


@dataclass(frozen=True, slots=True)
class HubIdentity:
    license_id: int
    hub_serial: str
    max_cameras: int
    features: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_model(cls, hub_license: HubLicense) -> HubIdentity:
        return cls(
            license_id=hub_license.id,
            hub_serial=hub_license.hub_serial,
            max_cameras=hub_license.max_cameras,
            features=dict(hub_license.features or {}),
        )


@dataclass(frozen=True, slots=True)
class TenantContext:
    tenant_id: int
    tenant: TenantSnapshot
    user: UserSnapshot | None = None
    hub: HubIdentity | None = None
