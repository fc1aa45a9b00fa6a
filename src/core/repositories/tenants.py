from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.errors import DuplicateNameError, InternalError, InvalidInputError, NotFoundError
from src.core.guards import TIER_HIERARCHY
from src.core.keys import generate_api_key, hash_secret, slugify
from src.core.timeutils import utcnow
from src.models.hub import Hub
from src.models.hub_license import HubLicense
from src.models.tenant import Tenant
from src.models.tenant_user import TenantUser

logger = logging.getLogger(__name__)

TENANT_STATUSES: Final[tuple[str, ...]] = ("active", "suspended", "cancelled")
MUTABLE_TENANT_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "subscription_tier",
        "max_hubs",
        "max_cameras",
        "billing_email",
        "contact_phone",
        "address",
        "settings",
    }
)


@dataclass(slots=True)
class TenantDraft:
    name: str
    subscription_tier: str = "basic"
    max_hubs: int = 5
    max_cameras: int = 50
    billing_email: str | None = None
    contact_phone: str | None = None
    address: dict[str, Any] | None = None
    settings: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class IssuedTenant:
    tenant: Tenant
    api_key: str


@dataclass(frozen=True, slots=True)
class DirectoryStats:
    total_customers: int
    active_customers: int
    new_customers_this_month: int
    total_hubs: int
    online_hubs: int
    total_users: int
    total_licenses: int


def validate_tier(tier: str) -> str:
    normalized = (tier or "").strip().lower()
    if normalized not in TIER_HIERARCHY:
        raise InvalidInputError(f"Unknown subscription tier: {tier!r}")
    return normalized


def validate_cap(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidInputError(f"{name} must be a positive integer")
    return value


def validate_status(status_value: str) -> str:
    if status_value not in TENANT_STATUSES:
        raise InvalidInputError(f"Unknown tenant status: {status_value!r}")
    return status_value


class TenantDirectory:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, draft: TenantDraft) -> IssuedTenant:
        name = (draft.name or "").strip()
        if not name:
            raise InvalidInputError("Tenant name is required")
        base_slug = slugify(name)
        if not base_slug:
            raise InvalidInputError("Tenant name must contain at least one letter or digit")
        tier = validate_tier(draft.subscription_tier)
        max_hubs = validate_cap("max_hubs", draft.max_hubs)
        max_cameras = validate_cap("max_cameras", draft.max_cameras)

        slug = await self._available_slug(base_slug)
        api_key = await self._unused_api_key()

        tenant = Tenant(
            name=name,
            slug=slug,
            api_key_hash=hash_secret(api_key),
            subscription_tier=tier,
            max_hubs=max_hubs,
            max_cameras=max_cameras,
            status="active",
            billing_email=draft.billing_email,
            contact_phone=draft.contact_phone,
            address=draft.address,
            settings=dict(draft.settings or {}),
        )
        self.session.add(tenant)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateNameError() from exc
        await self.session.refresh(tenant)
        logger.info("Created tenant id=%s slug=%s", tenant.id, tenant.slug)
        return IssuedTenant(tenant=tenant, api_key=api_key)

    async def _slug_taken(self, slug: str) -> bool:
        existing = await self.session.scalar(
            select(Tenant.id).where(func.lower(Tenant.slug) == slug.lower())
        )
        return existing is not None

    async def _available_slug(self, base_slug: str) -> str:
        for attempt in range(1, settings.slug_max_attempts + 1):
            candidate = base_slug if attempt == 1 else f"{base_slug}-{attempt}"
            if not await self._slug_taken(candidate):
                return candidate
        raise DuplicateNameError()

    async def _unused_api_key(self) -> str:
        for _ in range(settings.key_generation_attempts):
            api_key = generate_api_key()
            existing = await self.session.scalar(
                select(Tenant.id).where(Tenant.api_key_hash == hash_secret(api_key))
            )
            if existing is None:
                return api_key
        raise InternalError("Could not allocate a unique API key")

    async def find_active_by_api_key(self, api_key: str) -> Tenant | None:
        return await self.session.scalar(
            select(Tenant).where(
                Tenant.api_key_hash == hash_secret(api_key),
                Tenant.status == "active",
            )
        )

    async def get(self, tenant_id: int) -> Tenant | None:
        return await self.session.scalar(select(Tenant).where(Tenant.id == tenant_id))

    async def lock(self, tenant_id: int) -> Tenant | None:
        return await self.session.scalar(
            select(Tenant).where(Tenant.id == tenant_id).with_for_update()
        )

    async def list(self) -> list[Tenant]:
        result = await self.session.scalars(select(Tenant).order_by(Tenant.created_at, Tenant.id))
        return list(result.all())

    async def _count(self, column: Any, *criteria: Any) -> int:
        total = await self.session.scalar(select(func.count(column)).where(*criteria))
        return int(total or 0)

    async def stats(self, now: datetime | None = None) -> DirectoryStats:
        month_start = (now or utcnow()).replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        return DirectoryStats(
            total_customers=await self._count(Tenant.id),
            active_customers=await self._count(Tenant.id, Tenant.status == "active"),
            new_customers_this_month=await self._count(Tenant.id, Tenant.created_at >= month_start),
            total_hubs=await self._count(Hub.id),
            online_hubs=await self._count(Hub.id, Hub.status == "online"),
            total_users=await self._count(TenantUser.id),
            total_licenses=await self._count(HubLicense.id),
        )

    async def _require(self, tenant_id: int) -> Tenant:
        tenant = await self.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        return tenant

    async def update_fields(self, tenant_id: int, **values: Any) -> Tenant:
        unknown = set(values) - MUTABLE_TENANT_FIELDS
        if unknown:
            raise InvalidInputError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        if "subscription_tier" in values:
            values["subscription_tier"] = validate_tier(values["subscription_tier"])
        for cap in ("max_hubs", "max_cameras"):
            if cap in values:
                validate_cap(cap, values[cap])
        if "name" in values and not (values["name"] or "").strip():
            raise InvalidInputError("Tenant name is required")

        tenant = await self._require(tenant_id)
        for field_name, value in values.items():
            setattr(tenant, field_name, value)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def update_status(self, tenant_id: int, status_value: str) -> Tenant:
        validate_status(status_value)
        tenant = await self._require(tenant_id)
        if tenant.status != status_value:
            logger.info(
                "Tenant id=%s status %s -> %s", tenant.id, tenant.status, status_value
            )
        tenant.status = status_value
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant
