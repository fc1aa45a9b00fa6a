from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.errors import (
    DuplicateNameError,
    InternalError,
    InvalidInputError,
    InvalidStatusTransitionError,
    LimitExceededError,
    NotFoundError,
)
from src.core.keys import generate_hub_serial, generate_license_key, hash_secret
from src.core.repositories.tenants import TenantDirectory
from src.core.timeutils import ensure_utc, utcnow
from src.models.hub_license import HubLicense
from src.models.tenant import Tenant

logger = logging.getLogger(__name__)

LICENSE_STATUSES: Final[tuple[str, ...]] = ("active", "suspended", "revoked")
TERMINAL_LICENSE_STATUSES: Final[frozenset[str]] = frozenset({"revoked"})
DEFAULT_LICENSE_FEATURES: Final[dict[str, bool]] = {
    "ai_analytics": True,
    "license_recognition": True,
    "behavior_analysis": True,
    "multi_camera": True,
}


@dataclass(slots=True)
class HubLicenseDraft:
    hub_name: str | None = None
    deployment_location: str | None = None
    max_cameras: int | None = None
    features: dict[str, Any] | None = None
    expires_at: datetime | None = None


@dataclass(slots=True)
class IssuedLicense:
    license: HubLicense
    license_key: str


@dataclass(slots=True)
class ActiveLicense:
    license: HubLicense
    tenant: Tenant
    expired: bool = field(default=False)


def is_expired(hub_license: HubLicense, now: datetime | None = None) -> bool:
    if hub_license.expires_at is None:
        return False
    return ensure_utc(hub_license.expires_at) <= (now or utcnow())


class HubLicenseDirectory:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def count_for_tenant(self, tenant_id: int) -> int:
        total = await self.session.scalar(
            select(func.count(HubLicense.id)).where(HubLicense.tenant_id == tenant_id)
        )
        return int(total or 0)

    async def issue(self, tenant_id: int, draft: HubLicenseDraft) -> IssuedLicense:
        tenant = await TenantDirectory(self.session).lock(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")

        # The tenant row lock serialises concurrent issuance for one tenant;
        # uq_hub_licenses_tenant_sequence rejects anything that slips past it.
        current = await self.count_for_tenant(tenant_id)
        if current >= tenant.max_hubs:
            raise LimitExceededError("hubs", limit=tenant.max_hubs, current=current)

        max_cameras = (
            draft.max_cameras if draft.max_cameras is not None else settings.default_license_max_cameras
        )
        if max_cameras < 1:
            raise InvalidInputError("max_cameras must be a positive integer")

        sequence = current + 1
        hub_serial = generate_hub_serial(tenant.slug, sequence)
        license_key = await self._unused_license_key()
        now = utcnow()
        hub_license = HubLicense(
            tenant_id=tenant_id,
            sequence=sequence,
            hub_serial=hub_serial,
            license_key_hash=hash_secret(license_key),
            hub_name=draft.hub_name,
            deployment_location=draft.deployment_location,
            status="active",
            max_cameras=max_cameras,
            features=dict(draft.features if draft.features is not None else DEFAULT_LICENSE_FEATURES),
            activated_at=now,
            expires_at=draft.expires_at,
        )
        self.session.add(hub_license)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateNameError("A concurrent request issued this hub license, please retry") from exc
        await self.session.refresh(hub_license)
        logger.info(
            "Issued hub license id=%s for tenant=%s (%s/%s)",
            hub_license.id,
            tenant_id,
            sequence,
            tenant.max_hubs,
        )
        return IssuedLicense(license=hub_license, license_key=license_key)

    async def _unused_license_key(self) -> str:
        for _ in range(settings.key_generation_attempts):
            license_key = generate_license_key()
            existing = await self.session.scalar(
                select(HubLicense.id).where(HubLicense.license_key_hash == hash_secret(license_key))
            )
            if existing is None:
                return license_key
        raise InternalError("Could not allocate a unique license key")

    async def find_active_by_key_and_serial(
        self,
        license_key: str,
        hub_serial: str,
        now: datetime | None = None,
    ) -> ActiveLicense | None:
        result = await self.session.execute(
            select(HubLicense, Tenant)
            .join(Tenant, HubLicense.tenant_id == Tenant.id)
            .where(
                HubLicense.license_key_hash == hash_secret(license_key),
                HubLicense.hub_serial == hub_serial,
                HubLicense.status == "active",
                Tenant.status == "active",
            )
        )
        row = result.first()
        if row is None:
            return None
        hub_license, tenant = row
        return ActiveLicense(license=hub_license, tenant=tenant, expired=is_expired(hub_license, now))

    async def list(self, tenant_id: int) -> list[HubLicense]:
        result = await self.session.scalars(
            select(HubLicense)
            .where(HubLicense.tenant_id == tenant_id)
            .order_by(HubLicense.created_at.desc(), HubLicense.id.desc())
        )
        return list(result.all())

    async def update_status(self, tenant_id: int, license_id: int, status_value: str) -> HubLicense:
        if status_value not in LICENSE_STATUSES:
            raise InvalidInputError(f"Unknown license status: {status_value!r}")

        hub_license = await self.session.scalar(
            select(HubLicense).where(
                HubLicense.id == license_id,
                HubLicense.tenant_id == tenant_id,
            )
        )
        if hub_license is None:
            raise NotFoundError("Hub license not found")
        if hub_license.status in TERMINAL_LICENSE_STATUSES and status_value != hub_license.status:
            raise InvalidStatusTransitionError(
                f"A {hub_license.status} license cannot become {status_value}"
            )

        hub_license.status = status_value
        await self.session.flush()
        await self.session.refresh(hub_license)
        logger.info("Hub license id=%s for tenant=%s is now %s", license_id, tenant_id, status_value)
        return hub_license
