from __future__ import annotations

from typing import Any

from sqlalchemy import nulls_last
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import NotFoundError
from src.core.repositories.base import TenantScopedRepository
from src.core.timeutils import utcnow
from src.models.hub import Hub


def default_hub_name(hub_serial: str) -> str:
    return f"Hub-{hub_serial.rsplit('-', 1)[-1]}"


class HubRepository(TenantScopedRepository[Hub]):
    def __init__(self, session: AsyncSession, tenant_id: int) -> None:
        super().__init__(session=session, model=Hub, tenant_id=tenant_id)

    async def get_by_serial(self, hub_serial: str) -> Hub | None:
        result = await self.session.execute(
            self._scoped_select().where(Hub.serial_number == hub_serial)
        )
        return result.scalar_one_or_none()

    async def require_by_serial(self, hub_serial: str) -> Hub:
        hub = await self.get_by_serial(hub_serial)
        if hub is None:
            raise NotFoundError("Hub not found, send a heartbeat first")
        return hub

    async def record_heartbeat(
        self,
        hub_serial: str,
        license_id: int,
        *,
        status: str | None = None,
        ip_address: str | None = None,
        version: str | None = None,
        configuration: dict[str, Any] | None = None,
    ) -> tuple[Hub, bool]:
        values: dict[str, Any] = {
            "status": status or "online",
            "last_heartbeat": utcnow(),
            "license_id": license_id,
            "ip_address": ip_address,
            "version": version,
        }
        if configuration is not None:
            values["configuration"] = configuration

        existing = await self.get_by_serial(hub_serial)
        if existing is not None:
            hub = await self.update(existing.id, **values)
            return hub, False

        hub = await self.create(
            name=default_hub_name(hub_serial),
            serial_number=hub_serial,
            **{"configuration": {}, **values},
        )
        return hub, True

    async def list_by_heartbeat(self) -> list[Hub]:
        result = await self.session.execute(
            self._scoped_select().order_by(nulls_last(Hub.last_heartbeat.desc()), Hub.id)
        )
        return list(result.scalars().all())
