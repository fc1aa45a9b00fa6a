from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import LimitExceededError
from src.core.repositories.base import TenantScopedRepository
from src.models.camera import Camera


class CameraRepository(TenantScopedRepository[Camera]):
    def __init__(self, session: AsyncSession, tenant_id: int) -> None:
        super().__init__(session=session, model=Camera, tenant_id=tenant_id)

    async def count_for_hub(self, hub_id: int) -> int:
        total = await self.session.scalar(
            select(func.count(Camera.id)).where(
                Camera.tenant_id == self.tenant_id,
                Camera.hub_id == hub_id,
            )
        )
        return int(total or 0)

    async def add_many(
        self,
        hub_id: int,
        cameras: Sequence[Mapping[str, Any]],
        *,
        tenant_max_cameras: int,
        hub_max_cameras: int,
    ) -> list[Camera]:
        tenant_count = await self.count()
        if tenant_count + len(cameras) > tenant_max_cameras:
            raise LimitExceededError("cameras", limit=tenant_max_cameras, current=tenant_count)

        hub_count = await self.count_for_hub(hub_id)
        if hub_count + len(cameras) > hub_max_cameras:
            raise LimitExceededError("cameras on this hub", limit=hub_max_cameras, current=hub_count)

        added = [
            Camera(**{**dict(camera), "tenant_id": self.tenant_id, "hub_id": hub_id})
            for camera in cameras
        ]
        self.session.add_all(added)
        await self.session.flush()
        for camera in added:
            await self.session.refresh(camera)
        return added

    async def list_by_name(self) -> list[Camera]:
        result = await self.session.execute(self._scoped_select().order_by(Camera.name, Camera.id))
        return list(result.scalars().all())
