from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import InvalidInputError, NotFoundError
from src.core.repositories.base import TenantScopedRepository
from src.core.timeutils import utcnow
from src.models.camera import Camera
from src.models.event import Event


class EventRepository(TenantScopedRepository[Event]):
    def __init__(self, session: AsyncSession, tenant_id: int) -> None:
        super().__init__(session=session, model=Event, tenant_id=tenant_id)

    async def add_many(self, hub_id: int, events: Sequence[Mapping[str, Any]]) -> list[Event]:
        camera_ids = {event["camera_id"] for event in events if event.get("camera_id") is not None}
        if camera_ids:
            owned = set(
                (
                    await self.session.scalars(
                        select(Camera.id).where(
                            Camera.id.in_(camera_ids),
                            Camera.tenant_id == self.tenant_id,
                        )
                    )
                ).all()
            )
            if owned != camera_ids:
                raise InvalidInputError("Events reference cameras that do not belong to this tenant")

        added = []
        for event in events:
            payload = {key: value for key, value in event.items() if value is not None}
            added.append(Event(**{**payload, "tenant_id": self.tenant_id, "hub_id": hub_id}))
        self.session.add_all(added)
        await self.session.flush()
        for event in added:
            await self.session.refresh(event)
        return added

    async def list_recent(
        self,
        *,
        limit: int = 50,
        offset: int = 0,
        severity: str | None = None,
    ) -> list[Event]:
        stmt = self._scoped_select()
        if severity:
            stmt = stmt.where(Event.severity == severity)
        result = await self.session.execute(
            stmt.order_by(Event.timestamp.desc(), Event.id.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def acknowledge(self, event_id: int, user_id: int) -> Event:
        event = await self.get(event_id)
        if event is None:
            raise NotFoundError("Event not found")
        if not event.acknowledged:
            event.acknowledged = True
            event.acknowledged_by = user_id
            event.acknowledged_at = utcnow()
            await self.session.flush()
            await self.session.refresh(event)
        return event
