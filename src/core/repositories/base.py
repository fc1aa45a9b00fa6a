from __future__ import annotations

from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from src.models.base import TenantScopedBase

ModelT = TypeVar("ModelT", bound=TenantScopedBase)


class TenantScopedRepository(Generic[ModelT]):
    def __init__(self, session: AsyncSession, model: type[ModelT], tenant_id: int) -> None:
        self.session = session
        self.model = model
        self.tenant_id = tenant_id

    def _scoped_select(self) -> Select[tuple[ModelT]]:
        return select(self.model).where(self.model.tenant_id == self.tenant_id)

    async def create(self, **values: object) -> ModelT:
        payload = dict(values)
        payload["tenant_id"] = self.tenant_id
        instance = self.model(**payload)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get(self, entity_id: int) -> ModelT | None:
        result = await self.session.execute(
            self._scoped_select().where(self.model.id == entity_id)
        )
        return result.scalar_one_or_none()

    async def list(self, *, limit: int = 100, offset: int = 0) -> list[ModelT]:
        result = await self.session.execute(
            self._scoped_select().order_by(self.model.id).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        total = await self.session.scalar(
            select(func.count(self.model.id)).where(self.model.tenant_id == self.tenant_id)
        )
        return int(total or 0)

    async def update(self, entity_id: int, **values: object) -> ModelT | None:
        instance = await self.get(entity_id)
        if instance is None:
            return None

        for field, value in values.items():
            if field in {"id", "tenant_id"}:
                continue
            setattr(instance, field, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance
