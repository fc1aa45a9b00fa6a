from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.dml import Insert

from src.core.db import AsyncSessionLocal
from src.core.timeutils import current_month, utcnow
from src.models.api_usage import ApiUsage

logger = logging.getLogger(__name__)

_CONFLICT_TARGET = (ApiUsage.tenant_id, ApiUsage.endpoint, ApiUsage.method, ApiUsage.month)


@dataclass(slots=True)
class UsageSummary:
    endpoint: str
    method: str
    month: str
    total_requests: int


def build_usage_upsert(dialect_name: str, tenant_id: int, endpoint: str, method: str, month: str) -> Insert:
    insert = sqlite_insert if dialect_name == "sqlite" else pg_insert
    now = utcnow()
    stmt = insert(ApiUsage).values(
        tenant_id=tenant_id,
        endpoint=endpoint,
        method=method.upper(),
        month=month,
        request_count=1,
        last_seen_at=now,
    )
    return stmt.on_conflict_do_update(
        index_elements=list(_CONFLICT_TARGET),
        set_={"request_count": ApiUsage.request_count + 1, "last_seen_at": now},
    )


class UsageMeter:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(self, tenant_id: int, endpoint: str, method: str, month: str | None = None) -> bool:
        month_key = month or current_month()
        try:
            async with self._session_factory() as session:
                dialect_name = session.get_bind().dialect.name
                await session.execute(
                    build_usage_upsert(dialect_name, tenant_id, endpoint, method, month_key)
                )
                await session.commit()
        except Exception:
            logger.warning(
                "Failed to record API usage for tenant=%s endpoint=%s", tenant_id, endpoint, exc_info=True
            )
            return False
        return True


def get_usage_meter() -> UsageMeter:
    return UsageMeter(AsyncSessionLocal)


async def query_usage(
    session: AsyncSession,
    tenant_id: int,
    start_month: str,
    end_month: str,
) -> list[UsageSummary]:
    total = func.sum(ApiUsage.request_count).label("total_requests")
    stmt = (
        select(ApiUsage.endpoint, ApiUsage.method, ApiUsage.month, total)
        .where(
            ApiUsage.tenant_id == tenant_id,
            ApiUsage.month >= start_month,
            ApiUsage.month <= end_month,
        )
        .group_by(ApiUsage.endpoint, ApiUsage.method, ApiUsage.month)
        .order_by(ApiUsage.month.desc(), ApiUsage.endpoint, ApiUsage.method)
    )
    rows = (await session.execute(stmt)).all()
    return [
        UsageSummary(
            endpoint=row.endpoint,
            method=row.method,
            month=row.month,
            total_requests=int(row.total_requests or 0),
        )
        for row in rows
    ]
