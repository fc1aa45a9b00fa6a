from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import TenantScopedBase


class Hub(TenantScopedBase):
    __tablename__ = "hubs"
    __table_args__ = (
        UniqueConstraint("tenant_id", "serial_number", name="uq_hubs_tenant_serial"),
    )

    license_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("hub_licenses.id"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    serial_number: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="offline", index=True)
    system_armed: Mapped[bool] = mapped_column(nullable=False, default=False)
    last_heartbeat: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    version: Mapped[str | None] = mapped_column(String(50), nullable=True)
    configuration: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
