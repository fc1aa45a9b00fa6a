from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import TenantScopedBase


class HubLicense(TenantScopedBase):
    __tablename__ = "hub_licenses"
    __table_args__ = (
        UniqueConstraint("tenant_id", "sequence", name="uq_hub_licenses_tenant_sequence"),
    )

    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    hub_serial: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    license_key_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    hub_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    deployment_location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    max_cameras: Mapped[int] = mapped_column(Integer, nullable=False, default=16)
    features: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
