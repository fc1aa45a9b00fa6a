from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import TenantScopedBase


class Camera(TenantScopedBase):
    __tablename__ = "cameras"

    hub_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("hubs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="offline")
    ip_address: Mapped[str] = mapped_column(String(45), nullable=False)
    protocol: Mapped[str] = mapped_column(String(20), nullable=False, default="RTSP")
    port: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stream_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    manufacturer: Mapped[str | None] = mapped_column(String(100), nullable=True)
    model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ptz_capable: Mapped[bool] = mapped_column(nullable=False, default=False)
    is_recording: Mapped[bool] = mapped_column(nullable=False, default=False)
