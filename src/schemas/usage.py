from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class UsageRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    endpoint: str
    method: str
    month: str
    total_requests: int


class UsageResponse(BaseModel):
    start_month: str
    end_month: str
    usage: list[UsageRow]
