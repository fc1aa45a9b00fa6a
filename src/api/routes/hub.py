from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth import hub_access
from src.core.context import HubIdentity, TenantContext
from src.core.db import get_db_session
from src.core.errors import MissingCredentialError
from src.core.repositories.cameras import CameraRepository
from src.core.repositories.events import EventRepository
from src.core.repositories.hubs import HubRepository
from src.schemas.events import EventBatchRequest, EventListResponse, EventResponse
from src.schemas.hubs import (
    CameraBatchRequest,
    CameraListResponse,
    CameraResponse,
    HeartbeatRequest,
    HeartbeatResponse,
    HubResponse,
)

router = APIRouter(prefix="/hub", tags=["hub"])


def _hub_identity(context: TenantContext) -> HubIdentity:
    if context.hub is None:
        raise MissingCredentialError("Request was not authenticated as a hub")
    return context.hub


@router.post("/heartbeat", response_model=HeartbeatResponse)
async def record_heartbeat(
    payload: HeartbeatRequest,
    context: TenantContext = Depends(hub_access()),
    session: AsyncSession = Depends(get_db_session),
) -> HeartbeatResponse:
    identity = _hub_identity(context)
    hub, created = await HubRepository(session, context.tenant_id).record_heartbeat(
        identity.hub_serial,
        identity.license_id,
        status=payload.status,
        ip_address=payload.ip_address,
        version=payload.version,
        configuration=payload.configuration,
    )
    await session.commit()
    return HeartbeatResponse(
        hub=HubResponse.model_validate(hub),
        message="Hub registered" if created else "Heartbeat recorded",
    )


@router.post("/cameras", response_model=CameraListResponse, status_code=status.HTTP_201_CREATED)
async def register_cameras(
    payload: CameraBatchRequest,
    context: TenantContext = Depends(hub_access()),
    session: AsyncSession = Depends(get_db_session),
) -> CameraListResponse:
    identity = _hub_identity(context)
    hub = await HubRepository(session, context.tenant_id).require_by_serial(identity.hub_serial)
    cameras = await CameraRepository(session, context.tenant_id).add_many(
        hub.id,
        [camera.model_dump() for camera in payload.cameras],
        tenant_max_cameras=context.tenant.max_cameras,
        hub_max_cameras=identity.max_cameras,
    )
    await session.commit()
    return CameraListResponse(cameras=[CameraResponse.model_validate(camera) for camera in cameras])


@router.post("/events", response_model=EventListResponse, status_code=status.HTTP_201_CREATED)
async def ingest_events(
    payload: EventBatchRequest,
    context: TenantContext = Depends(hub_access()),
    session: AsyncSession = Depends(get_db_session),
) -> EventListResponse:
    identity = _hub_identity(context)
    hub = await HubRepository(session, context.tenant_id).require_by_serial(identity.hub_serial)
    reports = []
    for event in payload.events:
        values = event.model_dump()
        values["event_metadata"] = values.pop("metadata")
        reports.append(values)

    events = await EventRepository(session, context.tenant_id).add_many(hub.id, reports)
    await session.commit()
    return EventListResponse(events=[EventResponse.model_validate(event) for event in events])
