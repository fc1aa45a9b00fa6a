from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth import tenant_access
from src.core.context import TenantContext
from src.core.db import get_db_session
from src.core.errors import UnauthenticatedUserError
from src.core.guards import require_permission, require_role, require_subscription_tier
from src.core.repositories.cameras import CameraRepository
from src.core.repositories.events import EventRepository
from src.core.repositories.hub_licenses import HubLicenseDirectory, HubLicenseDraft
from src.core.repositories.hubs import HubRepository
from src.core.repositories.tenant_users import TenantUserRepository
from src.core.timeutils import current_month
from src.core.usage import query_usage
from src.schemas.events import EventListResponse, EventResponse
from src.schemas.hubs import CameraListResponse, CameraResponse, HubListResponse, HubResponse
from src.schemas.licenses import (
    HubLicenseCreateRequest,
    HubLicenseIssuedResponse,
    HubLicenseListResponse,
    HubLicenseResponse,
    HubLicenseStatusUpdateRequest,
)
from src.schemas.tenant import (
    TenantInfoResponse,
    TenantLimitsResponse,
    TenantSnapshotResponse,
    TenantUserSummary,
)
from src.schemas.usage import UsageResponse, UsageRow
from src.schemas.users import TenantUserCreatedResponse, TenantUserCreateRequest, TenantUserResponse

router = APIRouter(prefix="/tenant", tags=["tenant"])

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


@router.get("/info", response_model=TenantInfoResponse)
async def get_tenant_info(context: TenantContext = Depends(tenant_access())) -> TenantInfoResponse:
    user = None
    if context.user is not None:
        user = TenantUserSummary(
            id=context.user.id,
            email=context.user.email,
            role=context.user.role,
            permissions=sorted(context.user.permissions),
        )
    return TenantInfoResponse(
        tenant=TenantSnapshotResponse.model_validate(context.tenant),
        limits=TenantLimitsResponse(
            max_hubs=context.tenant.max_hubs,
            max_cameras=context.tenant.max_cameras,
            subscription_tier=context.tenant.subscription_tier,
        ),
        user=user,
    )


@router.post(
    "/hub-licenses",
    response_model=HubLicenseIssuedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_hub_license(
    payload: HubLicenseCreateRequest,
    context: TenantContext = Depends(tenant_access(require_role("admin"))),
    session: AsyncSession = Depends(get_db_session),
) -> HubLicenseIssuedResponse:
    issued = await HubLicenseDirectory(session).issue(
        context.tenant_id, HubLicenseDraft(**payload.model_dump())
    )
    await session.commit()
    return HubLicenseIssuedResponse(
        license=HubLicenseResponse.model_validate(issued.license),
        license_key=issued.license_key,
    )


@router.get("/hub-licenses", response_model=HubLicenseListResponse)
async def list_hub_licenses(
    context: TenantContext = Depends(tenant_access()),
    session: AsyncSession = Depends(get_db_session),
) -> HubLicenseListResponse:
    licenses = await HubLicenseDirectory(session).list(context.tenant_id)
    return HubLicenseListResponse(
        licenses=[HubLicenseResponse.model_validate(item) for item in licenses]
    )


@router.patch("/hub-licenses/{license_id}/status", response_model=HubLicenseResponse)
async def update_hub_license_status(
    license_id: int,
    payload: HubLicenseStatusUpdateRequest,
    context: TenantContext = Depends(tenant_access(require_role("admin"))),
    session: AsyncSession = Depends(get_db_session),
) -> HubLicenseResponse:
    hub_license = await HubLicenseDirectory(session).update_status(
        context.tenant_id, license_id, payload.status
    )
    await session.commit()
    return HubLicenseResponse.model_validate(hub_license)


@router.get("/hubs", response_model=HubListResponse)
async def list_hubs(
    context: TenantContext = Depends(tenant_access()),
    session: AsyncSession = Depends(get_db_session),
) -> HubListResponse:
    hubs = await HubRepository(session, context.tenant_id).list_by_heartbeat()
    return HubListResponse(hubs=[HubResponse.model_validate(hub) for hub in hubs])


@router.get("/cameras", response_model=CameraListResponse)
async def list_cameras(
    context: TenantContext = Depends(tenant_access()),
    session: AsyncSession = Depends(get_db_session),
) -> CameraListResponse:
    cameras = await CameraRepository(session, context.tenant_id).list_by_name()
    return CameraListResponse(cameras=[CameraResponse.model_validate(camera) for camera in cameras])


@router.get("/events", response_model=EventListResponse)
async def list_events(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    severity: str | None = Query(default=None),
    context: TenantContext = Depends(tenant_access()),
    session: AsyncSession = Depends(get_db_session),
) -> EventListResponse:
    events = await EventRepository(session, context.tenant_id).list_recent(
        limit=limit, offset=offset, severity=severity
    )
    return EventListResponse(events=[EventResponse.model_validate(event) for event in events])


@router.post("/events/{event_id}/acknowledge", response_model=EventResponse)
async def acknowledge_event(
    event_id: int,
    context: TenantContext = Depends(tenant_access(require_permission("events:acknowledge"))),
    session: AsyncSession = Depends(get_db_session),
) -> EventResponse:
    if context.user is None:
        raise UnauthenticatedUserError()
    event = await EventRepository(session, context.tenant_id).acknowledge(event_id, context.user.id)
    await session.commit()
    return EventResponse.model_validate(event)


@router.get("/users", response_model=list[TenantUserResponse])
async def list_tenant_users(
    context: TenantContext = Depends(tenant_access(require_role("manager"))),
    session: AsyncSession = Depends(get_db_session),
) -> list[TenantUserResponse]:
    users = await TenantUserRepository(session, context.tenant_id).list(limit=500)
    return [TenantUserResponse.model_validate(user) for user in users]


@router.post("/users", response_model=TenantUserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_tenant_user(
    payload: TenantUserCreateRequest,
    context: TenantContext = Depends(
        tenant_access(require_role("admin"), require_permission("users:manage"))
    ),
    session: AsyncSession = Depends(get_db_session),
) -> TenantUserCreatedResponse:
    issued = await TenantUserRepository(session, context.tenant_id).add_user(
        payload.email,
        role=payload.role,
        permissions=payload.permissions,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    await session.commit()
    return TenantUserCreatedResponse(
        user=TenantUserResponse.model_validate(issued.user),
        user_token=issued.user_token,
    )


@router.get("/analytics/usage", response_model=UsageResponse)
async def get_usage_analytics(
    start_month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    end_month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    context: TenantContext = Depends(tenant_access(require_subscription_tier("pro"))),
    session: AsyncSession = Depends(get_db_session),
) -> UsageResponse:
    end = end_month or current_month()
    start = start_month or end
    rows = await query_usage(session, context.tenant_id, start, end)
    return UsageResponse(
        start_month=start,
        end_month=end,
        usage=[UsageRow.model_validate(row) for row in rows],
    )
