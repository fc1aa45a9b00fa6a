from src.schemas.dealer import (
    CustomerCreatedResponse,
    CustomerCreateRequest,
    CustomerDetailResponse,
    DealerStatsResponse,
)
from src.schemas.events import EventBatchRequest, EventListResponse, EventReport, EventResponse
from src.schemas.hubs import (
    CameraBatchRequest,
    CameraListResponse,
    CameraReport,
    CameraResponse,
    HeartbeatRequest,
    HeartbeatResponse,
    HubListResponse,
    HubResponse,
)
from src.schemas.licenses import (
    HubLicenseCreateRequest,
    HubLicenseIssuedResponse,
    HubLicenseListResponse,
    HubLicenseResponse,
    HubLicenseStatusUpdateRequest,
)
from src.schemas.tenant import (
    TenantCreatedResponse,
    TenantCreateRequest,
    TenantInfoResponse,
    TenantLimitsResponse,
    TenantResponse,
    TenantSnapshotResponse,
    TenantStatusUpdateRequest,
    TenantUpdateRequest,
    TenantUserSummary,
)
from src.schemas.usage import UsageResponse, UsageRow
from src.schemas.users import TenantUserCreatedResponse, TenantUserCreateRequest, TenantUserResponse

__all__ = [
    "TenantCreateRequest",
    "TenantCreatedResponse",
    "TenantResponse",
    "TenantSnapshotResponse",
    "TenantLimitsResponse",
    "TenantUserSummary",
    "TenantInfoResponse",
    "TenantUpdateRequest",
    "TenantStatusUpdateRequest",
    "TenantUserCreateRequest",
    "TenantUserResponse",
    "TenantUserCreatedResponse",
    "HubLicenseCreateRequest",
    "HubLicenseResponse",
    "HubLicenseIssuedResponse",
    "HubLicenseListResponse",
    "HubLicenseStatusUpdateRequest",
    "HeartbeatRequest",
    "HeartbeatResponse",
    "HubResponse",
    "HubListResponse",
    "CameraReport",
    "CameraBatchRequest",
    "CameraResponse",
    "CameraListResponse",
    "EventReport",
    "EventBatchRequest",
    "EventResponse",
    "EventListResponse",
    "UsageRow",
    "UsageResponse",
    "CustomerCreateRequest",
    "CustomerCreatedResponse",
    "CustomerDetailResponse",
    "DealerStatsResponse",
]
