from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth import require_dealer
from src.core.db import get_db_session
from src.core.errors import NotFoundError
from src.core.repositories.hub_licenses import HubLicenseDirectory, HubLicenseDraft
from src.core.repositories.hubs import HubRepository
from src.core.repositories.tenant_users import DEFAULT_ADMIN_PERMISSIONS, TenantUserRepository
from src.core.repositories.tenants import TenantDirectory, TenantDraft
from src.schemas.dealer import (
    CustomerCreatedResponse,
    CustomerCreateRequest,
    CustomerDetailResponse,
    DealerStatsResponse,
)
from src.schemas.licenses import HubLicenseCreateRequest, HubLicenseIssuedResponse, HubLicenseResponse
from src.schemas.tenant import TenantResponse, TenantStatusUpdateRequest, TenantUpdateRequest
from src.schemas.users import TenantUserResponse

router = APIRouter(prefix="/dealer", tags=["dealer"], dependencies=[Depends(require_dealer)])


@router.get("/stats", response_model=DealerStatsResponse)
async def get_dealer_stats(session: AsyncSession = Depends(get_db_session)) -> DealerStatsResponse:
    return DealerStatsResponse.model_validate(await TenantDirectory(session).stats())


@router.get("/customers", response_model=list[TenantResponse])
async def list_customers(session: AsyncSession = Depends(get_db_session)) -> list[TenantResponse]:
    tenants = await TenantDirectory(session).list()
    return [TenantResponse.model_validate(tenant) for tenant in tenants]


@router.post("/customers", response_model=CustomerCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    payload: CustomerCreateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> CustomerCreatedResponse:
    issued = await TenantDirectory(session).create(TenantDraft(**payload.model_dump()))
    admin = await TenantUserRepository(session, issued.tenant.id).add_user(
        payload.billing_email,
        role="admin",
        permissions=DEFAULT_ADMIN_PERMISSIONS,
    )
    await session.commit()
    return CustomerCreatedResponse(
        customer=TenantResponse.model_validate(issued.tenant),
        admin_user=TenantUserResponse.model_validate(admin.user),
        api_key=issued.api_key,
        admin_user_token=admin.user_token,
    )


@router.get("/customers/{customer_id}", response_model=CustomerDetailResponse)
async def get_customer(
    customer_id: int,
    session: AsyncSession = Depends(get_db_session),
) -> CustomerDetailResponse:
    tenant = await TenantDirectory(session).get(customer_id)
    if tenant is None:
        raise NotFoundError("Customer not found")

    users = await TenantUserRepository(session, tenant.id).list(limit=500)
    licenses = await HubLicenseDirectory(session).list(tenant.id)
    hub_count = await HubRepository(session, tenant.id).count()
    return CustomerDetailResponse(
        customer=TenantResponse.model_validate(tenant),
        users=[TenantUserResponse.model_validate(user) for user in users],
        licenses=[HubLicenseResponse.model_validate(item) for item in licenses],
        hub_count=hub_count,
    )


@router.patch("/customers/{customer_id}", response_model=TenantResponse)
async def update_customer(
    customer_id: int,
    payload: TenantUpdateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> TenantResponse:
    tenant = await TenantDirectory(session).update_fields(
        customer_id, **payload.model_dump(exclude_unset=True, exclude_none=True)
    )
    await session.commit()
    return TenantResponse.model_validate(tenant)


@router.patch("/customers/{customer_id}/status", response_model=TenantResponse)
async def update_customer_status(
    customer_id: int,
    payload: TenantStatusUpdateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> TenantResponse:
    tenant = await TenantDirectory(session).update_status(customer_id, payload.status)
    await session.commit()
    return TenantResponse.model_validate(tenant)


@router.post(
    "/customers/{customer_id}/licenses",
    response_model=HubLicenseIssuedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_customer_license(
    customer_id: int,
    payload: HubLicenseCreateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> HubLicenseIssuedResponse:
    issued = await HubLicenseDirectory(session).issue(customer_id, HubLicenseDraft(**payload.model_dump()))
    await session.commit()
    return HubLicenseIssuedResponse(
        license=HubLicenseResponse.model_validate(issued.license),
        license_key=issued.license_key,
    )
