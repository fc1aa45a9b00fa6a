from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.db import get_db_session
from src.core.repositories.tenant_users import DEFAULT_ADMIN_PERMISSIONS, TenantUserRepository
from src.core.repositories.tenants import TenantDirectory, TenantDraft
from src.schemas.tenant import TenantCreatedResponse, TenantCreateRequest, TenantResponse

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.post("", response_model=TenantCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    payload: TenantCreateRequest,
    session: AsyncSession = Depends(get_db_session),
) -> TenantCreatedResponse:
    issued = await TenantDirectory(session).create(TenantDraft(**payload.model_dump()))
    admin_user_token = None
    if payload.billing_email:
        admin = await TenantUserRepository(session, issued.tenant.id).add_user(
            payload.billing_email,
            role="admin",
            permissions=DEFAULT_ADMIN_PERMISSIONS,
        )
        admin_user_token = admin.user_token

    await session.commit()
    return TenantCreatedResponse(
        tenant=TenantResponse.model_validate(issued.tenant),
        api_key=issued.api_key,
        admin_user_token=admin_user_token,
    )
