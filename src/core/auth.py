from __future__ import annotations

import asyncio
import hmac
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Final, TypeVar

from fastapi import Depends, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.context import HubIdentity, TenantContext, TenantSnapshot, UserSnapshot
from src.core.db import get_db_session
from src.core.errors import (
    ExpiredCredentialError,
    InternalError,
    InvalidCredentialError,
    MissingCredentialError,
)
from src.core.guards import Guard
from src.core.rate_limit import TierRateLimiter, get_rate_limiter
from src.core.repositories.hub_licenses import HubLicenseDirectory
from src.core.repositories.tenant_users import TenantUserRepository
from src.core.repositories.tenants import TenantDirectory
from src.core.usage import UsageMeter, get_usage_meter

logger = logging.getLogger(__name__)

API_KEY_HEADER: Final = "X-API-Key"
API_KEY_QUERY_PARAM: Final = "api_key"
LICENSE_KEY_HEADER: Final = "X-License-Key"
HUB_SERIAL_HEADER: Final = "X-Hub-Serial"
USER_TOKEN_HEADER: Final = "X-User-Token"
DEALER_TOKEN_HEADER: Final = "X-Dealer-Token"

T = TypeVar("T")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def extract_api_key(request: Request) -> str:
    api_key = _clean(request.headers.get(API_KEY_HEADER)) or _clean(
        request.query_params.get(API_KEY_QUERY_PARAM)
    )
    if api_key is None:
        raise MissingCredentialError("API key missing from header and query string")
    return api_key


def extract_hub_credentials(request: Request) -> tuple[str, str]:
    license_key = _clean(request.headers.get(LICENSE_KEY_HEADER))
    hub_serial = _clean(request.headers.get(HUB_SERIAL_HEADER))
    if license_key is None or hub_serial is None:
        raise MissingCredentialError("License key or hub serial header missing")
    return license_key, hub_serial


def route_path(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


async def _bounded(operation: Awaitable[T], description: str) -> T:
    try:
        return await asyncio.wait_for(operation, timeout=settings.store_timeout_seconds)
    except asyncio.TimeoutError as exc:
        logger.error("Credential store timed out during %s", description)
        raise InternalError() from exc
    except SQLAlchemyError as exc:
        logger.error("Credential store failed during %s: %s", description, type(exc).__name__)
        raise InternalError() from exc


async def resolve_api_key_context(
    session: AsyncSession,
    api_key: str,
    user_token: str | None = None,
) -> TenantContext:
    tenant = await _bounded(
        TenantDirectory(session).find_active_by_api_key(api_key), "tenant lookup"
    )
    if tenant is None:
        raise InvalidCredentialError("No active tenant for API key")
    snapshot = TenantSnapshot.from_model(tenant)

    user = None
    if user_token:
        users = TenantUserRepository(session, tenant.id)
        tenant_user = await _bounded(users.get_active_by_token(user_token), "tenant user lookup")
        if tenant_user is None:
            raise InvalidCredentialError(f"No active user token for tenant={tenant.id}")
        user = UserSnapshot.from_model(tenant_user)
        await _bounded(users.record_login(tenant_user), "user login update")
        await _bounded(session.commit(), "user login commit")

    return TenantContext(tenant_id=snapshot.id, tenant=snapshot, user=user)


async def resolve_hub_context(
    session: AsyncSession,
    license_key: str,
    hub_serial: str,
    now: datetime | None = None,
) -> TenantContext:
    active = await _bounded(
        HubLicenseDirectory(session).find_active_by_key_and_serial(license_key, hub_serial, now),
        "hub license lookup",
    )
    if active is None:
        raise InvalidCredentialError("No active license for key and serial")
    if active.expired:
        raise ExpiredCredentialError(f"License id={active.license.id} expired")

    return TenantContext(
        tenant_id=active.tenant.id,
        tenant=TenantSnapshot.from_model(active.tenant),
        hub=HubIdentity.from_model(active.license),
    )


async def authenticate_api_key(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
    meter: UsageMeter = Depends(get_usage_meter),
    limiter: TierRateLimiter = Depends(get_rate_limiter),
) -> TenantContext:
    api_key = extract_api_key(request)
    context = await resolve_api_key_context(
        session, api_key, _clean(request.headers.get(USER_TOKEN_HEADER))
    )
    await meter.record(context.tenant_id, route_path(request), request.method)
    request.state.rate_limit = await limiter.apply(context, response)
    return context


async def authenticate_hub_license(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db_session),
    meter: UsageMeter = Depends(get_usage_meter),
    limiter: TierRateLimiter = Depends(get_rate_limiter),
) -> TenantContext:
    license_key, hub_serial = extract_hub_credentials(request)
    context = await resolve_hub_context(session, license_key, hub_serial)
    await meter.record(context.tenant_id, route_path(request), request.method)
    request.state.rate_limit = await limiter.apply(context, response)
    return context


def _guarded(
    authenticate: Callable[..., Awaitable[TenantContext]],
    guards: tuple[Guard, ...],
) -> Callable[[TenantContext], Awaitable[TenantContext]]:
    async def dependency(context: TenantContext = Depends(authenticate)) -> TenantContext:
        for guard in guards:
            guard(context)
        return context

    return dependency


def tenant_access(*guards: Guard) -> Callable[[TenantContext], Awaitable[TenantContext]]:
    return _guarded(authenticate_api_key, guards)


def hub_access(*guards: Guard) -> Callable[[TenantContext], Awaitable[TenantContext]]:
    return _guarded(authenticate_hub_license, guards)


async def require_dealer(request: Request) -> None:
    token = _clean(request.headers.get(DEALER_TOKEN_HEADER))
    if token is None:
        raise MissingCredentialError("Dealer token missing")

    for candidate in settings.dealer_api_tokens():
        if hmac.compare_digest(candidate.encode("utf-8"), token.encode("utf-8")):
            return
    raise InvalidCredentialError("Dealer token rejected")
