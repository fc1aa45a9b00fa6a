from __future__ import annotations

import asyncio
from datetime import timedelta
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from src.core import auth
from src.core.auth import (
    extract_api_key,
    extract_hub_credentials,
    require_dealer,
    resolve_api_key_context,
    resolve_hub_context,
    route_path,
)
from src.core.errors import (
    ExpiredCredentialError,
    InternalError,
    InvalidCredentialError,
    MissingCredentialError,
)
from src.core.repositories.hub_licenses import HubLicenseDirectory, HubLicenseDraft
from src.core.repositories.tenant_users import TenantUserRepository
from src.core.repositories.tenants import TenantDirectory, TenantDraft
from src.core.timeutils import utcnow


def _request(headers: dict[str, str] | None = None, query: str = "", **scope_values) -> Request:  # noqa: ANN003
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/v1/tenant/info",
        "headers": [(name.lower().encode(), value.encode()) for name, value in (headers or {}).items()],
        "query_string": query.encode(),
        **scope_values,
    }
    return Request(scope)


def test_extract_api_key_prefers_header() -> None:
    request = _request({"X-API-Key": "ak_header"}, "api_key=ak_query")
    assert extract_api_key(request) == "ak_header"


def test_extract_api_key_falls_back_to_query() -> None:
    assert extract_api_key(_request(query="api_key=ak_query")) == "ak_query"
    assert extract_api_key(_request({"X-API-Key": "   "}, "api_key=ak_query")) == "ak_query"


def test_extract_api_key_missing() -> None:
    with pytest.raises(MissingCredentialError):
        extract_api_key(_request())
    with pytest.raises(MissingCredentialError):
        extract_api_key(_request({"X-API-Key": "  "}))


def test_extract_hub_credentials_requires_both_headers() -> None:
    request = _request({"X-License-Key": "lk_abc", "X-Hub-Serial": "AO-ACME-001-x"})
    assert extract_hub_credentials(request) == ("lk_abc", "AO-ACME-001-x")

    with pytest.raises(MissingCredentialError):
        extract_hub_credentials(_request({"X-License-Key": "lk_abc"}))
    with pytest.raises(MissingCredentialError):
        extract_hub_credentials(_request({"X-Hub-Serial": "AO-ACME-001-x"}))


def test_route_path_uses_route_template() -> None:
    request = _request(route=SimpleNamespace(path="/api/v1/tenant/events/{event_id}/acknowledge"))
    assert route_path(request) == "/api/v1/tenant/events/{event_id}/acknowledge"
    assert route_path(_request()) == "/api/v1/tenant/info"


def test_credential_errors_share_one_body() -> None:
    payloads = [
        MissingCredentialError("no header").to_payload(),
        InvalidCredentialError("tenant=3 suspended").to_payload(),
        ExpiredCredentialError("license id=9 expired").to_payload(),
    ]

    assert payloads[0] == payloads[1] == payloads[2]
    assert payloads[0] == {
        "error": "Authentication failed",
        "message": "Credentials are missing, invalid, or inactive",
    }


@pytest.mark.asyncio
async def test_resolve_api_key_context(session: AsyncSession) -> None:
    issued = await TenantDirectory(session).create(TenantDraft(name="Acme", subscription_tier="pro"))
    owner = await TenantUserRepository(session, issued.tenant.id).add_user(
        "owner@acme.test", role="admin", permissions=["users:manage"]
    )
    await session.commit()

    context = await resolve_api_key_context(session, issued.api_key)
    assert context.tenant_id == issued.tenant.id
    assert context.tenant.subscription_tier == "pro"
    assert context.user is None
    assert context.hub is None
    assert owner.user.last_login is None

    with_user = await resolve_api_key_context(session, issued.api_key, owner.user_token)
    assert with_user.user is not None
    assert with_user.user.email == "owner@acme.test"
    assert with_user.user.role == "admin"
    assert with_user.user.permissions == frozenset({"users:manage"})
    await session.refresh(owner.user)
    assert owner.user.last_login is not None


@pytest.mark.asyncio
async def test_resolve_api_key_context_rejects_unknown_key_and_user(session: AsyncSession) -> None:
    issued = await TenantDirectory(session).create(TenantDraft(name="Acme"))
    other = await TenantDirectory(session).create(TenantDraft(name="Other"))
    foreign = await TenantUserRepository(session, other.tenant.id).add_user("owner@other.test", role="admin")
    await session.commit()

    with pytest.raises(InvalidCredentialError):
        await resolve_api_key_context(session, "ak_" + "f" * 64)
    with pytest.raises(InvalidCredentialError):
        await resolve_api_key_context(session, issued.api_key, "ut_" + "0" * 64)
    with pytest.raises(InvalidCredentialError):
        await resolve_api_key_context(session, issued.api_key, foreign.user_token)


@pytest.mark.asyncio
async def test_resolve_api_key_context_rejects_suspended_tenant(session: AsyncSession) -> None:
    issued = await TenantDirectory(session).create(TenantDraft(name="Acme"))
    await TenantDirectory(session).update_status(issued.tenant.id, "suspended")
    await session.commit()

    with pytest.raises(InvalidCredentialError):
        await resolve_api_key_context(session, issued.api_key)


@pytest.mark.asyncio
async def test_resolve_hub_context(session: AsyncSession) -> None:
    tenant = await TenantDirectory(session).create(TenantDraft(name="Acme"))
    issued = await HubLicenseDirectory(session).issue(tenant.tenant.id, HubLicenseDraft(max_cameras=4))
    await session.commit()

    context = await resolve_hub_context(session, issued.license_key, issued.license.hub_serial)

    assert context.tenant_id == tenant.tenant.id
    assert context.user is None
    assert context.hub is not None
    assert context.hub.license_id == issued.license.id
    assert context.hub.hub_serial == issued.license.hub_serial
    assert context.hub.max_cameras == 4


@pytest.mark.asyncio
async def test_resolve_hub_context_rejects_expired_and_revoked(session: AsyncSession) -> None:
    tenant = await TenantDirectory(session).create(TenantDraft(name="Acme"))
    directory = HubLicenseDirectory(session)
    expired = await directory.issue(tenant.tenant.id, HubLicenseDraft(expires_at=utcnow() - timedelta(minutes=1)))
    revoked = await directory.issue(tenant.tenant.id, HubLicenseDraft())
    await directory.update_status(tenant.tenant.id, revoked.license.id, "revoked")
    await session.commit()

    with pytest.raises(ExpiredCredentialError):
        await resolve_hub_context(session, expired.license_key, expired.license.hub_serial)
    with pytest.raises(InvalidCredentialError):
        await resolve_hub_context(session, revoked.license_key, revoked.license.hub_serial)


@pytest.mark.asyncio
async def test_store_timeout_fails_closed(monkeypatch: pytest.MonkeyPatch) -> None:
    class SlowDirectory:
        def __init__(self, session):  # noqa: ANN001
            pass

        async def find_active_by_api_key(self, api_key: str):  # noqa: ANN201
            await asyncio.sleep(1)

    monkeypatch.setattr(auth, "TenantDirectory", SlowDirectory)
    monkeypatch.setattr(auth.settings, "store_timeout_seconds", 0.01)

    with pytest.raises(InternalError) as exc:
        await resolve_api_key_context(object(), "ak_anything")  # type: ignore[arg-type]

    assert exc.value.status_code == 503


@pytest.mark.asyncio
async def test_store_error_fails_closed(monkeypatch: pytest.MonkeyPatch) -> None:
    class BrokenDirectory:
        def __init__(self, session):  # noqa: ANN001
            pass

        async def find_active_by_key_and_serial(self, license_key, hub_serial, now=None):  # noqa: ANN001, ANN201
            raise SQLAlchemyError("connection reset")

    monkeypatch.setattr(auth, "HubLicenseDirectory", BrokenDirectory)

    with pytest.raises(InternalError):
        await resolve_hub_context(object(), "lk_anything", "AO-ACME-001-x")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_require_dealer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(auth.settings, "dealer_api_tokens_csv", "dealer-one, dealer-two")

    assert await require_dealer(_request({"X-Dealer-Token": "dealer-two"})) is None
    with pytest.raises(InvalidCredentialError):
        await require_dealer(_request({"X-Dealer-Token": "dealer-three"}))
    with pytest.raises(MissingCredentialError):
        await require_dealer(_request())


@pytest.mark.asyncio
async def test_require_dealer_rejects_everything_without_configured_tokens(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(auth.settings, "dealer_api_tokens_csv", "")

    with pytest.raises(InvalidCredentialError):
        await require_dealer(_request({"X-Dealer-Token": "anything"}))
