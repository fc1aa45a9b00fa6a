from __future__ import annotations

import pytest

from src.core.context import TenantContext, TenantSnapshot, UserSnapshot
from src.core.errors import (
    InsufficientRoleError,
    PermissionDeniedError,
    TierUpgradeRequiredError,
    UnauthenticatedUserError,
)
from src.core.guards import (
    normalize_role,
    require_permission,
    require_role,
    require_subscription_tier,
    role_rank,
)


def _ctx(*, tier: str = "basic", role: str | None = None, permissions: tuple[str, ...] = ()) -> TenantContext:
    tenant = TenantSnapshot(
        id=1,
        name="Acme",
        slug="acme",
        subscription_tier=tier,
        max_hubs=5,
        max_cameras=50,
        status="active",
    )
    user = None
    if role is not None:
        user = UserSnapshot(id=7, email="ops@acme.test", role=role, permissions=frozenset(permissions))
    return TenantContext(tenant_id=1, tenant=tenant, user=user)


def test_role_hierarchy_allows_higher_roles() -> None:
    guard = require_role("manager")

    guard(_ctx(role="manager"))
    guard(_ctx(role="admin"))


def test_role_hierarchy_rejects_lower_roles() -> None:
    guard = require_role("manager")

    with pytest.raises(InsufficientRoleError) as exc:
        guard(_ctx(role="viewer"))

    assert exc.value.status_code == 403
    assert exc.value.required_role == "manager"


def test_role_guard_requires_user() -> None:
    with pytest.raises(UnauthenticatedUserError):
        require_role("viewer")(_ctx())


def test_operator_is_an_alias_for_user() -> None:
    assert normalize_role("Operator") == "user"
    assert role_rank("operator") == role_rank("user")
    require_role("user")(_ctx(role="operator"))


def test_unknown_stored_role_ranks_below_everything() -> None:
    with pytest.raises(InsufficientRoleError):
        require_role("viewer")(_ctx(role="superuser"))


def test_permission_uses_exact_membership() -> None:
    guard = require_permission("events:acknowledge")

    guard(_ctx(role="viewer", permissions=("events:acknowledge",)))
    with pytest.raises(PermissionDeniedError):
        guard(_ctx(role="admin", permissions=("*",)))
    with pytest.raises(PermissionDeniedError):
        guard(_ctx(role="admin", permissions=("events",)))


def test_permission_guard_requires_user() -> None:
    with pytest.raises(UnauthenticatedUserError):
        require_permission("users:manage")(_ctx())


def test_subscription_tier_guard() -> None:
    guard = require_subscription_tier("pro")

    guard(_ctx(tier="pro"))
    guard(_ctx(tier="enterprise"))
    with pytest.raises(TierUpgradeRequiredError) as exc:
        guard(_ctx(tier="basic"))
    assert exc.value.to_payload()["error"] == "Subscription upgrade required"


def test_subscription_tier_guard_does_not_need_user() -> None:
    require_subscription_tier("basic")(_ctx(tier="basic"))


def test_guard_factories_reject_unknown_values() -> None:
    with pytest.raises(ValueError):
        require_role("owner")
    with pytest.raises(ValueError):
        require_subscription_tier("platinum")
    with pytest.raises(ValueError):
        require_permission("")
