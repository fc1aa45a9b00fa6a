from __future__ import annotations

from collections.abc import Callable
from typing import Final, Literal

from src.core.context import TenantContext
from src.core.errors import (
    InsufficientRoleError,
    PermissionDeniedError,
    TierUpgradeRequiredError,
    UnauthenticatedUserError,
)

Role = Literal["viewer", "user", "manager", "admin"]
SubscriptionTier = Literal["basic", "pro", "enterprise"]

ROLE_HIERARCHY: Final[tuple[str, ...]] = ("viewer", "user", "manager", "admin")
TIER_HIERARCHY: Final[tuple[str, ...]] = ("basic", "pro", "enterprise")
ROLE_ALIASES: Final[dict[str, str]] = {"operator": "user"}

Guard = Callable[[TenantContext], None]


def normalize_role(role: str) -> str:
    normalized = (role or "").strip().lower()
    return ROLE_ALIASES.get(normalized, normalized)


def role_rank(role: str) -> int:
    normalized = normalize_role(role)
    return ROLE_HIERARCHY.index(normalized) if normalized in ROLE_HIERARCHY else -1


def tier_rank(tier: str) -> int:
    normalized = (tier or "").strip().lower()
    return TIER_HIERARCHY.index(normalized) if normalized in TIER_HIERARCHY else -1


def check_role(context: TenantContext, min_role: str) -> None:
    if context.user is None:
        raise UnauthenticatedUserError()
    if role_rank(context.user.role) < role_rank(min_role):
        raise InsufficientRoleError(normalize_role(min_role))


def check_permission(context: TenantContext, permission: str) -> None:
    if context.user is None:
        raise UnauthenticatedUserError()
    if permission not in context.user.permissions:
        raise PermissionDeniedError(permission)


def check_subscription_tier(context: TenantContext, min_tier: str) -> None:
    if tier_rank(context.tenant.subscription_tier) < tier_rank(min_tier):
        raise TierUpgradeRequiredError(min_tier)


def require_role(min_role: str) -> Guard:
    if role_rank(min_role) < 0:
        raise ValueError(f"Unknown role: {min_role!r}")

    def guard(context: TenantContext) -> None:
        check_role(context, min_role)

    guard.__name__ = f"require_role_{normalize_role(min_role)}"
    return guard


def require_permission(permission: str) -> Guard:
    if not permission:
        raise ValueError("Permission name must not be empty")

    def guard(context: TenantContext) -> None:
        check_permission(context, permission)

    guard.__name__ = f"require_permission_{permission}"
    return guard


def require_subscription_tier(min_tier: str) -> Guard:
    if tier_rank(min_tier) < 0:
        raise ValueError(f"Unknown subscription tier: {min_tier!r}")

    def guard(context: TenantContext) -> None:
        check_subscription_tier(context, min_tier)

    guard.__name__ = f"require_tier_{min_tier}"
    return guard
