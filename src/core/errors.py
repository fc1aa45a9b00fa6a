from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from starlette import status

CREDENTIAL_FAILURE_ERROR = "Authentication failed"
CREDENTIAL_FAILURE_MESSAGE = "Credentials are missing, invalid, or inactive"


class PlatformError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal error"
    default_message: str = "The request could not be completed"

    def __init__(self, message: str | None = None, *, headers: Mapping[str, str] | None = None) -> None:
        self.message = message or self.default_message
        self.headers = dict(headers or {})
        super().__init__(self.message)

    def details(self) -> dict[str, Any]:
        return {}

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message, **self.details()}


class CredentialError(PlatformError):
    """Any failure to establish identity.

    ``message`` is kept for logs only; the rendered body is the same for every
    subclass so callers cannot tell a wrong key from an inactive tenant.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    error = CREDENTIAL_FAILURE_ERROR

    def to_payload(self) -> dict[str, Any]:
        return {"error": CREDENTIAL_FAILURE_ERROR, "message": CREDENTIAL_FAILURE_MESSAGE}


class MissingCredentialError(CredentialError):
    default_message = "No credentials supplied"


class InvalidCredentialError(CredentialError):
    default_message = "Credentials did not resolve to an active account"


class ExpiredCredentialError(CredentialError):
    default_message = "Hub license has expired"


class AuthorizationError(PlatformError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"


class UnauthenticatedUserError(AuthorizationError):
    error = "User authentication required"
    default_message = "This endpoint requires user-level authentication"


class InsufficientRoleError(AuthorizationError):
    error = "Insufficient permissions"

    def __init__(self, required_role: str) -> None:
        self.required_role = required_role
        super().__init__(f"This action requires {required_role} role or higher")


class PermissionDeniedError(AuthorizationError):
    error = "Permission denied"

    def __init__(self, permission: str) -> None:
        self.permission = permission
        super().__init__(f"This action requires '{permission}' permission")


class TierUpgradeRequiredError(AuthorizationError):
    error = "Subscription upgrade required"

    def __init__(self, required_tier: str) -> None:
        self.required_tier = required_tier
        super().__init__(f"This feature requires {required_tier} subscription or higher")


class LimitExceededError(PlatformError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Limit exceeded"

    def __init__(self, resource: str, *, limit: int, current: int) -> None:
        self.resource = resource
        self.limit = limit
        self.current = current
        super().__init__(f"Your subscription allows maximum {limit} {resource}")

    def details(self) -> dict[str, Any]:
        return {"resource": self.resource, "limit": self.limit, "current": self.current}


class DuplicateNameError(PlatformError):
    status_code = status.HTTP_409_CONFLICT
    error = "Duplicate name"
    default_message = "That name is already taken, please choose a different one"


class InvalidStatusTransitionError(PlatformError):
    status_code = status.HTTP_409_CONFLICT
    error = "Invalid status transition"


class NotFoundError(PlatformError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"
    default_message = "The requested resource does not exist"


class RateLimitExceededError(PlatformError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error = "Rate limit exceeded"

    def __init__(self, limit: int, *, headers: Mapping[str, str] | None = None) -> None:
        self.limit = limit
        super().__init__(f"Your subscription allows {limit} requests per minute", headers=headers)


class InternalError(PlatformError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "Service unavailable"
    default_message = "The service is temporarily unavailable, please retry"


class InvalidInputError(PlatformError, ValueError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation error"
