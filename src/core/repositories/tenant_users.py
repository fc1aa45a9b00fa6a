from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Final

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.errors import DuplicateNameError, InternalError, InvalidInputError
from src.core.guards import ROLE_HIERARCHY, normalize_role
from src.core.keys import generate_user_token, hash_secret
from src.core.repositories.base import TenantScopedRepository
from src.core.timeutils import utcnow
from src.models.tenant_user import TenantUser

DEFAULT_ADMIN_PERMISSIONS: Final[tuple[str, ...]] = (
    "hubs:manage",
    "licenses:issue",
    "users:manage",
    "events:acknowledge",
    "usage:read",
)


@dataclass(frozen=True, slots=True)
class IssuedUser:
    user: TenantUser
    user_token: str


class TenantUserRepository(TenantScopedRepository[TenantUser]):
    def __init__(self, session: AsyncSession, tenant_id: int) -> None:
        super().__init__(session=session, model=TenantUser, tenant_id=tenant_id)

    async def get_by_email(self, email: str) -> TenantUser | None:
        result = await self.session.execute(
            self._scoped_select().where(func.lower(TenantUser.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_active_by_token(self, user_token: str) -> TenantUser | None:
        result = await self.session.execute(
            self._scoped_select().where(
                TenantUser.api_token_hash == hash_secret(user_token),
                TenantUser.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def record_login(self, user: TenantUser, now: datetime | None = None) -> TenantUser:
        user.last_login = now or utcnow()
        await self.session.flush()
        return user

    async def _unused_user_token(self) -> str:
        for _ in range(settings.key_generation_attempts):
            user_token = generate_user_token()
            existing = await self.session.scalar(
                select(TenantUser.id).where(TenantUser.api_token_hash == hash_secret(user_token))
            )
            if existing is None:
                return user_token
        raise InternalError("Could not allocate a unique user token")

    async def add_user(
        self,
        email: str,
        *,
        role: str = "user",
        permissions: Iterable[str] = (),
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> IssuedUser:
        normalized_email = email.strip().lower()
        normalized_role = normalize_role(role)
        if normalized_role not in ROLE_HIERARCHY:
            raise InvalidInputError(f"Unknown role: {role!r}")
        if await self.get_by_email(normalized_email) is not None:
            raise DuplicateNameError("A user with this email already exists for the tenant")

        user_token = await self._unused_user_token()
        try:
            user = await self.create(
                email=normalized_email,
                role=normalized_role,
                permissions=sorted(set(permissions)),
                first_name=first_name,
                last_name=last_name,
                api_token_hash=hash_secret(user_token),
                is_active=True,
            )
        except IntegrityError as exc:
            raise DuplicateNameError("A user with this email already exists for the tenant") from exc
        return IssuedUser(user=user, user_token=user_token)
