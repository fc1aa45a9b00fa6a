from src.core.repositories.base import TenantScopedRepository
from src.core.repositories.cameras import CameraRepository
from src.core.repositories.events import EventRepository
from src.core.repositories.hub_licenses import (
    ActiveLicense,
    HubLicenseDirectory,
    HubLicenseDraft,
    IssuedLicense,
)
from src.core.repositories.hubs import HubRepository
from src.core.repositories.tenant_users import IssuedUser, TenantUserRepository
from src.core.repositories.tenants import DirectoryStats, IssuedTenant, TenantDirectory, TenantDraft

__all__ = [
    "TenantScopedRepository",
    "TenantDirectory",
    "TenantDraft",
    "IssuedTenant",
    "DirectoryStats",
    "TenantUserRepository",
    "IssuedUser",
    "HubLicenseDirectory",
    "HubLicenseDraft",
    "IssuedLicense",
    "ActiveLicense",
    "HubRepository",
    "CameraRepository",
    "EventRepository",
]
