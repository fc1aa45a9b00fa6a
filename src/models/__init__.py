from src.models.api_usage import ApiUsage
from src.models.base import Base, TenantScopedBase, TimestampedBase
from src.models.camera import Camera
from src.models.event import Event
from src.models.hub import Hub
from src.models.hub_license import HubLicense
from src.models.tenant import Tenant
from src.models.tenant_user import TenantUser

__all__ = [
    "Base",
    "TimestampedBase",
    "TenantScopedBase",
    "Tenant",
    "TenantUser",
    "HubLicense",
    "Hub",
    "Camera",
    "Event",
    "ApiUsage",
]
