from src.api.routes.dealer import router as dealer_router
from src.api.routes.hub import router as hub_router
from src.api.routes.tenant import router as tenant_router
from src.api.routes.tenants import router as tenants_router

__all__ = [
    "dealer_router",
    "hub_router",
    "tenant_router",
    "tenants_router",
]
