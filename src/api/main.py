import logging

from fastapi import FastAPI

from src.api.errors import register_error_handlers
from src.api.routes.dealer import router as dealer_router
from src.api.routes.hub import router as hub_router
from src.api.routes.tenant import router as tenant_router
from src.api.routes.tenants import router as tenants_router
from src.core.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(title="Hubguard Tenant API")
register_error_handlers(app)
app.include_router(tenants_router, prefix="/api/v1")
app.include_router(tenant_router, prefix="/api/v1")
app.include_router(hub_router, prefix="/api/v1")
app.include_router(dealer_router, prefix="/api/v1")


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    return {"status": "ok"}
