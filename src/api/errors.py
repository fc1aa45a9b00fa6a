from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

from src.core.errors import CredentialError, PlatformError
from src.core.rate_limit import RateLimitDecision

logger = logging.getLogger(__name__)


def _response_headers(request: Request, exc: PlatformError) -> dict[str, str]:
    headers: dict[str, str] = {}
    decision = getattr(request.state, "rate_limit", None)
    if isinstance(decision, RateLimitDecision):
        headers.update(decision.headers())
    headers.update(exc.headers or {})
    return headers


async def platform_error_handler(request: Request, exc: PlatformError) -> JSONResponse:
    if isinstance(exc, CredentialError):
        logger.info("Rejected credentials on %s %s: %s", request.method, request.url.path, exc.message)
    elif exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.error, request.method, request.url.path, exc.message)
    return JSONResponse(
        exc.to_payload(),
        status_code=exc.status_code,
        headers=_response_headers(request, exc) or None,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PlatformError, platform_error_handler)
