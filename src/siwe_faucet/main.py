# src/siwe_faucet/main.py
"""Main entry point for the SIWE faucet application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from siwe_faucet import __version__
from siwe_faucet.api import auth_router, faucet_router, system_router
from siwe_faucet.core.settings import settings
from siwe_faucet.schemas.common import ErrorResponse
from siwe_faucet.services.errors import AlreadyClaimed, AuthError, FaucetError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND_MESSAGE = "Route not found"

# Initialize FastAPI app
app = FastAPI(
    title="SIWE Faucet API",
    description="Sign-In-With-Ethereum authenticated token faucet",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include API routers
app.include_router(auth_router)
app.include_router(faucet_router)
app.include_router(system_router)

_STATUS_BY_CODE = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "EXTERNAL_SERVICE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error(status_code: int, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={**ErrorResponse(message=message).model_dump(), **extra},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors in the `{success, message}` envelope."""
    message = str(exc.detail)
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = ROUTE_NOT_FOUND_MESSAGE
    response = _error(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer malformed or missing request fields with 400."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return _error(status.HTTP_400_BAD_REQUEST, "; ".join(problems) or "Invalid request")


@app.exception_handler(FaucetError)
async def faucet_exception_handler(request: Request, exc: FaucetError) -> JSONResponse:
    """Map service errors that reach the HTTP layer to status codes."""
    if isinstance(exc, AuthError):
        return _error(status.HTTP_401_UNAUTHORIZED, "Authentication failed")
    if isinstance(exc, AlreadyClaimed):
        return _error(status.HTTP_409_CONFLICT, exc.message, alreadyClaimed=True)
    status_code = _STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return _error(status_code, exc.message)


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("%s %s starting", settings.app_name, __version__)
    if settings.chain_configured:
        logger.warning("The faucet private key is loaded in this process; keep it off shared hosts.")
    else:
        logger.warning("CONTRACT_ADDRESS or PRIVATE_KEY is not set; faucet endpoints will fail.")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "description": "Sign-In-With-Ethereum authenticated token faucet",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("siwe_faucet.main:app", host=settings.host, port=settings.port, reload=settings.debug)
