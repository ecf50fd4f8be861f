"""Main FastAPI application for the backup console."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from dotenv import load_dotenv
from fastapi import FastAPI, Request
import logging
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from backup_console.core.config import get_settings
from backup_console.core.errors import DashboardError
from backup_console.core.gates import auth_gate, method_gate
from backup_console.core.logging import setup_logging
from backup_console.core.storage import get_s3_client


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    load_dotenv(override=False)
    setup_logging()
    settings = get_settings()

    if settings.s3_configured:
        # Build the shared client up front instead of on the first request
        get_s3_client()
    else:
        logger.warning("startup_config | BACKUP_S3_BUCKET is not set; backup routes will return 500")
    if not settings.session_secret:
        logger.warning("startup_config | SESSION_SECRET is not set; protected routes will return 500")
    if not settings.allowed_discord_user_id:
        logger.warning("startup_config | ALLOWED_DISCORD_USER_ID is not set; all sign-ins will be denied")

    logger.info("Backup console started | bucket=%s prefix=%s", settings.s3_bucket, settings.s3_prefix)
    yield
    logger.info("Backup console shutdown")


app = FastAPI(
    title="Backup Console API",
    description="Admin dashboard API for database backup archives stored in S3",
    version="0.1.0",
    docs_url="/docs",
    redoc_url=None,
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


class RequestGateMiddleware(BaseHTTPMiddleware):
    """Method gate, then auth gate, ahead of every route."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        rejected = method_gate(request.url.path, request.method)
        if rejected is not None:
            return rejected
        rejected = auth_gate(request, get_settings())
        if rejected is not None:
            return rejected
        return await call_next(request)


app.add_middleware(RequestGateMiddleware)


@app.middleware("http")
async def json_error_boundary(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Last line of defence: nothing leaves the server as an HTML error page."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception("unhandled_error | method=%s path=%s", request.method, request.url.path)
        return JSONResponse(
            {"error": "An unexpected error occurred while processing the request."},
            status_code=500,
        )


@app.exception_handler(DashboardError)
async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed | path=%s status=%s error=%s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(exc.to_body(), status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request.") if errors else "Invalid request."
    return JSONResponse({"error": f"Invalid request: {detail}"}, status_code=400)


# Include routers
from backup_console.api import health, backups, bot, auth

# Mount health endpoints unversioned for infra probes (/health, /ready)
app.include_router(health.router)

app.include_router(backups.router, prefix="/api")
app.include_router(bot.router, prefix="/api")
app.include_router(auth.router, prefix="/api")


@app.get("/", include_in_schema=False)
async def root() -> RedirectResponse:
    """Signed-in operators land on the API docs."""
    return RedirectResponse(url="/docs")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
