"""
SoleStore Admin — main application.

Assembles all packages: config, middleware, rbac, and the admin modules.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from solestore.config import settings, db_manager
from solestore.exceptions import SoleStoreError
from solestore.middleware import AuthPermissionMiddleware
from solestore.utils import Logger, error_response, set_log_level

# ── Route imports ────────────────────────────────────────────────
from solestore.analytics import analytics_router
from solestore.billboards import billboards_router
from solestore.catalog import brands_router, categories_router
from solestore.customers import customers_router
from solestore.marquee import marquee_router
from solestore.orders import orders_router
from solestore.profile import profile_router
from solestore.products import products_router
from solestore.store_settings import settings_router
from solestore.users import users_router
from solestore.variants import variants_router, variant_tools_router

logger = Logger("request")


# ── Request Logging Middleware ───────────────────────────────────
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request: method, path, status code, and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "unknown"

        logger.info(f"--> {method} {path} (from {client})")

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = round((time.time() - start) * 1000, 2)
            logger.exception(f"<-- {method} {path} | 500 | {duration}ms | {exc}")
            raise

        duration = round((time.time() - start) * 1000, 2)
        status = response.status_code

        if status >= 500:
            logger.error(f"<-- {method} {path} | {status} | {duration}ms")
        elif status >= 400:
            logger.warning(f"<-- {method} {path} | {status} | {duration}ms")
        else:
            logger.info(f"<-- {method} {path} | {status} | {duration}ms")

        return response


# ── Lifespan ─────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    await db_manager.connect()
    await db_manager.ensure_indexes()
    yield
    db_manager.close()


# ── App factory ──────────────────────────────────────────────────
def create_app() -> FastAPI:
    set_log_level("DEBUG" if settings.debug else "INFO")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Admin API for the SoleStore footwear shop",
        docs_url="/api/docs",
        lifespan=lifespan,
    )

    # ── Auth + RBAC middleware (innermost) ───────────────────
    app.add_middleware(AuthPermissionMiddleware)

    # ── Request logging (runs on every request) ──────────────
    app.add_middleware(RequestLoggingMiddleware)

    # ── CORS (outermost) ─────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allowed_methods,
        allow_headers=settings.cors_allowed_headers,
    )

    # ── Domain errors ────────────────────────────────────────
    @app.exception_handler(SoleStoreError)
    async def domain_exception_handler(request: Request, exc: SoleStoreError):
        return error_response(exc.detail, code=exc.status_code, data=exc.data)

    # ── Global exception handler ─────────────────────────────
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {
                    "code": 500,
                    "message": str(exc) if settings.debug else "Internal server error",
                },
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    # ── Routes ───────────────────────────────────────────────
    v = settings.api_version  # "v1"

    app.include_router(users_router, prefix=f"/api/{v}/users", tags=["Users"])
    app.include_router(profile_router, prefix=f"/api/{v}/profile", tags=["Profile"])
    app.include_router(products_router, prefix=f"/api/{v}/products", tags=["Products"])
    app.include_router(variants_router, prefix=f"/api/{v}/products", tags=["Product Variants"])
    app.include_router(variant_tools_router, prefix=f"/api/{v}/variants", tags=["Product Variants"])
    app.include_router(categories_router, prefix=f"/api/{v}/categories", tags=["Categories"])
    app.include_router(brands_router, prefix=f"/api/{v}/brands", tags=["Brands"])
    app.include_router(orders_router, prefix=f"/api/{v}/orders", tags=["Orders"])
    app.include_router(customers_router, prefix=f"/api/{v}/customers", tags=["Customers"])
    app.include_router(billboards_router, prefix=f"/api/{v}/billboards", tags=["Billboards"])
    app.include_router(marquee_router, prefix=f"/api/{v}/marquee", tags=["Marquee"])
    app.include_router(analytics_router, prefix=f"/api/{v}/analytics", tags=["Analytics"])
    app.include_router(settings_router, prefix=f"/api/{v}/settings", tags=["Settings"])

    # ── Health check ─────────────────────────────────────────
    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
            "database": db_manager.is_connected,
        }

    return app


# ── Create the app instance ──────────────────────────────────────
app = create_app()
