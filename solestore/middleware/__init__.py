"""
Session + permission middleware.

Runs on every request (except PUBLIC_ROUTES):
  1. Decode JWT → extract sub, role
  2. Set request.state.user, request.state.user_role
  3. Check the RBAC matrix for the target route
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from solestore.auth.helpers import decode_access_token
from solestore.rbac.permissions import (
    format_permission,
    has_permission,
    resolve_permission_from_request,
)
from solestore.rbac.roles import parse_role
from solestore.utils import Logger, error_response

logger = Logger("auth")

# Routes that skip all auth / permission checks
PUBLIC_ROUTES = [
    "/health",
    "/openapi.json",
    "/api/docs",
    "/redoc",
]


class AuthPermissionMiddleware(BaseHTTPMiddleware):
    """Single middleware that handles JWT verification + RBAC enforcement."""

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin", "*")

        # ── Preflight ────────────────────────────────────────────
        if request.method == "OPTIONS":
            return JSONResponse(
                status_code=200,
                content={"message": "CORS preflight ok"},
                headers={
                    "Access-Control-Allow-Origin": origin,
                    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,PATCH,OPTIONS",
                    "Access-Control-Allow-Headers": "Authorization,Content-Type",
                    "Access-Control-Allow-Credentials": "true",
                },
            )

        path = request.url.path

        # ── Skip public routes ───────────────────────────────────
        if any(path.endswith(route) for route in PUBLIC_ROUTES):
            return await call_next(request)

        # ── Extract & decode JWT ─────────────────────────────────
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return error_response("Missing Authorization header", code=401)

        if not auth_header.startswith("Bearer "):
            return error_response(
                "Invalid token format. Expected 'Bearer <token>'", code=401
            )

        token = auth_header.split(" ", 1)[1].strip()

        try:
            payload = decode_access_token(token)
        except Exception as e:
            return error_response(f"Invalid or expired token: {e}", code=401)

        # ── Populate request.state ───────────────────────────────
        # An unknown role is kept as None: it is granted nothing.
        role = parse_role(payload.get("role"))

        request.state.user = payload
        request.state.user_role = role

        # ── RBAC check ───────────────────────────────────────────
        required = resolve_permission_from_request(request)
        if required and not has_permission(role, *required):
            permission = format_permission(*required)
            logger.warning(
                f"Denied {request.method} {path} for user={payload.get('sub')} "
                f"role={payload.get('role')} (requires {permission})"
            )
            return error_response(f"Permission denied. Requires: {permission}", code=403)

        return await call_next(request)
