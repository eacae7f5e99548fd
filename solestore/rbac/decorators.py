"""
Declarative permission decorators for route handlers.

Usage:
    @router.get("/")
    @require_permission(Resource.USERS, Action.READ)
    async def list_users(request: Request):
        ...
"""

from functools import wraps
from fastapi import HTTPException, status
from starlette.requests import Request

from solestore.exceptions import AuthorizationDenied
from .permissions import format_permission, has_permission


def require_permission(resource, action):
    """
    Decorator that checks the current user's role (set by middleware on
    request.state) grants `action` on `resource`.

    Must be applied AFTER the route decorator.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            # Find the Request object from args/kwargs
            request: Request | None = kwargs.get("request")
            if request is None:
                for arg in args:
                    if isinstance(arg, Request):
                        request = arg
                        break

            if request is None:
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Request object not found in handler",
                )

            role = getattr(request.state, "user_role", None)
            if not has_permission(role, resource, action):
                raise AuthorizationDenied(
                    f"Permission denied. Requires: {format_permission(resource, action)}"
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def current_user(request: Request) -> dict:
    """Payload of the verified token, as stored by the middleware."""
    return getattr(request.state, "user", None) or {}


def current_role(request: Request) -> str | None:
    return getattr(request.state, "user_role", None)
