"""
Authorization decisions.

All functions here are pure and never raise: anything unrecognised is
answered with the most restrictive result (False / empty set), so callers
can use them directly as gates.
"""

from starlette.requests import Request

from .roles import (
    ROLE_HIERARCHY,
    ROLE_PERMISSIONS,
    Action,
    Resource,
    Role,
    parse_role,
    role_level,
)


# ── Map URL path segments to resources ───────────────────────────
MODULE_MAP: dict[str, Resource] = {
    "users": Resource.USERS,
    "products": Resource.PRODUCTS,
    "variants": Resource.PRODUCTS,  # /api/v1/variants → products:* permission
    "categories": Resource.PRODUCTS,
    "brands": Resource.PRODUCTS,
    "orders": Resource.ORDERS,
    "customers": Resource.CUSTOMERS,
    "billboards": Resource.BILLBOARDS,
    "marquee": Resource.MARQUEE,
    "analytics": Resource.ANALYTICS,
    "settings": Resource.SETTINGS,
}

# ── Map HTTP methods to RBAC actions ─────────────────────────────
METHOD_TO_ACTION: dict[str, Action] = {
    "GET": Action.READ,
    "POST": Action.CREATE,
    "PUT": Action.UPDATE,
    "PATCH": Action.UPDATE,
    "DELETE": Action.DELETE,
}


def _parse(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


def has_permission(role, resource, action) -> bool:
    """
    Check whether `role` may perform `action` on `resource`.

    analytics only answers "read" and settings only "read"/"update"; any
    other action on those two is False. Unknown inputs are False.
    """
    parsed_role = parse_role(role)
    parsed_resource = _parse(Resource, resource)
    parsed_action = _parse(Action, action)
    if parsed_role is None or parsed_resource is None or parsed_action is None:
        return False

    role_table = ROLE_PERMISSIONS.get(parsed_role)
    if role_table is None:
        return False

    actions = role_table.get(parsed_resource)
    if actions is None:
        return False

    if parsed_resource is Resource.ANALYTICS:
        return parsed_action is Action.READ and actions.get(Action.READ, False) is True

    if parsed_resource is Resource.SETTINGS:
        if parsed_action not in (Action.READ, Action.UPDATE):
            return False
        return actions.get(parsed_action, False) is True

    return actions.get(parsed_action, False) is True


def can_manage_user(acting_role, target_role) -> bool:
    """
    SUPER_ADMIN manages everyone, including other super admins. Every other
    role only manages roles strictly below its own level.
    """
    acting = parse_role(acting_role)
    if acting is None:
        return False
    if acting is Role.SUPER_ADMIN:
        return True
    if parse_role(target_role) is None:
        return False
    return role_level(acting) > role_level(target_role)


def get_available_roles(acting_role) -> set[Role]:
    """Roles the acting role is allowed to grant (strictly lower levels)."""
    level = role_level(acting_role)
    return {role for role, lvl in ROLE_HIERARCHY.items() if lvl < level}


def resolve_permission_from_request(request: Request) -> tuple[Resource, Action] | None:
    """
    Derive the required (resource, action) from the request.

    URL pattern expected:  /api/{version}/{module}/...
    Returns None if the module or method is unknown.
    """
    path_parts = request.url.path.strip("/").split("/")
    # path_parts = ["api", "v1", "products", ...]
    module_name = path_parts[2] if len(path_parts) > 2 else None
    resource = MODULE_MAP.get(module_name) if module_name else None
    action = METHOD_TO_ACTION.get(request.method)

    if not resource or not action:
        return None

    return resource, action


def format_permission(resource, action) -> str:
    resource = getattr(resource, "value", resource)
    action = getattr(action, "value", action)
    return f"{resource}:{action}"
