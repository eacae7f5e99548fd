from .roles import (
    ROLE_HIERARCHY,
    ROLE_PERMISSIONS,
    Action,
    Resource,
    Role,
    parse_role,
    role_level,
)
from .permissions import (
    can_manage_user,
    get_available_roles,
    has_permission,
    resolve_permission_from_request,
)

__all__ = [
    "ROLE_HIERARCHY",
    "ROLE_PERMISSIONS",
    "Action",
    "Resource",
    "Role",
    "parse_role",
    "role_level",
    "can_manage_user",
    "get_available_roles",
    "has_permission",
    "resolve_permission_from_request",
]
