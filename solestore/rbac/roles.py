"""
Role definitions and permission matrix.

ROLE_PERMISSIONS maps  Role -> Resource -> Action -> bool.
  - Resources : users, products, orders, customers, billboards, marquee,
                analytics, settings
  - Actions   : create, read, update, delete
  - analytics only knows "read", settings only "read" and "update".

The table is built once at import time and exposed through read-only
mappings; there is no API to change it at runtime.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Role(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"


class Resource(str, Enum):
    USERS = "users"
    PRODUCTS = "products"
    ORDERS = "orders"
    CUSTOMERS = "customers"
    BILLBOARDS = "billboards"
    MARQUEE = "marquee"
    ANALYTICS = "analytics"
    SETTINGS = "settings"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


# Higher number = more authority
ROLE_HIERARCHY: Mapping[Role, int] = MappingProxyType(
    {
        Role.STAFF: 1,
        Role.MANAGER: 2,
        Role.ADMIN: 3,
        Role.SUPER_ADMIN: 4,
    }
)


def _crud(create: bool, read: bool, update: bool, delete: bool) -> Mapping[Action, bool]:
    return MappingProxyType(
        {
            Action.CREATE: create,
            Action.READ: read,
            Action.UPDATE: update,
            Action.DELETE: delete,
        }
    )


def _read_only(read: bool) -> Mapping[Action, bool]:
    return MappingProxyType({Action.READ: read})


def _read_update(read: bool, update: bool) -> Mapping[Action, bool]:
    return MappingProxyType({Action.READ: read, Action.UPDATE: update})


_FULL = _crud(True, True, True, True)
_NO_DELETE = _crud(True, True, True, False)
_READ = _crud(False, True, False, False)
_NONE = _crud(False, False, False, False)

ROLE_PERMISSIONS: Mapping[Role, Mapping[Resource, Mapping[Action, bool]]] = MappingProxyType(
    {
        Role.SUPER_ADMIN: MappingProxyType(
            {
                Resource.USERS: _FULL,
                Resource.PRODUCTS: _FULL,
                Resource.ORDERS: _FULL,
                Resource.CUSTOMERS: _FULL,
                Resource.BILLBOARDS: _FULL,
                Resource.MARQUEE: _FULL,
                Resource.ANALYTICS: _read_only(True),
                Resource.SETTINGS: _read_update(True, True),
            }
        ),
        Role.ADMIN: MappingProxyType(
            {
                Resource.USERS: _FULL,
                Resource.PRODUCTS: _FULL,
                Resource.ORDERS: _FULL,
                Resource.CUSTOMERS: _FULL,
                Resource.BILLBOARDS: _FULL,
                Resource.MARQUEE: _FULL,
                Resource.ANALYTICS: _read_only(True),
                Resource.SETTINGS: _read_update(True, False),
            }
        ),
        Role.MANAGER: MappingProxyType(
            {
                Resource.USERS: _READ,
                Resource.PRODUCTS: _NO_DELETE,
                Resource.ORDERS: _NO_DELETE,
                Resource.CUSTOMERS: _NO_DELETE,
                Resource.BILLBOARDS: _NO_DELETE,
                Resource.MARQUEE: _NO_DELETE,
                Resource.ANALYTICS: _read_only(True),
                Resource.SETTINGS: _read_update(True, False),
            }
        ),
        Role.STAFF: MappingProxyType(
            {
                Resource.USERS: _NONE,
                Resource.PRODUCTS: _READ,
                Resource.ORDERS: _crud(False, True, True, False),
                Resource.CUSTOMERS: _READ,
                Resource.BILLBOARDS: _READ,
                Resource.MARQUEE: _READ,
                Resource.ANALYTICS: _read_only(False),
                Resource.SETTINGS: _read_update(False, False),
            }
        ),
    }
)


def parse_role(value) -> Role | None:
    """Coerce a role name (any case) or Role into a Role, None if unknown."""
    if isinstance(value, Role):
        return value
    if isinstance(value, str):
        try:
            return Role(value.strip().upper())
        except ValueError:
            return None
    return None


def role_level(role) -> int:
    """Hierarchy level of a role, 0 when the role is unknown."""
    parsed = parse_role(role)
    if parsed is None:
        return 0
    return ROLE_HIERARCHY.get(parsed, 0)
