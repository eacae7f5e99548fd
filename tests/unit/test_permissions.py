"""Tests for the role permission matrix and the user-management hierarchy."""

import pytest

from solestore.rbac import (
    ROLE_PERMISSIONS,
    Action,
    Resource,
    Role,
    can_manage_user,
    get_available_roles,
    has_permission,
    role_level,
)


class TestPermissionMatrix:
    def test_matrix_is_total(self):
        for role in Role:
            assert set(ROLE_PERMISSIONS[role]) == set(Resource)

    def test_matrix_cannot_be_mutated(self):
        with pytest.raises(TypeError):
            ROLE_PERMISSIONS[Role.STAFF][Resource.USERS][Action.READ] = True
        with pytest.raises(TypeError):
            ROLE_PERMISSIONS[Role.STAFF] = {}

    def test_reduced_action_sets(self):
        for role in Role:
            assert set(ROLE_PERMISSIONS[role][Resource.ANALYTICS]) == {Action.READ}
            assert set(ROLE_PERMISSIONS[role][Resource.SETTINGS]) == {Action.READ, Action.UPDATE}


class TestHasPermission:
    @pytest.mark.parametrize("resource", [r for r in Resource if r not in (Resource.ANALYTICS, Resource.SETTINGS)])
    @pytest.mark.parametrize("action", list(Action))
    def test_super_admin_has_full_crud(self, resource, action):
        assert has_permission(Role.SUPER_ADMIN, resource, action) is True

    def test_staff_is_read_mostly(self):
        assert has_permission(Role.STAFF, Resource.PRODUCTS, Action.READ)
        assert not has_permission(Role.STAFF, Resource.PRODUCTS, Action.CREATE)
        assert has_permission(Role.STAFF, Resource.ORDERS, Action.UPDATE)
        assert not has_permission(Role.STAFF, Resource.USERS, Action.READ)

    def test_manager_cannot_delete(self):
        assert has_permission(Role.MANAGER, Resource.PRODUCTS, Action.UPDATE)
        assert not has_permission(Role.MANAGER, Resource.PRODUCTS, Action.DELETE)
        assert not has_permission(Role.MANAGER, Resource.USERS, Action.CREATE)

    @pytest.mark.parametrize("action", [Action.CREATE, Action.UPDATE, Action.DELETE])
    def test_analytics_only_answers_read(self, action):
        assert has_permission(Role.SUPER_ADMIN, Resource.ANALYTICS, Action.READ)
        assert has_permission(Role.SUPER_ADMIN, Resource.ANALYTICS, action) is False

    @pytest.mark.parametrize("action", [Action.CREATE, Action.DELETE])
    def test_settings_only_answers_read_and_update(self, action):
        assert has_permission(Role.SUPER_ADMIN, Resource.SETTINGS, Action.UPDATE)
        assert has_permission(Role.SUPER_ADMIN, Resource.SETTINGS, action) is False

    def test_only_super_admin_updates_settings(self):
        assert has_permission(Role.SUPER_ADMIN, Resource.SETTINGS, Action.UPDATE)
        assert not has_permission(Role.ADMIN, Resource.SETTINGS, Action.UPDATE)
        assert has_permission(Role.ADMIN, Resource.SETTINGS, Action.READ)

    def test_accepts_raw_strings(self):
        assert has_permission("ADMIN", "users", "delete") is True
        assert has_permission("manager", "products", "read") is True

    @pytest.mark.parametrize(
        "role,resource,action",
        [
            ("OWNER", "products", "read"),
            (None, "products", "read"),
            ("ADMIN", "warehouses", "read"),
            ("ADMIN", "products", "archive"),
            (42, ["products"], {"read"}),
            ("", "", ""),
        ],
    )
    def test_unknown_inputs_fail_closed(self, role, resource, action):
        assert has_permission(role, resource, action) is False

    def test_is_deterministic(self):
        results = {has_permission(Role.MANAGER, Resource.ORDERS, Action.CREATE) for _ in range(5)}
        assert results == {True}


class TestCanManageUser:
    @pytest.mark.parametrize("target", list(Role))
    def test_super_admin_manages_everyone(self, target):
        assert can_manage_user(Role.SUPER_ADMIN, target) is True

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.MANAGER, Role.STAFF])
    def test_no_peer_management(self, role):
        assert can_manage_user(role, role) is False

    def test_only_strictly_lower_roles(self):
        assert can_manage_user(Role.ADMIN, Role.MANAGER)
        assert can_manage_user(Role.ADMIN, Role.STAFF)
        assert not can_manage_user(Role.ADMIN, Role.SUPER_ADMIN)
        assert can_manage_user(Role.MANAGER, Role.STAFF)
        assert not can_manage_user(Role.MANAGER, Role.ADMIN)
        assert not can_manage_user(Role.STAFF, Role.MANAGER)

    def test_unknown_roles_fail_closed(self):
        assert can_manage_user("OWNER", Role.STAFF) is False
        assert can_manage_user(Role.ADMIN, "CUSTOMER") is False
        assert can_manage_user(None, None) is False


class TestAvailableRoles:
    def test_staff_grants_nothing(self):
        assert get_available_roles(Role.STAFF) == set()

    def test_super_admin_grants_all_but_itself(self):
        assert get_available_roles(Role.SUPER_ADMIN) == {Role.STAFF, Role.MANAGER, Role.ADMIN}

    def test_admin_and_manager(self):
        assert get_available_roles(Role.ADMIN) == {Role.STAFF, Role.MANAGER}
        assert get_available_roles(Role.MANAGER) == {Role.STAFF}

    def test_unknown_role_grants_nothing(self):
        assert get_available_roles("GUEST") == set()
        assert role_level("GUEST") == 0
