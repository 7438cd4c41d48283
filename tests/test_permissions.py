# tests/test_permissions.py

"""
Tests for the permission matrix and resolver.
"""

import pytest

from core.permissions import ROLE_PERMISSIONS, PAGE_RESOURCES, SPECIAL_PERMISSIONS
from core.permission_helpers import (
    PermissionResolver,
    can_access_page,
    can_manage_user,
    get_access_denied_message,
    get_assignable_roles,
    get_available_actions,
    get_role_display_name,
    has_permission,
    has_special_permission,
    requires_auth,
)
from models.enums import Action, Resource, Role


NON_SUPER_ROLES = [Role.ADMIN, Role.SUPERVISOR, Role.RESIDENT]


def test_matrix_is_total():
    for role in Role:
        assert set(ROLE_PERMISSIONS[role]) == set(Resource)


def test_matrix_is_immutable():
    with pytest.raises(TypeError):
        ROLE_PERMISSIONS[Role.RESIDENT] = {}
    with pytest.raises(TypeError):
        ROLE_PERMISSIONS[Role.RESIDENT][Resource.USERS] = frozenset({Action.VIEW})


@pytest.mark.parametrize("role", NON_SUPER_ROLES)
def test_has_permission_matches_configured_set_exactly(role):
    for resource in Resource:
        configured = ROLE_PERMISSIONS[role][resource]
        granted = {a for a in Action if has_permission(role, resource, a)}
        assert granted == set(configured)


def test_manage_does_not_imply_other_actions():
    # ADMIN holds CRUD on USERS but not MANAGE; SUPERVISOR has no DELETE on tasks
    assert not has_permission(Role.ADMIN, Resource.USERS, Action.MANAGE)
    assert has_permission(Role.ADMIN, Resource.USERS, Action.DELETE)
    assert not has_permission(Role.SUPERVISOR, Resource.TASKS, Action.DELETE)
    assert has_permission(Role.SUPERVISOR, Resource.TASKS, Action.CREATE)


def test_super_admin_has_every_permission():
    for resource in Resource:
        for action in Action:
            assert has_permission(Role.SUPER_ADMIN, resource, action)


def test_super_admin_override_independent_of_matrix():
    # SETTINGS lists no CREATE for super admin; the override still grants it
    assert Action.CREATE not in ROLE_PERMISSIONS[Role.SUPER_ADMIN][Resource.SETTINGS]
    assert has_permission(Role.SUPER_ADMIN, Resource.SETTINGS, Action.CREATE)

    empty = PermissionResolver(matrix={}, page_resources=PAGE_RESOURCES)
    assert empty.has_permission(Role.SUPER_ADMIN, Resource.USERS, Action.DELETE)
    assert not empty.has_permission(Role.ADMIN, Resource.USERS, Action.VIEW)


@pytest.mark.parametrize("role", list(Role))
def test_can_access_mapped_page_equals_view_permission(role):
    for path, resource in PAGE_RESOURCES.items():
        assert can_access_page(role, path) == has_permission(role, resource, Action.VIEW)


@pytest.mark.parametrize("role", list(Role) + ["GHOST", None])
def test_unmapped_pages_default_allow(role):
    for path in ["/", "/messages", "/houses/42", "/services", "/admin/users/abc", ""]:
        assert can_access_page(role, path)


def test_unknown_role_denied_on_matrix_allowed_on_unmapped_page():
    assert not has_permission("GHOST", Resource.DASHBOARD, Action.VIEW)
    assert not can_access_page("GHOST", "/dashboard")
    assert can_access_page("GHOST", "/messages")


def test_malformed_inputs_never_raise():
    assert has_permission(None, None, None) is False
    assert has_permission(Role.ADMIN, "NOPE", Action.VIEW) is False
    assert has_permission(Role.ADMIN, Resource.HOUSES, "FLY") is False
    assert can_access_page(Role.ADMIN, None) is True
    assert get_available_actions("GHOST", Resource.USERS) == frozenset()


def test_string_values_resolve_like_enums():
    assert has_permission("SUPERVISOR", "HOUSES", "VIEW")
    assert not has_permission("SUPERVISOR", "HOUSES", "DELETE")


def test_supervisor_houses_scenario():
    assert get_available_actions(Role.SUPERVISOR, Resource.HOUSES) == {Action.VIEW, Action.UPDATE}
    assert can_access_page(Role.SUPERVISOR, "/houses")
    assert not has_permission(Role.SUPERVISOR, Resource.HOUSES, Action.DELETE)


def test_assignable_roles():
    assert get_assignable_roles(Role.SUPER_ADMIN) == {Role.ADMIN, Role.SUPERVISOR, Role.RESIDENT}
    assert get_assignable_roles(Role.ADMIN) == {Role.SUPERVISOR, Role.RESIDENT}
    assert Role.SUPER_ADMIN not in get_assignable_roles(Role.ADMIN)
    assert get_assignable_roles(Role.SUPERVISOR) == frozenset()
    assert get_assignable_roles(Role.RESIDENT) == frozenset()
    assert get_assignable_roles("GHOST") == frozenset()


@pytest.mark.parametrize("action", list(Action))
def test_admin_can_never_manage_super_admin(action):
    assert not can_manage_user(Role.ADMIN, Role.SUPER_ADMIN, action)


@pytest.mark.parametrize("target", list(Role))
@pytest.mark.parametrize("action", list(Action))
def test_super_admin_manages_everyone(target, action):
    assert can_manage_user(Role.SUPER_ADMIN, target, action)


def test_admin_manage_falls_back_to_users_matrix():
    assert can_manage_user(Role.ADMIN, Role.RESIDENT, Action.DELETE)
    assert not can_manage_user(Role.ADMIN, Role.RESIDENT, Action.MANAGE)


@pytest.mark.parametrize("actor", [Role.SUPERVISOR, Role.RESIDENT, "GHOST"])
def test_other_roles_cannot_manage_users(actor):
    for action in Action:
        assert not can_manage_user(actor, Role.RESIDENT, action)


@pytest.mark.parametrize("role", list(Role) + ["GHOST", None])
def test_access_denied_message_never_empty(role):
    for resource in Resource:
        assert get_access_denied_message(role, resource)


def test_special_permissions_only_for_super_admin():
    for permission in SPECIAL_PERMISSIONS.values():
        assert has_special_permission(Role.SUPER_ADMIN, permission)
        assert not has_special_permission(Role.ADMIN, permission)
    assert not has_special_permission(Role.SUPER_ADMIN, "launch_rockets")


def test_requires_auth_public_paths():
    assert not requires_auth("/login")
    assert not requires_auth("/")
    assert requires_auth("/dashboard")


def test_role_values_round_trip():
    for role in Role:
        assert Role(role.value) is role
        assert str(role) == role.name
    assert get_role_display_name("GHOST") == "Guest"
