from typing import FrozenSet, Mapping, Optional, Union

from core.permissions import (
    ROLE_PERMISSIONS,
    PAGE_RESOURCES,
    SPECIAL_PERMISSIONS,
    PUBLIC_PATHS,
)
from models.enums import Role, Resource, Action


RoleLike = Union[Role, str, None]

ACCESS_DENIED_MESSAGES = {
    Role.RESIDENT: "This feature is not available to residents.",
    Role.SUPERVISOR: "You do not have the permissions required to access this section.",
    Role.ADMIN: "Only super administrators can access this feature.",
    Role.SUPER_ADMIN: "Access denied.",
}
DEFAULT_DENIED_MESSAGE = "Access denied."

ROLE_DISPLAY_NAMES = {
    Role.SUPER_ADMIN: "Super Administrator",
    Role.ADMIN: "Administrator",
    Role.SUPERVISOR: "Supervisor",
    Role.RESIDENT: "Resident",
}
GUEST_DISPLAY_NAME = "Guest"

ASSIGNABLE_ROLES = {
    Role.SUPER_ADMIN: frozenset({Role.ADMIN, Role.SUPERVISOR, Role.RESIDENT}),
    Role.ADMIN: frozenset({Role.SUPERVISOR, Role.RESIDENT}),
}


# -----------------------------------------------------
# Resolver
# -----------------------------------------------------
class PermissionResolver:
    """
    Single source of truth for every authorization decision.

    All inputs are tolerant: unknown roles, resources or actions resolve
    to a deny on the matrix path and never raise.
    """

    def __init__(
        self,
        matrix: Mapping[Role, Mapping[Resource, FrozenSet[Action]]] = ROLE_PERMISSIONS,
        page_resources: Mapping[str, Resource] = PAGE_RESOURCES,
    ):
        self.matrix = matrix
        self.page_resources = page_resources

    def get_available_actions(self, role: RoleLike, resource) -> FrozenSet[Action]:
        """Literal configured action set; empty when not configured."""
        role = Role.parse(role)
        resource = Resource.parse(resource)
        if role is None or resource is None:
            return frozenset()
        return frozenset(self.matrix.get(role, {}).get(resource, frozenset()))

    def has_permission(self, role: RoleLike, resource, action) -> bool:
        role = Role.parse(role)

        # Super admin = master key, regardless of the matrix
        if role is Role.SUPER_ADMIN:
            return True

        action = Action.parse(action)
        if action is None:
            return False

        return action in self.get_available_actions(role, resource)

    def resource_for_path(self, path: Optional[str]) -> Optional[Resource]:
        if not isinstance(path, str):
            return None
        return self.page_resources.get(path)

    def can_access_page(self, role: RoleLike, path: Optional[str]) -> bool:
        resource = self.resource_for_path(path)
        if resource is None:
            return True  # unmapped pages are public
        return self.has_permission(role, resource, Action.VIEW)

    def get_assignable_roles(self, role: RoleLike) -> FrozenSet[Role]:
        return ASSIGNABLE_ROLES.get(Role.parse(role), frozenset())

    def can_manage_user(self, actor_role: RoleLike, target_role: RoleLike, action) -> bool:
        actor = Role.parse(actor_role)
        target = Role.parse(target_role)

        if actor is Role.SUPER_ADMIN:
            return True

        # Ceiling rule is checked before the matrix
        if actor is Role.ADMIN and target is Role.SUPER_ADMIN:
            return False

        if actor is Role.ADMIN:
            return self.has_permission(actor, Resource.USERS, action)

        return False

    def get_access_denied_message(self, role: RoleLike, resource=None) -> str:
        return ACCESS_DENIED_MESSAGES.get(Role.parse(role)) or DEFAULT_DENIED_MESSAGE

    def has_special_permission(self, role: RoleLike, permission: str) -> bool:
        if permission not in SPECIAL_PERMISSIONS.values():
            return False
        return Role.parse(role) is Role.SUPER_ADMIN


# Shared instance used by guards, routers and the gate
resolver = PermissionResolver()


# -----------------------------------------------------
# Module-level API
# -----------------------------------------------------
def has_permission(role: RoleLike, resource, action) -> bool:
    return resolver.has_permission(role, resource, action)


def can_access_page(role: RoleLike, path: Optional[str]) -> bool:
    return resolver.can_access_page(role, path)


def get_available_actions(role: RoleLike, resource) -> FrozenSet[Action]:
    return resolver.get_available_actions(role, resource)


def get_assignable_roles(role: RoleLike) -> FrozenSet[Role]:
    return resolver.get_assignable_roles(role)


def can_manage_user(actor_role: RoleLike, target_role: RoleLike, action) -> bool:
    return resolver.can_manage_user(actor_role, target_role, action)


def get_access_denied_message(role: RoleLike, resource=None) -> str:
    return resolver.get_access_denied_message(role, resource)


def has_special_permission(role: RoleLike, permission: str) -> bool:
    return resolver.has_special_permission(role, permission)


def requires_auth(path: str) -> bool:
    """Whether a page needs a signed-in caller at all."""
    return path not in PUBLIC_PATHS


def get_role_display_name(role: RoleLike) -> str:
    return ROLE_DISPLAY_NAMES.get(Role.parse(role), GUEST_DISPLAY_NAME)
