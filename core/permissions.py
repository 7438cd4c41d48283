# ============================================
# CENTRALIZED ROLE → RESOURCE → ACTIONS MATRIX
# ============================================
from types import MappingProxyType

from models.enums import Role, Resource, Action


V, C, U, D, M = Action.VIEW, Action.CREATE, Action.UPDATE, Action.DELETE, Action.MANAGE

_MATRIX = {

    # =====================================================
    # SUPER ADMIN: Full access to everything
    # =====================================================
    Role.SUPER_ADMIN: {
        Resource.USERS: {V, C, U, D, M},
        Resource.SETTINGS: {V, U, M},
        Resource.RESIDENTS: {V, C, U, D, M},
        Resource.HOUSES: {V, C, U, D, M},
        Resource.TASKS: {V, C, U, D, M},
        Resource.DASHBOARD: {V},
        Resource.PROFILE: {V, U},
        Resource.SERVICES: {V, C, U, D, M},
    },

    # =====================================================
    # ADMIN: no MANAGE on users, no settings
    # =====================================================
    Role.ADMIN: {
        Resource.USERS: {V, C, U, D},
        Resource.SETTINGS: set(),
        Resource.RESIDENTS: {V, C, U, D, M},
        Resource.HOUSES: {V, C, U, D, M},
        Resource.TASKS: {V, C, U, D, M},
        Resource.DASHBOARD: {V},
        Resource.PROFILE: {V, U},
        Resource.SERVICES: {V, C, U, D, M},
    },

    # =====================================================
    # SUPERVISOR: on-site staff, no deletes
    # =====================================================
    Role.SUPERVISOR: {
        Resource.USERS: set(),
        Resource.SETTINGS: set(),
        Resource.RESIDENTS: {V, U},
        Resource.HOUSES: {V, U},
        Resource.TASKS: {V, C, U},
        Resource.DASHBOARD: {V},
        Resource.PROFILE: {V, U},
        Resource.SERVICES: {V, C, U},
    },

    # =====================================================
    # RESIDENT: dashboard, own profile, rental requests
    # =====================================================
    Role.RESIDENT: {
        Resource.USERS: set(),
        Resource.SETTINGS: set(),
        Resource.RESIDENTS: set(),
        Resource.HOUSES: set(),
        Resource.TASKS: set(),
        Resource.DASHBOARD: {V},
        Resource.PROFILE: {V, U},
        Resource.SERVICES: {V, C},
    },
}

# Frozen so nothing can mutate the matrix after import
ROLE_PERMISSIONS = MappingProxyType({
    role: MappingProxyType({
        resource: frozenset(_MATRIX.get(role, {}).get(resource, ()))
        for resource in Resource
    })
    for role in Role
})


# ============================================
# PAGE PATH → RESOURCE
# Unmapped paths are public (default allow).
# ============================================
PAGE_RESOURCES = MappingProxyType({
    "/admin/users": Resource.USERS,
    "/settings": Resource.SETTINGS,
    "/residents": Resource.RESIDENTS,
    "/houses": Resource.HOUSES,
    "/tasks": Resource.TASKS,
    "/dashboard": Resource.DASHBOARD,
    "/profile": Resource.PROFILE,
    "/services/rental": Resource.SERVICES,
})


# ============================================
# SPECIAL PERMISSIONS (SUPER_ADMIN only)
# ============================================
SPECIAL_PERMISSIONS = MappingProxyType({
    "CREATE_SUPER_ADMIN": "create_super_admin",
    "MANAGE_SYSTEM_SETTINGS": "manage_system_settings",
    "VIEW_ALL_AUDIT_LOGS": "view_all_audit_logs",
})

PUBLIC_PATHS = frozenset({"/login", "/forgot-password", "/reset-password", "/", "/about"})

# Roles allowed through the server authorization gate
PRIVILEGED_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})

# Wildcard entry in the legacy flat permission list
LEGACY_WILDCARD = "all"
