from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]

    @classmethod
    def parse(cls, value):
        """Return the member for ``value`` or None when it is not a known variant."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Caller classification. Values are persisted verbatim in users.role."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    SUPERVISOR = "SUPERVISOR"  # on-site staff
    RESIDENT = "RESIDENT"


# -----------------------------------------------------
# RESOURCE
# -----------------------------------------------------
class Resource(BaseStrEnum):
    """Protected functional areas of the application."""

    USERS = "USERS"
    SETTINGS = "SETTINGS"
    RESIDENTS = "RESIDENTS"
    HOUSES = "HOUSES"
    TASKS = "TASKS"
    DASHBOARD = "DASHBOARD"
    PROFILE = "PROFILE"
    SERVICES = "SERVICES"


# -----------------------------------------------------
# ACTION
# -----------------------------------------------------
class Action(BaseStrEnum):
    """Operation categories. No action implies another."""

    VIEW = "VIEW"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    MANAGE = "MANAGE"


# -----------------------------------------------------
# GUARD STATE
# -----------------------------------------------------
class GuardState(BaseStrEnum):
    CHECKING = "CHECKING"
    ALLOWED = "ALLOWED"
    DENIED = "DENIED"


# -----------------------------------------------------
# SESSION STATE
# -----------------------------------------------------
class SessionState(BaseStrEnum):
    """Lifecycle of the client session container."""

    UNINITIALIZED = "UNINITIALIZED"
    LOADING = "LOADING"
    AUTHENTICATED = "AUTHENTICATED"
    ANONYMOUS = "ANONYMOUS"
