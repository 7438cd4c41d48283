# -------------------------
# Enums
# -------------------------
from .enums import (
    BaseStrEnum,
    Role,
    Resource,
    Action,
    GuardState,
    SessionState,
)

# -------------------------
# Identity / Profile Models
# -------------------------
from .user import (
    Identity,
    TokenPair,
    Profile,
    AdminCreateUser,
    CreateUserResponse,
    DeleteUserResponse,
    SyncResponse,
)
