# models/user.py

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


# ===============================================================
# IDENTITY PROVIDER (Supabase Auth) MODELS
# ===============================================================

class Identity(BaseModel):
    """
    Normalized auth.users row as seen through the identity provider.
    """
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    identity_id: Optional[str] = None


# ===============================================================
# PERSISTED PROFILE (users table)
# ===============================================================

class Profile(BaseModel):
    """
    Row of the profiles table. Column names match the persisted
    camelCase schema; role is kept as its raw string value.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    isActive: Optional[bool] = True
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        full = " ".join(p for p in (self.firstName, self.lastName) if p)
        if full:
            return full
        return (self.email or "").split("@")[0]


# ===============================================================
# PRIVILEGED OPERATION PAYLOADS
# ===============================================================

class AdminCreateUser(BaseModel):
    """
    Payload used by admins when creating an account.

    Every field is optional at parse time: missing required values are
    reported as a 400 after the caller has been authorized.
    """
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    role: Optional[str] = None
    password: Optional[str] = None


class CreateUserResponse(BaseModel):
    user: Dict[str, Any]
    message: str = "User created successfully"
    tempPassword: Optional[str] = None


class DeleteUserResponse(BaseModel):
    message: str = "User deleted successfully"
    userId: str
    warning: Optional[str] = None


class SyncResponse(BaseModel):
    message: str = "Synchronization complete"
    synced: int
    errors: List[str] = Field(default_factory=list)
    totalAuthUsers: int
    totalPublicUsers: int
    partialFailure: Optional[str] = None
