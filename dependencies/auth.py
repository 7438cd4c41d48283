from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from core.errors import AuthenticationError, AuthorizationError, extract_supabase_error
from core.identity_provider import IdentityProvider, get_identity_provider
from core.logging_config import logger
from core.permissions import PRIVILEGED_ROLES
from core.profile_store import ProfileStore, get_profile_store


# auto_error=False so a missing header maps to our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current caller (server side identity)
# ============================================================
class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    role: Optional[str] = None


# ============================================================
# Step 1: bearer token
# ============================================================
def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or (credentials.scheme or "").lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("Missing authentication token")
    return credentials.credentials


# ============================================================
# Step 2 + 3: verify token, load persisted role
# ============================================================
def get_current_user(
    token: str = Depends(get_bearer_token),
    provider: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
) -> CurrentUser:
    identity = provider.verify_token(token)

    try:
        role = store.get_role(identity.id)
    except Exception as e:
        logger.error(f"Role lookup failed for {identity.id}: {extract_supabase_error(e)}")
        role = None

    return CurrentUser(id=identity.id, email=identity.email, role=role)


# ============================================================
# ROLE CHECKER (basic role list guard)
# ============================================================
def requires_role(allowed_roles):
    allowed = {str(r) for r in allowed_roles}

    def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            logger.warning(
                f"User {current_user.email} ({current_user.id}) with role "
                f"{current_user.role} refused; requires one of {sorted(allowed)}"
            )
            raise AuthorizationError("Insufficient permissions")
        return current_user

    return checker


# Privileged account-management gate (SUPER_ADMIN / ADMIN)
require_privileged_user = requires_role(PRIVILEGED_ROLES)
