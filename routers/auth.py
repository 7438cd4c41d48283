from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from core.config import settings
from core.errors import AuthenticationError
from core.identity_provider import IdentityProvider, get_identity_provider
from core.logging_config import logger
from core.profile_store import ProfileStore, get_profile_store
from core.rate_limiter import require_rate_limit, get_rate_limit_identifier, get_client_ip
from core.session import MemoryStorage, Session, SessionContainer
from dependencies.auth import get_bearer_token
from models.enums import SessionState


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# MODELS
# ============================================================
class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class PasswordSetupRequest(BaseModel):
    email: str


class PasswordUpdateRequest(BaseModel):
    password: str


class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None
    name: str
    role: str
    permissions: List[str] = []


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user: SessionUser


def _user_view(session: Session) -> SessionUser:
    return SessionUser(
        id=session.identity_id,
        email=session.email,
        name=session.display_name,
        role=session.role,
        permissions=sorted(session.legacy_permissions),
    )


def _token_response(session: Session) -> TokenResponse:
    return TokenResponse(
        access_token=session.token,
        refresh_token=session.refresh_token,
        user=_user_view(session),
    )


# ============================================================
# Session built from the caller's bearer token
# ============================================================
def get_session_container(
    token: str = Depends(get_bearer_token),
    provider: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
) -> SessionContainer:
    storage = MemoryStorage({settings.AUTH_TOKEN_KEY: token})
    container = SessionContainer(provider, store, storage)
    if container.state is not SessionState.AUTHENTICATED:
        raise AuthenticationError("Invalid or expired authentication token")
    return container


# ============================================================
# LOGIN
# ============================================================
@router.post("/login", response_model=TokenResponse, summary="Authenticate user")
def login(
    payload: LoginRequest,
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
):
    require_rate_limit(
        request,
        identifier=get_rate_limit_identifier(request),
        max_requests=settings.LOGIN_RATE_LIMIT,
        window_seconds=settings.LOGIN_RATE_WINDOW_SECONDS,
    )

    container = SessionContainer(provider, store, MemoryStorage(), auto_restore=False)
    session = container.login(payload.email, payload.password)
    return _token_response(session)


# ============================================================
# REFRESH
# ============================================================
@router.post("/refresh", response_model=TokenResponse, summary="Exchange a refresh token")
def refresh(
    payload: RefreshRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
):
    storage = MemoryStorage({settings.AUTH_REFRESH_TOKEN_KEY: payload.refresh_token})
    container = SessionContainer(provider, store, storage, auto_restore=False)
    return _token_response(container.refresh())


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", response_model=SessionUser, summary="Current authenticated user")
def read_me(container: SessionContainer = Depends(get_session_container)):
    return _user_view(container.session)


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", summary="Invalidate the current session")
def logout(container: SessionContainer = Depends(get_session_container)):
    identity_id = container.session.identity_id
    container.logout()
    logger.info(f"User {identity_id} signed out")
    return {"success": True}


# ============================================================
# INITIATE PASSWORD SETUP / RESET
# ============================================================
@router.post(
    "/initiate-password-setup",
    summary="Send password setup or reset email",
    responses={
        200: {"description": "Email sent (or email not found, for security)"},
        429: {"description": "Rate limit exceeded"},
    },
)
def initiate_password_setup(
    payload: PasswordSetupRequest,
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
):
    """
    Always reports success so the endpoint cannot be used to enumerate emails.
    """
    email = payload.email.strip().lower()

    identifier = get_rate_limit_identifier(request, user_id=email)
    require_rate_limit(
        request,
        identifier=identifier,
        max_requests=settings.PASSWORD_RESET_RATE_LIMIT,
        window_seconds=settings.PASSWORD_RESET_RATE_WINDOW_SECONDS,
    )

    logger.info(f"Password reset attempt: email={email}, ip={get_client_ip(request)}")

    container = SessionContainer(provider, store, MemoryStorage(), auto_restore=False)
    container.reset_password(email)

    return {
        "success": True,
        "message": "If an account exists with this email, a password reset link has been sent.",
    }


# ============================================================
# UPDATE PASSWORD
# ============================================================
@router.post("/update-password", summary="Change the current user's password")
def update_password(
    payload: PasswordUpdateRequest,
    container: SessionContainer = Depends(get_session_container),
):
    container.update_password(payload.password)
    return {"success": True}
