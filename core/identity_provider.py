# core/identity_provider.py

from typing import Callable, List, Optional

from core.errors import AuthenticationError, extract_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client, get_public_client
from models.user import Identity, TokenPair


LIST_PAGE_SIZE = 1000


def _to_identity(user) -> Identity:
    return Identity(
        id=str(user.id),
        email=getattr(user, "email", None),
        user_metadata=getattr(user, "user_metadata", None) or {},
    )


def extract_user_list(result):
    """Normalize the shapes returned by auth.admin.list_users()."""
    if isinstance(result, list):
        return result
    if isinstance(result, dict) and "users" in result:
        return result["users"]
    users_attr = getattr(result, "users", None)
    if users_attr is not None:
        return users_attr
    return []


# ============================================================
# Identity provider (Supabase GoTrue)
# ============================================================
class IdentityProvider:
    """
    Boundary to the credential provider. Only the contract is used:
    verify token → identity, issue / refresh tokens, admin account CRUD.
    """

    def __init__(
        self,
        admin_client_factory: Callable = get_supabase_client,
        public_client_factory: Callable = get_public_client,
    ):
        self._admin_client_factory = admin_client_factory
        self._public_client_factory = public_client_factory

    # -------------------------------------------------
    # Clients
    # -------------------------------------------------
    def _admin(self):
        client = self._admin_client_factory()
        if client is None:
            raise RuntimeError("Supabase client not configured")
        return client

    def _public(self):
        client = self._public_client_factory()
        if client is None:
            raise RuntimeError("Supabase client not configured")
        return client

    # -------------------------------------------------
    # Token verification / issuance
    # -------------------------------------------------
    def verify_token(self, token: str) -> Identity:
        if not token:
            raise AuthenticationError("Missing authentication token")

        client = self._admin()
        try:
            resp = client.auth.get_user(token)
        except Exception as e:
            logger.warning(f"Token verification failed: {extract_supabase_error(e)}")
            raise AuthenticationError("Invalid authentication token")

        if not resp or not getattr(resp, "user", None):
            raise AuthenticationError("Invalid authentication token")

        return _to_identity(resp.user)

    def _token_pair(self, resp) -> TokenPair:
        session = getattr(resp, "session", None)
        if not session or not getattr(session, "access_token", None):
            raise AuthenticationError("Invalid email or password")
        user = getattr(resp, "user", None) or getattr(session, "user", None)
        return TokenPair(
            access_token=session.access_token,
            refresh_token=getattr(session, "refresh_token", None),
            identity_id=str(user.id) if user is not None else None,
        )

    def sign_in(self, email: str, password: str) -> TokenPair:
        client = self._public()
        try:
            resp = client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
            raise AuthenticationError("Invalid email or password")
        return self._token_pair(resp)

    def refresh(self, refresh_token: str) -> TokenPair:
        client = self._public()
        try:
            resp = client.auth.refresh_session(refresh_token)
        except Exception as e:
            logger.warning(f"Token refresh failed: {extract_supabase_error(e)}")
            raise AuthenticationError("Session expired")
        return self._token_pair(resp)

    def sign_out(self, token: Optional[str] = None) -> None:
        if token:
            self._admin().auth.admin.sign_out(token)
        else:
            self._public().auth.sign_out()

    def reset_password_for_email(self, email: str) -> None:
        self._public().auth.reset_password_for_email(email)

    def update_password(self, identity_id: str, new_password: str) -> None:
        self._admin().auth.admin.update_user_by_id(identity_id, {"password": new_password})

    # -------------------------------------------------
    # Admin account management
    # -------------------------------------------------
    def list_identities_page(self, page: int = 1, per_page: Optional[int] = None) -> List[Identity]:
        raw = self._admin().auth.admin.list_users(page=page, per_page=per_page or LIST_PAGE_SIZE)
        return [_to_identity(u) for u in extract_user_list(raw)]

    def list_identities(self) -> List[Identity]:
        identities: List[Identity] = []
        page = 1
        while True:
            batch = self.list_identities_page(page=page)
            identities.extend(batch)
            if len(batch) < LIST_PAGE_SIZE:
                return identities
            page += 1

    def create_identity(self, email: str, password: str, metadata: Optional[dict] = None) -> Identity:
        resp = self._admin().auth.admin.create_user({
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": metadata or {},
        })
        user = getattr(resp, "user", None)
        if user is None:
            raise RuntimeError("Identity provider returned no user")
        return _to_identity(user)

    def delete_identity(self, identity_id: str) -> None:
        self._admin().auth.admin.delete_user(identity_id)


identity_provider = IdentityProvider()


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency (overridable in tests)."""
    return identity_provider
