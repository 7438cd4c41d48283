# core/session.py

"""
Session state container.

Holds the current caller (or none) as an immutable ``Session`` and moves
through UNINITIALIZED → LOADING → AUTHENTICATED | ANONYMOUS. Every change
replaces the (state, session) pair in one assignment and is published to
subscribers, so a guard never observes a half-updated session.
"""

import json
import time
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from jose import jwt, JWTError
from pydantic import BaseModel, ConfigDict

from core.config import settings
from core.errors import AuthenticationError, ValidationError, extract_supabase_error
from core.identity_provider import IdentityProvider
from core.logging_config import logger
from core.profile_store import ProfileStore
from models.enums import Role, SessionState
from models.user import Identity, TokenPair


# ============================================================
# Client-persisted storage
# ============================================================
class MemoryStorage:
    """Key/value storage living for the lifetime of the object."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class FileStorage(MemoryStorage):
    """JSON file backed storage, rewritten on every change."""

    def __init__(self, path):
        self.path = Path(path)
        data = {}
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text() or "{}")
            except ValueError:
                logger.warning(f"Ignoring unreadable session storage file {self.path}")
        super().__init__(data)

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data))

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self._flush()

    def remove(self, key: str) -> None:
        super().remove(key)
        self._flush()


# ============================================================
# Session
# ============================================================
class Session(BaseModel):
    """Currently authenticated caller. Never mutated, only replaced."""

    model_config = ConfigDict(frozen=True)

    identity_id: str
    email: Optional[str] = None
    display_name: str = ""
    role: str = Role.RESIDENT.value
    legacy_permissions: FrozenSet[str] = frozenset()
    is_loading: bool = False
    token: Optional[str] = None
    refresh_token: Optional[str] = None


def token_expired(token: str, now: Optional[float] = None) -> bool:
    """
    True when the token carries an ``exp`` claim in the past.
    Opaque or undecodable tokens are left to the provider to judge.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return False
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return False
    return exp <= (now if now is not None else time.time())


Listener = Callable[[SessionState, Optional[Session]], None]


# ============================================================
# Container
# ============================================================
class SessionContainer:

    def __init__(
        self,
        provider: IdentityProvider,
        store: ProfileStore,
        storage: Optional[MemoryStorage] = None,
        auto_restore: bool = True,
    ):
        self.provider = provider
        self.store = store
        self.storage = storage if storage is not None else MemoryStorage()
        self._snapshot: Tuple[SessionState, Optional[Session]] = (SessionState.UNINITIALIZED, None)
        self._listeners: List[Listener] = []

        if auto_restore:
            self.restore()

    # -------------------------------------------------
    # State access / subscription
    # -------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._snapshot[0]

    @property
    def session(self) -> Optional[Session]:
        return self._snapshot[1]

    @property
    def is_loading(self) -> bool:
        return self.state in (SessionState.UNINITIALIZED, SessionState.LOADING)

    def snapshot(self) -> Tuple[SessionState, Optional[Session]]:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; it is called immediately with the current state."""
        self._listeners.append(listener)
        listener(*self._snapshot)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, state: SessionState, session: Optional[Session] = None) -> None:
        self._snapshot = (state, session)
        for listener in list(self._listeners):
            listener(state, session)

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------
    def _build_session(self, identity: Identity, tokens: TokenPair) -> Session:
        email = identity.email or ""
        fallback_name = email.split("@")[0] if email else "User"

        try:
            profile = self.store.get_profile(identity.id)
        except Exception as e:
            logger.error(f"Profile lookup failed for {identity.id}: {extract_supabase_error(e)}")
            profile = None

        metadata_perms = identity.user_metadata.get("permissions")
        if profile is None:
            role = Role.RESIDENT.value
            display_name = fallback_name
            raw_perms = metadata_perms
        else:
            role = profile.role or Role.RESIDENT.value
            display_name = profile.display_name or fallback_name
            raw_perms = getattr(profile, "permissions", None) or metadata_perms

        if not isinstance(raw_perms, (list, tuple, set, frozenset)):
            raw_perms = []

        return Session(
            identity_id=identity.id,
            email=identity.email,
            display_name=display_name,
            role=role,
            legacy_permissions=frozenset(str(p) for p in raw_perms),
            token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    def _persist(self, tokens: TokenPair) -> None:
        self.storage.set(settings.AUTH_TOKEN_KEY, tokens.access_token)
        if tokens.refresh_token:
            self.storage.set(settings.AUTH_REFRESH_TOKEN_KEY, tokens.refresh_token)

    def _clear_persisted(self) -> None:
        self.storage.remove(settings.AUTH_TOKEN_KEY)
        self.storage.remove(settings.AUTH_REFRESH_TOKEN_KEY)

    def _authenticate(self, tokens: TokenPair) -> Session:
        identity = self.provider.verify_token(tokens.access_token)
        session = self._build_session(identity, tokens)
        self._persist(tokens)
        self._transition(SessionState.AUTHENTICATED, session)
        return session

    # -------------------------------------------------
    # Operations
    # -------------------------------------------------
    def restore(self) -> Optional[Session]:
        """Rebuild the session from the persisted token, if any."""
        self._transition(SessionState.LOADING)

        token = self.storage.get(settings.AUTH_TOKEN_KEY)
        refresh_token = self.storage.get(settings.AUTH_REFRESH_TOKEN_KEY)
        if not token:
            self._transition(SessionState.ANONYMOUS)
            return None

        try:
            if token_expired(token):
                if not refresh_token:
                    raise AuthenticationError("Session expired")
                tokens = self.provider.refresh(refresh_token)
            else:
                tokens = TokenPair(access_token=token, refresh_token=refresh_token)
            return self._authenticate(tokens)
        except Exception as e:
            logger.info(f"Session restore failed: {extract_supabase_error(e)}")
            self._clear_persisted()
            self._transition(SessionState.ANONYMOUS)
            return None

    def login(self, email: str, secret: str) -> Session:
        if not email or not secret:
            raise AuthenticationError("Invalid email or password")

        tokens = self.provider.sign_in(email.strip().lower(), secret)
        session = self._authenticate(tokens)
        logger.info(f"Signed in {session.email} ({session.identity_id}) as {session.role}")
        return session

    def refresh(self) -> Optional[Session]:
        current = self.session
        refresh_token = (current.refresh_token if current else None) or self.storage.get(
            settings.AUTH_REFRESH_TOKEN_KEY
        )
        if not refresh_token:
            raise AuthenticationError("No refresh token available")

        try:
            return self._authenticate(self.provider.refresh(refresh_token))
        except AuthenticationError:
            self._clear_persisted()
            self._transition(SessionState.ANONYMOUS)
            raise

    def logout(self) -> None:
        try:
            self.provider.sign_out(self.session.token if self.session else None)
        except Exception as e:
            # Local state is cleared regardless
            logger.error(f"Sign out error: {extract_supabase_error(e)}")
        self._clear_persisted()
        self._transition(SessionState.ANONYMOUS)

    def reset_password(self, email: Optional[str]) -> None:
        normalized = str(email or "").strip().lower()
        if not normalized:
            logger.warning("Password reset requested without an email")
            return
        try:
            self.provider.reset_password_for_email(normalized)
            logger.info(f"Password reset email requested: email={email}")
        except Exception as e:
            logger.error(f"Failed to send password reset email to {email}: {extract_supabase_error(e)}")

    def update_password(self, new_secret: str) -> None:
        current = self.session
        if current is None:
            raise AuthenticationError("Not authenticated")
        if not new_secret:
            raise ValidationError("New password is required")

        self.provider.update_password(current.identity_id, new_secret)
        logger.info(f"Password updated for {current.identity_id}")
