# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from typing import Dict, Generator, Iterable, List, Optional

from main import create_app
from core.errors import AuthenticationError
from core.identity_provider import get_identity_provider
from core.profile_store import get_profile_store
from core.rate_limiter import reset_rate_limits
from models.user import Identity, Profile, TokenPair


# ============================================================
# In-memory doubles for the external collaborators
# ============================================================
class FakeIdentityProvider:
    """Identity provider keeping identities and tokens in dicts."""

    def __init__(self):
        self.identities: Dict[str, Identity] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}
        self.refresh_tokens: Dict[str, str] = {}
        self.fail_create = False
        self.fail_delete = False
        self.signed_out: List[Optional[str]] = []
        self.reset_requests: List[str] = []
        self.password_updates: List[tuple] = []
        self.deleted: List[str] = []

    def add(self, identity_id: str, email: str, password: str = "secret", metadata=None) -> str:
        self.identities[identity_id] = Identity(id=identity_id, email=email, user_metadata=metadata or {})
        self.passwords[email] = password
        token = f"token-{identity_id}"
        self.tokens[token] = identity_id
        self.refresh_tokens[f"refresh-{identity_id}"] = identity_id
        return token

    def verify_token(self, token: str) -> Identity:
        identity_id = self.tokens.get(token)
        if identity_id is None or identity_id not in self.identities:
            raise AuthenticationError("Invalid authentication token")
        return self.identities[identity_id]

    def _pair(self, identity_id: str) -> TokenPair:
        return TokenPair(
            access_token=f"token-{identity_id}",
            refresh_token=f"refresh-{identity_id}",
            identity_id=identity_id,
        )

    def sign_in(self, email: str, password: str) -> TokenPair:
        for identity in self.identities.values():
            if identity.email == email and self.passwords.get(email) == password:
                return self._pair(identity.id)
        raise AuthenticationError("Invalid email or password")

    def refresh(self, refresh_token: str) -> TokenPair:
        identity_id = self.refresh_tokens.get(refresh_token)
        if identity_id is None:
            raise AuthenticationError("Session expired")
        return self._pair(identity_id)

    def sign_out(self, token: Optional[str] = None) -> None:
        self.signed_out.append(token)

    def reset_password_for_email(self, email: str) -> None:
        self.reset_requests.append(email)

    def update_password(self, identity_id: str, new_password: str) -> None:
        self.password_updates.append((identity_id, new_password))

    def list_identities(self) -> List[Identity]:
        return list(self.identities.values())

    def list_identities_page(self, page: int = 1, per_page: Optional[int] = None) -> List[Identity]:
        identities = self.list_identities()
        if not per_page:
            return identities
        start = (page - 1) * per_page
        return identities[start:start + per_page]

    def create_identity(self, email: str, password: str, metadata=None) -> Identity:
        if self.fail_create:
            raise Exception("User already registered")
        identity_id = f"new-{len(self.identities) + 1}"
        self.add(identity_id, email, password, metadata)
        return self.identities[identity_id]

    def delete_identity(self, identity_id: str) -> None:
        if self.fail_delete:
            raise Exception("auth service unavailable")
        self.identities.pop(identity_id, None)
        self.deleted.append(identity_id)


class FakeProfileStore:
    """Profiles table keyed by id."""

    def __init__(self, rows: Iterable[dict] = ()):
        self.rows: Dict[str, dict] = {row["id"]: dict(row) for row in rows}
        self.fail_insert_ids = set()
        self.fail_insert_all = False
        self.fail_delete = False

    def add(self, identity_id: str, email: str, role: str, **extra) -> None:
        self.rows[identity_id] = {"id": identity_id, "email": email, "role": role, **extra}

    def get_profile(self, identity_id: str) -> Optional[Profile]:
        row = self.rows.get(identity_id)
        return Profile(**row) if row else None

    def get_role(self, identity_id: str) -> Optional[str]:
        row = self.rows.get(identity_id)
        return row.get("role") if row else None

    def list_profile_ids(self, limit: Optional[int] = None) -> List[str]:
        ids = list(self.rows)
        return ids if limit is None else ids[:limit]

    def insert_profile(self, row: dict) -> Profile:
        if self.fail_insert_all or row["id"] in self.fail_insert_ids:
            raise Exception('duplicate key value violates unique constraint "users_email_key"')
        self.rows[row["id"]] = dict(row)
        return Profile(**row)

    def delete_profile(self, identity_id: str) -> None:
        if self.fail_delete:
            raise Exception("permission denied for table users")
        self.rows.pop(identity_id, None)


# ============================================================
# Fixtures
# ============================================================
@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def store() -> FakeProfileStore:
    return FakeProfileStore()


@pytest.fixture
def accounts(provider, store) -> Dict[str, str]:
    """One caller per role; returns role → bearer token."""
    tokens = {}
    for role, identity_id in [
        ("SUPER_ADMIN", "super-1"),
        ("ADMIN", "admin-1"),
        ("SUPERVISOR", "supervisor-1"),
        ("RESIDENT", "resident-1"),
    ]:
        email = f"{identity_id}@pass21.test"
        tokens[role] = provider.add(identity_id, email)
        store.add(identity_id, email, role, firstName=role.title(), lastName="Test")
    return tokens


@pytest.fixture(scope="function")
def app(provider, store):
    """Create a test FastAPI application with the doubles injected."""
    application = create_app()
    application.dependency_overrides[get_identity_provider] = lambda: provider
    application.dependency_overrides[get_profile_store] = lambda: store
    yield application
    application.dependency_overrides = {}


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def headers(accounts) -> Dict[str, dict]:
    """Role → Authorization header for that role's caller."""
    return {role: {"Authorization": f"Bearer {token}"} for role, token in accounts.items()}


@pytest.fixture(autouse=True)
def clear_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()
