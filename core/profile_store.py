# core/profile_store.py

from typing import Callable, List, Optional

from core.config import settings
from core.supabase_client import get_supabase_client
from models.user import Profile


# ============================================================
# Persisted profile store (Supabase users table)
# ============================================================
class ProfileStore:
    """
    Thin wrapper over the profiles table. Errors from PostgREST
    propagate; callers decide whether they are fatal.
    """

    def __init__(self, client_factory: Callable = get_supabase_client, table: Optional[str] = None):
        self._client_factory = client_factory
        self.table = table or settings.PROFILES_TABLE

    def _table(self):
        client = self._client_factory()
        if client is None:
            raise RuntimeError("Supabase client not configured")
        return client.table(self.table)

    def get_profile(self, identity_id: str) -> Optional[Profile]:
        result = (
            self._table()
            .select("*")
            .eq("id", identity_id)
            .limit(1)
            .execute()
        )
        rows = result.data or []
        return Profile(**rows[0]) if rows else None

    def get_role(self, identity_id: str) -> Optional[str]:
        result = (
            self._table()
            .select("role")
            .eq("id", identity_id)
            .limit(1)
            .execute()
        )
        rows = result.data or []
        return rows[0].get("role") if rows else None

    def list_profile_ids(self, limit: Optional[int] = None) -> List[str]:
        query = self._table().select("id")
        if limit is not None:
            query = query.limit(limit)
        result = query.execute()
        return [str(row["id"]) for row in (result.data or [])]

    def insert_profile(self, row: dict) -> Profile:
        result = self._table().insert(row).execute()
        if not result.data:
            raise RuntimeError(f"Insert into {self.table} returned no row")
        return Profile(**result.data[0])

    def delete_profile(self, identity_id: str) -> None:
        self._table().delete().eq("id", identity_id).execute()


profile_store = ProfileStore()


def get_profile_store() -> ProfileStore:
    """FastAPI dependency (overridable in tests)."""
    return profile_store
