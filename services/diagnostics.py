# services/diagnostics.py

"""
Connectivity report for operators: which Supabase settings are present,
and whether the auth client, the admin API and the profiles table answer.

Each probe is independent. A failing probe is reported as an "Error: ..."
string and never aborts the report.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from core.config import settings
from core.errors import extract_supabase_error
from core.identity_provider import IdentityProvider
from core.logging_config import logger
from core.profile_store import ProfileStore


def _masked_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    return url[:50] + "..."


def environment_summary() -> dict:
    return {
        "ENV": settings.ENV,
        "hasSupabaseUrl": bool(settings.SUPABASE_URL),
        "hasServiceKey": bool(settings.SUPABASE_SERVICE_ROLE_KEY),
        "hasAnonKey": bool(settings.SUPABASE_ANON_KEY),
        "supabaseUrl": _masked_url(settings.SUPABASE_URL),
    }


def check_auth_client(public_client: Any) -> str:
    try:
        if public_client is None:
            raise RuntimeError("Supabase client not configured")
        public_client.auth.get_session()
        return "OK - Auth client initialized"
    except Exception as e:
        return f"Error: {extract_supabase_error(e)}"


def check_admin_api(provider: IdentityProvider) -> str:
    try:
        users = provider.list_identities_page(page=1, per_page=1)
        return f"OK - Found {len(users)} users (limited query)"
    except Exception as e:
        return f"Error: {extract_supabase_error(e)}"


def check_profiles_table(store: ProfileStore) -> str:
    try:
        ids = store.list_profile_ids(limit=1)
        return f"OK - Database accessible, found {len(ids)} records"
    except Exception as e:
        return f"DB Error: {extract_supabase_error(e)}"


def run_diagnostics(provider: IdentityProvider, store: ProfileStore, public_client: Any) -> dict:
    report = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": environment_summary(),
        "authTest": check_auth_client(public_client),
        "adminTest": check_admin_api(provider),
        "dbTest": check_profiles_table(store),
    }

    failed = [k for k in ("authTest", "adminTest", "dbTest") if not report[k].startswith("OK")]
    if failed:
        logger.warning(f"Diagnostics reported failures: {', '.join(failed)}")
    return report
