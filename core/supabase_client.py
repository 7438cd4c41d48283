# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    REQUIRED for:
        - auth.admin.create_user / delete_user / list_users
        - auth.admin.update_user_by_id
        - full read/write on the profiles table
    """
    supabase_url = settings.SUPABASE_URL
    supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

    if not supabase_url or not supabase_key:
        logger.error("Missing Supabase credentials")
        logger.error(f"   URL: {supabase_url}")
        logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
        return None

    try:
        return create_client(supabase_url, supabase_key)
    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Public (anon) client: credential exchange on behalf of a user
# ============================================================

def get_public_client() -> Optional[Client]:
    """
    Client used for sign-in / token refresh. Falls back to the
    service role client when no anon key is configured.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        return get_supabase_client()

    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
    except Exception as e:
        logger.error(f"Supabase Init Error (anon): {e}", exc_info=True)
        return None


# ============================================================
# Ping Supabase for health checks
# ============================================================

def ping_supabase() -> dict:
    """
    Simple connectivity check against the profiles table.
    Does NOT query auth tables.
    """
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    table = settings.PROFILES_TABLE
    try:
        res = client.table(table).select("id").limit(1).execute()
        return {
            "service": "Supabase",
            "status": "ok",
            "tables": {table: {"status": "ok", "rows_found": len(res.data or [])}},
        }
    except Exception as e:
        logger.error(f"Supabase Ping Error: {e}", exc_info=True)
        return {"service": "Supabase", "status": "error", "detail": str(e)}
