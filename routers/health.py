# routers/health.py

from fastapi import APIRouter, Depends

from core.identity_provider import IdentityProvider, get_identity_provider
from core.profile_store import ProfileStore, get_profile_store
from core.supabase_client import get_public_client, ping_supabase
from dependencies.auth import CurrentUser, require_privileged_user
from services.diagnostics import run_diagnostics

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks Supabase connection + profiles table query
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Supabase / DB health check")
def health_db():
    status = ping_supabase()
    return {
        "service": "Supabase",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
def health_app():
    return {
        "service": "Pass21 Access API",
        "status": "ok",
    }


# -----------------------------------------------------
# GET /health/diagnostic
# Env presence + auth client / admin API / profiles table probes
# ADMIN / SUPER_ADMIN only
# -----------------------------------------------------
@router.get("/diagnostic", summary="Supabase configuration diagnostic")
def health_diagnostic(
    current_user: CurrentUser = Depends(require_privileged_user),
    provider: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
    public_client=Depends(get_public_client),
):
    """
    Reports which Supabase settings are present (never their values,
    apart from a truncated URL) and the outcome of one cheap call per
    collaborator. Individual failures are reported, not raised.
    """
    return run_diagnostics(provider, store, public_client)
