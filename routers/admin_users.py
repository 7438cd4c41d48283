# routers/admin_users.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from starlette.concurrency import run_in_threadpool

from core.identity_provider import IdentityProvider, get_identity_provider
from core.profile_store import ProfileStore, get_profile_store
from dependencies.auth import CurrentUser, require_privileged_user
from models.user import AdminCreateUser, CreateUserResponse, DeleteUserResponse, SyncResponse
from services.orphan_sync import sync_orphan_identities
from services.user_admin import create_account, delete_account, parse_create_payload


router = APIRouter(
    prefix="/admin/users",
    tags=["Admin Users"],
)

GATE_RESPONSES = {
    401: {"description": "Missing or invalid bearer token"},
    403: {"description": "Caller is not ADMIN or SUPER_ADMIN"},
    500: {"description": "Internal server error"},
}


# -----------------------------------------------------
# 1️⃣ CREATE ACCOUNT
# -----------------------------------------------------
@router.post(
    "/create",
    status_code=201,
    response_model=CreateUserResponse,
    response_model_exclude_none=True,
    summary="Admin: Create user account",
    responses={400: {"description": "Missing, mistyped or non-JSON payload"}, **GATE_RESPONSES},
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": AdminCreateUser.model_json_schema()}},
        }
    },
)
async def admin_create_user(
    request: Request,
    current_user: CurrentUser = Depends(require_privileged_user),
    provider: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
):
    # Body is decoded only once the gate has passed
    body = await request.body()
    payload = parse_create_payload(body)
    return await run_in_threadpool(create_account, payload, provider, store, current_user)


# -----------------------------------------------------
# 2️⃣ DELETE ACCOUNT
# -----------------------------------------------------
@router.delete(
    "/delete",
    response_model=DeleteUserResponse,
    response_model_exclude_none=True,
    summary="Admin: Delete user account",
    responses={400: {"description": "Missing userId or self-delete"}, **GATE_RESPONSES},
)
def admin_delete_user(
    userId: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(require_privileged_user),
    provider: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
):
    return delete_account(userId, provider, store, current_user)


# -----------------------------------------------------
# 3️⃣ SYNC ORPHAN IDENTITIES
# -----------------------------------------------------
@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Admin: Create missing profiles for orphan identities",
    responses=GATE_RESPONSES,
)
def admin_sync_users(
    current_user: CurrentUser = Depends(require_privileged_user),
    provider: IdentityProvider = Depends(get_identity_provider),
    store: ProfileStore = Depends(get_profile_store),
):
    return sync_orphan_identities(provider, store)
