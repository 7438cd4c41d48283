# routers/access.py

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from core.guards import ByPath, GuardDecision, RouteGuard
from core.permission_helpers import (
    get_assignable_roles,
    get_available_actions,
    get_role_display_name,
    has_special_permission,
    requires_auth,
)
from core.permissions import SPECIAL_PERMISSIONS
from core.session import Session
from dependencies.auth import CurrentUser, get_current_user
from models.enums import Resource, SessionState


router = APIRouter(
    prefix="/access",
    tags=["Access"],
)


class PermissionSummary(BaseModel):
    role: Optional[str] = None
    role_display_name: str
    actions: Dict[str, List[str]]
    assignable_roles: List[str]
    special_permissions: List[str]


class PageAccess(BaseModel):
    path: str
    requires_auth: bool
    decision: GuardDecision


def _caller_session(user: CurrentUser) -> Session:
    # A missing profile row leaves role None, which every matrix check denies
    return Session(identity_id=user.id, email=user.email, role=user.role or "")


# -----------------------------------------------------
# GET /access/check?path=/houses
# -----------------------------------------------------
@router.get("/check", response_model=PageAccess, summary="Evaluate the page guard for the caller")
def check_page_access(
    path: str = Query(..., description="Page path, e.g. /houses"),
    current_user: CurrentUser = Depends(get_current_user),
):
    guard = RouteGuard(ByPath(path))
    decision = guard.evaluate(SessionState.AUTHENTICATED, _caller_session(current_user))
    return PageAccess(path=path, requires_auth=requires_auth(path), decision=decision)


# -----------------------------------------------------
# GET /access/permissions
# -----------------------------------------------------
@router.get("/permissions", response_model=PermissionSummary, summary="Caller's permission matrix row")
def read_permissions(current_user: CurrentUser = Depends(get_current_user)):
    role = current_user.role
    return PermissionSummary(
        role=role,
        role_display_name=get_role_display_name(role),
        actions={
            resource.value: sorted(a.value for a in get_available_actions(role, resource))
            for resource in Resource
        },
        assignable_roles=sorted(r.value for r in get_assignable_roles(role)),
        special_permissions=sorted(
            p for p in SPECIAL_PERMISSIONS.values() if has_special_permission(role, p)
        ),
    )
