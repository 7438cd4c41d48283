# core/guards.py

"""
Route guards.

One ``RouteGuard`` parametrized by a policy:

    ByRole      role + legacy flat permission strings, redirects on denial,
                honors the bypass override
    ByResource  matrix VIEW on a resource, inline denial view
    ByPath      page path → resource → matrix VIEW, inline denial view

ByRole and ByResource read different permission representations and can
disagree for the same caller on the same page.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

from pydantic import BaseModel

from core.config import settings
from core.logging_config import logger
from core.permission_helpers import PermissionResolver, resolver as default_resolver, get_role_display_name
from core.permissions import LEGACY_WILDCARD
from core.session import MemoryStorage, Session, SessionContainer
from models.enums import Action, GuardState, Resource, Role, SessionState


# ============================================================
# Policies
# ============================================================
@dataclass(frozen=True)
class ByRole:
    required_role: Optional[str] = None
    required_permissions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ByResource:
    resource: Resource


@dataclass(frozen=True)
class ByPath:
    # None = use the path being navigated to
    path: Optional[str] = None


GuardPolicy = Union[ByRole, ByResource, ByPath]


# ============================================================
# Decisions
# ============================================================
class AccessDeniedView(BaseModel):
    """Content rendered in place of a protected page."""

    title: str = "Restricted access"
    message: str
    role: Optional[str] = None
    role_display_name: str
    resource: Optional[str] = None
    path: Optional[str] = None
    login_required: bool = False


class GuardDecision(BaseModel):
    state: GuardState
    redirect_to: Optional[str] = None
    denial: Optional[AccessDeniedView] = None
    bypassed: bool = False

    @property
    def allowed(self) -> bool:
        return self.state is GuardState.ALLOWED


CHECKING = GuardDecision(state=GuardState.CHECKING)
ALLOWED = GuardDecision(state=GuardState.ALLOWED)


# ============================================================
# Bypass override
# ============================================================
def is_bypass_active(storage: Optional[MemoryStorage]) -> bool:
    """
    Debug escape hatch: presence of the bypass key in client storage.
    Ignored entirely unless the build enables it.
    """
    if not settings.AUTH_BYPASS_ENABLED or storage is None:
        return False
    return storage.get(settings.AUTH_BYPASS_KEY) is not None


# ============================================================
# Guard
# ============================================================
class RouteGuard:

    def __init__(
        self,
        policy: GuardPolicy,
        resolver: PermissionResolver = default_resolver,
        storage: Optional[MemoryStorage] = None,
        on_redirect: Optional[Callable[[str], None]] = None,
    ):
        self.policy = policy
        self.resolver = resolver
        self.storage = storage
        self.on_redirect = on_redirect

        self.decision: GuardDecision = CHECKING
        self.current_path: Optional[str] = None
        self._container: Optional[SessionContainer] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    # -------------------------------------------------
    # Pure evaluation
    # -------------------------------------------------
    def evaluate(
        self,
        state: SessionState,
        session: Optional[Session],
        path: Optional[str] = None,
    ) -> GuardDecision:
        if state in (SessionState.UNINITIALIZED, SessionState.LOADING):
            return CHECKING
        if session is not None and session.is_loading:
            return CHECKING

        if isinstance(self.policy, ByRole):
            return self._evaluate_role(session)
        if isinstance(self.policy, ByResource):
            return self._evaluate_resource(session, self.policy.resource, path)
        if isinstance(self.policy, ByPath):
            return self._evaluate_path(session, self.policy.path or path)

        logger.warning(f"Unknown guard policy {self.policy!r}")
        return self._deny_inline(session, None, path)

    def _evaluate_role(self, session: Optional[Session]) -> GuardDecision:
        if is_bypass_active(self.storage):
            return GuardDecision(state=GuardState.ALLOWED, bypassed=True)

        if session is None:
            return GuardDecision(state=GuardState.DENIED, redirect_to=settings.LOGIN_PATH)

        policy = self.policy
        is_super = Role.parse(session.role) is Role.SUPER_ADMIN

        if policy.required_role and session.role != policy.required_role and not is_super:
            return GuardDecision(state=GuardState.DENIED, redirect_to=settings.UNAUTHORIZED_PATH)

        if policy.required_permissions and not is_super:
            granted = session.legacy_permissions
            if LEGACY_WILDCARD not in granted and not all(
                p in granted for p in policy.required_permissions
            ):
                return GuardDecision(state=GuardState.DENIED, redirect_to=settings.UNAUTHORIZED_PATH)

        return ALLOWED

    def _evaluate_resource(self, session: Optional[Session], resource, path: Optional[str]) -> GuardDecision:
        if session is None:
            return GuardDecision(
                state=GuardState.DENIED,
                denial=AccessDeniedView(
                    title="Authentication required",
                    message="You must sign in to access this page.",
                    role_display_name=get_role_display_name(None),
                    resource=str(resource) if resource is not None else None,
                    path=path,
                    login_required=True,
                ),
            )

        if self.resolver.has_permission(session.role, resource, Action.VIEW):
            return ALLOWED
        return self._deny_inline(session, resource, path)

    def _evaluate_path(self, session: Optional[Session], path: Optional[str]) -> GuardDecision:
        role = session.role if session is not None else None
        if self.resolver.can_access_page(role, path):
            return ALLOWED
        return self._deny_inline(session, self.resolver.resource_for_path(path), path)

    def _deny_inline(self, session: Optional[Session], resource, path: Optional[str]) -> GuardDecision:
        role = session.role if session is not None else None
        return GuardDecision(
            state=GuardState.DENIED,
            denial=AccessDeniedView(
                message=self.resolver.get_access_denied_message(role, resource),
                role=role,
                role_display_name=get_role_display_name(role),
                resource=str(resource) if resource is not None else None,
                path=path,
                login_required=session is None,
            ),
        )

    # -------------------------------------------------
    # Mounted behaviour
    # -------------------------------------------------
    def attach(self, container: SessionContainer, path: Optional[str] = None) -> Callable[[], None]:
        """Subscribe to the container; the decision follows every session change."""
        self.detach()
        self._container = container
        self.current_path = path
        if self.storage is None:
            self.storage = container.storage
        self._unsubscribe = container.subscribe(self._on_session_change)
        return self.detach

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._container = None

    def navigate(self, path: str) -> GuardDecision:
        self.current_path = path
        if self._container is None:
            return self.decision
        return self._apply(*self._container.snapshot())

    def _on_session_change(self, state: SessionState, session: Optional[Session]) -> None:
        self._apply(state, session)

    def _apply(self, state: SessionState, session: Optional[Session]) -> GuardDecision:
        self.decision = self.evaluate(state, session, self.current_path)
        if self.decision.redirect_to and self.on_redirect is not None:
            self.on_redirect(self.decision.redirect_to)
        return self.decision
