"""
Access Control Gate.

Three gates decide what a request (or a live connection) gets to see:

- ProtectedRoute: any authenticated identity.
- SuperAdminRoute: identities the oracle confirms as super-admin; everyone
  else is sent to the owner dashboard.
- RoleBasedRedirect: the application root, which forwards each identity to
  the dashboard for its role.

The resolve_* functions are pure: they map ``(identity, auth_loading,
oracle_result)`` to a GateDecision. AccessGate asks the oracle and feeds
them. An oracle failure counts as "not a super-admin": the caller lands on
the least-privileged page instead of being blocked, and the error is logged.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from admin_api.services.permissions import AuthorizationOracle
from shared.config.constants import Limits, Routes
from shared.config.logging import audit_access_event, get_logger
from shared.security.auth import Identity

logger = get_logger(__name__)

# None while the oracle has not answered yet
OracleResult = Optional[Union[bool, Exception]]


class GateState(str, Enum):
    AUTH_RESOLVING = "auth_resolving"
    UNAUTHENTICATED = "unauthenticated"
    AUTHORIZATION_RESOLVING = "authorization_resolving"
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"


class View(str, Enum):
    SPINNER = "spinner"
    LOGIN = "login"
    CHILDREN = "children"
    ACCESS_DENIED = "access_denied"


@dataclass(frozen=True)
class Navigation:
    to: str
    replace: bool = True


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    view: View
    navigate: Navigation | None = None

    @property
    def allowed(self) -> bool:
        return self.state == GateState.AUTHORIZED and self.view == View.CHILDREN

    @property
    def terminal(self) -> bool:
        return self.state in (GateState.UNAUTHENTICATED, GateState.AUTHORIZED, GateState.UNAUTHORIZED)


_RESOLVING = GateDecision(GateState.AUTH_RESOLVING, View.SPINNER)
_LOGIN = GateDecision(GateState.UNAUTHENTICATED, View.LOGIN)
_CHECKING = GateDecision(GateState.AUTHORIZATION_RESOLVING, View.SPINNER)


# =============================================================================
# Pure decisions
# =============================================================================


def resolve_protected_route(identity: str | None, auth_loading: bool) -> GateDecision:
    if auth_loading:
        return _RESOLVING
    if not identity:
        return _LOGIN
    return GateDecision(GateState.AUTHORIZED, View.CHILDREN)


def resolve_super_admin_route(
    identity: str | None,
    auth_loading: bool,
    oracle_result: OracleResult,
) -> GateDecision:
    if auth_loading:
        return _RESOLVING
    if not identity:
        return _LOGIN
    if oracle_result is None:
        return _CHECKING
    if oracle_result is True:
        return GateDecision(GateState.AUTHORIZED, View.CHILDREN)
    # Denied or oracle failure: access-denied frame while leaving for the dashboard
    return GateDecision(
        GateState.UNAUTHORIZED,
        View.ACCESS_DENIED,
        Navigation(Routes.OWNER_DASHBOARD),
    )


def resolve_role_redirect(
    identity: str | None,
    auth_loading: bool,
    oracle_result: OracleResult,
) -> GateDecision:
    """The root stays a login page for anonymous visitors; identities are forwarded."""
    if auth_loading:
        return _RESOLVING
    if not identity:
        return _LOGIN
    if oracle_result is None:
        return _CHECKING
    target = Routes.SUPER_ADMIN_DASHBOARD if oracle_result is True else Routes.OWNER_DASHBOARD
    return GateDecision(GateState.AUTHORIZED, View.SPINNER, Navigation(target))


class RoleRedirectTracker:
    """
    Makes the root redirect fire once per ``(identity, auth_loading)``.

    Evaluating the same key again yields the decision without its navigation.
    HTTP requests are stateless and never pass one; a stateful client (one
    tracker per session) hands it to AccessGate.role_redirect(). Only the
    ``max_keys`` most recently seen keys are remembered.
    """

    def __init__(self, max_keys: int = Limits.MAX_REDIRECT_KEYS) -> None:
        self._fired: OrderedDict[tuple[str | None, bool], None] = OrderedDict()
        self._max_keys = max_keys
        self._lock = threading.Lock()

    def consume(self, identity: str | None, auth_loading: bool, decision: GateDecision) -> GateDecision:
        if decision.navigate is None:
            return decision
        key = (identity, auth_loading)
        with self._lock:
            if key in self._fired:
                self._fired.move_to_end(key)
                return replace(decision, navigate=None)
            self._fired[key] = None
            while len(self._fired) > self._max_keys:
                self._fired.popitem(last=False)
        return decision

    def reset(self) -> None:
        with self._lock:
            self._fired.clear()


# =============================================================================
# Async driver
# =============================================================================


class AccessGate:
    """Runs the gates for resolved identities, asking the oracle when needed."""

    def __init__(self, oracle: AuthorizationOracle):
        self._oracle = oracle

    @property
    def oracle(self) -> AuthorizationOracle:
        return self._oracle

    async def protected_route(self, identity: Identity | None, route: str, auth_loading: bool = False) -> GateDecision:
        decision = resolve_protected_route(_uid(identity), auth_loading)
        if decision.state == GateState.UNAUTHENTICATED:
            audit_access_event("PROTECTED_ROUTE", None, route, allowed=False, reason="unauthenticated")
        return decision

    async def super_admin_route(
        self,
        identity: Identity | None,
        route: str,
        auth_loading: bool = False,
    ) -> GateDecision:
        uid = _uid(identity)
        oracle_result: OracleResult = None
        if uid and not auth_loading:
            oracle_result = await self._ask_oracle(uid, route)
        decision = resolve_super_admin_route(uid, auth_loading, oracle_result)

        if decision.terminal:
            audit_access_event(
                "SUPER_ADMIN_ROUTE",
                uid,
                route,
                allowed=decision.allowed,
                reason=_denial_reason(decision, oracle_result),
            )
        return decision

    async def role_redirect(
        self,
        identity: Identity | None,
        auth_loading: bool = False,
        tracker: RoleRedirectTracker | None = None,
    ) -> GateDecision:
        uid = _uid(identity)
        oracle_result: OracleResult = None
        if uid and not auth_loading:
            oracle_result = await self._ask_oracle(uid, Routes.ROOT)
        decision = resolve_role_redirect(uid, auth_loading, oracle_result)
        if tracker is not None:
            decision = tracker.consume(uid, auth_loading, decision)
        if decision.navigate is not None:
            logger.debug("Role redirect", identity=uid, target=decision.navigate.to)
        return decision

    async def _ask_oracle(self, uid: str, route: str) -> bool | Exception:
        try:
            return await self._oracle.is_super_admin(uid)
        except Exception as e:
            logger.error(
                "Authorization check failed, falling back to least privilege",
                identity=uid,
                route=route,
                error=str(e),
                exc_info=True,
            )
            return e


def _uid(identity: Identity | None) -> str | None:
    return identity.uid if identity is not None else None


def _denial_reason(decision: GateDecision, oracle_result: OracleResult) -> str | None:
    if decision.allowed:
        return None
    if decision.state == GateState.UNAUTHENTICATED:
        return "unauthenticated"
    if isinstance(oracle_result, Exception):
        return "authorization check failed"
    return "not a super-admin"
