"""
Access Control Gate.

Usage:
    gate = AccessGate(oracle)
    decision = await gate.super_admin_route(identity, "/api/super-admin/stats")
    if not decision.allowed:
        ...
"""

from .gate import (
    AccessGate,
    GateDecision,
    GateState,
    Navigation,
    OracleResult,
    RoleRedirectTracker,
    View,
    resolve_protected_route,
    resolve_role_redirect,
    resolve_super_admin_route,
)

__all__ = [
    "AccessGate",
    "GateDecision",
    "GateState",
    "Navigation",
    "OracleResult",
    "RoleRedirectTracker",
    "View",
    "resolve_protected_route",
    "resolve_role_redirect",
    "resolve_super_admin_route",
]
