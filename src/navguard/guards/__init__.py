"""Guards — results, context, the guard base class, and combinators.

Built-in guards:
    AuthenticationGuard -- Redirect unauthenticated users to a login location
    RoleGuard -- Require one of a set of roles
"""

from navguard.guards.base import FunctionGuard, RedirectFunctionGuard, RouteGuard
from navguard.guards.builtin import AuthenticationGuard, RoleGuard
from navguard.guards.combinators import AnyGuard, CompositeGuard
from navguard.guards.context import GuardContext
from navguard.guards.result import (
    Allow,
    GuardResult,
    Redirect,
    Reject,
    allow,
    is_allowed,
    redirect,
    reject,
)

__all__ = [
    "Allow",
    "AnyGuard",
    "AuthenticationGuard",
    "CompositeGuard",
    "FunctionGuard",
    "GuardContext",
    "GuardResult",
    "RedirectFunctionGuard",
    "Redirect",
    "Reject",
    "RoleGuard",
    "RouteGuard",
    "allow",
    "is_allowed",
    "redirect",
    "reject",
]
