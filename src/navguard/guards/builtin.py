"""Built-in guards — authentication and role checks.

Both read application state through small callables that receive the
``GuardContext``, so they work with whatever the application puts in
the DI bag (a session object, a store, a service)::

    from navguard.guards.builtin import AuthenticationGuard, RoleGuard

    navigator.add_guard(AuthenticationGuard(
        is_authenticated=lambda ctx: ctx.require("session", Session).user is not None,
    ))
    navigator.add_guard(RoleGuard(
        user_role=lambda ctx: ctx.require("session", Session).role,
        required_roles=("admin",),
        applies_to=("/admin/*",),
    ))

Readers may be sync or async.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence

from navguard._internal.invoke import invoke
from navguard.errors import ConfigurationError
from navguard.guards.base import RouteGuard
from navguard.guards.context import GuardContext
from navguard.guards.result import GuardResult, allow, redirect

logger = logging.getLogger("navguard.guards")

type StateReader[T] = Callable[[GuardContext], T | Awaitable[T]]

DEFAULT_PUBLIC_PATHS: tuple[str, ...] = ("/login", "/register", "/forgot-password")


class AuthenticationGuard(RouteGuard):
    """Redirect unauthenticated users to a login location.

    The redirect carries ``{"return_to": <requested location>}`` as its
    payload so the login screen can send the user back afterwards.
    ``public_paths`` are excluded from the check (exclusions are
    evaluated before anything else, see ``RouteGuard``).
    """

    priority = 100

    def __init__(
        self,
        is_authenticated: StateReader[bool],
        *,
        redirect_to: str = "/login",
        public_paths: Sequence[str] = DEFAULT_PUBLIC_PATHS,
    ) -> None:
        self.is_authenticated = is_authenticated
        self.redirect_to = redirect_to
        self.excludes = tuple(public_paths)

    async def can_activate(self, context: GuardContext) -> GuardResult:
        if await invoke(self.is_authenticated, context):
            return allow()
        logger.debug("Unauthenticated access to %s", context.matched_location)
        return redirect(self.redirect_to, extra={"return_to": context.matched_location})


class RoleGuard(RouteGuard):
    """Allow only users holding one of the required roles.

    Required roles come either from ``required_roles`` or from the
    destination route's metadata under ``metadata_key``::

        RouteDefinition("/reports", name="reports", metadata={"role": "analyst"})
        RoleGuard(user_role=read_role, metadata_key="role")

    A user without any role is redirected. A destination with no role
    requirement is allowed.
    """

    priority = 50

    def __init__(
        self,
        user_role: StateReader[str | None],
        *,
        required_roles: Sequence[str] | None = None,
        metadata_key: str | None = None,
        redirect_to: str = "/unauthorized",
        applies_to: Sequence[str] | None = None,
    ) -> None:
        if required_roles is None and metadata_key is None:
            msg = "RoleGuard requires either 'required_roles' or 'metadata_key'."
            raise ConfigurationError(msg)
        self.user_role = user_role
        self.required_roles = tuple(required_roles) if required_roles is not None else None
        self.metadata_key = metadata_key
        self.redirect_to = redirect_to
        self.applies_to = tuple(applies_to) if applies_to is not None else None

    def _roles_for(self, context: GuardContext) -> tuple[str, ...]:
        if self.required_roles is not None:
            return self.required_roles
        value = context.destination.metadata.get(self.metadata_key or "")
        if isinstance(value, str):
            return (value,)
        return ()

    async def can_activate(self, context: GuardContext) -> GuardResult:
        role = await invoke(self.user_role, context)
        if role is None:
            return redirect(self.redirect_to)

        roles = self._roles_for(context)
        if not roles or role in roles:
            return allow()

        logger.debug(
            "Role %r not in %s for %s",
            role,
            ", ".join(roles),
            context.matched_location,
        )
        return redirect(self.redirect_to)
