"""Guard orchestrator — collects, orders, and evaluates guards.

One orchestrator per navigator, passed in by the caller. There is no
process-wide registry, so several navigators (for example in a test
suite) never see each other's guards.

Evaluation for one navigation attempt:

1. Collect global guards plus the guards registered under the
   destination's route name.
2. Stable-sort by descending priority; ties keep registration order.
3. Skip guards whose ``applies_to``/``excludes`` rule out the path.
4. Await each remaining guard in turn. Allow continues; Redirect or
   Reject stops evaluation and is returned as-is.
5. A guard that raises is treated as a Reject carrying the error text.
   The exception never propagates.

Guards never run concurrently within one evaluation, and a redirect
target is not re-evaluated: one pass is authoritative for one attempt.

Usage::

    orchestrator = GuardOrchestrator(global_guards=[AuthGuard(), AuditGuard()])
    orchestrator.add_route_guard("admin", AdminRoleGuard())

    result = await orchestrator.evaluate("/admin/users", route_name="admin")
"""

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, assert_never

from navguard.guards.base import RouteGuard
from navguard.guards.context import GuardContext
from navguard.guards.result import Allow, GuardResult, Redirect, Reject, allow, reject
from navguard.routing.params import parse_query
from navguard.routing.pattern import strip_query
from navguard.routing.route import RouteDefinition

logger = logging.getLogger("navguard.guards")

type ContextBuilder = Callable[[Any], Mapping[str, Any]]
type RejectCallback = Callable[[Reject, str], Any]
type RedirectHandler = Callable[[Any, Any], Awaitable[str | None]]


class GuardOrchestrator:
    """Owns the global and per-route guard registries.

    Callers mutate the registries only through the ``add_*`` /
    ``remove_*`` methods; the read accessors return copies.
    """

    __slots__ = ("_global_guards", "_route_guards")

    def __init__(self, global_guards: Iterable[RouteGuard] = ()) -> None:
        self._global_guards: list[RouteGuard] = []
        self._route_guards: dict[str, list[RouteGuard]] = {}
        for guard in global_guards:
            self.add_global_guard(guard)

    # -- Registries --

    @property
    def global_guards(self) -> tuple[RouteGuard, ...]:
        return tuple(self._global_guards)

    @property
    def route_guards(self) -> Mapping[str, tuple[RouteGuard, ...]]:
        return MappingProxyType(
            {name: tuple(guards) for name, guards in self._route_guards.items()}
        )

    def add_global_guard(self, guard: RouteGuard) -> None:
        """Register a guard for every route.

        Raises ``PatternError`` if the guard declares a malformed pattern.
        """
        guard.validate()
        self._global_guards.append(guard)

    def remove_global_guard(self, guard: RouteGuard) -> None:
        """Remove a global guard. Removing an unknown guard is a no-op."""
        if guard in self._global_guards:
            self._global_guards.remove(guard)

    def add_route_guard(self, route_name: str, guard: RouteGuard) -> None:
        """Register a guard that only runs when navigating to *route_name*."""
        guard.validate()
        self._route_guards.setdefault(route_name, []).append(guard)

    def remove_route_guard(self, route_name: str, guard: RouteGuard) -> None:
        guards = self._route_guards.get(route_name)
        if guards is not None and guard in guards:
            guards.remove(guard)

    def clear_route_guards(self, route_name: str) -> None:
        self._route_guards.pop(route_name, None)

    def collect(self, route_name: str | None = None) -> list[RouteGuard]:
        """Applicable guards for *route_name*, in evaluation order.

        ``sorted`` is stable, so equal priorities keep registration
        order with global guards ahead of route guards.
        """
        guards = list(self._global_guards)
        if route_name is not None:
            guards.extend(self._route_guards.get(route_name, ()))
        return sorted(guards, key=lambda guard: guard.priority, reverse=True)

    # -- Evaluation --

    def _build_context(
        self,
        destination: str,
        route: RouteDefinition | None,
        path_params: Mapping[str, str] | None,
        query_params: Mapping[str, str] | None,
        extra: Any,
        context: Mapping[str, Any] | None,
    ) -> GuardContext:
        return GuardContext(
            destination=route if route is not None else RouteDefinition.stub(destination),
            matched_location=destination,
            path_parameters=path_params or {},
            query_parameters=query_params or {},
            navigation_extra=extra,
            extras=context or {},
        )

    async def evaluate(
        self,
        destination: str,
        route_name: str | None = None,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
        context: Mapping[str, Any] | None = None,
        *,
        route: RouteDefinition | None = None,
    ) -> GuardResult:
        """Evaluate every applicable guard for one navigation attempt.

        *destination* may carry a query string; it is stripped before
        pattern matching. *context* is the DI bag handed to guards.

        Returns ``Allow`` if every applicable guard allows (or none
        apply), otherwise the first Redirect or Reject.
        """
        path = strip_query(destination)
        guard_context = self._build_context(
            destination, route, path_params, query_params, extra, context
        )

        for guard in self.collect(route_name):
            if not guard.should_activate_for(path):
                continue

            try:
                result = await guard.can_activate(guard_context)
            except Exception as exc:
                logger.warning("Guard %r failed for %s", guard, destination, exc_info=True)
                return reject(f"Guard error: {exc}")

            match result:
                case Allow():
                    continue
                case Redirect() | Reject():
                    logger.debug("Guard %r returned %r for %s", guard, result, destination)
                    return result
                case _:
                    assert_never(result)

        return allow()

    async def can_deactivate(
        self,
        location: str,
        route_name: str | None = None,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
        context: Mapping[str, Any] | None = None,
        *,
        route: RouteDefinition | None = None,
    ) -> bool:
        """Ask the guards covering *location* whether it may be left.

        Same ordering and applicability rules as ``evaluate()``. The
        first ``False`` wins; a guard that raises counts as ``False``.
        """
        path = strip_query(location)
        guard_context = self._build_context(
            location, route, path_params, query_params, extra, context
        )

        for guard in self.collect(route_name):
            if not guard.should_activate_for(path):
                continue
            try:
                if not await guard.can_deactivate(guard_context):
                    logger.debug("Guard %r blocked leaving %s", guard, location)
                    return False
            except Exception:
                logger.warning(
                    "Guard %r failed deactivation check for %s", guard, location, exc_info=True
                )
                return False
        return True

    # -- Router engine integration --

    def create_redirect_handler(
        self,
        context_builder: ContextBuilder | None = None,
        *,
        on_reject: RejectCallback | None = None,
    ) -> RedirectHandler:
        """Build a redirect hook for an external router engine.

        The returned coroutine function has the engine's hook signature
        ``(environment, state) -> path | None``. *state* is read by
        attribute (``matched_location``, ``path_parameters``,
        ``query_parameters``, ``extra``, ``name``); missing attributes
        fall back to neutral defaults. Allow and Reject map to ``None``
        (no redirect); Redirect maps to its path. Surfacing a rejection
        (an error screen, a toast) is up to *on_reject*.

        Usage::

            engine.redirect = orchestrator.create_redirect_handler(
                lambda state: {"session": session, "engine_state": state},
            )
        """

        async def handler(environment: Any, state: Any) -> str | None:
            location = getattr(state, "matched_location", None) or "/"
            query_params = getattr(state, "query_parameters", None)
            if query_params is None:
                query_params = parse_query(location.partition("?")[2])

            extras = dict(context_builder(state)) if context_builder is not None else {}
            extras.setdefault("environment", environment)
            extras.setdefault("engine_state", state)

            result = await self.evaluate(
                location,
                route_name=getattr(state, "name", None),
                path_params=getattr(state, "path_parameters", None),
                query_params=query_params,
                extra=getattr(state, "extra", None),
                context=extras,
            )

            match result:
                case Allow():
                    return None
                case Redirect(path=path):
                    return path
                case Reject():
                    if on_reject is not None:
                        on_reject(result, location)
                    return None
                case _:
                    assert_never(result)

        return handler
