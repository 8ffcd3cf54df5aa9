"""In-memory navigation state machine.

Owns the navigation stack, the current location and its parameters,
and an append-only history. Every ``go``/``push``/``replace`` first
asks the ``GuardOrchestrator`` for a decision, then applies it:

- Allow    -> navigate to the requested location
- Redirect -> navigate to the redirect path instead (recorded as
  ``REDIRECTED`` with ``redirected_from``)
- Reject   -> stay put, record a ``REJECTED`` event

A redirect is resolved exactly once per attempt: guards are not re-run
against the redirect target. This bounds the cost of one navigation to
one pass over the guards and rules out redirect loops, at the price of
not guarding the redirect target itself.

Concurrency: with ``NavigatorConfig.serialize_navigation`` (the
default) guarded operations run under a single ``anyio.Lock``, so
overlapping calls complete one after another in arrival order. With it
disabled, the caller must not overlap calls on one instance. ``pop``,
``pop_until`` and ``reset`` never suspend, and raise ``RuntimeError``
while a guarded navigation is pending.

Usage::

    navigator = NavigationStateMachine(
        guards=[AuthenticationGuard(is_authenticated=is_logged_in)],
        routes=[RouteDefinition("/users/:user_id", name="user")],
        extras={"session": session},
    )
    await navigator.push_named("user", {"user_id": "42"})
    navigator.current_path_parameters   # {"user_id": "42"}
"""

import logging
from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from dataclasses import dataclass
from time import time
from types import MappingProxyType
from typing import Any, assert_never

import anyio

from navguard.config import NavigatorConfig
from navguard.guards.base import RouteGuard
from navguard.guards.result import Allow, GuardResult, Redirect, Reject
from navguard.navigation.events import LocationBus, NavigationEvent, NavigationType
from navguard.navigation.observer import (
    CompositeObserver,
    LoggingNavigationObserver,
    NavigationObserver,
    notify,
)
from navguard.orchestrator import GuardOrchestrator
from navguard.routing.params import parse_query
from navguard.routing.route import RouteDefinition, TypedRoute
from navguard.routing.table import RouteTable

logger = logging.getLogger("navguard.navigation")

DEACTIVATION_BLOCKED = "Deactivation blocked"


@dataclass(frozen=True, slots=True)
class NavigationState:
    """Immutable snapshot of a navigator. ``current_location == stack[-1]``."""

    current_location: str
    stack: tuple[str, ...]
    history: tuple[NavigationEvent, ...]


class NavigationStateMachine:
    """Guarded in-memory navigator.

    Implements the ``RouterAdapter`` surface without any UI framework,
    which makes it the navigator of choice for tests and headless use.
    """

    def __init__(
        self,
        config: NavigatorConfig | None = None,
        *,
        orchestrator: GuardOrchestrator | None = None,
        guards: Iterable[RouteGuard] = (),
        routes: Iterable[RouteDefinition] = (),
        extras: Mapping[str, Any] | None = None,
        observer: NavigationObserver | None = None,
    ) -> None:
        self.config = config or NavigatorConfig()
        self._orchestrator = orchestrator if orchestrator is not None else GuardOrchestrator()
        for guard in guards:
            self._orchestrator.add_global_guard(guard)

        self.extras: dict[str, Any] = dict(extras or {})
        if self.config.log_navigation:
            observers = [LoggingNavigationObserver()]
            if observer is not None:
                observers.append(observer)
            observer = CompositeObserver(observers)
        self.observer = observer

        self._routes = RouteTable()
        self._bus = LocationBus(maxsize=self.config.location_queue_size)
        self._lock: anyio.Lock | None = None  # Created lazily on first use
        self._pending = 0
        self._disposed = False

        initial = self.config.initial_location
        self._stack: list[str] = [initial]
        self._history: list[NavigationEvent] = []
        self._last_timestamp = 0.0
        self._current_location = initial
        self._current_route_name: str | None = None
        self._current_path_params: dict[str, str] = {}
        self._current_query_params: dict[str, str] = {}
        self._current_extra: Any = None
        self.last_pop_result: Any = None

        self.register_routes(*routes)
        self._set_current(initial, None)

    # -- Read-only state --

    @property
    def orchestrator(self) -> GuardOrchestrator:
        return self._orchestrator

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def current_location(self) -> str:
        return self._current_location

    @property
    def current_route_name(self) -> str | None:
        return self._current_route_name

    @property
    def current_path_parameters(self) -> Mapping[str, str]:
        return MappingProxyType(self._current_path_params)

    @property
    def current_query_parameters(self) -> Mapping[str, str]:
        return MappingProxyType(self._current_query_params)

    @property
    def current_extra(self) -> Any:
        return self._current_extra

    @property
    def stack(self) -> tuple[str, ...]:
        return tuple(self._stack)

    @property
    def history(self) -> tuple[NavigationEvent, ...]:
        return tuple(self._history)

    @property
    def navigation_history(self) -> list[str]:
        """Just the ``to`` locations of every recorded event."""
        return [event.to_location for event in self._history]

    @property
    def state(self) -> NavigationState:
        return NavigationState(
            current_location=self._current_location,
            stack=tuple(self._stack),
            history=tuple(self._history),
        )

    def locations(self) -> AsyncIterator[str]:
        """Subscribe to location changes."""
        return self._bus.subscribe()

    # -- Guards --

    @property
    def guards(self) -> tuple[RouteGuard, ...]:
        return self._orchestrator.global_guards

    def add_guard(self, guard: RouteGuard) -> None:
        self._orchestrator.add_global_guard(guard)

    def remove_guard(self, guard: RouteGuard) -> None:
        self._orchestrator.remove_global_guard(guard)

    # -- Routes --

    def register_routes(self, *routes: RouteDefinition) -> None:
        """Register routes for matching and named navigation.

        Route-specific guards are handed to the orchestrator under the
        route's name.
        """
        if not routes:
            return
        for route in self._routes.register(*routes):
            for guard in route.guards:
                self._orchestrator.add_route_guard(route.name or "", guard)
        self._set_current(self._current_location, self._current_extra)

    def clear_routes(self) -> None:
        for route in self._routes.routes:
            if route.guards and route.name is not None:
                self._orchestrator.clear_route_guards(route.name)
        self._routes.clear()
        self._set_current(self._current_location, self._current_extra)

    # -- Internal helpers --

    def _set_current(self, location: str, extra: Any) -> None:
        match = self._routes.match(location)
        self._current_location = location
        self._current_route_name = match.route.name if match is not None else None
        self._current_path_params = dict(match.path_params) if match is not None else {}
        self._current_query_params = parse_query(location.partition("?")[2])
        self._current_extra = extra

    def _record(
        self,
        from_location: str,
        to_location: str,
        kind: NavigationType,
        *,
        redirected_from: str | None = None,
        reason: str | None = None,
    ) -> NavigationEvent:
        # Clamp so history timestamps never go backwards
        timestamp = max(time(), self._last_timestamp)
        self._last_timestamp = timestamp
        event = NavigationEvent(
            from_location=from_location,
            to_location=to_location,
            type=kind,
            redirected_from=redirected_from,
            reason=reason,
            timestamp=timestamp,
        )
        self._history.append(event)
        return event

    def _check_alive(self) -> None:
        if self._disposed:
            msg = "Navigator has been disposed."
            raise RuntimeError(msg)

    def _check_idle(self) -> None:
        if self._pending:
            msg = "Cannot change the stack while a guarded navigation is in flight."
            raise RuntimeError(msg)

    def _navigation_lock(self) -> anyio.Lock | None:
        if not self.config.serialize_navigation:
            return None
        if self._lock is None:
            self._lock = anyio.Lock()
        return self._lock

    async def _resolve(self, location: str, extra: Any) -> GuardResult:
        match = self._routes.match(location)
        return await self._orchestrator.evaluate(
            location,
            route_name=match.route.name if match is not None else None,
            path_params=match.path_params if match is not None else {},
            query_params=parse_query(location.partition("?")[2]),
            extra=extra,
            context=self.extras,
            route=match.route if match is not None else None,
        )

    async def _can_leave(self) -> bool:
        location = self._current_location
        match = self._routes.match(location)
        return await self._orchestrator.can_deactivate(
            location,
            route_name=match.route.name if match is not None else None,
            path_params=self._current_path_params,
            query_params=self._current_query_params,
            extra=self._current_extra,
            context=self.extras,
            route=match.route if match is not None else None,
        )

    async def _navigate(self, kind: NavigationType, location: str, extra: Any) -> NavigationEvent:
        self._check_alive()
        lock = self._navigation_lock()
        self._pending += 1
        try:
            if lock is None:
                return await self._run(kind, location, extra)
            async with lock:
                return await self._run(kind, location, extra)
        finally:
            self._pending -= 1

    async def _run(self, kind: NavigationType, location: str, extra: Any) -> NavigationEvent:
        from_location = self._current_location
        notify(self.observer, "on_navigating", from_location, location)

        try:
            leaving = (
                kind in (NavigationType.GO, NavigationType.REPLACE) and location != from_location
            )
            if leaving and self.config.check_deactivation and not await self._can_leave():
                notify(
                    self.observer, "on_guard_reject", from_location, location, DEACTIVATION_BLOCKED
                )
                return self._record(
                    from_location, location, NavigationType.REJECTED, reason=DEACTIVATION_BLOCKED
                )
            result = await self._resolve(location, extra)
        except Exception as exc:
            notify(self.observer, "on_navigation_error", location, exc)
            raise

        redirected_from: str | None = None
        match result:
            case Allow():
                target, target_extra = location, extra
            case Redirect(path=path):
                notify(self.observer, "on_guard_redirect", from_location, location, path)
                target = path
                target_extra = result.extra if result.extra is not None else extra
                redirected_from = location
            case Reject(reason=reason):
                notify(self.observer, "on_guard_reject", from_location, location, reason)
                return self._record(from_location, location, NavigationType.REJECTED, reason=reason)
            case _:
                assert_never(result)

        if kind is NavigationType.GO:
            self._stack[:] = [target]
        elif kind is NavigationType.PUSH:
            self._stack.append(target)
        else:
            self._stack[-1] = target
        self._set_current(target, target_extra)

        event = self._record(
            from_location,
            target,
            NavigationType.REDIRECTED if redirected_from is not None else kind,
            redirected_from=redirected_from,
        )
        logger.debug("%s", event)
        notify(self.observer, "on_navigated", from_location, target)
        self._bus.publish(target)
        return event

    # -- Navigation --

    async def go(self, location: str, extra: Any = None) -> NavigationEvent:
        """Navigate to *location*, replacing the whole stack."""
        return await self._navigate(NavigationType.GO, location, extra)

    async def push(self, location: str, extra: Any = None) -> NavigationEvent:
        """Navigate to *location* on top of the current stack."""
        return await self._navigate(NavigationType.PUSH, location, extra)

    async def replace(self, location: str, extra: Any = None) -> NavigationEvent:
        """Navigate to *location*, overwriting the top of the stack."""
        return await self._navigate(NavigationType.REPLACE, location, extra)

    async def go_named(
        self,
        name: str,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
    ) -> NavigationEvent:
        """Navigate to a registered route by name. Raises ``NotFound`` for unknown names."""
        location = self._routes.build_location(
            name, dict(path_params or {}), dict(query_params or {})
        )
        return await self.go(location, extra)

    async def push_named(
        self,
        name: str,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
    ) -> NavigationEvent:
        location = self._routes.build_location(
            name, dict(path_params or {}), dict(query_params or {})
        )
        return await self.push(location, extra)

    async def replace_named(
        self,
        name: str,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
    ) -> NavigationEvent:
        location = self._routes.build_location(
            name, dict(path_params or {}), dict(query_params or {})
        )
        return await self.replace(location, extra)

    async def go_to_route(self, route: TypedRoute) -> NavigationEvent:
        return await self.go_named(
            route.name, route.path_parameters, route.query_parameters, route.extra
        )

    async def push_route(self, route: TypedRoute) -> NavigationEvent:
        return await self.push_named(
            route.name, route.path_parameters, route.query_parameters, route.extra
        )

    async def replace_route(self, route: TypedRoute) -> NavigationEvent:
        return await self.replace_named(
            route.name, route.path_parameters, route.query_parameters, route.extra
        )

    def pop(self, result: Any = None) -> NavigationEvent | None:
        """Remove the top of the stack. The root location is never removed.

        Returns the recorded event, or ``None`` when there was nothing
        to pop. *result* is kept as ``last_pop_result`` for the screen
        being returned to.

        Raises ``RuntimeError`` while a guarded navigation is pending.
        """
        self._check_alive()
        self._check_idle()
        if len(self._stack) <= 1:
            return None

        from_location = self._current_location
        self._stack.pop()
        self._set_current(self._stack[-1], None)
        self.last_pop_result = result

        event = self._record(from_location, self._current_location, NavigationType.POP)
        notify(self.observer, "on_navigated", from_location, self._current_location)
        self._bus.publish(self._current_location)
        return event

    def pop_until(self, predicate: Callable[[str], bool]) -> int:
        """Pop until *predicate* accepts the current location or the root is reached.

        Stops after ``NavigatorConfig.pop_until_limit`` pops even if the
        predicate never matches; the ceiling only guarantees termination.
        Returns the number of locations popped.
        """
        popped = 0
        while (
            len(self._stack) > 1
            and not predicate(self._current_location)
            and popped < self.config.pop_until_limit
        ):
            self.pop()
            popped += 1
        return popped

    def can_pop(self) -> bool:
        return len(self._stack) > 1

    def reset(self, initial_location: str | None = None) -> None:
        """Clear stack and history and reseed with *initial_location*."""
        self._check_idle()
        location = initial_location or self.config.initial_location
        self._stack[:] = [location]
        self._history.clear()
        self._last_timestamp = 0.0
        self.last_pop_result = None
        self._set_current(location, None)
        self._bus.publish(location)

    async def refresh(self) -> NavigationEvent:
        """Re-run the guards for the current location, keeping the stack below it."""
        return await self.replace(self._current_location, self._current_extra)

    def dispose(self) -> None:
        """Close the location stream. Further navigation raises ``RuntimeError``."""
        self._disposed = True
        self._bus.close()
