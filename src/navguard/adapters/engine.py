"""Engine adapter — guard an external router engine.

An engine is whatever actually drives screens: it owns its own stack,
matches its own routes, and calls a redirect hook before every
navigation. ``EngineAdapter.wrap()`` installs the orchestrator's
redirect handler as that hook, mirrors the engine's location changes
onto a location stream, and exposes the ``RouterAdapter`` surface on
top::

    adapter = EngineAdapter.wrap(
        engine,
        guards=[AuthenticationGuard(is_authenticated=is_logged_in)],
        context_builder=lambda state: {"session": session},
    )
    await adapter.go("/dashboard")

The engine stays responsible for applying the decision: navguard only
answers the hook. Rejections become "no redirect" at the hook, and are
reported to the observer's ``on_guard_reject``.
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Mapping
from typing import Any, Protocol, Self

from navguard._internal.invoke import invoke
from navguard.config import NavigatorConfig
from navguard.guards.base import RouteGuard
from navguard.guards.result import Reject
from navguard.navigation.events import LocationBus
from navguard.navigation.observer import NavigationObserver, notify
from navguard.orchestrator import ContextBuilder, GuardOrchestrator
from navguard.routing.route import RouteDefinition, TypedRoute
from navguard.routing.table import RouteTable

logger = logging.getLogger("navguard.adapters")

type RedirectHook = Callable[[Any, Any], Awaitable[str | None]]


class RouterEngine(Protocol):
    """What navguard needs from an external router engine.

    ``redirect`` is the engine's own redirect hook, called as
    ``await redirect(environment, state)`` before each navigation. The
    *state* it passes should expose ``matched_location``,
    ``path_parameters``, ``query_parameters``, ``extra`` and ``name``.
    Navigation methods may be sync or async.
    """

    redirect: RedirectHook | None

    @property
    def location(self) -> str: ...

    @property
    def route_name(self) -> str | None: ...

    @property
    def path_parameters(self) -> Mapping[str, str]: ...

    @property
    def query_parameters(self) -> Mapping[str, str]: ...

    def go(self, location: str, extra: Any = None) -> Any: ...

    def push(self, location: str, extra: Any = None) -> Any: ...

    def replace(self, location: str, extra: Any = None) -> Any: ...

    def pop(self, result: Any = None) -> Any: ...

    def can_pop(self) -> bool: ...

    def refresh(self) -> Any: ...

    def add_listener(self, callback: Callable[[], None]) -> None: ...

    def remove_listener(self, callback: Callable[[], None]) -> None: ...


class EngineAdapter:
    """``RouterAdapter`` over an external router engine."""

    def __init__(
        self,
        engine: RouterEngine,
        *,
        config: NavigatorConfig | None = None,
        orchestrator: GuardOrchestrator | None = None,
        guards: Iterable[RouteGuard] = (),
        routes: Iterable[RouteDefinition] = (),
        extras: Mapping[str, Any] | None = None,
        context_builder: ContextBuilder | None = None,
        observer: NavigationObserver | None = None,
    ) -> None:
        self.engine = engine
        self.config = config or NavigatorConfig()
        self._orchestrator = orchestrator if orchestrator is not None else GuardOrchestrator()
        for guard in guards:
            self._orchestrator.add_global_guard(guard)

        self.extras: dict[str, Any] = dict(extras or {})
        self.context_builder = context_builder
        self.observer = observer

        self._routes = RouteTable()
        self.register_routes(*routes)

        self._bus = LocationBus(maxsize=self.config.location_queue_size)
        self._previous_hook = engine.redirect
        self._handler = self._orchestrator.create_redirect_handler(
            self._build_context, on_reject=self._on_reject
        )
        engine.redirect = self._redirect_hook
        engine.add_listener(self._on_engine_change)

    @classmethod
    def wrap(cls, engine: RouterEngine, **kwargs: Any) -> Self:
        """Wrap an existing engine. Existing routes keep working unchanged."""
        return cls(engine, **kwargs)

    # -- Redirect hook --

    def _build_context(self, state: Any) -> Mapping[str, Any]:
        extras = dict(self.extras)
        if self.context_builder is not None:
            extras.update(self.context_builder(state))
        return extras

    def _on_reject(self, result: Reject, location: str) -> None:
        notify(self.observer, "on_guard_reject", self.engine.location, location, result.reason)

    async def _redirect_hook(self, environment: Any, state: Any) -> str | None:
        target = await self._handler(environment, state)
        if target is not None:
            location = getattr(state, "matched_location", None) or "/"
            notify(self.observer, "on_guard_redirect", self.engine.location, location, target)
        return target

    def _on_engine_change(self) -> None:
        self._bus.publish(self.engine.location)

    # -- Routes & guards --

    @property
    def orchestrator(self) -> GuardOrchestrator:
        return self._orchestrator

    @property
    def routes(self) -> RouteTable:
        return self._routes

    def register_routes(self, *routes: RouteDefinition) -> None:
        """Register routes for named navigation and route-specific guards."""
        for route in self._routes.register(*routes):
            for guard in route.guards:
                self._orchestrator.add_route_guard(route.name or "", guard)

    @property
    def guards(self) -> tuple[RouteGuard, ...]:
        return self._orchestrator.global_guards

    def add_guard(self, guard: RouteGuard) -> None:
        self._orchestrator.add_global_guard(guard)

    def remove_guard(self, guard: RouteGuard) -> None:
        self._orchestrator.remove_global_guard(guard)

    # -- Navigation --

    async def _forward(self, method: Callable[..., Any], location: str, extra: Any) -> None:
        from_location = self.engine.location
        notify(self.observer, "on_navigating", from_location, location)
        try:
            await invoke(method, location, extra)
        except Exception as exc:
            notify(self.observer, "on_navigation_error", location, exc)
            raise
        notify(self.observer, "on_navigated", from_location, self.engine.location)

    async def go(self, location: str, extra: Any = None) -> None:
        await self._forward(self.engine.go, location, extra)

    async def push(self, location: str, extra: Any = None) -> None:
        await self._forward(self.engine.push, location, extra)

    async def replace(self, location: str, extra: Any = None) -> None:
        await self._forward(self.engine.replace, location, extra)

    async def go_named(
        self,
        name: str,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
    ) -> None:
        """Navigate by route name. Raises ``NotFound`` for unknown names."""
        location = self._routes.build_location(
            name, dict(path_params or {}), dict(query_params or {})
        )
        await self.go(location, extra)

    async def push_named(
        self,
        name: str,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
    ) -> None:
        location = self._routes.build_location(
            name, dict(path_params or {}), dict(query_params or {})
        )
        await self.push(location, extra)

    async def replace_named(
        self,
        name: str,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
    ) -> None:
        location = self._routes.build_location(
            name, dict(path_params or {}), dict(query_params or {})
        )
        await self.replace(location, extra)

    async def go_to_route(self, route: TypedRoute) -> None:
        await self.go_named(route.name, route.path_parameters, route.query_parameters, route.extra)

    async def push_route(self, route: TypedRoute) -> None:
        await self.push_named(
            route.name, route.path_parameters, route.query_parameters, route.extra
        )

    async def replace_route(self, route: TypedRoute) -> None:
        await self.replace_named(
            route.name, route.path_parameters, route.query_parameters, route.extra
        )

    def pop(self, result: Any = None) -> None:
        self.engine.pop(result)

    def pop_until(self, predicate: Callable[[str], bool]) -> int:
        """Pop until *predicate* accepts the current location.

        Bounded by ``NavigatorConfig.pop_until_limit`` so an engine whose
        ``can_pop`` never turns False cannot spin forever.
        """
        popped = 0
        while (
            self.engine.can_pop()
            and not predicate(self.engine.location)
            and popped < self.config.pop_until_limit
        ):
            self.engine.pop(None)
            popped += 1
        return popped

    def can_pop(self) -> bool:
        return self.engine.can_pop()

    @property
    def current_location(self) -> str:
        return self.engine.location

    @property
    def current_route_name(self) -> str | None:
        return self.engine.route_name

    @property
    def current_path_parameters(self) -> Mapping[str, str]:
        return self.engine.path_parameters

    @property
    def current_query_parameters(self) -> Mapping[str, str]:
        return self.engine.query_parameters

    def locations(self) -> AsyncIterator[str]:
        return self._bus.subscribe()

    async def refresh(self) -> None:
        """Ask the engine to re-run its redirect hook for the current location."""
        await invoke(self.engine.refresh)

    def dispose(self) -> None:
        """Detach from the engine and restore its previous redirect hook."""
        self.engine.remove_listener(self._on_engine_change)
        if self.engine.redirect == self._redirect_hook:
            self.engine.redirect = self._previous_hook
        self._bus.close()
        logger.debug("Detached from engine %r", self.engine)
