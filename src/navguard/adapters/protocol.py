"""RouterAdapter protocol — the navigation surface applications code against.

Two implementations ship with navguard:

- ``NavigationStateMachine`` simulates a router in memory (tests,
  headless use).
- ``EngineAdapter`` wraps an external router engine and wires its
  redirect hook to the guard orchestrator.

No base class required. Anything with this shape is a navigator::

    class AppRoutes:
        def __init__(self, nav: RouterAdapter) -> None:
            self.nav = nav

        async def open_profile(self, user_id: str) -> None:
            await self.nav.push_named("profile", {"user_id": user_id})
"""

from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from navguard.guards.base import RouteGuard
from navguard.routing.route import TypedRoute


@runtime_checkable
class RouterAdapter(Protocol):
    """Protocol for navigators."""

    async def go(self, location: str, extra: Any = None) -> Any: ...

    async def push(self, location: str, extra: Any = None) -> Any: ...

    async def replace(self, location: str, extra: Any = None) -> Any: ...

    async def go_named(
        self,
        name: str,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
    ) -> Any: ...

    async def push_named(
        self,
        name: str,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
    ) -> Any: ...

    async def replace_named(
        self,
        name: str,
        path_params: Mapping[str, str] | None = None,
        query_params: Mapping[str, str] | None = None,
        extra: Any = None,
    ) -> Any: ...

    async def go_to_route(self, route: TypedRoute) -> Any: ...

    async def push_route(self, route: TypedRoute) -> Any: ...

    async def replace_route(self, route: TypedRoute) -> Any: ...

    def pop(self, result: Any = None) -> Any: ...

    def pop_until(self, predicate: Callable[[str], bool]) -> int: ...

    def can_pop(self) -> bool: ...

    @property
    def current_location(self) -> str: ...

    @property
    def current_route_name(self) -> str | None: ...

    @property
    def current_path_parameters(self) -> Mapping[str, str]: ...

    @property
    def current_query_parameters(self) -> Mapping[str, str]: ...

    def locations(self) -> AsyncIterator[str]: ...

    def add_guard(self, guard: RouteGuard) -> None: ...

    def remove_guard(self, guard: RouteGuard) -> None: ...

    @property
    def guards(self) -> tuple[RouteGuard, ...]: ...

    async def refresh(self) -> Any: ...

    def dispose(self) -> None: ...
