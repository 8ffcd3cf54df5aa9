"""Tests for navguard.adapters — wrapping an external router engine."""

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from navguard.adapters import EngineAdapter, RouterAdapter
from navguard.config import NavigatorConfig
from navguard.errors import NotFound, PatternError
from navguard.guards.base import FunctionGuard
from navguard.guards.builtin import AuthenticationGuard
from navguard.guards.context import GuardContext
from navguard.guards.result import GuardResult, allow, reject
from navguard.navigation.machine import NavigationStateMachine
from navguard.navigation.observer import NavigationObserver
from navguard.routing.params import parse_query
from navguard.routing.route import RouteDefinition, TypedRoute


@dataclass
class EngineState:
    matched_location: str
    name: str | None = None
    path_parameters: dict[str, str] = field(default_factory=dict)
    query_parameters: dict[str, str] = field(default_factory=dict)
    extra: Any = None


class FakeEngine:
    """A minimal router engine: a stack, a redirect hook, and listeners."""

    def __init__(self, routes: Mapping[str, str] | None = None) -> None:
        self.redirect: Any = None
        self.stack: list[str] = ["/"]
        self.routes = dict(routes or {})
        self.listeners: list[Callable[[], None]] = []
        self.refreshes = 0

    def _state(self, location: str, extra: Any) -> EngineState:
        path, _, query = location.partition("?")
        name = self.routes.get(path)
        return EngineState(
            matched_location=location,
            name=name,
            query_parameters=parse_query(query),
            extra=extra,
        )

    async def _resolve(self, location: str, extra: Any) -> str:
        if self.redirect is None:
            return location
        target = await self.redirect(None, self._state(location, extra))
        return target or location

    def _changed(self) -> None:
        for listener in list(self.listeners):
            listener()

    @property
    def location(self) -> str:
        return self.stack[-1]

    @property
    def route_name(self) -> str | None:
        return self.routes.get(self.location.partition("?")[0])

    @property
    def path_parameters(self) -> Mapping[str, str]:
        return {}

    @property
    def query_parameters(self) -> Mapping[str, str]:
        return parse_query(self.location.partition("?")[2])

    async def go(self, location: str, extra: Any = None) -> None:
        self.stack[:] = [await self._resolve(location, extra)]
        self._changed()

    async def push(self, location: str, extra: Any = None) -> None:
        self.stack.append(await self._resolve(location, extra))
        self._changed()

    async def replace(self, location: str, extra: Any = None) -> None:
        self.stack[-1] = await self._resolve(location, extra)
        self._changed()

    def pop(self, result: Any = None) -> None:
        if len(self.stack) > 1:
            self.stack.pop()
            self._changed()

    def can_pop(self) -> bool:
        return len(self.stack) > 1

    def refresh(self) -> None:
        self.refreshes += 1

    def add_listener(self, callback: Callable[[], None]) -> None:
        self.listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        self.listeners.remove(callback)


class Recorder(NavigationObserver):
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def on_navigating(self, from_location: str, to_location: str) -> None:
        self.calls.append(("navigating", from_location, to_location))

    def on_navigated(self, from_location: str, to_location: str) -> None:
        self.calls.append(("navigated", from_location, to_location))

    def on_guard_redirect(self, from_location: str, to_location: str, redirect_to: str) -> None:
        self.calls.append(("redirect", from_location, to_location, redirect_to))

    def on_guard_reject(self, from_location: str, to_location: str, reason: str | None) -> None:
        self.calls.append(("reject", from_location, to_location, reason))

    def on_navigation_error(self, to_location: str, error: BaseException) -> None:
        self.calls.append(("error", to_location, type(error).__name__))


class ProfileRoute(TypedRoute):
    name = "profile"

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id

    @property
    def path_parameters(self) -> Mapping[str, str]:
        return {"user_id": self.user_id}


class TestProtocol:
    def test_both_navigators_satisfy_router_adapter(self) -> None:
        assert isinstance(NavigationStateMachine(), RouterAdapter)
        assert isinstance(EngineAdapter.wrap(FakeEngine()), RouterAdapter)


class TestWiring:
    def test_installs_and_restores_redirect_hook(self) -> None:
        async def original(environment: Any, state: Any) -> str | None:
            return None

        engine = FakeEngine()
        engine.redirect = original
        adapter = EngineAdapter.wrap(engine)
        assert engine.redirect is not original
        assert len(engine.listeners) == 1

        adapter.dispose()
        assert engine.redirect is original
        assert engine.listeners == []

    @pytest.mark.asyncio
    async def test_redirect_applied_by_engine(self) -> None:
        engine = FakeEngine()
        adapter = EngineAdapter.wrap(
            engine, guards=[AuthenticationGuard(is_authenticated=lambda ctx: False)]
        )
        await adapter.go("/settings")
        assert adapter.current_location == "/login"

    @pytest.mark.asyncio
    async def test_reject_means_no_redirect(self) -> None:
        recorder = Recorder()
        engine = FakeEngine()
        adapter = EngineAdapter.wrap(
            engine, guards=[FunctionGuard(lambda ctx: reject("forbidden"))], observer=recorder
        )
        await adapter.push("/secret")
        # Applying (or refusing) a rejection is the engine's call
        assert adapter.current_location == "/secret"
        assert ("reject", "/", "/secret", "forbidden") in recorder.calls

    @pytest.mark.asyncio
    async def test_context_builder_and_extras(self) -> None:
        seen: list[GuardContext] = []

        def capture(ctx: GuardContext) -> GuardResult:
            seen.append(ctx)
            return allow()

        engine = FakeEngine()
        adapter = EngineAdapter.wrap(
            engine,
            guards=[FunctionGuard(capture)],
            extras={"app": "demo"},
            context_builder=lambda state: {"session": "s"},
        )
        await adapter.go("/home?tab=1", extra={"draft": True})

        context = seen[0]
        assert context.get("app") == "demo"
        assert context.get("session") == "s"
        assert isinstance(context.get("engine_state"), EngineState)
        assert dict(context.query_parameters) == {"tab": "1"}
        assert context.navigation_extra == {"draft": True}

    @pytest.mark.asyncio
    async def test_route_guards_use_engine_route_name(self) -> None:
        engine = FakeEngine(routes={"/admin": "admin"})
        adapter = EngineAdapter.wrap(
            engine,
            routes=[
                RouteDefinition(
                    "/admin", name="admin", guards=(FunctionGuard(lambda ctx: reject("no")),)
                )
            ],
        )
        recorder = Recorder()
        adapter.observer = recorder
        await adapter.go("/admin")
        assert ("reject", "/", "/admin", "no") in recorder.calls


class TestNavigation:
    @pytest.mark.asyncio
    async def test_forwarding_and_stack(self) -> None:
        engine = FakeEngine()
        adapter = EngineAdapter.wrap(engine)
        await adapter.push("/a")
        await adapter.push("/b")
        await adapter.replace("/c")
        assert engine.stack == ["/", "/a", "/c"]
        assert adapter.can_pop() is True

        adapter.pop()
        assert adapter.current_location == "/a"
        await adapter.go("/z")
        assert engine.stack == ["/z"]
        assert adapter.can_pop() is False

    @pytest.mark.asyncio
    async def test_observer_hooks(self) -> None:
        recorder = Recorder()
        adapter = EngineAdapter.wrap(
            FakeEngine(),
            guards=[AuthenticationGuard(is_authenticated=lambda ctx: False)],
            observer=recorder,
        )
        await adapter.go("/home")
        assert recorder.calls == [
            ("navigating", "/", "/home"),
            ("redirect", "/", "/home", "/login"),
            ("navigated", "/", "/login"),
        ]

    @pytest.mark.asyncio
    async def test_engine_error_notifies_and_propagates(self) -> None:
        class FailingEngine(FakeEngine):
            async def go(self, location: str, extra: Any = None) -> None:
                msg = "engine crashed"
                raise RuntimeError(msg)

        recorder = Recorder()
        adapter = EngineAdapter.wrap(FailingEngine(), observer=recorder)
        with pytest.raises(RuntimeError, match="engine crashed"):
            await adapter.go("/a")
        assert recorder.calls[-1] == ("error", "/a", "RuntimeError")

    @pytest.mark.asyncio
    async def test_named_navigation(self) -> None:
        engine = FakeEngine()
        adapter = EngineAdapter.wrap(
            engine,
            routes=[
                RouteDefinition("/users/:user_id", name="profile"),
                RouteDefinition("/search", name="search"),
            ],
        )
        await adapter.go_named("search", query_params={"q": "ada"})
        assert adapter.current_location == "/search?q=ada"
        assert dict(adapter.current_query_parameters) == {"q": "ada"}

        await adapter.push_named("profile", {"user_id": "1"})
        await adapter.replace_route(ProfileRoute("2"))
        assert engine.stack == ["/search?q=ada", "/users/2"]

        await adapter.push_route(ProfileRoute("3"))
        await adapter.go_to_route(ProfileRoute("4"))
        assert engine.stack == ["/users/4"]

        await adapter.replace_named("search")
        assert engine.stack == ["/search"]

    @pytest.mark.asyncio
    async def test_unknown_name(self) -> None:
        with pytest.raises(NotFound):
            await EngineAdapter.wrap(FakeEngine()).go_named("ghost")

    @pytest.mark.asyncio
    async def test_pop_until(self) -> None:
        engine = FakeEngine()
        adapter = EngineAdapter.wrap(engine)
        for location in ("/a", "/b", "/c"):
            await adapter.push(location)
        assert adapter.pop_until(lambda location: location == "/a") == 2
        assert engine.stack == ["/", "/a"]

    def test_pop_until_bounded_for_endless_engine(self) -> None:
        class EndlessEngine(FakeEngine):
            def can_pop(self) -> bool:
                return True

            def pop(self, result: Any = None) -> None:
                pass

        adapter = EngineAdapter.wrap(EndlessEngine(), config=NavigatorConfig(pop_until_limit=5))
        assert adapter.pop_until(lambda location: False) == 5

    def test_current_route_name(self) -> None:
        adapter = EngineAdapter.wrap(FakeEngine(routes={"/": "home"}))
        assert adapter.current_route_name == "home"
        assert dict(adapter.current_path_parameters) == {}

    @pytest.mark.asyncio
    async def test_refresh_delegates(self) -> None:
        engine = FakeEngine()
        await EngineAdapter.wrap(engine).refresh()
        assert engine.refreshes == 1

    def test_guard_registry(self) -> None:
        guard = FunctionGuard(lambda ctx: allow())
        adapter = EngineAdapter.wrap(FakeEngine())
        adapter.add_guard(guard)
        assert adapter.guards == (guard,)
        adapter.remove_guard(guard)
        assert adapter.guards == ()

    def test_register_rejects_bad_guard_pattern_atomically(self) -> None:
        guard = FunctionGuard(lambda ctx: allow(), applies_to=("/*/x",))
        adapter = EngineAdapter.wrap(FakeEngine())
        with pytest.raises(PatternError):
            adapter.register_routes(RouteDefinition("/a", name="a", guards=(guard,)))
        assert "a" not in adapter.routes
        assert "a" not in adapter.orchestrator.route_guards
        adapter.register_routes(RouteDefinition("/a", name="a"))
        assert "a" in adapter.routes


class TestLocations:
    @pytest.mark.asyncio
    async def test_mirrors_engine_changes(self) -> None:
        engine = FakeEngine()
        adapter = EngineAdapter.wrap(engine)
        received: list[str] = []

        async def collector() -> None:
            async for location in adapter.locations():
                received.append(location)

        task = asyncio.create_task(collector())
        await asyncio.sleep(0.01)

        await adapter.push("/a")
        # Changes made directly on the engine are mirrored too
        await engine.push("/b")
        engine.pop()
        await asyncio.sleep(0.01)
        adapter.dispose()
        await asyncio.wait_for(task, timeout=1.0)

        assert received == ["/a", "/b", "/a"]
