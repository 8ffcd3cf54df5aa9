"""navguard — guarded navigation for route-based applications.

Decides, before a navigation happens, whether it may proceed, should be
redirected, or must be rejected. Guards are small async objects;
the orchestrator runs them in priority order; a navigator applies the
decision to a stack of locations.

Basic usage::

    from navguard import AuthenticationGuard, NavigationStateMachine, RouteDefinition

    navigator = NavigationStateMachine(
        guards=[AuthenticationGuard(is_authenticated=lambda ctx: session.user is not None)],
        routes=[RouteDefinition("/users/:user_id", name="user")],
    )
    await navigator.go("/users/42")

Wrapping an external router engine::

    from navguard import EngineAdapter

    adapter = EngineAdapter.wrap(engine, guards=[...])
"""

__version__ = "0.1.0"
__all__ = [
    "Allow",
    "AnyGuard",
    "AuthenticationGuard",
    "CompositeGuard",
    "ConfigurationError",
    "EngineAdapter",
    "FunctionGuard",
    "GuardContext",
    "GuardOrchestrator",
    "GuardResult",
    "NavguardError",
    "NavigationEvent",
    "NavigationObserver",
    "NavigationStateMachine",
    "NavigationType",
    "NavigatorConfig",
    "NotFound",
    "PatternError",
    "Redirect",
    "RedirectFunctionGuard",
    "Reject",
    "RoleGuard",
    "RouteDefinition",
    "RouteGuard",
    "RouteParams",
    "RoutePattern",
    "RouteTable",
    "RouterAdapter",
    "TypedRoute",
    "allow",
    "redirect",
    "reject",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import navguard`` fast while providing a clean top-level API.
    """
    if name == "NavigatorConfig":
        from navguard.config import NavigatorConfig

        return NavigatorConfig

    if name == "GuardOrchestrator":
        from navguard.orchestrator import GuardOrchestrator

        return GuardOrchestrator

    if name in ("Allow", "GuardResult", "Redirect", "Reject", "allow", "redirect", "reject"):
        from navguard.guards import result as _result

        return getattr(_result, name)

    if name == "GuardContext":
        from navguard.guards.context import GuardContext

        return GuardContext

    if name in ("FunctionGuard", "RedirectFunctionGuard", "RouteGuard"):
        from navguard.guards import base as _base

        return getattr(_base, name)

    if name in ("AnyGuard", "CompositeGuard"):
        from navguard.guards import combinators as _combinators

        return getattr(_combinators, name)

    if name in ("AuthenticationGuard", "RoleGuard"):
        from navguard.guards import builtin as _builtin

        return getattr(_builtin, name)

    if name == "RoutePattern":
        from navguard.routing.pattern import RoutePattern

        return RoutePattern

    if name == "RouteParams":
        from navguard.routing.params import RouteParams

        return RouteParams

    if name in ("RouteDefinition", "TypedRoute"):
        from navguard.routing import route as _route

        return getattr(_route, name)

    if name == "RouteTable":
        from navguard.routing.table import RouteTable

        return RouteTable

    if name in ("NavigationEvent", "NavigationType"):
        from navguard.navigation import events as _events

        return getattr(_events, name)

    if name == "NavigationObserver":
        from navguard.navigation.observer import NavigationObserver

        return NavigationObserver

    if name == "NavigationStateMachine":
        from navguard.navigation.machine import NavigationStateMachine

        return NavigationStateMachine

    if name in ("EngineAdapter", "RouterAdapter"):
        from navguard import adapters as _adapters

        return getattr(_adapters, name)

    if name in ("ConfigurationError", "NavguardError", "NotFound", "PatternError"):
        from navguard import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
