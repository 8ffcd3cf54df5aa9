"""GuardContext — the read-only snapshot handed to every guard.

Framework-specific values (a state reader, a UI context, the engine's
native state object, any custom service) travel in ``extras``, a
string-keyed capability bag. Guards look values up by key and,
optionally, by type::

    session = context.get("session", Session)
    if session is None or not session.user:
        return redirect("/login")

A guard must not rely on ambient global state beyond what ``extras``
supplies.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, overload

from navguard.routing.params import RouteParams
from navguard.routing.route import RouteDefinition


@dataclass(frozen=True, slots=True, eq=False)
class GuardContext:
    """Immutable per-evaluation context.

    Attributes:
        destination: The route being navigated to (a stub definition
            when the location matches no registered route).
        matched_location: The requested location, query string included.
        path_parameters: Parameters bound by the destination pattern.
        query_parameters: Parsed query string.
        navigation_extra: Payload passed with the navigation call.
        extras: Dependency-injection bag, read-only.
    """

    destination: RouteDefinition
    matched_location: str = ""
    path_parameters: Mapping[str, str] = field(default_factory=dict)
    query_parameters: Mapping[str, str] = field(default_factory=dict)
    navigation_extra: Any = None
    extras: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("path_parameters", "query_parameters", "extras"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))

    @overload
    def get(self, key: str) -> Any: ...

    @overload
    def get[T](self, key: str, kind: type[T]) -> T | None: ...

    def get(self, key: str, kind: type | None = None) -> Any:
        """Look up *key* in the DI bag.

        Returns ``None`` when the key is missing, or when *kind* is given
        and the value is not an instance of it.
        """
        value = self.extras.get(key)
        if kind is not None and not isinstance(value, kind):
            return None
        return value

    def require[T](self, key: str, kind: type[T]) -> T:
        """Like ``get()``, but raises ``LookupError`` instead of returning ``None``."""
        value = self.get(key, kind)
        if value is None:
            msg = (
                f"GuardContext.extras has no {kind.__name__} under {key!r}. "
                "Pass it through the navigator's extras or the adapter's context builder."
            )
            raise LookupError(msg)
        return value

    @property
    def params(self) -> RouteParams:
        return RouteParams(
            path_params=self.path_parameters,
            query_params=self.query_parameters,
            extra=self.navigation_extra,
        )

    def evolve(self, **changes: Any) -> GuardContext:
        """Return a copy with *changes* applied."""
        return replace(self, **changes)

    def __repr__(self) -> str:
        return (
            f"GuardContext(destination={self.destination!r}, "
            f"matched_location={self.matched_location!r})"
        )
