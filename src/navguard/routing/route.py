"""RouteDefinition, RouteMatch, and TypedRoute."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from navguard.routing.pattern import RoutePattern, compile_pattern, strip_query

if TYPE_CHECKING:
    from navguard.guards.base import RouteGuard


@dataclass(frozen=True, slots=True, eq=False)
class RouteDefinition:
    """A router-agnostic route definition.

    Registered with a ``RouteTable`` (directly or through a navigator).
    ``guards`` are route-specific: they run in addition to the global
    guards, but only when navigating to this route, and require a
    ``name`` to be registered under.

    Usage::

        RouteDefinition("/users/:user_id", name="user", guards=(OwnerGuard(),))

        RouteDefinition("/settings", name="settings", children=(
            RouteDefinition("profile", name="settings.profile"),
            RouteDefinition("security", name="settings.security"),
        ))

    Child paths without a leading ``/`` are joined onto the parent path.
    """

    path: str
    name: str | None = None
    children: tuple[RouteDefinition, ...] = ()
    guards: tuple[RouteGuard, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def pattern(self) -> RoutePattern:
        """The parsed pattern. Raises ``PatternError`` if the path is malformed."""
        return compile_pattern(self.path)

    @classmethod
    def stub(cls, location: str) -> RouteDefinition:
        """An anonymous definition for a location with no registered route."""
        return cls(path=strip_query(location) or "/")

    def matches(self, location: str) -> bool:
        return self.pattern.matches(strip_query(location))

    def extract_params(self, location: str) -> dict[str, str]:
        return self.pattern.extract_params(strip_query(location))

    def __repr__(self) -> str:
        return f"RouteDefinition(path={self.path!r}, name={self.name!r})"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route table match."""

    route: RouteDefinition
    path_params: dict[str, str]


class TypedRoute:
    """Base class for type-safe navigation targets.

    Subclass once per named route and navigate with ``go_to_route()``
    instead of spelling out names and parameter dicts::

        class UserRoute(TypedRoute):
            name = "user"

            def __init__(self, user_id: str) -> None:
                self.user_id = user_id

            @property
            def path_parameters(self) -> Mapping[str, str]:
                return {"user_id": self.user_id}

        await navigator.go_to_route(UserRoute("42"))
    """

    name: ClassVar[str]

    @property
    def path_parameters(self) -> Mapping[str, str]:
        return {}

    @property
    def query_parameters(self) -> Mapping[str, str]:
        return {}

    @property
    def extra(self) -> Any:
        """Payload passed along with the navigation, never encoded in the URL."""
        return None

    def _key(self) -> tuple[str, frozenset[tuple[str, str]], frozenset[tuple[str, str]]]:
        return (
            self.name,
            frozenset(self.path_parameters.items()),
            frozenset(self.query_parameters.items()),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypedRoute):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.name!r}, path_params={dict(self.path_parameters)!r}, "
            f"query_params={dict(self.query_parameters)!r})"
        )
