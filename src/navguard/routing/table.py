"""Route table — named lookup and location matching.

Route definitions are flattened on registration: child paths are joined
onto their parents, every pattern is parsed (so malformed patterns fail
here, not mid-navigation), and names are indexed for named navigation.
"""

from dataclasses import replace

from navguard.errors import ConfigurationError, NotFound
from navguard.routing.params import encode_query
from navguard.routing.pattern import split_path, strip_query
from navguard.routing.route import RouteDefinition, RouteMatch


def join_path(parent: str, child: str) -> str:
    """Join a child route path onto its parent.

    Absolute child paths (leading ``/``) are kept as they are::

        join_path("/settings", "profile")   -> "/settings/profile"
        join_path("/settings", "/profile")  -> "/profile"
    """
    if child.startswith("/"):
        return child
    return "/" + "/".join(split_path(parent) + split_path(child))


class RouteTable:
    """Registered routes, in registration order.

    Usage::

        table = RouteTable()
        table.register(
            RouteDefinition("/", name="home"),
            RouteDefinition("/users/:user_id", name="user"),
        )
        table.find("user").path                        # "/users/:user_id"
        table.build_location("user", {"user_id": "42"}, {"tab": "posts"})
        # "/users/42?tab=posts"
        table.match("/users/42").path_params            # {"user_id": "42"}
    """

    __slots__ = ("_by_name", "_routes")

    def __init__(self) -> None:
        self._routes: list[RouteDefinition] = []
        self._by_name: dict[str, RouteDefinition] = {}

    @property
    def routes(self) -> list[RouteDefinition]:
        """Flattened routes with fully joined paths."""
        return list(self._routes)

    def register(self, *routes: RouteDefinition) -> list[RouteDefinition]:
        """Register routes (and their children) and return the flattened list.

        Raises ``PatternError`` for malformed paths or guard patterns and
        ``ConfigurationError`` for duplicate names or named-less routes
        that declare guards. A rejected batch registers nothing.
        """
        flattened: list[RouteDefinition] = []
        for route in routes:
            self._flatten(route, "/", flattened)

        # Validate the whole batch before mutating
        names: dict[str, RouteDefinition] = {}
        for route in flattened:
            _ = route.pattern
            for guard in route.guards:
                guard.validate()
            if route.guards and route.name is None:
                msg = (
                    f"Route {route.path!r} declares guards but has no name "
                    "to register them under."
                )
                raise ConfigurationError(msg)
            if route.name is None:
                continue
            if route.name in self._by_name or route.name in names:
                msg = f"Duplicate route name {route.name!r}."
                raise ConfigurationError(msg)
            names[route.name] = route

        self._routes.extend(flattened)
        self._by_name.update(names)
        return flattened

    def _flatten(
        self,
        route: RouteDefinition,
        parent_path: str,
        result: list[RouteDefinition],
    ) -> None:
        full_path = join_path(parent_path, route.path)
        result.append(replace(route, path=full_path, children=()))
        for child in route.children:
            self._flatten(child, full_path, result)

    def clear(self) -> None:
        self._routes.clear()
        self._by_name.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._routes)

    def find(self, name: str) -> RouteDefinition:
        """Return the route registered as *name*.

        Raises ``NotFound`` if no route has that name.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise NotFound(name) from None

    def match(self, location: str) -> RouteMatch | None:
        """Return the first registered route matching *location*, if any."""
        path = strip_query(location)
        for route in self._routes:
            params = route.pattern.match(path)
            if params is not None:
                return RouteMatch(route=route, path_params=params)
        return None

    def build_location(
        self,
        name: str,
        path_params: dict[str, str] | None = None,
        query_params: dict[str, str] | None = None,
    ) -> str:
        """Resolve *name* to a concrete location.

        Substitutes ``:param`` segments and appends the encoded query.
        Raises ``NotFound`` for an unknown name and ``ConfigurationError``
        when a pattern parameter has no value.
        """
        route = self.find(name)
        path_params = path_params or {}

        parts: list[str] = []
        for seg in route.pattern.segments:
            if seg.is_param:
                param_name = seg.param_name or ""
                if param_name not in path_params:
                    msg = f"Route {name!r} ({route.path}) requires path parameter {param_name!r}."
                    raise ConfigurationError(msg)
                parts.append(str(path_params[param_name]))
            elif seg.is_wildcard:
                msg = (
                    f"Route {name!r} ({route.path}) ends in a wildcard "
                    "and cannot be built by name."
                )
                raise ConfigurationError(msg)
            else:
                parts.append(seg.value)

        location = "/" + "/".join(parts)
        if query_params:
            location = f"{location}?{encode_query(query_params)}"
        return location
