"""Route pattern parsing and matching.

Patterns are parsed once, at guard or route registration, into an
immutable ``RoutePattern``. Matching splits the concrete path on ``/``
and walks both segment lists side by side — no backtracking is needed
because each parameter consumes exactly one segment and the only
variable-length segment (``*``) is always last.

Segment kinds::

    "/users"        literal   -> must equal the path segment
    "/users/:id"    parameter -> any single non-empty segment, binds "id"
    "/admin/*"      wildcard  -> one or more trailing segments

Query strings are not part of a path. Callers strip them with
``strip_query()`` before matching.
"""

from dataclasses import dataclass
from functools import lru_cache

from navguard.errors import PatternError

WILDCARD = "*"
PARAM_PREFIX = ":"


@dataclass(frozen=True, slots=True)
class PatternSegment:
    """A parsed segment of a route pattern.

    Literal:   ``users``  (is_param=False, is_wildcard=False)
    Param:     ``:id``    (is_param=True, param_name="id")
    Wildcard:  ``*``      (is_wildcard=True)
    """

    value: str
    is_param: bool = False
    is_wildcard: bool = False
    param_name: str | None = None


def split_path(path: str) -> list[str]:
    """Split *path* on ``/``, discarding empty segments.

    Leading, trailing, and doubled slashes are insignificant::

        "/users/42/"  -> ["users", "42"]
        "/"           -> []
    """
    return [part for part in path.split("/") if part]


def strip_query(location: str) -> str:
    """Return *location* without its ``?query`` and ``#fragment`` parts."""
    for marker in ("?", "#"):
        location = location.split(marker, 1)[0]
    return location


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """A parsed, immutable route pattern.

    Usage::

        pattern = parse_pattern("/users/:id")
        pattern.match("/users/42")   # {"id": "42"}
        pattern.match("/users")      # None
    """

    source: str
    segments: tuple[PatternSegment, ...]

    @property
    def has_wildcard(self) -> bool:
        """True if the pattern ends in a ``*`` segment."""
        return bool(self.segments) and self.segments[-1].is_wildcard

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(seg.param_name for seg in self.segments if seg.param_name)

    def match(self, path: str) -> dict[str, str] | None:
        """Match *path* and return bound parameters, or ``None``."""
        parts = split_path(path)
        segments = self.segments

        if self.has_wildcard:
            # The wildcard needs at least one segment of its own
            if len(parts) < len(segments):
                return None
        elif len(parts) != len(segments):
            return None

        params: dict[str, str] = {}
        for seg, part in zip(segments, parts, strict=False):
            if seg.is_wildcard:
                return params
            if seg.is_param:
                params[seg.param_name or ""] = part
            elif seg.value != part:
                return None
        return params

    def matches(self, path: str) -> bool:
        return self.match(path) is not None

    def extract_params(self, path: str) -> dict[str, str]:
        """Return the parameters bound by *path*; empty if it doesn't match."""
        return self.match(path) or {}

    def __str__(self) -> str:
        return self.source


def parse_pattern(source: str) -> RoutePattern:
    """Parse a route pattern string into a ``RoutePattern``.

    Examples::

        "/users"         -> [PatternSegment("users")]
        "/users/:id"     -> [PatternSegment("users"), PatternSegment(":id", is_param=True, ...)]
        "/admin/*"       -> [PatternSegment("admin"), PatternSegment("*", is_wildcard=True)]

    Raises ``PatternError`` for a wildcard that is not the final
    segment, a parameter without a name, or a repeated parameter name.
    """
    parts = split_path(strip_query(source))
    segments: list[PatternSegment] = []
    seen: set[str] = set()

    for index, part in enumerate(parts):
        if part == WILDCARD:
            if index != len(parts) - 1:
                raise PatternError(source, "'*' is only allowed as the final segment")
            segments.append(PatternSegment(value=part, is_wildcard=True))
        elif part.startswith(PARAM_PREFIX):
            name = part[len(PARAM_PREFIX) :]
            if not name:
                raise PatternError(source, f"parameter segment {part!r} has no name")
            if name in seen:
                raise PatternError(source, f"parameter {name!r} appears more than once")
            seen.add(name)
            segments.append(PatternSegment(value=part, is_param=True, param_name=name))
        else:
            segments.append(PatternSegment(value=part))

    return RoutePattern(source=source, segments=tuple(segments))


@lru_cache(maxsize=1024)
def compile_pattern(source: str) -> RoutePattern:
    """Cached ``parse_pattern`` — guards match the same patterns repeatedly."""
    return parse_pattern(source)


def matches(pattern: str | RoutePattern, path: str) -> bool:
    """Does *path* satisfy *pattern*?"""
    compiled = pattern if isinstance(pattern, RoutePattern) else compile_pattern(pattern)
    return compiled.matches(path)


def extract_params(pattern: str | RoutePattern, path: str) -> dict[str, str]:
    """Path parameters bound by matching *path* against *pattern*."""
    compiled = pattern if isinstance(pattern, RoutePattern) else compile_pattern(pattern)
    return compiled.extract_params(path)
