"""Navigation parameters — path params, query params, and payload.

``RouteParams`` is an immutable view with typed accessors, so screens
and guards never re-parse strings by hand::

    params = RouteParams(
        path_params={"user_id": "42"},
        query_params=parse_query("sort=name&page=2"),
    )
    params.get_int("user_id")     # 42
    params.query_int("page")      # 2
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qs, quote

_TRUE_VALUES = ("true", "1", "yes", "on")


def parse_query(query_string: str) -> dict[str, str]:
    """Parse a query string into a flat mapping.

    The first value wins for repeated keys and blank values are kept.
    A leading ``?`` is ignored.
    """
    parsed = parse_qs(query_string.lstrip("?"), keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items()}


def encode_query(params: Mapping[str, str]) -> str:
    """Percent-encode *params* as ``k=v&k2=v2`` (spaces become ``%20``)."""
    return "&".join(
        f"{quote(str(key), safe='')}={quote(str(value), safe='')}"
        for key, value in params.items()
    )


def _to_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class RouteParams:
    """Parameters extracted from one navigation.

    Attributes:
        path_params: Bound pattern parameters (``:user_id`` -> ``"42"``).
        query_params: Parsed query string, first value per key.
        extra: Payload passed with the navigation call; never encoded
            in the location.
    """

    path_params: Mapping[str, str] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)
    extra: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path_params", MappingProxyType(dict(self.path_params)))
        object.__setattr__(self, "query_params", MappingProxyType(dict(self.query_params)))

    def get(self, key: str) -> str:
        """Return a path parameter, or ``""`` when it is missing."""
        return self.path_params.get(key, "")

    def get_optional(self, key: str) -> str | None:
        return self.path_params.get(key)

    def get_int(self, key: str) -> int | None:
        """Return a path parameter as int, or ``None`` if missing or not numeric."""
        return _to_int(self.path_params.get(key))

    def query(self, key: str) -> str | None:
        return self.query_params.get(key)

    def query_required(self, key: str) -> str:
        """Return a query parameter, or ``""`` when it is missing."""
        return self.query_params.get(key, "")

    def query_int(self, key: str) -> int | None:
        return _to_int(self.query_params.get(key))

    def query_bool(self, key: str, default: bool = False) -> bool:
        """Return a query parameter as bool (``true``/``1``/``yes``/``on`` → True)."""
        value = self.query_params.get(key)
        if value is None:
            return default
        return value.lower() in _TRUE_VALUES

    def query_with_prefix(self, prefix: str) -> dict[str, str]:
        """Collect ``prefix.name=value`` parameters as ``{name: value}``.

        Useful for filter groups like ``?filter.name=ada&filter.role=admin``.
        """
        dotted = f"{prefix}."
        return {
            key[len(dotted) :]: value
            for key, value in self.query_params.items()
            if key.startswith(dotted)
        }

    def get_extra[T](self, kind: type[T]) -> T | None:
        """Return the payload if it is an instance of *kind*, else ``None``."""
        return self.extra if isinstance(self.extra, kind) else None
