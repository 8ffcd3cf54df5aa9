"""Navguard exception hierarchy.

Shared across the pattern matcher, route table, orchestrator, and
navigators so every module raises and catches the same types.

Guard failures are not represented here: a guard that raises is turned
into a ``Reject`` by the orchestrator and never escapes it.
"""


class NavguardError(Exception):
    """Base for all navguard-specific errors."""


class ConfigurationError(NavguardError):
    """Raised when navigator configuration is invalid.

    Typically raised while registering routes or guards, before any
    navigation happens.
    """


class PatternError(ConfigurationError):
    """A route pattern could not be parsed.

    Raised at registration time so a bad pattern surfaces immediately
    instead of during live navigation.
    """

    def __init__(self, pattern: str, detail: str) -> None:
        self.pattern = pattern
        self.detail = detail
        super().__init__(f"Invalid route pattern {pattern!r}: {detail}")


class NotFound(NavguardError):  # noqa: N818
    """Named navigation referenced a route name that was never registered."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        super().__init__(detail or f"Route not found: {name!r}")
