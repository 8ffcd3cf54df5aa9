"""Navigation observers — hooks around every navigation attempt.

Subclass ``NavigationObserver`` and override only the hooks you need;
every hook is a no-op by default::

    class Analytics(NavigationObserver):
        def on_navigated(self, from_location: str, to_location: str) -> None:
            tracker.page_view(to_location)

Observers are notification-only. An observer that raises is logged and
ignored; it never changes the outcome of a navigation.
"""

import logging
from collections.abc import Iterable

logger = logging.getLogger("navguard.navigation")


class NavigationObserver:
    """Base observer. All hooks are no-ops."""

    def on_navigating(self, from_location: str, to_location: str) -> None:
        """Called before guards run for a navigation."""

    def on_navigated(self, from_location: str, to_location: str) -> None:
        """Called after the navigator moved to *to_location*."""

    def on_guard_redirect(self, from_location: str, to_location: str, redirect_to: str) -> None:
        """Called when a guard redirected *to_location* to *redirect_to*."""

    def on_guard_reject(self, from_location: str, to_location: str, reason: str | None) -> None:
        """Called when a guard rejected navigation to *to_location*."""

    def on_navigation_error(self, to_location: str, error: BaseException) -> None:
        """Called when a navigation call failed with an exception."""


class LoggingNavigationObserver(NavigationObserver):
    """Log every hook through ``logging``.

    Uses the ``navguard.navigation`` logger unless another is given.
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.logger = logger if logger is not None else logging.getLogger("navguard.navigation")
        self.level = level

    def on_navigating(self, from_location: str, to_location: str) -> None:
        self.logger.log(self.level, "Navigating: %s -> %s", from_location, to_location)

    def on_navigated(self, from_location: str, to_location: str) -> None:
        self.logger.log(self.level, "Navigated: %s -> %s", from_location, to_location)

    def on_guard_redirect(self, from_location: str, to_location: str, redirect_to: str) -> None:
        self.logger.log(self.level, "Guard redirect: %s -> %s", to_location, redirect_to)

    def on_guard_reject(self, from_location: str, to_location: str, reason: str | None) -> None:
        self.logger.log(self.level, "Guard rejected: %s (reason: %s)", to_location, reason)

    def on_navigation_error(self, to_location: str, error: BaseException) -> None:
        self.logger.error("Navigation error to %s: %s", to_location, error)


class CompositeObserver(NavigationObserver):
    """Fan each hook out to several observers, in order."""

    def __init__(self, observers: Iterable[NavigationObserver]) -> None:
        self.observers = tuple(observers)

    def _each(self, hook: str, *args: object) -> None:
        for observer in self.observers:
            notify(observer, hook, *args)

    def on_navigating(self, from_location: str, to_location: str) -> None:
        self._each("on_navigating", from_location, to_location)

    def on_navigated(self, from_location: str, to_location: str) -> None:
        self._each("on_navigated", from_location, to_location)

    def on_guard_redirect(self, from_location: str, to_location: str, redirect_to: str) -> None:
        self._each("on_guard_redirect", from_location, to_location, redirect_to)

    def on_guard_reject(self, from_location: str, to_location: str, reason: str | None) -> None:
        self._each("on_guard_reject", from_location, to_location, reason)

    def on_navigation_error(self, to_location: str, error: BaseException) -> None:
        self._each("on_navigation_error", to_location, error)


def notify(observer: NavigationObserver | None, hook: str, *args: object) -> None:
    """Call ``observer.<hook>(*args)``, logging and swallowing observer errors."""
    if observer is None:
        return
    try:
        getattr(observer, hook)(*args)
    except Exception:
        logger.exception("Navigation observer %r failed in %s", observer, hook)
