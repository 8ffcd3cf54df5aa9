"""Navigation — the guarded state machine, its history events, and observers."""

from navguard.navigation.events import LocationBus, NavigationEvent, NavigationType
from navguard.navigation.machine import NavigationState, NavigationStateMachine
from navguard.navigation.observer import (
    CompositeObserver,
    LoggingNavigationObserver,
    NavigationObserver,
)

__all__ = [
    "CompositeObserver",
    "LocationBus",
    "LoggingNavigationObserver",
    "NavigationEvent",
    "NavigationObserver",
    "NavigationState",
    "NavigationStateMachine",
    "NavigationType",
]
