"""Navigator configuration.

NavigatorConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass

from navguard.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class NavigatorConfig:
    """Navigator configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = NavigatorConfig(initial_location="/home", log_navigation=True)
    """

    # Stack
    initial_location: str = "/"
    pop_until_limit: int = 100  # Termination ceiling, not a semantic limit

    # Concurrency: single-slot lock around go/push/replace; pop and reset raise while one is pending
    serialize_navigation: bool = True

    # Guards
    check_deactivation: bool = True

    # Observability
    log_navigation: bool = False
    location_queue_size: int = 256  # Per-subscriber buffer

    def __post_init__(self) -> None:
        if not self.initial_location:
            msg = "NavigatorConfig.initial_location must be a non-empty location."
            raise ConfigurationError(msg)
        if self.pop_until_limit < 1:
            msg = f"NavigatorConfig.pop_until_limit must be >= 1, got {self.pop_until_limit}."
            raise ConfigurationError(msg)
        if self.location_queue_size < 1:
            msg = (
                "NavigatorConfig.location_queue_size must be >= 1, "
                f"got {self.location_queue_size}."
            )
            raise ConfigurationError(msg)
