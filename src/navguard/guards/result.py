"""GuardResult — the three possible outcomes of a guard decision.

A closed union of frozen dataclasses. Consumers dispatch with ``match``
and finish with ``assert_never`` so that a new variant shows up as a
type error at every consumer::

    match result:
        case Allow():
            ...
        case Redirect(path=path):
            ...
        case Reject(reason=reason):
            ...
        case _:
            assert_never(result)
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Allow:
    """Navigation proceeds."""


@dataclass(frozen=True, slots=True)
class Redirect:
    """Navigation is sent somewhere else.

    ``replace`` (default True) means the redirect overwrites the pending
    navigation instead of stacking on top of it. ``extra`` is the
    payload handed to the redirect target; it does not take part in
    equality.
    """

    path: str
    extra: Any = field(default=None, compare=False)
    replace: bool = True

    def __post_init__(self) -> None:
        if not self.path:
            msg = "Redirect.path must be a non-empty location."
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Reject:
    """Navigation is blocked.

    ``show_error`` is a signal for the surrounding UI layer; this
    package never displays anything itself.
    """

    reason: str | None = None
    show_error: bool = False


type GuardResult = Allow | Redirect | Reject

_ALLOW = Allow()


def allow() -> Allow:
    return _ALLOW


def redirect(path: str, *, extra: Any = None, replace: bool = True) -> Redirect:
    return Redirect(path=path, extra=extra, replace=replace)


def reject(reason: str | None = None, *, show_error: bool = False) -> Reject:
    return Reject(reason=reason, show_error=show_error)


def is_allowed(result: GuardResult) -> bool:
    return isinstance(result, Allow)
