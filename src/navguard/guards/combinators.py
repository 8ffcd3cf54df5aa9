"""Guard combinators — AND (``CompositeGuard``) and OR (``AnyGuard``).

Both take the highest priority among their members and evaluate
members strictly in list order, one at a time. Member ``applies_to`` /
``excludes`` are not consulted: the combinator's own applicability
decides whether any member runs.
"""

from collections.abc import Sequence

from navguard.guards.base import RouteGuard
from navguard.guards.context import GuardContext
from navguard.guards.result import Allow, GuardResult, allow, reject


def _max_priority(guards: Sequence[RouteGuard]) -> int:
    return max((guard.priority for guard in guards), default=0)


class _GuardGroup(RouteGuard):
    def __init__(
        self,
        guards: Sequence[RouteGuard],
        *,
        applies_to: Sequence[str] | None = None,
        excludes: Sequence[str] | None = None,
    ) -> None:
        self.guards = tuple(guards)
        self.applies_to = tuple(applies_to) if applies_to is not None else None
        self.excludes = tuple(excludes) if excludes is not None else None

    @property
    def priority(self) -> int:  # type: ignore[override]
        return _max_priority(self.guards)

    def validate(self) -> None:
        super().validate()
        for guard in self.guards:
            guard.validate()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.guards)!r})"


class CompositeGuard(_GuardGroup):
    """All members must allow.

    Returns the first non-Allow result; later members are not invoked.
    """

    async def can_activate(self, context: GuardContext) -> GuardResult:
        for guard in self.guards:
            result = await guard.can_activate(context)
            if not isinstance(result, Allow):
                return result
        return allow()


class AnyGuard(_GuardGroup):
    """At least one member must allow.

    Returns the first Allow. When nobody allows, the *last* objection
    (Redirect or Reject) wins, so the most specific member listed last
    decides where the user ends up.
    """

    async def can_activate(self, context: GuardContext) -> GuardResult:
        last: GuardResult | None = None
        for guard in self.guards:
            result = await guard.can_activate(context)
            if isinstance(result, Allow):
                return result
            last = result
        return last if last is not None else reject("No guards allowed")
