"""Route guards — priority-ordered policy units.

Subclass ``RouteGuard`` and implement ``can_activate``::

    class MaintenanceGuard(RouteGuard):
        priority = 1000
        excludes = ("/maintenance",)

        async def can_activate(self, context: GuardContext) -> GuardResult:
            if context.get("flags", Flags).maintenance:
                return redirect("/maintenance")
            return allow()

Or wrap a plain function with ``FunctionGuard``. Higher priority runs
first. By convention:

- 1000+ : critical guards (maintenance mode, kill switches)
- 100-999 : authentication
- 10-99 : permissions and roles
- 0-9 : feature guards
"""

from collections.abc import Awaitable, Callable, Sequence

from navguard._internal.invoke import invoke
from navguard.guards.context import GuardContext
from navguard.guards.result import GuardResult, allow, redirect
from navguard.routing.pattern import compile_pattern, strip_query

type GuardFunction = Callable[[GuardContext], GuardResult | Awaitable[GuardResult]]
type RedirectFunction = Callable[[GuardContext], str | None | Awaitable[str | None]]


class RouteGuard:
    """Base class for route guards.

    Attributes:
        priority: Evaluation order, highest first. Default 0.
        applies_to: Patterns this guard is limited to. ``None`` means
            every path.
        excludes: Patterns that bypass this guard. Checked before
            ``applies_to`` so an exclusion always wins over a broader
            include.
    """

    priority: int = 0
    applies_to: Sequence[str] | None = None
    excludes: Sequence[str] | None = None

    async def can_activate(self, context: GuardContext) -> GuardResult:
        """Decide whether navigation to ``context.destination`` may proceed."""
        msg = f"{type(self).__name__} must implement can_activate()"
        raise NotImplementedError(msg)

    async def can_deactivate(self, context: GuardContext) -> bool:
        """Return False to keep the navigator on the current location."""
        return True

    def should_activate_for(self, path: str) -> bool:
        """Does this guard apply to *path*?"""
        path = strip_query(path)
        if self.excludes is not None:
            for pattern in self.excludes:
                if compile_pattern(pattern).matches(path):
                    return False

        if self.applies_to is None:
            return True

        return any(compile_pattern(pattern).matches(path) for pattern in self.applies_to)

    def validate(self) -> None:
        """Parse every declared pattern. Raises ``PatternError`` on the first bad one."""
        for pattern in (*(self.excludes or ()), *(self.applies_to or ())):
            compile_pattern(pattern)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(priority={self.priority})"


class FunctionGuard(RouteGuard):
    """Adapt a plain function (sync or async) into a guard.

    Lets existing guard functions join the orchestrator unchanged::

        def require_beta(context: GuardContext) -> GuardResult:
            if context.get("user", User).beta:
                return allow()
            return reject("Beta only", show_error=True)

        navigator.add_guard(FunctionGuard(require_beta, applies_to=("/beta/*",)))
    """

    def __init__(
        self,
        func: GuardFunction,
        *,
        priority: int = 0,
        applies_to: Sequence[str] | None = None,
        excludes: Sequence[str] | None = None,
        name: str | None = None,
    ) -> None:
        self.func = func
        self.priority = priority
        self.applies_to = tuple(applies_to) if applies_to is not None else None
        self.excludes = tuple(excludes) if excludes is not None else None
        self.name = name or getattr(func, "__name__", type(self).__name__)

    async def can_activate(self, context: GuardContext) -> GuardResult:
        return await invoke(self.func, context)

    def __repr__(self) -> str:
        return f"FunctionGuard({self.name!r}, priority={self.priority})"


class RedirectFunctionGuard(FunctionGuard):
    """Adapt a redirect-style function: a path means redirect, ``None`` means allow.

    Matches the shape of a router engine's own redirect hook, so legacy
    redirect logic can move over as-is::

        def legacy_redirect(context: GuardContext) -> str | None:
            if context.matched_location.startswith("/old"):
                return "/new"
            return None
    """

    def __init__(
        self,
        func: RedirectFunction,
        *,
        priority: int = 0,
        applies_to: Sequence[str] | None = None,
        excludes: Sequence[str] | None = None,
        replace: bool = True,
        name: str | None = None,
    ) -> None:
        super().__init__(
            func,  # type: ignore[arg-type]
            priority=priority,
            applies_to=applies_to,
            excludes=excludes,
            name=name,
        )
        self.replace = replace

    async def can_activate(self, context: GuardContext) -> GuardResult:
        target = await invoke(self.func, context)
        if target is None:
            return allow()
        return redirect(target, replace=self.replace)
