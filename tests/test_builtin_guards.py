"""Tests for navguard.guards.builtin — AuthenticationGuard and RoleGuard."""

import pytest

from navguard.errors import ConfigurationError
from navguard.guards.builtin import DEFAULT_PUBLIC_PATHS, AuthenticationGuard, RoleGuard
from navguard.guards.context import GuardContext
from navguard.guards.result import Allow, Redirect
from navguard.routing.route import RouteDefinition


def _context(location: str, route: RouteDefinition | None = None, **extras) -> GuardContext:
    return GuardContext(
        destination=route or RouteDefinition.stub(location),
        matched_location=location,
        extras=extras,
    )


class TestAuthenticationGuard:
    @pytest.mark.asyncio
    async def test_authenticated_allows(self) -> None:
        guard = AuthenticationGuard(is_authenticated=lambda ctx: True)
        assert isinstance(await guard.can_activate(_context("/home")), Allow)

    @pytest.mark.asyncio
    async def test_unauthenticated_redirects_with_return_to(self) -> None:
        guard = AuthenticationGuard(is_authenticated=lambda ctx: False)
        result = await guard.can_activate(_context("/settings?tab=2"))
        assert isinstance(result, Redirect)
        assert result.path == "/login"
        assert result.extra == {"return_to": "/settings?tab=2"}

    @pytest.mark.asyncio
    async def test_custom_redirect(self) -> None:
        guard = AuthenticationGuard(is_authenticated=lambda ctx: False, redirect_to="/signin")
        result = await guard.can_activate(_context("/home"))
        assert isinstance(result, Redirect)
        assert result.path == "/signin"

    @pytest.mark.asyncio
    async def test_async_reader_uses_extras(self) -> None:
        async def is_logged_in(ctx: GuardContext) -> bool:
            return ctx.get("user") is not None

        guard = AuthenticationGuard(is_authenticated=is_logged_in)
        assert isinstance(await guard.can_activate(_context("/home", user="ada")), Allow)
        assert isinstance(await guard.can_activate(_context("/home")), Redirect)

    def test_public_paths_excluded(self) -> None:
        guard = AuthenticationGuard(is_authenticated=lambda ctx: False)
        assert guard.excludes == DEFAULT_PUBLIC_PATHS
        assert guard.should_activate_for("/login") is False
        assert guard.should_activate_for("/register") is False
        assert guard.should_activate_for("/home") is True

    def test_custom_public_paths(self) -> None:
        guard = AuthenticationGuard(is_authenticated=lambda ctx: False, public_paths=["/docs/*"])
        assert guard.should_activate_for("/docs/intro") is False
        assert guard.should_activate_for("/login") is True

    def test_priority(self) -> None:
        assert AuthenticationGuard(is_authenticated=lambda ctx: True).priority == 100


class TestRoleGuard:
    def test_requires_roles_or_metadata_key(self) -> None:
        with pytest.raises(ConfigurationError):
            RoleGuard(user_role=lambda ctx: "admin")

    def test_priority(self) -> None:
        assert RoleGuard(user_role=lambda ctx: "admin", required_roles=["admin"]).priority == 50

    @pytest.mark.asyncio
    async def test_matching_role_allows(self) -> None:
        guard = RoleGuard(user_role=lambda ctx: "admin", required_roles=["admin", "owner"])
        assert isinstance(await guard.can_activate(_context("/admin")), Allow)

    @pytest.mark.asyncio
    async def test_wrong_role_redirects(self) -> None:
        guard = RoleGuard(user_role=lambda ctx: "viewer", required_roles=["admin"])
        result = await guard.can_activate(_context("/admin"))
        assert isinstance(result, Redirect)
        assert result.path == "/unauthorized"

    @pytest.mark.asyncio
    async def test_no_role_redirects(self) -> None:
        guard = RoleGuard(
            user_role=lambda ctx: None, required_roles=["admin"], redirect_to="/login"
        )
        result = await guard.can_activate(_context("/admin"))
        assert isinstance(result, Redirect)
        assert result.path == "/login"

    @pytest.mark.asyncio
    async def test_role_from_metadata(self) -> None:
        route = RouteDefinition("/reports", name="reports", metadata={"role": "analyst"})
        guard = RoleGuard(user_role=lambda ctx: "analyst", metadata_key="role")
        assert isinstance(await guard.can_activate(_context("/reports", route)), Allow)

        other = RoleGuard(user_role=lambda ctx: "viewer", metadata_key="role")
        assert isinstance(await other.can_activate(_context("/reports", route)), Redirect)

    @pytest.mark.asyncio
    async def test_no_requirement_allows(self) -> None:
        guard = RoleGuard(user_role=lambda ctx: "viewer", metadata_key="role")
        assert isinstance(await guard.can_activate(_context("/open")), Allow)

    def test_applies_to(self) -> None:
        guard = RoleGuard(
            user_role=lambda ctx: "x", required_roles=["admin"], applies_to=["/admin/*"]
        )
        assert guard.should_activate_for("/admin/users") is True
        assert guard.should_activate_for("/home") is False
