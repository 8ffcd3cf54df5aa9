"""Tests for the navguard top-level lazy API."""

import pytest

import navguard


class TestLazyImports:
    @pytest.mark.parametrize("name", navguard.__all__)
    def test_every_exported_name_resolves(self, name: str) -> None:
        assert getattr(navguard, name) is not None

    def test_resolves_to_defining_module(self) -> None:
        from navguard.navigation.machine import NavigationStateMachine
        from navguard.orchestrator import GuardOrchestrator

        assert navguard.NavigationStateMachine is NavigationStateMachine
        assert navguard.GuardOrchestrator is GuardOrchestrator

    def test_unknown_attribute(self) -> None:
        with pytest.raises(AttributeError, match="no attribute 'Nope'"):
            _ = navguard.Nope  # type: ignore[attr-defined]

    def test_version(self) -> None:
        assert navguard.__version__
