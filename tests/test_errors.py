"""Tests for navguard.errors — the exception hierarchy."""

from navguard.errors import ConfigurationError, NavguardError, NotFound, PatternError


class TestHierarchy:
    def test_all_navguard_errors(self) -> None:
        assert issubclass(ConfigurationError, NavguardError)
        assert issubclass(PatternError, ConfigurationError)
        assert issubclass(NotFound, NavguardError)

    def test_not_found_is_not_configuration(self) -> None:
        assert not issubclass(NotFound, ConfigurationError)


class TestMessages:
    def test_pattern_error(self) -> None:
        error = PatternError("/a/*/b", "'*' is only allowed as the final segment")
        assert error.pattern == "/a/*/b"
        assert str(error) == (
            "Invalid route pattern '/a/*/b': '*' is only allowed as the final segment"
        )

    def test_not_found_default(self) -> None:
        error = NotFound("ghost")
        assert error.name == "ghost"
        assert str(error) == "Route not found: 'ghost'"

    def test_not_found_detail(self) -> None:
        assert str(NotFound("ghost", "No such screen")) == "No such screen"
