import pytest

from xoauth.models.errors import StateValidationError
from xoauth.services.security import parse_callback_url, validate_state


class TestValidateState:
    def test_matching_state_passes(self) -> None:
        validate_state("abc123", "abc123")

    def test_mismatched_state_raises(self) -> None:
        with pytest.raises(StateValidationError, match="mismatch"):
            validate_state("abc123", "evil")

    def test_missing_state_raises(self) -> None:
        with pytest.raises(StateValidationError, match="missing"):
            validate_state("abc123", None)


class TestParseCallbackUrl:
    def test_success_callback(self) -> None:
        params = parse_callback_url(
            "http://localhost:3000/callback?state=xyz&code=auth-code"
        )
        assert params == {
            "code": "auth-code",
            "state": "xyz",
            "error": None,
            "error_description": None,
        }

    def test_error_callback(self) -> None:
        params = parse_callback_url(
            "http://localhost:3000/callback?error=access_denied&state=xyz"
        )
        assert params["error"] == "access_denied"
        assert params["code"] is None
