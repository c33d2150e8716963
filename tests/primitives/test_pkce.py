import base64
import hashlib
import re

import pytest

from xoauth.models.errors import PKCEError
from xoauth.models.security import PKCEParameters
from xoauth.primitives.pkce import (
    PKCEManager,
    generate_code_challenge,
    generate_code_verifier,
    generate_state,
)

URL_SAFE_43 = re.compile(r"^[A-Za-z0-9_-]{43}$")


class TestCodeVerifier:
    def test_verifier_is_43_url_safe_characters(self) -> None:
        # Act
        verifier = generate_code_verifier()

        # Assert
        assert URL_SAFE_43.match(verifier)
        assert "=" not in verifier

    def test_consecutive_verifiers_differ(self) -> None:
        assert generate_code_verifier() != generate_code_verifier()


class TestCodeChallenge:
    def test_challenge_is_base64url_sha256_of_verifier(self) -> None:
        # Arrange - RFC 7636 Appendix B example
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

        # Act
        challenge = generate_code_challenge(verifier)

        # Assert
        assert challenge == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_challenge_matches_manual_computation(self) -> None:
        # Arrange
        verifier = generate_code_verifier()
        expected = (
            base64.urlsafe_b64encode(hashlib.sha256(verifier.encode("ascii")).digest())
            .decode("ascii")
            .rstrip("=")
        )

        # Act
        challenge = generate_code_challenge(verifier)

        # Assert
        assert challenge == expected
        assert URL_SAFE_43.match(challenge)

    def test_challenge_is_deterministic(self) -> None:
        verifier = generate_code_verifier()
        assert generate_code_challenge(verifier) == generate_code_challenge(verifier)

    def test_different_verifiers_give_different_challenges(self) -> None:
        assert generate_code_challenge("verifier-one") != generate_code_challenge(
            "verifier-two"
        )


class TestState:
    def test_state_is_22_characters(self) -> None:
        state = generate_state()
        assert len(state) == 22
        assert re.match(r"^[A-Za-z0-9_-]+$", state)

    def test_consecutive_states_differ(self) -> None:
        assert generate_state() != generate_state()


class TestPKCEManager:
    def test_generate_parameters_crypto_requirements(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        params = pkce_manager.generate_parameters()

        # Assert
        assert isinstance(params, PKCEParameters)
        assert params.code_challenge_method == "S256"
        assert params.code_challenge == generate_code_challenge(params.code_verifier)
        assert len(params.state) == 22

    def test_generate_parameters_uniqueness(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        params1 = pkce_manager.generate_parameters()
        params2 = pkce_manager.generate_parameters()

        # Assert
        assert params1.code_verifier != params2.code_verifier
        assert params1.code_challenge != params2.code_challenge
        assert params1.state != params2.state

    def test_generation_failure_is_wrapped(self, monkeypatch) -> None:
        # Arrange
        def broken(_: int) -> bytes:
            raise OSError("no entropy")

        monkeypatch.setattr("xoauth.primitives.pkce.secrets.token_bytes", broken)

        # Act / Assert
        with pytest.raises(PKCEError):
            PKCEManager().generate_parameters()

    def test_parameters_reject_short_verifier(self) -> None:
        with pytest.raises(ValueError):
            PKCEParameters(code_verifier="short", code_challenge="x" * 43, state="s")
