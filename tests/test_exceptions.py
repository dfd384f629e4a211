"""Tests for custom exceptions."""

import pytest

from identitypcd.exceptions import (
    IdentityPCDError,
    MalformedNumberError,
    MalformedPCDError,
    CircuitUnavailableError,
    ProofGenerationError,
    LoginError,
    LoginInProgressError,
)


class TestExceptionHierarchy:
    """Test that all exceptions inherit from IdentityPCDError."""

    @pytest.mark.parametrize("exc_type", [
        MalformedNumberError,
        MalformedPCDError,
        CircuitUnavailableError,
        ProofGenerationError,
        LoginError,
        LoginInProgressError,
    ])
    def test_inherits_from_base(self, exc_type):
        assert issubclass(exc_type, IdentityPCDError)
        assert issubclass(exc_type, Exception)

    def test_login_in_progress_is_login_error(self):
        assert issubclass(LoginInProgressError, LoginError)

    def test_credential_and_infrastructure_errors_are_distinct(self):
        assert not issubclass(ProofGenerationError, CircuitUnavailableError)
        assert not issubclass(CircuitUnavailableError, ProofGenerationError)


class TestExceptionMessages:
    """Test exception default and custom messages."""

    def test_proof_generation_default_message(self):
        assert "witness" in str(ProofGenerationError()).lower()

    def test_circuit_unavailable_default_message(self):
        assert "unavailable" in str(CircuitUnavailableError()).lower()

    def test_login_in_progress_default_message(self):
        exc = LoginInProgressError()
        assert "in progress" in str(exc)
        assert exc.message == str(exc)

    def test_custom_message(self):
        msg = "Custom malformed message"
        exc = MalformedPCDError(msg)
        assert str(exc) == msg
        assert exc.message == msg


class TestExceptionRaising:
    def test_catch_base_exception(self):
        with pytest.raises(IdentityPCDError):
            raise MalformedNumberError("test")

    def test_exception_chaining(self):
        try:
            try:
                raise ValueError("original")
            except ValueError as e:
                raise MalformedPCDError("wrapper") from e
        except MalformedPCDError as e:
            assert isinstance(e.__cause__, ValueError)
