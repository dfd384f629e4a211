"""
Custom exceptions for the identitypcd library.

This module defines the specific exceptions raised while proving,
serializing and logging in with an identity PCD, so that callers can
tell invalid input, invalid credentials and infrastructure trouble apart.

A proof that simply does not verify is not an exception: verify()
returns False for that case.
"""


class IdentityPCDError(Exception):
    """Base exception for all identitypcd errors."""

    pass


class MalformedNumberError(IdentityPCDError):
    """
    Raised when a numeric input cannot be parsed as a big integer.

    This is a local input error: it is raised before any cryptographic
    work is attempted.
    """

    def __init__(self, message: str = "Malformed big integer value"):
        self.message = message
        super().__init__(self.message)


class MalformedPCDError(IdentityPCDError):
    """
    Raised when serialized PCD data cannot be decoded.

    Covers missing fields, a foreign type discriminator and unparsable
    numeric fields. It says nothing about whether the proof is valid.
    """

    def __init__(self, message: str = "Malformed or unsupported serialized PCD"):
        self.message = message
        super().__init__(self.message)


class CircuitUnavailableError(IdentityPCDError):
    """
    Raised when the circuit executor cannot be reached or times out.

    This is an infrastructural failure; the same request may succeed
    when retried.
    """

    def __init__(self, message: str = "Circuit executor unavailable"):
        self.message = message
        super().__init__(self.message)


class ProofGenerationError(IdentityPCDError):
    """
    Raised when the witness does not satisfy the identity circuit.

    In practice this means the signature does not verify under the
    modulus for the given message. Retrying with the same input will
    fail the same way.
    """

    def __init__(self, message: str = "Proof generation failed: witness does not satisfy the circuit"):
        self.message = message
        super().__init__(self.message)


class LoginError(IdentityPCDError):
    """
    Raised by the session when a login attempt fails.

    The underlying prover error is available as __cause__.
    """

    def __init__(self, message: str = "Login failed"):
        self.message = message
        super().__init__(self.message)


class LoginInProgressError(LoginError):
    """Raised when a login is requested while another is still proving."""

    def __init__(self, message: str = "A login attempt is already in progress"):
        super().__init__(message)
