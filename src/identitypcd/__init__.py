"""
identitypcd - Zero-knowledge identity proofs as proof-carrying data.

This library lets a holder prove they possess a valid RSA signature over
a fixed message, issued under a publicly known modulus, without revealing
the signature. The proof travels as an IdentityPCD that any party can
serialize, store and re-verify.

The zk-circuit itself runs in an external executor (snarkjs by default);
this library defines which inputs are public and which stay secret, the
wire format, and a session state machine that turns a proof into a
durable logged-in session.

Quick Start:
    >>> from identitypcd import IdentityCircuitConfig, IdentityPCDPackage
    >>> from identitypcd import SnarkjsConfig, SnarkjsExecutor
    >>>
    >>> executor = SnarkjsExecutor(SnarkjsConfig.from_env())
    >>> package = IdentityPCDPackage(executor, IdentityCircuitConfig(base_message=m))
    >>>
    >>> pcd = await package.prove({"base_message": m, "signature": s, "modulus": n})
    >>> data = package.serialize(pcd)
    >>> is_valid = await package.verify(package.deserialize(data))

Logging in with a persisted session:
    >>> from identitypcd import FileStorage, IdentitySession, use_identity
    >>>
    >>> session = IdentitySession(package, FileStorage("session.json"))
    >>> await session.rehydrate()
    >>> state, dispatch = use_identity(session)
    >>> dispatch({"type": "login", "args": args})

See Also:
    - api.py: prove(), verify() and IdentityPCDPackage
    - serializer.py: Wire format
    - session.py: Session state machine and access facade
    - snarkjs.py: snarkjs-backed circuit executor
    - exceptions.py: Custom exception types
"""

__version__ = "0.1.0"
__author__ = "identitypcd Contributors"

# Public API - main functions
from .api import prove, verify, IdentityPCDPackage
from .serializer import serialize, deserialize, peek_type

# Data model
from .bigint import normalize, to_decimal, split_to_words, join_words
from .pcd import (
    IDENTITY_PCD_TYPE,
    IdentityClaim,
    IdentityPCD,
    IdentityProof,
    IdentityProveArgs,
    SnarkProof,
)

# Circuit backends
from .circuit import CircuitExecutor, IdentityCircuitConfig
from .snarkjs import SnarkjsConfig, SnarkjsExecutor
from .keys import modulus_from_public_key

# Registry, storage and session
from .registry import PCDRegistry
from .storage import SESSION_KEY, FileStorage, MemoryStorage, SessionStorage
from .session import (
    IdentitySession,
    LoggedIn,
    LoggedOut,
    LoggingIn,
    LoginRequest,
    LogoutRequest,
    SessionState,
    use_identity,
)

# Exceptions for error handling
from .exceptions import (
    IdentityPCDError,
    MalformedNumberError,
    MalformedPCDError,
    CircuitUnavailableError,
    ProofGenerationError,
    LoginError,
    LoginInProgressError,
)

__all__ = [
    # Version
    "__version__",
    # Main API
    "prove",
    "verify",
    "serialize",
    "deserialize",
    "peek_type",
    "IdentityPCDPackage",
    # Data model
    "normalize",
    "to_decimal",
    "split_to_words",
    "join_words",
    "IDENTITY_PCD_TYPE",
    "IdentityClaim",
    "IdentityPCD",
    "IdentityProof",
    "IdentityProveArgs",
    "SnarkProof",
    # Circuit backends
    "CircuitExecutor",
    "IdentityCircuitConfig",
    "SnarkjsConfig",
    "SnarkjsExecutor",
    "modulus_from_public_key",
    # Registry, storage and session
    "PCDRegistry",
    "SESSION_KEY",
    "FileStorage",
    "MemoryStorage",
    "SessionStorage",
    "IdentitySession",
    "LoggedIn",
    "LoggedOut",
    "LoggingIn",
    "LoginRequest",
    "LogoutRequest",
    "SessionState",
    "use_identity",
    # Exceptions
    "IdentityPCDError",
    "MalformedNumberError",
    "MalformedPCDError",
    "CircuitUnavailableError",
    "ProofGenerationError",
    "LoginError",
    "LoginInProgressError",
]
