"""
Public API for proving and verifying identity PCDs.

This module provides the main entry points for the identitypcd library:
- prove(): Turn a signature over the base message into an IdentityPCD
- verify(): Check an IdentityPCD without ever seeing the signature

Both delegate the heavy lifting to a CircuitExecutor and only add the
identity-specific contract on top: which inputs are public, which stay
secret, and how a raw SNARK proof becomes a claim/proof pair.

Security Assumptions:
    1. The circuit proves signature^e mod modulus == base_message
    2. base_message is a system constant pinned in IdentityCircuitConfig;
       the verifier never takes it from the proof object
    3. The verifying key used by the executor matches the proving key

Example:
    >>> config = IdentityCircuitConfig(base_message=42)
    >>> pcd = await prove(args, executor, config)
    >>> data = serialize(pcd)
    >>>
    >>> # Later, anywhere
    >>> ok = await verify(deserialize(data), executor, config)
"""

import logging
from typing import Any, Mapping, Union

from .circuit import CircuitExecutor, IdentityCircuitConfig, circuit_inputs, public_signals
from .exceptions import (
    CircuitUnavailableError,
    IdentityPCDError,
    MalformedNumberError,
    ProofGenerationError,
)
from .pcd import (
    IDENTITY_PCD_TYPE,
    IdentityClaim,
    IdentityPCD,
    IdentityProof,
    IdentityProveArgs,
    SnarkProof,
)
from .serializer import deserialize, serialize


logger = logging.getLogger(__name__)

ProveArgsLike = Union[IdentityProveArgs, Mapping[str, Any]]


def _coerce_args(args: ProveArgsLike) -> IdentityProveArgs:
    if isinstance(args, IdentityProveArgs):
        return args
    try:
        return IdentityProveArgs(
            base_message=args["base_message"],
            signature=args["signature"],
            modulus=args["modulus"],
        )
    except KeyError as e:
        raise MalformedNumberError(f"Missing prove argument {e}") from e


async def prove(
    args: ProveArgsLike,
    executor: CircuitExecutor,
    config: IdentityCircuitConfig,
) -> IdentityPCD:
    """
    Generate an identity PCD from a signature over the base message.

    Args:
        args: IdentityProveArgs, or a mapping with base_message, signature
            and modulus in any big-integer representation.
        executor: Circuit backend that produces the SNARK.
        config: Identity circuit parameters.

    Returns:
        A fresh IdentityPCD claiming args.modulus.

    Raises:
        MalformedNumberError: If an argument is not a well-formed integer
            or does not fit the circuit. Raised before the executor runs.
        ProofGenerationError: If the signature does not verify under the
            modulus, or base_message is not the pinned message.
        CircuitUnavailableError: If the executor fails for any other reason.
    """
    args = _coerce_args(args)
    if args.modulus <= 0:
        raise MalformedNumberError("Modulus must be a positive integer")
    if args.base_message < 0:
        raise MalformedNumberError("Base message must be non-negative")
    if args.base_message != config.base_message:
        raise ProofGenerationError(
            "Base message does not match the message this system verifies against"
        )

    public_inputs, witness = circuit_inputs(args, config)

    logger.debug("Requesting proof from circuit %r", config.circuit_id)
    try:
        raw_proof = await executor.execute(config.circuit_id, public_inputs, witness)
    except IdentityPCDError:
        raise
    except Exception as e:
        raise CircuitUnavailableError(f"Circuit executor failed: {e}") from e

    if not isinstance(raw_proof, SnarkProof):
        raise CircuitUnavailableError(
            f"Circuit executor returned {type(raw_proof).__name__}, expected SnarkProof"
        )

    pcd = IdentityPCD.create(
        claim=IdentityClaim(modulus=args.modulus),
        proof=IdentityProof(modulus=args.modulus, proof=raw_proof),
    )
    logger.info("Generated identity PCD %s", pcd.id)
    return pcd


async def verify(
    pcd: IdentityPCD,
    executor: CircuitExecutor,
    config: IdentityCircuitConfig,
) -> bool:
    """
    Verify an identity PCD.

    Never raises for a bad proof: foreign types, inconsistent moduli,
    proofs from another proving system and executor failures all yield
    False.

    Args:
        pcd: The PCD to check.
        executor: Circuit backend that checks the SNARK.
        config: Identity circuit parameters.

    Returns:
        True only if the cryptographic check succeeds.
    """
    if getattr(pcd, "type", None) != IDENTITY_PCD_TYPE:
        return False

    try:
        claim_modulus = pcd.claim.modulus
        proof_modulus = pcd.proof.modulus
        snark = pcd.proof.proof
    except AttributeError:
        return False

    if claim_modulus != proof_modulus:
        logger.warning("PCD %s: claim and proof moduli differ", pcd.id)
        return False
    if snark.protocol != config.protocol or snark.curve != config.curve:
        logger.warning(
            "PCD %s: unsupported proof system %s/%s", pcd.id, snark.protocol, snark.curve
        )
        return False

    try:
        signals = public_signals(config.base_message, claim_modulus, config)
        ok = await executor.verify_raw(config.circuit_id, snark, signals)
    except Exception as e:
        logger.warning("PCD %s: verification could not complete: %s", pcd.id, e)
        return False

    return ok is True


class IdentityPCDPackage:
    """
    Class-based interface bundling an executor and circuit config.

    This is the object PCD registries and the session state machine
    work with.

    Attributes:
        name: The PCD type this package handles.
        executor: Circuit backend.
        config: Identity circuit parameters.

    Example:
        >>> package = IdentityPCDPackage(executor, IdentityCircuitConfig(base_message=42))
        >>> pcd = await package.prove(args)
        >>> assert await package.verify(pcd)
    """

    name = IDENTITY_PCD_TYPE

    def __init__(self, executor: CircuitExecutor, config: IdentityCircuitConfig):
        self.executor = executor
        self.config = config

    async def prove(self, args: ProveArgsLike) -> IdentityPCD:
        """See module-level prove()."""
        return await prove(args, self.executor, self.config)

    async def verify(self, pcd: IdentityPCD) -> bool:
        """See module-level verify()."""
        return await verify(pcd, self.executor, self.config)

    def serialize(self, pcd: IdentityPCD) -> bytes:
        return serialize(pcd)

    def deserialize(self, data: Union[bytes, str]) -> IdentityPCD:
        return deserialize(data)
