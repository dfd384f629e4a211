"""
Identity claim/proof model.

An IdentityPCD pairs a public claim (the RSA modulus the holder says
their signature was issued under) with a zero-knowledge proof of that
claim. The signature itself only ever lives in IdentityProveArgs and is
consumed by the prover.

All big-integer fields are normalized to int on construction, so two
objects built from different representations of the same numbers
compare equal.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .bigint import BigNumberish, normalize
from .exceptions import MalformedNumberError


# Discriminator used by PCD registries to dispatch to this package
IDENTITY_PCD_TYPE = "identity-pcd"


def _normalize_seq(values: Sequence[BigNumberish], name: str) -> Tuple[int, ...]:
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise MalformedNumberError(f"{name} must be a sequence of big integers")
    return tuple(normalize(v) for v in values)


@dataclass(frozen=True)
class SnarkProof:
    """
    A raw SNARK proof as produced by the circuit executor.

    The group elements are opaque to this library; only protocol and
    curve are inspected, to reject proofs from the wrong proving system.

    Attributes:
        pi_a: Coordinates of the A element.
        pi_b: Coordinates of the B element (pairs of field elements).
        pi_c: Coordinates of the C element.
        protocol: Proving system tag, e.g. "groth16".
        curve: Curve tag, e.g. "bn128".
    """

    pi_a: Tuple[int, ...]
    pi_b: Tuple[Tuple[int, ...], ...]
    pi_c: Tuple[int, ...]
    protocol: str
    curve: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "pi_a", _normalize_seq(self.pi_a, "pi_a"))
        if isinstance(self.pi_b, (str, bytes)) or not isinstance(self.pi_b, Sequence):
            raise MalformedNumberError("pi_b must be a sequence of sequences")
        object.__setattr__(
            self, "pi_b", tuple(_normalize_seq(row, "pi_b row") for row in self.pi_b)
        )
        object.__setattr__(self, "pi_c", _normalize_seq(self.pi_c, "pi_c"))
        if not isinstance(self.protocol, str) or not isinstance(self.curve, str):
            raise TypeError("protocol and curve must be strings")

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "SnarkProof":
        """
        Build a proof from snarkjs-style JSON.

        Extra keys are ignored. Missing keys raise KeyError.
        """
        return cls(
            pi_a=data["pi_a"],
            pi_b=data["pi_b"],
            pi_c=data["pi_c"],
            protocol=data["protocol"],
            curve=data["curve"],
        )

    def to_json(self) -> Dict[str, Any]:
        """Encode the proof as snarkjs-style JSON with decimal strings."""
        return {
            "pi_a": [str(v) for v in self.pi_a],
            "pi_b": [[str(v) for v in row] for row in self.pi_b],
            "pi_c": [str(v) for v in self.pi_c],
            "protocol": self.protocol,
            "curve": self.curve,
        }


@dataclass(frozen=True)
class IdentityClaim:
    """The public statement: a valid signature exists under this modulus."""

    modulus: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "modulus", normalize(self.modulus))


@dataclass(frozen=True)
class IdentityProof:
    """
    Proof of an IdentityClaim.

    The modulus is carried alongside the claim so the proof can be
    checked without any external lookup.
    """

    modulus: int
    proof: SnarkProof

    def __post_init__(self) -> None:
        object.__setattr__(self, "modulus", normalize(self.modulus))


@dataclass(frozen=True)
class IdentityPCD:
    """
    A portable identity proof.

    Attributes:
        id: Unique identifier of this proof instance (not a content hash).
        claim: The public claim.
        proof: The proof of the claim.
        type: Always IDENTITY_PCD_TYPE.
    """

    id: str
    claim: IdentityClaim
    proof: IdentityProof
    type: str = field(default=IDENTITY_PCD_TYPE, init=False)

    @classmethod
    def create(cls, claim: IdentityClaim, proof: IdentityProof, id: Optional[str] = None) -> "IdentityPCD":
        """Create a PCD, assigning a fresh id unless one is given."""
        return cls(id=str(uuid.uuid4()) if id is None else id, claim=claim, proof=proof)


@dataclass(frozen=True)
class IdentityProveArgs:
    """
    Witness input for proof generation.

    base_message and modulus are public inputs; signature is the secret
    witness. Instances are consumed by the prover and never persisted.
    """

    base_message: int
    signature: int = field(repr=False)
    modulus: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_message", normalize(self.base_message))
        object.__setattr__(self, "signature", normalize(self.signature))
        object.__setattr__(self, "modulus", normalize(self.modulus))
