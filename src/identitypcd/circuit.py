"""
Circuit executor contract and identity circuit parameters.

The arithmetic circuit that checks "signature verifies under modulus for
base_message" runs outside this library. Any object implementing
CircuitExecutor can back the prover and verifier: the bundled
SnarkjsExecutor, a remote proving service, or a mock in tests.

RSA-2048 integers do not fit into a single field element, so every
public input and the witness are passed to the circuit as
word_bits-wide little-endian words.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Protocol, Sequence, Tuple

from .bigint import BigNumberish, normalize, split_to_words
from .pcd import IdentityProveArgs, SnarkProof


DEFAULT_CIRCUIT_ID = "identity"
DEFAULT_WORD_BITS = 64
DEFAULT_NUM_WORDS = 32  # 64 * 32 = 2048-bit RSA
DEFAULT_PROTOCOL = "groth16"
DEFAULT_CURVE = "bn128"

CircuitInputs = Mapping[str, Sequence[int]]


class CircuitExecutor(Protocol):
    """
    External zk-circuit backend.

    execute() raises ProofGenerationError when the witness does not
    satisfy the circuit and CircuitUnavailableError when the backend
    cannot be reached or times out.
    """

    async def execute(
        self,
        circuit_id: str,
        public_inputs: CircuitInputs,
        witness: CircuitInputs,
    ) -> SnarkProof:
        ...

    async def verify_raw(
        self,
        circuit_id: str,
        proof: SnarkProof,
        public_signals: Sequence[int],
    ) -> bool:
        ...


@dataclass(frozen=True)
class IdentityCircuitConfig:
    """
    Parameters of the identity circuit.

    Attributes:
        base_message: The message every accepted signature must cover.
            Verification always uses this value, never one carried by
            the proof.
        circuit_id: Name the executor uses to locate circuit artifacts.
        word_bits: Width of each circuit input word.
        num_words: Number of words per big-integer input.
        protocol: Proving system the verifier accepts.
        curve: Curve the verifier accepts.
    """

    base_message: int
    circuit_id: str = DEFAULT_CIRCUIT_ID
    word_bits: int = DEFAULT_WORD_BITS
    num_words: int = DEFAULT_NUM_WORDS
    protocol: str = DEFAULT_PROTOCOL
    curve: str = DEFAULT_CURVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_message", normalize(self.base_message))
        if self.base_message < 0:
            raise ValueError("base_message must be non-negative")
        if self.word_bits <= 0 or self.num_words <= 0:
            raise ValueError("word_bits and num_words must be positive")
        if not self.circuit_id:
            raise ValueError("circuit_id cannot be empty")

    @property
    def max_bits(self) -> int:
        return self.word_bits * self.num_words


def circuit_inputs(
    args: IdentityProveArgs,
    config: IdentityCircuitConfig,
) -> Tuple[Dict[str, List[int]], Dict[str, List[int]]]:
    """
    Build the (public_inputs, witness) pair for the identity circuit.

    Raises:
        MalformedNumberError: If any argument does not fit the circuit.
    """
    public_inputs = {
        "base_message": split_to_words(args.base_message, config.word_bits, config.num_words),
        "modulus": split_to_words(args.modulus, config.word_bits, config.num_words),
    }
    witness = {
        "signature": split_to_words(args.signature, config.word_bits, config.num_words),
    }
    return public_inputs, witness


def public_signals(
    base_message: BigNumberish,
    modulus: BigNumberish,
    config: IdentityCircuitConfig,
) -> List[int]:
    """Ordered public signals: base_message words, then modulus words."""
    return (
        split_to_words(base_message, config.word_bits, config.num_words)
        + split_to_words(modulus, config.word_bits, config.num_words)
    )
