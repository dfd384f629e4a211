"""Pytest configuration and shared fixtures."""

import hashlib

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from identitypcd import (
    CircuitUnavailableError,
    IdentityCircuitConfig,
    IdentityPCDPackage,
    MemoryStorage,
    ProofGenerationError,
    SnarkProof,
    join_words,
)


BASE_MESSAGE = 42
PUBLIC_EXPONENT = 65537


def _digest(signals) -> int:
    data = ",".join(str(s) for s in signals).encode("ascii")
    return int.from_bytes(hashlib.sha256(data).digest(), "big")


class MockCircuitExecutor:
    """
    Stand-in for the identity circuit.

    execute() enforces signature^65537 mod modulus == base_message on the
    word-encoded inputs, like the real circuit. The produced proof binds
    the public signals through pi_a[0], which verify_raw() recomputes.
    """

    def __init__(self, word_bits: int = 64):
        self.word_bits = word_bits
        self.execute_calls = 0
        self.verify_calls = 0
        self.unavailable = False
        self.verify_raises = False
        # When set, execute() waits for this event before returning
        self.gate = None

    async def execute(self, circuit_id, public_inputs, witness):
        self.execute_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.unavailable:
            raise CircuitUnavailableError("mock executor offline")

        message = join_words(public_inputs["base_message"], self.word_bits)
        modulus = join_words(public_inputs["modulus"], self.word_bits)
        signature = join_words(witness["signature"], self.word_bits)
        if pow(signature, PUBLIC_EXPONENT, modulus) != message:
            raise ProofGenerationError()

        signals = list(public_inputs["base_message"]) + list(public_inputs["modulus"])
        return SnarkProof(
            pi_a=[_digest(signals), 1, 1],
            pi_b=[[2, 3], [4, 5], [1, 0]],
            pi_c=[6, 7, 1],
            protocol="groth16",
            curve="bn128",
        )

    async def verify_raw(self, circuit_id, proof, public_signals):
        self.verify_calls += 1
        if self.verify_raises:
            raise RuntimeError("verifier crashed")
        return proof.pi_a[0] == _digest(public_signals)


@pytest.fixture(scope="session")
def rsa_key():
    """RSA-2048 issuer key; generated once because keygen is slow."""
    return rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=2048)


@pytest.fixture(scope="session")
def modulus(rsa_key):
    return rsa_key.public_key().public_numbers().n


@pytest.fixture(scope="session")
def signature(rsa_key, modulus):
    """Textbook RSA signature over BASE_MESSAGE."""
    d = rsa_key.private_numbers().d
    return pow(BASE_MESSAGE, d, modulus)


@pytest.fixture
def prove_args(signature, modulus):
    return {
        "base_message": str(BASE_MESSAGE),
        "signature": str(signature),
        "modulus": str(modulus),
    }


@pytest.fixture
def config():
    return IdentityCircuitConfig(base_message=BASE_MESSAGE)


@pytest.fixture
def executor():
    return MockCircuitExecutor()


@pytest.fixture
def package(executor, config):
    return IdentityPCDPackage(executor, config)


@pytest.fixture
def storage():
    return MemoryStorage()
