"""
CircuitExecutor backed by the snarkjs command line tool.

Proofs are generated with `snarkjs groth16 fullprove` and checked with
`snarkjs groth16 verify`, each in its own subprocess and temporary
directory, so a proof that takes several seconds never blocks the
event loop.

Circuit artifacts are looked up by circuit id in artifacts_dir:

    <circuit_id>.wasm        witness generator
    <circuit_id>.zkey        proving key
    <circuit_id>_vkey.json   verifying key
"""

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

from .circuit import CircuitInputs
from .exceptions import CircuitUnavailableError, MalformedNumberError, ProofGenerationError
from .pcd import SnarkProof


logger = logging.getLogger(__name__)

DEFAULT_SNARKJS_BIN = "snarkjs"
DEFAULT_TIMEOUT = 120.0

# Output fragments snarkjs/circom print when the witness breaks a constraint
_CONSTRAINT_FAILURE_MARKERS = ("assert failed", "error in template", "constraint doesn't match")


@dataclass(frozen=True)
class SnarkjsConfig:
    """
    Settings for SnarkjsExecutor.

    Attributes:
        artifacts_dir: Directory holding the circuit artifacts.
        snarkjs_bin: snarkjs executable name or path.
        timeout: Seconds to wait for a single snarkjs run.
    """

    artifacts_dir: str
    snarkjs_bin: str = DEFAULT_SNARKJS_BIN
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if not self.artifacts_dir:
            raise ValueError("artifacts_dir cannot be empty")

    @classmethod
    def from_env(cls) -> "SnarkjsConfig":
        """
        Read settings from the environment.

        IDENTITY_PCD_ARTIFACTS_DIR (default: ./circuits),
        IDENTITY_PCD_SNARKJS and IDENTITY_PCD_TIMEOUT.
        """
        timeout_env = os.getenv("IDENTITY_PCD_TIMEOUT", "").strip()
        try:
            timeout = float(timeout_env) if timeout_env else DEFAULT_TIMEOUT
        except ValueError:
            logger.warning("Ignoring invalid IDENTITY_PCD_TIMEOUT=%r", timeout_env)
            timeout = DEFAULT_TIMEOUT
        return cls(
            artifacts_dir=os.getenv("IDENTITY_PCD_ARTIFACTS_DIR", "circuits"),
            snarkjs_bin=os.getenv("IDENTITY_PCD_SNARKJS", DEFAULT_SNARKJS_BIN),
            timeout=timeout,
        )


def _is_constraint_failure(output: str) -> bool:
    lowered = output.lower()
    return any(marker in lowered for marker in _CONSTRAINT_FAILURE_MARKERS)


class SnarkjsExecutor:
    """
    Run identity circuits through snarkjs.

    Example:
        >>> executor = SnarkjsExecutor(SnarkjsConfig.from_env())
        >>> package = IdentityPCDPackage(executor, IdentityCircuitConfig(base_message=m))
    """

    def __init__(self, config: SnarkjsConfig):
        self.config = config

    def _artifact(self, circuit_id: str, suffix: str) -> str:
        return os.path.join(self.config.artifacts_dir, circuit_id + suffix)

    async def _run(self, *args: str) -> Tuple[int, str]:
        """Run snarkjs, returning (exit code, combined output)."""
        try:
            process = await asyncio.create_subprocess_exec(
                self.config.snarkjs_bin,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise CircuitUnavailableError(f"Cannot start snarkjs: {e}") from e

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=self.config.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise CircuitUnavailableError(
                f"snarkjs timed out after {self.config.timeout:g}s"
            ) from e
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        return process.returncode, stdout.decode("utf-8", errors="replace")

    async def execute(
        self,
        circuit_id: str,
        public_inputs: CircuitInputs,
        witness: CircuitInputs,
    ) -> SnarkProof:
        inputs = {
            name: [str(word) for word in words]
            for name, words in {**public_inputs, **witness}.items()
        }

        with tempfile.TemporaryDirectory(prefix="identitypcd-") as workdir:
            input_path = os.path.join(workdir, "input.json")
            proof_path = os.path.join(workdir, "proof.json")
            public_path = os.path.join(workdir, "public.json")
            _write_json(input_path, inputs)

            logger.debug("Running snarkjs fullprove for circuit %r", circuit_id)
            code, output = await self._run(
                "groth16", "fullprove",
                input_path,
                self._artifact(circuit_id, ".wasm"),
                self._artifact(circuit_id, ".zkey"),
                proof_path,
                public_path,
            )
            if code != 0:
                if _is_constraint_failure(output):
                    raise ProofGenerationError(
                        "Signature does not verify under the given modulus"
                    )
                raise CircuitUnavailableError(f"snarkjs fullprove failed (exit {code}): {output.strip()}")

            try:
                with open(proof_path, "r", encoding="utf-8") as f:
                    return SnarkProof.from_json(json.load(f))
            except (OSError, ValueError, KeyError, TypeError, MalformedNumberError) as e:
                raise CircuitUnavailableError(f"snarkjs produced an unreadable proof: {e}") from e

    async def verify_raw(
        self,
        circuit_id: str,
        proof: SnarkProof,
        public_signals: Sequence[int],
    ) -> bool:
        with tempfile.TemporaryDirectory(prefix="identitypcd-") as workdir:
            proof_path = os.path.join(workdir, "proof.json")
            public_path = os.path.join(workdir, "public.json")
            _write_json(proof_path, proof.to_json())
            _write_json(public_path, [str(s) for s in public_signals])

            code, output = await self._run(
                "groth16", "verify",
                self._artifact(circuit_id, "_vkey.json"),
                public_path,
                proof_path,
            )
        return code == 0 and "OK" in output


def _write_json(path: str, data: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
