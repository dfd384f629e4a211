"""
Canonical wire format for IdentityPCD.

Format (UTF-8 JSON, sorted keys, compact separators):

    {
      "type": "identity-pcd",
      "pcd": {
        "id": "<uuid>",
        "claim": {"modulus": "<decimal>"},
        "proof": {
          "modulus": "<decimal>",
          "proof": {"pi_a": [...], "pi_b": [[...]], "pi_c": [...],
                    "protocol": "groth16", "curve": "bn128"}
        }
      }
    }

Deserialization only checks structure. Whether the proof is valid is a
separate question answered by verify().
"""

import json
from typing import Any, Mapping, Union

from .exceptions import IdentityPCDError, MalformedPCDError
from .pcd import IDENTITY_PCD_TYPE, IdentityClaim, IdentityPCD, IdentityProof, SnarkProof


def serialize(pcd: IdentityPCD) -> bytes:
    """
    Serialize a PCD to its canonical envelope.

    Args:
        pcd: The PCD to serialize.

    Returns:
        UTF-8 encoded JSON bytes.
    """
    envelope = {
        "type": pcd.type,
        "pcd": {
            "id": pcd.id,
            "claim": {"modulus": str(pcd.claim.modulus)},
            "proof": {
                "modulus": str(pcd.proof.modulus),
                "proof": pcd.proof.proof.to_json(),
            },
        },
    }
    return json.dumps(envelope, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _load_envelope(data: Union[bytes, str]) -> Mapping[str, Any]:
    try:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        envelope = json.loads(data)
    except (UnicodeDecodeError, ValueError, TypeError) as e:
        raise MalformedPCDError(f"Serialized PCD is not valid JSON: {e}") from e

    if not isinstance(envelope, dict):
        raise MalformedPCDError("Serialized PCD envelope must be a JSON object")
    if not isinstance(envelope.get("type"), str):
        raise MalformedPCDError("Serialized PCD envelope is missing 'type'")
    return envelope


def peek_type(data: Union[bytes, str]) -> str:
    """
    Read the type discriminator of a serialized PCD without decoding it.

    Raises:
        MalformedPCDError: If the envelope is unreadable.
    """
    return _load_envelope(data)["type"]


def deserialize(data: Union[bytes, str]) -> IdentityPCD:
    """
    Decode a serialized PCD.

    Args:
        data: Bytes (or str) produced by serialize().

    Returns:
        The decoded IdentityPCD.

    Raises:
        MalformedPCDError: On invalid JSON, a missing field, a type other
            than "identity-pcd", or an unparsable numeric field.
    """
    envelope = _load_envelope(data)
    if envelope["type"] != IDENTITY_PCD_TYPE:
        raise MalformedPCDError(
            f"Expected PCD type {IDENTITY_PCD_TYPE!r}, got {envelope['type']!r}"
        )

    try:
        body = envelope["pcd"]
        pcd_id = body["id"]
        if not isinstance(pcd_id, str) or not pcd_id:
            raise MalformedPCDError("PCD id must be a non-empty string")
        claim = IdentityClaim(modulus=body["claim"]["modulus"])
        raw = body["proof"]
        proof = IdentityProof(modulus=raw["modulus"], proof=SnarkProof.from_json(raw["proof"]))
    except MalformedPCDError:
        raise
    except KeyError as e:
        raise MalformedPCDError(f"Serialized PCD is missing field {e}") from e
    except (IdentityPCDError, TypeError, AttributeError) as e:
        raise MalformedPCDError(f"Serialized PCD has an invalid field: {e}") from e

    return IdentityPCD(id=pcd_id, claim=claim, proof=proof)
