"""Tests for the PCD wire format."""

import json

import pytest

from identitypcd.exceptions import MalformedPCDError
from identitypcd.pcd import IdentityClaim, IdentityPCD, IdentityProof, SnarkProof
from identitypcd.serializer import deserialize, peek_type, serialize


MODULUS = 2**2047 + 981


@pytest.fixture
def pcd():
    snark = SnarkProof(
        pi_a=[11, 12, 1],
        pi_b=[[13, 14], [15, 16], [1, 0]],
        pi_c=[17, 18, 1],
        protocol="groth16",
        curve="bn128",
    )
    return IdentityPCD.create(IdentityClaim(MODULUS), IdentityProof(MODULUS, snark))


def envelope(pcd):
    return json.loads(serialize(pcd))


class TestSerialize:
    def test_envelope_shape(self, pcd):
        data = envelope(pcd)
        assert data["type"] == "identity-pcd"
        assert data["pcd"]["id"] == pcd.id
        assert data["pcd"]["claim"] == {"modulus": str(MODULUS)}
        assert data["pcd"]["proof"]["modulus"] == str(MODULUS)
        assert data["pcd"]["proof"]["proof"]["pi_b"][1] == ["15", "16"]

    def test_output_is_canonical(self, pcd):
        assert serialize(pcd) == serialize(deserialize(serialize(pcd)))
        assert b" " not in serialize(pcd)

    def test_roundtrip(self, pcd):
        assert deserialize(serialize(pcd)) == pcd

    def test_deserialize_accepts_str(self, pcd):
        assert deserialize(serialize(pcd).decode("utf-8")) == pcd

    def test_hex_fields_decode_to_same_pcd(self, pcd):
        data = envelope(pcd)
        data["pcd"]["claim"]["modulus"] = hex(MODULUS)
        assert deserialize(json.dumps(data)) == pcd


class TestDeserializeErrors:
    def test_other_pcd_type(self, pcd):
        data = envelope(pcd)
        data["type"] = "other-pcd"
        with pytest.raises(MalformedPCDError):
            deserialize(json.dumps(data))

    @pytest.mark.parametrize("raw", [b"", b"not json", b"\xff\xfe", b"[]", b'{"pcd": {}}', b'"identity-pcd"'])
    def test_unreadable_envelope(self, raw):
        with pytest.raises(MalformedPCDError):
            deserialize(raw)

    @pytest.mark.parametrize("path", [
        ("pcd",),
        ("pcd", "id"),
        ("pcd", "claim"),
        ("pcd", "claim", "modulus"),
        ("pcd", "proof", "modulus"),
        ("pcd", "proof", "proof", "pi_c"),
        ("pcd", "proof", "proof", "curve"),
    ])
    def test_missing_field(self, pcd, path):
        data = envelope(pcd)
        target = data
        for key in path[:-1]:
            target = target[key]
        del target[path[-1]]
        with pytest.raises(MalformedPCDError):
            deserialize(json.dumps(data))

    def test_unparsable_number(self, pcd):
        data = envelope(pcd)
        data["pcd"]["proof"]["proof"]["pi_a"][0] = "12abc"
        with pytest.raises(MalformedPCDError):
            deserialize(json.dumps(data))

    def test_oversized_decimal_number(self, pcd):
        data = envelope(pcd)
        data["pcd"]["claim"]["modulus"] = "9" * 5000
        with pytest.raises(MalformedPCDError):
            deserialize(json.dumps(data))

    def test_wrong_container_type(self, pcd):
        data = envelope(pcd)
        data["pcd"]["claim"] = ["not", "an", "object"]
        with pytest.raises(MalformedPCDError):
            deserialize(json.dumps(data))

    def test_empty_id(self, pcd):
        data = envelope(pcd)
        data["pcd"]["id"] = ""
        with pytest.raises(MalformedPCDError):
            deserialize(json.dumps(data))


class TestPeekType:
    def test_reads_discriminator(self, pcd):
        assert peek_type(serialize(pcd)) == "identity-pcd"
        assert peek_type('{"type": "other-pcd", "pcd": "opaque"}') == "other-pcd"

    def test_missing_type(self):
        with pytest.raises(MalformedPCDError):
            peek_type(b'{"pcd": {}}')
