"""Tests for the identity claim/proof model."""

import dataclasses

import pytest

from identitypcd.exceptions import MalformedNumberError
from identitypcd.pcd import (
    IDENTITY_PCD_TYPE,
    IdentityClaim,
    IdentityPCD,
    IdentityProof,
    IdentityProveArgs,
    SnarkProof,
)


def make_snark(**overrides):
    fields = dict(
        pi_a=["1", "2", "1"],
        pi_b=[["3", "4"], ["5", "6"], ["1", "0"]],
        pi_c=["7", "8", "1"],
        protocol="groth16",
        curve="bn128",
    )
    fields.update(overrides)
    return SnarkProof(**fields)


class TestSnarkProof:
    def test_coordinates_are_normalized(self):
        proof = make_snark(pi_a=["0x1", "2", 1])
        assert proof.pi_a == (1, 2, 1)
        assert proof.pi_b == ((3, 4), (5, 6), (1, 0))

    def test_equal_across_representations(self):
        assert make_snark() == make_snark(pi_c=[7, "0x8", "01"])

    def test_json_uses_decimal_strings(self):
        data = make_snark(pi_a=["0xff", 0, 1]).to_json()
        assert data["pi_a"] == ["255", "0", "1"]
        assert data["pi_b"][0] == ["3", "4"]
        assert data["protocol"] == "groth16"

    def test_from_json_ignores_extra_keys(self):
        data = make_snark().to_json()
        data["extra"] = "ignored"
        assert SnarkProof.from_json(data) == make_snark()

    def test_from_json_missing_key_raises(self):
        data = make_snark().to_json()
        del data["curve"]
        with pytest.raises(KeyError):
            SnarkProof.from_json(data)

    def test_bad_coordinate_raises(self):
        with pytest.raises(MalformedNumberError):
            make_snark(pi_a=["nope"])

    def test_string_instead_of_list_raises(self):
        with pytest.raises(MalformedNumberError):
            make_snark(pi_a="123")

    def test_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            make_snark().protocol = "plonk"


class TestIdentityPCD:
    def test_claim_normalizes_modulus(self):
        assert IdentityClaim("0x10") == IdentityClaim(16)

    def test_create_assigns_unique_ids(self):
        claim = IdentityClaim(99)
        proof = IdentityProof(99, make_snark())
        first = IdentityPCD.create(claim, proof)
        second = IdentityPCD.create(claim, proof)
        assert first.id != second.id
        assert first.claim == second.claim

    def test_create_keeps_given_id(self):
        pcd = IdentityPCD.create(IdentityClaim(5), IdentityProof(5, make_snark()), id="fixed")
        assert pcd.id == "fixed"

    def test_create_keeps_explicit_empty_id(self):
        pcd = IdentityPCD.create(IdentityClaim(5), IdentityProof(5, make_snark()), id="")
        assert pcd.id == ""

    def test_type_is_fixed(self):
        pcd = IdentityPCD.create(IdentityClaim(5), IdentityProof(5, make_snark()))
        assert pcd.type == IDENTITY_PCD_TYPE == "identity-pcd"
        with pytest.raises(TypeError):
            IdentityPCD(id="x", claim=pcd.claim, proof=pcd.proof, type="other")


class TestIdentityProveArgs:
    def test_normalizes_all_fields(self):
        args = IdentityProveArgs(base_message="42", signature="0x2a", modulus=77)
        assert (args.base_message, args.signature, args.modulus) == (42, 42, 77)

    def test_signature_not_in_repr(self):
        args = IdentityProveArgs(base_message=1, signature=987654321, modulus=3)
        assert "987654321" not in repr(args)

    def test_malformed_field_raises(self):
        with pytest.raises(MalformedNumberError):
            IdentityProveArgs(base_message="x", signature=1, modulus=3)
