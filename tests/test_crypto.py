"""Tests for ES256K-R signing and verification (secp256k1 recoverable ECDSA)."""

import hashlib
import os

import pytest
from eth_keys import keys
from eth_keys.constants import SECPK1_N

from filjwt.address import new_bls_address, new_id_address, parse_address
from filjwt.constants import MAINNET_PREFIX, UNCOMPRESSED_PUBKEY_SIZE
from filjwt.crypto import (
    hash_payload,
    recover_address,
    resolve_key_reference,
    serialize_uncompressed,
    sign_payload,
    verify_payload,
)
from filjwt.errors import (
    ECDSAVerificationFailed,
    InvalidKeyType,
    InvalidSignatureLength,
)
from filjwt.signature import join_wire, split_wire
from filjwt.wallet import address_of

from vectors import SAMPLE_SECP256K1_ADDRESS

FISH = "🐠".encode("utf-8")


def _flip_bit(data: bytes, bit: int) -> bytes:
    flipped = bytearray(data)
    flipped[bit // 8] ^= 1 << (bit % 8)
    return bytes(flipped)


class TestSign:
    def test_returns_65_bytes(self, sample_private_key):
        sig = sign_payload(sample_private_key, b"hello")
        assert len(sig) == 65

    def test_deterministic(self, sample_private_key):
        assert sign_payload(sample_private_key, FISH) == sign_payload(sample_private_key, FISH)

    def test_recovery_id_is_zero_or_one(self, sample_private_key, other_private_key):
        for key in (sample_private_key, other_private_key):
            for payload in (b"", b"a", FISH, b"\xab" * 1000):
                assert sign_payload(key, payload)[-1] in (0, 1)

    def test_is_valid_plain_ecdsa(self, sample_private_key):
        sig = sign_payload(sample_private_key, FISH)
        r, s, v = split_wire(sig)
        msg_hash = hashlib.sha256(FISH).digest()
        non_recoverable = keys.NonRecoverableSignature(rs=(r, s))
        assert non_recoverable.verify_msg_hash(msg_hash, sample_private_key.public_key)

    def test_str_payload_is_utf8(self, sample_private_key):
        assert sign_payload(sample_private_key, "🐠") == sign_payload(sample_private_key, FISH)

    @pytest.mark.parametrize("bad_key", [
        "not a key",
        b"\x01" * 32,
        None,
        12345,
    ])
    def test_rejects_non_private_key(self, bad_key):
        with pytest.raises(InvalidKeyType):
            sign_payload(bad_key, b"hello")

    def test_rejects_public_key(self, sample_private_key):
        with pytest.raises(InvalidKeyType):
            sign_payload(sample_private_key.public_key, b"hello")


class TestVerify:
    def test_with_public_key(self, sample_private_key):
        sig = sign_payload(sample_private_key, FISH)
        verify_payload(sample_private_key.public_key, FISH, sig)

    def test_with_address(self, sample_private_key, sample_address):
        sig = sign_payload(sample_private_key, FISH)
        verify_payload(sample_address, FISH, sig)

    def test_with_address_string(self, sample_private_key):
        sig = sign_payload(sample_private_key, FISH)
        verify_payload(SAMPLE_SECP256K1_ADDRESS, FISH, sig)

    def test_with_mainnet_address_string(self, sample_private_key):
        sig = sign_payload(sample_private_key, FISH)
        verify_payload("f" + SAMPLE_SECP256K1_ADDRESS[1:], FISH, sig)

    def test_fresh_key_round_trip(self, other_private_key):
        payload = b"test message for signing"
        sig = sign_payload(other_private_key, payload)
        verify_payload(other_private_key.public_key, payload, sig)
        verify_payload(address_of(other_private_key), payload, sig)

    def test_empty_payload(self, other_private_key):
        sig = sign_payload(other_private_key, b"")
        verify_payload(other_private_key.public_key, b"", sig)

    def test_wrong_address_fails(self, sample_private_key, other_private_key):
        sig = sign_payload(sample_private_key, FISH)
        with pytest.raises(ECDSAVerificationFailed):
            verify_payload(address_of(other_private_key), FISH, sig)

    def test_tampered_payload_fails(self, sample_private_key, sample_address):
        sig = sign_payload(sample_private_key, b"original message")
        with pytest.raises(ECDSAVerificationFailed):
            verify_payload(sample_address, b"tampered message", sig)

    def test_every_payload_bit_flip_fails(self, sample_private_key, sample_address):
        sig = sign_payload(sample_private_key, FISH)
        for bit in range(len(FISH) * 8):
            with pytest.raises(ECDSAVerificationFailed):
                verify_payload(sample_address, _flip_bit(FISH, bit), sig)

    def test_every_signature_bit_flip_fails(self, sample_private_key, sample_address):
        sig = sign_payload(sample_private_key, FISH)
        for bit in range(len(sig) * 8):
            with pytest.raises(ECDSAVerificationFailed):
                verify_payload(sample_address, FISH, _flip_bit(sig, bit))

    def test_bit_flips_fail_for_random_key_and_payload(self, other_private_key):
        payload = os.urandom(48)
        addr = address_of(other_private_key)
        sig = sign_payload(other_private_key, payload)
        verify_payload(addr, payload, sig)
        for bit in range(len(payload) * 8):
            with pytest.raises(ECDSAVerificationFailed):
                verify_payload(addr, _flip_bit(payload, bit), sig)
        for bit in range(len(sig) * 8):
            with pytest.raises(ECDSAVerificationFailed):
                verify_payload(addr, payload, _flip_bit(sig, bit))

    @pytest.mark.parametrize("length", [0, 64, 66])
    def test_bad_signature_length(self, sample_address, length):
        with pytest.raises(InvalidSignatureLength):
            verify_payload(sample_address, FISH, b"\x00" * length)

    def test_key_checked_before_signature_length(self):
        with pytest.raises(InvalidKeyType):
            verify_payload(12345, FISH, b"\x00" * 64)

    def test_zero_r_fails(self, sample_private_key, sample_address):
        _, s, v = split_wire(sign_payload(sample_private_key, FISH))
        with pytest.raises(ECDSAVerificationFailed, match="out of range"):
            verify_payload(sample_address, FISH, join_wire(0, s, v))

    def test_s_not_below_curve_order_fails(self, sample_private_key, sample_address):
        r, _, v = split_wire(sign_payload(sample_private_key, FISH))
        with pytest.raises(ECDSAVerificationFailed, match="out of range"):
            verify_payload(sample_address, FISH, join_wire(r, SECPK1_N, v))

    @pytest.mark.parametrize("v", [2, 3, 4, 5, 27, 255])
    def test_invalid_recovery_id_fails(self, sample_private_key, sample_address, v):
        r, s, _ = split_wire(sign_payload(sample_private_key, FISH))
        with pytest.raises(ECDSAVerificationFailed):
            verify_payload(sample_address, FISH, join_wire(r, s, v))


class TestKeyReference:
    def test_public_key(self, sample_private_key):
        addr = resolve_key_reference(sample_private_key.public_key)
        assert str(addr) == SAMPLE_SECP256K1_ADDRESS

    def test_address_is_used_as_is(self, sample_address):
        assert resolve_key_reference(sample_address) is sample_address

    def test_string(self):
        addr = resolve_key_reference(SAMPLE_SECP256K1_ADDRESS)
        assert addr == parse_address(SAMPLE_SECP256K1_ADDRESS)

    def test_unparseable_string(self):
        with pytest.raises(InvalidKeyType, match="Invalid address"):
            resolve_key_reference("not-an-address")

    def test_private_key_rejected(self, sample_private_key):
        with pytest.raises(InvalidKeyType):
            resolve_key_reference(sample_private_key)

    @pytest.mark.parametrize("bad_key", [None, 42, b"t1abc", ["t01024"]])
    def test_unknown_shapes_rejected(self, bad_key):
        with pytest.raises(InvalidKeyType):
            resolve_key_reference(bad_key)

    def test_id_address_rejected(self):
        with pytest.raises(InvalidKeyType, match="secp256k1"):
            resolve_key_reference(new_id_address(1024))

    def test_id_address_string_rejected(self):
        with pytest.raises(InvalidKeyType, match="secp256k1"):
            resolve_key_reference("t01024")

    def test_bls_address_rejected(self, sample_private_key):
        sig = sign_payload(sample_private_key, FISH)
        with pytest.raises(InvalidKeyType):
            verify_payload(new_bls_address(b"\x01" * 48), FISH, sig)

    def test_rejection_names_protocol(self):
        with pytest.raises(InvalidKeyType, match="got bls address t3"):
            resolve_key_reference(new_bls_address(b"\x01" * 48))


class TestRecoverAddress:
    def test_recovers_signer(self, sample_private_key):
        sig = sign_payload(sample_private_key, FISH)
        assert str(recover_address(FISH, sig)) == SAMPLE_SECP256K1_ADDRESS

    def test_network(self, sample_private_key):
        sig = sign_payload(sample_private_key, FISH)
        addr = recover_address(FISH, sig, network=MAINNET_PREFIX)
        assert str(addr) == "f" + SAMPLE_SECP256K1_ADDRESS[1:]

    def test_bad_length(self):
        with pytest.raises(InvalidSignatureLength):
            recover_address(FISH, b"\x00" * 64)


class TestHashing:
    def test_single_sha256(self):
        assert hash_payload(b"hello") == hashlib.sha256(b"hello").digest()

    def test_str_and_bytes_agree(self):
        assert hash_payload("🐠") == hash_payload(FISH)

    def test_uncompressed_serialization(self, sample_private_key):
        raw = serialize_uncompressed(sample_private_key.public_key)
        assert len(raw) == UNCOMPRESSED_PUBKEY_SIZE
        assert raw[0] == 0x04
