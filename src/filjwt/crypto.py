"""ES256K-R payload signing and verification.

Signatures are deterministic (RFC 6979) secp256k1 ECDSA over a single
SHA-256 of the payload, with a trailing recovery id so the signer's public
key can be recovered. Verification never needs the public key: it recovers
it, derives the Filecoin address and compares that address's payload with
the claimed one.
"""

from __future__ import annotations
import hashlib
import hmac
from typing import Union

from eth_keys import keys
from eth_keys.constants import SECPK1_N
from eth_keys.exceptions import BadSignature, ValidationError

from filjwt.address import Address, new_secp256k1_address, parse_address
from filjwt.constants import (
    COMPACT_RECOVERY_BASE,
    DEFAULT_NETWORK,
    SCALAR_SIZE,
    UNCOMPRESSED_PUBKEY_PREFIX,
    Protocol,
)
from filjwt.errors import ECDSAVerificationFailed, InvalidAddress, InvalidKeyType
from filjwt.signature import check_signature_length, compact_to_wire, wire_to_compact

KeyReference = Union[keys.PublicKey, Address, str]


def hash_payload(payload: bytes) -> bytes:
    """Single-pass SHA-256 of a payload."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hashlib.sha256(payload).digest()


def serialize_uncompressed(public_key: keys.PublicKey) -> bytes:
    """65-byte ``0x04 || X || Y`` serialization of a public key."""
    return UNCOMPRESSED_PUBKEY_PREFIX + public_key.to_bytes()


def public_key_address(public_key: keys.PublicKey,
                       network: str = DEFAULT_NETWORK) -> Address:
    """Filecoin secp256k1 address of a public key."""
    return new_secp256k1_address(serialize_uncompressed(public_key), network)


def sign_payload(private_key: keys.PrivateKey, payload: bytes) -> bytes:
    """Sign a payload with a secp256k1 private key.

    Returns a 65-byte signature (r + s + v).
    """
    if not isinstance(private_key, keys.PrivateKey):
        raise InvalidKeyType(
            f"ES256K-R signing requires a secp256k1 private key, "
            f"got {type(private_key).__name__}"
        )
    signed = private_key.sign_msg_hash(hash_payload(payload))
    compact = (
        bytes([signed.v + COMPACT_RECOVERY_BASE])
        + signed.r.to_bytes(SCALAR_SIZE, "big")
        + signed.s.to_bytes(SCALAR_SIZE, "big")
    )
    return compact_to_wire(compact)


def resolve_key_reference(key: KeyReference) -> Address:
    """Turn a verification key reference into a secp256k1 address.

    Accepts a public key, an Address or an address string. Anything else,
    and any address that is not a secp256k1 address, raises InvalidKeyType.
    """
    if isinstance(key, keys.PublicKey):
        addr = public_key_address(key)
    elif isinstance(key, Address):
        addr = key
    elif isinstance(key, str):
        try:
            addr = parse_address(key)
        except InvalidAddress as e:
            raise InvalidKeyType(f"Invalid address {key!r}: {e}") from e
    else:
        raise InvalidKeyType(
            f"ES256K-R verification requires a public key or Filecoin address, "
            f"got {type(key).__name__}"
        )
    if addr.protocol != Protocol.SECP256K1:
        raise InvalidKeyType(
            f"Only secp256k1 addresses are supported, got "
            f"{Protocol.NAMES.get(addr.protocol, addr.protocol)} address {addr}"
        )
    return addr


def _recover_public_key(msg_hash: bytes, compact: bytes) -> keys.PublicKey:
    recovery_id = compact[0] - COMPACT_RECOVERY_BASE
    if recovery_id not in (0, 1):
        raise ECDSAVerificationFailed(f"Invalid recovery code: {compact[0]}")

    r = int.from_bytes(compact[1:1 + SCALAR_SIZE], "big")
    s = int.from_bytes(compact[1 + SCALAR_SIZE:], "big")
    if not (0 < r < SECPK1_N and 0 < s < SECPK1_N):
        raise ECDSAVerificationFailed("Signature scalar out of range")

    try:
        sig = keys.Signature(vrs=(recovery_id, r, s))
        return sig.recover_public_key_from_msg_hash(msg_hash)
    except (BadSignature, ValidationError, ValueError) as e:
        raise ECDSAVerificationFailed(f"Public key recovery failed: {e}") from e


def recover_address(payload: bytes, signature: bytes,
                    network: str = DEFAULT_NETWORK) -> Address:
    """Recover the signer's address from a payload and wire signature."""
    check_signature_length(signature)
    compact = wire_to_compact(signature)
    public_key = _recover_public_key(hash_payload(payload), compact)
    return public_key_address(public_key, network)


def verify_payload(key: KeyReference, payload: bytes, signature: bytes) -> None:
    """Verify that a payload was signed by the holder of the given key.

    Only address payloads are compared, so a public key, an Address and
    its string form (on either network) are interchangeable.
    """
    addr = resolve_key_reference(key)
    recovered = recover_address(payload, signature)
    if not hmac.compare_digest(recovered.payload, addr.payload):
        raise ECDSAVerificationFailed(
            f"Signature recovers to {recovered}, expected {addr}"
        )
