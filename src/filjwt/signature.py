"""Conversion between compact recoverable and ES256K-R wire signatures.

Compact form (as produced by secp256k1 "sign compact" APIs):
    <1-byte recovery code = v + 27><32-byte R><32-byte S>
ES256K-R wire form:
    <32-byte R><32-byte S><1-byte v>
"""

from __future__ import annotations

from filjwt.constants import COMPACT_RECOVERY_BASE, SCALAR_SIZE, SIGNATURE_SIZE
from filjwt.errors import InvalidSignatureLength


def check_signature_length(sig: bytes) -> None:
    """Raise InvalidSignatureLength unless ``sig`` is exactly 65 bytes."""
    if len(sig) != SIGNATURE_SIZE:
        raise InvalidSignatureLength(
            f"Invalid signature length: {len(sig)} != {SIGNATURE_SIZE}"
        )


def compact_to_wire(sig: bytes) -> bytes:
    """Move the recovery code to the end and remove the compact offset."""
    check_signature_length(sig)
    v = (sig[0] - COMPACT_RECOVERY_BASE) & 0xFF
    return bytes(sig[1:]) + bytes([v])


def wire_to_compact(sig: bytes) -> bytes:
    """Move v to the front and restore the compact offset."""
    check_signature_length(sig)
    code = (sig[-1] + COMPACT_RECOVERY_BASE) & 0xFF
    return bytes([code]) + bytes(sig[:-1])


def split_wire(sig: bytes) -> tuple[int, int, int]:
    """Return (r, s, v) from a wire signature."""
    check_signature_length(sig)
    r = int.from_bytes(sig[:SCALAR_SIZE], "big")
    s = int.from_bytes(sig[SCALAR_SIZE:2 * SCALAR_SIZE], "big")
    return r, s, sig[-1]


def join_wire(r: int, s: int, v: int) -> bytes:
    """Build a wire signature from its components."""
    return r.to_bytes(SCALAR_SIZE, "big") + s.to_bytes(SCALAR_SIZE, "big") + bytes([v])
