"""Filecoin wallet addresses.

An address is a protocol tag plus a payload. The textual form is
``<network><protocol digit><base32(payload + checksum)>`` where the checksum
is a 4-byte BLAKE2b digest over the protocol byte and the payload. ID
addresses are the exception: their text is the decimal actor id and their
binary payload is its unsigned LEB128 encoding.
"""

from __future__ import annotations
import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass, field, replace

from filjwt.constants import (
    BASE32_ALPHABET,
    BLS_PUBKEY_SIZE,
    CHECKSUM_SIZE,
    DEFAULT_NETWORK,
    MAINNET_PREFIX,
    MAX_ADDRESS_STRING_LENGTH,
    MAX_ID_VALUE,
    PAYLOAD_HASH_SIZE,
    TESTNET_PREFIX,
    Protocol,
)
from filjwt.errors import InvalidAddress

_PAYLOAD_SIZES = {
    Protocol.SECP256K1: PAYLOAD_HASH_SIZE,
    Protocol.ACTOR: PAYLOAD_HASH_SIZE,
    Protocol.BLS: BLS_PUBKEY_SIZE,
}


def _blake2b(data: bytes, size: int) -> bytes:
    return hashlib.blake2b(data, digest_size=size).digest()


def address_checksum(data: bytes) -> bytes:
    """4-byte BLAKE2b checksum of ``protocol byte + payload``."""
    return _blake2b(data, CHECKSUM_SIZE)


def encode_uvarint(value: int) -> bytes:
    """Unsigned LEB128 encoding."""
    if value < 0:
        raise InvalidAddress(f"Negative varint: {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_uvarint(data: bytes) -> int:
    """Decode an unsigned LEB128 value that must span all of ``data``."""
    value = 0
    shift = 0
    for i, byte in enumerate(data):
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if i != len(data) - 1:
                raise InvalidAddress("Trailing bytes after varint")
            if i > 0 and byte == 0:
                raise InvalidAddress("Varint is not minimally encoded")
            return value
        shift += 7
        if shift > 63:
            raise InvalidAddress("Varint overflows 64 bits")
    raise InvalidAddress("Truncated varint")


def _validate_network(network: str) -> None:
    if network not in (MAINNET_PREFIX, TESTNET_PREFIX):
        raise InvalidAddress(f"Unknown network prefix: {network!r}")


@dataclass(frozen=True)
class Address:
    """A Filecoin address.

    Two addresses are equal when protocol and payload match; the network
    prefix only changes how the address is printed.
    """

    protocol: int
    payload: bytes
    network: str = field(default=DEFAULT_NETWORK, compare=False)

    def __post_init__(self):
        _validate_network(self.network)
        if self.protocol == Protocol.ID:
            value = decode_uvarint(self.payload)
            if value > MAX_ID_VALUE:
                raise InvalidAddress(f"ID address out of range: {value}")
            return
        expected = _PAYLOAD_SIZES.get(self.protocol)
        if expected is None:
            raise InvalidAddress(f"Unknown address protocol: {self.protocol}")
        if len(self.payload) != expected:
            raise InvalidAddress(
                f"Invalid payload length for protocol {self.protocol}: "
                f"{len(self.payload)} != {expected}"
            )

    @property
    def checksum(self) -> bytes:
        return address_checksum(self.to_bytes())

    def to_bytes(self) -> bytes:
        """Binary form: protocol byte followed by the payload."""
        return bytes([self.protocol]) + self.payload

    def with_network(self, network: str) -> Address:
        return replace(self, network=network)

    def __str__(self) -> str:
        return format_address(self)


def new_secp256k1_address(pubkey: bytes, network: str = DEFAULT_NETWORK) -> Address:
    """Address for a secp256k1 key, from its uncompressed serialization."""
    return Address(Protocol.SECP256K1, _blake2b(pubkey, PAYLOAD_HASH_SIZE), network)


def new_actor_address(data: bytes, network: str = DEFAULT_NETWORK) -> Address:
    return Address(Protocol.ACTOR, _blake2b(data, PAYLOAD_HASH_SIZE), network)


def new_bls_address(pubkey: bytes, network: str = DEFAULT_NETWORK) -> Address:
    return Address(Protocol.BLS, bytes(pubkey), network)


def new_id_address(actor_id: int, network: str = DEFAULT_NETWORK) -> Address:
    if not 0 <= actor_id <= MAX_ID_VALUE:
        raise InvalidAddress(f"ID address out of range: {actor_id}")
    return Address(Protocol.ID, encode_uvarint(actor_id), network)


def address_from_bytes(raw: bytes, network: str = DEFAULT_NETWORK) -> Address:
    """Parse the binary form produced by ``Address.to_bytes``."""
    if len(raw) < 2:
        raise InvalidAddress("Address bytes too short")
    return Address(raw[0], bytes(raw[1:]), network)


def _b32encode(data: bytes) -> str:
    return base64.b32encode(data).decode("ascii").lower().rstrip("=")


def _b32decode(text: str) -> bytes:
    if any(ch not in BASE32_ALPHABET for ch in text):
        raise InvalidAddress("Invalid base32 character in address")
    padded = text.upper() + "=" * (-len(text) % 8)
    try:
        return base64.b32decode(padded)
    except binascii.Error as e:
        raise InvalidAddress(f"Invalid base32 encoding: {e}") from e


def format_address(addr: Address) -> str:
    """Textual form of an address using its own network prefix."""
    prefix = f"{addr.network}{addr.protocol}"
    if addr.protocol == Protocol.ID:
        return prefix + str(decode_uvarint(addr.payload))
    return prefix + _b32encode(addr.payload + addr.checksum)


def parse_address(text: str) -> Address:
    """Parse the textual form of an address.

    Raises InvalidAddress on any malformed input, including a checksum that
    does not match the payload.
    """
    if not isinstance(text, str):
        raise InvalidAddress(f"Address must be a string, got {type(text).__name__}")
    if len(text) < 3 or len(text) > MAX_ADDRESS_STRING_LENGTH:
        raise InvalidAddress(f"Invalid address length: {len(text)}")

    network = text[0]
    _validate_network(network)
    if text[1] not in "0123456789":
        raise InvalidAddress(f"Unknown address protocol: {text[1]!r}")
    protocol = int(text[1])
    raw = text[2:]

    if protocol == Protocol.ID:
        if not (raw.isascii() and raw.isdigit()):
            raise InvalidAddress(f"Invalid ID address: {text!r}")
        return new_id_address(int(raw), network)

    if protocol not in _PAYLOAD_SIZES:
        raise InvalidAddress(f"Unknown address protocol: {protocol}")

    decoded = _b32decode(raw)
    if len(decoded) <= CHECKSUM_SIZE:
        raise InvalidAddress("Address payload too short")
    payload, cksum = decoded[:-CHECKSUM_SIZE], decoded[-CHECKSUM_SIZE:]
    addr = Address(protocol, payload, network)
    if not hmac.compare_digest(addr.checksum, cksum):
        raise InvalidAddress("Address checksum mismatch")
    return addr
