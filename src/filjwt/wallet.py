"""Lotus wallet key import/export.

``lotus wallet export`` prints a hex string that decodes to a JSON object
``{"Type": "secp256k1", "PrivateKey": "<base64>"}``. Only secp256k1 keys can
sign ES256K-R tokens; any other key type is rejected before the key
material is touched.
"""

from __future__ import annotations
import base64
import binascii
import json
import logging
from typing import Union

from eth_account import Account
from eth_keys import keys
from eth_keys.constants import SECPK1_N
from eth_keys.exceptions import ValidationError

from filjwt.address import Address
from filjwt.constants import DEFAULT_NETWORK, KEY_TYPE_SECP256K1, PRIVATE_KEY_SIZE
from filjwt.crypto import public_key_address
from filjwt.errors import MalformedExport, UnsupportedKeyType

logger = logging.getLogger(__name__)


def _field(obj: dict, name: str):
    """Case-insensitive field lookup, exact match preferred."""
    if name in obj:
        return obj[name]
    lowered = name.lower()
    for key, value in obj.items():
        if key.lower() == lowered:
            return value
    return None


def _decode_export_json(hex_blob: str) -> dict:
    blob = hex_blob.strip()
    if blob[:2].lower() == "0x":
        blob = blob[2:]
    try:
        raw = binascii.unhexlify(blob)
    except ValueError as e:
        raise MalformedExport(f"Wallet export is not valid hex: {e}") from e
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedExport(f"Wallet export is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedExport("Wallet export must be a JSON object")
    return data


def _private_key_from_b64(encoded) -> keys.PrivateKey:
    if not isinstance(encoded, str):
        raise MalformedExport("Wallet export PrivateKey must be a base64 string")
    try:
        raw = base64.b64decode(encoded, validate=True)
    except ValueError as e:
        raise MalformedExport(f"Wallet export PrivateKey is not valid base64: {e}") from e
    if len(raw) != PRIVATE_KEY_SIZE:
        raise MalformedExport(
            f"Invalid private key length: {len(raw)} != {PRIVATE_KEY_SIZE}"
        )
    if not 0 < int.from_bytes(raw, "big") < SECPK1_N:
        raise MalformedExport("Private key is outside the secp256k1 scalar range")
    try:
        return keys.PrivateKey(raw)
    except ValidationError as e:
        raise MalformedExport(f"Invalid private key: {e}") from e


def decode_lotus_export(hex_blob: str,
                        network: str = DEFAULT_NETWORK) -> tuple[Address, keys.PrivateKey]:
    """Decode a Lotus wallet export into (address, private key).

    Raises MalformedExport if the blob is not hex-encoded JSON with both
    fields, and UnsupportedKeyType if the key is not secp256k1.
    """
    data = _decode_export_json(hex_blob)
    key_type = _field(data, "Type")
    encoded = _field(data, "PrivateKey")
    if key_type is None or encoded is None:
        raise MalformedExport("Wallet export must contain Type and PrivateKey")
    if not isinstance(key_type, str):
        raise MalformedExport("Wallet export Type must be a string")
    if key_type != KEY_TYPE_SECP256K1:
        raise UnsupportedKeyType(
            f"key must be of type {KEY_TYPE_SECP256K1}, got: {key_type}"
        )

    private_key = _private_key_from_b64(encoded)
    addr = public_key_address(private_key.public_key, network)
    logger.debug("Decoded %s wallet export for %s", key_type, addr)
    return addr, private_key


def encode_lotus_export(private_key: keys.PrivateKey) -> str:
    """Encode a private key in the ``lotus wallet export`` format."""
    data = {
        "Type": KEY_TYPE_SECP256K1,
        "PrivateKey": base64.b64encode(private_key.to_bytes()).decode("ascii"),
    }
    return json.dumps(data, separators=(",", ":")).encode("utf-8").hex()


def generate_private_key() -> keys.PrivateKey:
    """Generate a new random secp256k1 private key."""
    acct = Account.create()
    return keys.PrivateKey(bytes(acct.key))


def address_of(key: Union[keys.PrivateKey, keys.PublicKey],
               network: str = DEFAULT_NETWORK) -> Address:
    """Filecoin secp256k1 address of a private or public key."""
    if isinstance(key, keys.PrivateKey):
        key = key.public_key
    return public_key_address(key, network)
