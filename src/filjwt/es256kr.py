"""ES256K-R signing method for PyJWT.

Signatures are 65 bytes, R || S || V, where V lets the verifier recover the
signer's public key. The verification key is therefore a Filecoin address
(or anything that resolves to one) rather than a public key.
"""

from __future__ import annotations
from collections.abc import Mapping
from typing import Any

import jwt
from jwt.algorithms import Algorithm

from filjwt.constants import ALGORITHM, KID_HEADER
from filjwt.crypto import sign_payload, verify_payload
from filjwt.errors import MissingKeyIdentifier


class ES256KRAlgorithm(Algorithm):
    """secp256k1 ECDSA with SHA-256 and a trailing recovery id."""

    name = ALGORITHM

    def prepare_key(self, key: Any) -> Any:
        # Signing and verification accept different key shapes; each one
        # checks its own.
        return key

    def sign(self, msg: bytes, key: Any) -> bytes:
        return sign_payload(key, msg)

    def verify(self, msg: bytes, key: Any, sig: bytes) -> bool:
        verify_payload(key, msg, sig)
        return True

    @staticmethod
    def to_jwk(key_obj, as_dict: bool = False):
        raise NotImplementedError("ES256K-R keys have no JWK representation")

    @staticmethod
    def from_jwk(jwk):
        raise NotImplementedError("ES256K-R keys have no JWK representation")


def kid_address_key(header: Mapping) -> str:
    """Return the signer address carried in a token's 'kid' header."""
    kid = header.get(KID_HEADER)
    if kid is None:
        raise MissingKeyIdentifier("Token header has no 'kid'")
    if not isinstance(kid, str):
        raise MissingKeyIdentifier(
            f"Token 'kid' must be a string, got {type(kid).__name__}"
        )
    return kid


def kid_address_key_from_token(token: str) -> str:
    """Read the 'kid' address from a token without verifying it."""
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        if isinstance(e, jwt.DecodeError):
            raise
        # PyJWT rejects non-string 'kid' values while loading the header.
        raise MissingKeyIdentifier(str(e)) from e
    return kid_address_key(header)
