"""Encode and decode ES256K-R JWTs.

Thin wrappers around PyJWT that fill in the headers the scheme relies on:
'kid' carries the signer's Filecoin address and 'crv' names the curve.
"""

from __future__ import annotations
from typing import Any, Optional

import jwt
from eth_keys import keys

from filjwt.address import Address
from filjwt.constants import ALGORITHM, CRV_HEADER, CURVE, DEFAULT_NETWORK, KID_HEADER
from filjwt.crypto import KeyReference, recover_address
from filjwt.es256kr import kid_address_key_from_token
from filjwt.registry import init_registry
from filjwt.wallet import address_of


def encode_token(claims: dict[str, Any], private_key: keys.PrivateKey,
                 address: Optional[Address] = None,
                 headers: Optional[dict[str, Any]] = None) -> str:
    """Sign claims into a compact ES256K-R token.

    The 'kid' header is set to ``address`` (derived from the key when not
    given) and always overrides a 'kid' in ``headers``.
    """
    init_registry()
    if address is None:
        address = address_of(private_key)
    merged = dict(headers or {})
    merged.setdefault(CRV_HEADER, CURVE)
    merged[KID_HEADER] = str(address)
    return jwt.encode(claims, private_key, algorithm=ALGORITHM, headers=merged)


def decode_complete_token(token: str, key: Optional[KeyReference] = None,
                          **kwargs) -> dict[str, Any]:
    """Verify a token and return its header, payload and signature.

    When ``key`` is omitted the signer address is taken from the 'kid'
    header. Extra keyword arguments go to ``jwt.decode_complete``.
    """
    init_registry()
    if key is None:
        key = kid_address_key_from_token(token)
    return jwt.decode_complete(token, key, algorithms=[ALGORITHM], **kwargs)


def decode_token(token: str, key: Optional[KeyReference] = None,
                 **kwargs) -> dict[str, Any]:
    """Verify a token and return its claims."""
    return decode_complete_token(token, key, **kwargs)["payload"]


def inspect_token(token: str, network: str = DEFAULT_NETWORK) -> dict[str, Any]:
    """Decode a token without verifying it and recover its signer address.

    Raises the same errors as verification when the signature is malformed
    or recovery fails.
    """
    init_registry()
    unverified = jwt.decode_complete(
        token, options={"verify_signature": False}, algorithms=[ALGORITHM],
    )
    signing_input, _, _ = token.rpartition(".")
    return {
        "header": unverified["header"],
        "payload": unverified["payload"],
        "signer": recover_address(
            signing_input.encode("ascii"), unverified["signature"], network,
        ),
        "signature": unverified["signature"].hex(),
    }
