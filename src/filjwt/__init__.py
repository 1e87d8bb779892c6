"""ES256K-R JWT signing with Filecoin secp256k1 wallet keys.

Importing the package registers the ES256K-R signing method with PyJWT.
"""

from filjwt.address import Address, format_address, parse_address
from filjwt.constants import ALGORITHM
from filjwt.crypto import recover_address, sign_payload, verify_payload
from filjwt.errors import (
    ECDSAVerificationFailed,
    FilJWTError,
    InvalidAddress,
    InvalidKeyType,
    InvalidSignatureLength,
    MalformedExport,
    MissingKeyIdentifier,
    UnknownAlgorithm,
    UnsupportedKeyType,
)
from filjwt.es256kr import ES256KRAlgorithm, kid_address_key
from filjwt.registry import get_signing_method, init_registry
from filjwt.tokens import decode_complete_token, decode_token, encode_token, inspect_token
from filjwt.wallet import decode_lotus_export, encode_lotus_export

__version__ = "0.1.0"

init_registry()
