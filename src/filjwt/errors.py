"""Exceptions raised by filjwt.

Failures that PyJWT would report on its own also inherit from the matching
PyJWT exception, so callers that already catch ``jwt.InvalidTokenError`` or
``jwt.PyJWTError`` around ``jwt.decode`` keep working unchanged.
"""

import jwt


class FilJWTError(Exception):
    """Base class for all filjwt errors."""


class InvalidKeyType(FilJWTError, jwt.InvalidKeyError):
    """Key is not usable with ES256K-R (wrong type or non-secp256k1 address)."""


class InvalidSignatureLength(FilJWTError, jwt.InvalidSignatureError):
    """Signature is not exactly 65 bytes."""


class ECDSAVerificationFailed(FilJWTError, jwt.InvalidSignatureError):
    """Public key recovery failed or recovered to a different address."""


class MissingKeyIdentifier(FilJWTError, jwt.InvalidTokenError):
    """Token header has no usable 'kid'."""


class MalformedExport(FilJWTError, ValueError):
    """Wallet export is not valid hex-encoded JSON key material."""


class UnsupportedKeyType(FilJWTError, ValueError):
    """Wallet export holds a key type other than secp256k1."""


class InvalidAddress(FilJWTError, ValueError):
    """Filecoin address could not be parsed or constructed."""


class UnknownAlgorithm(FilJWTError, jwt.InvalidAlgorithmError):
    """No signing method is registered under the requested identifier."""
