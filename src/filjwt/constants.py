"""Shared constants for the ES256K-R signing method and Filecoin addresses."""

# JWT
ALGORITHM = "ES256K-R"
CURVE = "secp256k1"
KID_HEADER = "kid"
CRV_HEADER = "crv"

# Signatures
SIGNATURE_SIZE = 65  # r(32) + s(32) + v(1)
SCALAR_SIZE = 32
COMPACT_RECOVERY_BASE = 27  # compact form stores v + 27 in its first byte

# Keys
PRIVATE_KEY_SIZE = 32
UNCOMPRESSED_PUBKEY_PREFIX = b"\x04"
UNCOMPRESSED_PUBKEY_SIZE = 65

# Lotus wallet export
KEY_TYPE_SECP256K1 = "secp256k1"

# Filecoin addresses
PAYLOAD_HASH_SIZE = 20  # blake2b-160 for secp256k1 and actor addresses
BLS_PUBKEY_SIZE = 48
CHECKSUM_SIZE = 4  # blake2b-32
MAX_ID_VALUE = (1 << 63) - 1
MAX_ADDRESS_STRING_LENGTH = 2 + 84
BASE32_ALPHABET = "abcdefghijklmnopqrstuvwxyz234567"

MAINNET_PREFIX = "f"
TESTNET_PREFIX = "t"

NETWORKS = {
    "mainnet": MAINNET_PREFIX,
    "testnet": TESTNET_PREFIX,
}
DEFAULT_NETWORK = TESTNET_PREFIX


class Protocol:
    """Filecoin address protocol tags (1 byte)."""

    ID = 0          # Actor ID, LEB128-encoded
    SECP256K1 = 1   # blake2b-160 of an uncompressed secp256k1 public key
    ACTOR = 2       # blake2b-160 of actor creation data
    BLS = 3         # 48-byte BLS public key

    NAMES = {
        ID: "id",
        SECP256K1: "secp256k1",
        ACTOR: "actor",
        BLS: "bls",
    }
