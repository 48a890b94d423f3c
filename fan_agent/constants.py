# fan_agent/constants.py
"""Shared constants for the fan-agent."""

ENV_PREFIX: str = "FAN_"

MIME_JSON_DID: str = "application/json+did"
MIME_JSONLD_DID: str = "application/jsonld+did"
MIME_CBOR_DID: str = "application/cbor+did"
MIME_JOSE: str = "application/jose"

DEFAULT_ACCEPT: str = MIME_JSON_DID

CURVE_SIGNING_ALGORITHMS = {
    "P-256": "ES256",
    "P-384": "ES384",
    "P-521": "ES512",
    "secp256k1": "ES256K",
    "Ed25519": "EdDSA",
}

DEFAULT_SIGNING_CURVE: str = "P-256"

# multicodec varint prefixes for public keys, used to build did:key identifiers
MULTICODEC_PUB_HEADERS = {
    "Ed25519": b'\xed\x01',
    "secp256k1": b'\xe7\x01',
    "P-256": b'\x80\x24',
    "P-384": b'\x81\x24',
    "P-521": b'\x82\x24',
}
MULTIBASE_BASE58BTC_PREFIX: str = "z"
DID_KEY_PREFIX: str = "did:key:"

ROOT_DOCUMENT_STEM: str = "did"
USER_DIRECTORY: str = "user"
JSON_EXTENSION: str = "json"
CBOR_EXTENSION: str = "cbor"
FORBIDDEN_NAME_CHARACTERS = ("/", "\\", "\x00")

ROOT_ROUTE: str = "/fan.did"
USER_ROUTE: str = "/user/{name}"

DEFAULT_SIGNING_KEY_PATH: str = "/etc/fan/signing.jwk"
DEFAULT_LISTEN_ADDR: str = "0.0.0.0:80"
DEFAULT_ROOT_PATH: str = "/etc/fan/root"


EXIT_SUCCESS = 0
EXIT_FAILURE = 1
