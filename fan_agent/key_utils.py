# fan_agent/key_utils.py
"""Loading, generation and did:key formatting of the node's signing JWK."""

import json
import logging
from pathlib import Path
from typing import Union

import multibase
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from jwcrypto import jwk

from .constants import (
    CURVE_SIGNING_ALGORITHMS,
    DEFAULT_SIGNING_CURVE,
    DID_KEY_PREFIX,
    MULTICODEC_PUB_HEADERS,
)
from .errors import InvalidKeyFormatError, KeyNotFoundError, UnsupportedAlgorithmError

logger = logging.getLogger(__name__)


def load_signing_key(path: Union[str, Path]) -> jwk.JWK:
    """
    Loads the private signing key (JWK JSON) from disk.

    Args:
        path: Path to the JWK file.

    Returns:
        The parsed private key.

    Raises:
        KeyNotFoundError: If the file does not exist.
        InvalidKeyFormatError: If the file is not valid JSON, is not a JWK,
                               holds no private material or declares no curve.
    """
    key_path = Path(path)
    logger.info(f"Loading signing key from {key_path}")
    try:
        raw = key_path.read_text(encoding='utf-8')
    except FileNotFoundError:
        raise KeyNotFoundError(f"Signing key file '{key_path}' not found.")
    except OSError as e:
        raise InvalidKeyFormatError(f"Failed to read signing key '{key_path}': {e}")

    try:
        private_jwk = json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidKeyFormatError(f"Failed to parse JSON from signing key '{key_path}'.")
    if not isinstance(private_jwk, dict) or "kty" not in private_jwk:
        raise InvalidKeyFormatError(f"Content of '{key_path}' is not a JWK dictionary.")

    try:
        key = jwk.JWK(**private_jwk)
    except Exception as e:
        raise InvalidKeyFormatError(f"Content of '{key_path}' is not a valid JWK: {e}")

    if "crv" not in private_jwk:
        raise InvalidKeyFormatError(f"Signing key '{key_path}' declares no curve.")
    if not key.has_private:
        raise InvalidKeyFormatError(f"Signing key '{key_path}' holds no private key material.")

    logger.info(f"Loaded {private_jwk['kty']} signing key on curve {private_jwk['crv']}")
    return key


def generate_signing_jwk(curve: str = DEFAULT_SIGNING_CURVE) -> jwk.JWK:
    """
    Generates a new private signing key on the given curve.

    Raises:
        UnsupportedAlgorithmError: If the curve cannot be used for signing.
    """
    if curve not in CURVE_SIGNING_ALGORITHMS:
        raise UnsupportedAlgorithmError(f"No signing algorithm for curve '{curve}'.")
    kty = 'OKP' if curve == 'Ed25519' else 'EC'
    key = jwk.JWK.generate(kty=kty, crv=curve)
    logger.info(f"Generated new {kty} signing key on curve {curve}")
    return key


def did_key_from_jwk(key: jwk.JWK) -> str:
    """
    Formats the public half of a signing key as a did:key identifier.

    EC keys are encoded as compressed points, Ed25519 keys as their raw
    32 bytes, each behind the multicodec prefix for the curve.

    Raises:
        UnsupportedAlgorithmError: If the curve has no multicodec prefix.
        InvalidKeyFormatError: If the public key cannot be extracted.
    """
    curve = key.get('crv')
    header = MULTICODEC_PUB_HEADERS.get(curve)
    if header is None:
        raise UnsupportedAlgorithmError(f"No did:key encoding for curve '{curve}'.")

    try:
        public_key = key.get_op_key('verify')
    except Exception as e:
        raise InvalidKeyFormatError(f"Failed to extract public key: {e}")

    if isinstance(public_key, ed25519.Ed25519PublicKey):
        pub_bytes = public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    elif isinstance(public_key, ec.EllipticCurvePublicKey):
        pub_bytes = public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint,
        )
    else:
        raise InvalidKeyFormatError(f"Unsupported public key type: {type(public_key).__name__}")

    public_key_multibase = multibase.encode('base58btc', header + pub_bytes).decode('ascii')
    return f"{DID_KEY_PREFIX}{public_key_multibase}"
