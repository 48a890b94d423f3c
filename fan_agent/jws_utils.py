# fan_agent/jws_utils.py
"""Compact JWS signing of principal envelopes with the node's JWK."""

import json
import logging

from jwcrypto import jwk, jws

from .constants import CURVE_SIGNING_ALGORITHMS
from .errors import SignatureError, UnsupportedAlgorithmError

logger = logging.getLogger(__name__)


def signing_algorithm_for_key(key: jwk.JWK) -> str:
    """
    Selects the JWS algorithm for a key from its declared curve.

    Args:
        key: The signing key. Must carry a 'crv' parameter.

    Returns:
        The JWS 'alg' value, e.g. 'ES256' for a P-256 key.

    Raises:
        UnsupportedAlgorithmError: If the key declares no curve, or a curve
                                   with no algorithm mapped to it.
    """
    curve = key.get('crv')
    if not curve:
        raise UnsupportedAlgorithmError(f"Signing key of type '{key.get('kty')}' declares no curve.")
    try:
        return CURVE_SIGNING_ALGORITHMS[curve]
    except KeyError:
        raise UnsupportedAlgorithmError(f"No signing algorithm for curve '{curve}'.")


def sign_payload(payload: bytes, key: jwk.JWK) -> str:
    """
    Signs a payload as a compact JWS (header.payload.signature).

    ECDSA signatures are randomized, so repeated calls with the same input
    produce different tokens that all verify.

    Raises:
        UnsupportedAlgorithmError: If no algorithm can be derived from the key.
        SignatureError: If the signing operation itself fails.
    """
    alg = signing_algorithm_for_key(key)
    protected_header = {"alg": alg}

    try:
        token = jws.JWS(payload)
        token.allowed_algs = [alg]
        token.add_signature(key, None, json.dumps(protected_header))
        compact = token.serialize(compact=True)
    except Exception as e:
        logger.exception(f"JWS signing with {alg} failed.")
        raise SignatureError(f"Failed to sign payload with {alg}: {e}")

    logger.debug(f"Signed {len(payload)} byte payload with {alg}")
    return compact


def verify_token(token: str, key: jwk.JWK) -> bytes:
    """
    Verifies a compact JWS produced by sign_payload and returns its payload.

    Only the algorithm mapped to the key's curve is accepted.

    Raises:
        UnsupportedAlgorithmError: If no algorithm can be derived from the key.
        SignatureError: If the token is malformed or the signature is invalid.
    """
    alg = signing_algorithm_for_key(key)
    verifier = jws.JWS()
    verifier.allowed_algs = [alg]
    try:
        verifier.deserialize(token)
        verifier.verify(key)
    except jws.InvalidJWSSignature as e:
        raise SignatureError(f"Invalid JWS signature: {e}")
    except Exception as e:
        raise SignatureError(f"Invalid JWS token: {e}")
    return verifier.payload
