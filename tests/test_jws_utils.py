"""Unit tests for jws_utils module"""

import json
from unittest.mock import patch

import pytest
from jwcrypto import jwk

from fan_agent.encoding_utils import b64url_decode
from fan_agent.errors import SignatureError, UnsupportedAlgorithmError
from fan_agent.jws_utils import sign_payload, signing_algorithm_for_key, verify_token

CURVES = [
    ("EC", "P-256", "ES256"),
    ("EC", "P-384", "ES384"),
    ("EC", "P-521", "ES512"),
    ("EC", "secp256k1", "ES256K"),
    ("OKP", "Ed25519", "EdDSA"),
]


@pytest.mark.parametrize("kty, crv, alg", CURVES)
def test_signing_algorithm_for_key(kty, crv, alg):
    key = jwk.JWK.generate(kty=kty, crv=crv)
    assert signing_algorithm_for_key(key) == alg


@pytest.mark.parametrize("kty, crv, alg", CURVES)
def test_sign_payload_structure(kty, crv, alg):
    """Tokens have three base64url segments and declare the curve's algorithm"""
    key = jwk.JWK.generate(kty=kty, crv=crv)
    payload = b'{"payload":"e30","content_type":"application/json+did"}'

    token = sign_payload(payload, key)
    segments = token.split('.')

    assert len(segments) == 3
    for segment in segments:
        assert segment
        assert "=" not in segment
        b64url_decode(segment)

    header = json.loads(b64url_decode(segments[0]))
    assert header == {"alg": alg}
    assert b64url_decode(segments[1]) == payload


@pytest.mark.parametrize("kty, crv, alg", CURVES)
def test_sign_then_verify(kty, crv, alg):
    key = jwk.JWK.generate(kty=kty, crv=crv)
    payload = b"\xa2gpayloadce30"

    token = sign_payload(payload, key)

    assert verify_token(token, key) == payload


def test_verify_with_public_key_only(p256_key):
    public_key = jwk.JWK(**p256_key.export_public(as_dict=True))
    token = sign_payload(b"hello", p256_key)
    assert verify_token(token, public_key) == b"hello"


def test_verify_rejects_other_key(p256_key):
    token = sign_payload(b"hello", p256_key)
    other_key = jwk.JWK.generate(kty='EC', crv='P-256')
    with pytest.raises(SignatureError):
        verify_token(token, other_key)


def test_verify_rejects_tampered_payload(p256_key):
    header, _, signature = sign_payload(b"hello", p256_key).split('.')
    tampered = f"{header}.aGVsbG8h.{signature}"
    with pytest.raises(SignatureError):
        verify_token(tampered, p256_key)


def test_verify_rejects_garbage(p256_key):
    with pytest.raises(SignatureError):
        verify_token("not-a-token", p256_key)


def test_unsupported_curve():
    """A curve outside the table cannot sign"""
    key = jwk.JWK.generate(kty='OKP', crv='X25519')
    with pytest.raises(UnsupportedAlgorithmError) as excinfo:
        sign_payload(b"payload", key)
    assert "X25519" in str(excinfo.value)


def test_key_without_curve():
    """Symmetric keys declare no curve"""
    key = jwk.JWK.generate(kty='oct', size=256)
    with pytest.raises(UnsupportedAlgorithmError) as excinfo:
        signing_algorithm_for_key(key)
    assert excinfo.value.error_code == "UnsupportedAlgorithm"


def test_signature_failure_is_wrapped(p256_key):
    with patch('fan_agent.jws_utils.jws.JWS.add_signature', side_effect=ValueError("boom")):
        with pytest.raises(SignatureError) as excinfo:
            sign_payload(b"payload", p256_key)
    assert "ES256" in str(excinfo.value)
