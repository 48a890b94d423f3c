# fan_agent/encoding_utils.py
"""Serialization of DID documents and principal envelopes in JSON or CBOR."""

import base64
import json
import logging
from typing import Any, Dict

import dag_cbor

from .errors import EncodingError
from .mime_utils import canonical_mime
from .schemas import SignedPayload, WireEncoding

logger = logging.getLogger(__name__)


def b64url_encode(data: bytes) -> str:
    """Base64url encoding without padding."""
    return base64.urlsafe_b64encode(data).decode('ascii').rstrip('=')


def b64url_decode(data: str) -> bytes:
    """Base64url decoding that tolerates missing padding."""
    padded = data + '=' * (-len(data) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode('ascii'))
    except (ValueError, UnicodeEncodeError) as e:
        raise EncodingError(f"Invalid base64url data: {e}")


def _wire_encoding(encoding: WireEncoding) -> WireEncoding:
    try:
        return WireEncoding(encoding)
    except ValueError:
        raise EncodingError(f"Unknown wire encoding: {encoding!r}")


def serialize_document(doc: Any, encoding: WireEncoding) -> bytes:
    """
    Serializes a structured value in the requested wire encoding.

    Raises:
        EncodingError: If the value cannot be represented in the encoding.
    """
    encoding = _wire_encoding(encoding)
    try:
        if encoding == WireEncoding.CBOR:
            return dag_cbor.encode(doc)
        return json.dumps(doc, separators=(',', ':'), ensure_ascii=False).encode('utf-8')
    except Exception as e:
        logger.exception(f"Failed to serialize document as {encoding.value}")
        raise EncodingError(f"Failed to serialize document as {encoding.value}: {e}")


def deserialize_document(data: bytes, encoding: WireEncoding) -> Any:
    """
    Decodes bytes produced by serialize_document.

    Raises:
        EncodingError: If the bytes are not valid in the encoding.
    """
    encoding = _wire_encoding(encoding)
    try:
        if encoding == WireEncoding.CBOR:
            return dag_cbor.decode(data)
        return json.loads(data.decode('utf-8'))
    except Exception as e:
        raise EncodingError(f"Failed to decode {encoding.value} data: {e}")


def encode_root(doc: Dict[str, Any], encoding: WireEncoding) -> bytes:
    """Serializes the root document as-is; it is never wrapped or signed."""
    return serialize_document(doc, encoding)


def encode_principal(doc: Dict[str, Any], encoding: WireEncoding) -> bytes:
    """
    Builds the unsigned envelope for a principal document.

    The document is serialized, base64url-encoded and placed in a
    SignedPayload record together with its content type. The record itself
    is then serialized in the same encoding, so a verifier can read the
    envelope before knowing the inner format.

    Args:
        doc: The principal's DID document.
        encoding: The negotiated wire encoding.

    Returns:
        The serialized envelope, ready to be used as a JWS payload.

    Raises:
        EncodingError: If either serialization step fails.
    """
    encoding = _wire_encoding(encoding)
    inner = serialize_document(doc, encoding)
    envelope = SignedPayload(
        payload=b64url_encode(inner),
        content_type=canonical_mime(encoding),
    )
    logger.debug(f"Built {encoding.value} envelope with {len(inner)} byte payload")
    return serialize_document(envelope.model_dump(), encoding)


def decode_principal(data: bytes, encoding: WireEncoding) -> SignedPayload:
    """Parses an envelope produced by encode_principal."""
    record = deserialize_document(data, encoding)
    try:
        return SignedPayload.model_validate(record)
    except Exception as e:
        raise EncodingError(f"Invalid envelope record: {e}")
