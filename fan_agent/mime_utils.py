# fan_agent/mime_utils.py
"""Content-type negotiation between DID MIME types and wire encodings."""

from .constants import MIME_CBOR_DID, MIME_JSON_DID, MIME_JSONLD_DID
from .errors import UnsupportedMediaTypeError
from .schemas import WireEncoding


# JSON-LD is not processed as such, but its documents are consumable as plain JSON.
_MIME_ENCODINGS = {
    MIME_JSON_DID: WireEncoding.JSON,
    MIME_JSONLD_DID: WireEncoding.JSON,
    MIME_CBOR_DID: WireEncoding.CBOR,
}

_CANONICAL_MIMES = {
    WireEncoding.JSON: MIME_JSON_DID,
    WireEncoding.CBOR: MIME_CBOR_DID,
}


def negotiate(mime: str) -> WireEncoding:
    """
    Maps a client-declared content type to the wire encoding it selects.

    Only exact matches are accepted; no case folding or parameter stripping
    is performed.

    Raises:
        UnsupportedMediaTypeError: If the content type is not one of the
                                   supported DID MIME types.
    """
    try:
        return _MIME_ENCODINGS[mime]
    except (KeyError, TypeError):
        raise UnsupportedMediaTypeError(f"Invalid MIME type: {mime!r}")


def canonical_mime(encoding: WireEncoding) -> str:
    """Returns the MIME type emitted for documents in the given encoding."""
    return _CANONICAL_MIMES[WireEncoding(encoding)]
