# fan_agent/delivery.py
"""
Delivery of root and principal DID documents.

The engine combines content negotiation, If-Modified-Since freshness checks,
encoding and, for principal documents, JWS signing into the two fetch
operations consumed by the HTTP layer. It keeps no mutable state and may be
shared across request handlers.
"""

import datetime
import logging
from typing import Optional

from jwcrypto import jwk

from .encoding_utils import encode_principal, encode_root
from .jws_utils import sign_payload, signing_algorithm_for_key
from .mime_utils import negotiate
from .schemas import FetchResult, Modified, NotModified
from .storage import DocumentSource

logger = logging.getLogger(__name__)


def is_not_modified(
    if_modified_since: Optional[datetime.datetime],
    last_modified: datetime.datetime
) -> bool:
    """
    Decides whether the client's cached copy is still current.

    An absent header never matches. Otherwise the copy is current unless it
    is strictly older than the source; equal timestamps count as current.
    """
    if if_modified_since is None:
        return False
    # naive timestamps are UTC, as HTTP dates are
    if if_modified_since.tzinfo is None:
        if_modified_since = if_modified_since.replace(tzinfo=datetime.timezone.utc)
    if last_modified.tzinfo is None:
        last_modified = last_modified.replace(tzinfo=datetime.timezone.utc)
    return if_modified_since >= last_modified


class DeliveryEngine:
    """Serves documents from a DocumentSource, signing principal documents with the node key."""

    def __init__(self, source: DocumentSource, signing_key: jwk.JWK):
        self._source = source
        self._signing_key = signing_key

    def fetch_root(
        self,
        if_modified_since: Optional[datetime.datetime],
        mime: str
    ) -> FetchResult:
        """
        Fetches the node's root document. The root document is never signed.

        Raises:
            UnsupportedMediaTypeError: If mime is not a supported DID MIME type.
            NotFoundError, SourceError: Propagated from the document source.
            EncodingError: If the document cannot be serialized.
        """
        encoding = negotiate(mime)
        doc, last_modified = self._source.load_root()

        if is_not_modified(if_modified_since, last_modified):
            logger.debug(f"Root document unchanged since {if_modified_since}")
            return NotModified()

        logger.info(f"Serving root document as {encoding.value}")
        return Modified(body=encode_root(doc, encoding))

    def fetch_principal(
        self,
        name: str,
        if_modified_since: Optional[datetime.datetime],
        mime: str
    ) -> FetchResult:
        """
        Fetches a principal's document wrapped in a signed envelope.

        Args:
            name: The principal's name.
            if_modified_since: The client's cached timestamp, if any.
            mime: The requested DID MIME type.

        Returns:
            NotModified, or Modified carrying the compact JWS as ASCII bytes.

        Raises:
            UnsupportedMediaTypeError: If mime is not a supported DID MIME type.
            NotFoundError, InvalidNameError, SourceError: Propagated from the source.
            UnsupportedAlgorithmError: If the signing key's curve has no algorithm.
            EncodingError: If the document or envelope cannot be serialized.
            SignatureError: If signing fails.
        """
        encoding = negotiate(mime)
        doc, last_modified = self._source.load_principal(name)

        if is_not_modified(if_modified_since, last_modified):
            logger.debug(f"Document for '{name}' unchanged since {if_modified_since}")
            return NotModified()

        # Fail on an unusable key before doing any encoding work.
        alg = signing_algorithm_for_key(self._signing_key)
        envelope = encode_principal(doc, encoding)
        token = sign_payload(envelope, self._signing_key)

        logger.info(f"Serving signed document for '{name}' as {encoding.value} ({alg})")
        return Modified(body=token.encode('ascii'))
