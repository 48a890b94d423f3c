# fan_agent/routes.py
"""FastAPI routes exposing the delivery engine over HTTP."""

import datetime
import email.utils
import logging
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from .constants import (
    DEFAULT_ACCEPT,
    MIME_JOSE,
    ROOT_ROUTE,
    USER_ROUTE,
)
from .delivery import DeliveryEngine
from .errors import (
    FanAgentError,
    InvalidInputError,
    InvalidNameError,
    NotFoundError,
    UnsupportedMediaTypeError,
)
from .mime_utils import canonical_mime, negotiate
from .schemas import ErrorOutput, FetchResult, Modified

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidNameError: status.HTTP_400_BAD_REQUEST,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    UnsupportedMediaTypeError: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
}


def accept(request: Request) -> str:
    """The requested DID MIME type, defaulting to JSON."""
    return request.headers.get("Accept", DEFAULT_ACCEPT)


def parse_if_modified_since(value: Optional[str]) -> Optional[datetime.datetime]:
    """
    Parses an If-Modified-Since header value, e.g. 'Sun, 06 Nov 1994 08:49:37 GMT'.

    Raises:
        InvalidInputError: If the value is not an IMF-fixdate.
    """
    if value is None:
        return None
    value = value.strip()
    try:
        parsed = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid If-Modified-Since header: {value!r}")
    # only the GMT form is accepted
    if parsed.tzinfo is None or format_http_date(parsed) != value:
        raise InvalidInputError(f"Invalid If-Modified-Since header: {value!r}")
    return parsed.astimezone(datetime.timezone.utc)


def format_http_date(moment: datetime.datetime) -> str:
    """Formats a timestamp in the If-Modified-Since header format."""
    return email.utils.format_datetime(moment.astimezone(datetime.timezone.utc), usegmt=True)


def status_for_error(error: FanAgentError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def modified_response(result: FetchResult, content_type: str) -> Response:
    if isinstance(result, Modified):
        return Response(
            content=result.body,
            status_code=status.HTTP_200_OK,
            headers={"Content-type": content_type},
        )
    return Response(status_code=status.HTTP_304_NOT_MODIFIED)


def create_app(engine: DeliveryEngine) -> FastAPI:
    """
    Builds the application serving the root document and principal documents.

    Routes:
        GET /fan.did       the node's root document, unsigned
        GET /user/{name}   a principal's document as a compact JWS
    """
    app = FastAPI(title="FAN Agent", description="Serves signed DID documents.")

    @app.exception_handler(FanAgentError)
    async def handle_agent_error(request: Request, exc: FanAgentError) -> JSONResponse:
        status_code = status_for_error(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc}")
        output = ErrorOutput(error=exc.error_code, message=exc.message)
        return JSONResponse(status_code=status_code, content=output.model_dump())

    @app.get(ROOT_ROUTE)
    def get_root(request: Request) -> Response:
        """The node's own DID document."""
        mime = accept(request)
        since = parse_if_modified_since(request.headers.get("If-Modified-Since"))
        result = engine.fetch_root(since, mime)
        return modified_response(result, canonical_mime(negotiate(mime)))

    @app.get(USER_ROUTE)
    def get_user(name: str, request: Request) -> Response:
        """A principal's DID document, signed by the node key."""
        since = parse_if_modified_since(request.headers.get("If-Modified-Since"))
        result = engine.fetch_principal(name, since, accept(request))
        return modified_response(result, MIME_JOSE)

    return app
