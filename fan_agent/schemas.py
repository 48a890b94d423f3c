# fan_agent/schemas.py
"""Pydantic models for request results, envelopes and configuration."""

from enum import Enum
from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_LISTEN_ADDR, DEFAULT_ROOT_PATH, DEFAULT_SIGNING_KEY_PATH


class WireEncoding(str, Enum):
    """On-the-wire encodings a document can be served in."""

    JSON = "json"
    CBOR = "cbor"


class SignedPayload(BaseModel):
    """Envelope wrapped around a principal document before it is signed."""
    payload: str = Field(..., description="Base64url (unpadded) serialized document.")
    content_type: str = Field(..., description="Canonical MIME type of the serialized document.")


class Modified(BaseModel):
    """A fresh body is owed to the client."""
    model_config = ConfigDict(frozen=True)

    status: Literal["modified"] = "modified"
    body: bytes


class NotModified(BaseModel):
    """The client's cached copy is current."""
    model_config = ConfigDict(frozen=True)

    status: Literal["not_modified"] = "not_modified"


FetchResult = Union[Modified, NotModified]


class AgentConfig(BaseModel):
    """Runtime settings for serving documents."""
    signing_key: Path = Field(Path(DEFAULT_SIGNING_KEY_PATH), description="Path to the private signing JWK.")
    listen: str = Field(DEFAULT_LISTEN_ADDR, description="Listen address in host:port form.")
    root: Path = Field(Path(DEFAULT_ROOT_PATH), description="Root of the served document tree.")
    cbor: bool = Field(False, description="Documents on disk are stored as CBOR.")
    verbose: bool = False


class ErrorOutput(BaseModel):
    """Standardized error output format."""
    error: str = Field(..., description="A short error code or category.")
    message: str = Field(..., description="A human-readable description of the error.")
