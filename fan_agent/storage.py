# fan_agent/storage.py
"""
Document sources for the delivery engine.

A source answers two questions: what is the root document, and what is the
document for a named principal, each together with its last-modification
time. The delivery engine only ever talks to the abstract interface, so the
filesystem adapter below can be swapped for any other backend.
"""

import datetime
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from .constants import (
    CBOR_EXTENSION,
    FORBIDDEN_NAME_CHARACTERS,
    JSON_EXTENSION,
    ROOT_DOCUMENT_STEM,
    USER_DIRECTORY,
)
from .encoding_utils import deserialize_document
from .errors import EncodingError, InvalidNameError, NotFoundError, SourceError
from .schemas import WireEncoding

logger = logging.getLogger(__name__)

LoadedDocument = Tuple[Dict[str, Any], datetime.datetime]


def validate_principal_name(name: str) -> str:
    """
    Rejects principal names that could escape the principal namespace.

    Raises:
        InvalidNameError: If the name is empty, a relative path component,
                          or contains a path separator or NUL byte.
    """
    if not isinstance(name, str) or not name:
        raise InvalidNameError("Principal name must be a non-empty string.")
    if name in (".", ".."):
        raise InvalidNameError(f"Invalid principal name: {name!r}")
    for char in FORBIDDEN_NAME_CHARACTERS:
        if char in name:
            raise InvalidNameError(f"Principal name {name!r} contains a path separator.")
    return name


class DocumentSource(ABC):
    """Read-only provider of DID documents. Implementations must be safe for concurrent calls."""

    @abstractmethod
    def load_root(self) -> LoadedDocument:
        """Returns the node's root document and its last-modified time."""

    @abstractmethod
    def load_principal(self, name: str) -> LoadedDocument:
        """Returns the named principal's document and its last-modified time."""


class FileSystemSource(DocumentSource):
    """
    Serves documents from a directory tree.

    Layout (with extension 'json', or 'cbor' when cbor=True):
        <root>/did.json          the root document
        <root>/user/<name>.json  one document per principal
    """

    def __init__(self, root: Union[str, Path], cbor: bool = False):
        self.root = Path(root)
        self.encoding = WireEncoding.CBOR if cbor else WireEncoding.JSON
        self.extension = CBOR_EXTENSION if cbor else JSON_EXTENSION

    def root_path(self) -> Path:
        return self.root / f"{ROOT_DOCUMENT_STEM}.{self.extension}"

    def principal_path(self, name: str) -> Path:
        validate_principal_name(name)
        return self.root / USER_DIRECTORY / f"{name}.{self.extension}"

    def load_root(self) -> LoadedDocument:
        return self._load(self.root_path())

    def load_principal(self, name: str) -> LoadedDocument:
        return self._load(self.principal_path(name))

    def _load(self, path: Path) -> LoadedDocument:
        try:
            with open(path, 'rb') as f:
                data = f.read()
                mtime = os.fstat(f.fileno()).st_mtime
        except (FileNotFoundError, NotADirectoryError):
            raise NotFoundError(f"No document at {path}")
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise SourceError(f"Failed to read {path}: {e}")

        try:
            doc = deserialize_document(data, self.encoding)
        except EncodingError as e:
            logger.error(f"Failed to parse {path}: {e}")
            raise SourceError(f"Failed to parse {path}: {e.message}")

        if not isinstance(doc, dict):
            raise SourceError(f"Document at {path} is not a mapping.")

        # HTTP dates carry whole seconds only
        last_modified = datetime.datetime.fromtimestamp(mtime, tz=datetime.timezone.utc).replace(microsecond=0)
        logger.debug(f"Loaded {path} (last modified {last_modified.isoformat()})")
        return doc, last_modified
