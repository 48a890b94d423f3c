"""Configuration for pytest"""

import datetime
import json

import pytest
import logging
from jwcrypto import jwk

from fan_agent.storage import DocumentSource
from fan_agent.errors import NotFoundError

ROOT_TIME = datetime.datetime(2023, 5, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)
ALICE_TIME = datetime.datetime(2023, 6, 15, 8, 30, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture(autouse=True)
def setup_logging():
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(levelname)s - %(name)s - %(message)s'
    )

    logging.getLogger('jwcrypto').setLevel(logging.WARNING)

    return logging.getLogger()


class StubSource(DocumentSource):
    """In-memory document source recording every load call."""

    def __init__(self, root=None, principals=None):
        self.root = root
        self.principals = principals or {}
        self.calls = []

    def load_root(self):
        self.calls.append(("root", None))
        if self.root is None:
            raise NotFoundError("No root document")
        return self.root

    def load_principal(self, name):
        self.calls.append(("principal", name))
        if name not in self.principals:
            raise NotFoundError(f"No document for {name}")
        return self.principals[name]


@pytest.fixture
def root_document():
    return {
        "@context": "https://www.w3.org/ns/did/v1",
        "id": "did:web:fan.example.org",
        "service": [
            {"id": "#fan", "type": "FederatedAuthNetwork", "serviceEndpoint": "https://fan.example.org"}
        ]
    }


@pytest.fixture
def alice_document():
    return {
        "@context": "https://www.w3.org/ns/did/v1",
        "id": "did:web:fan.example.org:user:alice",
        "controller": "did:web:fan.example.org",
        "alsoKnownAs": ["acct:alice@fan.example.org"]
    }


@pytest.fixture
def stub_source(root_document, alice_document):
    return StubSource(
        root=(root_document, ROOT_TIME),
        principals={"alice": (alice_document, ALICE_TIME)},
    )


@pytest.fixture(scope="session")
def p256_key():
    """A P-256 private signing key"""
    return jwk.JWK.generate(kty='EC', crv='P-256')


@pytest.fixture
def write_key(tmp_path):
    """Writes a JWK dictionary to a file and returns its path"""
    def _write(key_dict, name="signing.jwk"):
        path = tmp_path / name
        path.write_text(json.dumps(key_dict))
        return path
    return _write
