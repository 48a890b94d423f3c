#!/usr/bin/env python3
"""Main entry point for the FAN agent."""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Mapping, Optional, Tuple

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from .constants import (
    CURVE_SIGNING_ALGORITHMS,
    DEFAULT_SIGNING_CURVE,
    ENV_PREFIX,
    EXIT_FAILURE,
    EXIT_SUCCESS,
)
from .delivery import DeliveryEngine
from .errors import ConfigurationError, FanAgentError
from .key_utils import did_key_from_jwk, generate_signing_jwk, load_signing_key
from .routes import create_app
from .schemas import AgentConfig
from .storage import FileSystemSource

logger = logging.getLogger(__name__)

CONFIG_FIELDS = ("signing_key", "listen", "root", "cbor")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Start a Federated Auth Network Agent")
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    parser.add_argument('--generate-signing-jwk', action='store_true',
                        help='Generate a Signing JWK, and exit')
    parser.add_argument('--curve', choices=sorted(CURVE_SIGNING_ALGORITHMS), default=DEFAULT_SIGNING_CURVE,
                        help='Curve of the generated signing JWK')
    parser.add_argument('--signing-key', '-k', dest='signing_key', default=None,
                        help='Path to JWK w/ Private Key For Signing')
    parser.add_argument('--listen', '-l', default=None, help='Listen addr:port')
    parser.add_argument('--root', '-r', default=None, help='Path to root of served filesystem')
    parser.add_argument('--cbor', action='store_true', default=None,
                        help='Documents are in CBOR format')

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace, environ: Mapping[str, str] = os.environ) -> AgentConfig:
    """
    Builds the agent configuration.

    Values come from the defaults, then FAN_* environment variables, then
    command line flags, each overriding the previous.

    Raises:
        ConfigurationError: If a value cannot be parsed.
    """
    values: Dict[str, Any] = {}
    for field in CONFIG_FIELDS:
        env_var_name = f"{ENV_PREFIX}{field.upper()}"
        if env_var_name in environ:
            logger.debug(f"Using {env_var_name} from environment")
            values[field] = environ[env_var_name]
        cli_value = getattr(args, field, None)
        if cli_value is not None:
            values[field] = cli_value
    values["verbose"] = bool(getattr(args, "verbose", False))

    try:
        config = AgentConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
    parse_listen_addr(config.listen)
    return config


def parse_listen_addr(listen: str) -> Tuple[str, int]:
    """Splits 'host:port' into its parts."""
    host, sep, port = listen.rpartition(':')
    if not sep or not host:
        raise ConfigurationError(f"Listen address must be host:port, got '{listen}'")
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigurationError(f"Invalid port in listen address '{listen}'")
    if not 0 < port_number < 65536:
        raise ConfigurationError(f"Port out of range in listen address '{listen}'")
    return host.strip('[]'), port_number


def build_app(config: AgentConfig) -> FastAPI:
    """Loads the signing key and wires the filesystem source into the HTTP app."""
    signing_key = load_signing_key(config.signing_key)
    source = FileSystemSource(config.root, cbor=config.cbor)
    engine = DeliveryEngine(source, signing_key)
    logger.info(f"Serving documents from {config.root} ({'cbor' if config.cbor else 'json'})")
    return create_app(engine)


def handle_generate_signing_jwk(curve: str) -> Dict[str, Any]:
    """Generate a new private signing JWK."""
    key = generate_signing_jwk(curve)
    private_jwk = json.loads(key.export_private())
    print(f"did: {did_key_from_jwk(key)}", file=sys.stderr)
    return private_jwk


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.generate_signing_jwk:
            print(json.dumps(handle_generate_signing_jwk(args.curve)))
            return EXIT_SUCCESS

        config = load_config(args)
        app = build_app(config)
        host, port = parse_listen_addr(config.listen)
        logger.info(f"Listening on {host}:{port}")
        uvicorn.run(app, host=host, port=port, log_level="debug" if config.verbose else "info")
        return EXIT_SUCCESS

    except FanAgentError as e:
        print(json.dumps({"error": str(e)}, indent=2))
        return EXIT_FAILURE
    except Exception as e:
        print(json.dumps({"error": f"Unexpected error: {e}"}, indent=2))
        logger.exception("Unexpected error occurred")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
