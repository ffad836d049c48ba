#!/usr/bin/env python3
"""
Terrain-RGB MCP Server - Entry Point

Initialises the chuk-artifacts store that fetched GeoTIFFs are written to,
then runs the MCP server over stdio (desktop clients) or HTTP.
"""

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .constants import EnvVar, SessionProvider, StorageProvider

# Load environment variables from the project .env file
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

logger = logging.getLogger(__name__)

DEFAULT_HTTP_PORT = 8004


def _store_settings(environ: Mapping[str, str]) -> dict[str, Any] | None:
    """
    ArtifactStore keyword arguments for the configured provider.

    Returns None when the provider is selected but cannot be used (S3
    without credentials). A filesystem provider without a path degrades to
    the memory provider.
    """
    provider = environ.get(EnvVar.ARTIFACTS_PROVIDER, StorageProvider.MEMORY)
    session = SessionProvider.REDIS if environ.get(EnvVar.REDIS_URL) else SessionProvider.MEMORY
    settings: dict[str, Any] = {"storage_provider": provider, "session_provider": session}

    if provider == StorageProvider.S3:
        required = (EnvVar.BUCKET_NAME, EnvVar.AWS_ACCESS_KEY_ID, EnvVar.AWS_SECRET_ACCESS_KEY)
        missing = [name for name in required if not environ.get(name)]
        if missing:
            logger.warning(f"S3 provider configured but {', '.join(missing)} not set")
            return None
        settings["bucket"] = environ[EnvVar.BUCKET_NAME]
        logger.info(
            f"S3 artifact bucket {settings['bucket']} "
            f"(endpoint: {environ.get(EnvVar.AWS_ENDPOINT_URL_S3, 'default')})"
        )

    elif provider == StorageProvider.FILESYSTEM:
        artifacts_path = environ.get(EnvVar.ARTIFACTS_PATH)
        if not artifacts_path:
            logger.warning(f"{EnvVar.ARTIFACTS_PATH} not set; using the memory provider")
            settings["storage_provider"] = StorageProvider.MEMORY
        else:
            Path(artifacts_path).mkdir(parents=True, exist_ok=True)
            settings["bucket"] = artifacts_path

    return settings


def _init_artifact_store() -> bool:
    """
    Initialize the artifact store from environment variables.

    Returns:
        True if artifact store was initialized, False otherwise
    """
    settings = _store_settings(os.environ)
    if settings is None:
        return False

    try:
        from chuk_artifacts import ArtifactStore
        from chuk_mcp_server import set_global_artifact_store

        set_global_artifact_store(ArtifactStore(**settings))
    except Exception as e:
        logger.error(f"Failed to initialize artifact store: {e}")
        return False

    logger.info(f"Artifact store ready (provider: {settings['storage_provider']})")
    return True


# Import mcp instance and all registered tools from async server
from .async_server import mcp  # noqa: F401, E402


def main() -> None:
    """Main entry point for the MCP server."""
    import argparse

    # Initialize artifact store at startup, not at import time
    _init_artifact_store()

    parser = argparse.ArgumentParser(description="Terrain-RGB MCP Server")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["stdio", "http"],
        default=None,
        help="Transport (default: stdio when piped or MCP_STDIO is set, else http)",
    )
    parser.add_argument("--host", default="localhost", help="Host for HTTP mode")
    parser.add_argument("--port", type=int, default=DEFAULT_HTTP_PORT, help="Port for HTTP mode")
    args = parser.parse_args()

    stdio = args.mode == "stdio" or (
        args.mode is None and (os.environ.get(EnvVar.MCP_STDIO) or not sys.stdin.isatty())
    )
    if stdio:
        print("Terrain-RGB MCP Server starting in STDIO mode", file=sys.stderr)
        mcp.run(stdio=True)
    else:
        print(f"Terrain-RGB MCP Server on http://{args.host}:{args.port}", file=sys.stderr)
        mcp.run(host=args.host, port=args.port, stdio=False)


if __name__ == "__main__":
    main()
