#!/usr/bin/env python3
"""
KataGo Bridge CLI - relay a local KataGo analysis engine to a WebSocket client
"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence
from urllib.parse import urlparse

from katago_bridge import __version__
from katago_bridge.cli.runner import BridgeRunner
from katago_bridge.errors import (
    BridgeError,
    ConnectionEstablishError,
    EngineLaunchError,
    UnsupportedPlatformError,
)
from katago_bridge.platforms import Variant
from katago_bridge.settings import Settings, get_settings
from katago_bridge.utils.loggers import get_logger, set_level

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_ENGINE = 3
EXIT_CONNECTION = 4
EXIT_INTERRUPTED = 130

_URL_SCHEMES = ("ws", "wss", "http", "https")


def parse_args(argv: Optional[Sequence[str]] = None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="katago-bridge",
        description="Relay a local KataGo analysis engine to a WebSocket client",
    )

    parser.add_argument(
        "url",
        type=str,
        help="WebSocket URL to connect to (ws:// or wss://)",
    )

    # Asset selection
    parser.add_argument(
        "--variant",
        choices=[v.value for v in Variant],
        help="KataGo build to download if missing (default: ask)",
    )
    parser.add_argument(
        "--binary-dir",
        type=str,
        help="Directory the KataGo archive is unpacked into",
    )
    parser.add_argument(
        "--model",
        type=str,
        help="Model file name",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Engine config file, relative to the binary directory",
    )

    # Logging level
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from settings, INFO)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def validate_url(url: str) -> str:
    """Raise ValueError unless ``url`` is an absolute ws/wss/http/https URL"""
    parsed = urlparse(url)
    if parsed.scheme.lower() not in _URL_SCHEMES:
        raise ValueError(
            f"unsupported scheme {parsed.scheme!r}, expected one of {', '.join(_URL_SCHEMES)}"
        )
    if not parsed.netloc:
        raise ValueError("URL has no host")
    return url


def settings_from_args(args, base: Optional[Settings] = None) -> Settings:
    """Apply command line overrides on top of the environment settings"""
    base = base or get_settings()
    overrides = {
        "VARIANT": args.variant,
        "BINARY_DIR": args.binary_dir,
        "MODEL": args.model,
        "ENGINE_CONFIG": args.config,
        "log_level": args.log_level,
    }
    return base.model_copy(update={k: v for k, v in overrides.items() if v is not None})


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI function, returns the process exit code"""
    args = parse_args(argv)

    try:
        url = validate_url(args.url)
    except ValueError as e:
        print(f"Error: provided url doesn't parse: {e}", file=sys.stderr)
        return EXIT_USAGE

    settings = settings_from_args(args)
    set_level(settings.log_level)
    logger = get_logger(__name__, level=settings.log_level)

    try:
        runner = BridgeRunner(settings=settings)
    except (UnsupportedPlatformError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        direction = await runner.execute(url)
        logger.info(f"Bridge finished ({direction.value})")
        return EXIT_OK
    except EngineLaunchError as e:
        print(f"Failed to start binary: {e}", file=sys.stderr)
        return EXIT_ENGINE
    except ConnectionEstablishError as e:
        print(f"Connection failed: {e}", file=sys.stderr)
        return EXIT_CONNECTION
    except BridgeError as e:
        print(f"Bridge error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except EOFError:
        print("Error: no KataGo version chosen (stdin closed)", file=sys.stderr)
        return EXIT_USAGE
    finally:
        await runner.cleanup()


def entry_point():
    """CLI entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    entry_point()
