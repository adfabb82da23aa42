"""Command-line entry point.

    oura-hr          print the latest heart rate (silent on any failure)
    oura-hr setup    authorize with Oura and store tokens

Fetch mode always exits 0 so it can sit in a shell prompt or status bar
without ever printing noise. Setup mode reports errors and exits 1.
"""

import logging
import sys
from typing import Optional

import requests

from .config import Config
from .errors import ConfigError, OuraHRError
from .fetch import run_fetch
from .setup_flow import run_setup

logger = logging.getLogger(__name__)


def configure_logging(config: Config) -> None:
    """Send debug logs to stderr when OURA_HR_DEBUG is set, otherwise nothing."""
    root = logging.getLogger("oura_hr")
    if not config.debug or any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def cmd_setup(config: Config) -> int:
    """Interactive OAuth authorization."""
    try:
        config.require_credentials()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Hint:  export both variables, then run: oura-hr setup", file=sys.stderr)
        return 1

    try:
        path = run_setup(config)
    except KeyboardInterrupt:
        print("\nSetup cancelled.", file=sys.stderr)
        return 1
    except (OuraHRError, OSError) as e:
        print(f"Setup failed: {e}", file=sys.stderr)
        return 1

    print(f"Done! Tokens saved to {path}")
    return 0


def write_output(data: bytes) -> None:
    """Write raw bytes to stdout, independent of its text encoding."""
    sys.stdout.flush()
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


def cmd_fetch(config: Config) -> int:
    """Print the latest heart rate, or nothing."""
    try:
        output = run_fetch(config)
        if output:
            write_output(output)
    except (OuraHRError, requests.RequestException, OSError) as e:
        logger.debug("Fetch failed: %s", e)
    return 0


def main(argv: Optional[list[str]] = None, config: Optional[Config] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if config is None:
        config = Config.from_env()

    configure_logging(config)

    if argv and argv[0] == "setup":
        return cmd_setup(config)
    return cmd_fetch(config)

