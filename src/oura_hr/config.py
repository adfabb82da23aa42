"""Configuration for the Oura heart-rate prompt helper.

All settings come from the environment and are captured once, at startup,
in an immutable Config value that is passed to every operation.

Usage:
    config = Config.from_env()
    if config.has_credentials:
        # ... fetch logic
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigError

AUTH_URL = "https://cloud.ouraring.com/oauth/authorize"
TOKEN_URL = "https://api.ouraring.com/oauth/token"
API_URL = "https://api.ouraring.com/v2/usercollection/heartrate"
REDIRECT_URI = "http://localhost:8085/callback"
SCOPE = "heartrate"

DEFAULT_TTL = 300
HTTP_TIMEOUT = 8.0
WINDOW_HOURS = 4
REFRESH_MARGIN_SECONDS = 60
SHUTDOWN_TIMEOUT = 1.0

CACHE_FILE_NAME = "oura-hr"
TOKEN_FILE_NAME = "oura-tokens.json"

_TRUTHY = {"1", "true", "yes", "on"}


def get_cache_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Get cache directory for tokens and rendered output.

    Uses XDG_CACHE_HOME directly if set, otherwise ~/.cache.
    """
    environ = os.environ if environ is None else environ
    if env_dir := environ.get("XDG_CACHE_HOME"):
        return Path(env_dir)
    return Path.home() / ".cache"


def parse_ttl(value: Optional[str]) -> int:
    """Parse OURA_HR_CACHE_TTL, falling back to the default on bad input."""
    if not value:
        return DEFAULT_TTL
    try:
        return int(value)
    except ValueError:
        return DEFAULT_TTL


@dataclass(frozen=True)
class Config:
    """Process-wide settings, resolved once from the environment."""

    client_id: str = ""
    client_secret: str = ""

    cache_dir: Path = Path.home() / ".cache"
    """Directory holding both the token file and the output cache."""

    cache_ttl: int = DEFAULT_TTL
    """Seconds a cached reading is served without a network call."""

    debug: bool = False
    """Log silent failures to stderr (OURA_HR_DEBUG)."""

    auth_url: str = AUTH_URL
    token_url: str = TOKEN_URL
    api_url: str = API_URL
    redirect_uri: str = REDIRECT_URI
    scope: str = SCOPE
    http_timeout: float = HTTP_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build config from environment variables.

        Args:
            environ: Mapping to read from. If None, uses os.environ.

        Returns:
            Config instance. Missing credentials are left empty; callers
            decide whether that is fatal.
        """
        environ = os.environ if environ is None else environ
        return cls(
            client_id=environ.get("OURA_CLIENT_ID", ""),
            client_secret=environ.get("OURA_CLIENT_SECRET", ""),
            cache_dir=get_cache_dir(environ),
            cache_ttl=parse_ttl(environ.get("OURA_HR_CACHE_TTL")),
            debug=environ.get("OURA_HR_DEBUG", "").strip().lower() in _TRUTHY,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def require_credentials(self) -> None:
        """Raise ConfigError unless both client id and secret are set."""
        if not self.has_credentials:
            raise ConfigError("OURA_CLIENT_ID and OURA_CLIENT_SECRET must be set.")

    @property
    def token_path(self) -> Path:
        return self.cache_dir / TOKEN_FILE_NAME

    @property
    def cache_path(self) -> Path:
        return self.cache_dir / CACHE_FILE_NAME
