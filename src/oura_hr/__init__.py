"""Oura HR - latest heart rate from the Oura cloud API, for shell prompts."""

__version__ = "1.0.0"

import logging

from .models import StoredTokens, TokenResponse, HeartRateEntry, HeartRateResponse
from .config import Config, get_cache_dir
from .errors import (
    OuraHRError,
    ConfigError,
    TokenStoreError,
    TokenExchangeError,
    FetchError,
    SetupError,
)
from .tokens import load_tokens, save_tokens, needs_refresh
from .oauth import (
    authorization_url,
    exchange_token,
    exchange_code,
    refresh_tokens,
    ensure_fresh_tokens,
)
from .cache import read_fresh, write_cache
from .fetch import query_window, fetch_latest, render, run_fetch
from .setup_flow import CallbackListener, run_setup

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Models
    "StoredTokens",
    "TokenResponse",
    "HeartRateEntry",
    "HeartRateResponse",
    # Configuration
    "Config",
    "get_cache_dir",
    # Errors
    "OuraHRError",
    "ConfigError",
    "TokenStoreError",
    "TokenExchangeError",
    "FetchError",
    "SetupError",
    # Token store
    "load_tokens",
    "save_tokens",
    "needs_refresh",
    # OAuth
    "authorization_url",
    "exchange_token",
    "exchange_code",
    "refresh_tokens",
    "ensure_fresh_tokens",
    # Cache
    "read_fresh",
    "write_cache",
    # Fetch
    "query_window",
    "fetch_latest",
    "render",
    "run_fetch",
    # Setup
    "CallbackListener",
    "run_setup",
]
