"""OAuth2 client for the Oura cloud API.

Covers the two grants this tool needs (authorization code and refresh
token) against the fixed token endpoint, plus the refresh-if-expiring
step used on every fetch.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

import requests
from pydantic import ValidationError

from .config import Config
from .errors import TokenExchangeError
from .models import StoredTokens, TokenResponse
from .tokens import load_tokens, needs_refresh, save_tokens

logger = logging.getLogger(__name__)


def authorization_url(config: Config) -> str:
    """URL of the provider's consent page for this client."""
    query = urlencode({
        "response_type": "code",
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "scope": config.scope,
    })
    return f"{config.auth_url}?{query}"


def exchange_token(config: Config, form: dict, now: Optional[datetime] = None) -> StoredTokens:
    """POST a grant to the token endpoint.

    Args:
        config: Client credentials and endpoint.
        form: Grant-specific form fields (grant_type, code, ...).
        now: Reference time for the absolute expiry. Defaults to now (UTC).

    Returns:
        New tokens. refresh_token may be empty if the provider omitted it.

    Raises:
        TokenExchangeError: On network failure, undecodable body, or a
            response without an access token.
    """
    data = dict(form)
    data["client_id"] = config.client_id
    data["client_secret"] = config.client_secret

    try:
        resp = requests.post(config.token_url, data=data, timeout=config.http_timeout)
    except requests.RequestException as e:
        raise TokenExchangeError(f"token exchange failed: {e}") from e

    try:
        result = TokenResponse.model_validate_json(resp.text)
    except ValidationError:
        raise TokenExchangeError(f"token exchange failed: {resp.text}") from None

    if not result.access_token:
        raise TokenExchangeError(f"token exchange failed: {resp.text}")

    if now is None:
        now = datetime.now(timezone.utc)
    try:
        return result.to_stored(now)
    except (OverflowError, ValueError):
        raise TokenExchangeError(f"token exchange failed: bad expires_in {result.expires_in}") from None


def exchange_code(config: Config, code: str) -> StoredTokens:
    """Trade an authorization code for tokens."""
    return exchange_token(config, {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": config.redirect_uri,
    })


def refresh_tokens(config: Config, old: StoredTokens, now: Optional[datetime] = None) -> StoredTokens:
    """Refresh an access token, keeping the old refresh token if not rotated."""
    new = exchange_token(config, {
        "grant_type": "refresh_token",
        "refresh_token": old.refresh_token,
    }, now=now)
    if not new.refresh_token:
        new = new.model_copy(update={"refresh_token": old.refresh_token})
    return new


def ensure_fresh_tokens(config: Config, now: Optional[datetime] = None) -> StoredTokens:
    """Load stored tokens and refresh them if they are about to expire.

    Raises:
        TokenStoreError: If setup has not been run (or the file is corrupt).
        TokenExchangeError: If the refresh fails. Stored tokens are untouched.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    tokens = load_tokens(config.token_path)
    if not needs_refresh(tokens, now=now):
        return tokens

    logger.debug("Access token expires at %s, refreshing", tokens.expires_at.isoformat())
    tokens = refresh_tokens(config, tokens, now=now)
    save_tokens(config.token_path, tokens)
    return tokens
