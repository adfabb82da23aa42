"""Fetch flow: cached output or one heart-rate API call.

This module provides the normal (non-setup) path:
- Serve the cached line if it is still fresh
- Refresh OAuth tokens when they are about to expire
- Query the last few hours of heart-rate samples
- Render and cache the most recent one
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests
from pydantic import ValidationError

from .cache import read_fresh, write_cache
from .config import WINDOW_HOURS, Config
from .errors import FetchError
from .models import HeartRateEntry, HeartRateResponse
from .oauth import ensure_fresh_tokens

logger = logging.getLogger(__name__)

RFC3339 = "%Y-%m-%dT%H:%M:%SZ"


def query_window(now: Optional[datetime] = None, hours: int = WINDOW_HOURS) -> tuple[str, str]:
    """Start and end of the query window as RFC 3339 UTC strings."""
    if now is None:
        now = datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    start = now - timedelta(hours=hours)
    return start.strftime(RFC3339), now.strftime(RFC3339)


def fetch_latest(config: Config, access_token: str, now: Optional[datetime] = None) -> Optional[HeartRateEntry]:
    """Fetch the most recent heart-rate sample.

    Args:
        config: Endpoint and timeout.
        access_token: Bearer token.
        now: End of the query window. Defaults to now (UTC).

    Returns:
        Latest sample, or None on a non-200 response or an empty window.

    Raises:
        FetchError: On network failure or an undecodable body.
    """
    start, end = query_window(now)
    try:
        resp = requests.get(
            config.api_url,
            params={"start_datetime": start, "end_datetime": end},
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=config.http_timeout,
        )
    except requests.RequestException as e:
        raise FetchError(f"heart-rate request failed: {e}") from e

    if resp.status_code != 200:
        logger.debug("Heart-rate API returned HTTP %d", resp.status_code)
        return None

    try:
        result = HeartRateResponse.model_validate_json(resp.content)
    except ValidationError as e:
        raise FetchError(f"could not decode heart-rate response: {e}") from e

    if result.latest is None:
        logger.debug("No heart-rate samples between %s and %s", start, end)
    return result.latest


def render(entry: HeartRateEntry) -> str:
    """Format a sample for the prompt."""
    return f"♥ {entry.bpm}\n"


def run_fetch(config: Config, now: Optional[datetime] = None) -> Optional[bytes]:
    """Produce the prompt line, from cache or from the API.

    Returns:
        Bytes to print (cached bytes exactly as stored), or None when
        there is nothing to show (no credentials, non-200 response,
        empty window).

    Raises:
        OuraHRError: Any token or fetch failure. The caller decides how
            loudly to fail.
    """
    if not config.has_credentials:
        logger.debug("OURA_CLIENT_ID/OURA_CLIENT_SECRET not set")
        return None

    cached = read_fresh(config.cache_path, config.cache_ttl)
    if cached is not None:
        return cached

    tokens = ensure_fresh_tokens(config, now=now)
    entry = fetch_latest(config, tokens.access_token, now=now)
    if entry is None:
        return None

    output = render(entry).encode("utf-8")
    write_cache(config.cache_path, output)
    return output
