"""Local token storage.

Tokens live in a single JSON file next to the output cache. The file is
always rewritten wholesale and kept owner-readable only.
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .config import REFRESH_MARGIN_SECONDS
from .errors import TokenStoreError
from .files import write_private
from .models import StoredTokens

logger = logging.getLogger(__name__)


def load_tokens(path: Path) -> StoredTokens:
    """Read stored tokens.

    Raises:
        TokenStoreError: If the file is missing, unreadable or malformed.
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise TokenStoreError(f"Could not read {path}: {e}") from e

    try:
        return StoredTokens.model_validate_json(raw)
    except ValidationError as e:
        raise TokenStoreError(f"Invalid token file {path}: {e}") from e


def save_tokens(path: Path, tokens: StoredTokens) -> None:
    """Overwrite the token file (mode 0600)."""
    write_private(path, tokens.model_dump_json().encode("utf-8"))
    logger.debug("Saved tokens to %s (expires %s)", path, tokens.expires_at.isoformat())


def needs_refresh(
    tokens: StoredTokens,
    now: Optional[datetime] = None,
    margin: int = REFRESH_MARGIN_SECONDS,
) -> bool:
    """Check if the access token expires within `margin` seconds."""
    if now is None:
        now = datetime.now(timezone.utc)
    expires_at = tokens.expires_at
    if expires_at.tzinfo is None:
        # Naive timestamps are written by hand, treat them as UTC
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return now >= expires_at - timedelta(seconds=margin)
