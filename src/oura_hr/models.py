"""Pydantic models for Oura API payloads and the local token file.

These models provide:
- Validation at the data boundary (token file, token endpoint, API)
- Empty-string defaults for fields the provider may omit
- A single place for the "latest sample" rule
"""

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel


class StoredTokens(BaseModel):
    """OAuth tokens persisted in oura-tokens.json."""

    access_token: str
    refresh_token: str
    expires_at: datetime


class TokenResponse(BaseModel):
    """Body of a successful or failed token endpoint call."""
    model_config = {"extra": "ignore"}

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    error: Optional[str] = None

    def to_stored(self, now: datetime) -> StoredTokens:
        """Convert relative expiry into an absolute timestamp.

        Missing or null fields become empty strings and a zero lifetime.

        Raises:
            OverflowError: If `expires_in` puts the expiry out of range.
        """
        return StoredTokens(
            access_token=self.access_token or "",
            refresh_token=self.refresh_token or "",
            expires_at=now + timedelta(seconds=self.expires_in or 0),
        )


class HeartRateEntry(BaseModel):
    """Single heart-rate sample."""
    model_config = {"extra": "ignore"}

    bpm: int
    source: str = ""
    timestamp: str = ""


class HeartRateResponse(BaseModel):
    """Heart-rate collection for a time window.

    Note: the API returns samples oldest first. The order is taken as-is.
    """
    model_config = {"extra": "ignore"}

    data: list[HeartRateEntry] = []

    @property
    def latest(self) -> Optional[HeartRateEntry]:
        """Most recent sample, or None when the window is empty."""
        if not self.data:
            return None
        return self.data[-1]
