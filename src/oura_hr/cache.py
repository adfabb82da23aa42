"""Rendered-output cache.

A single flat file holding the last line printed. Freshness comes from the
file's modification time; there is no other invalidation and no locking.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from .files import write_private

logger = logging.getLogger(__name__)


def get_cache_age_seconds(path: Path, now: Optional[float] = None) -> Optional[int]:
    """Get whole seconds since the cache file was last written.

    Returns:
        Age in seconds, or None if the file does not exist.
    """
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return None
    if now is None:
        now = time.time()
    return int(now - mtime)


def read_fresh(path: Path, ttl: int, now: Optional[float] = None) -> Optional[bytes]:
    """Return cached output if it is younger than `ttl` seconds.

    Returns:
        The cached bytes verbatim, or None if absent, stale or unreadable.
    """
    age = get_cache_age_seconds(path, now)
    if age is None:
        return None
    if age >= ttl:
        logger.debug("Cache %s is stale (%ds >= %ds)", path, age, ttl)
        return None

    try:
        return path.read_bytes()
    except OSError as e:
        logger.debug("Could not read cache %s: %s", path, e)
        return None


def write_cache(path: Path, data: bytes) -> None:
    """Overwrite the cache file with freshly rendered output (mode 0600)."""
    write_private(path, data)
