"""Owner-only file writes for tokens and cached output."""

import os
from pathlib import Path


def write_private(path: Path, data: bytes) -> None:
    """Overwrite `path` with `data`, never exposing it beyond mode 0600.

    New files are created 0600. Files that already existed with looser
    permissions are tightened before any data is written.
    """
    path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        os.fchmod(f.fileno(), 0o600)
        f.write(data)
