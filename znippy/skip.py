"""Name-based check for files that are already compressed."""

from __future__ import annotations

import os
from pathlib import Path

SKIPPED_EXTENSIONS = (
    "zip", "gz", "bz2", "xz", "7z", "rar", "lz", "lz4", "zst", "tar.gz",
    "tar.bz2", "tar.xz", "tgz", "tbz", "txz", "jar", "war", "ear", "apk", "iso",
)


def should_skip_compression(path: str | os.PathLike[str]) -> bool:
    """True when the file name ends with a common compressed-format suffix."""
    name = Path(path).name.lower()
    return bool(name) and name.endswith(SKIPPED_EXTENSIONS)