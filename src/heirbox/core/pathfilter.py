"""Decides which content entries end up in the package."""

import posixpath

# Operating system bookkeeping files that never belong in a box
EXCLUDED_NAMES = frozenset(
    {
        # Linux
        ".directory",
        # macOS
        ".DS_Store",
        ".AppleDouble",
        ".LSOverride",
        # Windows
        "Thumbs.db",
        "Thumbs.db:encryptable",
        "ehthumbs.db",
        "desktop.ini",
        "Desktop.ini",
    }
)
EXCLUDED_PREFIXES = ("._",)
EXCLUDED_SUFFIXES = ("~",)


def include_path(path: str) -> bool:
    """Return False for OS metadata files, True for everything else."""
    base = posixpath.basename(path.replace("\\", "/").rstrip("/"))
    if base in EXCLUDED_NAMES:
        return False
    if base.startswith(EXCLUDED_PREFIXES) or base.endswith(EXCLUDED_SUFFIXES):
        return False
    return True
