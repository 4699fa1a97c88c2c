"""
Recursive scan of the content directory.

Entries are visited depth-first in the order the filesystem lists them; that
order is kept all the way into the index. Symlinks are never followed nor
packaged, and neither are FIFOs, sockets or device nodes.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

from .exceptions import ContentScanError
from .models import ContentFile
from .pathfilter import include_path

logger = logging.getLogger(__name__)


def scan_content(root: str | Path) -> List[ContentFile]:
    """Return one ContentFile per regular file under ``root``."""
    root = Path(root)
    result: List[ContentFile] = []
    _scan_folder(root, "", result)
    logger.debug("Scanned %s: %d files", root, len(result))
    return result


def _scan_folder(root: Path, folder: str, result: List[ContentFile]) -> None:
    directory = root / folder if folder else root
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as exc:
        raise ContentScanError(f"Cannot read content directory {directory}: {exc}") from exc

    for entry in entries:
        rel = f"{folder}/{entry.name}" if folder else entry.name
        try:
            rel.encode("utf-8")
        except UnicodeEncodeError as exc:
            # the index is UTF-8 JSON, so such a name could never be recorded
            raise ContentScanError(f"File name is not valid UTF-8: {os.fsencode(rel)!r}") from exc

        if not include_path(rel):
            logger.debug("Ignoring %s", rel)
            continue

        try:
            if entry.is_symlink():
                logger.debug("Skipping symlink %s", rel)
                continue
            if entry.is_dir(follow_symlinks=False):
                _scan_folder(root, rel, result)
            elif entry.is_file(follow_symlinks=False):
                size = entry.stat(follow_symlinks=False).st_size
                result.append(ContentFile(path=rel, size=size))
            else:
                logger.debug("Skipping special file %s", rel)
        except OSError as exc:
            raise ContentScanError(f"Cannot stat {root / rel}: {exc}") from exc
