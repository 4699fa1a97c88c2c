"""
Dist directory handling for builds

Structure Map for reference:
==============================
 - <dist_dir>/
      - _index            (encrypted JSON list of ContentFile records)
      - {24 hex chars}    (one encrypted blob per content file)
==============================
> Blob names are random and carry no information about the original path
> Every blob is `wrapped_key || nonce || ciphertext`; tags live in the index
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO, Optional, Set

from .exceptions import InvalidPathError, StorageError

logger = logging.getLogger(__name__)

INDEX_NAME = "_index"
DIST_NAME_BYTES = 12


class DistStorage:
    """Output directory of a build"""

    def __init__(self, root_path: str | Path, content_root: Optional[str | Path] = None):
        self.root = Path(root_path).expanduser()
        self.content_root = Path(content_root).expanduser() if content_root else None
        self._allocated: Set[str] = set()

    @property
    def index_path(self) -> Path:
        return self.root / INDEX_NAME

    def blob_path(self, dist: str) -> Path:
        return self.root / dist

    def _check_paths(self) -> None:
        if self.content_root is None:
            return
        dist = self.root.resolve()
        content = self.content_root.resolve()
        # Cleaning must never be able to touch the content directory
        if dist == content or content.is_relative_to(dist):
            raise InvalidPathError(
                f"dist directory {self.root} must not contain the content directory {self.content_root}"
            )

    def clean(self) -> None:
        """Remove everything inside the dist directory, creating it if needed."""
        self._check_paths()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            for child in self.root.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        except OSError as exc:
            raise StorageError(f"Cannot clean dist directory {self.root}: {exc}") from exc
        self._allocated.clear()
        logger.debug("Cleaned %s", self.root)

    def allocate_name(self) -> str:
        """Return a fresh random blob name not used yet in this build."""
        while True:
            name = os.urandom(DIST_NAME_BYTES).hex()
            if name in self._allocated or self.blob_path(name).exists():
                logger.warning("Random dist name collision on %s, retrying", name)
                continue
            self._allocated.add(name)
            return name

    def open_blob(self, dist: str) -> BinaryIO:
        try:
            return open(self.blob_path(dist), "wb")
        except OSError as exc:
            raise StorageError(f"Cannot create {self.blob_path(dist)}: {exc}") from exc

    def open_index(self) -> BinaryIO:
        try:
            return open(self.index_path, "wb")
        except OSError as exc:
            raise StorageError(f"Cannot create {self.index_path}: {exc}") from exc
