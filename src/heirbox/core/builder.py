"""
Build pipeline: turns the content directory into encrypted blobs plus an index.

Steps run strictly in order and every step except the last is fail-fast:

    clean -> scan -> salt -> derive -> encrypt content -> encrypt index -> bundle

A failed build leaves whatever it already wrote; the next build's clean step
removes it.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Optional

from heirbox.security.crypto import encrypt_stream
from heirbox.security.kdf import derive_master_key, generate_salt

from .bundler import Bundler, NullBundler
from .config import Config
from .content import ContentProcessor, DefaultContentProcessor
from .exceptions import StorageError, StreamEncryptionError
from .index import write_index
from .models import BuildSession, ContentFile
from .scanner import scan_content
from .storage import DistStorage

logger = logging.getLogger(__name__)


class Builder:
    """
    Builds a project.

    The KDF is resolved when the builder is created so that an unsupported
    selector fails before anything on disk is touched.
    """

    def __init__(
        self,
        passphrase: str,
        config: Config,
        processor: Optional[ContentProcessor] = None,
        bundler: Optional[Bundler] = None,
    ):
        self._passphrase = passphrase
        self._config = config
        self.kdf = config.resolve_kdf()
        self.processor = processor or DefaultContentProcessor()
        self.bundler = bundler or NullBundler()
        self.storage = DistStorage(config.dist_dir, content_root=config.content_dir)

    def build(self) -> BuildSession:
        """Perform a full build and return its session."""
        session = BuildSession(kdf=self.kdf)

        logger.info("Cleaning %s", self._config.dist_dir)
        self.storage.clean()

        session.content = scan_content(self._config.content_dir)
        logger.info("Found %d files in %s", len(session.content), self._config.content_dir)

        session.key_salt = generate_salt()

        logger.info("Deriving master key with %s", self.kdf.name)
        master_key = derive_master_key(
            self._passphrase, self._config.app_token, session.key_salt, self.kdf
        )

        for entry in session.content:
            self._encrypt_entry(master_key, entry)
        logger.info("Encrypted %d files", len(session.content))

        session.index_tag = write_index(master_key, session.content, self.storage)
        logger.info("Index written to %s", self.storage.index_path)
        del master_key

        self._bundle(session)
        return session

    def _encrypt_entry(self, master_key: bytes, entry: ContentFile) -> None:
        dist = self.storage.allocate_name()
        try:
            in_stream = self.processor.open(entry, Path(self._config.content_dir))
        except OSError as exc:
            raise StorageError(f"Cannot read content file {entry.path}: {exc}") from exc
        try:
            with in_stream, self.storage.open_blob(dist) as out_stream:
                tag = encrypt_stream(master_key, in_stream, out_stream)
        except OSError as exc:
            # closing the blob can still fail once every chunk is written
            raise StreamEncryptionError(f"Cannot write encrypted {entry.path}: {exc}") from exc
        entry.dist = dist
        entry.tag = base64.b64encode(tag).decode("ascii")
        logger.debug("Encrypted %s -> %s", entry.path, dist)

    def _bundle(self, session: BuildSession) -> None:
        # Bundler problems never abort the build: errors flag it, warnings are only logged
        report = self.bundler.bundle(session.app_params(self._config))
        if report.has_errors:
            logger.error("Bundling errors:")
            for error in report.errors:
                logger.error("  %s", error)
            session.has_errors = True
        if report.has_warnings:
            logger.warning("Bundling warnings:")
            for warning in report.warnings:
                logger.warning("  %s", warning)
            session.warnings.extend(report.warnings)
