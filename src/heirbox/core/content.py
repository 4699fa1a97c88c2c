"""
Content pre-processing before encryption.

A processor turns one ContentFile into the byte stream that actually gets
encrypted, and decides how the viewer should display it.
"""

from __future__ import annotations

import io
import logging
import mimetypes
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Tuple

from PIL import Image, UnidentifiedImageError

from .models import ContentFile, DisplayMode

logger = logging.getLogger(__name__)

# application/* types that are still readable as text
TEXT_MIME_TYPES = frozenset(
    {
        "application/json",
        "application/xml",
        "application/x-yaml",
        "application/yaml",
        "application/javascript",
    }
)

Transform = Callable[[bytes], bytes]


class ContentProcessor:
    """Interface for the pre-processing step of a build."""

    def open(self, entry: ContentFile, root: Path) -> BinaryIO:
        """
        Return a readable binary stream with the bytes to encrypt.

        Implementations may set ``entry.display`` and ``entry.processed``.
        The caller is responsible for closing the stream.
        """
        raise NotImplementedError


class DefaultContentProcessor(ContentProcessor):
    """
    Picks a display mode from the MIME type and streams the file unchanged.

    Extra transforms can be registered per extension; a transformed file is
    read into memory, so keep them for small text formats.
    """

    def __init__(self):
        self._transforms: Dict[str, Tuple[str, Transform]] = {}

    def register(self, extension: str, name: str, transform: Transform) -> None:
        ext = extension.lower()
        if not ext.startswith("."):
            ext = "." + ext
        self._transforms[ext] = (name, transform)

    def detect_display(self, path: Path) -> DisplayMode:
        mime_type, _ = mimetypes.guess_type(path.name)
        if not mime_type:
            return DisplayMode.ATTACH

        if mime_type.startswith("text/") or mime_type in TEXT_MIME_TYPES:
            return DisplayMode.TEXT

        if mime_type.startswith("image/"):
            # Only show inline what Pillow can actually identify
            try:
                with Image.open(path) as img:
                    img.verify()
            except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
                logger.debug("Not a displayable image %s: %s", path, e)
                return DisplayMode.ATTACH
            return DisplayMode.IMAGE

        return DisplayMode.ATTACH

    def open(self, entry: ContentFile, root: Path) -> BinaryIO:
        source = Path(root) / entry.path
        if entry.display is None:
            entry.display = self.detect_display(source)

        registered = self._transforms.get(source.suffix.lower())
        if registered is None:
            return open(source, "rb")

        name, transform = registered
        data = transform(source.read_bytes())
        entry.processed = name
        logger.debug("Pre-processed %s with %s", entry.path, name)
        return io.BytesIO(data)
