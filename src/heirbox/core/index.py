"""
Encrypted index of a build.

The index is the JSON list of every ContentFile record, encrypted exactly like
a content file and written to ``<dist>/_index``.
"""

from __future__ import annotations

import base64
import io
import json
from typing import List

from heirbox.security.crypto import encrypt_stream

from .exceptions import IncompleteContentError, StreamEncryptionError
from .models import ContentFile
from .storage import DistStorage


def serialize_index(content: List[ContentFile]) -> bytes:
    missing = [entry.path for entry in content if not entry.is_encrypted]
    if missing:
        raise IncompleteContentError(
            f"index requested before encryption finished for: {', '.join(missing)}"
        )
    records = [entry.to_dict() for entry in content]
    return json.dumps(records, ensure_ascii=False).encode("utf-8")


def write_index(master_key: bytes, content: List[ContentFile], storage: DistStorage) -> str:
    """Encrypt the index into the dist directory and return its base64 tag."""
    data = serialize_index(content)
    try:
        with storage.open_index() as out_stream:
            tag = encrypt_stream(master_key, io.BytesIO(data), out_stream)
    except OSError as exc:
        raise StreamEncryptionError(f"Cannot write encrypted index: {exc}") from exc
    return base64.b64encode(tag).decode("ascii")
