"""
Data models for content records and build sessions
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from heirbox.core.config import Config
    from heirbox.security.kdf import KDF


ID_TOKEN_NAMESPACE = "https://hereditas.app"


class DisplayMode(Enum):
    # How the viewer should present a file once decrypted
    TEXT = "text"
    IMAGE = "image"
    ATTACH = "attach"


class ContentFile:
    """
        A single file from the content directory

        Created by the scanner with ``path`` and ``size``; the pre-processor
        fills ``display``/``processed`` and encryption fills ``dist``/``tag``.
    """

    __slots__ = ('path', 'size', 'display', 'processed', 'dist', 'tag')

    def __init__(self, path, size, display=None, processed=None, dist=None, tag=None):
        self.path = path
        self.size = size
        self.display = display
        self.processed = processed
        self.dist = dist
        self.tag = tag

    @property
    def is_encrypted(self) -> bool:
        return self.dist is not None and self.tag is not None

    def to_dict(self) -> Dict[str, Any]:
        """
            Convert to the record stored in the index
        """
        data = {
            'path': self.path,
            'size': self.size,
            'display': self.display.value if self.display is not None else None,
            'dist': self.dist,
            'tag': self.tag,
        }
        if self.processed is not None:
            data['processed'] = self.processed
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentFile":
        """
            Create a ContentFile from an index record
        """
        display_val = data.get('display')
        display = DisplayMode(display_val) if isinstance(display_val, str) else display_val
        return cls(
            path=data['path'],
            size=data.get('size', 0),
            display=display,
            processed=data.get('processed'),
            dist=data.get('dist'),
            tag=data.get('tag'),
        )

    def __repr__(self):
        return f"ContentFile(path={self.path!r}, size={self.size!r}, dist={self.dist!r})"

    def __eq__(self, other):
        if not isinstance(other, ContentFile):
            return NotImplemented
        return self.to_dict() == other.to_dict()


@dataclass
class BuildSession:
    """State owned by one build; the master key is deliberately not part of it."""

    kdf: "KDF"
    key_salt: Optional[bytes] = None
    content: List[ContentFile] = field(default_factory=list)
    index_tag: Optional[str] = None
    has_errors: bool = False
    warnings: List[str] = field(default_factory=list)

    def app_params(self, config: "Config") -> Dict[str, Any]:
        """Parameters a client needs to re-derive the master key and read the index."""
        params = {
            'distDir': str(config.dist_dir),
            'authIssuer': f"https://{config.auth0_domain}" if config.auth0_domain else None,
            'authClientId': config.auth0_client_id,
            'idTokenNamespace': ID_TOKEN_NAMESPACE,
            'indexTag': self.index_tag,
            'keySalt': base64.b64encode(self.key_salt).decode('ascii') if self.key_salt else None,
        }
        params.update(self.kdf.app_params())
        return params
