"""
Project configuration stored in ``heirbox.json``.

The file layout keeps the nested keys of the original project file, e.g.::

    {
      "contentDir": "content",
      "distDir": "dist",
      "appToken": "...",
      "kdf": "argon2",
      "argon2": {"memory": 65536},
      "pbkdf2": {"iterations": 100000},
      "auth0": {"domain": "example.auth0.com", "clientId": "..."},
      "urls": ["https://example.com"],
      "waitTime": 86400
    }

Relative directories are resolved against the directory holding the file.
"""

from __future__ import annotations

import base64
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from heirbox.security.kdf import (
    DEFAULT_ARGON2_MEMORY,
    DEFAULT_PBKDF2_ITERATIONS,
    KDF,
    get_kdf,
)

from .exceptions import ConfigurationError

CONFIG_FILENAME = "heirbox.json"
PASSPHRASE_ENV = "HEIRBOX_PASSPHRASE"
DEFAULT_WAIT_TIME = 86400
TOKEN_BYTES = 21


def generate_token(length: int = TOKEN_BYTES) -> str:
    """Return a random base64 token built from ``length`` random bytes."""
    return base64.b64encode(os.urandom(length)).decode("ascii")


@dataclass
class Config:
    content_dir: Path
    dist_dir: Path
    app_token: str
    kdf: str = "argon2"
    pbkdf2_iterations: int = DEFAULT_PBKDF2_ITERATIONS
    argon2_memory: int = DEFAULT_ARGON2_MEMORY
    auth0_domain: Optional[str] = None
    auth0_client_id: Optional[str] = None
    urls: List[str] = field(default_factory=list)
    wait_time: int = DEFAULT_WAIT_TIME

    def __post_init__(self):
        self.content_dir = Path(self.content_dir)
        self.dist_dir = Path(self.dist_dir)

    @classmethod
    def create(cls, content_dir, dist_dir, **kwargs) -> "Config":
        """New project config with a freshly generated app token."""
        return cls(content_dir=content_dir, dist_dir=dist_dir, app_token=generate_token(), **kwargs)

    def resolve_kdf(self) -> KDF:
        return get_kdf(
            self.kdf,
            pbkdf2_iterations=self.pbkdf2_iterations,
            argon2_memory=self.argon2_memory,
        )

    def to_dict(self, base_dir: Optional[Path] = None) -> Dict[str, Any]:
        def rel(p: Path) -> str:
            if base_dir is not None:
                try:
                    return p.resolve().relative_to(base_dir).as_posix()
                except ValueError:
                    pass
            return str(p)

        return {
            "contentDir": rel(self.content_dir),
            "distDir": rel(self.dist_dir),
            "appToken": self.app_token,
            "kdf": self.kdf,
            "pbkdf2": {"iterations": self.pbkdf2_iterations},
            "argon2": {"memory": self.argon2_memory},
            "auth0": {"domain": self.auth0_domain, "clientId": self.auth0_client_id},
            "urls": list(self.urls),
            "waitTime": self.wait_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "Config":
        def resolve(value: str) -> Path:
            p = Path(value).expanduser()
            if not p.is_absolute() and base_dir is not None:
                p = base_dir / p
            return p

        token = data.get("appToken")
        if not token:
            raise ConfigurationError("appToken is missing from the project file")

        try:
            content_dir = resolve(data.get("contentDir", "content"))
            dist_dir = resolve(data.get("distDir", "dist"))
            auth0 = data.get("auth0") or {}
            return cls(
                content_dir=content_dir,
                dist_dir=dist_dir,
                app_token=token,
                kdf=data.get("kdf", "argon2"),
                pbkdf2_iterations=int((data.get("pbkdf2") or {}).get("iterations", DEFAULT_PBKDF2_ITERATIONS)),
                argon2_memory=int((data.get("argon2") or {}).get("memory", DEFAULT_ARGON2_MEMORY)),
                auth0_domain=auth0.get("domain"),
                auth0_client_id=auth0.get("clientId"),
                urls=list(data.get("urls") or []),
                wait_time=int(data.get("waitTime", DEFAULT_WAIT_TIME)),
            )
        except (TypeError, ValueError, AttributeError) as exc:
            raise ConfigurationError(f"Invalid project file: {exc}") from exc

    @classmethod
    def load(cls, path: str | Path) -> "Config":
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise ConfigurationError(f"Project file not found: {path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Cannot read project file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Project file {path} must contain a JSON object")
        return cls.from_dict(data, base_dir=path.resolve().parent)

    def save(self, path: str | Path) -> None:
        path = Path(path)
        data = self.to_dict(base_dir=path.resolve().parent)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
