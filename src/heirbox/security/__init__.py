"""Security helpers: KDF and streaming encryption primitives for heirbox.

This package provides:
- PBKDF2-SHA512 and Argon2id master key derivation
- Per-file key generation and AES key wrapping
- Streaming AES-256-GCM encryption with the tag returned out of band
"""

from .kdf import (
    KDF,
    Argon2KDF,
    Pbkdf2KDF,
    generate_salt,
    get_kdf,
    derive_master_key,
)
from .crypto import (
    generate_file_key,
    generate_nonce,
    wrap_file_key,
    unwrap_file_key,
    encrypt_stream,
)

__all__ = [
    "KDF",
    "Argon2KDF",
    "Pbkdf2KDF",
    "generate_salt",
    "get_kdf",
    "derive_master_key",
    "generate_file_key",
    "generate_nonce",
    "wrap_file_key",
    "unwrap_file_key",
    "encrypt_stream",
]
