"""Streaming AEAD encryption for content files and the index.

File layout (no length fields, no magic):
- 40 bytes: file key wrapped with the master key (AES Key Wrap, RFC 3394)
- 12 bytes: GCM nonce
- N bytes: AES-256-GCM ciphertext, same length as the plaintext

The 16-byte GCM tag is NOT stored in the file. It is returned to the caller
and published out of band (inside the index for content, in the build
parameters for the index itself).
"""
import os
from typing import BinaryIO

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.keywrap import aes_key_unwrap, aes_key_wrap

from heirbox.core.exceptions import StreamEncryptionError


FILE_KEY_LENGTH = 32
NONCE_LENGTH = 12
# key wrap adds one 64-bit integrity block
WRAPPED_KEY_LENGTH = FILE_KEY_LENGTH + 8
HEADER_LENGTH = WRAPPED_KEY_LENGTH + NONCE_LENGTH
TAG_LENGTH = 16

CHUNK_SIZE = 64 * 1024


def generate_file_key() -> bytes:
    return os.urandom(FILE_KEY_LENGTH)


def generate_nonce() -> bytes:
    return os.urandom(NONCE_LENGTH)


def _check_master_key(master_key: bytes) -> None:
    if len(master_key) != 32:
        raise ValueError(f"master key must be 32 bytes, got {len(master_key)}")


def wrap_file_key(master_key: bytes, file_key: bytes) -> bytes:
    _check_master_key(master_key)
    return aes_key_wrap(master_key, file_key)


def unwrap_file_key(master_key: bytes, wrapped: bytes) -> bytes:
    _check_master_key(master_key)
    return aes_key_unwrap(master_key, wrapped)


def encrypt_stream(
    master_key: bytes,
    in_stream: BinaryIO,
    out_stream: BinaryIO,
    chunk_size: int = CHUNK_SIZE,
) -> bytes:
    """
    Encrypt ``in_stream`` into ``out_stream`` with a one-time file key.

    Reads at most ``chunk_size`` bytes at a time so arbitrarily large inputs
    never sit in memory whole. Returns the raw authentication tag.
    """
    file_key = generate_file_key()
    nonce = generate_nonce()
    wrapped = wrap_file_key(master_key, file_key)

    encryptor = Cipher(algorithms.AES(file_key), modes.GCM(nonce)).encryptor()

    try:
        out_stream.write(wrapped)
        out_stream.write(nonce)
        while True:
            chunk = in_stream.read(chunk_size)
            if not chunk:
                break
            out_stream.write(encryptor.update(chunk))
        # GCM emits nothing on finalize, but it is what computes the tag
        out_stream.write(encryptor.finalize())
        out_stream.flush()
    except OSError as exc:
        raise StreamEncryptionError(f"stream encryption failed: {exc}") from exc

    return encryptor.tag
