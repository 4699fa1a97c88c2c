"""Shared fixtures: a reference reader for the ciphertext format and cheap configs."""

import base64

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.keywrap import aes_key_unwrap

from heirbox.core.config import Config
from heirbox.security.crypto import HEADER_LENGTH, WRAPPED_KEY_LENGTH


def _decrypt(master_key: bytes, blob: bytes, tag) -> bytes:
    # Mirrors what a client does: unwrap, split header, verify with the published tag
    if isinstance(tag, str):
        tag = base64.b64decode(tag)
    wrapped = blob[:WRAPPED_KEY_LENGTH]
    nonce = blob[WRAPPED_KEY_LENGTH:HEADER_LENGTH]
    ciphertext = blob[HEADER_LENGTH:]
    file_key = aes_key_unwrap(master_key, wrapped)
    return AESGCM(file_key).decrypt(nonce, ciphertext + tag, None)


@pytest.fixture
def decrypt_blob():
    """Return a function decrypting ``wrapped_key || nonce || ciphertext`` blobs."""
    return _decrypt


@pytest.fixture
def master_key():
    return bytes(range(32))


@pytest.fixture
def project(tmp_path):
    """Content and dist directories plus a config using fast KDF settings."""
    content = tmp_path / "content"
    dist = tmp_path / "dist"
    content.mkdir()
    config = Config(
        content_dir=content,
        dist_dir=dist,
        app_token="test-app-token",
        kdf="argon2",
        argon2_memory=8,
        pbkdf2_iterations=1000,
        auth0_domain="example.auth0.com",
        auth0_client_id="client-123",
    )
    return config
