"""Key derivation for the build master key.

Two variants are supported, selected by name from the project file:

- ``pbkdf2``: PBKDF2-HMAC-SHA512, configurable iterations
- ``argon2``: Argon2id with time cost 1 and parallelism 1, configurable memory (KiB)

Both produce a 32-byte key from ``passphrase + app_token`` and a 64-byte salt.
"""
import os
from dataclasses import dataclass
from typing import ClassVar, Dict

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from heirbox.core.exceptions import ConfigurationError, UnsupportedKDFError

# Matches the SHA-512 digest size
SALT_LENGTH = 64
KEY_LENGTH = 32

DEFAULT_PBKDF2_ITERATIONS = 100_000
DEFAULT_ARGON2_MEMORY = 65536  # KiB, 64 MB

# argon2 requires at least 8 KiB per lane
_ARGON2_MIN_MEMORY = 8


def generate_salt(length: int = SALT_LENGTH) -> bytes:
    """Return a cryptographically secure random salt."""
    return os.urandom(length)


class KDF:
    """Base class for the supported key derivation functions."""

    name: ClassVar[str] = ""

    def derive(self, secret: bytes, salt: bytes) -> bytes:
        raise NotImplementedError

    def app_params(self) -> Dict:
        raise NotImplementedError


@dataclass(frozen=True)
class Pbkdf2KDF(KDF):
    iterations: int = DEFAULT_PBKDF2_ITERATIONS

    name: ClassVar[str] = "pbkdf2"

    def __post_init__(self):
        if int(self.iterations) <= 0:
            raise ConfigurationError(f"pbkdf2 iterations must be positive, got {self.iterations}")

    def derive(self, secret: bytes, salt: bytes) -> bytes:
        # SHA-512 yields 64 bytes per block; only the first 32 are kept
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA512(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=int(self.iterations),
        )
        return kdf.derive(secret)

    def app_params(self) -> Dict:
        return {"kdf": self.name, "pbkdf2Iterations": int(self.iterations), "argon2Memory": None}


@dataclass(frozen=True)
class Argon2KDF(KDF):
    memory: int = DEFAULT_ARGON2_MEMORY

    name: ClassVar[str] = "argon2"

    time_cost: ClassVar[int] = 1
    parallelism: ClassVar[int] = 1

    def __post_init__(self):
        if int(self.memory) < _ARGON2_MIN_MEMORY:
            raise ConfigurationError(
                f"argon2 memory must be at least {_ARGON2_MIN_MEMORY} KiB, got {self.memory}"
            )

    def derive(self, secret: bytes, salt: bytes) -> bytes:
        return hash_secret_raw(
            secret=secret,
            salt=salt,
            time_cost=self.time_cost,
            memory_cost=int(self.memory),
            parallelism=self.parallelism,
            hash_len=KEY_LENGTH,
            type=Type.ID,
        )

    def app_params(self) -> Dict:
        return {"kdf": self.name, "pbkdf2Iterations": None, "argon2Memory": int(self.memory)}


SUPPORTED_KDFS = (Pbkdf2KDF.name, Argon2KDF.name)


def get_kdf(
    name: str,
    pbkdf2_iterations: int = DEFAULT_PBKDF2_ITERATIONS,
    argon2_memory: int = DEFAULT_ARGON2_MEMORY,
) -> KDF:
    """
    Resolve a KDF selector from the project file into a concrete variant.

    Raises ``UnsupportedKDFError`` for anything other than ``pbkdf2`` or ``argon2``.
    """
    if name == Pbkdf2KDF.name:
        return Pbkdf2KDF(iterations=pbkdf2_iterations)
    if name == Argon2KDF.name:
        return Argon2KDF(memory=argon2_memory)
    raise UnsupportedKDFError(
        f"Invalid key derivation function requested: {name!r} "
        f"(supported: {', '.join(SUPPORTED_KDFS)})"
    )


def derive_master_key(passphrase, app_token, salt: bytes, kdf: KDF) -> bytes:
    """
    Derive the 256-bit master key from the passphrase and the project's app token.

    The two strings are concatenated before derivation, so rotating the token
    invalidates every key derived with the old one.
    """
    if isinstance(passphrase, bytes):
        passphrase = passphrase.decode("utf-8")
    secret = (passphrase + app_token).encode("utf-8")
    return kdf.derive(secret, salt)
