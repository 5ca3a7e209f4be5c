"""Password-based key derivation (OpenSSL ``EVP_BytesToKey`` compatible)."""

import dataclasses
import os
import typing

from .buffer import ByteBuffer, as_buffer
from .entropy import RandomSource, default_random_source
from .errors import UnsupportedConfiguration
from .formats import SALT_BYTES
from .hashers import MD5, Hasher


def _env_int(name: str) -> typing.Optional[int]:
    value = os.getenv(name)
    if not value:
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    if parsed <= 0:
        return None
    return parsed


DEFAULT_ITERATIONS = _env_int("CIPHERFWX_KDF_ITERATIONS") or 1


@dataclasses.dataclass(frozen=True)
class DerivedKeyMaterial:
    key: ByteBuffer
    iv: ByteBuffer
    salt: ByteBuffer


class EvpKDF:
    """Iterated digest KDF.

    Each round hashes ``previous_block || password || salt`` (the first round
    has no previous block) and re-hashes the result ``iterations - 1`` more
    times; rounds continue until ``key_size`` words are available.
    """

    def __init__(self, key_size: int = 4, hasher: typing.Optional[typing.Callable[[], Hasher]] = None, iterations: typing.Optional[int] = None):
        self.key_size = key_size
        self.hasher = hasher or MD5
        self.iterations = iterations or DEFAULT_ITERATIONS

    def compute(self, password, salt) -> ByteBuffer:
        hasher = self.hasher()
        password = as_buffer(password)
        salt = as_buffer(salt)
        derived_key = ByteBuffer()
        block = None
        while len(derived_key.words) < self.key_size:
            if block is not None:
                hasher.update(block)
            block = hasher.update(password).finalize(salt)
            for _ in range(1, self.iterations):
                block = hasher.finalize(block)
            derived_key.concat(block)
        derived_key.sig_bytes = self.key_size * 4
        return derived_key.clamp()


class KeyDerivationFunction:
    name = "abstract"

    def execute(self, password, key_size: int, iv_size: int, salt=None, hasher=None, iterations=None, random_source=None) -> DerivedKeyMaterial:
        raise NotImplementedError


class OpenSSLKdf(KeyDerivationFunction):
    """Derives key and IV the way ``openssl enc`` does, generating an 8-byte salt when needed."""

    name = "openssl"

    def __init__(self, random_source: typing.Optional[RandomSource] = None):
        self.random_source = random_source

    def execute(self, password, key_size: int, iv_size: int, salt=None, hasher=None, iterations=None, random_source=None) -> DerivedKeyMaterial:
        if salt is None:
            source = random_source or self.random_source or default_random_source()
            salt = ByteBuffer.random(SALT_BYTES, source)
        salt = as_buffer(salt)
        if salt.sig_bytes != SALT_BYTES:
            raise UnsupportedConfiguration(f"OpenSSL key derivation needs an {SALT_BYTES}-byte salt, got {salt.sig_bytes}")
        output = EvpKDF(key_size + iv_size, hasher=hasher, iterations=iterations).compute(password, salt)
        key = ByteBuffer(output.words[:key_size], key_size * 4)
        iv = ByteBuffer(output.words[key_size:key_size + iv_size], iv_size * 4)
        return DerivedKeyMaterial(key=key, iv=iv, salt=salt.clone())


OpenSSL = OpenSSLKdf()

KDFS = {
    OpenSSL.name: OpenSSL,
}


__all__ = [
    "DEFAULT_ITERATIONS",
    "DerivedKeyMaterial",
    "EvpKDF",
    "KDFS",
    "KeyDerivationFunction",
    "OpenSSL",
    "OpenSSLKdf",
    "SALT_BYTES",
]
