"""Streaming digest adapters over ``cryptography`` hash primitives."""

import typing

from cryptography.hazmat.primitives import hashes

from .buffer import ByteBuffer, as_buffer


class Hasher:
    """``update(data)`` / ``finalize(data=None) -> ByteBuffer`` digest.

    Finalizing resets the hasher so the same object can be reused, which the
    key derivation loop relies on.
    """

    name = "abstract"
    algorithm: typing.ClassVar[typing.Optional[typing.Callable[[], hashes.HashAlgorithm]]] = None

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self._ctx = hashes.Hash(self.algorithm())

    def update(self, data) -> "Hasher":
        self._ctx.update(as_buffer(data).to_bytes())
        return self

    def finalize(self, data=None) -> ByteBuffer:
        if data is not None:
            self.update(data)
        digest = self._ctx.finalize()
        self.reset()
        return ByteBuffer.from_bytes(digest)


class MD5(Hasher):
    name = "md5"
    algorithm = hashes.MD5


class SHA1(Hasher):
    name = "sha1"
    algorithm = hashes.SHA1


class SHA256(Hasher):
    name = "sha256"
    algorithm = hashes.SHA256


class SHA512(Hasher):
    name = "sha512"
    algorithm = hashes.SHA512


HASHERS = {hasher.name: hasher for hasher in (MD5, SHA1, SHA256, SHA512)}


__all__ = ["HASHERS", "Hasher", "MD5", "SHA1", "SHA256", "SHA512"]
