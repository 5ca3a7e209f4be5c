"""Cipher results and the container formats that serialize them."""

import dataclasses
import typing

from .buffer import Base64, ByteBuffer
from .errors import MalformedText, UnsupportedConfiguration

SALTED_MAGIC_WORDS = (0x53616C74, 0x65645F5F)  # "Salted__"
SALT_BYTES = 8


@dataclasses.dataclass(frozen=True)
class CipherResult:
    ciphertext: ByteBuffer
    key: typing.Optional[ByteBuffer] = None
    iv: typing.Optional[ByteBuffer] = None
    salt: typing.Optional[ByteBuffer] = None
    algorithm: typing.Any = None
    mode: typing.Any = None
    padding: typing.Any = None
    block_size: typing.Optional[int] = None
    formatter: typing.Any = None

    def to_string(self, formatter=None) -> str:
        formatter = formatter or self.formatter or OpenSSLFormat
        return formatter.stringify(self)

    def __str__(self) -> str:
        return self.to_string()


class SerializationFormat:
    name = "abstract"

    def stringify(self, result: CipherResult) -> str:
        raise NotImplementedError

    def parse(self, text: str) -> CipherResult:
        raise NotImplementedError


class OpenSSLSerializationFormat(SerializationFormat):
    """Base64 of ``"Salted__" || salt || ciphertext``, or of the bare ciphertext when unsalted."""

    name = "openssl"

    def stringify(self, result: CipherResult) -> str:
        if result.salt is not None:
            if result.salt.sig_bytes != SALT_BYTES:
                raise UnsupportedConfiguration(f"Salted container holds an {SALT_BYTES}-byte salt, got {result.salt.sig_bytes}")
            container = ByteBuffer(SALTED_MAGIC_WORDS).concat(result.salt).concat(result.ciphertext)
        else:
            container = result.ciphertext
        return Base64.stringify(container)

    def parse(self, text: str) -> CipherResult:
        ciphertext = Base64.parse(text)
        words = ciphertext.words
        salt = None
        if (
            ciphertext.sig_bytes >= 8
            and int(words[0]) == SALTED_MAGIC_WORDS[0]
            and int(words[1]) == SALTED_MAGIC_WORDS[1]
        ):
            if ciphertext.sig_bytes < 16:
                raise MalformedText("Salted container is missing its salt")
            salt = ByteBuffer(words[2:4])
            ciphertext = ByteBuffer(words[4:], ciphertext.sig_bytes - 16)
        return CipherResult(ciphertext=ciphertext, salt=salt)


OpenSSLFormat = OpenSSLSerializationFormat()

FORMATS = {
    OpenSSLFormat.name: OpenSSLFormat,
}


__all__ = [
    "CipherResult",
    "FORMATS",
    "OpenSSLFormat",
    "OpenSSLSerializationFormat",
    "SALTED_MAGIC_WORDS",
    "SALT_BYTES",
    "SerializationFormat",
]
