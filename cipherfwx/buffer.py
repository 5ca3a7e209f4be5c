"""Word-packed byte buffers and the text encoders that feed them."""

import base64
import typing

import numpy as np

from .entropy import RandomSource, default_random_source
from .errors import MalformedText

WORD = np.uint32
BIG_ENDIAN_WORD = np.dtype(">u4")


def pack_words(data: bytes) -> np.ndarray:
    """Pack bytes big-endian into 32-bit words, zero-filling the last word."""
    remainder = len(data) % 4
    if remainder:
        data = bytes(data) + b"\x00" * (4 - remainder)
    return np.frombuffer(bytes(data), dtype=BIG_ENDIAN_WORD).astype(WORD)


class ByteBuffer:
    """Bytes held as big-endian 32-bit words plus a significant-byte count.

    ``words`` may hold more capacity than ``sig_bytes`` requires; everything
    past ``sig_bytes`` is meaningless until :meth:`clamp` zeroes it.
    """

    def __init__(self, words: typing.Optional[typing.Iterable[int]] = None, sig_bytes: typing.Optional[int] = None):
        if words is None:
            words = ()
        self.words = np.array(words, dtype=WORD).reshape(-1)
        self.sig_bytes = len(self.words) * 4 if sig_bytes is None else int(sig_bytes)

    @classmethod
    def from_bytes(cls, data: typing.Union[bytes, bytearray, memoryview]) -> "ByteBuffer":
        data = bytes(data)
        return cls(pack_words(data), len(data))

    @classmethod
    def random(cls, n_bytes: int, source: typing.Optional[RandomSource] = None) -> "ByteBuffer":
        source = source or default_random_source()
        return cls.from_bytes(source.random_bytes(n_bytes))

    def to_bytes(self) -> bytes:
        return self.words.astype(BIG_ENDIAN_WORD).tobytes()[:self.sig_bytes]

    def to_string(self, encoder=None) -> str:
        return (encoder or Hex).stringify(self)

    def concat(self, other: "ByteBuffer") -> "ByteBuffer":
        this_sig_bytes = self.sig_bytes
        that_sig_bytes = other.sig_bytes
        self.clamp()
        if this_sig_bytes % 4:
            # unaligned tail: every incoming byte shifts across a word boundary
            self.words = pack_words(self.to_bytes() + other.to_bytes())
        else:
            n_words = (that_sig_bytes + 3) // 4
            self.words = np.concatenate((self.words, other.words[:n_words].astype(WORD)))
        self.sig_bytes += that_sig_bytes
        return self

    def clamp(self) -> "ByteBuffer":
        n_words = (self.sig_bytes + 3) // 4
        words = self.words[:n_words].copy()
        if len(words) < n_words:
            words = np.concatenate((words, np.zeros(n_words - len(words), dtype=WORD)))
        partial = self.sig_bytes % 4
        if partial:
            words[-1] &= WORD((0xFFFFFFFF << (32 - partial * 8)) & 0xFFFFFFFF)
        self.words = words
        return self

    def clone(self) -> "ByteBuffer":
        return ByteBuffer(self.words.copy(), self.sig_bytes)

    def __len__(self) -> int:
        return self.sig_bytes

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __eq__(self, other) -> bool:
        if not isinstance(other, ByteBuffer):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    __hash__ = None

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"ByteBuffer({self.to_string()!r}, sig_bytes={self.sig_bytes})"


class Hex:
    @staticmethod
    def stringify(buffer: ByteBuffer) -> str:
        return buffer.to_bytes().hex()

    @staticmethod
    def parse(text: str) -> ByteBuffer:
        try:
            return ByteBuffer.from_bytes(bytes.fromhex(text))
        except ValueError as exc:
            raise MalformedText(f"Invalid hex text: {exc}") from exc


class Latin1:
    @staticmethod
    def stringify(buffer: ByteBuffer) -> str:
        return buffer.to_bytes().decode("latin-1")

    @staticmethod
    def parse(text: str) -> ByteBuffer:
        return ByteBuffer.from_bytes(bytes(ord(ch) & 0xFF for ch in text))


class Utf8:
    @staticmethod
    def stringify(buffer: ByteBuffer) -> str:
        try:
            return buffer.to_bytes().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedText("Malformed UTF-8 data") from exc

    @staticmethod
    def parse(text: str) -> ByteBuffer:
        try:
            return ByteBuffer.from_bytes(text.encode("utf-8"))
        except UnicodeEncodeError as exc:
            raise MalformedText("Text cannot be encoded as UTF-8") from exc


class Base64:
    @staticmethod
    def stringify(buffer: ByteBuffer) -> str:
        return base64.b64encode(buffer.to_bytes()).decode("ascii")

    @staticmethod
    def parse(text: str) -> ByteBuffer:
        try:
            return ByteBuffer.from_bytes(base64.b64decode(text))
        except ValueError as exc:
            raise MalformedText(f"Invalid base64 text: {exc}") from exc


def as_buffer(data: typing.Union[str, bytes, bytearray, memoryview, ByteBuffer]) -> ByteBuffer:
    """Coerce text (UTF-8) or bytes-like input to a ByteBuffer."""
    if isinstance(data, ByteBuffer):
        return data
    if isinstance(data, str):
        return Utf8.parse(data)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return ByteBuffer.from_bytes(data)
    raise TypeError(f"Unsupported data type: {type(data)!r}")


__all__ = [
    "Base64",
    "ByteBuffer",
    "Hex",
    "Latin1",
    "Utf8",
    "as_buffer",
    "pack_words",
]
