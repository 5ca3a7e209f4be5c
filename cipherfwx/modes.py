"""Block cipher chaining modes.

A mode is a class; ``Mode.create_encryptor(cipher, iv)`` and
``Mode.create_decryptor(cipher, iv)`` return a per-session object whose
``process_block(words, offset)`` transforms one block of ``cipher.block_size``
words in place.
"""

import copy
import typing

import numpy as np

from .buffer import WORD
from .errors import UnsupportedConfiguration


class BlockCipherMode:
    name = "abstract"
    Encryptor: typing.ClassVar[typing.Optional[type]] = None
    Decryptor: typing.ClassVar[typing.Optional[type]] = None

    def __init__(self, cipher, iv: typing.Optional[np.ndarray]):
        self.init(cipher, iv)

    @classmethod
    def create_encryptor(cls, cipher, iv: typing.Optional[np.ndarray]) -> "BlockCipherMode":
        return cls.Encryptor(cipher, iv)

    @classmethod
    def create_decryptor(cls, cipher, iv: typing.Optional[np.ndarray]) -> "BlockCipherMode":
        return cls.Decryptor(cipher, iv)

    def init(self, cipher, iv: typing.Optional[np.ndarray]) -> None:
        self._cipher = cipher
        self._iv = None if iv is None else np.array(iv, dtype=WORD)
        self._prev_block: typing.Optional[np.ndarray] = None

    def process_block(self, words: np.ndarray, offset: int) -> None:
        raise NotImplementedError

    def clone(self, cipher) -> "BlockCipherMode":
        clone = copy.copy(self)
        clone._cipher = cipher
        if self._iv is not None:
            clone._iv = self._iv.copy()
        if self._prev_block is not None:
            clone._prev_block = self._prev_block.copy()
        return clone


class CBC(BlockCipherMode):
    """Cipher block chaining: each block is mixed with the previous ciphertext block."""

    name = "cbc"

    def init(self, cipher, iv: typing.Optional[np.ndarray]) -> None:
        block_size = cipher.block_size
        if iv is None or len(iv) < block_size:
            raise UnsupportedConfiguration(f"CBC mode requires an IV of {block_size * 4} bytes")
        super().init(cipher, np.asarray(iv)[:block_size])

    def _xor_block(self, words: np.ndarray, offset: int, block_size: int) -> None:
        if self._iv is not None:
            block = self._iv
            # the IV only ever seeds the first block
            self._iv = None
        else:
            block = self._prev_block
        words[offset:offset + block_size] ^= block


class CBCEncryptor(CBC):
    def process_block(self, words: np.ndarray, offset: int) -> None:
        cipher = self._cipher
        block_size = cipher.block_size
        self._xor_block(words, offset, block_size)
        cipher.encrypt_block(words, offset)
        self._prev_block = words[offset:offset + block_size].copy()


class CBCDecryptor(CBC):
    def process_block(self, words: np.ndarray, offset: int) -> None:
        cipher = self._cipher
        block_size = cipher.block_size
        this_block = words[offset:offset + block_size].copy()
        cipher.decrypt_block(words, offset)
        self._xor_block(words, offset, block_size)
        self._prev_block = this_block


CBC.Encryptor = CBCEncryptor
CBC.Decryptor = CBCDecryptor


class ECB(BlockCipherMode):
    """Electronic codebook: blocks are transformed independently, the IV is ignored."""

    name = "ecb"


class ECBEncryptor(ECB):
    def process_block(self, words: np.ndarray, offset: int) -> None:
        self._cipher.encrypt_block(words, offset)


class ECBDecryptor(ECB):
    def process_block(self, words: np.ndarray, offset: int) -> None:
        self._cipher.decrypt_block(words, offset)


ECB.Encryptor = ECBEncryptor
ECB.Decryptor = ECBDecryptor

MODES = {
    CBC.name: CBC,
    ECB.name: ECB,
}


__all__ = ["BlockCipherMode", "CBC", "ECB", "MODES"]
