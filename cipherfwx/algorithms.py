"""Concrete ciphers adapting ``cryptography`` primitives to the word-block contract."""

import numpy as np
from cryptography.hazmat.primitives.ciphers import Cipher as PrimitiveCipher
from cryptography.hazmat.primitives.ciphers import algorithms, modes

from .buffer import BIG_ENDIAN_WORD
from .cipher import BlockCipher, StreamCipher
from .errors import UnsupportedConfiguration


def _transform_words(ctx, words: np.ndarray, offset: int, size: int) -> None:
    end = offset + size
    block = words[offset:end].astype(BIG_ENDIAN_WORD).tobytes()
    words[offset:end] = np.frombuffer(ctx.update(block), dtype=BIG_ENDIAN_WORD)


class AES(BlockCipher):
    """AES block primitive; the key length (16, 24 or 32 bytes) picks the variant.

    Password-derived keys are 256-bit.
    """

    name = "aes"
    key_size = 256 // 32
    iv_size = 128 // 32
    block_size = 128 // 32

    def _do_reset(self) -> None:
        key_bytes = self._key.to_bytes()
        try:
            primitive = PrimitiveCipher(algorithms.AES(key_bytes), modes.ECB())
        except ValueError as exc:
            raise UnsupportedConfiguration(f"Invalid AES key size ({len(key_bytes) * 8} bits)") from exc
        # ECB contexts fed whole blocks keep no state between calls
        self._block_encryptor = primitive.encryptor()
        self._block_decryptor = primitive.decryptor()

    def encrypt_block(self, words: np.ndarray, offset: int) -> None:
        _transform_words(self._block_encryptor, words, offset, self.block_size)

    def decrypt_block(self, words: np.ndarray, offset: int) -> None:
        _transform_words(self._block_decryptor, words, offset, self.block_size)


class ChaCha20(StreamCipher):
    """ChaCha20 keystream applied one word at a time.

    The IV is the 16-byte ``cryptography`` nonce (little-endian block counter
    followed by the 96-bit nonce).
    """

    name = "chacha20"
    key_size = 256 // 32
    iv_size = 128 // 32

    def _do_reset(self) -> None:
        key_bytes = self._key.to_bytes()
        iv = self.cfg.iv
        if iv is None or iv.sig_bytes != 16:
            raise UnsupportedConfiguration("ChaCha20 requires a 16-byte IV")
        try:
            self._primitive = PrimitiveCipher(algorithms.ChaCha20(key_bytes, iv.to_bytes()), mode=None)
        except ValueError as exc:
            raise UnsupportedConfiguration(f"Invalid ChaCha20 key size ({len(key_bytes) * 8} bits)") from exc
        self._keystream = self._primitive.encryptor()
        self._keystream_offset = 0

    def _do_process_block(self, words: np.ndarray, offset: int) -> None:
        _transform_words(self._keystream, words, offset, self.block_size)
        self._keystream_offset += self.block_size * 4

    def clone(self) -> "ChaCha20":
        clone = super().clone()
        clone._keystream = self._primitive.encryptor()
        clone._keystream.update(bytes(self._keystream_offset))
        return clone


ALGORITHMS = {
    AES.name: AES,
    ChaCha20.name: ChaCha20,
}


__all__ = ["AES", "ALGORITHMS", "ChaCha20"]
