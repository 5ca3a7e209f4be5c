"""Cipher state machines built on the buffered block processor."""

import typing

import numpy as np

from .buffer import ByteBuffer, as_buffer
from .config import CipherConfig
from .errors import InsufficientData
from .modes import CBC
from .padding import Pkcs7
from .processor import BufferedBlockProcessor


class Cipher(BufferedBlockProcessor):
    """Base for ciphers whose direction is fixed when the session is created.

    Sizes (``key_size``, ``iv_size``, ``block_size``) are in 32-bit words.
    """

    ENC_XFORM_MODE = 1
    DEC_XFORM_MODE = 2

    name = "abstract"
    key_size = 128 // 32
    iv_size = 128 // 32
    cfg = CipherConfig()

    def __init__(self, xform_mode: int, key, cfg=None):
        self.cfg = type(self).cfg.extend(cfg)
        self._xform_mode = xform_mode
        self._key = as_buffer(key)
        self.reset()

    @classmethod
    def create_encryptor(cls, key, cfg=None) -> "Cipher":
        return cls(cls.ENC_XFORM_MODE, key, cfg)

    @classmethod
    def create_decryptor(cls, key, cfg=None) -> "Cipher":
        return cls(cls.DEC_XFORM_MODE, key, cfg)

    @property
    def encrypting(self) -> bool:
        return self._xform_mode == self.ENC_XFORM_MODE

    def reset(self) -> None:
        super().reset()
        self._do_reset()

    def process(self, data) -> ByteBuffer:
        """Feed ``data`` and return whatever whole blocks are ready."""
        self._append(data)
        return self._process()

    def finalize(self, data=None) -> ByteBuffer:
        """Feed optional last ``data`` and flush the session."""
        if data is not None:
            self._append(data)
        return self._do_finalize()

    def _do_reset(self) -> None:
        pass

    def _do_finalize(self) -> ByteBuffer:
        raise NotImplementedError


class StreamCipher(Cipher):
    block_size = 1

    def _do_finalize(self) -> ByteBuffer:
        return self._process(flush=True)


class BlockCipher(Cipher):
    """Composes a block primitive with a chaining mode and a padding scheme.

    Subclasses provide ``encrypt_block`` / ``decrypt_block`` operating in
    place on ``block_size`` words starting at ``offset``.
    """

    block_size = 128 // 32
    cfg = Cipher.cfg.extend(CipherConfig(mode=CBC, padding=Pkcs7))

    _mode = None
    _mode_creator = None

    def reset(self) -> None:
        super().reset()
        iv = self.cfg.iv
        mode = self.cfg.mode
        if self.encrypting:
            mode_creator = mode.create_encryptor
        else:
            mode_creator = mode.create_decryptor
            # keep the last block buffered so finalize can unpad it
            self._min_buffer_size = 1

        iv_words = None if iv is None else iv.words
        if self._mode is not None and self._mode_creator == mode_creator:
            self._mode.init(self, iv_words)
        else:
            self._mode = mode_creator(self, iv_words)
            self._mode_creator = mode_creator

    def _do_process_block(self, words: np.ndarray, offset: int) -> None:
        self._mode.process_block(words, offset)

    def _do_finalize(self) -> ByteBuffer:
        padding = self.cfg.padding
        if self.encrypting:
            padding.pad(self._data, self.block_size)
            assert self._data.sig_bytes % (self.block_size * 4) == 0
            return self._process(flush=True)

        if self._data.sig_bytes < self.block_size * 4:
            raise InsufficientData(
                f"Cannot finalize decryption with {self._data.sig_bytes} buffered bytes; "
                f"need at least one {self.block_size * 4}-byte block"
            )
        final_blocks = self._process(flush=True)
        padding.unpad(final_blocks)
        return final_blocks

    def encrypt_block(self, words: np.ndarray, offset: int) -> None:
        raise NotImplementedError

    def decrypt_block(self, words: np.ndarray, offset: int) -> None:
        raise NotImplementedError

    def clone(self) -> "BlockCipher":
        clone = super().clone()
        if self._mode is not None:
            clone._mode = self._mode.clone(clone)
        return clone


CipherFactory = typing.Type[Cipher]


__all__ = ["BlockCipher", "Cipher", "CipherFactory", "StreamCipher"]
