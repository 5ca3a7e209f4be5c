"""Streaming accumulate/emit engine shared by ciphers."""

import copy
import math

import numpy as np

from .buffer import WORD, ByteBuffer, as_buffer


class BufferedBlockProcessor:
    """Buffers appended data and hands whole blocks to ``_do_process_block``.

    ``block_size`` is measured in 32-bit words. ``_min_buffer_size`` blocks
    are held back on non-flushing passes so a subclass can still see them at
    finalization (a decryptor needs its last block for unpadding).
    """

    block_size = 4
    _min_buffer_size = 0

    def reset(self) -> None:
        self._data = ByteBuffer()
        self._n_data_bytes = 0

    def _append(self, data) -> None:
        data = as_buffer(data)
        self._data.concat(data)
        self._n_data_bytes += data.sig_bytes

    def _process(self, flush: bool = False) -> ByteBuffer:
        data = self._data
        block_size = self.block_size
        block_size_bytes = block_size * 4

        if flush:
            n_blocks_ready = math.ceil(data.sig_bytes / block_size_bytes)
        else:
            n_blocks_ready = max(data.sig_bytes // block_size_bytes - self._min_buffer_size, 0)

        n_words_ready = n_blocks_ready * block_size
        n_bytes_ready = min(n_words_ready * 4, data.sig_bytes)
        if not n_words_ready:
            return ByteBuffer()

        words = data.words
        if len(words) < n_words_ready:
            words = np.concatenate((words, np.zeros(n_words_ready - len(words), dtype=WORD)))
        for offset in range(0, n_words_ready, block_size):
            self._do_process_block(words, offset)

        processed = words[:n_words_ready].copy()
        data.words = words[n_words_ready:].copy()
        data.sig_bytes -= n_bytes_ready
        return ByteBuffer(processed, n_bytes_ready)

    def _do_process_block(self, words: np.ndarray, offset: int) -> None:
        raise NotImplementedError

    def clone(self):
        clone = copy.copy(self)
        clone._data = self._data.clone()
        return clone


__all__ = ["BufferedBlockProcessor"]
