"""Block-alignment padding schemes."""

import warnings
from abc import ABC, abstractmethod

from .buffer import ByteBuffer
from .errors import PaddingWarning


class PaddingScheme(ABC):
    name = "abstract"

    @abstractmethod
    def pad(self, data: ByteBuffer, block_size: int) -> None:
        """Extend ``data`` in place to a multiple of ``block_size`` words."""

    @abstractmethod
    def unpad(self, data: ByteBuffer) -> None:
        """Strip the padding added by :meth:`pad` in place."""

    def __repr__(self) -> str:
        return f"<padding {self.name}>"


class Pkcs7Padding(PaddingScheme):
    """PKCS#7: append N bytes of value N, 1 <= N <= block size in bytes.

    Unpadding trusts the last byte and does not check the other padding bytes,
    so a wrong key or corrupted ciphertext yields truncated garbage rather
    than an error.
    """

    name = "pkcs7"

    def pad(self, data: ByteBuffer, block_size: int) -> None:
        block_size_bytes = block_size * 4
        n_padding_bytes = block_size_bytes - (data.sig_bytes % block_size_bytes)
        padding_word = (
            (n_padding_bytes << 24)
            | (n_padding_bytes << 16)
            | (n_padding_bytes << 8)
            | n_padding_bytes
        )
        padding_words = [padding_word] * ((n_padding_bytes + 3) // 4)
        data.concat(ByteBuffer(padding_words, n_padding_bytes))

    def unpad(self, data: ByteBuffer) -> None:
        if not data.sig_bytes:
            return
        last = data.sig_bytes - 1
        n_padding_bytes = (int(data.words[last >> 2]) >> (24 - (last % 4) * 8)) & 0xFF
        if n_padding_bytes > data.sig_bytes:
            warnings.warn(
                f"Padding length {n_padding_bytes} exceeds the {data.sig_bytes} decrypted bytes; "
                "wrong key or corrupted ciphertext",
                PaddingWarning,
                stacklevel=3,
            )
            n_padding_bytes = data.sig_bytes
        data.sig_bytes -= n_padding_bytes


Pkcs7 = Pkcs7Padding()

PADDINGS = {
    Pkcs7.name: Pkcs7,
}


__all__ = ["PADDINGS", "PaddingScheme", "Pkcs7", "Pkcs7Padding"]
