"""Exception taxonomy shared by every cipherfwx component."""


class CipherError(Exception):
    """Base class for cipherfwx failures."""


class RandomSourceUnavailable(CipherError, RuntimeError):
    """No cryptographically secure random source could be located."""


class MalformedText(CipherError, ValueError):
    """Text could not be decoded into bytes (or bytes into text)."""


class InsufficientData(CipherError, ValueError):
    """A decrypting cipher was finalized without a complete last block."""


class UnsupportedConfiguration(CipherError, ValueError):
    """Unknown mode, padding, kdf, hasher or format, or an unusable option value."""


class PaddingWarning(UserWarning):
    """Emitted when a padding length points outside the decrypted data."""


__all__ = [
    "CipherError",
    "InsufficientData",
    "MalformedText",
    "PaddingWarning",
    "RandomSourceUnavailable",
    "UnsupportedConfiguration",
]
