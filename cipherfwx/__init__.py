"""cipherfwx: streaming symmetric ciphers with OpenSSL-compatible containers."""

from .algorithms import AES, ALGORITHMS, ChaCha20
from .buffer import Base64, ByteBuffer, Hex, Latin1, Utf8
from .cipher import BlockCipher, Cipher, StreamCipher
from .config import CipherConfig
from .entropy import RandomSource, default_random_source, resolve_random_source, set_default_random_source
from .errors import (
    CipherError,
    InsufficientData,
    MalformedText,
    PaddingWarning,
    RandomSourceUnavailable,
    UnsupportedConfiguration,
)
from .formats import CipherResult, OpenSSLFormat
from .hashers import MD5, SHA1, SHA256, SHA512
from .kdf import EvpKDF, OpenSSL, OpenSSLKdf
from .modes import CBC, ECB
from .padding import Pkcs7
from .serializable import (
    CipherHelper,
    Password,
    PasswordBasedCipher,
    RawKey,
    SerializableCipher,
    create_helper,
)
from .version import __version__

aes = create_helper(AES)
chacha20 = create_helper(ChaCha20)


def encrypt(message, key, cfg=None, algorithm=AES) -> CipherResult:
    return create_helper(algorithm).encrypt(message, key, cfg)


def decrypt(ciphertext, key, cfg=None, algorithm=AES) -> ByteBuffer:
    return create_helper(algorithm).decrypt(ciphertext, key, cfg)


__all__ = [
    "AES",
    "ALGORITHMS",
    "Base64",
    "BlockCipher",
    "ByteBuffer",
    "CBC",
    "ChaCha20",
    "Cipher",
    "CipherConfig",
    "CipherError",
    "CipherHelper",
    "CipherResult",
    "ECB",
    "EvpKDF",
    "Hex",
    "InsufficientData",
    "Latin1",
    "MD5",
    "MalformedText",
    "OpenSSL",
    "OpenSSLFormat",
    "OpenSSLKdf",
    "PaddingWarning",
    "Password",
    "PasswordBasedCipher",
    "Pkcs7",
    "RandomSource",
    "RandomSourceUnavailable",
    "RawKey",
    "SHA1",
    "SHA256",
    "SHA512",
    "SerializableCipher",
    "StreamCipher",
    "UnsupportedConfiguration",
    "Utf8",
    "__version__",
    "aes",
    "chacha20",
    "create_helper",
    "decrypt",
    "default_random_source",
    "encrypt",
    "resolve_random_source",
    "set_default_random_source",
]
