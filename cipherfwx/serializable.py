"""Raw-key and password-based encryption flows producing serializable results."""

import dataclasses
import typing

from .buffer import ByteBuffer, as_buffer
from .cipher import CipherFactory
from .config import CipherConfig
from .entropy import RandomSource
from .formats import CipherResult, OpenSSLFormat
from .kdf import DerivedKeyMaterial, OpenSSL


@dataclasses.dataclass(frozen=True)
class RawKey:
    key: ByteBuffer


@dataclasses.dataclass(frozen=True)
class Password:
    text: str


KeyMaterial = typing.Union[RawKey, Password]


def as_key_material(key) -> KeyMaterial:
    """Text is a password; bytes or a ByteBuffer are a raw key."""
    if isinstance(key, (RawKey, Password)):
        return key
    if isinstance(key, str):
        return Password(key)
    if isinstance(key, (ByteBuffer, bytes, bytearray, memoryview)):
        return RawKey(as_buffer(key))
    raise TypeError(f"Unsupported key type: {type(key)!r}")


class SerializableCipher:
    """Encrypts with a caller-supplied key and wraps the output in a CipherResult."""

    cfg = CipherConfig(format=OpenSSLFormat)

    def __init__(self, random_source: typing.Optional[RandomSource] = None):
        self.random_source = random_source

    def encrypt(self, cipher: CipherFactory, message, key, cfg=None) -> CipherResult:
        cfg = self.cfg.extend(cfg)
        key = as_buffer(key)
        encryptor = cipher.create_encryptor(key, cfg)
        ciphertext = encryptor.finalize(message)
        cipher_cfg = encryptor.cfg
        return CipherResult(
            ciphertext=ciphertext,
            key=key.clone(),
            iv=None if cipher_cfg.iv is None else cipher_cfg.iv.clone(),
            algorithm=cipher,
            mode=cipher_cfg.mode,
            padding=cipher_cfg.padding,
            block_size=cipher.block_size,
            formatter=cfg.format,
        )

    def decrypt(self, cipher: CipherFactory, ciphertext, key, cfg=None) -> ByteBuffer:
        cfg = self.cfg.extend(cfg)
        ciphertext = self._parse(ciphertext, cfg.format)
        return cipher.create_decryptor(as_buffer(key), cfg).finalize(ciphertext.ciphertext)

    @staticmethod
    def _parse(ciphertext, format) -> CipherResult:
        if isinstance(ciphertext, str):
            return format.parse(ciphertext)
        if isinstance(ciphertext, CipherResult):
            return ciphertext
        return CipherResult(ciphertext=as_buffer(ciphertext))


class PasswordBasedCipher(SerializableCipher):
    """Derives key and IV from a password and salt before delegating to SerializableCipher."""

    cfg = SerializableCipher.cfg.extend(CipherConfig(kdf=OpenSSL))

    def _derive(self, cipher: CipherFactory, password: str, cfg: CipherConfig, salt) -> DerivedKeyMaterial:
        return cfg.kdf.execute(
            password,
            cfg.key_size or cipher.key_size,
            cfg.iv_size or cipher.iv_size,
            salt,
            hasher=cfg.hasher,
            iterations=cfg.iterations,
            random_source=self.random_source,
        )

    def encrypt(self, cipher: CipherFactory, message, password, cfg=None) -> CipherResult:
        cfg = self.cfg.extend(cfg)
        derived = self._derive(cipher, password, cfg, cfg.salt)
        cfg = cfg.extend(CipherConfig(iv=derived.iv))
        result = super().encrypt(cipher, message, derived.key, cfg)
        return dataclasses.replace(result, key=derived.key, iv=derived.iv, salt=derived.salt)

    def decrypt(self, cipher: CipherFactory, ciphertext, password, cfg=None) -> ByteBuffer:
        cfg = self.cfg.extend(cfg)
        ciphertext = self._parse(ciphertext, cfg.format)
        salt = ciphertext.salt if ciphertext.salt is not None else cfg.salt
        derived = self._derive(cipher, password, cfg, salt)
        cfg = cfg.extend(CipherConfig(iv=derived.iv))
        return super().decrypt(cipher, ciphertext, derived.key, cfg)


class CipherHelper:
    """Single encrypt/decrypt entry point for one algorithm.

    A :class:`Password` (or plain text) key selects the password-based flow,
    a :class:`RawKey` (or bytes / ByteBuffer) the direct one.
    """

    def __init__(self, cipher: CipherFactory, random_source: typing.Optional[RandomSource] = None):
        self.cipher = cipher
        self._serializable = SerializableCipher(random_source)
        self._password_based = PasswordBasedCipher(random_source)

    def _select(self, key) -> typing.Tuple[SerializableCipher, typing.Any]:
        material = as_key_material(key)
        if isinstance(material, Password):
            return self._password_based, material.text
        return self._serializable, material.key

    def encrypt(self, message, key, cfg=None) -> CipherResult:
        strategy, key = self._select(key)
        return strategy.encrypt(self.cipher, message, key, cfg)

    def decrypt(self, ciphertext, key, cfg=None) -> ByteBuffer:
        strategy, key = self._select(key)
        return strategy.decrypt(self.cipher, ciphertext, key, cfg)


def create_helper(cipher: CipherFactory, random_source: typing.Optional[RandomSource] = None) -> CipherHelper:
    return CipherHelper(cipher, random_source)


__all__ = [
    "CipherHelper",
    "KeyMaterial",
    "Password",
    "PasswordBasedCipher",
    "RawKey",
    "SerializableCipher",
    "as_key_material",
    "create_helper",
]
