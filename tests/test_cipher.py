import sys
import unittest
import warnings
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

try:
    from cryptography.hazmat.primitives import padding as reference_padding
    from cryptography.hazmat.primitives.ciphers import Cipher as ReferenceCipher
    from cryptography.hazmat.primitives.ciphers import algorithms, modes

    from cipherfwx.algorithms import AES, ChaCha20
    from cipherfwx.buffer import ByteBuffer, Utf8
    from cipherfwx.errors import InsufficientData, UnsupportedConfiguration
    from cipherfwx.modes import CBC, ECB
except ModuleNotFoundError as exc:  # pragma: no cover - dependency missing
    AES = None
    _IMPORT_ERROR = exc
else:
    _IMPORT_ERROR = None


KEY = bytes(range(16))
IV = bytes(range(100, 116))
BLOCK = 16
LENGTHS = (0, 1, BLOCK - 1, BLOCK, BLOCK + 1, 10 * BLOCK)


def _message(length: int) -> bytes:
    return bytes((i * 7 + 3) % 256 for i in range(length))


def _reference_encrypt(key: bytes, mode, data: bytes) -> bytes:
    padder = reference_padding.PKCS7(128).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = ReferenceCipher(algorithms.AES(key), mode).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


@unittest.skipIf(AES is None, f"dependency unavailable: {_IMPORT_ERROR}")
class AESBlockCipherTests(unittest.TestCase):
    """AES through the CBC/ECB state machines, checked against cryptography's own modes."""

    def _encryptor(self, cfg=None):
        return AES.create_encryptor(ByteBuffer.from_bytes(KEY), cfg or {"iv": IV})

    def _decryptor(self, cfg=None):
        return AES.create_decryptor(ByteBuffer.from_bytes(KEY), cfg or {"iv": IV})

    def test_cbc_matches_reference(self):
        for length in LENGTHS:
            with self.subTest(length=length):
                data = _message(length)
                ciphertext = self._encryptor().finalize(data).to_bytes()
                self.assertEqual(ciphertext, _reference_encrypt(KEY, modes.CBC(IV), data))

    def test_cbc_roundtrip(self):
        for length in LENGTHS:
            with self.subTest(length=length):
                data = _message(length)
                ciphertext = self._encryptor().finalize(data)
                plaintext = self._decryptor().finalize(ciphertext)
                self.assertEqual(plaintext.to_bytes(), data)

    def test_ecb_matches_reference(self):
        data = _message(3 * BLOCK + 5)
        ciphertext = self._encryptor({"mode": ECB}).finalize(data).to_bytes()
        self.assertEqual(ciphertext, _reference_encrypt(KEY, modes.ECB(), data))
        plaintext = self._decryptor({"mode": "ecb"}).finalize(ByteBuffer.from_bytes(ciphertext))
        self.assertEqual(plaintext.to_bytes(), data)

    def test_aes_256_key(self):
        key = bytes(range(32))
        data = _message(40)
        ciphertext = AES.create_encryptor(key, {"iv": IV}).finalize(data).to_bytes()
        self.assertEqual(ciphertext, _reference_encrypt(key, modes.CBC(IV), data))

    def test_cbc_is_deterministic(self):
        data = _message(5 * BLOCK)
        first = self._encryptor().finalize(data)
        second = self._encryptor().finalize(data)
        self.assertEqual(first, second)

    def test_cbc_change_propagates_forward_only(self):
        data = bytearray(_message(5 * BLOCK))
        original = self._encryptor().finalize(bytes(data)).to_bytes()
        data[2 * BLOCK + 3] ^= 0x80
        changed = self._encryptor().finalize(bytes(data)).to_bytes()
        for index in range(6):
            block_a = original[index * BLOCK:(index + 1) * BLOCK]
            block_b = changed[index * BLOCK:(index + 1) * BLOCK]
            if index < 2:
                self.assertEqual(block_a, block_b, f"block {index} should be untouched")
            else:
                self.assertNotEqual(block_a, block_b, f"block {index} should differ")

    def test_streaming_matches_single_finalize(self):
        data = _message(3 * BLOCK + 7)
        expected = self._encryptor().finalize(data).to_bytes()

        encryptor = self._encryptor()
        streamed = ByteBuffer()
        for i in range(len(data)):
            streamed.concat(encryptor.process(data[i:i + 1]))
        streamed.concat(encryptor.finalize())
        self.assertEqual(streamed.to_bytes(), expected)

        encryptor = self._encryptor()
        chunked = ByteBuffer()
        for start in range(0, len(data), 5):
            chunked.concat(encryptor.process(data[start:start + 5]))
        chunked.concat(encryptor.finalize())
        self.assertEqual(chunked.to_bytes(), expected)

    def test_streaming_decrypt_keeps_last_block(self):
        data = _message(2 * BLOCK)
        ciphertext = self._encryptor().finalize(data).to_bytes()
        decryptor = self._decryptor()
        first = decryptor.process(ciphertext[:BLOCK])
        self.assertEqual(first.sig_bytes, 0)
        second = decryptor.process(ciphertext[BLOCK:])
        self.assertEqual(second.sig_bytes, 2 * BLOCK)
        tail = decryptor.finalize()
        self.assertEqual(tail.sig_bytes, 0)
        self.assertEqual(second.to_bytes() + tail.to_bytes(), data)

    def test_process_emits_nothing_until_a_block_is_ready(self):
        encryptor = self._encryptor()
        self.assertEqual(encryptor.process(b"short").sig_bytes, 0)
        self.assertEqual(encryptor.process(b"-enough-to-fill").sig_bytes, BLOCK)

    def test_decrypt_finalize_needs_a_full_block(self):
        with self.assertRaises(InsufficientData):
            self._decryptor().finalize(b"too short")
        with self.assertRaises(InsufficientData):
            self._decryptor().finalize()

    def test_cbc_requires_iv(self):
        with self.assertRaises(UnsupportedConfiguration):
            AES.create_encryptor(KEY)
        with self.assertRaises(UnsupportedConfiguration):
            AES.create_encryptor(KEY, {"iv": b"short"})

    def test_invalid_key_size(self):
        with self.assertRaises(UnsupportedConfiguration):
            AES.create_encryptor(b"seven b", {"iv": IV})

    def test_unknown_mode_name(self):
        with self.assertRaises(UnsupportedConfiguration):
            AES.create_encryptor(KEY, {"iv": IV, "mode": "ofb"})

    def test_unknown_option(self):
        with self.assertRaises(UnsupportedConfiguration):
            AES.create_encryptor(KEY, {"iv": IV, "rounds": 14})

    def test_defaults_are_cbc_and_pkcs7(self):
        encryptor = self._encryptor()
        self.assertIs(encryptor.cfg.mode, CBC)
        self.assertEqual(encryptor.cfg.padding.name, "pkcs7")
        self.assertIsNone(AES.cfg.iv)

    def test_reset_reuses_mode_state(self):
        decryptor = self._decryptor()
        mode_state = decryptor._mode
        decryptor.reset()
        self.assertIs(decryptor._mode, mode_state)
        data = _message(BLOCK + 1)
        ciphertext = self._encryptor().finalize(data)
        self.assertEqual(decryptor.finalize(ciphertext).to_bytes(), data)

    def test_reset_restarts_the_session(self):
        data = _message(2 * BLOCK)
        encryptor = self._encryptor()
        encryptor.process(data[:BLOCK + 3])
        encryptor.reset()
        self.assertEqual(encryptor.finalize(data), self._encryptor().finalize(data))

    def test_clone_forks_the_session(self):
        data = _message(4 * BLOCK)
        expected = self._encryptor().finalize(data).to_bytes()

        encryptor = self._encryptor()
        head = encryptor.process(data[:2 * BLOCK + 5]).to_bytes()
        fork = encryptor.clone()
        tail = encryptor.finalize(data[2 * BLOCK + 5:]).to_bytes()
        fork_tail = fork.finalize(data[2 * BLOCK + 5:]).to_bytes()
        self.assertEqual(head + tail, expected)
        self.assertEqual(head + fork_tail, expected)

        diverged = encryptor.clone()
        self.assertIsNot(diverged._mode, encryptor._mode)
        self.assertIs(diverged._mode._cipher, diverged)

    def test_hello_world_zero_iv_with_corruption(self):
        key = Utf8.parse("0123456789abcdef")
        cfg = {"iv": bytes(16)}
        ciphertext = AES.create_encryptor(key, cfg).finalize("hello world")
        self.assertEqual(ciphertext.sig_bytes, 16)
        plaintext = AES.create_decryptor(key, cfg).finalize(ciphertext.clone())
        self.assertEqual(Utf8.stringify(plaintext), "hello world")

        corrupted = bytearray(ciphertext.to_bytes())
        corrupted[0] ^= 0x01
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            garbled = AES.create_decryptor(key, cfg).finalize(bytes(corrupted))
        self.assertNotEqual(garbled.to_bytes(), b"hello world")


@unittest.skipIf(AES is None, f"dependency unavailable: {_IMPORT_ERROR}")
class ChaCha20StreamCipherTests(unittest.TestCase):
    KEY = bytes(range(32))
    NONCE = bytes(range(16))

    def _reference(self, data: bytes) -> bytes:
        encryptor = ReferenceCipher(algorithms.ChaCha20(self.KEY, self.NONCE), mode=None).encryptor()
        return encryptor.update(data)

    def test_matches_reference(self):
        for length in (0, 1, 3, 4, 5, 63, 64, 65, 200):
            with self.subTest(length=length):
                data = _message(length)
                ciphertext = ChaCha20.create_encryptor(self.KEY, {"iv": self.NONCE}).finalize(data)
                self.assertEqual(ciphertext.to_bytes(), self._reference(data))
                plaintext = ChaCha20.create_decryptor(self.KEY, {"iv": self.NONCE}).finalize(ciphertext)
                self.assertEqual(plaintext.to_bytes(), data)

    def test_streaming_and_clone(self):
        data = _message(70)
        encryptor = ChaCha20.create_encryptor(self.KEY, {"iv": self.NONCE})
        head = encryptor.process(data[:33]).to_bytes()
        self.assertEqual(len(head), 32)
        fork = encryptor.clone()
        tail = encryptor.finalize(data[33:]).to_bytes()
        fork_tail = fork.finalize(data[33:]).to_bytes()
        self.assertEqual(head + tail, self._reference(data))
        self.assertEqual(fork_tail, tail)

    def test_requires_nonce(self):
        with self.assertRaises(UnsupportedConfiguration):
            ChaCha20.create_encryptor(self.KEY)


if __name__ == "__main__":
    unittest.main()
