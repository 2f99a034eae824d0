from dataclasses import dataclass, fields
from typing import NamedTuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from query_gateway.core.errors import ConfigurationError, DecryptionError


KEY_SIZE = 32  # AES-256
IV_SIZE = 16  # one AES block

# ---------------------------------------------------------------------------
# Key material
# ---------------------------------------------------------------------------


class CredentialKey(NamedTuple):
    key: str | None
    iv: str | None


@dataclass(frozen=True)
class CredentialKeyring:
    """One key/IV pair per encrypted DatabaseProfile field."""

    host: CredentialKey
    database: CredentialKey
    username: CredentialKey
    password: CredentialKey
    connect_string: CredentialKey

    def get(self, field: str) -> CredentialKey:
        if field not in self.field_names():
            raise ConfigurationError(field, "unknown credential field")
        return getattr(self, field)

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def missing_fields(self) -> list[str]:
        return [
            name
            for name in self.field_names()
            if not (getattr(self, name).key and getattr(self, name).iv)
        ]


def _key_bytes(field: str, key: str | None, iv: str | None) -> tuple[bytes, bytes]:
    if not key or not iv:
        raise ConfigurationError(field, "encryption key or IV is not set")
    key_b = key.encode("utf-8")
    iv_b = iv.encode("utf-8")
    if len(key_b) != KEY_SIZE:
        raise ConfigurationError(field, f"key must be {KEY_SIZE} bytes")
    if len(iv_b) != IV_SIZE:
        raise ConfigurationError(field, f"IV must be {IV_SIZE} bytes")
    return key_b, iv_b


# ---------------------------------------------------------------------------
# AES-256-CBC (PKCS#7, hex ciphertext)
# ---------------------------------------------------------------------------


def encrypt_to_aes256_cbc(
    key: str | None, iv: str | None, plain: str, *, field: str = "value"
) -> str:
    """Encrypt *plain* and return the hex ciphertext stored in the metadata DB."""
    key_b, iv_b = _key_bytes(field, key, iv)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    data = padder.update(plain.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key_b), modes.CBC(iv_b)).encryptor()
    return (encryptor.update(data) + encryptor.finalize()).hex()


def decrypt_from_aes256_cbc(
    key: str | None,
    iv: str | None,
    ciphertext: str | bytes | memoryview,
    *,
    field: str = "value",
) -> str:
    """Decrypt a hex ciphertext (text, or the bytes column holding that text).

    Raises ``ConfigurationError`` for a missing/invalid key or IV and
    ``DecryptionError`` for malformed ciphertext or a wrong key.
    """
    key_b, iv_b = _key_bytes(field, key, iv)
    try:
        if isinstance(ciphertext, memoryview):
            ciphertext = ciphertext.tobytes()
        text = (
            ciphertext.decode("utf-8")
            if isinstance(ciphertext, bytes)
            else ciphertext
        )
        raw = bytes.fromhex(text.strip())
    except (UnicodeDecodeError, ValueError, AttributeError) as e:
        raise DecryptionError(field, "ciphertext is not hex text") from e
    if not raw or len(raw) % IV_SIZE:
        raise DecryptionError(field, "ciphertext length is not a multiple of the block size")

    decryptor = Cipher(algorithms.AES(key_b), modes.CBC(iv_b)).decryptor()
    padded = decryptor.update(raw) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        data = unpadder.update(padded) + unpadder.finalize()
        return data.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        # Bad padding almost always means the wrong key/IV.
        raise DecryptionError(field, "invalid padding or wrong key") from e


class CredentialCodec:
    """Decrypts stored connection secrets with the keyring assembled at startup.

    Plaintext is returned to the caller only; nothing here logs values.
    """

    def __init__(self, keyring: CredentialKeyring) -> None:
        self._keyring = keyring

    def decrypt(self, field: str, ciphertext: str | bytes | memoryview) -> str:
        pair = self._keyring.get(field)
        return decrypt_from_aes256_cbc(pair.key, pair.iv, ciphertext, field=field)

    def encrypt(self, field: str, plain: str) -> str:
        pair = self._keyring.get(field)
        return encrypt_to_aes256_cbc(pair.key, pair.iv, plain, field=field)
