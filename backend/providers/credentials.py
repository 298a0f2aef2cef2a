"""Provider credential encryption at rest (PBKDF2-SHA256 + AES-256-GCM)."""
import base64
import binascii
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

ENCRYPTION_KEY = os.getenv("INFERA_ENCRYPTION_KEY", "infera-dev-key-change-in-production")

PBKDF2_ITERATIONS = 100_000
SALT_LENGTH = 16
NONCE_LENGTH = 12
KEY_LENGTH = 32


class CredentialError(ValueError):
    """A stored credential could not be decrypted."""


def _derive_key(secret: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(secret.encode("utf-8"))


def encrypt_credential(plaintext: str, secret: Optional[str] = None) -> str:
    """Encrypt an API key. Returns urlsafe base64 of salt | nonce | ciphertext."""
    salt = os.urandom(SALT_LENGTH)
    nonce = os.urandom(NONCE_LENGTH)
    key = _derive_key(secret or ENCRYPTION_KEY, salt)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.urlsafe_b64encode(salt + nonce + ciphertext).decode("ascii")


def decrypt_credential(token: str, secret: Optional[str] = None) -> str:
    """Inverse of encrypt_credential. Raises CredentialError on a bad token or wrong secret."""
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as e:
        raise CredentialError("Credential is not valid base64") from e
    if len(raw) <= SALT_LENGTH + NONCE_LENGTH:
        raise CredentialError("Credential is too short")

    salt = raw[:SALT_LENGTH]
    nonce = raw[SALT_LENGTH:SALT_LENGTH + NONCE_LENGTH]
    ciphertext = raw[SALT_LENGTH + NONCE_LENGTH:]
    key = _derive_key(secret or ENCRYPTION_KEY, salt)
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None).decode("utf-8")
    except InvalidTag as e:
        raise CredentialError("Credential failed authentication") from e
