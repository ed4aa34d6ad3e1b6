"""
Password encryption and decryption of packed secret key material.

Uses AES-256-GCM with a PBKDF2-derived key. Salt and nonce are drawn fresh for
every container from an explicit random source.
"""

from __future__ import annotations

import enum
import logging
import os
from typing import Callable, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .container import (
    FORMAT_VERSION,
    NONCE_LEN,
    SALT_LEN,
    EncryptedContainer,
    decode_container,
)
from .crypto import KeyPair
from .errors import CredentialError
from .passphrase import derive_key, iterations_for_version
from .secret import unpack

logger = logging.getLogger(__name__)

RandomSource = Callable[[int], bytes]
Password = Union[str, bytes]


class AuthenticationError(CredentialError):
    """Raised for a wrong password or tampered container; the two are indistinguishable."""

    pass


def _draw(randbytes: RandomSource, n: int) -> bytes:
    value = randbytes(n)
    if not isinstance(value, (bytes, bytearray)) or len(value) != n:
        raise ValueError(f"random source did not return {n} bytes")
    return bytes(value)


def _check_password_type(password) -> None:
    if not isinstance(password, (str, bytes, bytearray)):
        raise TypeError(f"password must be str or bytes, not {type(password).__name__}")


def encrypt_secret(
    packed_secret: bytes,
    password: Password,
    *,
    randbytes: RandomSource = os.urandom,
) -> EncryptedContainer:
    """
    Seal packed secret material under a password.

    Steps: draw a 16-byte salt, derive an AES-256 key with PBKDF2-HMAC-SHA256,
    draw a 12-byte nonce, then AES-GCM encrypt. The container is assembled
    fully in memory before it is returned.

    Two calls with the same inputs give different containers because salt and
    nonce are fresh each time.

    Args:
        packed_secret: Output of secret.pack().
        password: Operator password; never stored.
        randbytes: Random source ``n -> bytes``. Each caller should pass its
            own source (or the default ``os.urandom``); never a seeded one
            outside of tests.

    Returns:
        EncryptedContainer ready for encode_container().

    Raises:
        TypeError: If the password is neither str nor bytes.
        ValueError: If the secret or the password is empty, or the random
            source misbehaves.
    """
    _check_password_type(password)
    if not packed_secret:
        raise ValueError("packed secret must be non-empty")
    if not password:
        raise ValueError("password must be non-empty")

    salt = _draw(randbytes, SALT_LEN)
    key = derive_key(password, salt, iterations=iterations_for_version(FORMAT_VERSION))
    nonce = _draw(randbytes, NONCE_LEN)

    ciphertext = AESGCM(key).encrypt(nonce, bytes(packed_secret), None)

    logger.debug(f"Sealed {len(packed_secret)} bytes of secret material")
    return EncryptedContainer(salt=salt, nonce=nonce, ciphertext=ciphertext)


def decrypt_secret(
    container: Union[EncryptedContainer, bytes],
    password: Password,
) -> bytes:
    """
    Recover packed secret material from a container.

    Raw bytes are framed first, so a short input fails with FormatError before
    any key derivation. The GCM tag is checked before plaintext is released.

    Args:
        container: EncryptedContainer or its raw bytes.
        password: Candidate password.

    Returns:
        The packed secret bytes.

    Raises:
        TypeError: If the password is neither str nor bytes.
        FormatError: If raw bytes are too short to be a container.
        AuthenticationError: If the password is wrong or the container was
            modified. The message is the same for both.
    """
    _check_password_type(password)
    if not isinstance(container, EncryptedContainer):
        container = decode_container(container)

    try:
        key = derive_key(
            password, container.salt, iterations=iterations_for_version(container.version)
        )
        plaintext = AESGCM(key).decrypt(container.nonce, container.ciphertext, None)
    except InvalidTag as e:
        logger.warning("Container decryption failed")
        raise AuthenticationError("decryption failed") from e

    return plaintext


class VaultState(enum.Enum):
    LOCKED = "locked"
    VERIFYING = "verifying"
    UNLOCKED = "unlocked"


class SecretVault:
    """
    Password recovery flow for a single container.

    ``LOCKED -> unlock(password) -> VERIFYING -> UNLOCKED | LOCKED``.
    There is no retry counter or lockout; retry policy belongs to the caller.
    """

    def __init__(self, container: Union[EncryptedContainer, bytes]):
        """
        Args:
            container: EncryptedContainer or raw container bytes.

        Raises:
            FormatError: If raw bytes cannot be framed.
        """
        if not isinstance(container, EncryptedContainer):
            container = decode_container(container)
        self.container = container
        self._state = VaultState.LOCKED
        self._keypair: Optional[KeyPair] = None

    @property
    def state(self) -> VaultState:
        return self._state

    @property
    def is_unlocked(self) -> bool:
        return self._state is VaultState.UNLOCKED

    @property
    def keypair(self) -> Optional[KeyPair]:
        """The recovered key pair, only while unlocked."""
        return self._keypair

    def unlock(self, password: Password) -> KeyPair:
        """
        Decrypt and unpack the container.

        Returns:
            The recovered KeyPair.

        Raises:
            AuthenticationError: Wrong password or tampered container.
            DecodingError: Decrypted bytes are not a usable packed secret.
        """
        self._state = VaultState.VERIFYING
        try:
            kp = unpack(decrypt_secret(self.container, password))
        except Exception:
            self._state = VaultState.LOCKED
            self._keypair = None
            raise

        self._keypair = kp
        self._state = VaultState.UNLOCKED
        logger.info(f"Unlocked key {kp.fingerprint}")
        return kp

    def lock(self) -> None:
        """Drop the recovered key pair from memory."""
        self._keypair = None
        self._state = VaultState.LOCKED
