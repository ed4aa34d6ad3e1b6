"""
Password-based key derivation for the private key container.

The iteration count is locked to the container format version so that raising
it later does not orphan containers written under an older tier.
"""

from __future__ import annotations

from typing import Dict, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .container import FORMAT_VERSION, SALT_LEN

KEY_LEN = 32  # AES-256

KDF_ITERATIONS_BY_VERSION: Dict[int, int] = {
    0: 100_000,
}
KDF_ITERATIONS = KDF_ITERATIONS_BY_VERSION[FORMAT_VERSION]


def _password_bytes(password: Union[str, bytes]) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    if isinstance(password, (bytes, bytearray)):
        return bytes(password)
    raise TypeError("password must be str or bytes")


def iterations_for_version(version: int) -> int:
    """
    Look up the PBKDF2 iteration count for a container format version.

    Raises:
        ValueError: If the version has no registered cost tier.
    """
    try:
        return KDF_ITERATIONS_BY_VERSION[version]
    except KeyError:
        raise ValueError(f"No KDF parameters for container version {version}") from None


def derive_key(
    password: Union[str, bytes],
    salt: bytes,
    *,
    iterations: int = KDF_ITERATIONS,
) -> bytes:
    """
    Derive a 256-bit AES key with PBKDF2-HMAC-SHA256.

    Args:
        password: Operator password; str is encoded as UTF-8.
        salt: 16-byte random salt stored alongside the ciphertext.
        iterations: PBKDF2 iteration count for the container's version.

    Returns:
        32-byte derived key.

    Raises:
        ValueError: If the salt has the wrong length or iterations < 1.
        TypeError: If password is neither str nor bytes.
    """
    if len(salt) != SALT_LEN:
        raise ValueError(f"salt must be {SALT_LEN} bytes")
    if iterations < 1:
        raise ValueError("iterations must be positive")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LEN,
        salt=bytes(salt),
        iterations=iterations,
    )
    return kdf.derive(_password_bytes(password))
