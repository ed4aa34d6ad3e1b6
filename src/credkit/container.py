from __future__ import annotations

from dataclasses import dataclass

from .errors import CredentialError

SALT_LEN = 16  # 128 bits, PBKDF2 salt
NONCE_LEN = 12  # 96 bits for AES-GCM
TAG_LEN = 16  # AES-GCM authentication tag
HEADER_LEN = SALT_LEN + NONCE_LEN
MIN_CONTAINER_LEN = HEADER_LEN + TAG_LEN

# Version 0 is the unversioned layout: salt || nonce || ciphertext+tag.
FORMAT_VERSION = 0


class FormatError(CredentialError):
    """Exception raised when container bytes cannot be framed."""

    pass


@dataclass(frozen=True)
class EncryptedContainer:
    """
    Password-sealed private key container.

    Binary layout (version 0)::

        salt(16) || nonce(12) || ciphertext_and_tag(remaining bytes)

    There is no length prefix; the final field consumes the rest of the data.

    Attributes:
        salt: Random PBKDF2 salt, fresh per container.
        nonce: Random AES-GCM nonce, fresh per container.
        ciphertext: AES-GCM ciphertext with the 16-byte tag appended.
        version: Container format version, selects the KDF cost tier.
    """

    salt: bytes
    nonce: bytes
    ciphertext: bytes
    version: int = FORMAT_VERSION

    def __post_init__(self) -> None:
        if len(self.salt) != SALT_LEN:
            raise FormatError(f"salt must be {SALT_LEN} bytes")
        if len(self.nonce) != NONCE_LEN:
            raise FormatError(f"nonce must be {NONCE_LEN} bytes")
        if len(self.ciphertext) < TAG_LEN:
            raise FormatError("ciphertext shorter than the authentication tag")
        if self.version != FORMAT_VERSION:
            raise FormatError(f"Unsupported container version: {self.version}")

    def to_bytes(self) -> bytes:
        return encode_container(self)

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedContainer":
        return decode_container(data)


def encode_container(container: EncryptedContainer) -> bytes:
    """
    Serialize a container to its binary frame.

    Args:
        container: Container to serialize.

    Returns:
        ``salt || nonce || ciphertext_and_tag`` as bytes.
    """
    return bytes(container.salt) + bytes(container.nonce) + bytes(container.ciphertext)


def decode_container(data: bytes) -> EncryptedContainer:
    """
    Split a binary frame into salt, nonce and ciphertext.

    Runs before any key derivation so malformed input fails fast.

    Args:
        data: Raw container bytes.

    Returns:
        EncryptedContainer view of the bytes.

    Raises:
        FormatError: If ``data`` is not bytes-like or is shorter than
            ``MIN_CONTAINER_LEN`` (salt + nonce + tag).
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise FormatError("container must be bytes")

    data = bytes(data)
    if len(data) < MIN_CONTAINER_LEN:
        raise FormatError(
            f"container is {len(data)} bytes; at least {MIN_CONTAINER_LEN} required"
        )

    return EncryptedContainer(
        salt=data[:SALT_LEN],
        nonce=data[SALT_LEN:HEADER_LEN],
        ciphertext=data[HEADER_LEN:],
    )
