from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Tuple, Union

import pgpy
from pgpy.constants import (
    CompressionAlgorithm,
    EllipticCurveOID,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)
from pgpy.errors import PGPError

from .errors import CredentialError

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "nistp256"

# Exactly one scheme is supported; the table only names it.
SUPPORTED_ALGORITHMS: Dict[str, Tuple[PubKeyAlgorithm, EllipticCurveOID]] = {
    DEFAULT_ALGORITHM: (PubKeyAlgorithm.ECDSA, EllipticCurveOID.NIST_P256),
}

MAX_NAME_LEN = 128

_EMAIL_RE = re.compile(r"^[^@\s<>()]+@[^@\s<>().]+(\.[^@\s<>().]+)+$")
_USER_ID_RE = re.compile(
    r"^(?P<name>[^<>()]+?)\s*(?:\((?P<comment>[^()]*)\))?\s*<(?P<email>[^<>]+)>$"
)
_SELF_TEST_MESSAGE = "credkit key self-test"


class GenerationFailure(CredentialError):
    """Exception raised when a valid key pair cannot be produced."""

    pass


class EncodingError(CredentialError):
    """Exception raised when identity metadata or key material cannot be encoded."""

    pass


def _has_control_chars(s: str) -> bool:
    return any(ord(ch) < 32 or ord(ch) == 127 for ch in s)


@dataclass(frozen=True)
class Identity:
    """
    User identity bound to a generated key (an OpenPGP User ID).

    Attributes:
        name: Display name of the credential owner (e.g. a bank or player name).
        email: Contact address, required to form a standard User ID.
        comment: Optional free-text comment shown in parentheses.
    """

    name: str
    email: str
    comment: str = ""

    @classmethod
    def parse(cls, user_id: str) -> "Identity":
        """
        Parse a User ID string of the form ``Name (comment) <email>``.

        Raises:
            EncodingError: If the string does not have the expected shape.
        """
        m = _USER_ID_RE.match((user_id or "").strip())
        if m is None:
            raise EncodingError(f"Malformed user id: {user_id!r}")
        identity = cls(
            name=m.group("name").strip(),
            email=m.group("email").strip(),
            comment=(m.group("comment") or "").strip(),
        )
        identity.validate()
        return identity

    @property
    def user_id(self) -> str:
        """The canonical User ID string."""
        if self.comment:
            return f"{self.name} ({self.comment}) <{self.email}>"
        return f"{self.name} <{self.email}>"

    def validate(self) -> None:
        """
        Check that the identity can be encoded into a User ID packet.

        Raises:
            EncodingError: If any field is empty, too long, contains control
                characters or User ID delimiters, or the e-mail is malformed.
        """
        name = self.name if isinstance(self.name, str) else ""
        if not name.strip():
            raise EncodingError("Identity name must be non-empty")
        if name != name.strip():
            raise EncodingError("Identity name must not have surrounding whitespace")
        if len(name) > MAX_NAME_LEN:
            raise EncodingError(f"Identity name longer than {MAX_NAME_LEN} characters")
        if _has_control_chars(name) or any(ch in name for ch in "<>()"):
            raise EncodingError("Identity name contains forbidden characters")

        if not isinstance(self.email, str) or not _EMAIL_RE.match(self.email):
            raise EncodingError(f"Invalid e-mail address: {self.email!r}")

        if not isinstance(self.comment, str):
            raise EncodingError("Identity comment must be a string")
        if _has_control_chars(self.comment) or any(ch in self.comment for ch in "<>()"):
            raise EncodingError("Identity comment contains forbidden characters")


@dataclass(frozen=True)
class KeyPair:
    """
    Freshly generated (or recovered) signing key pair.

    The two halves leave the pipeline by different paths: the public key goes
    to the certificate exporter, the secret key to the packer.

    Attributes:
        public_key: Public half (PGPy ``PGPKey``). Safe to distribute.
        secret_key: Secret half (PGPy ``PGPKey``). Must be kept secret.
        identity: The identity bound to the key.
    """

    public_key: pgpy.PGPKey
    secret_key: pgpy.PGPKey
    identity: Identity

    @property
    def fingerprint(self) -> str:
        return key_fingerprint(self.public_key)


def key_fingerprint(key: pgpy.PGPKey) -> str:
    """Return the key fingerprint as 40 upper-case hex characters."""
    return str(key.fingerprint).replace(" ", "").upper()


def identity_from_key(key: pgpy.PGPKey) -> Identity:
    """
    Rebuild the Identity bound to a key from its first User ID.

    Raises:
        EncodingError: If the key carries no usable User ID.
    """
    uids = [u for u in key.userids if u.is_uid]
    if not uids:
        raise EncodingError("Key carries no user id")
    uid = uids[0]
    return Identity(name=uid.name, email=uid.email, comment=uid.comment or "")


def key_self_test(secret_key: pgpy.PGPKey) -> bool:
    """
    Sign a fixed probe message and verify it with the key's own public half.

    Returns:
        True if the secret scalar and public point belong together.
    """
    try:
        sig = secret_key.sign(_SELF_TEST_MESSAGE)
        return bool(secret_key.pubkey.verify(_SELF_TEST_MESSAGE, sig))
    except (PGPError, ValueError, TypeError, NotImplementedError):
        return False


def generate_keypair(identity: Identity, algorithm: str = DEFAULT_ALGORITHM) -> KeyPair:
    """
    Generate a new ECDSA keypair on the NIST P-256 curve.

    The identity is validated before any key material is created. Randomness
    comes from the cryptographic backend's CSPRNG; nothing is cached, so every
    call yields a new key.

    Args:
        identity: Owner identity to bind to the key as its User ID.
        algorithm: Scheme selector. Only ``"nistp256"`` is accepted.

    Returns:
        KeyPair with the public and secret halves.

    Raises:
        EncodingError: If the identity is malformed.
        ValueError: If ``algorithm`` is not the supported scheme.
        GenerationFailure: If the backend could not produce a valid pair.
    """
    identity.validate()

    try:
        key_algorithm, curve = SUPPORTED_ALGORITHMS[algorithm]
    except KeyError:
        raise ValueError(
            f"Unsupported algorithm {algorithm!r}; only {DEFAULT_ALGORITHM!r} is available"
        ) from None

    try:
        sk = pgpy.PGPKey.new(key_algorithm, curve)
        uid = pgpy.PGPUID.new(identity.name, comment=identity.comment, email=identity.email)
        sk.add_uid(
            uid,
            usage={KeyFlags.Sign, KeyFlags.Certify},
            hashes=[HashAlgorithm.SHA256, HashAlgorithm.SHA512],
            ciphers=[SymmetricKeyAlgorithm.AES256],
            compression=[CompressionAlgorithm.Uncompressed],
        )
    except Exception as e:
        raise GenerationFailure("Key pair generation failed") from e

    if not key_self_test(sk):
        raise GenerationFailure("Generated key pair failed its signing self-test")

    kp = KeyPair(public_key=sk.pubkey, secret_key=sk, identity=identity)
    logger.info(f"Generated {algorithm} key {kp.fingerprint} for {identity.user_id}")
    return kp


def sign_message(secret_key: pgpy.PGPKey, message: str) -> pgpy.PGPSignature:
    """
    Create a detached signature over a text message.

    Args:
        secret_key: Unlocked secret key.
        message: Text to sign.

    Returns:
        PGPy detached signature.
    """
    return secret_key.sign(message)


def verify_message(
    public_key: pgpy.PGPKey, message: str, signature: pgpy.PGPSignature
) -> bool:
    """
    Verify a detached signature against a public key.

    Returns:
        True if the signature is valid for ``message``; False otherwise,
        including when the signature was made by a different key.
    """
    try:
        return bool(public_key.verify(message, signature))
    except PGPError:
        return False


def load_public_key(text: Union[str, bytes]) -> pgpy.PGPKey:
    """
    Load an OpenPGP public key from armored text.

    Raises:
        Various PGPy exceptions if the text is not a parseable key.
    """
    key, _ = pgpy.PGPKey.from_blob(text)
    return key


def load_private_key(blob: Union[str, bytes]) -> pgpy.PGPKey:
    """
    Load an OpenPGP secret key from armored text or binary packets.

    Raises:
        Various PGPy exceptions if the data is not a parseable key.
    """
    key, _ = pgpy.PGPKey.from_blob(blob)
    return key
