from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from .certificate import export_certificate
from .container import FORMAT_VERSION, EncryptedContainer, encode_container
from .crypto import DEFAULT_ALGORITHM, Identity, KeyPair, generate_keypair
from .io import KeyMetadata
from .passphrase import iterations_for_version
from .secret import pack, unpack
from .vault import Password, RandomSource, decrypt_secret, encrypt_secret

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedCredential:
    """
    Durable artifacts of one issuance.

    Attributes:
        certificate: Armored public certificate (shareable).
        container: Encrypted private key container bytes (the only persisted
            form of the secret key).
        fingerprint: OpenPGP fingerprint of the key.
        metadata: Non-secret description of the issuance.
    """

    certificate: str
    container: bytes
    fingerprint: str
    metadata: KeyMetadata


def issue_credential(
    identity: Identity,
    password: Password,
    *,
    notes: str = "",
    algorithm: str = DEFAULT_ALGORITHM,
    randbytes: RandomSource = os.urandom,
) -> IssuedCredential:
    """
    Generate a key pair and produce its certificate and encrypted container.

    Runs generate -> export public half -> pack secret half -> encrypt. The
    in-memory key pair is dropped once both artifacts exist.

    Args:
        identity: Owner identity; validated before any key is generated.
        password: Password protecting the container.
        notes: Free text stored in the metadata sidecar.
        algorithm: Scheme selector, see crypto.generate_keypair().
        randbytes: Random source for salt and nonce.

    Returns:
        IssuedCredential with certificate text and container bytes.

    Raises:
        EncodingError: Malformed identity or packing failure.
        GenerationFailure: The key pair could not be produced.
        ValueError: Empty password or unsupported algorithm.
    """
    if not password:
        raise ValueError("password must be non-empty")

    kp = generate_keypair(identity, algorithm)
    certificate = export_certificate(kp.public_key, identity)
    container = encode_container(encrypt_secret(pack(kp), password, randbytes=randbytes))

    metadata = KeyMetadata(
        owner=identity.name,
        user_id=identity.user_id,
        fingerprint=kp.fingerprint,
        generation_date=datetime.now().astimezone().isoformat(),
        format_version=FORMAT_VERSION,
        kdf_iterations=iterations_for_version(FORMAT_VERSION),
        notes=notes,
    )
    logger.info(f"Issued credential {kp.fingerprint} ({len(container)} byte container)")
    return IssuedCredential(
        certificate=certificate,
        container=container,
        fingerprint=kp.fingerprint,
        metadata=metadata,
    )


def recover_keypair(
    container: Union[EncryptedContainer, bytes],
    password: Password,
) -> KeyPair:
    """
    Decrypt a container and rebuild the key pair it protects.

    Raises:
        FormatError: Container bytes too short.
        AuthenticationError: Wrong password or tampered container.
        DecodingError: Decrypted material is not a usable secret key.
    """
    return unpack(decrypt_secret(container, password))
