from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from .certificate import CertificateError, PUBLIC_KEY_ARMOR_HEADER, certificate_fingerprint
from .container import FORMAT_VERSION
from .errors import CredentialError
from .passphrase import KDF_ITERATIONS

PathLike = Union[str, os.PathLike]

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class CertificateLoadError(CredentialError):
    """Exception raised when loading or validating a certificate file fails."""

    pass


@dataclass(frozen=True)
class KeyMetadata:
    """
    Descriptive sidecar written next to an issued certificate.

    Contains nothing secret; it records what was issued and with which
    container parameters so an operator can audit it later.
    """

    owner: str
    user_id: str
    fingerprint: str
    generation_date: str
    key_type: str = "ECC P-256"
    key_size: int = 256
    format_version: int = FORMAT_VERSION
    kdf: str = "PBKDF2-HMAC-SHA256"
    kdf_iterations: int = KDF_ITERATIONS
    cipher: str = "AES-256-GCM"
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"


@dataclass(frozen=True)
class ArtifactNames:
    """Default file names for one issued credential."""

    certificate: str
    container: str
    metadata: str


def safe_owner_name(name: str) -> str:
    """
    Turn an owner name into a file-name component.

    Spaces become underscores and any directory part is dropped.

    Raises:
        ValueError: If the name is empty or reduces to '.' or '..'.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("owner name must be non-empty")
    # prevent path traversal
    name = name.replace("\\", "/").split("/")[-1]
    if name in (".", "..") or not name:
        raise ValueError("owner name results in an invalid file name")
    return name.replace(" ", "_")


def artifact_names(owner: str, now: Optional[datetime] = None) -> ArtifactNames:
    """
    Build the default names ``<owner>_public_<ts>.asc``, ``<owner>_private_<ts>.bin``
    and ``<owner>_public_<ts>.json``.
    """
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    base = safe_owner_name(owner)
    return ArtifactNames(
        certificate=f"{base}_public_{stamp}.asc",
        container=f"{base}_private_{stamp}.bin",
        metadata=f"{base}_public_{stamp}.json",
    )


def plaintext_export_name(now: Optional[datetime] = None) -> str:
    """Default name for a plaintext secret key export."""
    return f"decrypted_private_{(now or datetime.now()).strftime(TIMESTAMP_FORMAT)}.asc"


def write_certificate(path: PathLike, text: str) -> Path:
    """
    Write an armored certificate. Refuses to overwrite an existing file.

    Raises:
        FileExistsError: If ``path`` already exists.
    """
    p = Path(path).expanduser()
    with p.open("x", encoding="ascii") as fh:
        fh.write(text)
    return p


def write_secret_file(path: PathLike, data: Union[bytes, str]) -> Path:
    """
    Write secret-bearing data readable by the owner only (mode 0o600).

    Refuses to overwrite an existing file.

    Raises:
        FileExistsError: If ``path`` already exists.
    """
    p = Path(path).expanduser()
    if isinstance(data, str):
        data = data.encode("ascii")
    fd = os.open(p, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as fh:
        fh.write(data)
    return p


def read_container_file(path: PathLike) -> bytes:
    return Path(path).expanduser().read_bytes()


def write_metadata(path: PathLike, metadata: KeyMetadata) -> Path:
    p = Path(path).expanduser()
    with p.open("x", encoding="utf-8") as fh:
        fh.write(metadata.to_json())
    return p


def load_certificate_file(
    path: PathLike,
    *,
    pinned_fingerprints: Optional[Sequence[str]] = None,
) -> str:
    """
    Load an armored certificate from disk, optionally enforcing fingerprint pinning.

    Args:
        path: Path to the ``.asc`` certificate.
        pinned_fingerprints: Optional allowed OpenPGP fingerprints
            (case-insensitive, spaces ignored). If given, the certificate's
            fingerprint must be one of them.

    Returns:
        The armored certificate text.

    Raises:
        CertificateLoadError: If the file cannot be read, is not a public-key
            certificate, or its fingerprint is not pinned.
    """
    p = Path(path).expanduser()

    try:
        text = p.read_text(encoding="ascii")
    except Exception as e:
        raise CertificateLoadError(f"Failed to read certificate file: {p}") from e

    if PUBLIC_KEY_ARMOR_HEADER not in text:
        raise CertificateLoadError(f"Not an armored public key certificate: {p}")

    try:
        fp = certificate_fingerprint(text)
    except CertificateError as e:
        raise CertificateLoadError(f"Certificate could not be parsed: {p}") from e

    if pinned_fingerprints is not None:
        allowed = {str(x).replace(" ", "").strip().upper() for x in pinned_fingerprints}
        if fp not in allowed:
            raise CertificateLoadError(
                "Certificate fingerprint not pinned/allowed. "
                f"Got {fp}, expected one of {sorted(allowed)}."
            )

    return text
