from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

from .config import Settings, configure_logging
from .crypto import Identity
from .errors import CredentialError
from .io import artifact_names, write_certificate, write_metadata, write_secret_file
from .lifecycle import issue_credential


def _prompt_new_password() -> str:
    """
    Ask for the container password twice.

    Raises:
        ValueError: If the password is empty or the two entries differ.
    """
    password = getpass.getpass("Password protecting the private key: ")
    if not password:
        raise ValueError("password must be non-empty")
    if getpass.getpass("Repeat password: ") != password:
        raise ValueError("passwords do not match")
    return password


def main(argv: list[str] | None = None) -> int:
    """
    CLI command to issue a new signing credential.

    Generates an ECDSA P-256 OpenPGP key bound to the given identity and writes
    three files to the output directory:
      - <owner>_public_<ts>.asc: armored public certificate (safe to distribute)
      - <owner>_private_<ts>.bin: password-encrypted private key container
      - <owner>_public_<ts>.json: metadata sidecar

    No plaintext private key is written. Use ``credkit decrypt`` with
    ``--export-plaintext`` for that.

    Returns:
        Exit code: 0 on success, 1 if issuance failed, 2 on invalid input.

    Command-line arguments:
        --name (required): Owner name (bank/player name)
        --email (required): Owner e-mail for the User ID
        --comment: Optional User ID comment
        --out-dir: Output directory (default: CREDKIT_OUTPUT_DIR or '.')
        --notes: Metadata notes (default: CREDKIT_NOTES)
    """
    settings = Settings.from_env()
    configure_logging(settings)

    ap = argparse.ArgumentParser(prog="credkit generate")
    ap.add_argument("--name", required=True, help="Owner name bound to the key")
    ap.add_argument("--email", required=True, help="Owner e-mail bound to the key")
    ap.add_argument("--comment", default="", help="Optional User ID comment")
    ap.add_argument(
        "--out-dir",
        default=str(settings.output_dir),
        help="Output directory for the certificate, container and metadata",
    )
    ap.add_argument("--notes", default=settings.notes, help="Notes for the metadata file")
    args = ap.parse_args(argv)

    identity = Identity(name=args.name.strip(), email=args.email.strip(), comment=args.comment.strip())
    try:
        identity.validate()
        names = artifact_names(identity.name)
        password = _prompt_new_password()
    except (CredentialError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    out_dir = Path(args.out_dir).expanduser().resolve()
    targets = [out_dir / names.certificate, out_dir / names.container, out_dir / names.metadata]
    existing = [str(p) for p in targets if p.exists()]
    if existing:
        print(f"error: refusing to overwrite existing file(s): {', '.join(existing)}", file=sys.stderr)
        return 1

    try:
        issued = issue_credential(identity, password, notes=args.notes)
    except CredentialError as e:
        print(f"error: credential issuance failed: {e}", file=sys.stderr)
        return 1

    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        cert_path = write_certificate(targets[0], issued.certificate)
        container_path = write_secret_file(targets[1], issued.container)
        meta_path = write_metadata(targets[2], issued.metadata)
    except OSError as e:
        print(f"error: failed to write credential files: {e}", file=sys.stderr)
        return 1

    print(str(cert_path))
    print(str(container_path))
    print(str(meta_path))
    print(f"fingerprint: {issued.fingerprint}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
