from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

from .config import Settings, configure_logging
from .errors import CredentialError
from .io import (
    load_certificate_file,
    plaintext_export_name,
    read_container_file,
    write_secret_file,
)
from .secret import PLAINTEXT_EXPORT_CONFIRMATION, export_plaintext, pack
from .vault import SecretVault


def main(argv: list[str] | None = None) -> int:
    """
    CLI command to unlock an encrypted private key container.

    Decrypts the container with a password, checks the recovered key, and
    prints its fingerprint and User ID. Optionally cross-checks it against a
    certificate and, only with explicit confirmation, writes the secret key
    unencrypted as an armored ``.asc`` file.

    Returns:
        Exit code: 0 on success, 1 if decryption, verification or export
        failed.

    Command-line arguments:
        container: Path to the ``.bin`` container
        --certificate: Certificate the recovered key must match
        --export-plaintext [PATH]: Write the unencrypted secret key
            (default name: decrypted_private_<ts>.asc in the output directory)
        --confirm: Confirmation phrase for plaintext export; prompted if absent
    """
    settings = Settings.from_env()
    configure_logging(settings)

    ap = argparse.ArgumentParser(prog="credkit decrypt")
    ap.add_argument("container", help="Path to the encrypted private key container")
    ap.add_argument("--certificate", default=None, help="Certificate the key must match")
    ap.add_argument(
        "--export-plaintext",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help="INSECURE: write the private key without encryption",
    )
    ap.add_argument("--confirm", default=None, help="Confirmation phrase for plaintext export")
    args = ap.parse_args(argv)

    try:
        vault = SecretVault(read_container_file(args.container))
    except OSError as e:
        print(f"error: cannot read container: {e}", file=sys.stderr)
        return 1
    except CredentialError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    password = getpass.getpass("Password for the private key: ")
    try:
        kp = vault.unlock(password)
    except CredentialError:
        print("error: decryption failed", file=sys.stderr)
        return 1

    try:
        print(f"fingerprint: {kp.fingerprint}")
        print(f"user id: {kp.identity.user_id}")

        if args.certificate is not None:
            load_certificate_file(args.certificate, pinned_fingerprints=[kp.fingerprint])
            print("certificate matches")

        if args.export_plaintext is None:
            return 0

        print("WARNING: this writes your private key WITHOUT encryption.", file=sys.stderr)
        phrase = args.confirm
        if phrase is None:
            phrase = input(f"Type '{PLAINTEXT_EXPORT_CONFIRMATION}' to continue: ")
        armored = export_plaintext(pack(kp), confirm=phrase.strip())

        out = Path(args.export_plaintext) if args.export_plaintext else (
            settings.output_dir / plaintext_export_name()
        )
        path = write_secret_file(out, armored)
        print(str(path))
        print("Delete this file securely as soon as possible.", file=sys.stderr)
        return 0
    except CredentialError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: cannot write export: {e}", file=sys.stderr)
        return 1
    finally:
        vault.lock()


if __name__ == "__main__":
    raise SystemExit(main())
