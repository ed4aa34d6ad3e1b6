from __future__ import annotations

import argparse
import sys

from .config import Settings, configure_logging
from .io import CertificateLoadError, load_certificate_file
from .certificate import certificate_fingerprint


def main(argv: list[str] | None = None) -> int:
    """
    CLI command to display the OpenPGP fingerprint of a public certificate.

    The fingerprint identifies the key and can be used for pinning when the
    certificate is registered.

    Returns:
        Exit code: 0 on success, 1 if the certificate cannot be loaded or is
        not pinned.

    Command-line arguments:
        certificate: Path to the armored ``.asc`` certificate
        --pin: Allowed fingerprint; may be repeated
    """
    configure_logging(Settings.from_env())

    ap = argparse.ArgumentParser(prog="credkit fingerprint")
    ap.add_argument("certificate", help="Path to the armored public certificate")
    ap.add_argument("--pin", action="append", default=None, help="Allowed fingerprint")
    args = ap.parse_args(argv)

    try:
        text = load_certificate_file(args.certificate, pinned_fingerprints=args.pin)
    except CertificateLoadError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(certificate_fingerprint(text))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
