from __future__ import annotations

import sys
from typing import Callable, Dict, Optional

from . import cli_decrypt_key, cli_make_keys, cli_show_public_key_fingerprint

COMMANDS: Dict[str, Callable[[Optional[list]], int]] = {
    "generate": cli_make_keys.main,
    "decrypt": cli_decrypt_key.main,
    "fingerprint": cli_show_public_key_fingerprint.main,
}

USAGE = "usage: credkit {" + ",".join(COMMANDS) + "} [options]"


def main(argv: list[str] | None = None) -> int:
    """
    Dispatch ``credkit <command> ...`` to the matching command module.

    Returns:
        The command's exit code, or 2 for a missing/unknown command.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] in ("-h", "--help"):
        print(USAGE)
        return 0 if argv else 2

    command, rest = argv[0], argv[1:]
    handler = COMMANDS.get(command)
    if handler is None:
        print(f"unknown command {command!r}\n{USAGE}", file=sys.stderr)
        return 2
    return handler(rest)


if __name__ == "__main__":
    raise SystemExit(main())
