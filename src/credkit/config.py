from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_NOTES = "Issued by credkit"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    """
    Operator settings read from the environment.

    Cryptographic parameters are deliberately absent: they are fixed per
    container format version in code.

    Attributes:
        output_dir: Where CLI commands write artifacts (CREDKIT_OUTPUT_DIR).
        log_level: Logging level name (CREDKIT_LOG_LEVEL).
        notes: Text stored in each metadata sidecar (CREDKIT_NOTES).
    """

    output_dir: Path = Path(".")
    log_level: str = "WARNING"
    notes: str = DEFAULT_NOTES

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ValueError: If CREDKIT_LOG_LEVEL is not a standard level name.
        """
        env = os.environ if environ is None else environ

        level = env.get("CREDKIT_LOG_LEVEL", "WARNING").strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid CREDKIT_LOG_LEVEL: {level!r}")

        return cls(
            output_dir=Path(env.get("CREDKIT_OUTPUT_DIR", ".")).expanduser(),
            log_level=level,
            notes=env.get("CREDKIT_NOTES", DEFAULT_NOTES),
        )


def configure_logging(settings: Settings) -> None:
    """Install a stderr handler at the configured level. Only CLIs call this."""
    logging.basicConfig(level=getattr(logging, settings.log_level), format=LOG_FORMAT)
