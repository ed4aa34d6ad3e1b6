from __future__ import annotations


class CredentialError(RuntimeError):
    """Base class for every failure raised by the credential core."""

    pass
