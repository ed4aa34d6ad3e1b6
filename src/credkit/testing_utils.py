"""
Testing utilities for credkit - for use in credkit's own tests and in packages
that build on it.

Provides:
1. DeterministicRandom, a substitutable random source for reproducible
   salt/nonce draws
2. Pytest fixtures for a test identity, a generated key pair and a sealed
   container

Import the fixtures into a conftest.py:
    from credkit.testing_utils import sample_identity, sample_keypair  # noqa: F401

DeterministicRandom must never reach production code: a seeded source repeats
salts and nonces across containers.
"""

import hashlib

import pytest

from .container import encode_container
from .crypto import Identity, generate_keypair
from .secret import pack
from .vault import encrypt_secret

TEST_PASSWORD = "correct horse battery staple"


class DeterministicRandom:
    """
    Counter-mode SHA-256 byte stream usable as ``randbytes``.

    Two instances with the same seed yield the same sequence.
    """

    def __init__(self, seed: bytes = b"credkit-test"):
        self._seed = seed
        self._counter = 0
        self.calls = []

    def __call__(self, n: int) -> bytes:
        out = bytearray()
        while len(out) < n:
            block = hashlib.sha256(self._seed + self._counter.to_bytes(8, "big")).digest()
            self._counter += 1
            out += block
        self.calls.append(n)
        return bytes(out[:n])


@pytest.fixture
def deterministic_random():
    """A fresh DeterministicRandom for each test."""
    return DeterministicRandom()


@pytest.fixture
def sample_identity():
    """Identity used for generated test keys."""
    return Identity(name="Example Bank", email="bank@example.org", comment="test")


@pytest.fixture(scope="session")
def sample_keypair():
    """
    One P-256 key pair shared by the whole session.

    Generation is cheap but not free; tests that need a distinct key call
    generate_keypair() themselves.
    """
    return generate_keypair(Identity(name="Example Bank", email="bank@example.org", comment="test"))


@pytest.fixture(scope="session")
def sealed_container(sample_keypair):
    """Container bytes for ``sample_keypair`` sealed with TEST_PASSWORD."""
    return encode_container(encrypt_secret(pack(sample_keypair), TEST_PASSWORD))
