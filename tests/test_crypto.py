import re

import pgpy
import pytest

from credkit.crypto import (
    EncodingError,
    GenerationFailure,
    Identity,
    generate_keypair,
    key_fingerprint,
    load_private_key,
    load_public_key,
    sign_message,
    verify_message,
)


def test_generate_keypair_halves(sample_keypair):
    assert sample_keypair.public_key.is_public
    assert not sample_keypair.secret_key.is_public
    assert re.fullmatch(r"[0-9A-F]{40}", sample_keypair.fingerprint)
    assert key_fingerprint(sample_keypair.secret_key) == sample_keypair.fingerprint


def test_generated_public_key_verifies_secret_key_signature(sample_keypair):
    sig = sign_message(sample_keypair.secret_key, "transfer 10 coins")
    assert verify_message(sample_keypair.public_key, "transfer 10 coins", sig)
    assert not verify_message(sample_keypair.public_key, "transfer 11 coins", sig)


def test_generate_is_fresh_every_call(sample_identity):
    a = generate_keypair(sample_identity)
    b = generate_keypair(sample_identity)
    assert a.fingerprint != b.fingerprint


def test_signature_from_other_key_is_rejected(sample_keypair, sample_identity):
    other = generate_keypair(sample_identity)
    sig = sign_message(other.secret_key, "hello")
    assert not verify_message(sample_keypair.public_key, "hello", sig)


def test_unsupported_algorithm_rejected(sample_identity):
    with pytest.raises(ValueError):
        generate_keypair(sample_identity, algorithm="ed25519")


def test_invalid_identity_fails_before_generation(monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("key generation must not start")

    monkeypatch.setattr(pgpy.PGPKey, "new", boom)
    with pytest.raises(EncodingError):
        generate_keypair(Identity(name="Bank", email="not-an-email"))


def test_backend_failure_is_generation_failure(monkeypatch, sample_identity):
    def boom(*args, **kwargs):
        raise RuntimeError("entropy source unavailable")

    monkeypatch.setattr(pgpy.PGPKey, "new", boom)
    with pytest.raises(GenerationFailure):
        generate_keypair(sample_identity)


@pytest.mark.parametrize(
    "identity",
    [
        Identity(name="", email="a@example.org"),
        Identity(name="   ", email="a@example.org"),
        Identity(name="Bank <evil>", email="a@example.org"),
        Identity(name="Bank\n", email="a@example.org"),
        Identity(name="x" * 129, email="a@example.org"),
        Identity(name="Bank", email="a@example"),
        Identity(name="Bank", email="a b@example.org"),
        Identity(name="Bank", email="a@example.org", comment="(nested)"),
    ],
)
def test_identity_validation_rejects(identity):
    with pytest.raises(EncodingError):
        identity.validate()


def test_identity_parse_with_comment():
    ident = Identity.parse("Alpha Bank (main) <alpha@bank.mc>")
    assert ident == Identity(name="Alpha Bank", email="alpha@bank.mc", comment="main")
    assert ident.user_id == "Alpha Bank (main) <alpha@bank.mc>"


def test_identity_parse_without_comment():
    ident = Identity.parse("Alpha Bank <alpha@bank.mc>")
    assert ident.comment == ""
    assert ident.user_id == "Alpha Bank <alpha@bank.mc>"


def test_identity_parse_malformed():
    with pytest.raises(EncodingError):
        Identity.parse("Alpha Bank alpha@bank.mc")


def test_key_loaders(sample_keypair):
    pub = load_public_key(str(sample_keypair.public_key))
    assert pub.is_public
    assert key_fingerprint(pub) == sample_keypair.fingerprint

    sk = load_private_key(bytes(sample_keypair.secret_key))
    assert not sk.is_public
    assert key_fingerprint(sk) == sample_keypair.fingerprint
