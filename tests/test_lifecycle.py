import pytest

from credkit.certificate import PUBLIC_KEY_ARMOR_HEADER, import_certificate
from credkit.container import encode_container
from credkit.crypto import EncodingError, Identity, generate_keypair, sign_message, verify_message
from credkit.lifecycle import issue_credential, recover_keypair
from credkit.certificate import export_certificate
from credkit.secret import pack, unpack
from credkit.vault import AuthenticationError, decrypt_secret, encrypt_secret

PASSWORD = "correct horse battery staple"


def test_end_to_end_scenario():
    identity = Identity(name="Alpha Bank", email="alpha@bank.mc")
    kp = generate_keypair(identity)

    certificate = export_certificate(kp.public_key, identity)
    assert certificate.startswith(PUBLIC_KEY_ARMOR_HEADER)

    container = encode_container(encrypt_secret(pack(kp), PASSWORD))
    recovered = unpack(decrypt_secret(container, PASSWORD))

    sig = sign_message(kp.secret_key, "test message")
    assert verify_message(recovered.public_key, "test message", sig)
    assert verify_message(import_certificate(certificate), "test message", sig)


def test_end_to_end_wrong_password():
    identity = Identity(name="Alpha Bank", email="alpha@bank.mc")
    kp = generate_keypair(identity)
    container = encode_container(encrypt_secret(pack(kp), PASSWORD))

    result = None
    with pytest.raises(AuthenticationError):
        result = decrypt_secret(container, "wrong")
    assert result is None


def test_issue_and_recover():
    identity = Identity(name="Beta Bank", email="beta@bank.mc", comment="branch 2")
    issued = issue_credential(identity, PASSWORD, notes="unit test")

    assert issued.certificate.startswith(PUBLIC_KEY_ARMOR_HEADER)
    assert issued.metadata.fingerprint == issued.fingerprint
    assert issued.metadata.user_id == "Beta Bank (branch 2) <beta@bank.mc>"
    assert issued.metadata.notes == "unit test"
    assert issued.metadata.kdf_iterations == 100_000

    kp = recover_keypair(issued.container, PASSWORD)
    assert kp.fingerprint == issued.fingerprint
    assert kp.identity == identity

    sig = sign_message(kp.secret_key, "payload")
    assert verify_message(import_certificate(issued.certificate), "payload", sig)


def test_issue_rejects_bad_identity_and_empty_password():
    with pytest.raises(EncodingError):
        issue_credential(Identity(name="", email="x@example.org"), PASSWORD)
    with pytest.raises(ValueError):
        issue_credential(Identity(name="Gamma", email="g@example.org"), "")


def test_recover_with_wrong_password(sample_identity):
    issued = issue_credential(sample_identity, PASSWORD)
    with pytest.raises(AuthenticationError):
        recover_keypair(issued.container, "wrong")
