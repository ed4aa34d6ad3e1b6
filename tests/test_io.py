import json
import os
import stat
from datetime import datetime

import pytest

from credkit.certificate import export_certificate
from credkit.io import (
    CertificateLoadError,
    KeyMetadata,
    artifact_names,
    load_certificate_file,
    plaintext_export_name,
    safe_owner_name,
    write_certificate,
    write_metadata,
    write_secret_file,
)

NOW = datetime(2026, 1, 2, 3, 4, 5)


def test_artifact_names():
    names = artifact_names("Alpha Bank", now=NOW)
    assert names.certificate == "Alpha_Bank_public_20260102_030405.asc"
    assert names.container == "Alpha_Bank_private_20260102_030405.bin"
    assert names.metadata == "Alpha_Bank_public_20260102_030405.json"
    assert plaintext_export_name(NOW) == "decrypted_private_20260102_030405.asc"


def test_safe_owner_name_strips_directories():
    assert safe_owner_name("../../etc/Alpha Bank") == "Alpha_Bank"
    with pytest.raises(ValueError):
        safe_owner_name("  ")
    with pytest.raises(ValueError):
        safe_owner_name("a/..")


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
def test_secret_file_is_owner_only(tmp_path):
    p = write_secret_file(tmp_path / "key.bin", b"\x00\x01")
    assert p.read_bytes() == b"\x00\x01"
    assert stat.S_IMODE(p.stat().st_mode) == 0o600


def test_secret_file_never_overwrites(tmp_path):
    write_secret_file(tmp_path / "key.bin", b"first")
    with pytest.raises(FileExistsError):
        write_secret_file(tmp_path / "key.bin", b"second")
    assert (tmp_path / "key.bin").read_bytes() == b"first"


def test_metadata_json(tmp_path):
    meta = KeyMetadata(
        owner="Alpha Bank",
        user_id="Alpha Bank <alpha@bank.mc>",
        fingerprint="A" * 40,
        generation_date=NOW.isoformat(),
        notes="Alpha Coin Banking System",
    )
    p = write_metadata(tmp_path / "meta.json", meta)
    data = json.loads(p.read_text())
    assert data["key_type"] == "ECC P-256"
    assert data["key_size"] == 256
    assert data["cipher"] == "AES-256-GCM"
    assert data["notes"] == "Alpha Coin Banking System"


def test_load_certificate_file_with_pinning(tmp_path, sample_keypair):
    text = export_certificate(sample_keypair.public_key, sample_keypair.identity)
    p = write_certificate(tmp_path / "pub.asc", text)

    assert load_certificate_file(p) == text
    assert load_certificate_file(p, pinned_fingerprints=[sample_keypair.fingerprint.lower()]) == text

    with pytest.raises(CertificateLoadError):
        load_certificate_file(p, pinned_fingerprints=["0" * 40])


def test_load_certificate_file_errors(tmp_path):
    with pytest.raises(CertificateLoadError):
        load_certificate_file(tmp_path / "missing.asc")

    bogus = tmp_path / "bogus.asc"
    bogus.write_text("hello\n")
    with pytest.raises(CertificateLoadError):
        load_certificate_file(bogus)


def test_metadata_defaults_follow_container_format():
    from credkit.container import FORMAT_VERSION
    from credkit.passphrase import KDF_ITERATIONS

    meta = KeyMetadata(owner="o", user_id="o <o@example.org>", fingerprint="A" * 40, generation_date="")
    assert meta.format_version == FORMAT_VERSION
    assert meta.kdf_iterations == KDF_ITERATIONS


def test_certificate_never_overwrites(tmp_path):
    write_certificate(tmp_path / "pub.asc", "first")
    with pytest.raises(FileExistsError):
        write_certificate(tmp_path / "pub.asc", "second")
    assert (tmp_path / "pub.asc").read_text() == "first"
