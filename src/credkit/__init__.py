from .errors import CredentialError
from .crypto import (
    generate_keypair,
    load_private_key,
    load_public_key,
    sign_message,
    verify_message,
    Identity,
    KeyPair,
    GenerationFailure,
    EncodingError,
    DEFAULT_ALGORITHM,
)
from .certificate import (
    export_certificate,
    import_certificate,
    certificate_fingerprint,
    CertificateError,
)
from .secret import (
    pack,
    unpack,
    export_plaintext,
    DecodingError,
    PlaintextExportRefused,
    PLAINTEXT_EXPORT_CONFIRMATION,
)
from .container import (
    encode_container,
    decode_container,
    EncryptedContainer,
    FormatError,
)
from .vault import (
    encrypt_secret,
    decrypt_secret,
    SecretVault,
    VaultState,
    AuthenticationError,
)
from .lifecycle import issue_credential, recover_keypair, IssuedCredential
from .io import (
    load_certificate_file,
    KeyMetadata,
    CertificateLoadError,
)
from .config import Settings

__version__ = "0.1.0"

__all__ = [
    "CredentialError",
    "generate_keypair",
    "load_private_key",
    "load_public_key",
    "sign_message",
    "verify_message",
    "Identity",
    "KeyPair",
    "GenerationFailure",
    "EncodingError",
    "DEFAULT_ALGORITHM",
    "export_certificate",
    "import_certificate",
    "certificate_fingerprint",
    "CertificateError",
    "pack",
    "unpack",
    "export_plaintext",
    "DecodingError",
    "PlaintextExportRefused",
    "PLAINTEXT_EXPORT_CONFIRMATION",
    "encode_container",
    "decode_container",
    "EncryptedContainer",
    "FormatError",
    "encrypt_secret",
    "decrypt_secret",
    "SecretVault",
    "VaultState",
    "AuthenticationError",
    "issue_credential",
    "recover_keypair",
    "IssuedCredential",
    "load_certificate_file",
    "KeyMetadata",
    "CertificateLoadError",
    "Settings",
]
