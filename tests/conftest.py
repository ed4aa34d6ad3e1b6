from credkit.testing_utils import (  # noqa: F401
    deterministic_random,
    sample_identity,
    sample_keypair,
    sealed_container,
)
