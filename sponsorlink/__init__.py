"""
SponsorLink Manifest

Version: 1.0.0
License: MIT

Privacy-preserving proof that a user sponsors one or more accounts.

A manifest is a signed token that carries salted SHA-256 hashes of
(identifier, sponsored account) pairs instead of plaintext emails. A
verifier that knows an identifier and the installation salt can test
membership; nobody can list the sponsors from the token alone.

Usage:
    from sponsorlink import ManifestStatus, MemoryStore, create, sign, try_read

    # Issuer side
    unsigned = create(salt, "kzu", ["me@acme.com"], ["acme.com"], ["devlooped"])
    store.token = sign(unsigned, private_key)

    # Verifier side
    status, manifest = try_read(store)
    if status == ManifestStatus.VERIFIED:
        manifest.is_sponsoring("someone@acme.com", "devlooped")
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .constants import MANIFEST_AUDIENCE, MANIFEST_ISSUER

from .errors import (
    KeyFormatError,
    ManifestError,
    ManifestExpiredError,
    ManifestInvalidError,
    SigningError,
)

from .hashing import digest, domain_of

from .manifest import (
    Manifest,
    ManifestStatus,
    create,
    next_expiration,
)

from .signing import sign

from .verifier import (
    ReadResult,
    check,
    read,
    try_read,
)

from .keys import (
    embedded_public_key,
    export_private_key,
    export_public_key,
    generate_private_key,
    load_private_key,
    load_public_key,
)

from .store import (
    EnvironmentStore,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
)


__all__ = [
    "__version__",

    # Constants
    "MANIFEST_AUDIENCE",
    "MANIFEST_ISSUER",

    # Errors
    "KeyFormatError",
    "ManifestError",
    "ManifestExpiredError",
    "ManifestInvalidError",
    "SigningError",

    # Hashing
    "digest",
    "domain_of",

    # Manifest
    "Manifest",
    "ManifestStatus",
    "create",
    "next_expiration",

    # Signing
    "sign",

    # Verification
    "ReadResult",
    "check",
    "read",
    "try_read",

    # Keys
    "embedded_public_key",
    "export_private_key",
    "export_public_key",
    "generate_private_key",
    "load_private_key",
    "load_public_key",

    # Stores
    "EnvironmentStore",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
]
