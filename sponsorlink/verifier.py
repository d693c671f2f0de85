"""
SponsorLink Manifest Verification

Decodes a stored token, checks it against the issuer's public key and
classifies the result:

    NotFound -> { Invalid, Expired, Verified }

The classification is recomputed on every read. Only a Verified result
yields a Manifest that can answer is_sponsoring queries.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa

from . import config
from .constants import (
    EXPIRATION_CLAIM,
    MANIFEST_AUDIENCE,
    MANIFEST_ISSUER,
    SIGNING_ALGORITHM,
    SUBJECT_CLAIM,
)
from .errors import ManifestError, ManifestExpiredError, ManifestInvalidError
from .keys import embedded_public_key, load_public_key
from .logging_config import audit_log
from .manifest import Manifest, ManifestStatus, decode_hash_claim
from .store import KeyValueStore

logger = logging.getLogger(__name__)

PublicKeyLike = Union[rsa.RSAPublicKey, bytes, str]


@dataclass
class ReadResult:
    """Result of reading the stored manifest."""
    status: ManifestStatus
    manifest: Optional[Manifest] = None
    reason: Optional[str] = None

    def is_verified(self) -> bool:
        return self.status == ManifestStatus.VERIFIED

    def is_sponsoring(self, identifier: str, account: str) -> Optional[bool]:
        """Membership check, or None when there is no verified manifest."""
        if not self.is_verified() or self.manifest is None:
            return None
        return self.manifest.is_sponsoring(identifier, account)

    @classmethod
    def not_found(cls) -> 'ReadResult':
        return cls(status=ManifestStatus.NOT_FOUND, reason="No manifest token or salt available")

    @classmethod
    def verified(cls, manifest: Manifest) -> 'ReadResult':
        return cls(status=ManifestStatus.VERIFIED, manifest=manifest)

    @classmethod
    def expired(cls, reason: str) -> 'ReadResult':
        return cls(status=ManifestStatus.EXPIRED, reason=reason)

    @classmethod
    def invalid(cls, reason: str) -> 'ReadResult':
        return cls(status=ManifestStatus.INVALID, reason=reason)


def _resolve_store(store: Optional[KeyValueStore]) -> KeyValueStore:
    return store if store is not None else config.get_default_store()


def read(
    token: str,
    salt: Optional[str] = None,
    public_key: Optional[PublicKeyLike] = None,
    store: Optional[KeyValueStore] = None
) -> Manifest:
    """
    Read a manifest and validate it.

    Verification steps:
    1. RS256 signature against the public key (default: embedded key)
    2. Issuer and audience match the fixed SponsorLink values
    3. An expiration claim is present and has not passed (no leeway)

    Args:
        token: Signed compact token
        salt: Installation salt; taken from the store when omitted, and
            generated there if the store has none
        public_key: Verification key (default: embedded key)
        store: Store used to resolve the salt

    Raises:
        ManifestExpiredError: Token is valid but expired
        ManifestInvalidError: Any other validation failure
    """
    if salt is None:
        salt = _resolve_store(store).ensure_salt()

    key = embedded_public_key() if public_key is None else load_public_key(public_key)

    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=[SIGNING_ALGORITHM],
            audience=MANIFEST_AUDIENCE,
            issuer=MANIFEST_ISSUER,
            options={"require": [EXPIRATION_CLAIM]},
        )
    except jwt.ExpiredSignatureError as e:
        logger.debug("Manifest expired: %s", e)
        raise ManifestExpiredError(f"Manifest expired: {e}") from e
    except jwt.InvalidTokenError as e:
        logger.debug("Manifest rejected: %s", e)
        raise ManifestInvalidError(f"Manifest rejected: {e}") from e

    try:
        hashes = decode_hash_claim(claims)
        expires_at = datetime.fromtimestamp(int(claims[EXPIRATION_CLAIM]), tz=timezone.utc)
    except (ValueError, TypeError, KeyError, OverflowError) as e:
        raise ManifestInvalidError(f"Malformed manifest claims: {e}") from e

    subject = claims.get(SUBJECT_CLAIM)

    return Manifest(
        token=token,
        salt=salt,
        hashes=hashes,
        expires_at=expires_at,
        subject=subject if isinstance(subject, str) else None,
    )


def check(
    store: Optional[KeyValueStore] = None,
    public_key: Optional[PublicKeyLike] = None
) -> ReadResult:
    """
    Read and classify the stored manifest.

    Never raises for token problems; every outcome is a ReadResult.
    """
    store = _resolve_store(store)
    token = store.token
    salt = store.salt

    # Both values are needed to use the manifest at all
    if token is None or salt is None:
        result = ReadResult.not_found()
    else:
        try:
            result = ReadResult.verified(read(token, salt, public_key))
        except ManifestExpiredError as e:
            result = ReadResult.expired(e.reason)
        except ManifestError as e:
            result = ReadResult.invalid(e.reason)

    audit_log.manifest_read(result.status.value, result.reason)
    return result


def try_read(
    store: Optional[KeyValueStore] = None,
    public_key: Optional[PublicKeyLike] = None
) -> Tuple[ManifestStatus, Optional[Manifest]]:
    """
    Try to read the stored manifest.

    Returns:
        (status, manifest); manifest is None unless status is Verified
    """
    result = check(store, public_key)
    return result.status, result.manifest
