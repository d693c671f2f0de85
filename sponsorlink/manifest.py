"""
SponsorLink Manifest

A manifest proves that a user sponsors one or more accounts without
revealing who the user is. It carries salted one-way hashes of
(identifier, sponsored account) pairs; anyone who already knows an
identifier and the installation salt can recompute the hash and test
membership, but the token alone cannot be enumerated.

Manifests are immutable. A new sponsorship state means creating and
signing a brand new manifest and replacing the stored token.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

import jwt

from .constants import (
    AUDIENCE_CLAIM,
    EXPIRATION_CLAIM,
    HASH_CLAIM,
    ISSUER_CLAIM,
    MANIFEST_AUDIENCE,
    MANIFEST_ISSUER,
    SUBJECT_CLAIM,
    UNSIGNED_ALGORITHM,
)
from .hashing import digest, domain_of
from .logging_config import audit_log


class ManifestStatus(str, Enum):
    """
    Outcome of reading the stored manifest.

    NOT_FOUND: No token or no salt available; a manifest must be issued
    INVALID: Signature, issuer, audience or structure check failed
    EXPIRED: Structurally valid but past its expiration; re-issue
    VERIFIED: All checks passed
    """
    NOT_FOUND = "NotFound"
    INVALID = "Invalid"
    EXPIRED = "Expired"
    VERIFIED = "Verified"


@dataclass(frozen=True)
class Manifest:
    """
    Immutable set of membership hashes plus token metadata.

    Built once, either by create() (unsigned) or by the verifier from
    a trusted signed token.
    """
    token: str
    salt: str = field(repr=False)
    hashes: FrozenSet[str] = field(repr=False)
    expires_at: datetime
    subject: Optional[str] = None

    def is_sponsoring(self, identifier: str, account: str) -> bool:
        """
        Check whether identifier sponsors account.

        Tries the identifier itself first, then the domain part of an
        email address for organization-wide sponsorships.
        """
        if digest(self.salt, identifier, account) in self.hashes:
            return True

        domain = domain_of(identifier)
        return domain is not None and digest(self.salt, domain, account) in self.hashes

    @property
    def is_signed(self) -> bool:
        """True if the token carries a signature algorithm other than none."""
        try:
            header = jwt.get_unverified_header(self.token)
        except jwt.InvalidTokenError:
            return False
        return header.get("alg", UNSIGNED_ALGORITHM) != UNSIGNED_ALGORITHM

    def sign(self, private_key) -> str:
        """Sign this manifest. See sponsorlink.signing.sign."""
        from .signing import sign
        return sign(self, private_key)


def next_expiration(now: Optional[datetime] = None) -> datetime:
    """
    First instant of the month after now, in UTC.

    Every manifest expires on a calendar-month boundary. Naive
    datetimes are taken to be UTC.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)

    if now.month == 12:
        return datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    return datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)


def encode_hash_claim(hashes: Iterable[str]) -> Any:
    """
    Encode hashes as a claim value.

    A single value is a plain string and several are an array. None
    means the claim is omitted.
    """
    ordered = sorted(hashes)
    if not ordered:
        return None
    if len(ordered) == 1:
        return ordered[0]
    return ordered


def decode_hash_claim(claims: Mapping[str, Any]) -> FrozenSet[str]:
    """
    Read the hash claim back into a set.

    Raises:
        ValueError: If the claim is neither a string nor a list of strings
    """
    value = claims.get(HASH_CLAIM)
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset([value])
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return frozenset(value)
    raise ValueError(f"'{HASH_CLAIM}' claim must be a string or a list of strings")


def build_claims(subject: Optional[str], hashes: Iterable[str], expires_at: datetime) -> Dict[str, Any]:
    """Assemble the manifest claim set."""
    claims: Dict[str, Any] = {}
    if subject is not None:
        claims[SUBJECT_CLAIM] = subject

    hash_claim = encode_hash_claim(hashes)
    if hash_claim is not None:
        claims[HASH_CLAIM] = hash_claim

    claims[ISSUER_CLAIM] = MANIFEST_ISSUER
    claims[AUDIENCE_CLAIM] = MANIFEST_AUDIENCE
    claims[EXPIRATION_CLAIM] = int(expires_at.timestamp())
    return claims


def create(
    salt: str,
    user: str,
    emails: Iterable[str],
    domains: Iterable[str],
    sponsoring: Iterable[str],
    now: Optional[datetime] = None
) -> Manifest:
    """
    Create an unsigned manifest, to be used to request a signed one.

    Args:
        salt: Random string used to salt the values to be hashed
        user: Identifier of the manifest owner
        emails: Email(s) of the manifest owner
        domains: Verified organization domains the user belongs to
        sponsoring: Accounts the manifest owner is sponsoring
        now: Issue time (default: now); drives the expiration

    Returns:
        Manifest whose token has no signature
    """
    emails = list(emails)
    domains = list(domains)

    linked = set()
    for account in sponsoring:
        for email in emails:
            linked.add(digest(salt, email, account))
        for domain in domains:
            linked.add(digest(salt, domain, account))

    expires_at = next_expiration(now)
    claims = build_claims(user, linked, expires_at)
    token = jwt.encode(claims, None, algorithm=UNSIGNED_ALGORITHM)

    audit_log.manifest_created(len(linked), expires_at.isoformat())

    return Manifest(
        token=token,
        salt=salt,
        hashes=frozenset(linked),
        expires_at=expires_at,
        subject=user,
    )
