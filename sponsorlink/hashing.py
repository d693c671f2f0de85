"""
SponsorLink Hashing Scheme

Salted one-way digests used both when a manifest is issued and when a
verifier tests membership.

    digest = base64(SHA-256(UTF-8(salt + identifier + account)))

The three inputs are concatenated with no delimiter or length prefix.
This makes boundaries ambiguous (salt="ab", id="c" and salt="a",
id="bc" hash the same), but every issued token depends on this exact
byte sequence, so it must not change.
"""

import base64
import hashlib
from typing import Optional


def digest(salt: str, identifier: str, account: str) -> str:
    """
    Compute the membership digest for an (identifier, account) pair.

    Args:
        salt: Per-installation salt
        identifier: Email address or verified domain
        account: Sponsorable account name

    Returns:
        Standard base64 (padded) SHA-256 digest
    """
    data = (salt + identifier + account).encode('utf-8')
    return base64.b64encode(hashlib.sha256(data).digest()).decode('ascii')


def domain_of(identifier: str) -> Optional[str]:
    """
    Return the domain part of an email-like identifier.

    Only the text after the first '@' counts, and the '@' must not be
    the first character. Returns None otherwise.
    """
    index = identifier.find('@')
    if index <= 0:
        return None
    return identifier[index + 1:]
