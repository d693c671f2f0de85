"""
SponsorLink error types.

Verification failures are split into "expired" and "anything else" so
callers can tell a user to re-sync instead of treating the manifest as
tampered.
"""


class ManifestError(Exception):
    """Base class for manifest failures."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ManifestExpiredError(ManifestError):
    """The token was valid but its expiration has passed."""


class ManifestInvalidError(ManifestError):
    """Signature, issuer, audience or structure check failed."""


class SigningError(ManifestError):
    """The supplied key cannot produce an RS256 signature."""


class KeyFormatError(ValueError):
    """Key material could not be decoded as an RSA key."""
