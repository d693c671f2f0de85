"""
SponsorLink protocol constants.

Variable names, claim names and the fixed issuer/audience pair that
every signed manifest must carry.
"""

# ============================================================
# Store variables
# ============================================================

# Last used access token to invoke SponsorLink backend APIs.
ACCESS_TOKEN_VARIABLE = "SPONSORLINK_TOKEN"

# Random GUID used for salting hashes. Unique per installation, can be
# regenerated by deleting the variable.
INSTALLATION_ID_VARIABLE = "SPONSORLINK_INSTALLATION"

# JWT containing the hashed claims that represent active sponsorships.
MANIFEST_VARIABLE = "SPONSORLINK_MANIFEST"


# ============================================================
# Token claims
# ============================================================

MANIFEST_ISSUER = "Devlooped"
MANIFEST_AUDIENCE = "SponsorLink"

SUBJECT_CLAIM = "sub"
HASH_CLAIM = "hash"
ISSUER_CLAIM = "iss"
AUDIENCE_CLAIM = "aud"
EXPIRATION_CLAIM = "exp"

# Claims re-emitted by the signer rather than copied from the unsigned token
SIGNER_CLAIMS = (EXPIRATION_CLAIM, AUDIENCE_CLAIM, ISSUER_CLAIM)

SIGNING_ALGORITHM = "RS256"
UNSIGNED_ALGORITHM = "none"


# ============================================================
# Package data
# ============================================================

EMBEDDED_PUBLIC_KEY_RESOURCE = "SponsorLink.pub"
