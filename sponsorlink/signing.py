"""
SponsorLink Manifest Signing

Turns an unsigned manifest into a token a verifier will trust. Used by
the issuer, which holds the RSA private key; ordinary clients only
verify.
"""

from datetime import datetime, timezone
from typing import Union

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa

from .constants import (
    AUDIENCE_CLAIM,
    EXPIRATION_CLAIM,
    ISSUER_CLAIM,
    MANIFEST_AUDIENCE,
    MANIFEST_ISSUER,
    SIGNER_CLAIMS,
    SIGNING_ALGORITHM,
)
from .errors import KeyFormatError, ManifestInvalidError, SigningError
from .keys import load_private_key
from .logging_config import audit_log
from .manifest import Manifest, decode_hash_claim

PrivateKeyLike = Union[rsa.RSAPrivateKey, bytes, str]


def _prepare_key(private_key: PrivateKeyLike) -> rsa.RSAPrivateKey:
    if isinstance(private_key, rsa.RSAPrivateKey):
        return private_key
    if isinstance(private_key, (bytes, str)):
        try:
            return load_private_key(private_key)
        except KeyFormatError as e:
            raise SigningError(str(e)) from e
    raise SigningError(f"Expected an RSA private key, got {type(private_key).__name__}")


def sign(manifest: Union[Manifest, str], private_key: PrivateKeyLike) -> str:
    """
    Sign a manifest with the given RSA key and return the new token.

    The claim set is read from the existing token without verification.
    Any previous exp/aud/iss claims are dropped and re-emitted with the
    fixed issuer and audience and the original expiration. The manifest
    itself is not modified.

    Args:
        manifest: Manifest or raw (usually unsigned) token
        private_key: RSA private key, or PEM/DER encoded key material

    Returns:
        RS256 signed compact token

    Raises:
        ManifestInvalidError: If the token cannot be decoded or has no expiration
        SigningError: If the key cannot produce a signature
    """
    token = manifest.token if isinstance(manifest, Manifest) else manifest
    key = _prepare_key(private_key)

    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise ManifestInvalidError(f"Cannot read claims to sign: {e}") from e

    try:
        hashes = decode_hash_claim(claims)
    except ValueError as e:
        raise ManifestInvalidError(str(e)) from e

    expiration = claims.get(EXPIRATION_CLAIM)
    if not isinstance(expiration, (int, float)) or isinstance(expiration, bool):
        raise ManifestInvalidError("Token to sign has no numeric expiration")

    payload = {k: v for k, v in claims.items() if k not in SIGNER_CLAIMS}
    payload[ISSUER_CLAIM] = MANIFEST_ISSUER
    payload[AUDIENCE_CLAIM] = MANIFEST_AUDIENCE
    payload[EXPIRATION_CLAIM] = int(expiration)

    try:
        signed = jwt.encode(payload, key, algorithm=SIGNING_ALGORITHM)
    except (jwt.PyJWTError, ValueError, TypeError) as e:
        raise SigningError(f"Cannot sign manifest: {e}") from e

    expires_at = datetime.fromtimestamp(int(expiration), tz=timezone.utc)
    audit_log.manifest_signed(len(hashes), expires_at.isoformat())

    return signed
