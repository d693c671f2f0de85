"""
Key management for SponsorLink manifests.

Issuers sign with an RSA private key. Verifiers check against the
matching public key, distributed as a base64 PKCS#1 DER blob. The
default verification key ships inside the package and can be replaced
through configuration.
"""

import base64
import binascii
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Optional, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from . import config
from .constants import EMBEDDED_PUBLIC_KEY_RESOURCE
from .errors import KeyFormatError

logger = logging.getLogger(__name__)

KeyData = Union[bytes, str]


def generate_private_key(key_size: int = 2048) -> rsa.RSAPrivateKey:
    """Generate a new RSA signing key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=key_size)


def _as_bytes(data: KeyData) -> bytes:
    if isinstance(data, str):
        return data.strip().encode('ascii')
    return data


def load_private_key(data: KeyData, password: Optional[bytes] = None) -> rsa.RSAPrivateKey:
    """
    Load an RSA private key from PEM or DER bytes.

    Raises:
        KeyFormatError: If the data is not an RSA private key
    """
    raw = _as_bytes(data)
    try:
        if raw.startswith(b"-----"):
            key = serialization.load_pem_private_key(raw, password=password)
        else:
            key = serialization.load_der_private_key(raw, password=password)
    except (ValueError, TypeError) as e:
        raise KeyFormatError(f"Cannot load private key: {e}") from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyFormatError(f"Expected an RSA private key, got {type(key).__name__}")
    return key


def load_public_key(data: Union[KeyData, rsa.RSAPublicKey]) -> rsa.RSAPublicKey:
    """
    Load an RSA public key.

    Accepts an existing key object, PEM text, raw DER bytes, or base64
    encoded DER (PKCS#1 or SubjectPublicKeyInfo).

    Raises:
        KeyFormatError: If the data is not an RSA public key
    """
    if isinstance(data, rsa.RSAPublicKey):
        return data

    raw = _as_bytes(data)
    try:
        if raw.startswith(b"-----"):
            key = serialization.load_pem_public_key(raw)
        else:
            if isinstance(data, str):
                raw = base64.b64decode(raw, validate=True)
            key = serialization.load_der_public_key(raw)
    except (ValueError, TypeError, binascii.Error) as e:
        raise KeyFormatError(f"Cannot load public key: {e}") from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyFormatError(f"Expected an RSA public key, got {type(key).__name__}")
    return key


def export_public_key(key: Union[rsa.RSAPrivateKey, rsa.RSAPublicKey]) -> str:
    """Export the public half of a key as base64 PKCS#1 DER, the embedding format."""
    if isinstance(key, rsa.RSAPrivateKey):
        key = key.public_key()
    der = key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.PKCS1,
    )
    return base64.b64encode(der).decode('ascii')


def export_private_key(key: rsa.RSAPrivateKey) -> str:
    """Export a private key as unencrypted PKCS#8 PEM."""
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return pem.decode('ascii')


@lru_cache(maxsize=8)
def _load_key_source(source: str) -> rsa.RSAPublicKey:
    path = Path(source).expanduser()
    if path.suffix in (".pub", ".pem") and path.is_file():
        logger.debug("Loading verification key from %s", path)
        return load_public_key(path.read_text(encoding="utf-8"))
    return load_public_key(source)


def embedded_public_key() -> rsa.RSAPublicKey:
    """
    Get the key used to verify manifests by default.

    SPONSORLINK_PUBLIC_KEY (base64 DER or a path to a .pub/.pem file)
    takes precedence over the key bundled with the package.
    """
    override = config.public_key_override()
    if override:
        return _load_key_source(override)

    blob = resources.files(__package__).joinpath(EMBEDDED_PUBLIC_KEY_RESOURCE).read_text(encoding="ascii")
    return _load_key_source(blob.strip())
