"""
Configuration module for SponsorLink.

Centralizes configuration with environment variable support.
"""

import os
from pathlib import Path
from typing import Optional

# ============================================================
# Environment Configuration
# ============================================================

# Default store backend: env|file
STORE_BACKEND = os.getenv("SPONSORLINK_STORE", "env")
STORE_PATH = os.getenv("SPONSORLINK_STORE_PATH", str(Path.home() / ".sponsorlink" / "manifest.json"))

# Logging
LOG_LEVEL = os.getenv("SPONSORLINK_LOG_LEVEL", "WARNING")
LOG_FORMAT = os.getenv("SPONSORLINK_LOG_FORMAT", "text")  # text|json

# RSA key size used by keygen
DEFAULT_KEY_SIZE = int(os.getenv("SPONSORLINK_KEY_SIZE", "2048"))


# ============================================================
# Runtime accessors
# ============================================================

def public_key_override() -> Optional[str]:
    """
    Verification key configured through SPONSORLINK_PUBLIC_KEY.

    Read on every call so a key can be swapped without reloading the
    module. Returns None when unset or empty.
    """
    value = os.getenv("SPONSORLINK_PUBLIC_KEY", "").strip()
    return value or None


def get_default_store():
    """
    Build the store selected by SPONSORLINK_STORE.

    Raises:
        ValueError: For an unknown backend name
    """
    from .store import EnvironmentStore, JsonFileStore

    backend = os.getenv("SPONSORLINK_STORE", STORE_BACKEND).lower()
    if backend == "env":
        return EnvironmentStore()
    if backend == "file":
        return JsonFileStore(os.getenv("SPONSORLINK_STORE_PATH", STORE_PATH))
    raise ValueError(f"Unknown SPONSORLINK_STORE backend: {backend}")


# ============================================================
# Feature Flags
# ============================================================

def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("SPONSORLINK_DEBUG", "").lower() in ("1", "true", "yes")
