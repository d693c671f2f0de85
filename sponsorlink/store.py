"""
Per-installation storage for the manifest token and salt.

The verifier only needs to read the current token and salt, and to
save a freshly generated salt the first time one is required. Any
key/value backend can provide that; the process environment is the
default.
"""

import json
import logging
import os
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from .constants import ACCESS_TOKEN_VARIABLE, INSTALLATION_ID_VARIABLE, MANIFEST_VARIABLE

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract interface for the token/salt store."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Get a raw value, or None if absent."""
        pass

    @abstractmethod
    def set(self, name: str, value: Optional[str]) -> None:
        """Set a value. None removes it."""
        pass

    def _read(self, name: str) -> Optional[str]:
        value = self.get(name)
        return value if value else None

    @property
    def token(self) -> Optional[str]:
        """Signed manifest token."""
        return self._read(MANIFEST_VARIABLE)

    @token.setter
    def token(self, value: Optional[str]) -> None:
        self.set(MANIFEST_VARIABLE, value)

    @property
    def salt(self) -> Optional[str]:
        """Installation id used to salt hashes."""
        return self._read(INSTALLATION_ID_VARIABLE)

    @salt.setter
    def salt(self, value: Optional[str]) -> None:
        self.set(INSTALLATION_ID_VARIABLE, value)

    @property
    def access_token(self) -> Optional[str]:
        """Last used access token for the issuer backend."""
        return self._read(ACCESS_TOKEN_VARIABLE)

    @access_token.setter
    def access_token(self, value: Optional[str]) -> None:
        self.set(ACCESS_TOKEN_VARIABLE, value)

    def ensure_salt(self) -> str:
        """Return the stored salt, generating and saving one if missing."""
        salt = self.salt
        if salt is None:
            salt = uuid.uuid4().hex
            self.salt = salt
            logger.info("Generated new installation salt")
        return salt


class EnvironmentStore(KeyValueStore):
    """Store backed by process environment variables."""

    def get(self, name: str) -> Optional[str]:
        return os.environ.get(name)

    def set(self, name: str, value: Optional[str]) -> None:
        if value:
            os.environ[name] = value
        else:
            os.environ.pop(name, None)


class MemoryStore(KeyValueStore):
    """Dict-backed store, mostly for tests and embedding."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def set(self, name: str, value: Optional[str]) -> None:
        if value:
            self._values[name] = value
        else:
            self._values.pop(name, None)


class JsonFileStore(KeyValueStore):
    """
    Store persisted as a JSON object on disk.

    Thread-safe with modification time caching. A missing file reads
    as an empty store; the file and its directory are created on the
    first write.
    """

    def __init__(self, path):
        self._path = Path(path).expanduser()
        self._lock = threading.RLock()
        self._cache: Optional[Dict[str, str]] = None
        self._mtime: float = 0

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, str]:
        with self._lock:
            try:
                mtime = os.path.getmtime(self._path)
            except FileNotFoundError:
                self._cache = {}
                self._mtime = 0
                return self._cache

            if self._cache is None or mtime > self._mtime:
                with open(self._path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError(f"Store file {self._path} must contain a JSON object")
                self._cache = {k: v for k, v in data.items() if isinstance(v, str)}
                self._mtime = mtime

            return self._cache

    def get(self, name: str) -> Optional[str]:
        return self._load().get(name)

    def set(self, name: str, value: Optional[str]) -> None:
        with self._lock:
            values = dict(self._load())
            if value:
                values[name] = value
            else:
                values.pop(name, None)

            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(values, f, indent=2, sort_keys=True)
            os.replace(tmp, self._path)

            self._cache = values
            self._mtime = os.path.getmtime(self._path)
