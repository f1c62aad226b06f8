"""Session token ownership.

SessionStore is the only component that reads or writes the persisted token.
Everything else goes through its four accessors so all readers observe the
same value.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

SESSION_TOKEN_KEY = "vendorToken"


class TokenStorage(ABC):
    """Durable key/value storage for the session token."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the stored value for key, or None when absent."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; a missing key is not an error."""


class MemoryTokenStorage(TokenStorage):
    """Process-local storage, used for tests and short-lived scripts."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class FileTokenStorage(TokenStorage):
    """JSON file storage that survives process restarts.

    The file holds a single JSON object mapping keys to values and is created
    on first write.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize storage.

        Args:
            path: Location of the JSON file (parent directories are created on write)
        """
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring session file {self.path}: expected a JSON object")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        tmp_path.replace(self.path)

    def read(self, key: str) -> str | None:
        return self._load().get(key)

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class SessionStore:
    """Owns the authentication token lifecycle.

    The token is hydrated from storage once at construction. Reads are served
    from memory and have no side effects; writes go through to storage.
    """

    def __init__(self, storage: TokenStorage, key: str = SESSION_TOKEN_KEY) -> None:
        """Initialize the store and hydrate it from storage.

        Args:
            storage: Durable storage backend
            key: Storage key holding the token
        """
        self.storage = storage
        self.key = key
        self._token: str | None = None
        self.hydrate()

    def hydrate(self) -> None:
        """Load the persisted token into memory."""
        self._token = self.storage.read(self.key) or None
        if self._token:
            logger.debug("Restored persisted session")

    def set_token(self, token: str) -> None:
        """Persist a new session token, replacing any existing one.

        Args:
            token: Opaque token issued by the server
        """
        self.storage.write(self.key, token)
        self._token = token
        logger.info("Session token stored")

    def clear_token(self) -> None:
        """Remove the session token. Safe to call when already anonymous."""
        self.storage.delete(self.key)
        if self._token is not None:
            logger.info("Session token cleared")
        self._token = None

    def get_token(self) -> str | None:
        """Return the current token, or None when anonymous."""
        return self._token

    def is_authenticated(self) -> bool:
        """Return True iff a non-empty token is present."""
        return bool(self._token)
