"""
File-based credential persistence.

Credentials are stored as one JSON document per key (normally the manager's
id()) in a directory, with owner-only permissions. Secrets are written in
cleartext; protecting the directory is the caller's responsibility.
"""

import logging
import os
import stat
from pathlib import Path

from authcore.oauth2.models import Credential

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_DIR = Path("credentials")
CREDENTIAL_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR


class CredentialStore:
    """
    Stores credentials at {directory}/{key}.json.

    Example:
        >>> store = CredentialStore(Path("credentials"))
        >>> store.save("api.github.com", credential)
        >>> store.load("api.github.com")
        Credential(...)
    """

    def __init__(self, directory: Path | str = DEFAULT_CREDENTIALS_DIR):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid credential key: {key!r}")
        return self.directory / f"{key}.json"

    def save(self, key: str, credential: Credential) -> Path:
        """Write a credential, replacing any previous one for the key."""
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)

        document = credential.to_json()
        tmp_path = path.with_suffix(".json.tmp")
        # A leftover temp file could carry wider permissions than ours
        tmp_path.unlink(missing_ok=True)

        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, CREDENTIAL_FILE_MODE)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document)
            tmp_path.replace(path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.debug(f"Saved credentials for '{key}'", extra={"destination_path": str(path)})
        return path

    def load(self, key: str) -> Credential | None:
        """
        Load a credential. Returns None if nothing is stored for the key.

        Raises:
            SerdeError: If the stored document is corrupt
        """
        path = self._path(key)
        if not path.exists():
            return None
        return Credential.from_json(path.read_text())

    def delete(self, key: str) -> bool:
        """Delete a stored credential. Returns True if one was deleted."""
        path = self._path(key)
        if path.exists():
            path.unlink()
            logger.info(f"Deleted stored credentials for '{key}'")
            return True
        return False

    def list_keys(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))


async def persist_refreshes(manager, store: CredentialStore) -> int:
    """
    Save every credential the manager publishes until its watch closes.

    Meant to run as a background task next to a long-lived manager:
        task = asyncio.create_task(persist_refreshes(manager, store))

    Returns:
        Number of credentials saved
    """
    saved = 0
    key = manager.id()
    async for credential in manager.watch_on_refresh():
        try:
            store.save(key, credential)
            saved += 1
        except OSError as e:
            logger.error(f"Failed to persist refreshed credentials for '{key}': {e}")
    return saved


__all__ = ["CredentialStore", "DEFAULT_CREDENTIALS_DIR", "persist_refreshes"]
