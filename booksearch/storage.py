"""
Durable local cache of saved book ids.

The cache is a JSON file holding a flat array of book ids. It mirrors
which books the user has saved so that a freshly opened search view
can disable the save button for them without asking the account API.
Reads never fail: a missing or malformed file reads as an empty list.
Writes are best-effort and overwrite the previous contents.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Iterable, List, Optional

from .auth import AuthSession
from .config import Settings


logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "saved_books.json"

# Guards reads and writes of every cache file.
_cache_lock = threading.Lock()


class LocalIdCache:
    """A list of saved book ids persisted to one JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read_ids(self) -> List[str]:
        """Load the stored ids.

        Returns
        -------
        List[str]
            The stored ids in file order, or an empty list when the file
            is missing or cannot be parsed.
        """
        with _cache_lock:
            return self._read()

    def write_ids(self, ids: Iterable[str]) -> None:
        """Replace the stored ids with ``ids``."""
        with _cache_lock:
            self._write(list(dict.fromkeys(str(i) for i in ids)))

    def remove_id(self, book_id: str) -> None:
        with _cache_lock:
            ids = self._read()
            if book_id in ids:
                ids.remove(book_id)
                self._write(ids)

    def _read(self) -> List[str]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read saved-id cache %s: %s", self.path, exc)
            return []
        if not isinstance(data, list):
            logger.warning("Saved-id cache %s does not hold a list; ignoring it", self.path)
            return []
        return [str(i) for i in data]

    def _write(self, ids: List[str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(ids, f, ensure_ascii=False, indent=2)
            tmp.replace(self.path)
        except OSError as exc:
            logger.error("Could not write saved-id cache %s: %s", self.path, exc)
            return
        logger.debug("Wrote %s ids to %s", len(ids), self.path)


def _safe_name(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", value)


def cache_for(settings: Settings, auth: Optional[AuthSession] = None) -> LocalIdCache:
    """Return the cache a session should use.

    By default every session on this device shares one file. With
    ``settings.cache_per_user`` the file is keyed by the token's user id
    when one is available.
    """
    name = CACHE_FILE_NAME
    if settings.cache_per_user and auth is not None:
        uid = auth.user_id()
        if uid:
            name = f"saved_books.{_safe_name(uid)}.json"
    return LocalIdCache(settings.cache_dir / name)
