"""
The search session: query text, current results and saved ids.

A ``SearchSession`` is the state behind one open search page. It
reconciles three things: the results of the latest catalogue search,
the ids the user has saved to their account, and the on-disk cache of
saved ids that outlives the session.

Lifecycle
---------
Open a session with ``open_session()`` (or use ``SearchSession`` as a
context manager). Opening seeds the saved ids from the cache; leaving
the ``with`` block, normally or through an exception, flushes the full
saved-id set back to the cache.

Failures
--------
``submit_search()`` and ``save_book()`` never raise for remote failures
or unmet preconditions. They log the reason and return ``False``,
leaving the session state exactly as it was.

Concurrency
-----------
Sessions are driven from FastAPI's worker threads, so requests can
overlap. State is guarded by a lock held only around reads and
writes, never across a remote call. Each search takes a generation
number when it starts; a search that finishes after a newer one was
issued is discarded instead of overwriting the newer results.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple

from .auth import AuthSession
from .catalog.schemas import BookSummary
from .errors import RemoteCallError
from .storage import LocalIdCache


logger = logging.getLogger(__name__)


class SearchSession:
    """State and operations of one open search page.

    ``search_client`` needs a ``search(query) -> List[BookSummary]``
    method and ``account_client`` a ``save_book(book, token)`` method;
    both raise ``RemoteCallError`` on failure.
    """

    def __init__(self, search_client, account_client, cache: LocalIdCache) -> None:
        self.search_client = search_client
        self.account_client = account_client
        self.cache = cache
        self._lock = threading.Lock()
        self._query_text = ""
        self._results: List[BookSummary] = []
        self._saved_ids: Set[str] = set()
        self._generation = 0
        self._save_error: Optional[str] = None
        self._opened = False
        self._closed = False

    # -- lifecycle ---------------------------------------------------------

    def open(self) -> "SearchSession":
        """Seed the saved ids from the local cache."""
        ids = self.cache.read_ids()
        with self._lock:
            self._saved_ids.update(ids)
            self._opened = True
        logger.debug("Session opened with %s cached saved ids", len(ids))
        return self

    def close(self) -> None:
        """Flush the saved ids to the local cache, overwriting it.

        Calling ``close()`` more than once flushes only the first time, and
        a session that was never opened leaves the cache untouched.
        """
        with self._lock:
            if self._closed or not self._opened:
                return
            self._closed = True
            ids = sorted(self._saved_ids)
        self.cache.write_ids(ids)
        logger.debug("Session closed; flushed %s saved ids", len(ids))

    def __enter__(self) -> "SearchSession":
        if not self._opened:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    # -- state accessors ---------------------------------------------------

    @property
    def query_text(self) -> str:
        return self._query_text

    def set_query_text(self, text: str) -> None:
        with self._lock:
            self._query_text = text or ""

    @property
    def results(self) -> List[BookSummary]:
        with self._lock:
            return list(self._results)

    @property
    def saved_ids(self) -> Set[str]:
        with self._lock:
            return set(self._saved_ids)

    def is_saved(self, book_id: str) -> bool:
        with self._lock:
            return book_id in self._saved_ids

    @property
    def save_error(self) -> Optional[str]:
        return self._save_error

    def dismiss_error(self) -> None:
        with self._lock:
            self._save_error = None

    # -- operations --------------------------------------------------------

    def submit_search(self, text: Optional[str] = None) -> bool:
        """Search the catalogue with the current query text.

        When ``text`` is non-empty it replaces the query text first; an
        empty ``text`` leaves the query text as it was. On
        success the result set is replaced and the query text cleared;
        returns ``True`` only when results were applied.
        """
        with self._lock:
            query = self._query_text if text is None else text
            if not query:
                logger.info("Search skipped: empty query")
                return False
            self._query_text = query
            self._generation += 1
            generation = self._generation

        try:
            books = self.search_client.search(query)
        except RemoteCallError as exc:
            logger.error("Search for %r failed: %s", query, exc)
            return False

        with self._lock:
            if generation != self._generation:
                logger.debug(
                    "Discarding results of search %s for %r; search %s is newer",
                    generation, query, self._generation,
                )
                return False
            self._results = list(books)
            self._query_text = ""
        logger.info("Search for %r applied %s results", query, len(books))
        return True

    def save_book(self, book_id: str, auth: AuthSession) -> bool:
        """Persist one book from the current results to the user's account.

        Does nothing unless the book is in the current result set and
        ``auth`` holds a valid token. On success the id joins the saved
        ids; on failure the account API's message is kept as the
        session's dismissible error.
        """
        with self._lock:
            book = next((b for b in self._results if b.book_id == book_id), None)
        if book is None:
            logger.info("Save skipped: book %s is not in the current results", book_id)
            return False

        token = auth.get_token() if auth.logged_in() else None
        if not token:
            logger.info("Save skipped for book %s: no auth token", book_id)
            return False

        with self._lock:
            self._save_error = None
        try:
            self.account_client.save_book(book, token)
        except RemoteCallError as exc:
            logger.error("Saving book %s failed: %s", book_id, exc)
            with self._lock:
                self._save_error = exc.message
            return False

        with self._lock:
            self._saved_ids.add(book_id)
        return True


@contextmanager
def open_session(search_client, account_client, cache: LocalIdCache) -> Iterator[SearchSession]:
    """Open a session and flush its saved ids on every exit path."""
    session = SearchSession(search_client, account_client, cache).open()
    try:
        yield session
    finally:
        session.close()


class SessionRegistry:
    """Open sessions of the HTTP service, keyed by a random id.

    ``cache_factory`` receives the opener's ``AuthSession`` and returns
    the ``LocalIdCache`` that session should use.
    """

    def __init__(
        self,
        search_client,
        account_client,
        cache_factory: Callable[[AuthSession], LocalIdCache],
    ) -> None:
        self.search_client = search_client
        self.account_client = account_client
        self.cache_factory = cache_factory
        self._sessions: Dict[str, SearchSession] = {}
        self._lock = threading.Lock()

    def open(self, auth: AuthSession) -> Tuple[str, SearchSession]:
        session = SearchSession(
            self.search_client, self.account_client, self.cache_factory(auth)
        ).open()
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = session
        logger.info("Opened search session %s", session_id)
        return session_id, session

    def get(self, session_id: str) -> Optional[SearchSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info("Closed search session %s", session_id)
        return True

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.items())
            self._sessions.clear()
        for session_id, session in sessions:
            session.close()
            logger.info("Closed search session %s on shutdown", session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
