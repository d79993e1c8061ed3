"""
Saved-books page: list the account's saved books and remove them.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from .auth import AuthSession
from .catalog.schemas import BookSummary
from .errors import PreconditionNotMet, RemoteCallError
from .storage import LocalIdCache


logger = logging.getLogger(__name__)


class SavedBooksService:
    def __init__(
        self, account_client, cache_factory: Callable[[AuthSession], LocalIdCache]
    ) -> None:
        self.account_client = account_client
        self.cache_factory = cache_factory

    def list_saved(self, auth: AuthSession) -> List[BookSummary]:
        """Return the logged-in user's saved books.

        Raises ``PreconditionNotMet`` without a valid token and lets
        ``RemoteCallError`` propagate so the caller can report it.
        """
        token = auth.get_token() if auth.logged_in() else None
        if not token:
            raise PreconditionNotMet("login required to view saved books")
        return self.account_client.get_me(token)

    def delete_book(self, book_id: str, auth: AuthSession) -> bool:
        """Remove a book from the account and from the local id cache."""
        token = auth.get_token() if auth.logged_in() else None
        if not token:
            logger.info("Delete skipped for book %s: no auth token", book_id)
            return False
        try:
            self.account_client.remove_book(book_id, token)
        except RemoteCallError as exc:
            logger.error("Removing book %s failed: %s", book_id, exc)
            return False
        self.cache_factory(auth).remove_id(book_id)
        return True
