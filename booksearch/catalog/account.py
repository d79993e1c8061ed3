"""
GraphQL client for the account API that stores a user's saved books.

All calls are authenticated with the bearer token of the logged-in
user. A non-empty GraphQL ``errors`` array is treated the same as a
transport failure: the first message is raised as ``RemoteCallError``
so it can be shown next to the card that triggered it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..errors import RemoteCallError
from .schemas import BookSummary
from .transport import http_json


logger = logging.getLogger(__name__)

GRAPHQL_URL = "http://localhost:3001/graphql"

SAVED_BOOK_FIELDS = "bookId authors description title image"

SAVE_BOOK = f"""
mutation saveBook($bookData: BookInput!) {{
  saveBook(bookData: $bookData) {{
    _id
    username
    savedBooks {{ {SAVED_BOOK_FIELDS} }}
  }}
}}
"""

REMOVE_BOOK = f"""
mutation removeBook($bookId: ID!) {{
  removeBook(bookId: $bookId) {{
    _id
    username
    savedBooks {{ {SAVED_BOOK_FIELDS} }}
  }}
}}
"""

GET_ME = f"""
query me {{
  me {{
    _id
    username
    email
    savedBooks {{ {SAVED_BOOK_FIELDS} }}
  }}
}}
"""


def book_input(book: BookSummary) -> Dict[str, Any]:
    """Shape a ``BookSummary`` as the API's ``BookInput``."""
    return {
        "bookId": book.book_id,
        "authors": list(book.authors),
        "title": book.title,
        "description": book.description,
        "image": book.cover_image_url,
    }


def book_from_saved(entry: Dict[str, Any]) -> BookSummary:
    """Convert one ``savedBooks`` entry back to a ``BookSummary``."""
    try:
        return BookSummary(
            book_id=str(entry["bookId"]),
            title=entry.get("title") or "",
            authors=entry.get("authors") or [],
            description=entry.get("description"),
            cover_image_url=entry.get("image") or "",
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as exc:
        raise RemoteCallError(f"Malformed saved book entry: {exc}") from exc


class AccountClient:
    """Persistence collaborator speaking GraphQL over HTTP."""

    def __init__(self, url: str = GRAPHQL_URL, timeout: float = 10.0) -> None:
        self.url = url
        self.timeout = timeout

    def execute(
        self, query: str, token: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Send a GraphQL operation and return its ``data`` object."""
        body = http_json(
            self.url,
            payload={"query": query, "variables": variables or {}},
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )
        if not isinstance(body, dict):
            raise RemoteCallError("Unexpected GraphQL response shape")
        errors = body.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else str(first)
            logger.warning("GraphQL call returned errors: %s", errors)
            raise RemoteCallError(message or "something went wrong!")
        data = body.get("data")
        if not isinstance(data, dict):
            raise RemoteCallError("GraphQL response has no data")
        return data

    def save_book(self, book: BookSummary, token: str) -> None:
        data = self.execute(SAVE_BOOK, token, {"bookData": book_input(book)})
        if not data.get("saveBook"):
            raise RemoteCallError("saveBook returned no user")
        logger.info("Saved book %s to account", book.book_id)

    def remove_book(self, book_id: str, token: str) -> None:
        data = self.execute(REMOVE_BOOK, token, {"bookId": book_id})
        if not data.get("removeBook"):
            raise RemoteCallError("removeBook returned no user")
        logger.info("Removed book %s from account", book_id)

    def get_me(self, token: str) -> List[BookSummary]:
        data = self.execute(GET_ME, token)
        me = data.get("me") or {}
        return [book_from_saved(entry) for entry in me.get("savedBooks") or []]
