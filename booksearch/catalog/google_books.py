"""
Google Books integration for the search view.

``GoogleBooksClient.search()`` runs a free-text volume search and maps
each returned volume into a ``BookSummary``. Failures are raised as
``RemoteCallError``; deciding whether to show or swallow them is left
to the session.
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, List

from pydantic import ValidationError

from ..errors import RemoteCallError
from .schemas import BookSummary
from .transport import http_json


logger = logging.getLogger(__name__)

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"


def book_from_volume(volume: Dict[str, Any]) -> BookSummary:
    """Convert one Google Books volume resource to a ``BookSummary``.

    Missing authors fall back to the placeholder author and a missing
    ``imageLinks.thumbnail`` yields an empty cover URL.
    """
    if not isinstance(volume, dict) or not volume.get("id"):
        raise RemoteCallError("Volume without an id in search response")
    info = volume.get("volumeInfo")
    if not isinstance(info, dict):
        raise RemoteCallError(f"Volume {volume['id']} has no volumeInfo")
    image_links = info.get("imageLinks")
    if not isinstance(image_links, dict):
        image_links = {}
    try:
        return BookSummary(
            book_id=str(volume["id"]),
            title=info.get("title") or "",
            authors=info.get("authors") or [],
            description=info.get("description"),
            cover_image_url=image_links.get("thumbnail") or "",
        )
    except ValidationError as exc:
        raise RemoteCallError(f"Volume {volume['id']} could not be parsed: {exc}") from exc


def books_from_response(data: Any) -> List[BookSummary]:
    """Map a volumes search response to a list of books.

    A response with no ``items`` key means the search matched nothing.
    """
    if not isinstance(data, dict):
        raise RemoteCallError("Unexpected search response shape")
    items = data.get("items") or []
    if not isinstance(items, list):
        raise RemoteCallError("Search response 'items' is not a list")
    return [book_from_volume(item) for item in items]


class GoogleBooksClient:
    """Search collaborator backed by the Google Books volumes API."""

    def __init__(self, base_url: str = GOOGLE_BOOKS_URL, timeout: float = 10.0) -> None:
        self.base_url = base_url
        self.timeout = timeout

    def search(self, query: str) -> List[BookSummary]:
        url = f"{self.base_url}?{urllib.parse.urlencode({'q': query})}"
        data = http_json(url, timeout=self.timeout)
        books = books_from_response(data)
        logger.info("Google Books search %r returned %s volumes", query, len(books))
        return books
