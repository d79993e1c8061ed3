"""
Exception types shared by the search session and its collaborators.

Two kinds of failure exist. ``RemoteCallError`` covers everything that
goes wrong while talking to the book catalogue or the account API
(transport errors, non-success status codes, bodies that cannot be
parsed, GraphQL ``errors`` arrays). ``PreconditionNotMet`` covers the
local reasons an operation declines to run: an empty query, a missing
auth token, or a book that is no longer in the current result set.

The session catches both and logs them; neither is fatal.
"""

from __future__ import annotations

from typing import Optional


class BookSearchError(Exception):
    """Base class for errors raised inside ``booksearch``."""


class RemoteCallError(BookSearchError):
    """A search or persistence call failed."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class PreconditionNotMet(BookSearchError):
    """An operation was asked to run without what it needs."""
