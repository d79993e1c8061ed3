"""
Shared fixtures: in-memory stand-ins for the catalogue and the account
API, a temporary saved-id cache and JWT helpers.
"""

import base64
import json
import time

import pytest

from booksearch.auth import AuthSession
from booksearch.catalog.schemas import BookSummary
from booksearch.errors import RemoteCallError
from booksearch.storage import LocalIdCache


def make_jwt(payload: dict) -> str:
    """Build an unsigned JWT-shaped token carrying ``payload``."""

    def segment(obj) -> str:
        raw = json.dumps(obj).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    return f"{segment({'alg': 'HS256', 'typ': 'JWT'})}.{segment(payload)}.signature"


def book(book_id: str, title: str = "", **kwargs) -> BookSummary:
    return BookSummary(book_id=book_id, title=title or f"Book {book_id}", **kwargs)


class FakeSearchClient:
    def __init__(self, results=None, error: RemoteCallError = None) -> None:
        self.results = {} if results is None else results
        self.error = error
        self.queries = []

    def search(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        if isinstance(self.results, dict):
            return list(self.results.get(query, []))
        return list(self.results)


class FakeAccountClient:
    def __init__(self, saved=None) -> None:
        self.saved = list(saved or [])
        self.save_calls = []
        self.remove_calls = []
        self.save_error = None
        self.remove_error = None

    def save_book(self, book, token):
        self.save_calls.append((book, token))
        if self.save_error is not None:
            raise self.save_error
        if all(b.book_id != book.book_id for b in self.saved):
            self.saved.append(book)

    def remove_book(self, book_id, token):
        self.remove_calls.append((book_id, token))
        if self.remove_error is not None:
            raise self.remove_error
        self.saved = [b for b in self.saved if b.book_id != book_id]

    def get_me(self, token):
        return list(self.saved)


@pytest.fixture
def token():
    return make_jwt({"data": {"_id": "user-1", "username": "reader"}, "exp": time.time() + 3600})


@pytest.fixture
def auth(token):
    return AuthSession(token)


@pytest.fixture
def anonymous():
    return AuthSession(None)


@pytest.fixture
def cache(tmp_path):
    return LocalIdCache(tmp_path / "saved_books.json")


@pytest.fixture
def search_client():
    return FakeSearchClient(
        {
            "Hobbit": [
                book("b1", "The Hobbit", description="A tale"),
                book("b2", "The Hobbit Companion", authors=["David Day"]),
            ],
            "Dune": [book("d1", "Dune", authors=["Frank Herbert"])],
        }
    )


@pytest.fixture
def account_client():
    return FakeAccountClient()
