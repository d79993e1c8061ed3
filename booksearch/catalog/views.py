"""
Presentation glue: turn session state into the view models the
front-end renders.
"""

from __future__ import annotations

from typing import List, Optional

from ..auth import AuthSession
from .schemas import (
    ActionButton,
    BookCard,
    BookSummary,
    CoverImage,
    SavedBooksView,
    SearchView,
)

SAVE_LABEL = "Save this Book!"
ALREADY_SAVED_LABEL = "This book has already been saved!"
DELETE_LABEL = "Delete this Book!"


def _card(book: BookSummary, button: Optional[ActionButton]) -> BookCard:
    cover = None
    if book.cover_image_url:
        cover = CoverImage(src=book.cover_image_url, alt=f"The cover for {book.title}")
    return BookCard(
        book_id=book.book_id,
        title=book.title,
        authors_line="Authors: " + ", ".join(book.authors),
        description=book.description,
        cover=cover,
        button=button,
    )


def save_button(saved: bool) -> ActionButton:
    """The save affordance; disabled once the book is saved."""
    return ActionButton(label=ALREADY_SAVED_LABEL if saved else SAVE_LABEL, disabled=saved)


def render_search_view(session, auth: AuthSession) -> SearchView:
    """Build the search page for ``session`` as seen by ``auth``.

    Save buttons only appear for logged-in users.
    """
    books = session.results
    saved_ids = session.saved_ids
    logged_in = auth.logged_in()
    heading = f"Viewing {len(books)} results:" if books else "Search for a book to begin"
    cards: List[BookCard] = [
        _card(book, save_button(book.book_id in saved_ids) if logged_in else None)
        for book in books
    ]
    return SearchView(
        heading=heading,
        query_text=session.query_text,
        cards=cards,
        error=session.save_error,
    )


def render_saved_view(books: List[BookSummary]) -> SavedBooksView:
    count = len(books)
    if count:
        heading = f"Viewing {count} saved {'book' if count == 1 else 'books'}:"
    else:
        heading = "You have no saved books!"
    return SavedBooksView(
        heading=heading,
        cards=[_card(book, ActionButton(label=DELETE_LABEL)) for book in books],
    )
