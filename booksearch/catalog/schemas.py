"""
Pydantic schema definitions for the search view.

``BookSummary`` is the normalized form of one catalogue search result
and is what the session keeps in its result set. The remaining models
describe what the HTTP layer sends back to the front-end: a view of
the search page (heading, query text, one card per book, optional
inline error) and a view of the account's saved books.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

NO_AUTHOR = "No author to display"


class BookSummary(BaseModel):
    """A single search result.

    Instances are frozen: once built from a catalogue response they are
    never modified. ``authors`` is never empty; a source without authors
    yields the ``NO_AUTHOR`` placeholder. An empty ``cover_image_url``
    means the book has no cover image.
    """

    model_config = ConfigDict(frozen=True)

    book_id: str
    title: str = ""
    authors: List[str] = Field(default_factory=lambda: [NO_AUTHOR])
    description: Optional[str] = None
    cover_image_url: str = ""

    @field_validator("authors", mode="before")
    @classmethod
    def _default_authors(cls, value):
        if not value:
            return [NO_AUTHOR]
        return value

    @field_validator("cover_image_url", mode="before")
    @classmethod
    def _blank_cover(cls, value):
        return value or ""


class CoverImage(BaseModel):
    src: str
    alt: str


class ActionButton(BaseModel):
    label: str
    disabled: bool = False


class BookCard(BaseModel):
    """One rendered result card."""

    book_id: str
    title: str
    authors_line: str
    description: Optional[str] = None
    cover: Optional[CoverImage] = None
    # Only present when the viewer can act on the card (e.g. logged in).
    button: Optional[ActionButton] = None


class SearchView(BaseModel):
    heading: str
    query_text: str = ""
    cards: List[BookCard] = Field(default_factory=list)
    # Dismissible message reported by the account API on a failed save.
    error: Optional[str] = None


class SessionOpened(BaseModel):
    session_id: str
    view: SearchView


class SavedBooksView(BaseModel):
    heading: str
    cards: List[BookCard] = Field(default_factory=list)


class QueryInput(BaseModel):
    text: str = ""


class SearchRequest(BaseModel):
    # When omitted, the session searches with its current query text.
    text: Optional[str] = None
