"""
Route definitions for the book search page.

Endpoints under /api/books:
- POST   /sessions                             : open a search session
- GET    /sessions/{session_id}                : current search view
- PUT    /sessions/{session_id}/query          : update the query text
- POST   /sessions/{session_id}/search         : run the search
- POST   /sessions/{session_id}/books/{id}/save: save a result to the account
- DELETE /sessions/{session_id}/error          : dismiss the inline error
- DELETE /sessions/{session_id}                : close the session (flushes cache)
- GET    /saved                                : saved-books view
- DELETE /saved/{book_id}                      : remove a saved book

The caller's identity comes from the ``Authorization: Bearer`` header
of each request.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ..auth import AuthSession
from ..errors import PreconditionNotMet, RemoteCallError
from ..saved import SavedBooksService
from ..session import SearchSession, SessionRegistry
from .schemas import QueryInput, SavedBooksView, SearchRequest, SearchView, SessionOpened
from .views import render_saved_view, render_search_view


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/books", tags=["books"])


def get_auth(authorization: Optional[str] = Header(default=None)) -> AuthSession:
    return AuthSession.from_header(authorization)


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_saved_service(request: Request) -> SavedBooksService:
    return request.app.state.saved_service


def _session_or_404(registry: SessionRegistry, session_id: str) -> SearchSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/sessions", response_model=SessionOpened)
def open_search_session(
    auth: AuthSession = Depends(get_auth),
    registry: SessionRegistry = Depends(get_registry),
) -> SessionOpened:
    session_id, session = registry.open(auth)
    return SessionOpened(session_id=session_id, view=render_search_view(session, auth))


@router.get("/sessions/{session_id}", response_model=SearchView)
def get_search_view(
    session_id: str,
    auth: AuthSession = Depends(get_auth),
    registry: SessionRegistry = Depends(get_registry),
) -> SearchView:
    session = _session_or_404(registry, session_id)
    return render_search_view(session, auth)


@router.put("/sessions/{session_id}/query", response_model=SearchView)
def update_query(
    session_id: str,
    body: QueryInput,
    auth: AuthSession = Depends(get_auth),
    registry: SessionRegistry = Depends(get_registry),
) -> SearchView:
    session = _session_or_404(registry, session_id)
    session.set_query_text(body.text)
    return render_search_view(session, auth)


@router.post("/sessions/{session_id}/search", response_model=SearchView)
def submit_search(
    session_id: str,
    body: Optional[SearchRequest] = None,
    auth: AuthSession = Depends(get_auth),
    registry: SessionRegistry = Depends(get_registry),
) -> SearchView:
    """Run the search.

    Failures and empty queries are not errors here: the view simply
    comes back unchanged.
    """
    session = _session_or_404(registry, session_id)
    session.submit_search(body.text if body else None)
    return render_search_view(session, auth)


@router.post("/sessions/{session_id}/books/{book_id}/save", response_model=SearchView)
def save_book(
    session_id: str,
    book_id: str,
    auth: AuthSession = Depends(get_auth),
    registry: SessionRegistry = Depends(get_registry),
) -> SearchView:
    session = _session_or_404(registry, session_id)
    if session.is_saved(book_id):
        raise HTTPException(status_code=409, detail="This book has already been saved!")
    session.save_book(book_id, auth)
    return render_search_view(session, auth)


@router.delete("/sessions/{session_id}/error", response_model=SearchView)
def dismiss_error(
    session_id: str,
    auth: AuthSession = Depends(get_auth),
    registry: SessionRegistry = Depends(get_registry),
) -> SearchView:
    session = _session_or_404(registry, session_id)
    session.dismiss_error()
    return render_search_view(session, auth)


@router.delete("/sessions/{session_id}")
def close_search_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
):
    if not registry.close(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "ok"}


@router.get("/saved", response_model=SavedBooksView)
def list_saved_books(
    auth: AuthSession = Depends(get_auth),
    service: SavedBooksService = Depends(get_saved_service),
) -> SavedBooksView:
    try:
        books = service.list_saved(auth)
    except PreconditionNotMet as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    except RemoteCallError as exc:
        logger.error("Loading saved books failed: %s", exc)
        raise HTTPException(status_code=502, detail=exc.message)
    return render_saved_view(books)


@router.delete("/saved/{book_id}", response_model=SavedBooksView)
def delete_saved_book(
    book_id: str,
    auth: AuthSession = Depends(get_auth),
    service: SavedBooksService = Depends(get_saved_service),
) -> SavedBooksView:
    if not auth.logged_in():
        raise HTTPException(status_code=401, detail="login required to remove saved books")
    service.delete_book(book_id, auth)
    return list_saved_books(auth=auth, service=service)
