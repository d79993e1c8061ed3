# booksearch/main.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .catalog.router import router as books_router
from .catalog.account import AccountClient
from .catalog.google_books import GoogleBooksClient
from .config import Settings, configure_logging
from .saved import SavedBooksService
from .session import SessionRegistry
from .storage import cache_for


def create_app(
    settings: Optional[Settings] = None,
    search_client=None,
    account_client=None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    search_client = search_client or GoogleBooksClient(
        settings.google_books_url, timeout=settings.request_timeout
    )
    account_client = account_client or AccountClient(
        settings.graphql_url, timeout=settings.request_timeout
    )

    def cache_factory(auth):
        return cache_for(settings, auth)

    registry = SessionRegistry(search_client, account_client, cache_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Open sessions are flushed to the local cache on shutdown.
        registry.close_all()

    app = FastAPI(
        title="Book Search",
        description=(
            "Search the Google Books catalogue and save books to your "
            "account through its GraphQL API."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.saved_service = SavedBooksService(account_client, cache_factory)

    @app.get("/")
    def health_check():
        return {"status": "ok", "open_sessions": len(registry)}

    app.include_router(books_router)
    return app


app = create_app()
