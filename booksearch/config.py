"""
Configuration for the book search service.

Values come from the environment (optionally via a ``.env`` file) and
are collected into a ``Settings`` model that the app factory passes
down explicitly. Nothing else in the package reads ``os.environ``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_CACHE_DIR = Path(__file__).resolve().parents[1] / "data"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes")


class Settings(BaseModel):
    """Runtime settings.

    ``cache_per_user`` keys the saved-id cache file by the user id found
    in the auth token. It is off by default, which keeps one cache per
    device regardless of who is logged in.
    """

    google_books_url: str = "https://www.googleapis.com/books/v1/volumes"
    graphql_url: str = "http://localhost:3001/graphql"
    cache_dir: Path = DEFAULT_CACHE_DIR
    request_timeout: float = 10.0
    cache_per_user: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            google_books_url=os.getenv("BOOKSEARCH_GOOGLE_BOOKS_URL", defaults.google_books_url),
            graphql_url=os.getenv("BOOKSEARCH_GRAPHQL_URL", defaults.graphql_url),
            cache_dir=Path(os.getenv("BOOKSEARCH_CACHE_DIR", str(defaults.cache_dir))),
            request_timeout=float(
                os.getenv("BOOKSEARCH_REQUEST_TIMEOUT", str(defaults.request_timeout))
            ),
            cache_per_user=_env_flag("BOOKSEARCH_CACHE_PER_USER"),
            log_level=os.getenv("BOOKSEARCH_LOG_LEVEL", defaults.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Set the root log format once; safe to call repeatedly."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
