"""
Tests for the HTTP surface of the search page.
"""

import pytest
from fastapi.testclient import TestClient

from booksearch.config import Settings
from booksearch.errors import RemoteCallError
from booksearch.main import create_app
from booksearch.storage import LocalIdCache

from conftest import book


@pytest.fixture
def app(tmp_path, search_client, account_client):
    return create_app(Settings(cache_dir=tmp_path), search_client, account_client)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def headers(token):
    return {"Authorization": f"Bearer {token}"}


def open_session(client, headers=None):
    response = client.post("/api/books/sessions", headers=headers or {})
    assert response.status_code == 200
    return response.json()["session_id"]


class TestSearchPage:
    def test_health_check(self, client):
        assert client.get("/").json()["status"] == "ok"

    def test_new_session_shows_prompt(self, client):
        response = client.post("/api/books/sessions")
        view = response.json()["view"]
        assert view["heading"] == "Search for a book to begin"
        assert view["cards"] == []

    def test_search_renders_cards(self, client, headers):
        sid = open_session(client, headers)
        view = client.post(f"/api/books/sessions/{sid}/search", json={"text": "Hobbit"}, headers=headers).json()

        assert view["heading"] == "Viewing 2 results:"
        assert view["query_text"] == ""
        first = view["cards"][0]
        assert first["title"] == "The Hobbit"
        assert first["authors_line"] == "Authors: No author to display"
        assert first["description"] == "A tale"
        assert first["cover"] is None
        assert first["button"] == {"label": "Save this Book!", "disabled": False}

    def test_query_then_search_without_body(self, client):
        sid = open_session(client)
        view = client.put(f"/api/books/sessions/{sid}/query", json={"text": "Dune"}).json()
        assert view["query_text"] == "Dune"
        view = client.post(f"/api/books/sessions/{sid}/search").json()
        assert [c["book_id"] for c in view["cards"]] == ["d1"]

    def test_empty_search_leaves_view_unchanged(self, client, search_client):
        sid = open_session(client)
        client.post(f"/api/books/sessions/{sid}/search", json={"text": "Dune"})
        view = client.post(f"/api/books/sessions/{sid}/search", json={"text": ""}).json()
        assert [c["book_id"] for c in view["cards"]] == ["d1"]
        assert search_client.queries == ["Dune"]

    def test_anonymous_cards_have_no_save_button(self, client):
        sid = open_session(client)
        view = client.post(f"/api/books/sessions/{sid}/search", json={"text": "Hobbit"}).json()
        assert all(card["button"] is None for card in view["cards"])

    def test_cover_alt_text(self, client, search_client):
        search_client.results["Covered"] = [book("c1", "Covered", cover_image_url="http://img/c1")]
        sid = open_session(client)
        view = client.post(f"/api/books/sessions/{sid}/search", json={"text": "Covered"}).json()
        assert view["cards"][0]["cover"] == {"src": "http://img/c1", "alt": "The cover for Covered"}

    def test_unknown_session_is_404(self, client):
        assert client.get("/api/books/sessions/nope").status_code == 404
        assert client.delete("/api/books/sessions/nope").status_code == 404


class TestSaving:
    def test_save_disables_button(self, client, headers, account_client):
        sid = open_session(client, headers)
        client.post(f"/api/books/sessions/{sid}/search", json={"text": "Hobbit"}, headers=headers)

        view = client.post(f"/api/books/sessions/{sid}/books/b1/save", headers=headers).json()

        assert view["cards"][0]["button"] == {
            "label": "This book has already been saved!",
            "disabled": True,
        }
        assert view["cards"][1]["button"]["disabled"] is False
        assert len(account_client.save_calls) == 1

    def test_second_save_is_rejected(self, client, headers, account_client):
        sid = open_session(client, headers)
        client.post(f"/api/books/sessions/{sid}/search", json={"text": "Hobbit"}, headers=headers)
        client.post(f"/api/books/sessions/{sid}/books/b1/save", headers=headers)

        response = client.post(f"/api/books/sessions/{sid}/books/b1/save", headers=headers)

        assert response.status_code == 409
        assert len(account_client.save_calls) == 1

    def test_anonymous_save_does_nothing(self, client, account_client):
        sid = open_session(client)
        client.post(f"/api/books/sessions/{sid}/search", json={"text": "Hobbit"})
        response = client.post(f"/api/books/sessions/{sid}/books/b1/save")
        assert response.status_code == 200
        assert account_client.save_calls == []

    def test_failed_save_shows_dismissible_error(self, client, headers, account_client):
        account_client.save_error = RemoteCallError("Something went wrong!")
        sid = open_session(client, headers)
        client.post(f"/api/books/sessions/{sid}/search", json={"text": "Hobbit"}, headers=headers)

        view = client.post(f"/api/books/sessions/{sid}/books/b1/save", headers=headers).json()
        assert view["error"] == "Something went wrong!"
        assert view["cards"][0]["button"]["disabled"] is False

        view = client.delete(f"/api/books/sessions/{sid}/error", headers=headers).json()
        assert view["error"] is None

    def test_closing_session_flushes_cache(self, client, headers, tmp_path):
        sid = open_session(client, headers)
        client.post(f"/api/books/sessions/{sid}/search", json={"text": "Hobbit"}, headers=headers)
        client.post(f"/api/books/sessions/{sid}/books/b1/save", headers=headers)
        client.post(f"/api/books/sessions/{sid}/books/b2/save", headers=headers)

        assert client.delete(f"/api/books/sessions/{sid}").json() == {"status": "ok"}
        assert sorted(LocalIdCache(tmp_path / "saved_books.json").read_ids()) == ["b1", "b2"]

    def test_new_session_sees_cached_ids(self, client, headers):
        sid = open_session(client, headers)
        client.post(f"/api/books/sessions/{sid}/search", json={"text": "Dune"}, headers=headers)
        client.post(f"/api/books/sessions/{sid}/books/d1/save", headers=headers)
        client.delete(f"/api/books/sessions/{sid}")

        sid = open_session(client, headers)
        view = client.post(f"/api/books/sessions/{sid}/search", json={"text": "Dune"}, headers=headers).json()
        assert view["cards"][0]["button"]["disabled"] is True

    def test_shutdown_flushes_open_sessions(self, tmp_path, search_client, account_client, headers):
        app = create_app(Settings(cache_dir=tmp_path), search_client, account_client)
        with TestClient(app) as c:
            sid = open_session(c, headers)
            c.post(f"/api/books/sessions/{sid}/search", json={"text": "Dune"}, headers=headers)
            c.post(f"/api/books/sessions/{sid}/books/d1/save", headers=headers)
        assert LocalIdCache(tmp_path / "saved_books.json").read_ids() == ["d1"]


class TestSavedBooksPage:
    def test_requires_login(self, client):
        assert client.get("/api/books/saved").status_code == 401
        assert client.delete("/api/books/saved/b1").status_code == 401

    def test_lists_saved_books(self, client, headers, account_client):
        account_client.saved = [book("b1", "The Hobbit"), book("d1", "Dune")]
        view = client.get("/api/books/saved", headers=headers).json()
        assert view["heading"] == "Viewing 2 saved books:"
        assert [c["button"]["label"] for c in view["cards"]] == ["Delete this Book!"] * 2

    def test_singular_and_empty_headings(self, client, headers, account_client):
        assert client.get("/api/books/saved", headers=headers).json()["heading"] == "You have no saved books!"
        account_client.saved = [book("b1")]
        assert client.get("/api/books/saved", headers=headers).json()["heading"] == "Viewing 1 saved book:"

    def test_delete_removes_book_and_cached_id(self, client, headers, account_client, tmp_path):
        cache = LocalIdCache(tmp_path / "saved_books.json")
        cache.write_ids(["b1", "d1"])
        account_client.saved = [book("b1"), book("d1")]

        view = client.delete("/api/books/saved/b1", headers=headers).json()

        assert [c["book_id"] for c in view["cards"]] == ["d1"]
        assert cache.read_ids() == ["d1"]

    def test_account_failure_is_502(self, client, headers, account_client, monkeypatch):
        def broken(token):
            raise RemoteCallError("account API down")

        monkeypatch.setattr(account_client, "get_me", broken)
        response = client.get("/api/books/saved", headers=headers)
        assert response.status_code == 502
        assert response.json()["detail"] == "account API down"
