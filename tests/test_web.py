"""Tests for the HTTP surface."""

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from bookshelf.core.auth import StaticCredentials
from bookshelf.core.editor import EditorSession
from bookshelf.core.errors import BookNotFound
from bookshelf.core.library import Library
from bookshelf.core.store import DeleteBook, UpdateBook
from bookshelf.web.app import create_app

MiB = 1024 * 1024

FORM = {
    "title": "Mapas y Países",
    "author": "Prof. Lucía Gómez",
    "description": "Un recorrido por los continentes",
    "category": "Educación Primaria",
    "subcategory": "Geografía",
    "pages": "64",
}


@pytest.fixture
def lib(tmp_path):
    library = Library.open(tmp_path / "web.db", credentials=StaticCredentials("admin", "biblioteca123"))
    yield library
    library.close()


@pytest.fixture
def client(lib):
    return TestClient(create_app(lib))


def _login(client):
    resp = client.post("/api/login", json={"username": "admin", "password": "biblioteca123"})
    assert resp.status_code == 200


def test_health_and_security_headers(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["books"] == 10
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_list_and_filter(client):
    resp = client.get("/api/books", params={"q": "años"})
    assert [b["title"] for b in resp.json()["books"]] == ["Cien Años de Soledad"]

    resp = client.get("/api/books", params={"q": "", "category": "Literatura Latinoamericana"})
    assert resp.json()["total"] == 3
    assert client.get("/api/state").json()["selectedCategory"] == "Literatura Latinoamericana"


def test_get_missing_book(client):
    assert client.get("/api/books/nope").status_code == 404


def test_admin_view_redirects_to_login(client):
    resp = client.post("/api/view", json={"view": "admin"})
    assert resp.json()["view"] == "login"
    state = client.get("/api/state").json()
    assert state["storedView"] == "admin"
    assert state["view"] == "login"


def test_unknown_view_rejected(client):
    assert client.post("/api/view", json={"view": "settings"}).status_code == 400


def test_bad_login(client):
    resp = client.post("/api/login", json={"username": "admin", "password": "x"})
    assert resp.status_code == 401
    assert client.get("/api/state").json()["isAuthenticated"] is False


def test_admin_endpoints_require_login(client):
    assert client.post("/api/admin/books", data=FORM).status_code == 403
    assert client.delete("/api/admin/books/1").status_code == 403


def test_create_book_with_uploads(client, lib):
    _login(client)
    resp = client.post(
        "/api/admin/books",
        data=FORM,
        files={
            "cover": ("mapas.png", b"\x89PNG-data", "image/png"),
            "pdf": ("mapas.pdf", b"%PDF-1.7", "application/pdf"),
        },
    )
    assert resp.status_code == 201
    created = resp.json()
    assert created["coverDisplayUrl"] == f"/api/books/{created['id']}/cover"
    assert lib.find(created["id"]).pages == 64

    cover = client.get(created["coverDisplayUrl"])
    assert cover.content == b"\x89PNG-data"
    assert cover.headers["content-type"] == "image/png"

    client.post(f"/api/books/{created['id']}/open")
    reader = client.get("/api/reader", params={"page": 20}).json()
    assert reader["page"] == 20
    assert reader["totalPages"] == 64
    assert len(reader["chapters"]) == 6
    assert client.get("/api/reader/download").content == b"%PDF-1.7"


def test_oversized_cover_rejected(client, lib):
    _login(client)
    resp = client.post(
        "/api/admin/books",
        data=FORM,
        files={"cover": ("big.png", b"0" * (6 * MiB), "image/png")},
    )
    assert resp.status_code == 400
    assert len(lib.state.books) == 10


def test_update_and_delete(client, lib):
    _login(client)
    form = {
        **FORM,
        "title": "El Quijote (edición escolar)",
        "category": "Literatura General",
        "subcategory": "Clásicos",
        "cover_url": "https://example.com/q.jpg",
        "pdf_url": "/mock-pdfs/quijote.pdf",
    }
    resp = client.put("/api/admin/books/1", data=form)
    assert resp.status_code == 200
    assert lib.state.books[0].title == "El Quijote (edición escolar)"
    assert lib.state.books[0].upload_date == "2024-01-15"

    assert client.put("/api/admin/books/nope", data=form).status_code == 404
    assert client.delete("/api/admin/books/1").status_code == 200
    assert lib.find("1") is None
    assert client.delete("/api/admin/books/1").status_code == 404


def test_stats(client):
    body = client.get("/api/stats").json()
    assert body["totalBooks"] == 10
    assert body["byCategory"]["Educación Primaria"] == 6
    assert [b["id"] for b in body["recent"]] == ["10", "9", "8"]


def test_logout(client):
    _login(client)
    assert client.post("/api/logout").json()["view"] == "home"
    assert client.post("/api/admin/books", data=FORM).status_code == 403


def test_embedded_fields_that_are_not_data_urls_answer_404(client, lib):
    book = replace(lib.find("1"), cover_data="https://example.com/c.jpg", pdf_data="/mock-pdfs/x.pdf")
    lib.store.dispatch(UpdateBook(book))

    resp = client.get("/api/books/1/cover")
    assert resp.status_code == 404
    assert "error" in resp.json()

    client.post("/api/books/1/open")
    resp = client.get("/api/reader/download")
    assert resp.status_code == 404
    assert "error" in resp.json()


def test_update_of_book_removed_mid_save_answers_404(client, lib, monkeypatch):
    _login(client)

    async def save_after_delete(self):
        lib.store.dispatch(DeleteBook(self.editing.id))
        raise BookNotFound("removed")

    monkeypatch.setattr(EditorSession, "save", save_after_delete)
    form = {**FORM, "cover_url": "https://example.com/q.jpg", "pdf_url": "/mock-pdfs/q.pdf"}
    resp = client.put("/api/admin/books/2", data=form)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Book not found."}
    assert lib.find("2") is None
