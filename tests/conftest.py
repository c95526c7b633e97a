"""Shared fixtures."""

from __future__ import annotations

import pytest

from bookshelf.core.models import Book
from bookshelf.core.storage import KeyValueStore


def make_book(book_id: str = "100", **overrides) -> Book:
    fields = {
        "id": book_id,
        "title": "Rayuela",
        "author": "Julio Cortázar",
        "description": "Una novela que se puede leer en varios órdenes",
        "category": "Literatura General",
        "subcategory": "Literatura Latinoamericana",
        "cover_url": "https://example.com/rayuela.jpg",
        "pdf_url": "/mock-pdfs/rayuela.pdf",
        "upload_date": "2024-04-01",
        "pages": 600,
    }
    fields.update(overrides)
    return Book(**fields)


@pytest.fixture
def storage(tmp_path):
    kv = KeyValueStore(tmp_path / "bookshelf.db")
    yield kv
    kv.close()
