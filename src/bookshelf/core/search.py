"""Free-text and category filtering over the catalog."""

from __future__ import annotations

from collections.abc import Iterable

from .models import ALL_CATEGORIES, Book


def _norm(s: str | None) -> str:
    return (s or "").casefold()


def matches_search(book: Book, search_term: str) -> bool:
    term = _norm(search_term)
    if not term:
        return True
    fields = (book.title, book.author, book.description, book.category, book.subcategory)
    return any(term in _norm(f) for f in fields)


def matches_category(book: Book, selected_category: str) -> bool:
    return selected_category in (ALL_CATEGORIES, book.category, book.subcategory)


def filter_books(books: Iterable[Book], search_term: str, selected_category: str) -> list[Book]:
    """Return the books matching both the search term and the category, in their original order."""
    return [
        b for b in books if matches_search(b, search_term) and matches_category(b, selected_category)
    ]
