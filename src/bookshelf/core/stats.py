"""Summary numbers shown on the home and admin dashboards."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .models import CATEGORIES, Book


@dataclass
class CatalogStats:
    total_books: int = 0
    total_pages: int = 0
    authors: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    by_subcategory: dict[tuple[str, str], int] = field(default_factory=dict)


def catalog_stats(books: Iterable[Book]) -> CatalogStats:
    stats = CatalogStats(
        by_category=dict.fromkeys(CATEGORIES, 0),
        by_subcategory={(cat, sub): 0 for cat, subs in CATEGORIES.items() for sub in subs},
    )
    authors: set[str] = set()
    for book in books:
        stats.total_books += 1
        stats.total_pages += book.pages or 0
        authors.add(book.author)
        stats.by_category[book.category] = stats.by_category.get(book.category, 0) + 1
        key = (book.category, book.subcategory)
        stats.by_subcategory[key] = stats.by_subcategory.get(key, 0) + 1
    stats.authors = len(authors)
    return stats


def recent_books(books: Sequence[Book], limit: int = 3) -> list[Book]:
    """Newest uploads first. ISO dates sort correctly as strings."""
    return sorted(books, key=lambda b: b.upload_date, reverse=True)[:limit]
