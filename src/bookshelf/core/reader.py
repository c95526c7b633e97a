"""Reading session over a snapshot of one book."""

from __future__ import annotations

from dataclasses import dataclass

from .ingest import decode_embedded
from .models import Book

DEFAULT_TOTAL_PAGES = 100
MAX_CHAPTERS = 10
PAGES_PER_CHAPTER = 10


@dataclass(frozen=True)
class Chapter:
    number: int
    page: int


class ReaderSession:
    """Page navigation for the reading view.

    The session keeps its own copy of the book, so edits made to the catalog
    entry while reading do not change what is shown.
    """

    def __init__(self, book: Book):
        self.book = book
        self.current_page = 1

    @property
    def total_pages(self) -> int:
        return self.book.pages or DEFAULT_TOTAL_PAGES

    @property
    def progress(self) -> float:
        return self.current_page / self.total_pages * 100

    @property
    def chapters(self) -> list[Chapter]:
        count = min(MAX_CHAPTERS, self.total_pages // PAGES_PER_CHAPTER)
        return [Chapter(number=i, page=i * PAGES_PER_CHAPTER) for i in range(1, count + 1)]

    @property
    def cover_url(self) -> str:
        return self.book.display_url("cover")

    @property
    def document_url(self) -> str:
        return self.book.display_url("pdf")

    def go_to(self, page: int) -> bool:
        """Move to ``page``; out-of-range targets are ignored."""
        if 1 <= page <= self.total_pages:
            self.current_page = page
            return True
        return False

    def next_page(self) -> bool:
        return self.go_to(self.current_page + 1)

    def previous_page(self) -> bool:
        return self.go_to(self.current_page - 1)

    def download(self) -> tuple[str, bytes] | None:
        """Return (media type, bytes) of the embedded document, or None if only a URL is known."""
        if not self.book.pdf_data:
            return None
        return decode_embedded(self.book.pdf_data)
