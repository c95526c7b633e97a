"""Admin editing session: form state, file selections and saving into the store."""

from __future__ import annotations

import time
from dataclasses import dataclass, fields
from datetime import date

import structlog

from .errors import BookNotFound, ValidationFailure
from .ingest import (
    MAX_COVER_BYTES,
    MAX_DOCUMENT_BYTES,
    FileHandle,
    PreviewHandle,
    PreviewRegistry,
    encode_to_embeddable,
    validate_cover_candidate,
    validate_document_candidate,
)
from .models import CATEGORIES, Book, subcategories_of
from .store import AddBook, CatalogStore, UpdateBook

log = structlog.get_logger()

DEFAULT_COVER_URL = "https://images.unsplash.com/photo-1544716278-ca5e3f4abd8c?w=300&h=400&fit=crop"
DEFAULT_PDF_URL = "/mock-pdfs/default.pdf"

_REQUIRED = ("title", "author", "category", "subcategory")


@dataclass
class BookForm:
    title: str = ""
    author: str = ""
    description: str = ""
    category: str = ""
    subcategory: str = ""
    cover_url: str = ""
    pdf_url: str = ""
    pages: int | None = None

    @classmethod
    def from_book(cls, book: Book) -> BookForm:
        return cls(**{f.name: getattr(book, f.name) for f in fields(cls)})


class EditorSession:
    """One create/edit dialog of the admin screen.

    The session owns the cover preview it creates and releases it whenever the
    selection is replaced, removed, saved or the session is closed.
    """

    def __init__(self, store: CatalogStore, previews: PreviewRegistry | None = None):
        self.store = store
        self._owns_previews = previews is None
        self.previews = previews if previews is not None else PreviewRegistry()
        self.form = BookForm()
        self.editing: Book | None = None
        self.cover_file: FileHandle | None = None
        self.cover_preview: PreviewHandle | None = None
        self.document_file: FileHandle | None = None

    def __enter__(self) -> EditorSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def open(self, book: Book | None = None) -> None:
        """Start a blank form, or one prefilled from ``book`` for editing."""
        self._reset()
        self.editing = book
        if book is not None:
            self.form = BookForm.from_book(book)

    @property
    def cover_display(self) -> str:
        if self.cover_preview is not None:
            return self.cover_preview.url
        if self.editing is not None:
            return self.editing.display_url("cover")
        return self.form.cover_url

    @property
    def document_name(self) -> str:
        if self.document_file is not None:
            return self.document_file.name
        if self.editing is not None and self.editing.pdf_data:
            return "embedded"
        return ""

    def select_category(self, category: str) -> None:
        if category not in CATEGORIES:
            raise ValidationFailure(f"unknown category: {category}")
        self.form.category = category
        self.form.subcategory = ""

    def select_subcategory(self, subcategory: str) -> None:
        if subcategory not in subcategories_of(self.form.category):
            raise ValidationFailure(
                f"{subcategory!r} is not a subcategory of {self.form.category!r}"
            )
        self.form.subcategory = subcategory

    def attach_cover(self, file: FileHandle) -> PreviewHandle:
        if not validate_cover_candidate(file):
            log.warning("cover_rejected", name=file.name, media_type=file.media_type, size=file.size)
            raise ValidationFailure(
                f"cover must be a JPEG, PNG or WebP image of at most {MAX_COVER_BYTES // (1024 * 1024)} MB"
            )
        preview = self.previews.create_ephemeral_preview(file)
        self._drop_cover()
        self.cover_file = file
        self.cover_preview = preview
        return preview

    def remove_cover(self) -> None:
        self._drop_cover()

    def attach_document(self, file: FileHandle) -> None:
        if not validate_document_candidate(file):
            log.warning("document_rejected", name=file.name, media_type=file.media_type, size=file.size)
            raise ValidationFailure(
                f"document must be a PDF of at most {MAX_DOCUMENT_BYTES // (1024 * 1024)} MB"
            )
        self.document_file = file

    def remove_document(self) -> None:
        self.document_file = None

    async def save(self) -> Book:
        """Encode the selected files and commit the book.

        Nothing is dispatched if validation or encoding fails.
        """
        form = self.form
        editing = self.editing

        missing = [name for name in _REQUIRED if not getattr(form, name)]
        if missing:
            raise ValidationFailure(f"missing required fields: {', '.join(missing)}")
        if form.subcategory not in subcategories_of(form.category):
            raise ValidationFailure(f"{form.subcategory!r} is not a subcategory of {form.category!r}")
        if form.pages is not None and form.pages < 1:
            raise ValidationFailure("pages must be a positive number")
        if not (self.cover_file or form.cover_url or (editing and editing.cover_data)):
            raise ValidationFailure("a cover image or cover URL is required")
        if not (self.document_file or form.pdf_url or (editing and editing.pdf_data)):
            raise ValidationFailure("a PDF file or PDF URL is required")

        cover_data = await self._encode_latest("cover_file")
        if cover_data is None and editing is not None:
            cover_data = editing.cover_data
        pdf_data = await self._encode_latest("document_file")
        if pdf_data is None and editing is not None:
            pdf_data = editing.pdf_data

        book = Book(
            id=editing.id if editing is not None else self._new_id(),
            title=form.title,
            author=form.author,
            description=form.description,
            category=form.category,
            subcategory=form.subcategory,
            cover_url=form.cover_url or DEFAULT_COVER_URL,
            pdf_url=form.pdf_url or DEFAULT_PDF_URL,
            upload_date=editing.upload_date if editing is not None else date.today().isoformat(),
            cover_data=cover_data,
            pdf_data=pdf_data,
            pages=form.pages,
        )

        if editing is not None:
            # The book may have been deleted while the files were being read.
            if not any(b.id == book.id for b in self.store.state.books):
                raise BookNotFound(f"book {book.id} was removed before it could be saved")
            self.store.dispatch(UpdateBook(book))
            log.info("book_updated", book_id=book.id, title=book.title)
        else:
            self.store.dispatch(AddBook(book))
            log.info("book_added", book_id=book.id, title=book.title)

        self._reset()
        return book

    def close(self) -> None:
        self._reset()
        if self._owns_previews:
            self.previews.close()

    async def _encode_latest(self, attr: str) -> str | None:
        # A selection replaced while its read is pending is discarded; only the
        # latest one is committed.
        file = getattr(self, attr)
        while file is not None:
            encoded = await encode_to_embeddable(file)
            latest = getattr(self, attr)
            if latest is file:
                return encoded
            log.debug("stale_encode_discarded", name=file.name)
            file = latest
        return None

    def _new_id(self) -> str:
        existing = {b.id for b in self.store.state.books}
        token = time.time_ns() // 1_000_000
        while str(token) in existing:
            token += 1
        return str(token)

    def _drop_cover(self) -> None:
        if self.cover_preview is not None:
            self.previews.release_preview(self.cover_preview)
        self.cover_preview = None
        self.cover_file = None

    def _reset(self) -> None:
        self._drop_cover()
        self.document_file = None
        self.editing = None
        self.form = BookForm()
