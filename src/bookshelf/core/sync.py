"""Mirror catalog state into durable storage and restore it at startup."""

from __future__ import annotations

import json

import structlog

from .errors import IOFailure
from .models import Book
from .seed import seed_books
from .storage import KeyValueStore
from .store import CatalogState, CatalogStore, SetAuthenticated, SetBooks

log = structlog.get_logger()

BOOKS_KEY = "libraryBooks"
AUTH_KEY = "libraryAuth"


def serialize_books(books: tuple[Book, ...] | list[Book]) -> str:
    return json.dumps([b.to_dict() for b in books], ensure_ascii=False)


def parse_books(raw: str) -> list[Book]:
    """Parse a stored snapshot. Raises ``ValueError`` if it is not a list of book records."""
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("stored catalog is not a list")
    return [Book.from_dict(entry) for entry in data]


class PersistenceSynchronizer:
    """Write-through full snapshots of ``books`` and the auth flag on every change."""

    def __init__(self, store: CatalogStore, storage: KeyValueStore):
        self.store = store
        self.storage = storage
        self._unsubscribe = store.subscribe(self._on_change)

    def hydrate(self) -> None:
        """Load the stored catalog, falling back to the seed dataset."""
        books = self._load_books()
        if books is None:
            books = seed_books()
            log.info("catalog_seeded", books=len(books))
        # The subscription persists whichever list gets loaded.
        try:
            self.store.dispatch(SetBooks(books))
        except IOFailure as e:
            log.error("catalog_persist_failed", error=str(e))

        try:
            auth = self.storage.get(AUTH_KEY)
        except IOFailure:
            auth = None
        if auth == "true":
            try:
                self.store.dispatch(SetAuthenticated(True))
            except IOFailure as e:
                log.error("auth_persist_failed", error=str(e))

    def detach(self) -> None:
        self._unsubscribe()

    def _load_books(self) -> list[Book] | None:
        try:
            raw = self.storage.get(BOOKS_KEY)
        except IOFailure as e:
            log.warning("catalog_read_failed", error=str(e))
            return None
        if raw is None:
            return None
        try:
            books = parse_books(raw)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError subclass
            log.warning("catalog_malformed", error=str(e))
            return None
        log.info("catalog_loaded", books=len(books))
        return books

    def _on_change(self, previous: CatalogState, current: CatalogState) -> None:
        if current.books is not previous.books:
            self.storage.set(BOOKS_KEY, serialize_books(current.books))
        if current.is_authenticated != previous.is_authenticated:
            self.storage.set(AUTH_KEY, "true" if current.is_authenticated else "false")
