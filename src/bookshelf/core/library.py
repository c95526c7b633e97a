"""Application container wiring the store to storage and credentials."""

from __future__ import annotations

from pathlib import Path

import structlog

from .auth import CredentialProvider, StaticCredentials, login, logout
from .editor import EditorSession
from .models import Book
from .search import filter_books
from .storage import KeyValueStore
from .store import CatalogState, CatalogStore
from .sync import PersistenceSynchronizer

log = structlog.get_logger()


class Library:
    """One catalog instance: store, durable storage, synchronizer and credentials.

    Build it once at startup and pass it to whatever needs the catalog.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        credentials: CredentialProvider | None = None,
    ) -> None:
        self.storage = storage
        self.credentials = credentials if credentials is not None else StaticCredentials()
        self.store = CatalogStore()
        self.synchronizer = PersistenceSynchronizer(self.store, storage)

    @classmethod
    def open(
        cls,
        db_path: Path | str | None = None,
        credentials: CredentialProvider | None = None,
    ) -> Library:
        library = cls(KeyValueStore(db_path), credentials)
        library.synchronizer.hydrate()
        log.info("library_opened", db_path=str(library.storage.db_path), books=len(library.state.books))
        return library

    @property
    def state(self) -> CatalogState:
        return self.store.state

    def find(self, book_id: str) -> Book | None:
        return next((b for b in self.state.books if b.id == book_id), None)

    def visible_books(self) -> list[Book]:
        state = self.state
        return filter_books(state.books, state.search_term, state.selected_category)

    def login(self, username: str, password: str) -> bool:
        return login(self.store, self.credentials, username, password)

    def logout(self) -> None:
        logout(self.store)

    def editor(self) -> EditorSession:
        return EditorSession(self.store)

    def close(self) -> None:
        self.synchronizer.detach()
        self.storage.close()
