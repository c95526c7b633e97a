"""Screen selection on top of the stored view."""

from __future__ import annotations

from .models import Book
from .store import (
    CatalogState,
    CatalogStore,
    SetCurrentBook,
    SetSearchTerm,
    SetSelectedCategory,
    SetView,
    View,
)


def resolve_view(state: CatalogState) -> View:
    """Return the screen to render; the admin screen requires authentication.

    The stored ``current_view`` is left as it is.
    """
    if state.current_view == View.ADMIN and not state.is_authenticated:
        return View.LOGIN
    return state.current_view


def navigate(store: CatalogStore, view: View | str) -> None:
    store.dispatch(SetView(view))


def open_book(store: CatalogStore, book: Book) -> None:
    store.dispatch(SetCurrentBook(book))
    store.dispatch(SetView(View.VIEWER))


def browse(store: CatalogStore, category: str, search_term: str | None = None) -> None:
    """Jump to the catalog with a category (and optionally a search term) selected."""
    store.dispatch(SetSelectedCategory(category))
    if search_term is not None:
        store.dispatch(SetSearchTerm(search_term))
    store.dispatch(SetView(View.CATALOG))
