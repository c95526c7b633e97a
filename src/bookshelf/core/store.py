"""Catalog state container: immutable state values driven by a reducer."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

import structlog

from .models import ALL_CATEGORIES, Book

log = structlog.get_logger()


class View(str, Enum):
    HOME = "home"
    CATALOG = "catalog"
    VIEWER = "viewer"
    LOGIN = "login"
    ADMIN = "admin"


@dataclass(frozen=True)
class CatalogState:
    books: tuple[Book, ...] = ()
    current_book: Book | None = None
    is_authenticated: bool = False
    current_view: View = View.HOME
    search_term: str = ""
    selected_category: str = ALL_CATEGORIES


@dataclass(frozen=True)
class SetBooks:
    books: tuple[Book, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "books", tuple(self.books))


@dataclass(frozen=True)
class AddBook:
    book: Book


@dataclass(frozen=True)
class UpdateBook:
    book: Book


@dataclass(frozen=True)
class DeleteBook:
    book_id: str


@dataclass(frozen=True)
class SetCurrentBook:
    book: Book | None


@dataclass(frozen=True)
class SetAuthenticated:
    value: bool


@dataclass(frozen=True)
class SetView:
    view: View | str


@dataclass(frozen=True)
class SetSearchTerm:
    term: str


@dataclass(frozen=True)
class SetSelectedCategory:
    category: str


Action = Union[
    SetBooks,
    AddBook,
    UpdateBook,
    DeleteBook,
    SetCurrentBook,
    SetAuthenticated,
    SetView,
    SetSearchTerm,
    SetSelectedCategory,
]

Listener = Callable[[CatalogState, CatalogState], None]


def reduce(state: CatalogState, action: Action) -> CatalogState:
    """Compute the next state. Returns ``state`` itself when nothing changes."""
    if isinstance(action, SetBooks):
        return replace(state, books=action.books)

    if isinstance(action, AddBook):
        return replace(state, books=state.books + (action.book,))

    if isinstance(action, UpdateBook):
        target = action.book.id
        if not any(b.id == target for b in state.books):
            return state
        books = tuple(action.book if b.id == target else b for b in state.books)
        return replace(state, books=books)

    if isinstance(action, DeleteBook):
        books = tuple(b for b in state.books if b.id != action.book_id)
        if len(books) == len(state.books):
            return state
        return replace(state, books=books)

    if isinstance(action, SetCurrentBook):
        return replace(state, current_book=action.book)

    if isinstance(action, SetAuthenticated):
        return replace(state, is_authenticated=bool(action.value))

    if isinstance(action, SetView):
        try:
            view = View(action.view)
        except ValueError:
            log.warning("unknown_view", view=action.view)
            return state
        return replace(state, current_view=view)

    if isinstance(action, SetSearchTerm):
        return replace(state, search_term=action.term)

    if isinstance(action, SetSelectedCategory):
        return replace(state, selected_category=action.category)

    log.warning("unknown_action", action=type(action).__name__)
    return state


class CatalogStore:
    """Holds the current catalog state and serializes every mutation through ``dispatch``."""

    def __init__(self, initial: CatalogState | None = None) -> None:
        self._state = initial if initial is not None else CatalogState()
        self._listeners: list[Listener] = []
        self._queue: deque[Action] = deque()
        self._dispatching = False

    @property
    def state(self) -> CatalogState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(previous, current)``; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> None:
        self._queue.append(action)
        if self._dispatching:
            # Re-entrant dispatch from a listener; drained by the outer loop.
            return

        self._dispatching = True
        failure: Exception | None = None
        try:
            while self._queue:
                try:
                    self._commit(self._queue.popleft())
                except Exception as e:
                    if failure is None:
                        failure = e
        finally:
            self._dispatching = False
        if failure is not None:
            raise failure

    def _commit(self, action: Action) -> None:
        previous = self._state
        current = reduce(previous, action)
        if current is previous:
            log.debug("dispatch_noop", action=type(action).__name__)
            return
        self._state = current
        log.debug("dispatch", action=type(action).__name__, books=len(current.books))
        # Every listener sees the change even if an earlier one fails.
        failure: Exception | None = None
        for listener in list(self._listeners):
            try:
                listener(previous, current)
            except Exception as e:
                log.error("listener_failed", action=type(action).__name__, error=str(e))
                if failure is None:
                    failure = e
        if failure is not None:
            raise failure
