"""Error types raised by the catalog core."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog failures."""


class ValidationFailure(CatalogError):
    """A candidate file or form value was rejected before any state change."""


class IOFailure(CatalogError):
    """Reading file content or durable storage failed."""


class InvalidState(CatalogError):
    """An operation was attempted that the current state does not allow."""


class BookNotFound(CatalogError):
    """The book an operation targets is no longer in the catalog."""
