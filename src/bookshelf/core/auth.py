"""Static credential check for the admin screen.

This is a placeholder provider, not a security boundary. Anything that needs
real authentication should implement ``CredentialProvider`` instead.
"""

from __future__ import annotations

import hmac
import os
from typing import Protocol

import structlog

from .store import CatalogStore, SetAuthenticated, SetView, View

log = structlog.get_logger()

DEFAULT_USERNAME = "admin"
DEFAULT_PASSWORD = "biblioteca123"


class CredentialProvider(Protocol):
    def verify(self, username: str, password: str) -> bool: ...


class StaticCredentials:
    """Compare against one fixed username/password pair."""

    def __init__(self, username: str | None = None, password: str | None = None):
        if username is None:
            username = os.environ.get("BOOKSHELF_ADMIN_USER", DEFAULT_USERNAME)
        if password is None:
            password = os.environ.get("BOOKSHELF_ADMIN_PASSWORD", DEFAULT_PASSWORD)
        self._username = username
        self._password = password

    def verify(self, username: str, password: str) -> bool:
        user_ok = hmac.compare_digest(username.encode(), self._username.encode())
        password_ok = hmac.compare_digest(password.encode(), self._password.encode())
        return user_ok and password_ok


def login(store: CatalogStore, provider: CredentialProvider, username: str, password: str) -> bool:
    if not provider.verify(username, password):
        log.warning("login_failed", username=username)
        return False
    store.dispatch(SetAuthenticated(True))
    store.dispatch(SetView(View.ADMIN))
    log.info("login_succeeded", username=username)
    return True


def logout(store: CatalogStore) -> None:
    store.dispatch(SetAuthenticated(False))
    store.dispatch(SetView(View.HOME))
    log.info("logged_out")
