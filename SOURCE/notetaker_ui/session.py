"""
Session provider for the Streamlit UI.

The signed-in user and their access token live in the per-browser
session store. `get_session` returning None means "not signed in".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, MutableMapping, Optional

from . import api


SESSION_KEY = "session"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    user_id: int
    username: str


@dataclass(frozen=True)
class Session:
    user: User
    access_token: str


def get_session(store: MutableMapping[str, Any]) -> Optional[Session]:
    return store.get(SESSION_KEY)


def _store_session(store: MutableMapping[str, Any], token: api.TokenResponse) -> Session:
    session = Session(
        user=User(user_id=token.user_id, username=token.username),
        access_token=token.access_token,
    )
    store[SESSION_KEY] = session
    logger.info("Signed in as %s", session.user.username)
    return session


def sign_in(store: MutableMapping[str, Any], username: str, password: str) -> Session:
    return _store_session(store, api.login(username, password))


def sign_up(store: MutableMapping[str, Any], username: str, password: str) -> Session:
    return _store_session(store, api.register(username, password))


def sign_out(store: MutableMapping[str, Any], extra_keys: Iterable[str] = ()) -> None:
    """Forget the session together with cached queries and page state."""
    for key in (SESSION_KEY, api.CACHE_KEY, *extra_keys):
        store.pop(key, None)


__all__ = ["Session", "User", "get_session", "sign_in", "sign_up", "sign_out"]
