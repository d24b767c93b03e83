"""
Typed client for the notetaker API.

Procedures are grouped the way the server names them (`topic.getAll`,
`note.create`, ...). Queries keep their last successful result in a
per-session cache so that Streamlit reruns do not refetch; a mutation's
success callback invalidates the queries it made stale.
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import nullcontext
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    ContextManager,
    Dict,
    Generic,
    List,
    MutableMapping,
    Optional,
    TypeVar,
)

import requests

from notetaker_api.schemas import NoteResponse as Note
from notetaker_api.schemas import TokenResponse
from notetaker_api.schemas import TopicResponse as Topic


BACKEND_URL = os.getenv("BACKEND_URL", "http://127.0.0.1:5000")
API_PREFIX = os.getenv("API_PREFIX", "/api")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

CACHE_KEY = "query_cache"

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiError(RuntimeError):
    """Raised for transport failures and non-2xx API responses."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


def api_url(path: str, base_url: str = BACKEND_URL, prefix: str = API_PREFIX) -> str:
    return f"{base_url.rstrip('/')}{prefix}{path}"


def _ensure_json_response(response: requests.Response) -> Dict[str, Any]:
    if response.status_code >= 400:
        try:
            error_payload = response.json()
        except ValueError:
            error_payload = {}
        if not isinstance(error_payload, dict):
            error_payload = {}
        message = (
            error_payload.get("message")
            or error_payload.get("error")
            or response.text
            or response.reason
            or "Unknown error"
        )
        raise ApiError(
            message,
            status=response.status_code,
            details=error_payload.get("details"),
        )

    if not response.content:
        return {}

    try:
        return response.json()
    except ValueError as exc:
        raise ApiError(
            f"Invalid JSON response: {exc}. Body: {response.text!r}",
            status=response.status_code,
        ) from exc


def _headers(token: Optional[str]) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _send(method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
    try:
        response = requests.request(method, url, timeout=REQUEST_TIMEOUT_SECONDS, **kwargs)
    except requests.RequestException as exc:
        logger.warning("%s %s failed: %s", method, url, exc)
        raise ApiError(f"Could not reach the server: {exc}") from exc
    return _ensure_json_response(response)


def post_json(path: str, payload: Dict[str, Any], token: Optional[str] = None, base_url: str = BACKEND_URL):
    return _send("POST", api_url(path, base_url), json=payload, headers=_headers(token))


def delete_json(path: str, token: Optional[str] = None, base_url: str = BACKEND_URL):
    return _send("DELETE", api_url(path, base_url), headers=_headers(token))


def get_json(
    path: str,
    params: Optional[Dict[str, Any]] = None,
    token: Optional[str] = None,
    base_url: str = BACKEND_URL,
):
    return _send("GET", api_url(path, base_url), params=params or {}, headers=_headers(token))


@dataclass
class QueryResult(Generic[T]):
    """
    Snapshot of a query.

    `status` is "loading" until data or an error arrives; a disabled query
    stays "loading". Requests run synchronously inside the client's
    `fetch_context`, which is where the in-flight indicator lives.
    """

    data: Optional[T] = None
    status: str = "loading"
    error: Optional[ApiError] = None


class QueryCache:
    """Successful query results keyed by procedure path and input."""

    def __init__(self, store: MutableMapping[str, Any], key: str = CACHE_KEY) -> None:
        self._store = store
        self._key = key
        if key not in store:
            store[key] = {}

    @property
    def _entries(self) -> Dict[str, Dict[str, Any]]:
        return self._store[self._key]

    @staticmethod
    def input_key(params: Optional[Dict[str, Any]]) -> str:
        return json.dumps(params or {}, sort_keys=True, default=str)

    def get(self, path: str, params: Optional[Dict[str, Any]]) -> Optional[Any]:
        return self._entries.get(path, {}).get(self.input_key(params))

    def set(self, path: str, params: Optional[Dict[str, Any]], data: Any) -> None:
        self._entries.setdefault(path, {})[self.input_key(params)] = data

    def has(self, path: str, params: Optional[Dict[str, Any]]) -> bool:
        return self.input_key(params) in self._entries.get(path, {})

    def invalidate(self, path: str) -> None:
        dropped = self._entries.pop(path, None)
        if dropped:
            logger.debug("Invalidated %d cached result(s) for %s", len(dropped), path)

    def clear(self) -> None:
        self._entries.clear()


class Query(Generic[T]):
    def __init__(
        self,
        client: "ApiClient",
        path: str,
        fetch: Callable[[Optional[Dict[str, Any]]], T],
    ) -> None:
        self._client = client
        self.path = path
        self._fetch = fetch

    def query(
        self,
        params: Optional[Dict[str, Any]] = None,
        *,
        enabled: bool = True,
        on_success: Optional[Callable[[T], None]] = None,
    ) -> QueryResult[T]:
        if not enabled:
            return QueryResult()

        cache = self._client.cache
        if cache.has(self.path, params):
            return QueryResult(data=cache.get(self.path, params), status="success")

        with self._client.fetch_context():
            try:
                data = self._fetch(params)
            except ApiError as exc:
                logger.warning("Query %s failed: %s", self.path, exc.message)
                return QueryResult(status="error", error=exc)

        cache.set(self.path, params, data)
        if on_success is not None:
            on_success(data)
        return QueryResult(data=data, status="success")

    def invalidate(self) -> None:
        self._client.cache.invalidate(self.path)


class MutationHandle(Generic[T]):
    def __init__(
        self,
        mutation: "Mutation[T]",
        on_success: Optional[Callable[[T], None]],
        on_error: Optional[Callable[[ApiError], None]],
    ) -> None:
        self._mutation = mutation
        self._on_success = on_success
        self._on_error = on_error

    def mutate(self, params: Dict[str, Any]) -> Optional[T]:
        try:
            data = self._mutation.call(params)
        except ApiError as exc:
            logger.warning("Mutation %s failed: %s", self._mutation.path, exc.message)
            if self._on_error is not None:
                self._on_error(exc)
            return None
        if self._on_success is not None:
            self._on_success(data)
        return data


class Mutation(Generic[T]):
    def __init__(self, path: str, call: Callable[[Dict[str, Any]], T]) -> None:
        self.path = path
        self.call = call

    def mutation(
        self,
        *,
        on_success: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[ApiError], None]] = None,
    ) -> MutationHandle[T]:
        return MutationHandle(self, on_success, on_error)


class TopicProcedures:
    def __init__(self, client: "ApiClient") -> None:
        self.get_all: Query[List[Topic]] = Query(
            client,
            "topic.getAll",
            lambda _params: [
                Topic.model_validate(item) for item in client.get("/topics")["topics"]
            ],
        )
        self.create: Mutation[Topic] = Mutation(
            "topic.create",
            lambda params: Topic.model_validate(
                client.post("/topics", {"title": params["title"]})
            ),
        )
        self.delete: Mutation[Dict[str, Any]] = Mutation(
            "topic.delete",
            lambda params: client.delete(f"/topics/{params['id']}"),
        )


class NoteProcedures:
    def __init__(self, client: "ApiClient") -> None:
        self.get_all: Query[List[Note]] = Query(
            client,
            "note.getAll",
            lambda params: [
                Note.model_validate(item)
                for item in client.get("/notes", {"topic_id": params["topic_id"]})["notes"]
            ],
        )
        self.create: Mutation[Note] = Mutation(
            "note.create",
            lambda params: Note.model_validate(
                client.post(
                    "/notes",
                    {
                        "title": params["title"],
                        "content": params["content"],
                        "topic_id": params["topic_id"],
                    },
                )
            ),
        )
        self.delete: Mutation[Dict[str, Any]] = Mutation(
            "note.delete",
            lambda params: client.delete(f"/notes/{params['id']}"),
        )


class ApiClient:
    """
    Entry point to the typed procedures.

    `store` is any mutable mapping that survives reruns (normally
    `st.session_state`); the query cache lives inside it.
    """

    def __init__(
        self,
        store: MutableMapping[str, Any],
        token: Optional[str] = None,
        base_url: str = BACKEND_URL,
        fetch_context: Callable[[], ContextManager[Any]] = nullcontext,
    ) -> None:
        self.token = token
        self.base_url = base_url
        self.fetch_context = fetch_context
        self.cache = QueryCache(store)
        self.topic = TopicProcedures(self)
        self.note = NoteProcedures(self)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return get_json(path, params=params, token=self.token, base_url=self.base_url)

    def post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return post_json(path, payload, token=self.token, base_url=self.base_url)

    def delete(self, path: str) -> Dict[str, Any]:
        return delete_json(path, token=self.token, base_url=self.base_url)


def login(username: str, password: str, base_url: str = BACKEND_URL) -> TokenResponse:
    data = post_json("/login", {"username": username, "password": password}, base_url=base_url)
    return TokenResponse.model_validate(data)


def register(username: str, password: str, base_url: str = BACKEND_URL) -> TokenResponse:
    data = post_json("/register", {"username": username, "password": password}, base_url=base_url)
    return TokenResponse.model_validate(data)


__all__ = [
    "ApiClient",
    "ApiError",
    "Note",
    "QueryCache",
    "QueryResult",
    "Topic",
    "login",
    "register",
]
