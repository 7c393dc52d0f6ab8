"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for access tokens and Firestore REST v1.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
Paths passed to collection()/document() are relative to the database
root (e.g. "organizations/org1/users/u1").
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx

from reorg.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_document,
    encode_document,
    field_path,
    split_transforms,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"
_LIST_PAGE_SIZE = 300


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_default_credentials():
    """Return (credentials, project_id) from Application Default Credentials."""
    import google.auth

    return google.auth.default(scopes=[_FIRESTORE_SCOPE])


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: dict | list | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method == "GET":
        resp = await client.get(url, headers=headers, params=params)
    elif method == "PATCH":
        resp = await client.patch(url, headers=headers, json=body, params=params)
    elif method == "POST":
        resp = await client.post(url, headers=headers, json=body, params=params)
    elif method == "DELETE":
        resp = await client.delete(url, headers=headers)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404:
        return None
    if resp.status_code not in (200, 204):
        resp.raise_for_status()
    if method == "DELETE":
        return {}
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class FirestoreRequestError(Exception):
    """Raised when a Firestore request cannot be applied (e.g. unknown database)."""


def _doc_id(name: str) -> str:
    return name.split("/")[-1] if name else ""


class DocumentSnapshot:
    """Snapshot of a document (id + relative path + data)."""

    def __init__(self, id_: str, path: str, data: dict):
        self.id = id_
        self.path = path
        self._data = data

    def to_dict(self) -> dict:
        return self._data


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self.path = path.strip("/")
        self.id = _doc_id(self.path)

    @property
    def _name(self) -> str:
        return self._client.resource_name(self.path)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self._client, f"{self.path}/{collection_id}")

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._name}",
            access_token=await self._client.get_token(),
        )
        if not out:
            return None
        return DocumentSnapshot(self.id, self.path, decode_document(out.get("fields")))

    async def set(self, data: dict[str, Any], merge: bool = False) -> None:
        """Write the document.

        merge=False replaces it (PATCH). merge=True updates only the given
        top-level fields; merges and server timestamps go through :commit.
        """
        _, transforms = split_transforms(data)
        if merge or transforms:
            await self._client.commit([{"path": self.path, "data": data, "merge": merge}])
            return
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._name}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._name}",
            method="DELETE",
            access_token=await self._client.get_token(),
        )

    async def list_collections(self) -> list[CollectionReference]:
        """Return the collections nested directly under this document."""
        ids: list[str] = []
        page_token: str | None = None
        while True:
            body: dict[str, Any] = {"pageSize": _LIST_PAGE_SIZE}
            if page_token:
                body["pageToken"] = page_token
            out = await _request_async(
                self._client._http,
                f"{_BASE}/{self._name}:listCollectionIds",
                method="POST",
                body=body,
                access_token=await self._client.get_token(),
            )
            if not out:
                break
            ids.extend(out.get("collectionIds", []))
            page_token = out.get("nextPageToken")
            if not page_token:
                break
        return [self.collection(cid) for cid in ids]


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
    "array_contains_any": "ARRAY_CONTAINS_ANY",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


class _Query:
    """Fluent query builder for a collection; runs via runQuery (filter/limit on server)."""

    def __init__(
        self,
        client: FirestoreRESTClient,
        collection_path: str,
        *,
        where_field: str | None = None,
        where_op: str = "EQUAL",
        where_value: Any = None,
    ):
        self._client = client
        parent, _, collection_id = collection_path.rpartition("/")
        self._parent = parent
        self._collection_id = collection_id
        self._where_field = where_field
        self._where_op = _OP_MAP.get(where_op, where_op)
        self._where_value = where_value
        self._limit: int | None = None

    def limit(self, n: int) -> _Query:
        self._limit = n
        return self

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        structured: dict[str, Any] = {
            "from": [{"collectionId": self._collection_id}],
        }
        if self._where_field is not None:
            structured["where"] = {
                "fieldFilter": {
                    "field": {"fieldPath": self._where_field},
                    "op": self._where_op,
                    "value": _encode_value(self._where_value),
                }
            }
        if self._limit:
            structured["limit"] = self._limit

        parent_name = (
            self._client.resource_name(self._parent)
            if self._parent
            else self._client.documents_root
        )
        resp = await _request_async(
            self._client._http,
            f"{_BASE}/{parent_name}:runQuery",
            method="POST",
            body={"structuredQuery": structured},
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            path = self._client.relative_path(doc.get("name", ""))
            yield DocumentSnapshot(_doc_id(path), path, decode_document(doc.get("fields")))


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: FirestoreRESTClient, path: str):
        self._client = client
        self.path = path.strip("/")
        self.id = _doc_id(self.path)

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self.path}/{document_id}")

    def where(self, field: str, op: str, value: Any) -> _Query:
        """Start a query with a filter. Use .limit(), then .stream()."""
        return _Query(
            self._client,
            self.path,
            where_field=field,
            where_op=op,
            where_value=value,
        )

    def limit(self, n: int) -> _Query:
        return _Query(self._client, self.path).limit(n)

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """List documents in the collection (shallow, all pages)."""
        url = f"{_BASE}/{self._client.resource_name(self.path)}"
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"pageSize": _LIST_PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            out = await _request_async(
                self._client._http,
                url,
                params=params,
                access_token=await self._client.get_token(),
            )
            if not out:
                return
            for doc in out.get("documents", []):
                path = self._client.relative_path(doc.get("name", ""))
                yield DocumentSnapshot(_doc_id(path), path, decode_document(doc.get("fields")))
            page_token = out.get("nextPageToken")
            if not page_token:
                return


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        database_id: str = "(default)",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self.documents_root = f"projects/{project_id}/databases/{database_id}/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def resource_name(self, path: str) -> str:
        return f"{self.documents_root}/{path.strip('/')}"

    def relative_path(self, name: str) -> str:
        prefix = self.documents_root + "/"
        return name[len(prefix):] if name.startswith(prefix) else name

    def collection(self, path: str) -> CollectionReference:
        return CollectionReference(self, path)

    def document(self, path: str) -> DocumentReference:
        return DocumentReference(self, path)

    def _build_write(self, write: dict[str, Any]) -> dict[str, Any]:
        name = self.resource_name(write["path"])
        if write.get("delete"):
            return {"delete": name}
        plain, transforms = split_transforms(write.get("data") or {})
        out: dict[str, Any] = {"update": {"name": name, **encode_document(plain)}}
        if write.get("merge"):
            out["updateMask"] = {"fieldPaths": [field_path(k) for k in plain]}
        if transforms:
            out["updateTransforms"] = [
                {"fieldPath": field_path(k), "setToServerValue": "REQUEST_TIME"}
                for k in transforms
            ]
        return out

    async def commit(self, writes: Sequence[dict[str, Any]]) -> dict:
        """Atomically apply writes via :commit.

        Each write is {"path", "data", "merge"} or {"path", "delete": True}.
        The whole request succeeds or fails as a unit.
        """
        body = {"writes": [self._build_write(w) for w in writes]}
        out = await _request_async(
            self._http,
            f"{_BASE}/{self.documents_root}:commit",
            method="POST",
            body=body,
            access_token=await self.get_token(),
        )
        if out is None:
            raise FirestoreRequestError(f"Database not found: {self.documents_root}")
        return out
