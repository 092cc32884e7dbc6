"""Remote store adapter speaking JSON over HTTP."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from watools.errors import NotFound, RemoteUnavailable, ValidationError
from watools.models import Collection
from watools.remote.base import RemoteStore
from watools.remote.client import create_client


class HttpRemoteStore(RemoteStore):
    """Remote store served under ``/api/{collection}``.

    Every failure to get a usable answer becomes ``RemoteUnavailable``;
    404 and 400/422 answers are passed through as domain errors.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the adapter.

        Args:
            client: HTTP client to use. If None, creates one from configuration.
        """
        self._client = client or create_client()

    async def __aenter__(self) -> HttpRemoteStore:
        """Enter async context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        collection: Collection,
        entity_id: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        url = f"/api/{collection.value}"
        if entity_id is not None:
            url = f"{url}/{entity_id}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteUnavailable(f"{method} {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFound(collection.entity_name, entity_id or "")
        if response.status_code in (400, 422):
            raise ValidationError(f"Rejected by remote store: {response.text}")
        if response.is_error:
            raise RemoteUnavailable(f"{method} {url} returned {response.status_code}")
        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteUnavailable(f"Malformed response from remote store: {exc}") from exc

    def _json_list(self, response: httpx.Response) -> list[dict[str, Any]]:
        data = self._json(response)
        if not isinstance(data, list):
            raise RemoteUnavailable("Remote store returned a non-list collection")
        return data

    async def get_all(self, collection: Collection) -> list[dict[str, Any]]:
        """Fetch a whole collection."""
        response = await self._request("GET", collection)
        return self._json_list(response)

    async def create(self, collection: Collection, data: dict[str, Any]) -> str:
        """Create an entity; the store answers with ``{"id": ...}``."""
        response = await self._request("POST", collection, json=data)
        body = self._json(response)
        if not isinstance(body, dict) or body.get("id") in (None, ""):
            raise RemoteUnavailable("Remote store did not return an assigned id")
        return str(body["id"])

    async def update(self, collection: Collection, entity_id: str, patch: dict[str, Any]) -> None:
        """Patch an entity."""
        await self._request("PATCH", collection, entity_id, json=patch)

    async def delete(self, collection: Collection, entity_id: str) -> None:
        """Delete an entity."""
        await self._request("DELETE", collection, entity_id)

    async def query(
        self, collection: Collection, filters: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        """Fetch entities matching equality filters passed as query parameters."""
        params = {key: str(value) for key, value in filters.items()}
        response = await self._request("GET", collection, params=params)
        return self._json_list(response)
