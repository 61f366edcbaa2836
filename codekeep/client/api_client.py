"""Asynchronous HTTP client for the snippet REST API."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, List

import httpx

from ..errors import NotFoundError, StoreError, TransportError, ValidationError
from ..snippet import Snippet, SnippetDraft

logger = logging.getLogger("codekeep")


@dataclass(slots=True)
class ClientSettings:
    """Where the client finds the API and how long it waits for it."""

    api_url: str = "http://localhost:5000/api"
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "ClientSettings":
        raw_timeout = os.getenv("CODEKEEP_TIMEOUT")
        timeout = 10.0
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                logger.warning("Invalid number for CODEKEEP_TIMEOUT: %s", raw_timeout)
        return cls(
            api_url=os.getenv("CODEKEEP_API_URL", "http://localhost:5000/api"),
            timeout=timeout,
        )


class SnippetApiClient:
    """Thin wrapper over ``/snippets`` that speaks in :class:`Snippet` objects."""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self.http = http_client

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "SnippetApiClient":
        base_url = settings.api_url.rstrip("/") + "/"
        return cls(httpx.AsyncClient(base_url=base_url, timeout=settings.timeout))

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "SnippetApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def list(self, search: str | None = None) -> List[Snippet]:
        params = {"search": search} if search else None
        data = await self._request("GET", "snippets/", params=params)
        return [Snippet.model_validate(item) for item in data]

    async def get(self, snippet_id: str) -> Snippet:
        data = await self._request("GET", f"snippets/{snippet_id}", snippet_id=snippet_id)
        return Snippet.model_validate(data)

    async def create(self, draft: SnippetDraft) -> Snippet:
        data = await self._request("POST", "snippets/", json=_draft_payload(draft))
        return Snippet.model_validate(data)

    async def update(self, snippet_id: str, draft: SnippetDraft) -> Snippet:
        data = await self._request(
            "PUT", f"snippets/{snippet_id}", json=_draft_payload(draft), snippet_id=snippet_id
        )
        return Snippet.model_validate(data)

    async def delete(self, snippet_id: str) -> str:
        data = await self._request("DELETE", f"snippets/{snippet_id}", snippet_id=snippet_id)
        return str(data.get("message", "")) if isinstance(data, dict) else ""

    async def toggle_favorite(self, snippet_id: str) -> Snippet:
        data = await self._request(
            "PUT", f"snippets/{snippet_id}/toggle-favorite", snippet_id=snippet_id
        )
        return Snippet.model_validate(data)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        snippet_id: str | None = None,
        **kwargs: Any,
    ) -> Any:
        try:
            response = await self.http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            return response.json()

        detail = _error_detail(response)
        if response.status_code == 404:
            raise NotFoundError(snippet_id or path, detail)
        if response.status_code in (400, 422):
            raise ValidationError(detail)
        if response.status_code >= 500:
            raise StoreError(detail)
        raise TransportError(f"Unexpected response {response.status_code}: {detail}")


def _draft_payload(draft: SnippetDraft) -> dict[str, Any]:
    return draft.model_dump(by_alias=True, exclude_unset=True)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        message = body.get("detail") or body.get("message")
        if message:
            return str(message)
    return response.reason_phrase


__all__ = ["ClientSettings", "SnippetApiClient"]
