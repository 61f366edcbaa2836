"""Service-layer helpers translating snippet store operations into HTTP results."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List

from fastapi import HTTPException, status

from ..errors import NotFoundError, StoreError, ValidationError
from ..store import SnippetStore
from .model import (
    MessageResponse,
    SnippetCreateRequest,
    SnippetResponse,
    SnippetUpdateRequest,
)

logger = logging.getLogger("codekeep")


@dataclass(slots=True)
class ApiSettings:
    """Runtime configuration for the API server."""

    redis_url: str
    key_prefix: str = SnippetStore.DEFAULT_PREFIX
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ApiSettings":
        def _int_env(name: str, default: int) -> int:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError:
                logger.warning("Invalid integer for %s: %s", name, raw)
                return default

        origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        return cls(
            redis_url=os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0"),
            key_prefix=os.getenv("CODEKEEP_KEY_PREFIX", SnippetStore.DEFAULT_PREFIX),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_int_env("PORT", 5000),
            cors_origins=origins or ["*"],
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Snippet not found")


def list_snippets_service(store: SnippetStore, search: str | None = None) -> List[SnippetResponse]:
    try:
        snippets = store.list(search)
    except StoreError as exc:
        logger.exception("Failed to list snippets")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error fetching snippets: {exc}",
        ) from exc
    return [SnippetResponse.from_snippet(snippet) for snippet in snippets]


def get_snippet_service(store: SnippetStore, snippet_id: str) -> SnippetResponse:
    try:
        snippet = store.get(snippet_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except StoreError as exc:
        logger.exception("Failed to fetch snippet %s", snippet_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error fetching snippet: {exc}",
        ) from exc
    return SnippetResponse.from_snippet(snippet)


def create_snippet_service(store: SnippetStore, payload: SnippetCreateRequest) -> SnippetResponse:
    try:
        snippet = store.create(payload.to_draft())
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Error creating snippet: {exc}",
        ) from exc
    except StoreError as exc:
        logger.exception("Failed to create snippet")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating snippet: {exc}",
        ) from exc
    return SnippetResponse.from_snippet(snippet)


def update_snippet_service(
    store: SnippetStore,
    snippet_id: str,
    payload: SnippetUpdateRequest,
) -> SnippetResponse:
    try:
        snippet = store.update(snippet_id, payload.to_draft())
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Error updating snippet: {exc}",
        ) from exc
    except StoreError as exc:
        logger.exception("Failed to update snippet %s", snippet_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Error updating snippet: {exc}",
        ) from exc
    return SnippetResponse.from_snippet(snippet)


def delete_snippet_service(store: SnippetStore, snippet_id: str) -> MessageResponse:
    try:
        store.delete(snippet_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except StoreError as exc:
        logger.exception("Failed to delete snippet %s", snippet_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error deleting snippet: {exc}",
        ) from exc
    return MessageResponse(message="Snippet deleted successfully")


def toggle_favorite_service(store: SnippetStore, snippet_id: str) -> SnippetResponse:
    try:
        snippet = store.toggle_favorite(snippet_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except StoreError as exc:
        logger.exception("Failed to toggle favorite on snippet %s", snippet_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Error toggling favorite: {exc}",
        ) from exc
    return SnippetResponse.from_snippet(snippet)


__all__ = [
    "ApiSettings",
    "create_snippet_service",
    "delete_snippet_service",
    "get_snippet_service",
    "list_snippets_service",
    "toggle_favorite_service",
    "update_snippet_service",
]
