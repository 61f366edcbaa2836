"""FastAPI routes for snippet CRUD, search and favorites."""

from __future__ import annotations

from typing import List

import redis
from fastapi import APIRouter, Depends, Query, Request, status

from ..store import SnippetStore
from .model import (
    MessageResponse,
    SnippetCreateRequest,
    SnippetResponse,
    SnippetUpdateRequest,
)
from .service import (
    ApiSettings,
    create_snippet_service,
    delete_snippet_service,
    get_snippet_service,
    list_snippets_service,
    toggle_favorite_service,
    update_snippet_service,
)


def get_settings(request: Request) -> ApiSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, ApiSettings):
        raise RuntimeError("API settings have not been initialised")
    return settings


def _get_redis_client(request: Request, settings: ApiSettings) -> redis.Redis:
    redis_client = getattr(request.app.state, "redis_client", None)
    if redis_client is None:
        redis_client = redis.Redis.from_url(settings.redis_url)
        request.app.state.redis_client = redis_client
    return redis_client


def get_store(
    request: Request,
    settings: ApiSettings = Depends(get_settings),
) -> SnippetStore:
    store = getattr(request.app.state, "snippet_store", None)
    if store is None:
        redis_client = _get_redis_client(request, settings)
        store = SnippetStore(redis_client, key_prefix=settings.key_prefix)
        request.app.state.snippet_store = store
    return store


router = APIRouter(prefix="/api/snippets", tags=["snippets"])


@router.get("/", response_model=List[SnippetResponse])
async def list_snippets(
    search: str | None = Query(None, description="Case-insensitive substring to look for"),
    store: SnippetStore = Depends(get_store),
) -> List[SnippetResponse]:
    return list_snippets_service(store, search)


@router.post("/", response_model=SnippetResponse, status_code=status.HTTP_201_CREATED)
async def create_snippet(
    payload: SnippetCreateRequest,
    store: SnippetStore = Depends(get_store),
) -> SnippetResponse:
    return create_snippet_service(store, payload)


@router.get("/{snippet_id}", response_model=SnippetResponse)
async def get_snippet(
    snippet_id: str,
    store: SnippetStore = Depends(get_store),
) -> SnippetResponse:
    return get_snippet_service(store, snippet_id)


@router.put("/{snippet_id}", response_model=SnippetResponse)
async def update_snippet(
    snippet_id: str,
    payload: SnippetUpdateRequest,
    store: SnippetStore = Depends(get_store),
) -> SnippetResponse:
    return update_snippet_service(store, snippet_id, payload)


@router.delete("/{snippet_id}", response_model=MessageResponse)
async def delete_snippet(
    snippet_id: str,
    store: SnippetStore = Depends(get_store),
) -> MessageResponse:
    return delete_snippet_service(store, snippet_id)


@router.put("/{snippet_id}/toggle-favorite", response_model=SnippetResponse)
async def toggle_favorite(
    snippet_id: str,
    store: SnippetStore = Depends(get_store),
) -> SnippetResponse:
    return toggle_favorite_service(store, snippet_id)


__all__ = ["router", "get_settings", "get_store"]
