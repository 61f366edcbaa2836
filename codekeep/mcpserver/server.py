"""FastMCP server exposing snippet lookup helpers as MCP tools."""

from __future__ import annotations

import logging
from typing import Any, Dict

import redis
from fastapi import HTTPException
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from ..api.service import (
    ApiSettings,
    get_snippet_service,
    list_snippets_service,
)
from ..store import SnippetStore

logger = logging.getLogger("codekeep")


class ServiceContext:
    """Lazy dependency container for MCP tool handlers."""

    def __init__(self, store: SnippetStore | None = None) -> None:
        self._settings: ApiSettings | None = None
        self._store = store

    @property
    def settings(self) -> ApiSettings:
        if self._settings is None:
            self._settings = ApiSettings.from_env()
        return self._settings

    def store(self) -> SnippetStore:
        if self._store is None:
            self._store = SnippetStore(
                redis.Redis.from_url(self.settings.redis_url),
                key_prefix=self.settings.key_prefix,
            )
        return self._store


def _handle_http_exception(exc: HTTPException, *, default_message: str) -> ToolError:
    detail = exc.detail if isinstance(exc.detail, str) else None
    message = detail or default_message
    return ToolError(message)


def search_tool(
    services: ServiceContext,
    query: str = "",
    tag: str | None = None,
    limit: int = 10,
) -> Dict[str, Any]:
    """Search snippets by text and optional tag, newest first."""
    normalized_limit = limit or 10
    if normalized_limit <= 0:
        raise ToolError("Limit must be a positive integer.")
    normalized_limit = min(normalized_limit, 50)

    try:
        results = list_snippets_service(services.store(), query or None)
    except HTTPException as exc:
        raise _handle_http_exception(exc, default_message="Snippet search failed")

    if tag and tag.strip():
        wanted = tag.strip().lower()
        results = [result for result in results if wanted in (t.lower() for t in result.tags)]

    return {
        "query": query,
        "tag": tag,
        "results": [result.model_dump(by_alias=True) for result in results[:normalized_limit]],
    }


def get_snippet_tool(services: ServiceContext, snippet_id: str) -> Dict[str, Any]:
    if not snippet_id or not snippet_id.strip():
        raise ToolError("Snippet id is required.")
    try:
        snippet = get_snippet_service(services.store(), snippet_id.strip())
    except HTTPException as exc:
        raise _handle_http_exception(exc, default_message="Snippet lookup failed")
    return snippet.model_dump(by_alias=True)


def create_server(services: ServiceContext | None = None) -> FastMCP:
    """Create a FastMCP server wired to the snippet store."""

    services = services or ServiceContext()
    server = FastMCP("CodeKeep MCP Server")

    @server.tool(
        name="search",
        description=(
            "Search saved code snippets. `query` is matched case-insensitively as a substring"
            " of the title, description and tags; leave it empty to list everything. Use `tag`"
            " to keep only snippets carrying that exact tag. `limit` defaults to 10 (max 50)."
        ),
        tags={"snippets", "search"},
    )
    def search(query: str = "", tag: str | None = None, limit: int = 10) -> Dict[str, Any]:
        return search_tool(services, query=query, tag=tag, limit=limit)

    @server.tool(
        name="get_snippet",
        description="Fetch a single snippet, including its code, by id.",
        tags={"snippets"},
    )
    def get_snippet(snippet_id: str) -> Dict[str, Any]:
        return get_snippet_tool(services, snippet_id)

    return server


mcp = create_server()

__all__ = ["ServiceContext", "create_server", "get_snippet_tool", "mcp", "search_tool"]
