"""Client-side mirror of the snippet list, with tag filtering and local patching.

The cache never changes on the strength of a request alone: every mutation
waits for the service to confirm and then reconciles from the returned
record. When a call fails the previous snippets and selection are put back
before the error propagates, and a failed refresh keeps the previous query.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List

from ..errors import CodeKeepError
from ..snippet import Snippet, SnippetDraft
from .api_client import SnippetApiClient

logger = logging.getLogger("codekeep")

ALL_TAGS = "All"


def filter_by_tag(snippets: List[Snippet], tag: str | None) -> List[Snippet]:
    """Keep snippets carrying ``tag`` exactly (case-insensitive); ``All`` keeps everything."""
    if tag is None or tag == ALL_TAGS:
        return list(snippets)
    return [snippet for snippet in snippets if snippet.has_tag(tag)]


def _tag_key(tag: str | None) -> str:
    if tag is None or not tag.strip() or tag == ALL_TAGS:
        return ALL_TAGS
    return tag.strip().lower()


def tag_vocabulary(snippets: List[Snippet]) -> List[str]:
    vocabulary = [ALL_TAGS]
    seen: set[str] = set()
    for snippet in snippets:
        for tag in snippet.tags:
            key = tag.lower()
            if key not in seen:
                seen.add(key)
                vocabulary.append(tag)
    return vocabulary


def favorites_first(snippets: List[Snippet]) -> List[Snippet]:
    """Stable partition: favorites, then the rest, each in their current order."""
    return [s for s in snippets if s.is_favorite] + [s for s in snippets if not s.is_favorite]


class SnippetCache:
    def __init__(self, api: SnippetApiClient) -> None:
        self.api = api
        self.snippets: List[Snippet] = []
        self.selected: Snippet | None = None
        self.search_text = ""
        self.active_tag = ALL_TAGS

    # Queries -----------------------------------------------------------------------

    async def refresh(
        self,
        *,
        search_text: str | None = None,
        active_tag: str | None = None,
    ) -> List[Snippet]:
        """Reload from the service; the query only changes once the fetch succeeds."""
        search_text = self.search_text if search_text is None else search_text
        active_tag = self.active_tag if active_tag is None else _tag_key(active_tag)
        with self._rollback("refresh"):
            fetched = await self.api.list(search_text or None)
            self.snippets = filter_by_tag(fetched, active_tag)
            self.search_text = search_text
            self.active_tag = active_tag
        return self.snippets

    async def set_search_text(self, text: str) -> List[Snippet]:
        return await self.refresh(search_text=text)

    async def set_active_tag(self, tag: str | None) -> List[Snippet]:
        return await self.refresh(active_tag=_tag_key(tag))

    def tag_vocabulary(self) -> List[str]:
        return tag_vocabulary(self.snippets)

    def display_snippets(self) -> List[Snippet]:
        return favorites_first(self.snippets)

    def find(self, snippet_id: str) -> Snippet | None:
        return next((s for s in self.snippets if s.id == snippet_id), None)

    def select(self, snippet_id: str) -> Snippet | None:
        self.selected = self.find(snippet_id)
        return self.selected

    def clear_selection(self) -> None:
        self.selected = None

    # Mutations ---------------------------------------------------------------------

    async def create(self, draft: SnippetDraft) -> Snippet:
        with self._rollback("create"):
            created = await self.api.create(draft)
            self.snippets = [created, *self.snippets]
            self.selected = created
        return created

    async def update(self, snippet_id: str, draft: SnippetDraft) -> Snippet:
        with self._rollback("update", snippet_id):
            updated = await self.api.update(snippet_id, draft)
            self._replace(updated)
        return updated

    async def delete(self, snippet_id: str) -> None:
        with self._rollback("delete", snippet_id):
            await self.api.delete(snippet_id)
            self.snippets = [s for s in self.snippets if s.id != snippet_id]
            if self.selected is not None and self.selected.id == snippet_id:
                self.selected = None

    async def toggle_favorite(self, snippet_id: str) -> Snippet:
        with self._rollback("toggle favorite", snippet_id):
            updated = await self.api.toggle_favorite(snippet_id)
            self._replace(updated)
        return updated

    def _replace(self, snippet: Snippet) -> None:
        self.snippets = [snippet if s.id == snippet.id else s for s in self.snippets]
        if self.selected is not None and self.selected.id == snippet.id:
            self.selected = snippet

    @contextmanager
    def _rollback(self, operation: str, snippet_id: str | None = None) -> Iterator[None]:
        snapshot = (list(self.snippets), self.selected)
        try:
            yield
        except CodeKeepError:
            self.snippets, self.selected = snapshot
            logger.debug("Restored cache after failed %s (%s)", operation, snippet_id or "-")
            raise


__all__ = [
    "ALL_TAGS",
    "SnippetCache",
    "favorites_first",
    "filter_by_tag",
    "tag_vocabulary",
]
