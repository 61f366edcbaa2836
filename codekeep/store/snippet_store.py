"""Redis-backed document store for snippets."""

from __future__ import annotations

import json
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterator, List

import redis
from pydantic import ValidationError as PydanticValidationError

from ..errors import NotFoundError, StoreError
from ..snippet import SCHEMA_VERSION, Snippet, SnippetDraft, normalize_tags

logger = logging.getLogger("codekeep")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnippetStore:
    """Store snippet documents in Redis, indexed by creation time."""

    DEFAULT_PREFIX = "codekeep:"

    def __init__(
        self,
        redis_client: redis.Redis,
        *,
        key_prefix: str = DEFAULT_PREFIX,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._clock = clock or _utcnow

    @property
    def index_key(self) -> str:
        return f"{self.key_prefix}snippets:index"

    def create(self, draft: SnippetDraft) -> Snippet:
        draft.validate_for_create()
        now = self._clock()
        snippet = Snippet(
            id=uuid.uuid4().hex,
            title=draft.title.strip(),
            tags=normalize_tags(draft.tags),
            description=(draft.description or "").strip(),
            code=draft.code,
            is_favorite=bool(draft.is_favorite),
            created_at=now,
            updated_at=now,
        )
        with self._guard("create snippet"):
            pipe = self.redis.pipeline()
            self._queue_write(pipe, snippet)
            pipe.execute()
        logger.info("Created snippet %s (%s)", snippet.id, snippet.title)
        return snippet

    def get(self, snippet_id: str) -> Snippet:
        with self._guard(f"read snippet {snippet_id}"):
            raw = self.redis.get(self._record_key(snippet_id))
        snippet = self._decode(raw, snippet_id)
        if snippet is None:
            raise NotFoundError(snippet_id)
        return snippet

    def list(self, search_text: str | None = None) -> List[Snippet]:
        """Return snippets newest first, optionally narrowed by a substring search."""
        with self._guard("list snippets"):
            ids = [_as_text(raw_id) for raw_id in self.redis.zrevrange(self.index_key, 0, -1)]
            raws = self.redis.mget([self._record_key(snippet_id) for snippet_id in ids]) if ids else []

        snippets: List[Snippet] = []
        for snippet_id, raw in zip(ids, raws):
            snippet = self._decode(raw, snippet_id)
            if snippet is not None:
                snippets.append(snippet)

        if search_text is None or not search_text.strip():
            return snippets
        return [snippet for snippet in snippets if snippet.matches(search_text)]

    def update(self, snippet_id: str, draft: SnippetDraft) -> Snippet:
        def _change(current: Snippet) -> Snippet:
            draft.validate_for_update()
            return current.apply(draft)

        snippet = self._mutate(snippet_id, _change, action="update")
        logger.info("Updated snippet %s", snippet_id)
        return snippet

    def toggle_favorite(self, snippet_id: str) -> Snippet:
        snippet = self._mutate(
            snippet_id,
            lambda current: current.model_copy(update={"is_favorite": not current.is_favorite}),
            action="toggle favorite on",
        )
        logger.info("Snippet %s favorite=%s", snippet_id, snippet.is_favorite)
        return snippet

    def delete(self, snippet_id: str) -> None:
        key = self._record_key(snippet_id)

        def _remove(pipe: redis.client.Pipeline) -> None:
            if self._decode(pipe.get(key), snippet_id) is None:
                raise NotFoundError(snippet_id)
            pipe.multi()
            pipe.delete(key)
            pipe.zrem(self.index_key, snippet_id)

        with self._guard(f"delete snippet {snippet_id}"):
            self.redis.transaction(_remove, key)
        logger.info("Deleted snippet %s", snippet_id)

    # Raw document access for the category migration ---------------------------

    def iter_legacy_documents(self) -> Iterator[tuple[str, dict[str, Any]]]:
        """Yield ``(snippet_id, document)`` for records not in the current schema."""
        prefix = self._record_key("")
        with self._guard("scan legacy snippets"):
            keys = [_as_text(key) for key in self.redis.scan_iter(match=f"{prefix}*")]
        for key in keys:
            with self._guard(f"read {key}"):
                raw = self.redis.get(key)
            data = _load_json(raw)
            if data is None or data.get("schema_version") == SCHEMA_VERSION:
                continue
            yield key[len(prefix):], data

    def replace(self, snippet: Snippet) -> None:
        """Write ``snippet`` as-is, replacing whatever document holds its id."""
        with self._guard(f"write snippet {snippet.id}"):
            pipe = self.redis.pipeline()
            self._queue_write(pipe, snippet)
            pipe.execute()

    # Internals --------------------------------------------------------------------

    def _mutate(
        self,
        snippet_id: str,
        change: Callable[[Snippet], Snippet],
        *,
        action: str,
    ) -> Snippet:
        key = self._record_key(snippet_id)

        def _apply(pipe: redis.client.Pipeline) -> Snippet:
            current = self._decode(pipe.get(key), snippet_id)
            if current is None:
                raise NotFoundError(snippet_id)
            updated = change(current).model_copy(
                update={"updated_at": self.next_timestamp(current.updated_at)}
            )
            pipe.multi()
            self._queue_write(pipe, updated)
            return updated

        with self._guard(f"{action} snippet {snippet_id}"):
            return self.redis.transaction(_apply, key, value_from_callable=True)

    def next_timestamp(self, previous: datetime) -> datetime:
        now = self._clock()
        if now <= previous:
            return previous + timedelta(microseconds=1)
        return now

    def _record_key(self, snippet_id: str) -> str:
        return f"{self.key_prefix}snippet:{snippet_id}"

    def _queue_write(self, pipe: redis.client.Pipeline, snippet: Snippet) -> None:
        document = snippet.model_dump(mode="json")
        document["schema_version"] = SCHEMA_VERSION
        pipe.set(self._record_key(snippet.id), json.dumps(document, separators=(",", ":")))
        pipe.zadd(self.index_key, {snippet.id: snippet.created_at.timestamp()})

    def _decode(self, raw: Any, snippet_id: str) -> Snippet | None:
        data = _load_json(raw)
        if data is None:
            return None
        if data.get("schema_version") != SCHEMA_VERSION:
            logger.warning(
                "Skipping snippet %s stored in a legacy schema; run migrate_categories.py",
                snippet_id,
            )
            return None
        try:
            return Snippet.model_validate(data)
        except PydanticValidationError:
            logger.warning("Skipping malformed snippet document %s", snippet_id)
            return None

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            raise StoreError(f"Failed to {action}: {exc}") from exc


def _as_text(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


def _load_json(raw: Any) -> dict[str, Any] | None:
    if raw is None:
        return None
    try:
        data = json.loads(_as_text(raw))
    except (TypeError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


__all__ = ["SnippetStore"]
