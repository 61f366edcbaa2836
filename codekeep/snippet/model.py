from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..errors import ValidationError

SCHEMA_VERSION = 2


def normalize_tags(tags: Iterable[str] | None) -> List[str]:
    """Trim, lowercase and deduplicate tags keeping first-occurrence order."""
    if not tags:
        return []
    normalized: List[str] = []
    seen: set[str] = set()
    for raw in tags:
        tag = str(raw).strip().lower()
        if not tag or tag in seen:
            continue
        seen.add(tag)
        normalized.append(tag)
    return normalized


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class SnippetDraft(BaseModel):
    """User-supplied snippet fields; anything left as ``None`` is not set."""

    title: str | None = None
    tags: List[str] | None = None
    description: str | None = None
    code: str | None = None
    is_favorite: bool | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def provided_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def validate_for_create(self) -> None:
        missing = [name for name in ("title", "code") if is_blank(getattr(self, name))]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    def validate_for_update(self) -> None:
        fields_set = self.model_fields_set
        empty = [
            name
            for name in ("title", "code")
            if name in fields_set and is_blank(getattr(self, name))
        ]
        if empty:
            raise ValidationError(f"Field(s) cannot be empty: {', '.join(empty)}")


class Snippet(BaseModel):
    """A persisted code snippet with its metadata."""

    id: str
    title: str
    tags: List[str] = Field(default_factory=list)
    description: str = ""
    code: str
    is_favorite: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def has_tag(self, tag: str) -> bool:
        wanted = tag.strip().lower()
        return any(existing.lower() == wanted for existing in self.tags)

    def matches(self, search_text: str) -> bool:
        needle = search_text.lower()
        if needle in self.title.lower() or needle in self.description.lower():
            return True
        return any(needle in tag.lower() for tag in self.tags)

    def apply(self, draft: SnippetDraft) -> "Snippet":
        """Return a copy with the draft's provided fields applied."""
        changes: dict[str, Any] = {}
        for name, value in draft.provided_fields().items():
            if name == "tags":
                changes["tags"] = normalize_tags(value)
            elif name in ("title", "description"):
                changes[name] = value.strip()
            else:
                changes[name] = value
        return self.model_copy(update=changes)


__all__ = ["SCHEMA_VERSION", "Snippet", "SnippetDraft", "is_blank", "normalize_tags"]
