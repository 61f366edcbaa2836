"""Pydantic models for the public API surface."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..snippet import Snippet, SnippetDraft

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SnippetCreateRequest(BaseModel):
    title: str | None = Field(None, description="Snippet title (required)")
    tags: List[str] | None = Field(None, description="Tag labels; normalized to lowercase")
    description: str | None = Field(None, description="Optional free-form description")
    code: str | None = Field(None, description="Snippet body (required)")
    is_favorite: bool | None = Field(None, description="Initial favorite flag")

    model_config = _CAMEL

    def to_draft(self) -> SnippetDraft:
        return SnippetDraft.model_validate(self.model_dump(exclude_unset=True))


class SnippetUpdateRequest(SnippetCreateRequest):
    """Any subset of the mutable snippet fields."""


class SnippetResponse(BaseModel):
    id: str
    title: str
    tags: List[str]
    description: str
    code: str
    is_favorite: bool
    created_at: str
    updated_at: str

    model_config = _CAMEL

    @classmethod
    def from_snippet(cls, snippet: Snippet) -> "SnippetResponse":
        return cls(
            id=snippet.id,
            title=snippet.title,
            tags=list(snippet.tags),
            description=snippet.description,
            code=snippet.code,
            is_favorite=snippet.is_favorite,
            created_at=snippet.created_at.isoformat(),
            updated_at=snippet.updated_at.isoformat(),
        )


class MessageResponse(BaseModel):
    message: str


__all__ = [
    "MessageResponse",
    "SnippetCreateRequest",
    "SnippetResponse",
    "SnippetUpdateRequest",
]
