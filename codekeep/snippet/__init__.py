"""Snippet entity and helpers."""

from .model import SCHEMA_VERSION, Snippet, SnippetDraft, normalize_tags

__all__ = ["SCHEMA_VERSION", "Snippet", "SnippetDraft", "normalize_tags"]
