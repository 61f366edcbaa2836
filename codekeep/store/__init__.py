"""Snippet persistence backed by Redis."""

from .snippet_store import SnippetStore

__all__ = ["SnippetStore"]
