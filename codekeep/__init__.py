"""CodeKeep: a personal code-snippet manager."""

from .errors import CodeKeepError, NotFoundError, StoreError, TransportError, ValidationError
from .snippet import Snippet, SnippetDraft
from .store import SnippetStore

__all__ = [
    "CodeKeepError",
    "NotFoundError",
    "Snippet",
    "SnippetDraft",
    "SnippetStore",
    "StoreError",
    "TransportError",
    "ValidationError",
]
