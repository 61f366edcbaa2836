"""Error taxonomy shared by the store, the API layer and the client."""

from __future__ import annotations


class CodeKeepError(Exception):
    """Base class for every error raised by CodeKeep components."""


class ValidationError(CodeKeepError):
    """A required field is missing or a field has an invalid value."""


class NotFoundError(CodeKeepError):
    """The targeted snippet does not exist."""

    def __init__(self, snippet_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Snippet not found: {snippet_id}")
        self.snippet_id = snippet_id


class StoreError(CodeKeepError):
    """The underlying persistence layer failed."""


class TransportError(CodeKeepError):
    """The service could not be reached or answered unexpectedly."""


__all__ = [
    "CodeKeepError",
    "NotFoundError",
    "StoreError",
    "TransportError",
    "ValidationError",
]
