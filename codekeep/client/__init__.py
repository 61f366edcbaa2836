"""Client side: API access, cached snippet list, form state and rendering."""

from .api_client import ClientSettings, SnippetApiClient
from .cache import ALL_TAGS, SnippetCache
from .form import SnippetForm
from .view import SnippetView

__all__ = [
    "ALL_TAGS",
    "ClientSettings",
    "SnippetApiClient",
    "SnippetCache",
    "SnippetForm",
    "SnippetView",
]
