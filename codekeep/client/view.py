"""Plain-text rendering of the snippet cache with Pygments highlighting."""

from __future__ import annotations

from typing import List, Sequence

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound

from ..snippet import Snippet
from .cache import SnippetCache

FAVORITE_MARK = "★"


def lexer_for(snippet: Snippet) -> Lexer:
    """Pick a lexer from the snippet's tags, then from its code."""
    for tag in snippet.tags:
        try:
            return get_lexer_by_name(tag)
        except ClassNotFound:
            continue
    try:
        return guess_lexer(snippet.code)
    except ClassNotFound:
        return TextLexer()


class SnippetView:
    def __init__(self, *, color: bool = True) -> None:
        self.color = color

    def render_tag_bar(self, vocabulary: Sequence[str], active_tag: str) -> str:
        return " ".join(f"[{tag}]" if tag == active_tag else tag for tag in vocabulary)

    def render_list(self, cache: SnippetCache) -> str:
        snippets = cache.display_snippets()
        if not snippets:
            return "No snippets found."

        selected_id = cache.selected.id if cache.selected else None
        lines: List[str] = []
        for snippet in snippets:
            marker = ">" if snippet.id == selected_id else " "
            star = FAVORITE_MARK if snippet.is_favorite else " "
            tags = ", ".join(snippet.tags)
            lines.append(f"{marker}{star} {snippet.id}  {snippet.title}" + (f"  ({tags})" if tags else ""))
        return "\n".join(lines)

    def render_detail(self, snippet: Snippet | None) -> str:
        if snippet is None:
            return "Select a snippet to view it, or create a new one."

        header = f"{FAVORITE_MARK} {snippet.title}" if snippet.is_favorite else snippet.title
        lines = [header, "=" * len(header)]
        if snippet.tags:
            lines.append("Tags: " + " ".join(f"#{tag}" for tag in snippet.tags))
        lines.append(snippet.description or "No description.")
        lines.append("")
        lines.append(self.render_code(snippet).rstrip("\n"))
        lines.append("")
        lines.append(f"Created {snippet.created_at.isoformat()} | Updated {snippet.updated_at.isoformat()}")
        return "\n".join(lines)

    def render_code(self, snippet: Snippet) -> str:
        if not self.color:
            return snippet.code
        return highlight(snippet.code, lexer_for(snippet), TerminalFormatter())


__all__ = ["FAVORITE_MARK", "SnippetView", "lexer_for"]
