"""Create/edit form state, including tag-token entry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..errors import ValidationError
from ..snippet import Snippet, SnippetDraft
from ..snippet.model import is_blank

TAG_DELIMITERS = (",", "\n")
BACKSPACE = "\b"


@dataclass
class SnippetForm:
    title: str = ""
    description: str = ""
    code: str = ""
    tags: List[str] = field(default_factory=list)
    tag_input: str = ""
    editing_id: str | None = None

    @classmethod
    def from_snippet(cls, snippet: Snippet) -> "SnippetForm":
        return cls(
            title=snippet.title,
            description=snippet.description,
            code=snippet.code,
            tags=list(snippet.tags),
            editing_id=snippet.id,
        )

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def type_tags(self, text: str) -> None:
        """Feed keystrokes into the tag field.

        A delimiter commits the pending tag; a backspace on an empty field
        removes the last committed tag.
        """
        for char in text:
            if char in TAG_DELIMITERS:
                self.commit_tag()
            elif char == BACKSPACE:
                self.backspace()
            else:
                self.tag_input += char

    def commit_tag(self) -> str | None:
        tag = self.tag_input.strip().lower()
        self.tag_input = ""
        if not tag or tag in self.tags:
            return None
        self.tags.append(tag)
        return tag

    def backspace(self) -> None:
        if self.tag_input:
            self.tag_input = self.tag_input[:-1]
        elif self.tags:
            self.tags.pop()

    def remove_tag(self, tag: str) -> None:
        wanted = tag.strip().lower()
        self.tags = [existing for existing in self.tags if existing != wanted]

    def final_tags(self) -> List[str]:
        """Committed tags plus the pending one when it is new."""
        tags = list(self.tags)
        pending = self.tag_input.strip().lower()
        if pending and pending not in tags:
            tags.append(pending)
        return tags

    def validate(self) -> None:
        if is_blank(self.title) or is_blank(self.code):
            raise ValidationError("Title and Code are required.")

    def to_draft(self) -> SnippetDraft:
        self.validate()
        return SnippetDraft(
            title=self.title,
            tags=self.final_tags(),
            description=self.description,
            code=self.code,
        )


__all__ = ["BACKSPACE", "SnippetForm", "TAG_DELIMITERS"]
