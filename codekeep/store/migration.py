"""Convert legacy single-``category`` snippet documents to the tags schema."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timezone
from typing import Any, List

from pydantic import ValidationError as PydanticValidationError
from tqdm import tqdm

from ..errors import ValidationError
from ..snippet import Snippet, normalize_tags
from ..snippet.model import is_blank
from .snippet_store import SnippetStore

logger = logging.getLogger("codekeep")


@dataclass(slots=True)
class MigrationReport:
    migrated: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.migrated) + len(self.failed)


def upgrade_document(snippet_id: str, document: dict[str, Any]) -> Snippet:
    """Build a current-schema snippet from a legacy document.

    The legacy ``category`` becomes the only tag unless the document already
    carries a ``tags`` list, in which case the category is appended to it.
    """

    data = dict(document)
    category = data.pop("category", None)
    tags = list(data.get("tags") or [])
    if isinstance(category, str) and category.strip():
        tags.append(category)
    data["tags"] = normalize_tags(tags)
    data["id"] = str(data.get("id") or data.pop("_id", None) or snippet_id)
    data.pop("schema_version", None)
    if isinstance(data.get("title"), str):
        data["title"] = data["title"].strip()
    snippet = Snippet.model_validate(data)
    if is_blank(snippet.title) or is_blank(snippet.code):
        raise ValidationError("Legacy document is missing its title or code")
    naive = {
        name: getattr(snippet, name).replace(tzinfo=timezone.utc)
        for name in ("created_at", "updated_at")
        if getattr(snippet, name).tzinfo is None
    }
    return snippet.model_copy(update=naive) if naive else snippet


def migrate_categories(store: SnippetStore, *, dry_run: bool = False) -> MigrationReport:
    report = MigrationReport()
    legacy = list(store.iter_legacy_documents())
    if not legacy:
        logger.info("No legacy snippet documents found")
        return report

    for snippet_id, document in tqdm(legacy, desc="Migrating snippets", unit="snippet"):
        try:
            snippet = upgrade_document(snippet_id, document)
        except (PydanticValidationError, ValidationError) as exc:
            logger.warning("Cannot migrate snippet %s: %s", snippet_id, exc)
            report.failed.append(snippet_id)
            continue

        if snippet.id != snippet_id:
            logger.warning(
                "Snippet %s declares id %s; keeping the storage key", snippet_id, snippet.id
            )
            snippet = snippet.model_copy(update={"id": snippet_id})

        if not dry_run:
            snippet = snippet.model_copy(update={"updated_at": store.next_timestamp(snippet.updated_at)})
            store.replace(snippet)
        report.migrated.append(snippet_id)

    logger.info(
        "Migrated %d snippet(s), %d failed%s",
        len(report.migrated),
        len(report.failed),
        " (dry run)" if dry_run else "",
    )
    return report


__all__ = ["MigrationReport", "migrate_categories", "upgrade_document"]
