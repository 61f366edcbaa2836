import datetime
import itertools

import pytest

from codekeep.client.cache import ALL_TAGS, SnippetCache
from codekeep.errors import NotFoundError, StoreError, TransportError
from codekeep.snippet import Snippet, SnippetDraft, normalize_tags

_ids = itertools.count(1)


def _snippet(title, tags=(), favorite=False):
    now = datetime.datetime.now(datetime.timezone.utc)
    return Snippet(
        id=f"s{next(_ids)}",
        title=title,
        tags=list(tags),
        code="pass",
        is_favorite=favorite,
        created_at=now,
        updated_at=now,
    )


class _StubApi:
    """In-memory stand-in for SnippetApiClient that normalizes like the server."""

    def __init__(self, snippets):
        self.snippets = list(snippets)
        self.fail_with = None
        self.list_calls = []

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _find(self, snippet_id):
        for snippet in self.snippets:
            if snippet.id == snippet_id:
                return snippet
        raise NotFoundError(snippet_id)

    async def list(self, search=None):
        self._check()
        self.list_calls.append(search)
        if not search:
            return list(self.snippets)
        return [s for s in self.snippets if s.matches(search)]

    async def create(self, draft):
        self._check()
        created = _snippet(draft.title, normalize_tags(draft.tags))
        self.snippets.insert(0, created)
        return created

    async def update(self, snippet_id, draft):
        self._check()
        updated = self._find(snippet_id).apply(draft)
        self.snippets = [updated if s.id == snippet_id else s for s in self.snippets]
        return updated

    async def delete(self, snippet_id):
        self._check()
        self._find(snippet_id)
        self.snippets = [s for s in self.snippets if s.id != snippet_id]
        return "Snippet deleted successfully"

    async def toggle_favorite(self, snippet_id):
        self._check()
        current = self._find(snippet_id)
        return await self.update(snippet_id, SnippetDraft(is_favorite=not current.is_favorite))


@pytest.fixture
def api():
    return _StubApi(
        [
            _snippet("Goroutines", ["go", "concurrency"]),
            _snippet("Go modules", ["Golang"]),
            _snippet("List comprehension", ["python"]),
        ]
    )


@pytest.mark.asyncio
async def test_all_tag_returns_full_result_set(api):
    cache = SnippetCache(api)

    snippets = await cache.refresh()

    assert cache.active_tag == ALL_TAGS
    assert [s.title for s in snippets] == ["Goroutines", "Go modules", "List comprehension"]


@pytest.mark.asyncio
async def test_tag_filter_is_exact_and_case_insensitive(api):
    cache = SnippetCache(api)

    await cache.set_active_tag("GO")

    assert [s.title for s in cache.snippets] == ["Goroutines"]
    assert cache.active_tag == "go"


@pytest.mark.asyncio
async def test_search_and_tag_combine(api):
    cache = SnippetCache(api)
    await cache.set_active_tag("python")

    await cache.set_search_text("go")

    assert api.list_calls[-1] == "go"
    assert cache.snippets == []

    await cache.set_active_tag(ALL_TAGS)
    assert [s.title for s in cache.snippets] == ["Goroutines", "Go modules"]


@pytest.mark.asyncio
async def test_tag_vocabulary_is_derived_from_loaded_snippets():
    api = _StubApi([_snippet("a", ["react", "css"]), _snippet("b", ["CSS", "go"])])
    cache = SnippetCache(api)
    await cache.refresh()

    assert cache.tag_vocabulary() == [ALL_TAGS, "react", "css", "go"]


@pytest.mark.asyncio
async def test_display_puts_favorites_first_without_resorting():
    snippets = [
        _snippet("one"),
        _snippet("two", favorite=True),
        _snippet("three"),
        _snippet("four", favorite=True),
    ]
    cache = SnippetCache(_StubApi(snippets))
    await cache.refresh()

    assert [s.title for s in cache.display_snippets()] == ["two", "four", "one", "three"]
    assert [s.title for s in cache.snippets] == ["one", "two", "three", "four"]


@pytest.mark.asyncio
async def test_create_inserts_at_head_and_selects(api):
    cache = SnippetCache(api)
    await cache.refresh()

    created = await cache.create(SnippetDraft(title="New", code="x", tags=["Rust", "rust"]))

    assert cache.snippets[0] == created
    assert cache.selected == created
    assert created.tags == ["rust"]


@pytest.mark.asyncio
async def test_update_replaces_in_place_and_refreshes_selection(api):
    cache = SnippetCache(api)
    await cache.refresh()
    target = cache.snippets[1]
    cache.select(target.id)

    updated = await cache.update(target.id, SnippetDraft(title="Go modules v2"))

    assert cache.snippets[1] == updated
    assert cache.selected.title == "Go modules v2"
    assert len(cache.snippets) == 3


@pytest.mark.asyncio
async def test_delete_removes_entry_and_clears_selection(api):
    cache = SnippetCache(api)
    await cache.refresh()
    target = cache.snippets[0]
    cache.select(target.id)

    await cache.delete(target.id)

    assert target.id not in [s.id for s in cache.snippets]
    assert cache.selected is None


@pytest.mark.asyncio
async def test_delete_of_other_snippet_keeps_selection(api):
    cache = SnippetCache(api)
    await cache.refresh()
    kept = cache.select(cache.snippets[0].id)

    await cache.delete(cache.snippets[2].id)

    assert cache.selected == kept


@pytest.mark.asyncio
async def test_toggle_favorite_does_not_reorder(api):
    cache = SnippetCache(api)
    await cache.refresh()
    order = [s.id for s in cache.snippets]

    toggled = await cache.toggle_favorite(order[2])

    assert toggled.is_favorite is True
    assert [s.id for s in cache.snippets] == order
    assert cache.display_snippets()[0].id == order[2]


@pytest.mark.asyncio
async def test_failed_mutation_restores_previous_state(api):
    cache = SnippetCache(api)
    await cache.refresh()
    cache.select(cache.snippets[0].id)
    snippets_before = list(cache.snippets)
    selected_before = cache.selected

    api.fail_with = StoreError("boom")
    with pytest.raises(StoreError):
        await cache.update(cache.snippets[0].id, SnippetDraft(title="changed"))
    with pytest.raises(StoreError):
        await cache.delete(cache.snippets[0].id)
    with pytest.raises(StoreError):
        await cache.refresh()

    assert cache.snippets == snippets_before
    assert cache.selected == selected_before


@pytest.mark.asyncio
async def test_not_found_leaves_cache_untouched(api):
    cache = SnippetCache(api)
    await cache.refresh()
    before = list(cache.snippets)

    with pytest.raises(NotFoundError):
        await cache.toggle_favorite("missing")

    assert cache.snippets == before


@pytest.mark.asyncio
async def test_failed_query_change_keeps_previous_query(api):
    cache = SnippetCache(api)
    await cache.set_active_tag("go")
    before = list(cache.snippets)

    api.fail_with = TransportError("connection refused")
    with pytest.raises(TransportError):
        await cache.set_search_text("foo")
    with pytest.raises(TransportError):
        await cache.set_active_tag("python")

    assert cache.search_text == ""
    assert cache.active_tag == "go"
    assert cache.snippets == before


@pytest.mark.asyncio
async def test_blank_tag_means_all(api):
    cache = SnippetCache(api)
    await cache.set_active_tag("go")

    await cache.set_active_tag("  ")

    assert cache.active_tag == ALL_TAGS
    assert len(cache.snippets) == 3
