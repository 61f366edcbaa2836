import argparse
import io

import httpx
import pytest

from codekeep.api.server import create_app
from codekeep.api.service import ApiSettings
from codekeep import cli
from codekeep.cli import build_parser, execute, run_command
from codekeep.client import SnippetApiClient, SnippetCache, SnippetView
from codekeep.errors import CodeKeepError, NotFoundError, ValidationError
from codekeep.exception_handler import ErrorHandler
from codekeep.snippet import SnippetDraft


@pytest.fixture
def app(store):
    app = create_app(ApiSettings(redis_url="redis://127.0.0.1:6379/15"))
    app.state.snippet_store = store
    return app


def _api(app) -> SnippetApiClient:
    http = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver/api/",
    )
    return SnippetApiClient(http)


@pytest.mark.asyncio
async def test_create_filter_delete_scenario(app):
    async with _api(app) as api:
        cache = SnippetCache(api)
        await cache.refresh()

        created = await cache.create(
            SnippetDraft(title="Sort", tags=["python"], code="def f(): pass")
        )

        listed = await cache.refresh()
        assert listed[0].id == created.id

        await cache.set_active_tag("python")
        assert created.id in [s.id for s in cache.snippets]

        await cache.set_active_tag("rust")
        assert created.id not in [s.id for s in cache.snippets]

        await cache.set_active_tag("All")
        await cache.delete(created.id)

        with pytest.raises(NotFoundError):
            await api.get(created.id)


@pytest.mark.asyncio
async def test_cache_reconciles_from_server_response(app):
    async with _api(app) as api:
        cache = SnippetCache(api)

        created = await cache.create(
            SnippetDraft(title="  Flexbox  ", tags=["CSS", "css", "React"], code=".a {}")
        )

        assert created.title == "Flexbox"
        assert cache.snippets[0].tags == ["css", "react"]
        assert cache.selected.created_at is not None


@pytest.mark.asyncio
async def test_server_validation_error_reaches_the_client(app):
    async with _api(app) as api:
        cache = SnippetCache(api)

        with pytest.raises(ValidationError):
            await cache.create(SnippetDraft(title="No code"))

        assert cache.snippets == []
        assert cache.selected is None


@pytest.mark.asyncio
async def test_toggle_favorite_round_trip(app):
    async with _api(app) as api:
        cache = SnippetCache(api)
        first = await cache.create(SnippetDraft(title="First", code="a"))
        await cache.create(SnippetDraft(title="Second", code="b"))

        toggled = await cache.toggle_favorite(first.id)

        assert toggled.is_favorite is True
        assert toggled.updated_at > first.updated_at
        assert [s.title for s in cache.snippets] == ["Second", "First"]
        assert [s.title for s in cache.display_snippets()] == ["First", "Second"]


def _args(*argv: str) -> argparse.Namespace:
    return build_parser().parse_args(list(argv))


@pytest.mark.asyncio
async def test_cli_delete_requires_confirmation(app, store):
    snippet = store.create(SnippetDraft(title="Keep me", code="x"))
    out = io.StringIO()

    async with _api(app) as api:
        cache = SnippetCache(api)
        view = SnippetView(color=False)

        await run_command(_args("delete", snippet.id), cache, view, confirm=lambda _: False, out=out)
        assert store.get(snippet.id) == snippet

        await run_command(_args("delete", snippet.id), cache, view, confirm=lambda _: True, out=out)

    with pytest.raises(NotFoundError):
        store.get(snippet.id)
    assert "Cancelled." in out.getvalue()


@pytest.mark.asyncio
async def test_cli_add_and_list_by_tag(app):
    out = io.StringIO()

    async with _api(app) as api:
        view = SnippetView(color=False)
        await run_command(
            _args("add", "--title", "Sort", "--tags", "Python, algorithms", "--code", "def f(): pass"),
            SnippetCache(api),
            view,
            out=out,
        )
        await run_command(
            _args("add", "--title", "Hello", "--tags", "rust", "--code", "fn main() {}"),
            SnippetCache(api),
            view,
            out=out,
        )

        listing = io.StringIO()
        await run_command(_args("list", "--tag", "python"), SnippetCache(api), view, out=listing)

    lines = listing.getvalue().splitlines()
    assert lines[0] == "All [python] algorithms"
    assert len(lines) == 2
    assert "Sort" in lines[1]


@pytest.mark.asyncio
async def test_cli_tag_filter_ignores_case(app, store):
    store.create(SnippetDraft(title="Sort", tags=["python"], code="def f(): pass"))
    store.create(SnippetDraft(title="Hello", tags=["rust"], code="fn main() {}"))
    listing = io.StringIO()

    async with _api(app) as api:
        await run_command(_args("list", "--tag", "Python"), SnippetCache(api), SnippetView(color=False), out=listing)

    lines = listing.getvalue().splitlines()
    assert lines[0] == "All [python]"
    assert "Sort" in lines[1]


@pytest.mark.asyncio
async def test_cli_show_raw_prints_only_code(app, store):
    snippet = store.create(SnippetDraft(title="Loop", tags=["python"], code="for i in range(3):\n    print(i)\n"))
    out = io.StringIO()

    async with _api(app) as api:
        await run_command(_args("show", snippet.id, "--raw"), SnippetCache(api), SnippetView(color=False), out=out)

    assert out.getvalue() == "for i in range(3):\n    print(i)\n"


@pytest.mark.asyncio
async def test_cli_copy_puts_code_on_clipboard(app, store, monkeypatch):
    snippet = store.create(SnippetDraft(title="Loop", code="print('hi')"))
    copied = []
    monkeypatch.setattr(cli.pyperclip, "copy", copied.append)
    out = io.StringIO()

    async with _api(app) as api:
        await run_command(_args("copy", snippet.id), SnippetCache(api), SnippetView(color=False), out=out)

    assert copied == ["print('hi')"]
    assert "Copied Loop" in out.getvalue()


@pytest.mark.asyncio
async def test_cli_copy_without_clipboard_is_an_error(app, store, monkeypatch):
    snippet = store.create(SnippetDraft(title="Loop", code="print('hi')"))

    def _no_clipboard(_text):
        raise cli.pyperclip.PyperclipException("no copy mechanism")

    monkeypatch.setattr(cli.pyperclip, "copy", _no_clipboard)

    async with _api(app) as api:
        with pytest.raises(CodeKeepError, match="Clipboard is not available"):
            await run_command(_args("copy", snippet.id), SnippetCache(api), SnippetView(color=False))


@pytest.mark.asyncio
async def test_cli_failure_prints_error_report(app):
    handler = ErrorHandler("CRITICAL")
    err = io.StringIO()

    async with _api(app) as api:
        exit_code = await execute(
            _args("show", "missing"),
            SnippetCache(api),
            SnippetView(color=False),
            handler,
            err=err,
        )

    assert exit_code == 1
    assert handler.errors[0]["context"] == {"operation": "show", "snippet_id": "missing"}
    assert "1 operation(s) failed" in err.getvalue()
    assert "That snippet no longer exists" in err.getvalue()
