"""Command line front-end for browsing and editing snippets."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Callable, Sequence, TextIO

import pyperclip

from .client import ALL_TAGS, ClientSettings, SnippetApiClient, SnippetCache, SnippetForm, SnippetView
from .errors import CodeKeepError
from .exception_handler import ErrorHandler

Confirm = Callable[[str], bool]


def ask_confirmation(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codekeep", description="Manage your saved code snippets")
    parser.add_argument(
        "--api-url",
        dest="api_url",
        default=None,
        help="Snippet API base URL (defaults to CODEKEEP_API_URL or http://localhost:5000/api)",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable syntax highlighting")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")

    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="List snippets, favorites first")
    list_cmd.add_argument("--search", "-s", default="", help="Substring to search for")
    list_cmd.add_argument("--tag", "-t", default=ALL_TAGS, help="Only show snippets with this tag")

    tags_cmd = commands.add_parser("tags", help="Show the tags of the matching snippets")
    tags_cmd.add_argument("--search", "-s", default="", help="Substring to search for")

    show_cmd = commands.add_parser("show", help="Show one snippet with highlighted code")
    show_cmd.add_argument("snippet_id")
    show_cmd.add_argument("--raw", action="store_true", help="Print only the code, without highlighting")

    copy_cmd = commands.add_parser("copy", help="Copy a snippet's code to the clipboard")
    copy_cmd.add_argument("snippet_id")

    for name, help_text in (("add", "Create a snippet"), ("edit", "Edit a snippet")):
        form_cmd = commands.add_parser(name, help=help_text)
        if name == "edit":
            form_cmd.add_argument("snippet_id")
        form_cmd.add_argument("--title", default=None)
        form_cmd.add_argument(
            "--tags",
            default=None,
            help="Comma separated tags; replaces the current ones when editing",
        )
        form_cmd.add_argument("--add-tag", action="append", default=[], dest="add_tags")
        form_cmd.add_argument("--remove-tag", action="append", default=[], dest="remove_tags")
        form_cmd.add_argument("--description", default=None)
        code_group = form_cmd.add_mutually_exclusive_group()
        code_group.add_argument("--code", default=None)
        code_group.add_argument(
            "--code-file",
            default=None,
            help="Read the code from a file ('-' for stdin)",
        )

    delete_cmd = commands.add_parser("delete", help="Delete a snippet")
    delete_cmd.add_argument("snippet_id")
    delete_cmd.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    favorite_cmd = commands.add_parser("favorite", help="Toggle the favorite flag")
    favorite_cmd.add_argument("snippet_id")

    return parser


def _read_code(args: argparse.Namespace) -> str | None:
    if args.code is not None:
        return args.code
    if args.code_file is None:
        return None
    if args.code_file == "-":
        return sys.stdin.read()
    with open(args.code_file, "r", encoding="utf-8") as file_handle:
        return file_handle.read()


def fill_form(form: SnippetForm, args: argparse.Namespace) -> SnippetForm:
    if args.title is not None:
        form.title = args.title
    if args.description is not None:
        form.description = args.description
    code = _read_code(args)
    if code is not None:
        form.code = code
    if args.tags is not None:
        form.tags = []
        form.type_tags(args.tags)
    for tag in args.add_tags:
        form.commit_tag()
        form.type_tags(tag)
    if args.remove_tags:
        form.commit_tag()
    for tag in args.remove_tags:
        form.remove_tag(tag)
    return form


async def run_command(
    args: argparse.Namespace,
    cache: SnippetCache,
    view: SnippetView,
    *,
    confirm: Confirm = ask_confirmation,
    out: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    command = args.command

    if command == "list":
        await cache.refresh(search_text=args.search, active_tag=args.tag)
        print(view.render_tag_bar(cache.tag_vocabulary(), cache.active_tag), file=out)
        print(view.render_list(cache), file=out)
        return 0

    if command == "tags":
        await cache.set_search_text(args.search)
        for tag in cache.tag_vocabulary():
            print(tag, file=out)
        return 0

    if command == "show":
        snippet = await cache.api.get(args.snippet_id)
        if args.raw:
            out.write(snippet.code)
            return 0
        print(view.render_detail(snippet), file=out)
        return 0

    if command == "copy":
        snippet = await cache.api.get(args.snippet_id)
        try:
            pyperclip.copy(snippet.code)
        except pyperclip.PyperclipException as exc:
            raise CodeKeepError(f"Clipboard is not available: {exc}") from exc
        print(f"📋 Copied {snippet.title} to the clipboard", file=out)
        return 0

    if command == "add":
        form = fill_form(SnippetForm(), args)
        await cache.refresh()
        created = await cache.create(form.to_draft())
        print(f"✅ Created {created.id}", file=out)
        print(view.render_detail(cache.selected), file=out)
        return 0

    if command == "edit":
        await cache.refresh()
        current = cache.select(args.snippet_id) or await cache.api.get(args.snippet_id)
        form = fill_form(SnippetForm.from_snippet(current), args)
        updated = await cache.update(args.snippet_id, form.to_draft())
        print(f"✅ Updated {updated.id}", file=out)
        print(view.render_detail(updated), file=out)
        return 0

    if command == "delete":
        if not args.yes and not confirm("Are you sure you want to delete this snippet?"):
            print("Cancelled.", file=out)
            return 0
        await cache.refresh()
        await cache.delete(args.snippet_id)
        print(f"🗑️  Deleted {args.snippet_id}", file=out)
        return 0

    if command == "favorite":
        await cache.refresh()
        snippet = await cache.toggle_favorite(args.snippet_id)
        state = "added to" if snippet.is_favorite else "removed from"
        print(f"{snippet.title} {state} favorites", file=out)
        return 0

    raise ValueError(f"Unknown command: {command}")


async def execute(
    args: argparse.Namespace,
    cache: SnippetCache,
    view: SnippetView,
    error_handler: ErrorHandler,
    *,
    confirm: Confirm = ask_confirmation,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run one command; failures are collected and reported instead of raised."""
    try:
        return await run_command(args, cache, view, confirm=confirm, out=out)
    except CodeKeepError as exc:
        error_handler.collect_operation_error(exc, args.command, getattr(args, "snippet_id", None))
        print(error_handler.format_error_report(), file=err or sys.stderr)
        return 1


async def _run(args: argparse.Namespace, error_handler: ErrorHandler) -> int:
    settings = ClientSettings.from_env()
    if args.api_url:
        settings.api_url = args.api_url

    async with SnippetApiClient.from_settings(settings) as api:
        cache = SnippetCache(api)
        view = SnippetView(color=not args.no_color and sys.stdout.isatty())
        return await execute(args, cache, view, error_handler)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    error_handler = ErrorHandler(args.log_level)

    try:
        exit_code = asyncio.run(_run(args, error_handler))
    except KeyboardInterrupt:
        print("\n⚠️ Operation interrupted", file=sys.stderr)
        sys.exit(1)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
