import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from tqdm import tqdm

from .config import AppSettings
from .error_handler import ErrorHandler, configure_logging
from .query import SortOption, build_view, use_system_collation
from .settings import Collection, CollectionRegistry, SettingsStore, initialize
from .snippet import Snippet, SnippetRepository, validate_draft

logger = logging.getLogger("snipit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snipit",
        description="Manage code snippets stored as JSON files in collection directories",
    )
    parser.add_argument(
        "--collection",
        "-c",
        dest="collection_id",
        help="Collection id to operate on (default: the selected collection)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init", help="Create the settings document and default collection")

    list_cmd = commands.add_parser("list", help="List, search, filter and sort snippets")
    list_cmd.add_argument(
        "query",
        nargs="?",
        default="",
        help='Structured search, e.g. \'title:react content:"useState"\'',
    )
    list_cmd.add_argument(
        "--filter",
        "-f",
        dest="filters",
        action="append",
        default=[],
        help="Side filter: starred, unlabeled or a language (repeatable)",
    )
    list_cmd.add_argument(
        "--sort",
        choices=[option.value for option in SortOption],
        default=SortOption.DATE_DESC.value,
        help="Sort order (default: date-desc)",
    )
    list_cmd.add_argument(
        "--no-starred-first",
        dest="starred_first",
        action="store_false",
        help="Do not force starred snippets to the top",
    )

    show_cmd = commands.add_parser("show", help="Print one snippet")
    show_cmd.add_argument("snippet_id")

    add_cmd = commands.add_parser("add", help="Create a snippet")
    add_cmd.add_argument("--title", "-t", required=True)
    add_cmd.add_argument(
        "--code-file",
        type=Path,
        help="Read the code from this file (default: stdin)",
    )
    add_cmd.add_argument("--description", "-d")
    add_cmd.add_argument("--language", "-l", default="")
    add_cmd.add_argument("--tag", dest="tags", action="append", default=[])
    add_cmd.add_argument("--starred", action="store_true")

    delete_cmd = commands.add_parser("delete", help="Delete a snippet")
    delete_cmd.add_argument("snippet_id")

    star_cmd = commands.add_parser("star", help="Toggle the starred flag of a snippet")
    star_cmd.add_argument("snippet_id")

    collections_cmd = commands.add_parser("collections", help="Manage collections")
    collection_actions = collections_cmd.add_subparsers(dest="action", required=True)
    collection_actions.add_parser("list", help="List registered collections")
    coll_add = collection_actions.add_parser("add", help="Register a directory as a collection")
    coll_add.add_argument("name")
    coll_add.add_argument("path", type=Path)
    coll_remove = collection_actions.add_parser("remove", help="Unregister a collection (files are kept)")
    coll_remove.add_argument("id")
    coll_select = collection_actions.add_parser("select", help="Make a collection the default")
    coll_select.add_argument("id")
    coll_rename = collection_actions.add_parser("rename", help="Rename a collection")
    coll_rename.add_argument("id")
    coll_rename.add_argument("name")

    return parser


def format_snippet_line(snippet: Snippet) -> str:
    star = "★" if snippet.starred else " "
    language = snippet.language or "unknown"
    tags = ", ".join(snippet.tags)
    return f"{star} {snippet.id}  {snippet.title}  [{language}]  {tags}"


def format_snippet(snippet: Snippet) -> str:
    lines = [
        f"{snippet.title}{'  ★' if snippet.starred else ''}",
        f"id: {snippet.id}",
        f"language: {snippet.language or 'unknown'}",
        f"tags: {', '.join(snippet.tags)}",
        f"created: {snippet.date}",
    ]
    if snippet.last_edited:
        lines.append(f"edited: {snippet.last_edited}")
    if snippet.description:
        lines.extend(["", snippet.description])
    lines.extend(["", snippet.code])
    return "\n".join(lines)


class CommandError(Exception):
    """Raised for user-facing failures; the message is printed as-is."""


async def _collection_path(registry: CollectionRegistry, collection_id: str | None) -> str | None:
    if not collection_id:
        return None
    collection = await registry.get(collection_id)
    if collection is None:
        raise CommandError(f"Unknown collection: {collection_id}")
    return collection.path


async def run(args: argparse.Namespace, settings: AppSettings) -> int:
    store = SettingsStore(settings.settings_path)
    await initialize(settings.home, store=store, default_collection_path=settings.default_collection_path)

    registry = CollectionRegistry(store)
    error_handler = ErrorHandler()
    repository = SnippetRepository(store, error_handler=error_handler)

    if args.command == "init":
        tqdm.write(f"✅ Settings ready at {settings.settings_path}")
        return 0

    if args.command == "collections":
        return await _run_collections(args, registry)

    path = await _collection_path(registry, args.collection_id)

    if args.command == "list":
        snippets = await repository.list(path)
        ordered = build_view(
            snippets,
            filters=args.filters,
            query=args.query,
            sort_option=args.sort,
            starred_first=args.starred_first,
        )
        for snippet in ordered:
            print(format_snippet_line(snippet))
        tqdm.write(f"{len(ordered)} of {len(snippets)} snippets")
        report = error_handler.format_error_report()
        if report:
            tqdm.write(report)
        return 0

    if args.command == "show":
        snippet = await repository.get(args.snippet_id, path)
        if snippet is None:
            raise CommandError(f"Snippet not found: {args.snippet_id}")
        print(format_snippet(snippet))
        return 0

    if args.command == "add":
        code = args.code_file.read_text(encoding="utf-8") if args.code_file else sys.stdin.read()
        target = path or await repository.resolve_path()
        failure = validate_draft(args.title, code, str(target) if target else None)
        if failure is not None:
            raise CommandError(failure.message)
        snippet = await repository.create(
            title=args.title,
            code=code,
            description=args.description,
            language=args.language,
            tags=args.tags,
            starred=args.starred,
            path=target,
        )
        if snippet is None:
            raise CommandError("Failed to save snippet.")
        tqdm.write(f"✅ Saved snippet {snippet.id}")
        return 0

    if args.command == "delete":
        if not await repository.delete(args.snippet_id, path):
            raise CommandError(f"Failed to delete snippet {args.snippet_id}")
        tqdm.write(f"🗑️  Deleted snippet {args.snippet_id}")
        return 0

    if args.command == "star":
        if not await repository.toggle_star(args.snippet_id, path):
            raise CommandError(f"Snippet not found: {args.snippet_id}")
        snippet = await repository.get(args.snippet_id, path)
        state = "starred" if snippet and snippet.starred else "unstarred"
        tqdm.write(f"✅ Snippet {args.snippet_id} {state}")
        return 0

    raise CommandError(f"Unknown command: {args.command}")


async def _run_collections(args: argparse.Namespace, registry: CollectionRegistry) -> int:
    if args.action == "list":
        selected = await registry.selected()
        for collection in await registry.list():
            marker = "*" if selected is not None and selected.id == collection.id else " "
            print(f"{marker} {collection.id}  {collection.name}  {collection.path}")
        return 0

    if args.action == "add":
        directory = args.path.expanduser().resolve()
        if not directory.is_dir():
            raise CommandError(f"Not a directory: {directory}")
        collection = Collection(name=args.name, path=str(directory))
        if not await registry.add(collection):
            raise CommandError(f"A collection already uses {directory}")
        tqdm.write(f"✅ Collection added: {collection.id}")
        return 0

    if args.action == "remove":
        if not await registry.remove(args.id):
            raise CommandError(f"Unknown collection: {args.id}")
        tqdm.write(f"✅ Collection removed: {args.id}")
        return 0

    if args.action == "select":
        if not await registry.select(args.id):
            raise CommandError(f"Unknown collection: {args.id}")
        tqdm.write(f"✅ Collection selected: {args.id}")
        return 0

    if args.action == "rename":
        if not await registry.rename(args.id, args.name):
            raise CommandError(f"Unknown collection: {args.id}")
        tqdm.write(f"✅ Collection renamed: {args.id}")
        return 0

    raise CommandError(f"Unknown collections action: {args.action}")


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = AppSettings.from_env()
    configure_logging(settings.log_level)
    use_system_collation()

    try:
        exit_code = asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        print("\n⚠️ Interrupted", file=sys.stderr)
        sys.exit(1)
    except CommandError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.exception("Fatal error")
        print("\n❌ Fatal error occurred. See log for details.", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
