"""CLI entrypoints for wikisections commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .editor import SectionEditor, SectionNotFoundError
from .logging import configure_logging
from .stores import PageStoreError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_author_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--author",
        default=None,
        help="Record this author on the page after the edit.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wikisections",
        description="Inspect and edit the sections embedded in wiki pages.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .wikisections.yml or the directory holding it (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also append log records, with timestamps, to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    pages_parser = subparsers.add_parser("pages", help="List stored pages.")
    _add_verbose_option(pages_parser, suppress_default=True)

    show_parser = subparsers.add_parser("show", help="Print the raw content of a page.")
    _add_verbose_option(show_parser, suppress_default=True)
    show_parser.add_argument("key", help="Page key (title).")

    sections_parser = subparsers.add_parser(
        "sections", help="List the sections of a page in display order."
    )
    _add_verbose_option(sections_parser, suppress_default=True)
    sections_parser.add_argument("key", help="Page key (title).")

    set_body_parser = subparsers.add_parser(
        "set-body",
        help="Replace the body of one section, reading the new body from a file or stdin.",
    )
    _add_verbose_option(set_body_parser, suppress_default=True)
    _add_author_option(set_body_parser)
    set_body_parser.add_argument("key", help="Page key (title).")
    set_body_parser.add_argument("section_id", help="Section id.")
    set_body_parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Read the new body from this file instead of stdin.",
    )
    set_body_parser.add_argument(
        "--title",
        default=None,
        help="Title to use if the section has to be created.",
    )

    rename_parser = subparsers.add_parser("rename", help="Change the title of a section.")
    _add_verbose_option(rename_parser, suppress_default=True)
    _add_author_option(rename_parser)
    rename_parser.add_argument("key", help="Page key (title).")
    rename_parser.add_argument("section_id", help="Section id.")
    rename_parser.add_argument("title", help="New section title.")

    append_parser = subparsers.add_parser("append", help="Append a new section to a page.")
    _add_verbose_option(append_parser, suppress_default=True)
    _add_author_option(append_parser)
    append_parser.add_argument("key", help="Page key (title).")
    append_parser.add_argument("title", help="Title of the new section.")

    remove_parser = subparsers.add_parser("remove", help="Delete a section from a page.")
    _add_verbose_option(remove_parser, suppress_default=True)
    _add_author_option(remove_parser)
    remove_parser.add_argument("key", help="Page key (title).")
    remove_parser.add_argument("section_id", help="Section id.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default=None, help="Bind address.")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for wikisections commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .service import run_service

        run_service(
            host=args.host or config.service.host,
            port=args.port or config.service.port,
            config=config,
        )
        return

    try:
        editor = SectionEditor.from_config(config)
        _dispatch(editor, args)
    except (PageStoreError, SectionNotFoundError, ValueError) as exc:
        parser.exit(1, f"{exc}\n")
    except OSError as exc:
        parser.exit(1, f"wikisections {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _dispatch(editor: SectionEditor, args: argparse.Namespace) -> None:
    if args.command == "pages":
        for page in editor.list_pages():
            count = len(page.sections or [])
            print(f"{page.key}\t{count} section(s)\t{page.updated_at or '-'}")
    elif args.command == "show":
        print(editor.view(args.key).content)
    elif args.command == "sections":
        for section in editor.view(args.key).sections or []:
            print(f"{section.id}\t{section.title}")
    elif args.command == "set-body":
        body = _read_body(args.file)
        outcome = editor.update_body(
            args.key, args.section_id, body, author=args.author, fallback_title=args.title
        )
        _report(outcome.changed, f"Updated section {outcome.section_id} of {args.key}")
    elif args.command == "rename":
        outcome = editor.rename(args.key, args.section_id, args.title, author=args.author)
        _report(outcome.changed, f"Renamed section {outcome.section_id} of {args.key}")
    elif args.command == "append":
        outcome = editor.append(args.key, args.title, author=args.author)
        print(outcome.section_id)
    elif args.command == "remove":
        outcome = editor.remove(args.key, args.section_id, author=args.author)
        _report(outcome.changed, f"Removed section {outcome.section_id} from {args.key}")
    else:  # pragma: no cover - argparse enforces choices
        raise ValueError(f"Unknown command {args.command}")


def _read_body(path: Path | None) -> str:
    if path is None:
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def _report(changed: bool, message: str) -> None:
    print(message if changed else "No changes")


if __name__ == "__main__":
    main(sys.argv[1:])
