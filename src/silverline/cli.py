from __future__ import annotations

import argparse
import json
import sys
from importlib import metadata
from pathlib import Path

import tomllib
import uvicorn
from rich.console import Console
from rich.markup import escape

from .book_io import load_or_parse
from .errors import SilverlineError
from .formats import detect_format
from .logging_utils import build_uvicorn_log_config, configure_logging
from .reveal import book_title, total_length, visible_text
from .segments import segments_to_payload
from .web import WebConfig, create_app

console = Console()
err_console = Console(stderr=True)


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("silverline")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"silverline {__version__}",
    )


def _add_debug_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging (detected format, spine resolution, segment counts).",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Flatten a .txt, .fb2 or .epub book into styled text segments. Use `silverline web` to serve a folder.",
    )
    _add_version_flag(ap)
    ap.add_argument("book", help="Path to a .txt, .fb2 or .epub file")
    ap.add_argument(
        "--json",
        action="store_true",
        help="Emit the segment sequence as JSON instead of a summary.",
    )
    ap.add_argument(
        "-o",
        "--output",
        help="Write the --json payload to this path instead of stdout.",
    )
    ap.add_argument(
        "--offset",
        type=float,
        default=None,
        help="Print the text revealed once this many characters have scrolled by.",
    )
    ap.add_argument(
        "--cache",
        action="store_true",
        help="Reuse (and refresh) the segment cache stored beside the book.",
    )
    _add_debug_flag(ap)
    return ap


def build_web_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Serve parsed books from a folder as JSON.",
    )
    _add_version_flag(ap)
    ap.add_argument("root", help="Folder containing .txt, .fb2 and .epub books.")
    ap.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1).")
    ap.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000).")
    ap.add_argument(
        "--no-cache",
        action="store_true",
        help="Parse books on every request instead of writing segment caches.",
    )
    _add_debug_flag(ap)
    return ap


def _run_web(args: argparse.Namespace) -> int:
    configure_logging(args.debug)
    root = Path(args.root).expanduser().resolve()
    config = WebConfig(root=root, cache=not args.no_cache)
    app = create_app(config)
    console.print(f"Serving silverline from {root}")
    console.print(f"Web URL: http://{args.host}:{args.port}/api/books")
    console.print("Press Ctrl+C to stop.\n")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="debug" if args.debug else "info",
        log_config=build_uvicorn_log_config(args.debug),
    )
    return 0


def _run_parse(args: argparse.Namespace) -> int:
    configure_logging(args.debug)
    book_path = Path(args.book).expanduser()
    if args.output and not args.json:
        raise ValueError("--output can only be used with --json.")
    try:
        book_format = detect_format(book_path.name)
        if not book_path.is_file():
            raise FileNotFoundError(f"Book not found: {book_path}")
        segments = load_or_parse(book_path, use_cache=args.cache)
    except (SilverlineError, FileNotFoundError) as exc:
        err_console.print(f"Error: {exc}", markup=False, highlight=False, soft_wrap=True)
        return 1

    if args.json:
        text = json.dumps(segments_to_payload(segments), ensure_ascii=False, indent=2)
        if args.output:
            Path(args.output).write_text(text + "\n", encoding="utf-8")
        else:
            sys.stdout.write(text + "\n")
        return 0

    if args.offset is not None:
        console.print(visible_text(segments, args.offset), markup=False, highlight=False, soft_wrap=True)
        return 0

    headings = sum(1 for segment in segments if segment.is_heading)
    breaks = sum(1 for segment in segments if segment.is_paragraph_break)
    console.print(f"[bold]{escape(book_title(book_path.name))}[/bold] ({book_format})", highlight=False)
    console.print(f"Segments: {len(segments):,} (headings: {headings:,}, breaks: {breaks:,})")
    console.print(
        f'Loaded "{book_path.name}" ({total_length(segments):,} characters)',
        markup=False,
        highlight=False,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "web":
        web_parser = build_web_parser()
        web_args = web_parser.parse_args(argv[1:])
        return _run_web(web_args)

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    return _run_parse(args)


if __name__ == "__main__":
    raise SystemExit(main())
