"""Command-line entry point for inlining and sanitizing SVG images."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .cache import FileCacheBackend, SvgCache
from .config import DEFAULT_CACHE_DIR, DEFAULT_CACHE_PREFIX, InlineSvgConfig
from .errors import UploadRejected
from .inliner import SvgInliner
from .models import UploadedFile
from .uploads import SVG_MIME_TYPE, sanitize_upload

logger = logging.getLogger("inline_svg.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("render", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_render_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "input",
        type=Path,
        help="HTML fragment to process, or '-' to read from STDIN",
    )
    parser.add_argument(
        "--site-url",
        default=None,
        help="Origin of the site; only SVGs on this host are inlined "
        "(defaults to $INLINE_SVG_SITE_URL)",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory holding cached sanitized SVGs",
    )
    parser.add_argument(
        "--ttl",
        type=int,
        default=None,
        help="Seconds a fetched SVG stays cached (default: 24 hours)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds when fetching SVGs",
    )
    _add_common_arguments(parser)


def _add_sanitize_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", type=Path, help="SVG file to sanitize")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the sanitized SVG here instead of STDOUT",
    )
    _add_common_arguments(parser)


def _add_purge_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=DEFAULT_CACHE_DIR,
        help="Directory holding cached sanitized SVGs",
    )
    _add_common_arguments(parser)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Inline same-origin SVG images into HTML and sanitize SVG files.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser(
        "render", help="Replace <img src=...svg> references with inline SVG"
    )
    _add_render_arguments(render_parser)

    sanitize_parser = subparsers.add_parser(
        "sanitize", help="Sanitize an SVG file the way uploads are sanitized"
    )
    _add_sanitize_arguments(sanitize_parser)

    purge_parser = subparsers.add_parser(
        "purge", help="Delete every cached SVG (deactivation hook)"
    )
    _add_purge_arguments(purge_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _read_input(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def _run_render(args: argparse.Namespace) -> int:
    overrides = {}
    if args.cache_dir is not None:
        overrides["cache_dir"] = args.cache_dir.expanduser()
    if args.ttl is not None:
        overrides["cache_ttl"] = args.ttl
    if args.timeout is not None:
        overrides["fetch_timeout"] = args.timeout
    try:
        config = replace(InlineSvgConfig.from_env(site_url=args.site_url), **overrides)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    cache = SvgCache(
        FileCacheBackend(config.cache_dir),
        prefix=config.cache_prefix,
        ttl=config.cache_ttl,
    )
    fragment = _read_input(args.input)
    with SvgInliner(config, cache=cache) as inliner:
        output = inliner.render(fragment)
    sys.stdout.write(output)
    sys.stdout.flush()
    return 0


def _run_sanitize(args: argparse.Namespace) -> int:
    upload = UploadedFile(
        filename=args.input.name,
        content=args.input.read_bytes(),
        mime_type=SVG_MIME_TYPE,
    )
    try:
        sanitized = sanitize_upload(upload)
    except UploadRejected as exc:
        logger.error("%s: %s", exc.filename, exc.message)
        return 1
    if args.output:
        args.output.write_bytes(sanitized.content)
        logger.info("Saved sanitized SVG to %s", args.output)
    else:
        sys.stdout.write(sanitized.content.decode("utf-8"))
        sys.stdout.flush()
    return 0


def _run_purge(args: argparse.Namespace) -> int:
    cache = SvgCache(FileCacheBackend(args.cache_dir), prefix=DEFAULT_CACHE_PREFIX)
    removed = cache.invalidate_all()
    sys.stdout.write(f"{removed}\n")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    if args.command == "render":
        return _run_render(args)
    if args.command == "sanitize":
        return _run_sanitize(args)
    return _run_purge(args)


if __name__ == "__main__":
    sys.exit(main())
