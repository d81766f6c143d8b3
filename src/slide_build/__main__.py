"""CLI entry-point for slide_build.

Usage:
    python -m slide_build
    python -m slide_build [SOURCE] [-o OUTPUT] [--stylesheet HREF] [--json]
    python -m slide_build build [SOURCE] [-o OUTPUT] [--strip-prefix PREFIX] [--converter CMD]
    python -m slide_build check [DECK] [--stylesheet HREF] [--strip-prefix PREFIX] [--json]

With no arguments, builds ``talk.md`` into ``talk.html`` in the working
directory.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from slide_build import __version__
from slide_build.core.builder import build_deck
from slide_build.core.config import BuildConfig
from slide_build.core.verify import verify_deck
from slide_build.errors import ConversionError, SlideBuildError
from slide_build.utils.exit_codes import ExitCode
from slide_build.utils.json_norm import stable_json_dump

_KNOWN_COMMANDS = {"build", "check"}


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: ./slide_build.yaml if present).",
    )
    p.add_argument(
        "--stylesheet",
        default=None,
        help="Stylesheet href to link before </head> (default: style.css).",
    )
    p.add_argument(
        "--strip-prefix",
        dest="strip_prefix",
        default=None,
        help="External URL prefix to remove from the deck.",
    )
    p.add_argument(
        "--json",
        dest="json_out",
        action="store_true",
        default=False,
        help="Print the report as JSON to stdout.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug).",
    )


def _add_build_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "source",
        nargs="?",
        type=Path,
        default=None,
        help="Markdown source (default: talk.md).",
    )
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="HTML deck to write (default: talk.html).",
    )
    p.add_argument(
        "--intermediate",
        type=Path,
        default=None,
        help="Where the converter writes its raw HTML (default: talk-tmp.html).",
    )
    p.add_argument(
        "--converter",
        default=None,
        help="Converter command (default: markdown-to-slides).",
    )
    p.add_argument(
        "--timeout",
        dest="converter_timeout",
        type=float,
        default=None,
        help="Converter timeout in seconds (0 = no limit).",
    )
    p.add_argument(
        "--keep-intermediate",
        dest="keep_intermediate",
        action="store_true",
        default=None,
        help="Leave the converter's raw HTML on disk.",
    )
    _add_common_args(p)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="slide-build",
        description="Build an HTML slide deck from a Markdown talk.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    sub = p.add_subparsers(dest="command")

    build_p = sub.add_parser("build", help="Convert and post-process a talk.")
    _add_build_args(build_p)

    check_p = sub.add_parser(
        "check",
        help="Verify a built deck links the stylesheet and has no stripped URLs.",
    )
    check_p.add_argument(
        "deck",
        nargs="?",
        type=Path,
        default=None,
        help="HTML deck to check (default: the configured output).",
    )
    _add_common_args(check_p)
    return p


def _build_default_parser() -> argparse.ArgumentParser:
    """Parser for default (no subcommand) mode.

    Argparse subparsers greedily consume the first positional token, so
    ``slide-build talk.md`` would treat ``talk.md`` as a command.  This
    parser is used when the first positional token is *not* a known
    subcommand.
    """
    p = argparse.ArgumentParser(
        prog="slide-build",
        description="Build an HTML slide deck from a Markdown talk.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    _add_build_args(p)
    p.set_defaults(command="build")
    return p


def _load_config(args: argparse.Namespace) -> BuildConfig:
    if args.config is not None:
        base = BuildConfig.from_yaml(args.config)
    else:
        base = BuildConfig.discover(Path.cwd())
    return base.with_overrides(
        source=getattr(args, "source", None),
        output=getattr(args, "output", None),
        intermediate=getattr(args, "intermediate", None),
        stylesheet=args.stylesheet,
        strip_prefix=args.strip_prefix,
        converter=getattr(args, "converter", None),
        converter_timeout=getattr(args, "converter_timeout", None),
        keep_intermediate=getattr(args, "keep_intermediate", None),
    )


def _print_error(e: Exception) -> None:
    print(f"error: {e}", file=sys.stderr)
    if isinstance(e, ConversionError) and e.stderr.strip():
        print(e.stderr.rstrip(), file=sys.stderr)


def _handle_build(args: argparse.Namespace) -> int:
    """Dispatch ``slide-build [build]``."""
    try:
        config = _load_config(args)
        result = build_deck(config)
    except (SlideBuildError, OSError) as e:
        _print_error(e)
        return ExitCode.ERROR

    if args.json_out:
        stable_json_dump(result.to_dict(), sys.stdout)
    else:
        print(
            f"built {result.output.as_posix()} from {result.source.as_posix()} "
            f"({result.output_bytes} bytes, "
            f"{result.stylesheet_injections} stylesheet link(s), "
            f"{result.prefix_removals} URL prefix removal(s))",
            file=sys.stderr,
        )
    return ExitCode.SUCCESS


def _handle_check(args: argparse.Namespace) -> int:
    """Dispatch ``slide-build check``."""
    try:
        config = _load_config(args)
        deck: Path = args.deck if args.deck is not None else config.output
        if not deck.is_file():
            print(f"error: deck does not exist: {deck}", file=sys.stderr)
            return ExitCode.ERROR
        text = deck.read_bytes().decode("utf-8")
    except (SlideBuildError, OSError, UnicodeDecodeError) as e:
        _print_error(e)
        return ExitCode.ERROR

    violations = verify_deck(
        text,
        stylesheet=config.stylesheet,
        strip_prefix=config.strip_prefix,
    )

    if args.json_out:
        stable_json_dump([v.to_dict() for v in violations], sys.stdout)
    elif not violations:
        print(f"{deck.as_posix()}: OK", file=sys.stderr)
    else:
        print(f"\n  {len(violations)} violation(s) in {deck.as_posix()}:\n", file=sys.stderr)
        for v in violations:
            loc = f"{deck.as_posix()}:{v.line}" if v.line else deck.as_posix()
            print(f"    [{v.rule_id}]  {loc}  {v.message}", file=sys.stderr)
        print("", file=sys.stderr)

    return ExitCode.VIOLATION if violations else ExitCode.SUCCESS


def main(argv: list[str] | None = None) -> int:
    """Entry-point — returns an exit code (0 = ok, 1 = violation, 2 = error)."""
    effective_argv = list(argv) if argv is not None else sys.argv[1:]

    first_positional = next(
        (a for a in effective_argv if not a.startswith("-")), None
    )
    if first_positional in _KNOWN_COMMANDS:
        args = _build_parser().parse_args(effective_argv)
    else:
        args = _build_default_parser().parse_args(effective_argv)

    _configure_logging(args.verbose)

    if args.command == "check":
        return _handle_check(args)
    return _handle_build(args)


if __name__ == "__main__":
    raise SystemExit(main())
