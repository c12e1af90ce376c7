"""CLI entrypoints for capibara commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CapibaraConfig, load_config
from .constants import CONFIG_FILENAME
from .errors import CapibaraError
from .logging import configure_logging
from .pipeline import Pipeline
from .walker import PathWalker
from .writer import write_document


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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="capibara",
        description="Aggregate YAML API fragments into one cross-referenced JSON document.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Scan a header tree and write the aggregated document.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument("root", help="Root directory of the header fragment tree.")
    build_parser.add_argument(
        "reference_url",
        nargs="?",
        default=None,
        help="Reference URL embedded in the document (falls back to the config file).",
    )
    build_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output JSON path (defaults to ./capibara.json).",
    )
    build_parser.add_argument(
        "--config",
        default=None,
        help=f"Path to a {CONFIG_FILENAME} file or the directory holding one (defaults to ROOT).",
    )
    build_parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Pretty-print the JSON output with this indent.",
    )
    build_parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file.",
    )
    build_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only print diagnostics, not pass progress.",
    )
    build_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report collection counts without writing the document.",
    )
    build_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any diagnostic was emitted.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for capibara commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if getattr(args, "log_file", None) else None
    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(getattr(args, "quiet", False)),
        log_file=log_file,
    )

    if args.command == "build":
        _run_build(parser, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_build(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        config = load_config(Path(args.config) if args.config else Path(args.root))
    except CapibaraError as exc:
        parser.exit(1, f"{exc}\n")

    reference_url = args.reference_url or config.reference_url
    if not reference_url:
        parser.exit(1, "A reference URL is required (argument or reference_url in config).\n")

    pipeline = Pipeline(walker=PathWalker(marker=config.marker, exclude_paths=config.exclude_paths))
    try:
        result = pipeline.run(args.root, reference_url)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except (CapibaraError, OSError) as exc:
        parser.exit(1, f"capibara build failed: {exc}\nRun with --verbose for more details.\n")

    document = result.document
    if args.dry_run:
        print(
            f"{len(document.headers)} headers, {len(document.macros)} macros, "
            f"{len(document.enums)} enums, {len(document.structs)} structs, "
            f"{len(document.typedefs)} typedefs, {len(document.functions)} functions (dry-run)"
        )
    else:
        output = _resolve_output(args.output, config)
        indent = args.indent if args.indent is not None else config.indent
        written = write_document(document, output, indent=indent)
        print(f"Document written to {_relativize(written)}")

    if args.strict and result.diagnostics:
        parser.exit(1, f"{len(result.diagnostics)} diagnostics emitted (strict mode).\n")


def _resolve_output(option: str | None, config: CapibaraConfig) -> Path:
    if option:
        return Path(option)
    return config.output


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
