#!/usr/bin/env python3

import argparse
from collections.abc import Sequence


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recuscan",
        description="Receipt text extraction CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  extract [FILE|-]           Extract vendor, date, taxes, total and items
                             from recognized receipt text (stdin with -)
  categories                 List expense categories and their keywords

Exit codes:
  0 = extracted, 1 = missing file / bad input or config, 2 = no text recognized
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser("extract", help="Extract a receipt from OCR text")
    extract_parser.add_argument(
        "source",
        nargs="?",
        default="-",
        help="OCR text file (.txt) or OCR result (.json); '-' reads stdin (default)",
    )
    extract_parser.add_argument("--locale", default=None, help="Locale hint, e.g. fr_CA, en_CA, en_US")
    extract_parser.add_argument(
        "--config",
        action="append",
        default=None,
        metavar="TOML",
        help="Extraction settings file; repeat to layer (default: config/recuscan.toml)",
    )
    extract_parser.add_argument("--json", action="store_true", help="Print JSON instead of the key=value line")
    extract_parser.add_argument("--meta", action="store_true", help="Append category and confidence")
    extract_parser.add_argument(
        "--workers",
        type=_positive_int,
        default=1,
        help="Run field extractors on N threads (default: 1)",
    )
    extract_parser.add_argument("--draft", action="store_true", help="Also print the expense draft, if any")

    categories_parser = subparsers.add_parser("categories", help="List expense categories")
    categories_parser.add_argument("--config", action="append", default=None, metavar="TOML")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        import logging

        from recuscan.runtime import configure_logging, set_log_level

        configure_logging(logging.DEBUG)
        set_log_level(logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "extract":
        from recuscan.cli.receipt import cmd_extract

        return cmd_extract(args)

    if args.command == "categories":
        from recuscan.cli.receipt import cmd_categories

        return cmd_categories(args)

    return 1


def run() -> None:
    """Console script entry point."""
    raise SystemExit(main())


if __name__ == "__main__":
    run()
