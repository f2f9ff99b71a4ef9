"""Receipt command handlers used by the unified CLI."""

import argparse
import json
import sys
from pathlib import Path

from recuscan.runtime import get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_NO_TEXT = 2


def _config_paths(args: argparse.Namespace) -> tuple[str, ...] | None:
    return tuple(args.config) if args.config else None


def cmd_extract(args: argparse.Namespace) -> int:
    """Extract a receipt from OCR text and print it."""
    from recuscan.application.receipts import ReceiptExtractRequest, build_expense_draft, run_receipt_extract
    from recuscan.receipt.formatter import extraction_to_dict, format_flat

    if args.source == "-":
        request = ReceiptExtractRequest(
            text=sys.stdin.read(),
            locale=args.locale,
            config_paths=_config_paths(args),
            max_workers=args.workers,
        )
    else:
        request = ReceiptExtractRequest(
            source_path=Path(args.source),
            locale=args.locale,
            config_paths=_config_paths(args),
            max_workers=args.workers,
        )

    result = run_receipt_extract(request)

    if result.status == "no_text":
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        return EXIT_NO_TEXT

    extraction = result.extraction
    if result.status != "extracted" or extraction is None:
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        return EXIT_INPUT_ERROR

    draft = build_expense_draft(extraction) if args.draft else None

    if args.json:
        payload = extraction_to_dict(extraction)
        if args.draft:
            payload["draft"] = None
            if draft is not None:
                payload["draft"] = {
                    "name": draft.name,
                    "amount": f"{draft.amount:.2f}",
                    "category": draft.category,
                    "date": draft.date,
                    "vendor": draft.vendor,
                    "notes": draft.notes,
                }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return EXIT_OK

    print(format_flat(extraction, include_meta=args.meta))
    if args.draft:
        if draft is None:
            print("No total found: no expense draft created.")
        else:
            print(f"Expense: {draft.name} | {draft.amount:.2f} | {draft.category} | {draft.date}")
            print(f"Notes: {draft.notes}")
    return EXIT_OK


def cmd_categories(args: argparse.Namespace) -> int:
    """List expense categories in match order."""
    from recuscan.runtime import load_extraction_config

    try:
        config = load_extraction_config(_config_paths(args))
    except ValueError as exc:
        print(f"Error: Invalid extraction config: {exc}")
        return EXIT_INPUT_ERROR

    rules = config.category_rules
    for name, keywords in rules.rules:
        print(f"{name}: {', '.join(keywords)}")
    print(f"{rules.default}: (default)")
    return EXIT_OK
