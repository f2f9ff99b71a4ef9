"""Receipt text extraction workflow orchestration."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Literal

from recuscan.domain.receipt import NoTextRecognized, RawRecognition, ReceiptExtraction
from recuscan.receipt.expense_categories import DEFAULT_CATEGORY
from recuscan.receipt.ocr_result_parser import extract_receipt
from recuscan.runtime import get_logger, load_extraction_config

logger = get_logger(__name__)

ExtractStatus = Literal[
    "file_not_found",
    "invalid_input",
    "invalid_config",
    "no_text",
    "extracted",
]

DEFAULT_EXPENSE_NAME = "Dépense de reçu"


@dataclass(frozen=True)
class ReceiptExtractRequest:
    """Inputs for running the receipt extraction workflow.

    Either ``source_path`` (a ``.txt`` file, or an OCR ``.json`` result) or
    ``text`` must be given; ``text`` wins when both are.
    """

    source_path: Path | None = None
    text: str | None = None
    locale: str | None = None
    config_paths: tuple[str, ...] | None = None
    max_workers: int = 1


@dataclass(frozen=True)
class ReceiptExtractResult:
    """Outcome from the receipt extraction workflow."""

    status: ExtractStatus
    extraction: ReceiptExtraction | None = None
    error: str | None = None


@dataclass(frozen=True)
class ExpenseDraft:
    """Expense record proposed from an extraction, ready for persistence."""

    name: str
    amount: Decimal
    category: str
    date: str
    vendor: str | None
    notes: str


def _recognition_from_json(payload: Any, locale: str | None) -> RawRecognition:
    """Accept ``{"full_text": ...}`` / ``{"text": ...}`` OCR results."""
    if not isinstance(payload, dict):
        return RawRecognition(text="", locale=locale)
    text = payload.get("full_text") or payload.get("text") or ""
    confidences = payload.get("line_confidences")
    if isinstance(confidences, list):
        line_confidences = tuple(
            float(value) if isinstance(value, (int, float)) else None for value in confidences
        )
    else:
        line_confidences = None
    payload_locale = payload.get("locale")
    if not isinstance(payload_locale, str):
        payload_locale = None
    return RawRecognition(
        text=str(text),
        line_confidences=line_confidences,
        locale=locale or payload_locale,
    )


def _read_recognition(request: ReceiptExtractRequest) -> RawRecognition:
    if request.text is not None:
        return RawRecognition(text=request.text, locale=request.locale)

    assert request.source_path is not None
    raw = request.source_path.read_text(encoding="utf-8")
    if request.source_path.suffix.lower() == ".json":
        return _recognition_from_json(json.loads(raw), request.locale)
    return RawRecognition(text=raw, locale=request.locale)


def run_receipt_extract(request: ReceiptExtractRequest) -> ReceiptExtractResult:
    """Run extraction flow: read OCR text -> load settings -> extract."""
    if request.text is None and (request.source_path is None or not request.source_path.exists()):
        return ReceiptExtractResult(
            status="file_not_found",
            error=f"Receipt text file not found: {request.source_path}",
        )

    try:
        recognition = _read_recognition(request)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return ReceiptExtractResult(status="invalid_input", error=f"Unreadable receipt text: {exc}")

    try:
        config = load_extraction_config(request.config_paths)
    except ValueError as exc:
        # tomllib.TOMLDecodeError is a ValueError
        return ReceiptExtractResult(status="invalid_config", error=f"Invalid extraction config: {exc}")

    try:
        extraction = extract_receipt(recognition, config, max_workers=request.max_workers)
    except NoTextRecognized as exc:
        return ReceiptExtractResult(status="no_text", error=str(exc))

    logger.info(
        "Extracted receipt: vendor=%s total=%s items=%d confidence=%s",
        extraction.vendor,
        extraction.total,
        len(extraction.items),
        extraction.confidence,
    )
    return ReceiptExtractResult(status="extracted", extraction=extraction)


def build_expense_draft(extraction: ReceiptExtraction, today: date | None = None) -> ExpenseDraft | None:
    """
    Build the expense record to auto-create from an extraction.

    Returns None when no total was found: an expense is never created with
    an invented amount.
    """
    if extraction.total is None:
        return None
    percent = (extraction.confidence * 100).quantize(Decimal("1"))
    return ExpenseDraft(
        name=extraction.vendor or DEFAULT_EXPENSE_NAME,
        amount=extraction.total,
        category=extraction.category or DEFAULT_CATEGORY,
        date=extraction.date or (today or date.today()).isoformat(),
        vendor=extraction.vendor,
        notes=f"Créé automatiquement depuis le reçu. Confiance OCR: {percent}%",
    )
