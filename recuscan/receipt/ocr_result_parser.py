"""Parse raw OCR text into a structured ReceiptExtraction.

The pipeline runs once per receipt:

    IDLE -> NORMALIZING -> CLASSIFYING -> EXTRACTING -> SCORING -> DONE

The only failure is an empty recognition (``NoTextRecognized``), raised from
NORMALIZING. Every later stage reports "not found" as a missing field.
"""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any

from recuscan.domain.receipt import (
    ExtractionState,
    NoTextRecognized,
    RawRecognition,
    ReceiptExtraction,
    ReceiptSections,
)
from recuscan.runtime.logging import get_logger

from .confidence import score_confidence
from .expense_categories import classify_expense
from .extraction_config import ExtractionConfig, get_default_config
from .ocr_parser import (
    classify_sections,
    extract_date,
    extract_items,
    extract_subtotal,
    extract_taxes,
    extract_total,
    extract_vendor,
    normalize_lines,
)

logger = get_logger(__name__)


def _enter(state: ExtractionState, state_sink: list[ExtractionState] | None) -> None:
    logger.debug("Receipt extraction: %s", state.value)
    if state_sink is not None:
        state_sink.append(state)


def _extractor_tasks(
    sections: ReceiptSections,
    config: ExtractionConfig,
    locale: str | None,
) -> dict[str, Callable[[], Any]]:
    """Independent extractors; none reads another's output."""
    return {
        "vendor": partial(extract_vendor, sections.header, config),
        "date": partial(extract_date, sections.header, sections.summary, config.day_first_for(locale)),
        "subtotal": partial(extract_subtotal, sections.summary),
        "taxes": partial(extract_taxes, sections.summary, config.tax_synonyms_for(locale)),
        # Any tax label disqualifies a "total" line, whatever the locale.
        "total": partial(extract_total, sections.summary, config.tax_synonyms_for(None)),
        "items": partial(extract_items, sections.items, config),
    }


def _run_extractors(tasks: dict[str, Callable[[], Any]], max_workers: int) -> dict[str, Any]:
    if max_workers <= 1:
        return {name: task() for name, task in tasks.items()}

    with ThreadPoolExecutor(max_workers=min(max_workers, len(tasks))) as executor:
        futures = {name: executor.submit(task) for name, task in tasks.items()}
        # Collect in submission order so results never depend on scheduling.
        return {name: future.result() for name, future in futures.items()}


def extract_receipt(
    raw: RawRecognition | str,
    config: ExtractionConfig | None = None,
    *,
    locale: str | None = None,
    max_workers: int = 1,
    state_sink: list[ExtractionState] | None = None,
) -> ReceiptExtraction:
    """
    Extract vendor, date, amounts, taxes and items from recognized text.

    This is a best-effort parser: anything that cannot be determined is left
    out of the result rather than guessed.

    Args:
        raw: OCR output (or just its text)
        config: Tuning parameters; built-in defaults when None
        locale: Locale hint ("fr_CA", "en_US"...); overrides ``raw.locale``
        max_workers: Run the field and item extractors on this many threads.
            The result is identical to the sequential run.
        state_sink: Optional list receiving every state the pipeline enters

    Raises:
        NoTextRecognized: if the text holds no non-blank line
    """
    if isinstance(raw, str):
        raw = RawRecognition(text=raw)
    config = config or get_default_config()
    locale = locale if locale is not None else raw.locale

    _enter(ExtractionState.IDLE, state_sink)
    _enter(ExtractionState.NORMALIZING, state_sink)
    try:
        lines = normalize_lines(raw.text, raw.line_confidences)
    except NoTextRecognized:
        _enter(ExtractionState.FAILED, state_sink)
        raise

    _enter(ExtractionState.CLASSIFYING, state_sink)
    sections = classify_sections(lines, config)
    logger.debug(
        "Sections: %d header, %d item, %d summary lines",
        len(sections.header),
        len(sections.items),
        len(sections.summary),
    )

    _enter(ExtractionState.EXTRACTING, state_sink)
    found = _run_extractors(_extractor_tasks(sections, config, locale), max_workers)
    items = tuple(found["items"])
    category = classify_expense(found["vendor"], [item.name for item in items], config.category_rules)

    _enter(ExtractionState.SCORING, state_sink)
    confidence = score_confidence(
        vendor=found["vendor"],
        date=found["date"],
        subtotal=found["subtotal"],
        taxes=found["taxes"],
        total=found["total"],
        items=items,
        weights=config.weights,
    )

    extraction = ReceiptExtraction(
        vendor=found["vendor"],
        date=found["date"],
        subtotal=found["subtotal"],
        taxes=found["taxes"],
        total=found["total"],
        items=items,
        category=category,
        confidence=confidence,
    )
    _enter(ExtractionState.DONE, state_sink)
    return extraction


def parse_receipt_text(
    text: str,
    config: ExtractionConfig | None = None,
    *,
    locale: str | None = None,
    max_workers: int = 1,
) -> ReceiptExtraction:
    """Convenience wrapper for callers holding plain OCR text."""
    return extract_receipt(RawRecognition(text=text, locale=locale), config, max_workers=max_workers)
