"""Vendor/date/summary amount extraction helpers.

Every extractor here is a total function: no match means ``None`` (or an
empty mapping), never an exception.
"""

import re
from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal

from recuscan.domain.receipt import NormalizedLine, TaxKind

from ..extraction_config import ExtractionConfig
from .common import contains_any_token, is_standalone_amount, trailing_amount

_LETTER_RE = re.compile(r"[^\W\d_]")

# YYYY-MM-DD, YYYY/MM/DD, YYYY.MM.DD
_ISO_DATE_RE = re.compile(r"(?<!\d)(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})(?!\d)")
# DD/MM/YYYY, MM/DD/YYYY, DD-MM-YY, ...
_NUMERIC_DATE_RE = re.compile(r"(?<![\d.,])(\d{1,2})([-/.])(\d{1,2})\2(\d{4}|\d{2})(?![\d.,])")
# 16 nov. 2025, 1er janvier 2025
_DAY_MONTH_NAME_RE = re.compile(r"(?<!\d)(\d{1,2})(?:er)?\s+([^\W\d_]{3,9})\.?,?\s+(\d{4})(?!\d)")
# Nov 16, 2025
_MONTH_NAME_DAY_RE = re.compile(r"(?<![^\W\d_])([^\W\d_]{3,9})\.?\s+(\d{1,2}),?\s+(\d{4})(?!\d)")

_MONTH_NAMES: dict[int, tuple[str, ...]] = {
    1: ("january", "janvier"),
    2: ("february", "février", "fevrier"),
    3: ("march", "mars"),
    4: ("april", "avril"),
    5: ("may", "mai"),
    6: ("june", "juin"),
    7: ("july", "juillet"),
    8: ("august", "août", "aout"),
    9: ("september", "septembre"),
    10: ("october", "octobre"),
    11: ("november", "novembre"),
    12: ("december", "décembre", "decembre"),
}

SUBTOTAL_LABELS = ("sous-total", "sous total", "subtotal", "sub total", "sub-total", "total partiel")
# "total" lines that are not the amount paid
_NON_TOTAL_PHRASES = (
    "total items",
    "total item",
    "total articles",
    "total number",
    "total savings",
    "total saved",
    "total discount",
    "total rabais",
    "total économies",
    "nombre d'articles",
)
_TAX_WORDS = ("tax", "taxe", "taxes")
_AFTER_TAX_PHRASES = ("après taxes", "apres taxes", "après taxe", "after tax", "after taxes")
_VENDOR_NOISE_RE = re.compile(r"[^\w\s&'-]")
_CAPITALIZED_RUN_RE = re.compile(r"^[A-ZÀ-Ý][\w&'-]*(?:\s+[A-ZÀ-Ý][\w&'-]*)*")


def _month_from_name(word: str) -> int | None:
    """Resolve an English or French month name or abbreviation ("nov", "déc", "juil")."""
    folded = word.casefold().rstrip(".")
    if len(folded) < 3:
        return None
    candidates = {
        month for month, names in _MONTH_NAMES.items() if any(name.startswith(folded) for name in names)
    }
    # "jui" could be juin or juillet
    if len(candidates) != 1:
        return None
    return candidates.pop()


def _iso_date(year: int, month: int, day: int) -> str | None:
    if year < 100:
        year += 2000
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _day_month(first: int, second: int, day_first: bool) -> tuple[int, int]:
    """Return (day, month) for a numeric date's first two components."""
    if first > 12 >= second:
        return first, second
    if second > 12 >= first:
        return second, first
    return (first, second) if day_first else (second, first)


def parse_date_in_line(text: str, day_first: bool = True) -> str | None:
    """Return the first valid date on a line as an ISO string, if any."""
    for match in _ISO_DATE_RE.finditer(text):
        found = _iso_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        if found:
            return found

    for match in _DAY_MONTH_NAME_RE.finditer(text):
        month = _month_from_name(match.group(2))
        if month is not None:
            found = _iso_date(int(match.group(3)), month, int(match.group(1)))
            if found:
                return found

    for match in _MONTH_NAME_DAY_RE.finditer(text):
        month = _month_from_name(match.group(1))
        if month is not None:
            found = _iso_date(int(match.group(3)), month, int(match.group(2)))
            if found:
                return found

    for match in _NUMERIC_DATE_RE.finditer(text):
        day, month = _day_month(int(match.group(1)), int(match.group(3)), day_first)
        found = _iso_date(int(match.group(4)), month, day)
        if found:
            return found
    return None


def extract_date(
    header: Sequence[NormalizedLine],
    summary: Sequence[NormalizedLine],
    day_first: bool = True,
) -> str | None:
    """Scan the header, then the summary, for the first parseable date."""
    for line in (*header, *summary):
        found = parse_date_in_line(line.text, day_first=day_first)
        if found:
            return found
    return None


def _looks_numeric_or_date(text: str) -> bool:
    if re.match(r"^[\d\s/\-:.,#()+$€%]+$", text):
        return True
    return parse_date_in_line(text) is not None


def extract_vendor(header: Sequence[NormalizedLine], config: ExtractionConfig) -> str | None:
    """
    Extract the vendor name from the header lines.

    Skips numeric/date-like lines, boilerplate ("reçu", "facture", "merci"...)
    and lines the OCR engine itself was unsure about. Returns the leading run
    of capitalized or all-caps words when there is one, else the cleaned line.
    """
    for line in header:
        if line.ocr_confidence is not None and line.ocr_confidence < config.min_vendor_line_confidence:
            continue
        if len(line.text) <= 2 or _looks_numeric_or_date(line.text):
            continue
        if contains_any_token(line.text, config.vendor_boilerplate):
            continue

        # Clean up common OCR artifacts
        cleaned = re.sub(r"\s+", " ", _VENDOR_NOISE_RE.sub("", line.text)).strip()
        if len(cleaned) <= 2 or not _LETTER_RE.search(cleaned):
            continue
        run = _CAPITALIZED_RUN_RE.match(cleaned)
        if run and len(run.group(0)) > 2:
            return run.group(0)
        return cleaned
    return None


def _amount_at_label(lines: Sequence[NormalizedLine], pos: int) -> Decimal | None:
    """Amount on a labelled line, else a bare amount on one of the next two lines."""
    amount = trailing_amount(lines[pos].text)
    if amount is not None:
        return amount
    for following in lines[pos + 1 : pos + 3]:
        if is_standalone_amount(following.text):
            return trailing_amount(following.text)
        if _LETTER_RE.search(following.text):
            # Another label; its amount is not ours.
            break
    return None


def is_subtotal_line(text: str) -> bool:
    return contains_any_token(text, SUBTOTAL_LABELS)


def extract_subtotal(summary: Sequence[NormalizedLine]) -> Decimal | None:
    """Extract the subtotal from the first subtotal-labelled summary line."""
    for pos, line in enumerate(summary):
        if is_subtotal_line(line.text):
            return _amount_at_label(summary, pos)
    return None


def _is_tax_line(text: str, tax_tokens: Sequence[str]) -> bool:
    if contains_any_token(text, _AFTER_TAX_PHRASES):
        return False
    return contains_any_token(text, tax_tokens)


def extract_total(
    summary: Sequence[NormalizedLine],
    tax_synonyms: Mapping[TaxKind, Sequence[str]] | None = None,
) -> Decimal | None:
    """
    Extract the grand total.

    Prefers the last "total" line on the receipt so intermediate totals are
    skipped. Subtotal variants ("sous-total", "total partiel"), tax lines
    ("total TPS") and count/savings lines never qualify.
    """
    tax_tokens: list[str] = list(_TAX_WORDS)
    for synonyms in (tax_synonyms or {}).values():
        tax_tokens.extend(synonyms)

    for pos in range(len(summary) - 1, -1, -1):
        text = summary[pos].text
        if not contains_any_token(text, ("total",)):
            continue
        if is_subtotal_line(text) or contains_any_token(text, _NON_TOTAL_PHRASES):
            continue
        if _is_tax_line(text, tax_tokens):
            continue
        amount = _amount_at_label(summary, pos)
        if amount is not None:
            return amount
    return None


def extract_taxes(
    summary: Sequence[NormalizedLine],
    tax_synonyms: Mapping[TaxKind, Sequence[str]],
) -> dict[TaxKind, Decimal]:
    """
    Extract one amount per tax kind.

    For each kind, the first summary line containing one of its synonyms
    (``T.P.S.`` and ``TPS`` alike) with an amount wins. Kinds not found are
    left out of the mapping; absence means "not on this receipt".
    """
    taxes: dict[TaxKind, Decimal] = {}
    for kind in TaxKind:
        synonyms = tax_synonyms.get(kind, ())
        if not synonyms:
            continue
        for line in summary:
            if not contains_any_token(line.text, synonyms):
                continue
            amount = trailing_amount(line.text)
            if amount is not None:
                taxes[kind] = amount
                break
    return taxes
