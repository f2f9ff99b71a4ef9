"""Split normalized receipt lines into header, item and summary regions."""

import math
import re
from collections.abc import Sequence

from recuscan.domain.receipt import NormalizedLine, ReceiptSections

from ..extraction_config import ExtractionConfig
from .common import LOOSE_AMOUNT_RE, contains_any_token, find_amounts

# "2 x 3.50", "3 @ $1.99" - quantity/price rows open the item region too.
QTY_PRICE_START_RE = re.compile(r"^\d{1,3}\s*[xX×@]\s*")
_LETTER_RE = re.compile(r"[^\W\d_]")


def is_summary_line(text: str, config: ExtractionConfig) -> bool:
    """Return True if the line carries a summary marker (total, tax names, ...)."""
    return contains_any_token(text, config.summary_markers)


def is_item_like(text: str, config: ExtractionConfig) -> bool:
    """Return True if the line plausibly lists a purchased item."""
    if is_summary_line(text, config):
        return False
    if QTY_PRICE_START_RE.match(text) and LOOSE_AMOUNT_RE.search(text):
        return True
    # An amount with some text in front of it.
    return any(_LETTER_RE.search(text[: match.start()]) for match in find_amounts(text))


def classify_sections(lines: Sequence[NormalizedLine], config: ExtractionConfig) -> ReceiptSections:
    """
    Partition receipt lines into header, items and summary.

    - header: lines before the first item-like line, capped to the first
      ``header_ratio`` share of lines
    - items: one contiguous run ending at the first summary marker, never
      longer than ``item_region_ratio`` of all lines
    - summary: everything after the item run

    Never fails: a receipt without any marker still gets three regions.
    """
    line_count = len(lines)
    header_cap = min(line_count, math.ceil(line_count * config.header_ratio))

    start = header_cap
    for pos, line in enumerate(lines[:header_cap]):
        if is_item_like(line.text, config):
            start = pos
            break

    ceiling = min(line_count, start + math.floor(line_count * config.item_region_ratio))
    end = ceiling
    for pos in range(start, ceiling):
        if is_summary_line(lines[pos].text, config):
            end = pos
            break

    return ReceiptSections(
        header=tuple(lines[:start]),
        items=tuple(lines[start:end]),
        summary=tuple(lines[end:]),
    )
