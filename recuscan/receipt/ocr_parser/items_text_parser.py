"""Text-line based receipt item extraction.

Items are extracted in two tiers:

1. Shaped matchers, tried in order on each item-region line; the first
   matcher producing an acceptable (name, price) wins the line. A line no
   matcher accepts may pair with the next one ("NAME" then "10.00", or a
   "2 @ 1.50 3.00" unit-price row).
2. An aggressive fallback, used only when tier 1 found nothing: every line
   with a decimal number yields an item named by the text before it.

Both tiers share the same name cleaning and the summary-keyword exclusion
filter, so totals and taxes never come out as purchasable items.
"""

import re
from collections.abc import Callable, Sequence

from recuscan.domain.receipt import LineItem, NormalizedLine

from ..extraction_config import ExtractionConfig
from .common import (
    AMOUNT_PATTERN,
    LOOSE_AMOUNT_RE,
    TRAILING_MULTIPLIER_RE,
    clean_item_name,
    contains_any_token,
    find_amounts,
    is_acceptable_name,
    is_standalone_amount,
    looks_like_product_text,
    parse_amount,
)

# A matcher returns the raw (name, amount) text of a line, or None.
LineMatcher = Callable[[str], tuple[str, str] | None]

_PRICE_TAIL = r"(?<![\d.,])" + AMOUNT_PATTERN

# "1 60LS CHILI GR 10.00"
_QTY_NAME_PRICE_RE = re.compile(r"^\d{1,3}\s+(?P<name>\S*[^\W\d_].*?)\s+" + _PRICE_TAIL + r"$")
# "MEKONG CHAP 10.50", "CAFE $3.50"
_NAME_PRICE_RE = re.compile(r"^(?P<name>.+?)\s*" + _PRICE_TAIL + r"$")
# "BIERE x 2 8.00"
_NAME_QTY_PRICE_RE = re.compile(r"^(?P<name>.+?)\s+[xX×*]\s?\d{1,3}\s+" + _PRICE_TAIL + r"$")
# "LAIT 2% 4.99 FP", "CHIPS 3.49H"
_NAME_PRICE_CODE_RE = re.compile(
    r"^(?P<name>.+?)\s+" + _PRICE_TAIL + r"\s*(?P<code>(?=[A-Za-z0-9]{0,2}[A-Za-z])[A-Za-z0-9]{1,3})$"
)
# "2 @ 1.50 3.00", "3 x 0.99 2.97": the rightmost amount is the line total.
_UNIT_PRICE_ROW_RE = re.compile(
    r"^\d{1,3}\s*[@xX×]\s*" + AMOUNT_PATTERN.replace("?P<amount>", "?P<unit>") + r"\s+" + _PRICE_TAIL + r"$"
)
# "CAFE 2 @ 1.50 3.00"
_NAME_UNIT_PRICE_RE = re.compile(
    r"^(?P<name>.*?[^\W\d_].*?)\s+\d{1,3}\s*[@xX×]\s*"
    + AMOUNT_PATTERN.replace("?P<amount>", "?P<unit>")
    + r"\s+"
    + _PRICE_TAIL
    + r"$"
)
_LETTER_RE = re.compile(r"[^\W\d_]")


def _match_name_unit_price(text: str) -> tuple[str, str] | None:
    match = _NAME_UNIT_PRICE_RE.match(text)
    return (match.group("name"), match.group("amount")) if match else None


def _match_qty_name_price(text: str) -> tuple[str, str] | None:
    match = _QTY_NAME_PRICE_RE.match(text)
    return (match.group("name"), match.group("amount")) if match else None


def _match_name_price(text: str) -> tuple[str, str] | None:
    match = _NAME_PRICE_RE.match(text)
    if not match:
        return None
    # "BIERE x 2 8.00" belongs to the multiplier matcher.
    if TRAILING_MULTIPLIER_RE.search(match.group("name")):
        return None
    return match.group("name"), match.group("amount")


def _match_name_qty_price(text: str) -> tuple[str, str] | None:
    match = _NAME_QTY_PRICE_RE.match(text)
    return (match.group("name"), match.group("amount")) if match else None


def _match_name_price_code(text: str) -> tuple[str, str] | None:
    match = _NAME_PRICE_CODE_RE.match(text)
    return (match.group("name"), match.group("amount")) if match else None


def _match_single_amount(text: str) -> tuple[str, str] | None:
    amounts = find_amounts(text)
    if len(amounts) != 1:
        return None
    return text[: amounts[0].start()], amounts[0].group("amount")


# Priority order matters: the first matcher with an accepted result wins.
ITEM_LINE_MATCHERS: tuple[tuple[str, LineMatcher], ...] = (
    ("name_unit_price", _match_name_unit_price),
    ("qty_name_price", _match_qty_name_price),
    ("name_price", _match_name_price),
    ("name_qty_price", _match_name_qty_price),
    ("name_price_code", _match_name_price_code),
    ("single_amount", _match_single_amount),
)


def _accept(raw_name: str, raw_amount: str, config: ExtractionConfig) -> LineItem | None:
    """Apply the shared cleaning and rejection rules to a candidate."""
    price = parse_amount(raw_amount)
    if price is None:
        return None
    name = clean_item_name(raw_name)
    if not is_acceptable_name(name, config.exclusion_keywords):
        return None
    return LineItem(name=name, price=price)


def match_item_line(text: str, config: ExtractionConfig) -> tuple[str, LineItem] | None:
    """Run the shaped matchers on one line; return (matcher tag, item) or None."""
    for tag, matcher in ITEM_LINE_MATCHERS:
        candidate = matcher(text)
        if candidate is None:
            continue
        item = _accept(candidate[0], candidate[1], config)
        if item is not None and looks_like_product_text(item.name):
            return tag, item
    return None


def _name_only(text: str, config: ExtractionConfig) -> str | None:
    """Cleaned name of a line that holds no amount, or None."""
    if LOOSE_AMOUNT_RE.search(text) or not _LETTER_RE.search(text):
        return None
    if contains_any_token(text, config.summary_markers) or contains_any_token(text, config.vendor_boilerplate):
        return None
    name = clean_item_name(text)
    if not is_acceptable_name(name, config.exclusion_keywords) or not looks_like_product_text(name):
        return None
    return name


def _line_total(text: str) -> str | None:
    """Amount text of a bare price line or of a "QTY @ UNIT TOTAL" row."""
    stripped = text.strip()
    if is_standalone_amount(stripped):
        return find_amounts(stripped)[0].group("amount")
    match = _UNIT_PRICE_ROW_RE.match(stripped)
    return match.group("amount") if match else None


def match_item_pair(first: str, second: str, config: ExtractionConfig) -> tuple[str, LineItem] | None:
    """
    Match one item printed over two lines; return (matcher tag, item) or None.

    - "1 60LS CHILI GR" then "10.00": name line, then a bare price
    - "POMMES" then "2 @ 1.50 3.00": name line, then a unit-price row
    - "2 @ 1.50 3.00" then "POMMES": unit-price row, then the name
    """
    tag = "name_then_price"
    name = _name_only(first, config)
    amount = _line_total(second) if name is not None else None
    if name is None or amount is None:
        row = _UNIT_PRICE_ROW_RE.match(first.strip())
        name = _name_only(second, config) if row else None
        if row is None or name is None:
            return None
        tag, amount = "unit_price_then_name", row.group("amount")
    price = parse_amount(amount)
    if price is None:
        return None
    return tag, LineItem(name=name, price=price)


def extract_items_shaped(item_lines: Sequence[NormalizedLine], config: ExtractionConfig) -> list[LineItem]:
    """Tier 1: precise, shape-based extraction (one line, or a two-line pair)."""
    items: list[LineItem] = []
    pos = 0
    while pos < len(item_lines):
        text = item_lines[pos].text
        matched = match_item_line(text, config)
        if matched is not None:
            items.append(matched[1])
            pos += 1
            continue
        if pos + 1 < len(item_lines):
            paired = match_item_pair(text, item_lines[pos + 1].text, config)
            if paired is not None:
                items.append(paired[1])
                pos += 2
                continue
        pos += 1
    return items


def extract_items_fallback(item_lines: Sequence[NormalizedLine], config: ExtractionConfig) -> list[LineItem]:
    """
    Tier 2: take every line holding a ``\\d+[.,]\\d{2}`` number.

    The name is whatever precedes the first such number. A bare price line
    borrows the previous line as its name when that line has no number
    (two-line "NAME" / "PRICE" layouts).
    """
    items: list[LineItem] = []
    for pos, line in enumerate(item_lines):
        match = LOOSE_AMOUNT_RE.search(line.text)
        if match is None:
            continue
        raw_name = line.text[: match.start()]
        if not clean_item_name(raw_name) and pos > 0:
            previous = item_lines[pos - 1].text
            if not LOOSE_AMOUNT_RE.search(previous):
                raw_name = previous
        item = _accept(raw_name, match.group(0), config)
        if item is not None:
            items.append(item)
    return items


def extract_items(item_lines: Sequence[NormalizedLine], config: ExtractionConfig) -> list[LineItem]:
    """
    Extract line items from the item region.

    Never raises; returns an empty list only once both tiers are exhausted.
    Items keep receipt order and duplicates are kept.
    """
    items = extract_items_shaped(item_lines, config)
    if items:
        return items
    return extract_items_fallback(item_lines, config)
