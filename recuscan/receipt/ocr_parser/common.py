"""Shared patterns and helpers for OCR receipt parsing."""

import re
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from functools import lru_cache

CENT = Decimal("0.01")

# A money amount: optional sign/currency, thousands groups, 2 decimals.
# "10.00", "10,00", "$10.00", "10,00 $", "1 234,56", "1,234.56", "9.00-"
# Space-grouped thousands only combine with a comma decimal ("2 100.00" is qty + price).
AMOUNT_PATTERN = (
    r"(?P<amount>(?:-(?=[\d$€]))?(?:(?:\$|€|CAD)\s?)?"
    r"(?:\d{1,3}(?:,\d{3})+\.\d{2}|\d{1,3}(?:[. ]\d{3})+,\d{2}|\d+[.,]\d{2})"
    r"(?:\s?(?:\$|€))?-?)"
)
# Letters may follow directly ("8.99H" tax markers); digits may not.
AMOUNT_RE = re.compile(r"(?<![\w.,])" + AMOUNT_PATTERN + r"(?![\d.,])")

# The loose shape used by the fallback tier and the fallback guarantee.
LOOSE_AMOUNT_RE = re.compile(r"\d+[.,]\d{2}")

CURRENCY_RE = re.compile(r"\$|€|\bCAD\b", re.IGNORECASE)

# Characters a product name never legitimately carries; seeing them means OCR noise.
NOISE_CHARS = set("#@*|{}[]<>~^\\_=")

# Leading quantity token: "1 ", "2x ", "3 X ", "(2) "
LEADING_QTY_RE = re.compile(r"^(?:\(\d{1,3}\)|\d{1,3}\s*[xX×]?)\s+")
# Trailing multiplier: "x 2", "X2", "* 3"
TRAILING_MULTIPLIER_RE = re.compile(r"\s+[xX×*]\s?\d{1,3}$")


def parse_amount(text: str) -> Decimal | None:
    """
    Parse a money amount into a non-negative Decimal.

    Accepts ``.`` or ``,`` as decimal separator and strips currency symbols
    and thousands separators. Negative, non-finite or unparsable values
    return None (never zero).
    """
    if not text:
        return None
    cleaned = CURRENCY_RE.sub("", text).strip()
    if "-" in cleaned or "(" in cleaned:
        return None
    cleaned = re.sub(r"\s", "", cleaned)
    if not cleaned:
        return None

    last_dot = cleaned.rfind(".")
    last_comma = cleaned.rfind(",")
    decimal_pos = max(last_dot, last_comma)
    if decimal_pos != -1 and len(cleaned) - decimal_pos - 1 in (1, 2):
        integer_part = cleaned[:decimal_pos].replace(",", "").replace(".", "")
        fraction = cleaned[decimal_pos + 1 :]
        cleaned = f"{integer_part}.{fraction}"
    else:
        # No decimal part: every separator is a thousands separator.
        cleaned = cleaned.replace(",", "").replace(".", "")

    if not re.fullmatch(r"\d+(?:\.\d{1,2})?", cleaned):
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0:
        return None
    return value.quantize(CENT)


def find_amounts(text: str) -> list[re.Match[str]]:
    """Return every amount-shaped match on a line, left to right."""
    return list(AMOUNT_RE.finditer(text))


def trailing_amount(text: str) -> Decimal | None:
    """Return the rightmost amount on a line, if it parses as a valid amount."""
    matches = find_amounts(text)
    if not matches:
        return None
    return parse_amount(matches[-1].group("amount"))


def is_standalone_amount(text: str) -> bool:
    """Return True if the line carries nothing but an amount."""
    return AMOUNT_RE.fullmatch(text.strip()) is not None


@lru_cache(maxsize=256)
def _token_regex(token: str) -> re.Pattern[str]:
    # Letters may be dotted/spaced by OCR: "t.p.s.", "T P S"
    if token.isalpha() and len(token) <= 4:
        body = r"\.?\s?".join(re.escape(ch) for ch in token) + r"\.?"
    else:
        body = re.escape(token)
    return re.compile(r"(?<![^\W\d_])" + body + r"(?![^\W\d_])", re.IGNORECASE)


def contains_token(text: str, token: str) -> bool:
    """Return True if ``token`` appears in ``text`` bounded by non-letters.

    ``total`` matches "Sous-total 31.00" but ``tax`` does not match "TAXI".
    """
    return _token_regex(token.casefold()).search(text) is not None


def contains_any_token(text: str, tokens: Iterable[str]) -> bool:
    return any(contains_token(text, token) for token in tokens)


def is_excluded_name(name: str, exclusion_keywords: Iterable[str]) -> bool:
    """Return True if an item name is (or starts with) a summary keyword.

    Leading OCR debris is ignored: "@@ TOTAL" counts as "total", and dotted
    labels are read without their dots: "T.V.H" counts as "tvh".
    """
    folded = re.sub(r"^[\W_]+", "", name.casefold()).strip()
    if not folded:
        return False
    candidates = {folded, folded.replace(".", "")}
    for keyword in exclusion_keywords:
        for candidate in candidates:
            if candidate == keyword:
                return True
            if candidate.startswith(keyword) and not candidate[len(keyword)].isalpha():
                return True
    return False


def clean_item_name(name: str) -> str:
    """Clean an item name candidate from OCR artifacts."""
    name = name.replace(":", " ").replace(";", " ")
    name = CURRENCY_RE.sub(" ", name)
    name = re.sub(r"\s+", " ", name).strip()
    name = LEADING_QTY_RE.sub("", name)
    name = TRAILING_MULTIPLIER_RE.sub("", name)
    # Leading/trailing separators left over from the price column.
    name = re.sub(r"^[\s.,\-–]+|[\s.,\-–]+$", "", name)
    return name.strip()


def is_acceptable_name(name: str, exclusion_keywords: Iterable[str]) -> bool:
    """Shared rejection rules for item names (both extraction tiers)."""
    if not name:
        return False
    if re.fullmatch(r"[\d\s.,%$€+\-/]+", name):
        return False
    return not is_excluded_name(name, exclusion_keywords)


def looks_like_product_text(name: str) -> bool:
    """Precision gate for shaped matches: reject garbled OCR names."""
    if any(ch in NOISE_CHARS for ch in name):
        return False
    # Ignore digits (sizes, SKUs) when judging how wordy a name is.
    desc_for_ratio = re.sub(r"[\d\s]", "", name)
    if not desc_for_ratio:
        return False
    alpha_count = sum(1 for c in desc_for_ratio if c.isalpha())
    return alpha_count / len(desc_for_ratio) >= 0.5
