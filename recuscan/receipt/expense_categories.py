"""Expense category rules for extracted receipts.

This module maps a receipt's vendor name and item names to one of a small,
closed set of expense categories used by the expense tracker.

Matching is a case-insensitive substring search. Keywords of three letters
or fewer, and those in ``WHOLE_WORD_KEYWORDS``, only match whole words
(avoids INN matching in DINNER and BOIS matching in BOISSON). Categories
are tried in declaration order and the first one with a matching keyword
wins, so more specific categories must be declared first.

To add new rules:
1. Add keywords to an existing category below, or
2. Add a ``[[categories]]`` table in a TOML config layer (see
   ``recuscan.runtime.extraction_rules``)
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

DEFAULT_CATEGORY = "Autre"

CategoryRule = tuple[str, tuple[str, ...]]

# Stems of unrelated words ("bois" in BOISSON, "station" in STATIONNEMENT)
# only match a whole word, whatever their length.
WHOLE_WORD_KEYWORDS: frozenset[str] = frozenset({"bois", "station"})

# Declaration order is the tie-break order.
DEFAULT_CATEGORY_RULES: tuple[CategoryRule, ...] = (
    (
        "Restauration",
        (
            "restaurant",
            "resto",
            "cafe",
            "café",
            "coffee",
            "food",
            "pizza",
            "burger",
            "aux vivres",
            "bistro",
            "brasserie",
            "sushi",
            "tim hortons",
            "boulangerie",
            "traiteur",
        ),
    ),
    ("Hébergement", ("hotel", "hôtel", "motel", "inn", "auberge", "lodging", "gîte")),
    (
        "Carburant",
        (
            "gas",
            "station",
            "fuel",
            "petro",
            "shell",
            "esso",
            "ultramar",
            "irving",
            "essence",
            "diesel",
            "couche-tard",
        ),
    ),
    (
        "Matériaux",
        (
            "home depot",
            "depot",
            "hardware",
            "construction",
            "rona",
            "bmr",
            "quincaillerie",
            "canac",
            "patrick morin",
            "lumber",
            "bois",
        ),
    ),
    ("Fournitures", ("office", "staples", "bureau", "papeterie")),
)


@dataclass(frozen=True)
class ExpenseCategoryRules:
    """In-memory category rules, in match order."""

    rules: tuple[CategoryRule, ...]
    default: str = DEFAULT_CATEGORY
    whole_word_keywords: frozenset[str] = WHOLE_WORD_KEYWORDS

    @property
    def categories(self) -> tuple[str, ...]:
        names = tuple(name for name, _ in self.rules)
        return names if self.default in names else names + (self.default,)


def _normalize_keywords(raw: Any) -> tuple[str, ...]:
    """Normalize keywords value from TOML into a tuple of lowercase keywords."""
    if isinstance(raw, str):
        value = raw.strip().casefold()
        return (value,) if value else tuple()
    if isinstance(raw, list):
        values = [str(v).strip().casefold() for v in raw if str(v).strip()]
        return tuple(values)
    return tuple()


def build_category_rules(
    category_configs: Sequence[Mapping[str, Any]] | None = None,
    default: str | None = None,
    whole_word_keywords: Iterable[str] = (),
) -> ExpenseCategoryRules:
    """Merge built-in rules with in-memory config layers.

    Each layer is a sequence of ``{"name": ..., "keywords": [...]}`` tables.
    Keywords for an existing category are appended to it; unknown categories
    are appended after the built-in ones.
    A rule with ``whole_word = true`` (or a keyword listed in
    ``whole_word_keywords``) only matches whole words.
    """
    merged: dict[str, list[str]] = {name: list(keywords) for name, keywords in DEFAULT_CATEGORY_RULES}
    whole_word = set(WHOLE_WORD_KEYWORDS)
    whole_word.update(_normalize_keywords(list(whole_word_keywords)))

    for rule in category_configs or ():
        if not isinstance(rule, Mapping):
            continue
        name = str(rule.get("name") or rule.get("category") or "").strip()
        if not name:
            continue
        keywords = _normalize_keywords(rule.get("keywords"))
        if bool(rule.get("whole_word", False)):
            whole_word.update(keywords)
        bucket = merged.setdefault(name, [])
        for keyword in keywords:
            if keyword not in bucket:
                bucket.append(keyword)

    rules = tuple((name, tuple(keywords)) for name, keywords in merged.items() if keywords)
    return ExpenseCategoryRules(
        rules=rules,
        default=(default or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY,
        whole_word_keywords=frozenset(whole_word),
    )


@lru_cache(maxsize=1)
def _get_default_rules() -> ExpenseCategoryRules:
    """Built-in-only default rules (no file I/O)."""
    return build_category_rules()


def _keyword_matches(keyword: str, text: str, whole_word: bool = False) -> bool:
    if whole_word or len(keyword.replace(" ", "")) <= 3:
        return re.search(r"(?<!\w)" + re.escape(keyword) + r"(?!\w)", text) is not None
    return keyword in text


def classify_expense_debug(
    vendor: str | None,
    item_names: Iterable[str] = (),
    rules: ExpenseCategoryRules | None = None,
) -> list[tuple[str, str]]:
    """Return every (category, keyword) hit, in match order.

    Useful for understanding why a particular category was chosen.
    """
    layers = rules or _get_default_rules()
    haystack = " | ".join(part for part in [vendor or "", *item_names] if part).casefold()
    if not haystack:
        return []

    hits: list[tuple[str, str]] = []
    for category, keywords in layers.rules:
        for keyword in keywords:
            if _keyword_matches(keyword, haystack, keyword in layers.whole_word_keywords):
                hits.append((category, keyword))
                break  # Only need one keyword match per category
    return hits


def classify_expense(
    vendor: str | None,
    item_names: Iterable[str] = (),
    rules: ExpenseCategoryRules | None = None,
) -> str:
    """
    Return the expense category for a receipt.

    Args:
        vendor: Extracted vendor name, if any
        item_names: Extracted item names, in receipt order
        rules: Preloaded rules (typically from the runtime loader)

    Returns:
        First category (in declaration order) with a keyword hit, or the
        default category ("Autre") when nothing matches.
    """
    layers = rules or _get_default_rules()
    hits = classify_expense_debug(vendor, item_names, rules=layers)
    if not hits:
        return layers.default
    return hits[0][0]
