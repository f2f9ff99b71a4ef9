"""Tunable parameters for receipt text extraction.

All thresholds, keyword lists and scoring weights live in one frozen
``ExtractionConfig`` passed to the orchestrator at call time. Defaults are
documented below; ``build_extraction_config`` merges in-memory config layers
(typically parsed from TOML by ``recuscan.runtime.extraction_rules``).
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields, replace
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any

from recuscan.domain.receipt import TaxKind

from .expense_categories import ExpenseCategoryRules, build_category_rules

# Header may use at most this share of lines (rounded up).
DEFAULT_HEADER_RATIO = 0.20
# Item region may use at most this share of lines (rounded down).
DEFAULT_ITEM_REGION_RATIO = 0.75
# Skip vendor candidates the OCR engine was unsure about.
DEFAULT_MIN_VENDOR_LINE_CONFIDENCE = 0.6

TAX_SYNONYMS_BY_LANGUAGE: dict[str, dict[TaxKind, tuple[str, ...]]] = {
    "fr": {
        TaxKind.GST: ("tps",),
        TaxKind.PST: ("tvp",),
        TaxKind.QST: ("tvq",),
        TaxKind.HST: ("tvh",),
    },
    "en": {
        TaxKind.GST: ("gst",),
        TaxKind.PST: ("pst",),
        TaxKind.QST: ("qst",),
        TaxKind.HST: ("hst",),
    },
}

# Every built-in tax label; each one is a summary marker and an exclusion keyword.
TAX_LABELS: tuple[str, ...] = tuple(
    dict.fromkeys(
        label for table in TAX_SYNONYMS_BY_LANGUAGE.values() for labels in table.values() for label in labels
    )
)

# First line containing one of these tokens ends the item region.
DEFAULT_SUMMARY_MARKERS: tuple[str, ...] = (
    "sous-total",
    "subtotal",
    "total",
    *TAX_LABELS,
    "taxe",
    "tax",
    "client",
    "facture",
    "invoice",
)

# An item name may never be one of these.
DEFAULT_EXCLUSION_KEYWORDS: tuple[str, ...] = (
    "total",
    "sous-total",
    *TAX_LABELS,
    "change",
    "cash",
    "visa",
    "mastercard",
    "debit",
    "merci",
    "tel",
    "date",
)

DEFAULT_VENDOR_BOILERPLATE: tuple[str, ...] = (
    "reçu",
    "recu",
    "facture",
    "merci",
    "receipt",
    "invoice",
    "table",
    "bienvenue",
    "welcome",
    "client",
    "tel",
    "tél",
    "phone",
)

# Locales whose receipts print dates month-first.
MONTH_FIRST_LOCALES = frozenset({"en_us"})


def _all_tax_synonyms() -> dict[TaxKind, tuple[str, ...]]:
    merged: dict[TaxKind, tuple[str, ...]] = {}
    for kind in TaxKind:
        synonyms: list[str] = []
        for table in TAX_SYNONYMS_BY_LANGUAGE.values():
            synonyms.extend(s for s in table.get(kind, ()) if s not in synonyms)
        merged[kind] = tuple(synonyms)
    return merged


def _normalize_locale(locale: str | None) -> str:
    return (locale or "").strip().replace("-", "_").casefold()


@dataclass(frozen=True)
class ConfidenceWeights:
    """Weights of each "field present" indicator and the consistency bonus."""

    vendor: Decimal = Decimal("0.15")
    date: Decimal = Decimal("0.15")
    total: Decimal = Decimal("0.25")
    taxes: Decimal = Decimal("0.15")
    items: Decimal = Decimal("0.15")
    consistency: Decimal = Decimal("0.15")
    # subtotal + taxes may differ from total by this much (rounding).
    tolerance: Decimal = Decimal("0.02")


@dataclass(frozen=True)
class ExtractionConfig:
    """Everything the extraction engine can be tuned with."""

    header_ratio: float = DEFAULT_HEADER_RATIO
    item_region_ratio: float = DEFAULT_ITEM_REGION_RATIO
    summary_markers: tuple[str, ...] = DEFAULT_SUMMARY_MARKERS
    exclusion_keywords: tuple[str, ...] = DEFAULT_EXCLUSION_KEYWORDS
    vendor_boilerplate: tuple[str, ...] = DEFAULT_VENDOR_BOILERPLATE
    min_vendor_line_confidence: float = DEFAULT_MIN_VENDOR_LINE_CONFIDENCE
    day_first: bool = True
    # None means "pick by locale".
    tax_synonyms: Mapping[TaxKind, tuple[str, ...]] | None = None
    weights: ConfidenceWeights = field(default_factory=ConfidenceWeights)
    category_rules: ExpenseCategoryRules = field(default_factory=build_category_rules)

    def tax_synonyms_for(self, locale: str | None = None) -> Mapping[TaxKind, tuple[str, ...]]:
        """Tax label synonyms to search for, given an optional locale hint."""
        if self.tax_synonyms is not None:
            return self.tax_synonyms
        language = _normalize_locale(locale).split("_")[0]
        if language in TAX_SYNONYMS_BY_LANGUAGE:
            return TAX_SYNONYMS_BY_LANGUAGE[language]
        return _all_tax_synonyms()

    def day_first_for(self, locale: str | None = None) -> bool:
        """Whether ambiguous numeric dates are read day-first."""
        if _normalize_locale(locale) in MONTH_FIRST_LOCALES:
            return False
        return self.day_first


def _merge_keywords(base: tuple[str, ...], raw: Any) -> tuple[str, ...]:
    """Append extra keywords from a config layer, keeping order and uniqueness."""
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return base
    merged = list(base)
    for value in raw:
        keyword = str(value).strip().casefold()
        if keyword and keyword not in merged:
            merged.append(keyword)
    return tuple(merged)


def _as_decimal(raw: Any, fallback: Decimal) -> Decimal:
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return fallback
    if not value.is_finite() or value < 0:
        return fallback
    return value


def _as_ratio(raw: Any, fallback: float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    if not 0.0 <= value <= 1.0:
        return fallback
    return value


def build_extraction_config(configs: Sequence[Mapping[str, Any]] | None = None) -> ExtractionConfig:
    """Build an ExtractionConfig from in-memory config layers applied in order.

    Keyword lists in later layers extend the defaults (they never remove a
    built-in keyword); scalars override.
    """
    config = ExtractionConfig()
    category_layers: list[Mapping[str, Any]] = []
    default_category: str | None = None
    whole_word_keywords: list[str] = []

    for layer in configs or ():
        sections = layer.get("sections", {})
        if isinstance(sections, Mapping):
            config = replace(
                config,
                header_ratio=_as_ratio(sections.get("header_ratio", config.header_ratio), config.header_ratio),
                item_region_ratio=_as_ratio(
                    sections.get("item_region_ratio", config.item_region_ratio), config.item_region_ratio
                ),
            )

        dates = layer.get("dates", {})
        if isinstance(dates, Mapping) and "day_first" in dates:
            config = replace(config, day_first=bool(dates["day_first"]))

        vendor = layer.get("vendor", {})
        if isinstance(vendor, Mapping):
            config = replace(
                config,
                min_vendor_line_confidence=_as_ratio(
                    vendor.get("min_line_confidence", config.min_vendor_line_confidence),
                    config.min_vendor_line_confidence,
                ),
                vendor_boilerplate=_merge_keywords(config.vendor_boilerplate, vendor.get("boilerplate")),
            )

        keywords = layer.get("keywords", {})
        if isinstance(keywords, Mapping):
            config = replace(
                config,
                summary_markers=_merge_keywords(config.summary_markers, keywords.get("summary_markers")),
                exclusion_keywords=_merge_keywords(config.exclusion_keywords, keywords.get("exclusion")),
            )

        taxes = layer.get("taxes", {})
        if isinstance(taxes, Mapping) and taxes:
            by_key = {str(key).casefold(): value for key, value in taxes.items()}
            synonyms = dict(config.tax_synonyms or _all_tax_synonyms())
            for kind in TaxKind:
                # Either the English ("gst") or French ("tps") name selects the kind.
                for key in (kind.name.casefold(), kind.value.casefold()):
                    if key in by_key:
                        synonyms[kind] = _merge_keywords((), by_key[key]) or synonyms[kind]
            labels = [label for kind in TaxKind for label in synonyms[kind]]
            config = replace(
                config,
                tax_synonyms=synonyms,
                summary_markers=_merge_keywords(config.summary_markers, labels),
                exclusion_keywords=_merge_keywords(config.exclusion_keywords, labels),
            )

        confidence = layer.get("confidence", {})
        if isinstance(confidence, Mapping):
            weights = config.weights
            config = replace(
                config,
                weights=ConfidenceWeights(
                    **{
                        name: _as_decimal(confidence.get(name, getattr(weights, name)), getattr(weights, name))
                        for name in (f.name for f in fields(ConfidenceWeights))
                    }
                ),
            )

        categories = layer.get("categories", [])
        if isinstance(categories, list):
            category_layers.extend(rule for rule in categories if isinstance(rule, Mapping))
        if layer.get("default_category"):
            default_category = str(layer["default_category"])
        whole_word_keywords.extend(_merge_keywords((), layer.get("whole_word_keywords")))

    if category_layers or default_category or whole_word_keywords:
        config = replace(
            config,
            category_rules=build_category_rules(
                category_layers, default=default_category, whole_word_keywords=whole_word_keywords
            ),
        )
    return config


@lru_cache(maxsize=1)
def get_default_config() -> ExtractionConfig:
    """Built-in defaults (no file I/O)."""
    return ExtractionConfig()
