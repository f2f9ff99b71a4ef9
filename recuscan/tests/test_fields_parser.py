from decimal import Decimal

import pytest
from conftest import make_lines

from recuscan.domain.receipt import NormalizedLine, TaxKind
from recuscan.receipt.extraction_config import ExtractionConfig
from recuscan.receipt.ocr_parser.common import parse_amount
from recuscan.receipt.ocr_parser.fields_parser import (
    extract_date,
    extract_subtotal,
    extract_taxes,
    extract_total,
    extract_vendor,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("10.00", Decimal("10.00")),
        ("10,00", Decimal("10.00")),
        ("$10.00", Decimal("10.00")),
        ("10,00 $", Decimal("10.00")),
        ("CAD 5.5", Decimal("5.50")),
        ("1 234,56", Decimal("1234.56")),
        ("1,234.56", Decimal("1234.56")),
        ("1.234,56", Decimal("1234.56")),
        ("12", Decimal("12.00")),
    ],
)
def test_parse_amount_accepts_both_decimal_separators(text: str, expected: Decimal) -> None:
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "-5.00", "5.00-", "(5.00)", "NaN", "inf", "--"])
def test_parse_amount_rejects_invalid_or_negative(text: str) -> None:
    assert parse_amount(text) is None


def test_vendor_skips_boilerplate_and_dates() -> None:
    header = make_lines("Reçu de caisse", "16/11/2025", "AUX VIVRES")

    assert extract_vendor(header, ExtractionConfig()) == "AUX VIVRES"


def test_vendor_skips_low_confidence_lines() -> None:
    header = [
        NormalizedLine(index=0, text="G@RBL3D TXT", ocr_confidence=0.3),
        NormalizedLine(index=1, text="CAFE OLIMPICO", ocr_confidence=0.95),
    ]

    assert extract_vendor(header, ExtractionConfig()) == "CAFE OLIMPICO"


def test_vendor_keeps_leading_capitalized_run() -> None:
    header = make_lines("Café Olimpico - 124 rue St-Viateur")

    assert extract_vendor(header, ExtractionConfig()) == "Café Olimpico"


def test_vendor_absent_when_header_has_no_name() -> None:
    assert extract_vendor(make_lines("514-555-1234", "2025-11-16"), ExtractionConfig()) is None
    assert extract_vendor([], ExtractionConfig()) is None


@pytest.mark.parametrize(
    ("text", "day_first", "expected"),
    [
        ("16/11/2025 12:45", True, "2025-11-16"),
        ("2025-11-16", True, "2025-11-16"),
        ("Date: 16-11-25", True, "2025-11-16"),
        ("16 nov. 2025", True, "2025-11-16"),
        ("Nov 16, 2025", True, "2025-11-16"),
        ("1er janvier 2025", True, "2025-01-01"),
        ("03/04/2025", True, "2025-04-03"),
        ("03/04/2025", False, "2025-03-04"),
        ("13/04/2025", False, "2025-04-13"),
    ],
)
def test_extract_date_formats(text: str, day_first: bool, expected: str) -> None:
    assert extract_date(make_lines(text), [], day_first=day_first) == expected


def test_extract_date_prefers_header_then_summary() -> None:
    header = make_lines("AUX VIVRES")
    summary = make_lines("Total 35.32", "2025-11-16 14:02")

    assert extract_date(header, summary) == "2025-11-16"
    assert extract_date(make_lines("31/02/2025"), []) is None
    assert extract_date(make_lines("AUX VIVRES"), make_lines("Total 35.32")) is None


def test_subtotal_from_same_or_next_line() -> None:
    assert extract_subtotal(make_lines("Sous-total 31.00", "TPS 1.55")) == Decimal("31.00")
    assert extract_subtotal(make_lines("SOUS TOTAL", "31,00 $", "TPS 1.55")) == Decimal("31.00")
    assert extract_subtotal(make_lines("Subtotal", "TPS 1.55")) is None
    assert extract_subtotal(make_lines("Total 35.32")) is None


def test_total_prefers_last_total_line_over_partial_total() -> None:
    summary = make_lines("Total partiel 18.00", "TPS 0.90", "Total 25.00")

    assert extract_total(summary) == Decimal("25.00")


def test_total_skips_tax_and_count_lines() -> None:
    summary = make_lines("TOTAL", "$35.32", "Total TPS 1.55", "Total savings 2.00")

    assert extract_total(summary, {TaxKind.GST: ("tps", "gst")}) == Decimal("35.32")


def test_total_accepts_after_tax_label() -> None:
    assert extract_total(make_lines("Sous-total 31.00", "Total après taxes 35.32")) == Decimal("35.32")


def test_total_absent_without_total_label() -> None:
    assert extract_total(make_lines("Sous-total 20.00", "TPS 1.00")) is None


def test_taxes_per_kind_with_dotted_labels() -> None:
    summary = make_lines("Sous-total 31.00", "T.P.S. 5% 1.55", "T.V.Q. 9,975% 2,77", "Total 35.32")

    taxes = extract_taxes(summary, ExtractionConfig().tax_synonyms_for(None))

    assert taxes == {TaxKind.GST: Decimal("1.55"), TaxKind.QST: Decimal("2.77")}


def test_taxes_skip_registration_numbers() -> None:
    summary = make_lines("TPS # 123456789 RT0001", "TPS 1.55")

    taxes = extract_taxes(summary, ExtractionConfig().tax_synonyms_for("fr_CA"))

    assert taxes == {TaxKind.GST: Decimal("1.55")}


def test_taxes_follow_locale_synonyms() -> None:
    summary = make_lines("HST 13% 6.50", "TPS 1.00")
    config = ExtractionConfig()

    assert extract_taxes(summary, config.tax_synonyms_for("en_CA")) == {TaxKind.HST: Decimal("6.50")}
    assert extract_taxes(summary, config.tax_synonyms_for("fr_CA")) == {TaxKind.GST: Decimal("1.00")}
    assert extract_taxes(summary, config.tax_synonyms_for(None)) == {
        TaxKind.GST: Decimal("1.00"),
        TaxKind.HST: Decimal("6.50"),
    }
